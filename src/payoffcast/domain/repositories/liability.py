"""Storage contract for liabilities fed into payoff projections."""

from __future__ import annotations

from typing import Optional, Protocol

from ...models.liability import Liability


class LiabilityRepository(Protocol):
    """Read and write access to stored debts."""

    def get_by_id(self, liability_id: int) -> Optional[Liability]: ...

    def list_all(self) -> list[Liability]:
        """Every liability, including settled ones, by name."""
        ...

    def list_active(self) -> list[Liability]:
        """Liabilities that still carry a positive balance; these are simulated."""
        ...

    def create(self, liability: Liability) -> Liability: ...

    def delete(self, liability_id: int) -> None: ...

    def get_total_debt(self) -> float:
        """Outstanding balance across active liabilities."""
        ...

    def get_total_minimum_payment(self) -> float:
        """Monthly obligation across active liabilities."""
        ...
