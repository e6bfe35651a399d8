"""Budget repository protocol."""

from __future__ import annotations

from datetime import date
from typing import Protocol

from ...models.budget import Budget


class BudgetRepository(Protocol):
    """Repository for category budgets."""

    def list_active_on(self, day: date) -> list[Budget]:
        """Budgets whose period contains ``day``."""
        ...

    def create(self, budget: Budget) -> Budget:
        ...
