"""Transaction repository protocol."""

from __future__ import annotations

from datetime import datetime
from typing import Protocol

from ...models.transaction import Transaction


class TransactionRepository(Protocol):
    """Repository for ledger transactions."""

    def list_between(self, start: datetime, end: datetime) -> list[Transaction]:
        """Transactions with ``start <= occurred_at < end``."""
        ...

    def create(self, transaction: Transaction) -> Transaction:
        ...

    def net_total(self) -> float:
        """All-time sum of signed amounts."""
        ...
