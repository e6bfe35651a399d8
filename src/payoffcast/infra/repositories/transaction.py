"""SQLModel implementation of Transaction repository."""

from __future__ import annotations

from datetime import datetime

from sqlmodel import select

from ...models.transaction import Transaction
from ..database import SessionFactory


class SQLModelTransactionRepository:
    """SQLModel-based transaction repository implementation."""

    def __init__(self, session_factory: SessionFactory):
        self.session_factory = session_factory

    def list_between(self, start: datetime, end: datetime) -> list[Transaction]:
        """Transactions with ``start <= occurred_at < end``, oldest first."""
        with self.session_factory() as session:
            statement = (
                select(Transaction)
                .where(Transaction.occurred_at >= start)
                .where(Transaction.occurred_at < end)
                .order_by(Transaction.occurred_at)  # type: ignore
            )
            return list(session.exec(statement).all())

    def create(self, transaction: Transaction) -> Transaction:
        with self.session_factory() as session:
            session.add(transaction)
            session.commit()
            session.refresh(transaction)
            return transaction

    def net_total(self) -> float:
        """All-time sum of signed amounts."""
        with self.session_factory() as session:
            amounts = session.exec(select(Transaction.amount)).all()
            return float(sum(amounts))
