"""SQLModel implementation of Budget repository."""

from __future__ import annotations

from datetime import date

from sqlmodel import select

from ...models.budget import Budget
from ..database import SessionFactory


class SQLModelBudgetRepository:
    """SQLModel-based budget repository implementation."""

    def __init__(self, session_factory: SessionFactory):
        self.session_factory = session_factory

    def list_active_on(self, day: date) -> list[Budget]:
        """Budgets whose period contains ``day``."""
        with self.session_factory() as session:
            statement = (
                select(Budget)
                .where(Budget.period_start <= day)
                .where(Budget.period_end >= day)
                .order_by(Budget.category)  # type: ignore
            )
            return list(session.exec(statement).all())

    def create(self, budget: Budget) -> Budget:
        with self.session_factory() as session:
            session.add(budget)
            session.commit()
            session.refresh(budget)
            return budget
