"""SQLModel-backed liability storage."""

from __future__ import annotations

from typing import Optional

from sqlmodel import select

from ...models.liability import Liability
from ..database import SessionFactory


class SQLModelLiabilityRepository:
    """Liabilities stored in the local database."""

    def __init__(self, session_factory: SessionFactory):
        self.session_factory = session_factory

    def get_by_id(self, liability_id: int) -> Optional[Liability]:
        with self.session_factory() as session:
            return session.get(Liability, liability_id)

    def list_all(self) -> list[Liability]:
        with self.session_factory() as session:
            return list(session.exec(select(Liability).order_by(Liability.name)).all())  # type: ignore

    def list_active(self) -> list[Liability]:
        """Open balances in insertion order, which the simulator uses to break ties."""
        with self.session_factory() as session:
            statement = select(Liability).where(Liability.balance > 0).order_by(Liability.id)  # type: ignore
            return list(session.exec(statement).all())

    def create(self, liability: Liability) -> Liability:
        with self.session_factory() as session:
            session.add(liability)
            session.commit()
            session.refresh(liability)
            return liability

    def delete(self, liability_id: int) -> None:
        with self.session_factory() as session:
            row = session.get(Liability, liability_id)
            if row is not None:
                session.delete(row)

    def get_total_debt(self) -> float:
        return sum(row.balance for row in self.list_active())

    def get_total_minimum_payment(self) -> float:
        return sum(max(row.minimum_payment, 0.0) for row in self.list_active())
