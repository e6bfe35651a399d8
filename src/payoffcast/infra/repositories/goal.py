"""SQLModel implementation of Goal repository."""

from __future__ import annotations

from typing import Optional

from sqlmodel import select

from ...models.goal import Goal
from ..database import SessionFactory


class SQLModelGoalRepository:
    """SQLModel-based goal repository implementation."""

    def __init__(self, session_factory: SessionFactory):
        self.session_factory = session_factory

    def get_by_id(self, goal_id: int) -> Optional[Goal]:
        with self.session_factory() as session:
            return session.get(Goal, goal_id)

    def list_all(self) -> list[Goal]:
        with self.session_factory() as session:
            statement = select(Goal).order_by(Goal.target_date, Goal.id)  # type: ignore
            return list(session.exec(statement).all())

    def create(self, goal: Goal) -> Goal:
        with self.session_factory() as session:
            session.add(goal)
            session.commit()
            session.refresh(goal)
            return goal

    def delete(self, goal_id: int) -> None:
        with self.session_factory() as session:
            goal = session.get(Goal, goal_id)
            if goal:
                session.delete(goal)
                session.commit()
