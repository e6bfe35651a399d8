"""Savings goal entities."""

from __future__ import annotations

from datetime import date
from typing import ClassVar, Optional

from sqlmodel import Field, SQLModel


class Goal(SQLModel, table=True):
    """A savings target the user is working toward."""

    __tablename__: ClassVar[str] = "goal"

    id: Optional[int] = Field(default=None, primary_key=True)
    title: str = Field(nullable=False, max_length=120, index=True)
    target_amount: float = Field(nullable=False)
    current_amount: float = Field(default=0.0, nullable=False)
    target_date: date = Field(nullable=False, index=True)
    category: str = Field(default="", max_length=64)
