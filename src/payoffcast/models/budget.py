"""Budgeting tables."""

from __future__ import annotations

from datetime import date
from typing import ClassVar, Optional

from sqlmodel import Field, SQLModel


class Budget(SQLModel, table=True):
    """Planned spending for one category over a period."""

    __tablename__: ClassVar[str] = "budget"

    id: Optional[int] = Field(default=None, primary_key=True)
    category: str = Field(nullable=False, max_length=64, index=True)
    amount: float = Field(nullable=False)
    period_start: date = Field(index=True, nullable=False)
    period_end: date = Field(index=True, nullable=False)
