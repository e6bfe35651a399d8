"""SQLModel definitions for ledger transactions."""

from __future__ import annotations

from datetime import datetime
from typing import ClassVar, Optional

from sqlalchemy import DateTime
from sqlmodel import Field, SQLModel


class Transaction(SQLModel, table=True):
    """A single ledger transaction imported or hand-entered."""

    __tablename__: ClassVar[str] = "transaction"

    id: Optional[int] = Field(default=None, primary_key=True)
    occurred_at: datetime = Field(sa_type=DateTime(timezone=True), nullable=False, index=True)  # UTC
    amount: float = Field(nullable=False, description="Positive for inflow, negative for outflow")
    category: str = Field(default="Uncategorized", max_length=64, index=True)
    memo: str = Field(default="", max_length=255)
    liability_id: Optional[int] = Field(default=None, foreign_key="liability.id")
