"""SQLModel table exports."""

from .budget import Budget
from .goal import Goal
from .liability import Liability
from .transaction import Transaction

__all__ = [
    "Budget",
    "Goal",
    "Liability",
    "Transaction",
]
