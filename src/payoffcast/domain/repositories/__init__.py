"""Repository protocol definitions for domain layer."""

from .budget import BudgetRepository
from .goal import GoalRepository
from .liability import LiabilityRepository
from .transaction import TransactionRepository

__all__ = [
    "BudgetRepository",
    "GoalRepository",
    "LiabilityRepository",
    "TransactionRepository",
]
