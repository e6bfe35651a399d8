"""Concrete repository implementations using SQLModel."""

from .budget import SQLModelBudgetRepository
from .goal import SQLModelGoalRepository
from .liability import SQLModelLiabilityRepository
from .transaction import SQLModelTransactionRepository

__all__ = [
    "SQLModelBudgetRepository",
    "SQLModelGoalRepository",
    "SQLModelLiabilityRepository",
    "SQLModelTransactionRepository",
]
