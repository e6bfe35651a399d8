"""PayoffCast debt payoff and financial forecasting package."""

from __future__ import annotations

from .config import BaseConfig
from .services.debts import compare_strategies, simulate_debt_repayment
from .services.forecast import project_financial_forecast
from .services.insights import generate_insights

__all__ = [
    "BaseConfig",
    "compare_strategies",
    "generate_insights",
    "project_financial_forecast",
    "simulate_debt_repayment",
]
