"""Financial health ratios and the overall health score."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class HealthReport:
    score: int
    status: str


def savings_rate(monthly_income: float, monthly_expenses: float) -> float:
    """Share of income kept each month, in percent. Zero when there is no income."""

    if monthly_income <= 0:
        return 0.0
    return (monthly_income - monthly_expenses) / monthly_income * 100


def debt_to_income_ratio(total_debt: float, monthly_income: float) -> float:
    """Outstanding debt over annualized income. Zero when there is no income."""

    if monthly_income <= 0:
        return 0.0
    return total_debt / (monthly_income * 12)


def health_status(score: float) -> str:
    if score >= 80:
        return "excellent"
    if score >= 60:
        return "good"
    if score >= 40:
        return "fair"
    return "needs improvement"


def score_financial_health(
    *,
    savings_rate: float,
    debt_to_income_ratio: float,
    budget_utilization: float | None = None,
) -> HealthReport:
    """Score overall financial health on a 0-100 scale.

    Starts from 50, adds up to 20 points for the savings rate, removes up to 20
    for debt load and moves up to 10 either way depending on how close budget
    utilization is to 80 %. Without budgets the utilization term is skipped.
    """

    score = 50.0
    score += min(savings_rate, 20.0)
    score -= min(max(debt_to_income_ratio, 0.0) * 50, 20.0)
    if budget_utilization is not None:
        score += 10 - abs(budget_utilization - 80) / 2
    rounded = round(max(0.0, min(100.0, score)))
    return HealthReport(score=rounded, status=health_status(rounded))


__all__ = [
    "HealthReport",
    "debt_to_income_ratio",
    "health_status",
    "savings_rate",
    "score_financial_health",
]
