"""Build planning inputs from stored rows.

This is the boundary between the persistence layer and the pure planning
services: rows are sanitized here and turned into frozen value objects.
"""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone
from typing import Iterable

from ..domain.repositories import (
    BudgetRepository,
    GoalRepository,
    LiabilityRepository,
    TransactionRepository,
)
from ..infra.database import SessionFactory
from ..infra.repositories import (
    SQLModelBudgetRepository,
    SQLModelGoalRepository,
    SQLModelLiabilityRepository,
    SQLModelTransactionRepository,
)
from ..logging_config import get_logger
from ..models import Budget as BudgetRow
from ..models import Goal as GoalRow
from ..models import Liability
from ..models import Transaction
from .debts import Debt, add_months
from .forecast import FinancialSnapshot
from .goals import Goal
from .health import debt_to_income_ratio, savings_rate
from .insights import FinancialSummary, category_breakdown

logger = get_logger("services.snapshot")

TOP_CATEGORY_LIMIT = 3


@dataclass(frozen=True, slots=True)
class Repositories:
    liabilities: LiabilityRepository
    goals: GoalRepository
    transactions: TransactionRepository
    budgets: BudgetRepository


def repositories_from_session_factory(session_factory: SessionFactory) -> Repositories:
    return Repositories(
        liabilities=SQLModelLiabilityRepository(session_factory),
        goals=SQLModelGoalRepository(session_factory),
        transactions=SQLModelTransactionRepository(session_factory),
        budgets=SQLModelBudgetRepository(session_factory),
    )


def liability_to_debt(row: Liability) -> Debt:
    """Convert a stored liability to a ``Debt``, clamping negative fields to zero."""

    balance = max(float(row.balance or 0.0), 0.0)
    apr = max(float(row.apr or 0.0), 0.0)
    payment = max(float(row.minimum_payment or 0.0), 0.0)
    if (balance, apr, payment) != (row.balance, row.apr, row.minimum_payment):
        logger.warning("Sanitized liability row", extra={"liability_id": row.id})
    return Debt(
        id=row.id if row.id is not None else row.name,
        name=row.name,
        remaining_amount=balance,
        interest_rate=apr,
        monthly_payment=payment,
    )


def goal_from_row(row: GoalRow) -> Goal:
    return Goal(
        id=row.id if row.id is not None else row.title,
        title=row.title,
        target_amount=max(float(row.target_amount or 0.0), 0.0),
        current_amount=max(float(row.current_amount or 0.0), 0.0),
        target_date=row.target_date,
        category=row.category or "",
    )


def _utc_midnight(day: date) -> datetime:
    return datetime.combine(day, time.min, tzinfo=timezone.utc)


def lookback_window(today: date, months: int) -> tuple[datetime, datetime]:
    """Return the UTC ``[start, end)`` covering ``months`` calendar months ending with today's month."""

    first_of_month = today.replace(day=1)
    start = add_months(first_of_month, -(max(months, 1) - 1))
    end = add_months(first_of_month, 1)
    return _utc_midnight(start), _utc_midnight(end)


def average_cashflow(transactions: Iterable[Transaction], months: int) -> tuple[float, float]:
    """Return average monthly (income, expenses); expenses are reported as a positive number."""

    income = 0.0
    expenses = 0.0
    for tx in transactions:
        amount = float(tx.amount or 0.0)
        if amount >= 0:
            income += amount
        else:
            expenses += -amount
    divisor = max(months, 1)
    return income / divisor, expenses / divisor


def expense_totals(transactions: Iterable[Transaction]) -> dict[str, float]:
    totals: dict[str, float] = defaultdict(float)
    for tx in transactions:
        amount = float(tx.amount or 0.0)
        if amount < 0:
            totals[tx.category or "Uncategorized"] += -amount
    return dict(totals)


def budget_utilization(
    budgets: Iterable[BudgetRow], transactions: TransactionRepository
) -> float | None:
    """Spend in budgeted categories over budgeted amounts, in percent.

    ``None`` when no budget is active, so callers can tell "no budgets" from
    "nothing spent".
    """

    budget_list = list(budgets)
    if not budget_list:
        return None
    planned = sum(max(b.amount, 0.0) for b in budget_list)
    spent = 0.0
    for budget in budget_list:
        window = transactions.list_between(
            _utc_midnight(budget.period_start),
            _utc_midnight(budget.period_end + timedelta(days=1)),
        )
        spent += expense_totals(tx for tx in window if tx.category == budget.category).get(
            budget.category, 0.0
        )
    if planned <= 0:
        return 0.0
    return spent / planned * 100


@dataclass(frozen=True, slots=True)
class _Aggregates:
    debts: tuple[Debt, ...]
    goals: tuple[Goal, ...]
    monthly_income: float
    monthly_expenses: float
    current_savings: float
    utilization: float | None
    expenses_by_category: dict[str, float]

    @property
    def total_debt(self) -> float:
        return sum(d.remaining_amount for d in self.debts)


def _collect(repos: Repositories, today: date, lookback_months: int) -> _Aggregates:
    start, end = lookback_window(today, lookback_months)
    recent = repos.transactions.list_between(start, end)
    income, expenses = average_cashflow(recent, lookback_months)
    return _Aggregates(
        debts=tuple(liability_to_debt(row) for row in repos.liabilities.list_active()),
        goals=tuple(goal_from_row(row) for row in repos.goals.list_all()),
        monthly_income=income,
        monthly_expenses=expenses,
        current_savings=repos.transactions.net_total(),
        utilization=budget_utilization(repos.budgets.list_active_on(today), repos.transactions),
        expenses_by_category=expense_totals(recent),
    )


def build_snapshot(
    repos: Repositories, *, today: date | None = None, lookback_months: int = 3
) -> FinancialSnapshot:
    """Aggregate stored rows into a ``FinancialSnapshot``."""

    day = today or date.today()
    agg = _collect(repos, day, lookback_months)
    snapshot = FinancialSnapshot(
        monthly_income=agg.monthly_income,
        monthly_expenses=agg.monthly_expenses,
        current_savings=agg.current_savings,
        total_debt=agg.total_debt,
        monthly_debt_payment=sum(d.monthly_payment for d in agg.debts),
        savings_rate=savings_rate(agg.monthly_income, agg.monthly_expenses),
        debt_to_income_ratio=debt_to_income_ratio(agg.total_debt, agg.monthly_income),
        budget_utilization=agg.utilization,
        goals=agg.goals,
        liabilities=agg.debts,
    )
    logger.info(
        "Built financial snapshot",
        extra={"debts": len(agg.debts), "goals": len(agg.goals), "lookback_months": lookback_months},
    )
    return snapshot


def build_summary(
    repos: Repositories, *, today: date | None = None, lookback_months: int = 3
) -> FinancialSummary:
    """Aggregate stored rows into the ``FinancialSummary`` the insight rules read."""

    day = today or date.today()
    agg = _collect(repos, day, lookback_months)
    return FinancialSummary(
        monthly_income=agg.monthly_income,
        monthly_expenses=agg.monthly_expenses,
        savings_rate=savings_rate(agg.monthly_income, agg.monthly_expenses),
        budget_utilization=agg.utilization,
        top_expense_categories=category_breakdown(
            agg.expenses_by_category, limit=TOP_CATEGORY_LIMIT
        ),
        goals=agg.goals,
        total_debt=agg.total_debt,
        net_worth=agg.current_savings - agg.total_debt,
    )


__all__ = [
    "Repositories",
    "average_cashflow",
    "budget_utilization",
    "build_snapshot",
    "build_summary",
    "expense_totals",
    "goal_from_row",
    "liability_to_debt",
    "lookback_window",
    "repositories_from_session_factory",
]
