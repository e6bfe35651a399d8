"""Rule-based financial insights and forecast recommendations.

Rules run in a fixed priority order and each contributes at most one insight.
The result always holds between ``MIN_INSIGHTS`` and ``MAX_INSIGHTS`` entries:
short lists are topped up with general reminders, long lists are truncated.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Iterable, Mapping, Protocol, Sequence

from ..logging_config import get_logger
from .goals import Goal
from .health import savings_rate as derive_savings_rate

logger = get_logger("services.insights")

MIN_INSIGHTS = 3
MAX_INSIGHTS = 5
DOMINANT_CATEGORY_SHARE = 40.0


class InsightType(str, Enum):
    POSITIVE = "positive"
    WARNING = "warning"
    CRITICAL = "critical"
    OPPORTUNITY = "opportunity"
    INFO = "info"


@dataclass(frozen=True, slots=True)
class Insight:
    title: str
    description: str
    type: InsightType
    action: str | None = None


@dataclass(frozen=True, slots=True)
class CategorySpend:
    """Spending in one category with its share of the breakdown total."""

    category: str
    amount: float
    percentage: float


@dataclass(frozen=True, slots=True)
class FinancialSummary:
    """Aggregate figures the insight rules read."""

    monthly_income: float
    monthly_expenses: float
    savings_rate: float | None = None
    budget_utilization: float | None = None  # None when no budgets exist
    top_expense_categories: tuple[CategorySpend, ...] = ()
    goals: tuple[Goal, ...] = ()
    total_debt: float = 0.0
    net_worth: float = 0.0

    @property
    def effective_savings_rate(self) -> float:
        if self.savings_rate is not None:
            return self.savings_rate
        return derive_savings_rate(self.monthly_income, self.monthly_expenses)


class InsightProvider(Protocol):
    """External source of insights, e.g. a language-model service."""

    def generate(self, summary: FinancialSummary) -> Sequence[Insight]:  # pragma: no cover
        ...


def _money(value: float) -> str:
    return f"{value:,.2f}"


def category_breakdown(
    amounts: Mapping[str, float], *, limit: int | None = None
) -> tuple[CategorySpend, ...]:
    """Return categories sorted by amount with their share of the overall total."""

    total = sum(abs(v) for v in amounts.values())
    ranked = sorted(amounts.items(), key=lambda item: abs(item[1]), reverse=True)
    if limit is not None:
        ranked = ranked[:limit]
    return tuple(
        CategorySpend(
            category=name,
            amount=abs(amount),
            percentage=(abs(amount) / total * 100) if total > 0 else 0.0,
        )
        for name, amount in ranked
    )


# -- rules --------------------------------------------------------------------


def _savings_rate_rule(summary: FinancialSummary) -> Insight | None:
    rate = summary.effective_savings_rate
    if rate < 10:
        return Insight(
            title="Improve Your Savings Rate",
            description=(
                f"Your current savings rate of {rate:.1f}% is below the recommended 20%. "
                "Consider reducing discretionary spending or finding ways to increase your income."
            ),
            type=InsightType.WARNING,
        )
    if rate >= 20:
        return Insight(
            title="Excellent Savings Discipline",
            description=(
                f"Your savings rate of {rate:.1f}% is outstanding. "
                "Consider investing your surplus savings for long-term growth."
            ),
            type=InsightType.POSITIVE,
        )
    return Insight(
        title="Good Savings Progress",
        description=(
            f"Your savings rate of {rate:.1f}% is solid. "
            "Try to raise it gradually to 20% by trimming flexible spending categories."
        ),
        type=InsightType.INFO,
    )


def _budget_rule(summary: FinancialSummary) -> Insight | None:
    utilization = summary.budget_utilization
    if utilization is None:
        return None
    if utilization > 90:
        return Insight(
            title="Budget Strain Alert",
            description=(
                f"You're using {utilization:.1f}% of your budget. "
                "Review your spending patterns to avoid overspending."
            ),
            type=InsightType.WARNING,
        )
    if utilization < 70:
        return Insight(
            title="Budget Opportunity",
            description=(
                f"You're only using {utilization:.1f}% of your budget. "
                "The headroom could go toward savings or your goals."
            ),
            type=InsightType.POSITIVE,
        )
    return None


def _category_rule(summary: FinancialSummary) -> Insight | None:
    if not summary.top_expense_categories:
        return None
    top = max(summary.top_expense_categories, key=lambda c: c.percentage)
    if top.percentage <= DOMINANT_CATEGORY_SHARE:
        return None
    return Insight(
        title=f"High Spending in {top.category}",
        description=(
            f"{top.category} represents {top.percentage:.1f}% of your expenses. "
            "Check that this allocation matches your priorities."
        ),
        type=InsightType.INFO,
    )


def _goal_rule(summary: FinancialSummary) -> Insight | None:
    open_goals = [g for g in summary.goals if g.current_amount < g.target_amount]
    if not open_goals:
        return None
    total_gap = sum(g.gap for g in open_goals)
    return Insight(
        title="Goal Achievement Strategy",
        description=(
            f"You have {len(open_goals)} active goals requiring {_money(total_gap)} in total. "
            "Automatic transfers help you work toward these targets steadily."
        ),
        type=InsightType.INFO,
    )


def _debt_rule(summary: FinancialSummary) -> Insight | None:
    if summary.total_debt <= summary.monthly_income * 6:
        return None
    return Insight(
        title="Debt Management Priority",
        description=(
            f"Your total debt of {_money(summary.total_debt)} is high relative to your income. "
            "Pay down high-interest debt first while keeping up minimum payments on the rest."
        ),
        type=InsightType.WARNING,
    )


def _net_worth_rule(summary: FinancialSummary) -> Insight | None:
    if summary.net_worth < 0:
        return Insight(
            title="Building Positive Net Worth",
            description=(
                "Your net worth is currently negative. Paying down debt and building an "
                "emergency fund will establish a solid foundation."
            ),
            type=InsightType.WARNING,
        )
    if summary.net_worth > summary.monthly_income * 12:
        return Insight(
            title="Strong Financial Position",
            description=(
                f"Your net worth of {_money(summary.net_worth)} shows excellent financial health. "
                "Consider diversifying and planning for long-term wealth building."
            ),
            type=InsightType.POSITIVE,
        )
    return None


RULES: tuple[Callable[[FinancialSummary], Insight | None], ...] = (
    _savings_rate_rule,
    _budget_rule,
    _category_rule,
    _goal_rule,
    _debt_rule,
    _net_worth_rule,
)

REMINDERS: tuple[Insight, ...] = (
    Insight(
        title="Build Your Emergency Fund",
        description="Keep three to six months of expenses in an easily accessible account for unexpected costs.",
        type=InsightType.INFO,
    ),
    Insight(
        title="Automate Your Finances",
        description="Automatic transfers for savings and bill payments keep you consistent and prevent missed payments.",
        type=InsightType.INFO,
    ),
    Insight(
        title="Review Your Insurance Coverage",
        description="Review your insurance policies regularly to make sure your coverage fits your needs at a fair price.",
        type=InsightType.INFO,
    ),
)


def generate_insights(summary: FinancialSummary) -> list[Insight]:
    """Return three to five insights for ``summary`` in rule priority order."""

    insights = [insight for rule in RULES if (insight := rule(summary)) is not None]
    for reminder in REMINDERS:
        if len(insights) >= MIN_INSIGHTS:
            break
        insights.append(reminder)
    return insights[:MAX_INSIGHTS]


def resolve_insights(
    summary: FinancialSummary, provider: InsightProvider | None = None
) -> list[Insight]:
    """Prefer ``provider``'s insights, falling back to the rule-based ones.

    The fallback is used when no provider is configured, when it raises, or
    when it returns nothing usable.
    """

    if provider is None:
        return generate_insights(summary)
    try:
        provided = [i for i in provider.generate(summary) if isinstance(i, Insight)]
    except Exception:
        logger.exception("Insight provider failed; using rule-based insights")
        return generate_insights(summary)
    if not provided:
        logger.warning("Insight provider returned no insights; using rule-based insights")
        return generate_insights(summary)
    return provided[:MAX_INSIGHTS]


def forecast_recommendations(
    *,
    savings_rate: float,
    monthly_income: float,
    monthly_expenses: float,
    current_savings: float,
    total_debt: float,
    retirement_monthly_income: float,
) -> tuple[Insight, ...]:
    """Recommendations attached to a forecast."""

    recommendations: list[Insight] = []

    if savings_rate < 15:
        recommendations.append(
            Insight(
                title="Increase Your Savings Rate",
                description=(
                    "Your current savings rate is below 15%. Aim to save at least 20% "
                    "of your income for long-term financial health."
                ),
                type=InsightType.CRITICAL,
                action="Review your budget to find areas where you can reduce expenses.",
            )
        )
    elif savings_rate < 20:
        recommendations.append(
            Insight(
                title="Boost Your Savings",
                description="Your savings rate is good but could reach 20% for stronger growth.",
                type=InsightType.WARNING,
                action="Look for ways to increase income or further reduce expenses.",
            )
        )
    else:
        recommendations.append(
            Insight(
                title="Excellent Savings Rate",
                description=f"Your savings rate of {savings_rate:.1f}% is excellent.",
                type=InsightType.POSITIVE,
                action="Consider investing more aggressively for long-term growth.",
            )
        )

    if total_debt > monthly_income * 6:
        recommendations.append(
            Insight(
                title="High Debt Load",
                description="Your debt exceeds six months of income. Make debt reduction a priority.",
                type=InsightType.CRITICAL,
                action="Use the avalanche method (highest interest first) to cut interest costs.",
            )
        )
    elif total_debt > 0:
        recommendations.append(
            Insight(
                title="Debt Reduction Strategy",
                description="Keep paying down your debt while building savings.",
                type=InsightType.WARNING,
                action="Pay every minimum and direct extra money to the highest-interest debt.",
            )
        )

    if retirement_monthly_income < monthly_expenses:
        recommendations.append(
            Insight(
                title="Retirement Savings Gap",
                description="Your projected retirement income may not cover your current expenses.",
                type=InsightType.WARNING,
                action="Increase retirement contributions or add investment vehicles.",
            )
        )

    if monthly_expenses > 0 and current_savings > monthly_expenses * 6:
        recommendations.append(
            Insight(
                title="Investment Opportunity",
                description="Your emergency savings are sufficient. Investing more could improve long-term returns.",
                type=InsightType.OPPORTUNITY,
                action="Look into index funds or other diversified investments.",
            )
        )

    return tuple(recommendations)


def summarize_insights(insights: Iterable[Insight]) -> dict[str, int]:
    """Count insights per type, e.g. for a dashboard badge."""

    counts = {t.value: 0 for t in InsightType}
    for insight in insights:
        counts[insight.type.value] += 1
    return counts


__all__ = [
    "CategorySpend",
    "FinancialSummary",
    "Insight",
    "InsightProvider",
    "InsightType",
    "MAX_INSIGHTS",
    "MIN_INSIGHTS",
    "category_breakdown",
    "forecast_recommendations",
    "generate_insights",
    "resolve_insights",
    "summarize_insights",
]
