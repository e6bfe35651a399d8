"""Multi-horizon savings, net-worth and retirement projections."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date

from ..logging_config import get_logger
from .debts import Debt, calculate_loan_payoff
from .goals import (
    LONG_TERM_GOAL_MONTHS,
    Goal,
    GoalAllocator,
    GoalProjection,
    equal_split_allocation,
    project_goals,
)
from .health import debt_to_income_ratio, savings_rate, score_financial_health
from .insights import Insight, forecast_recommendations

logger = get_logger("services.forecast")

CONSERVATIVE_RATE = 3.0
MODERATE_RATE = 6.0
AGGRESSIVE_RATE = 9.0
YEARS_TO_RETIREMENT = 35
SAFE_WITHDRAWAL_RATE = 0.04
HORIZON_YEARS = {"short_term": 1, "medium_term": 5, "long_term": 10}


@dataclass(frozen=True, slots=True)
class FinancialSnapshot:
    """Aggregate figures a forecast is computed from."""

    monthly_income: float
    monthly_expenses: float
    current_savings: float = 0.0
    total_debt: float = 0.0
    monthly_debt_payment: float = 0.0
    savings_rate: float | None = None
    debt_to_income_ratio: float | None = None
    budget_utilization: float | None = None
    goals: tuple[Goal, ...] = ()
    liabilities: tuple[Debt, ...] = ()

    @property
    def monthly_savings(self) -> float:
        # Negative means deficit spending; never clamped.
        return self.monthly_income - self.monthly_expenses


@dataclass(frozen=True, slots=True)
class HorizonProjection:
    years: float
    savings: float
    net_worth: float
    debt_remaining: float
    goal_progress: tuple[GoalProjection, ...] = ()

    def goal(self, goal_id: int | str) -> GoalProjection | None:
        return next((g for g in self.goal_progress if g.goal_id == goal_id), None)


@dataclass(frozen=True, slots=True)
class ScenarioOutcome:
    annual_rate: float
    savings: float
    net_worth: float


@dataclass(frozen=True, slots=True)
class Scenarios:
    conservative: ScenarioOutcome
    moderate: ScenarioOutcome
    aggressive: ScenarioOutcome

    def items(self) -> tuple[tuple[str, ScenarioOutcome], ...]:
        return (
            ("conservative", self.conservative),
            ("moderate", self.moderate),
            ("aggressive", self.aggressive),
        )


@dataclass(frozen=True, slots=True)
class RetirementProjection:
    years_to_retirement: int
    savings_at_retirement: float
    monthly_retirement_income: float
    years_of_retirement_covered: float
    covers_expenses: bool


@dataclass(frozen=True, slots=True)
class DebtPayoffEstimate:
    """Standalone payoff estimate for one liability at its own payment."""

    id: int | str
    name: str
    months: int
    total_interest: float
    stalled: bool


@dataclass(frozen=True, slots=True)
class ForecastSummary:
    current_net_worth: float
    monthly_savings: float
    savings_rate: float
    debt_to_income_ratio: float
    health_score: int
    health_status: str


@dataclass(frozen=True, slots=True)
class Forecast:
    horizon_years: float
    summary: ForecastSummary
    short_term: HorizonProjection
    medium_term: HorizonProjection
    long_term: HorizonProjection
    retirement_projection: RetirementProjection
    scenarios: Scenarios
    recommendations: tuple[Insight, ...] = ()
    debt_payoffs: tuple[DebtPayoffEstimate, ...] = ()


def compound_growth(
    principal: float, annual_rate: float, years: float, periods_per_year: int = 12
) -> float:
    """``principal * (1 + rate/100/periods) ** (periods * years)``."""

    return principal * (1 + annual_rate / 100 / periods_per_year) ** (periods_per_year * years)


def contribution_growth(monthly_contribution: float, annual_rate: float, years: float) -> float:
    """Future value of equal end-of-month contributions (ordinary annuity)."""

    months = years * 12
    monthly_rate = annual_rate / 100 / 12
    if monthly_rate == 0:
        return monthly_contribution * months
    return monthly_contribution * ((1 + monthly_rate) ** months - 1) / monthly_rate


def grow_savings(current_savings: float, annual_rate: float, years: float) -> float:
    """Compound the invested part of ``current_savings``; a shortfall does not earn returns."""

    return compound_growth(max(current_savings, 0.0), annual_rate, years) + min(current_savings, 0.0)


def debt_remaining(total_debt: float, monthly_debt_payment: float, months: float) -> float:
    """Linear paydown estimate; the simulator gives the exact per-debt schedule."""

    return max(0.0, total_debt - monthly_debt_payment * months)


def _horizon_months(years: float) -> int:
    return round(years * 12)


def project_horizon(
    snapshot: FinancialSnapshot,
    years: float,
    *,
    today: date,
    allocator: GoalAllocator = equal_split_allocation,
) -> HorizonProjection:
    """Savings grow at the moderate rate; monthly savings are added without growth.

    Horizons beyond five years also grow long-dated goal balances at that rate.
    """

    months = _horizon_months(years)
    savings = grow_savings(snapshot.current_savings, MODERATE_RATE, years) + snapshot.monthly_savings * months
    remaining = debt_remaining(snapshot.total_debt, snapshot.monthly_debt_payment, months)
    return HorizonProjection(
        years=years,
        savings=savings,
        net_worth=savings - remaining,
        debt_remaining=remaining,
        goal_progress=project_goals(
            snapshot.goals,
            monthly_savings=snapshot.monthly_savings,
            horizon_months=months,
            today=today,
            allocator=allocator,
            growth_rate=MODERATE_RATE if months > LONG_TERM_GOAL_MONTHS else 0.0,
        ),
    )


def project_scenario(snapshot: FinancialSnapshot, annual_rate: float, years: float) -> ScenarioOutcome:
    savings = grow_savings(snapshot.current_savings, annual_rate, years) + contribution_growth(
        snapshot.monthly_savings, annual_rate, years
    )
    remaining = debt_remaining(
        snapshot.total_debt, snapshot.monthly_debt_payment, _horizon_months(years)
    )
    return ScenarioOutcome(annual_rate=annual_rate, savings=savings, net_worth=savings - remaining)


def project_scenarios(snapshot: FinancialSnapshot, years: float) -> Scenarios:
    return Scenarios(
        conservative=project_scenario(snapshot, CONSERVATIVE_RATE, years),
        moderate=project_scenario(snapshot, MODERATE_RATE, years),
        aggressive=project_scenario(snapshot, AGGRESSIVE_RATE, years),
    )


def project_retirement(snapshot: FinancialSnapshot) -> RetirementProjection:
    """Project savings at retirement and the income they sustain under the 4 % rule.

    Assumes a fixed 35 years to retirement at the moderate rate.
    """

    years = YEARS_TO_RETIREMENT
    savings = grow_savings(snapshot.current_savings, MODERATE_RATE, years) + contribution_growth(
        snapshot.monthly_savings, MODERATE_RATE, years
    )
    monthly_income = max(savings, 0.0) * SAFE_WITHDRAWAL_RATE / 12
    covered = savings / (monthly_income * 12) if monthly_income > 0 else 0.0
    return RetirementProjection(
        years_to_retirement=years,
        savings_at_retirement=savings,
        monthly_retirement_income=monthly_income,
        years_of_retirement_covered=covered,
        covers_expenses=monthly_income >= snapshot.monthly_expenses,
    )


def estimate_debt_payoffs(liabilities: tuple[Debt, ...]) -> tuple[DebtPayoffEstimate, ...]:
    estimates = []
    for debt in liabilities:
        if debt.remaining_amount <= 0:
            continue
        payoff = calculate_loan_payoff(debt.remaining_amount, debt.interest_rate, debt.monthly_payment)
        estimates.append(
            DebtPayoffEstimate(
                id=debt.id,
                name=debt.name,
                months=payoff.months,
                total_interest=payoff.total_interest,
                stalled=payoff.stalled or payoff.remaining_balance > 0,
            )
        )
    return tuple(estimates)


def summarize(snapshot: FinancialSnapshot) -> ForecastSummary:
    rate = (
        snapshot.savings_rate
        if snapshot.savings_rate is not None
        else savings_rate(snapshot.monthly_income, snapshot.monthly_expenses)
    )
    dti = (
        snapshot.debt_to_income_ratio
        if snapshot.debt_to_income_ratio is not None
        else debt_to_income_ratio(snapshot.total_debt, snapshot.monthly_income)
    )
    health = score_financial_health(
        savings_rate=rate,
        debt_to_income_ratio=dti,
        budget_utilization=snapshot.budget_utilization,
    )
    return ForecastSummary(
        current_net_worth=snapshot.current_savings - snapshot.total_debt,
        monthly_savings=snapshot.monthly_savings,
        savings_rate=rate,
        debt_to_income_ratio=dti,
        health_score=health.score,
        health_status=health.status,
    )


def project_financial_forecast(
    snapshot: FinancialSnapshot,
    horizon_years: float = 5,
    *,
    today: date | None = None,
    allocator: GoalAllocator = equal_split_allocation,
) -> Forecast:
    """Build the full forecast for ``snapshot``.

    The 1/5/10-year buckets are always produced; ``horizon_years`` sets the
    horizon of the three return scenarios and may be any positive number.
    """

    if horizon_years <= 0:
        raise ValueError("horizon_years must be positive.")

    start = today or date.today()
    summary = summarize(snapshot)
    short_term, medium_term, long_term = (
        project_horizon(snapshot, years, today=start, allocator=allocator)
        for years in HORIZON_YEARS.values()
    )
    retirement = project_retirement(snapshot)

    forecast = Forecast(
        horizon_years=horizon_years,
        summary=summary,
        short_term=short_term,
        medium_term=medium_term,
        long_term=long_term,
        retirement_projection=retirement,
        scenarios=project_scenarios(snapshot, horizon_years),
        recommendations=forecast_recommendations(
            savings_rate=summary.savings_rate,
            monthly_income=snapshot.monthly_income,
            monthly_expenses=snapshot.monthly_expenses,
            current_savings=snapshot.current_savings,
            total_debt=snapshot.total_debt,
            retirement_monthly_income=retirement.monthly_retirement_income,
        ),
        debt_payoffs=estimate_debt_payoffs(snapshot.liabilities),
    )
    logger.debug(
        "Projected financial forecast",
        extra={"horizon_years": horizon_years, "goals": len(snapshot.goals)},
    )
    return forecast


__all__ = [
    "AGGRESSIVE_RATE",
    "CONSERVATIVE_RATE",
    "DebtPayoffEstimate",
    "FinancialSnapshot",
    "Forecast",
    "ForecastSummary",
    "HorizonProjection",
    "MODERATE_RATE",
    "RetirementProjection",
    "ScenarioOutcome",
    "Scenarios",
    "compound_growth",
    "contribution_growth",
    "debt_remaining",
    "grow_savings",
    "project_financial_forecast",
    "project_retirement",
    "project_scenarios",
]
