"""Debt payoff simulation (snowball and avalanche)."""

from __future__ import annotations

import calendar
from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Iterable, Literal

from ..logging_config import get_logger

logger = get_logger("services.debts")

Strategy = Literal["snowball", "avalanche"]
STRATEGIES: tuple[str, ...] = ("snowball", "avalanche")

MAX_MONTHS = 600  # 50 years
PAID_OFF_THRESHOLD = 0.01


@dataclass(frozen=True, slots=True)
class Debt:
    """A liability input for payoff projections."""

    id: int | str
    name: str
    remaining_amount: float
    interest_rate: float  # annual percentage, 18.0 means 18 %
    monthly_payment: float


class PlanStatus(str, Enum):
    """How a debt's payment sequence ended."""

    PAID_OFF = "paid_off"
    STALLED = "stalled"  # payment cannot cover interest under the current allocation
    CAPPED = "capped"  # still open after MAX_MONTHS


@dataclass(frozen=True, slots=True)
class PaymentRecord:
    """One simulated month for one debt."""

    date: date
    payment: float
    principal: float
    interest: float
    remaining_balance: float


@dataclass(frozen=True, slots=True)
class DebtPlan:
    """Per-debt result of a simulation."""

    id: int | str
    name: str
    remaining_amount: float
    interest_rate: float
    monthly_payment: float
    payoff_date: date | None
    total_interest: float
    payments: tuple[PaymentRecord, ...]
    status: PlanStatus

    @property
    def total_paid(self) -> float:
        return sum(p.payment for p in self.payments)

    @property
    def months(self) -> int:
        return len(self.payments)


@dataclass(frozen=True, slots=True)
class DebtRepaymentStrategy:
    """Aggregate result of a snowball or avalanche simulation."""

    strategy: str
    total_months: int
    total_interest_paid: float
    total_paid: float
    payoff_date: date
    debt_plans: tuple[DebtPlan, ...] = ()

    @property
    def unpayable_debt_ids(self) -> tuple[int | str, ...]:
        """Ids of plans that were not paid off (stalled or capped)."""
        return tuple(p.id for p in self.debt_plans if p.status is not PlanStatus.PAID_OFF)

    @property
    def is_fully_payable(self) -> bool:
        return not self.unpayable_debt_ids

    def plan_for(self, debt_id: int | str) -> DebtPlan | None:
        return next((p for p in self.debt_plans if p.id == debt_id), None)


@dataclass(frozen=True, slots=True)
class StrategyComparison:
    """Chosen strategy measured against the alternative ordering."""

    chosen: DebtRepaymentStrategy
    alternate: DebtRepaymentStrategy

    @property
    def interest_savings(self) -> float:
        return self.alternate.total_interest_paid - self.chosen.total_interest_paid

    @property
    def months_saved(self) -> int:
        return self.alternate.total_months - self.chosen.total_months


@dataclass(frozen=True, slots=True)
class LoanPayoff:
    """Payoff summary for a single balance."""

    months: int
    total_interest: float
    total_paid: float
    remaining_balance: float
    stalled: bool


@dataclass(slots=True)
class _DebtState:
    """Mutable per-debt bookkeeping used only inside a simulation run."""

    debt: Debt
    balance: float
    status: PlanStatus | None = None
    offered_payment: float | None = None
    payoff_date: date | None = None
    total_interest: float = 0.0
    payments: list[PaymentRecord] = field(default_factory=list)
    waiting: bool = False  # skipped this month, balance frozen
    last_month: int = 0

    @property
    def active(self) -> bool:
        return self.status is None


def add_months(value: date, months: int) -> date:
    """Return ``value`` shifted by ``months`` calendar months, clamping the day."""

    month_index = value.month - 1 + months
    year = value.year + month_index // 12
    month = month_index % 12 + 1
    day = min(value.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def _amortize(balance: float, annual_rate: float, payment: float) -> tuple[float, float, float] | None:
    """Apply one month of interest and payment.

    Returns ``(interest, principal, new_balance)`` or ``None`` when the payment
    does not cover the month's interest. A residual of a cent or less is swept
    into the principal so a paid-off balance is exactly zero.
    """

    interest = balance * (annual_rate / 100 / 12)
    principal = min(payment - interest, balance)
    if principal <= 0:
        return None
    new_balance = balance - principal
    if new_balance <= PAID_OFF_THRESHOLD:
        principal = balance
        new_balance = 0.0
    return interest, principal, new_balance


def _clamp(value: float) -> float:
    return max(float(value or 0.0), 0.0)


def _sanitize(debts: Iterable[Debt]) -> list[Debt]:
    """Copy debts with negative fields clamped to zero, dropping settled ones."""

    active: list[Debt] = []
    for debt in debts:
        balance = _clamp(debt.remaining_amount)
        rate = _clamp(debt.interest_rate)
        payment = _clamp(debt.monthly_payment)
        if (balance, rate, payment) != (debt.remaining_amount, debt.interest_rate, debt.monthly_payment):
            logger.warning("Clamped negative debt fields to zero", extra={"debt_id": debt.id})
        if balance <= 0:
            continue
        active.append(
            Debt(
                id=debt.id,
                name=debt.name,
                remaining_amount=balance,
                interest_rate=rate,
                monthly_payment=payment,
            )
        )
    return active


def order_debts(debts: Iterable[Debt], strategy: str) -> list[Debt]:
    """Return debts in funding priority order for ``strategy``.

    Both orderings are stable, so equal keys keep their input order.
    """

    if strategy == "avalanche":
        return sorted(debts, key=lambda d: d.interest_rate, reverse=True)
    if strategy == "snowball":
        return sorted(debts, key=lambda d: d.remaining_amount)
    raise ValueError("Invalid debt payoff strategy.")


def _to_plan(state: _DebtState) -> DebtPlan:
    debt = state.debt
    return DebtPlan(
        id=debt.id,
        name=debt.name,
        remaining_amount=debt.remaining_amount,
        interest_rate=debt.interest_rate,
        monthly_payment=(
            state.offered_payment if state.offered_payment is not None else debt.monthly_payment
        ),
        payoff_date=state.payoff_date,
        total_interest=state.total_interest,
        payments=tuple(state.payments),
        status=state.status or PlanStatus.CAPPED,
    )


def simulate_debt_repayment(
    debts: Iterable[Debt],
    strategy: str,
    extra_payment: float = 0.0,
    *,
    today: date | None = None,
) -> DebtRepaymentStrategy:
    """Simulate month-by-month repayment of ``debts`` under ``strategy``.

    Only the first open debt in priority order receives the extra pool. The
    pool is ``extra_payment`` plus the minimum payment of every debt retired in
    an earlier month; whatever the priority debt does not need in its payoff
    month moves on to the next debt in the same month.

    A debt whose effective payment cannot cover its interest waits: that month
    gets no record, its balance stays frozen and any pool it was offered moves
    on to the next debt. It is re-checked every month, so freed payments that
    reach it later start paying it down. When a whole month passes without any
    debt making progress the pool can no longer grow, and every debt still
    waiting stalls. Stalled debts never release their minimum payment, are
    left out of ``total_months`` and ``payoff_date`` and are listed in
    ``unpayable_debt_ids``.

    ``total_months`` is the latest month in which a counted debt received a
    payment, so months a debt spent waiting are included.

    Negative balances, rates, payments and extra payments are clamped to zero.
    """

    if strategy not in STRATEGIES:
        raise ValueError("Invalid debt payoff strategy.")

    start = today or date.today()
    extra = _clamp(extra_payment)
    if extra != extra_payment:
        logger.warning("Clamped negative extra payment to zero", extra={"extra_payment": extra_payment})

    ordered = order_debts(_sanitize(debts), strategy)
    if not ordered:
        return DebtRepaymentStrategy(
            strategy=strategy,
            total_months=0,
            total_interest_paid=0.0,
            total_paid=0.0,
            payoff_date=start,
        )

    states = [_DebtState(debt=d, balance=d.remaining_amount) for d in ordered]
    released = 0.0
    month = 0

    while month < MAX_MONTHS and any(s.active for s in states):
        payment_date = add_months(start, month)
        month += 1
        pool = extra + released
        funding = True  # next open debt is the priority debt and holds the pool
        progressed = False

        for state in states:
            if not state.active:
                continue

            offered = state.debt.monthly_payment + (pool if funding else 0.0)
            if state.offered_payment is None:
                state.offered_payment = offered

            step = _amortize(state.balance, state.debt.interest_rate, offered)
            if step is None:
                state.waiting = True
                continue

            progressed = True
            state.waiting = False
            state.last_month = month
            interest, principal, balance = step
            payment = principal + interest
            if funding:
                if balance == 0.0:
                    pool = max(offered - payment, 0.0)
                else:
                    funding = False

            state.balance = balance
            state.total_interest += interest
            state.payments.append(
                PaymentRecord(
                    date=payment_date,
                    payment=payment,
                    principal=principal,
                    interest=interest,
                    remaining_balance=balance,
                )
            )

            if balance == 0.0:
                state.status = PlanStatus.PAID_OFF
                state.payoff_date = payment_date
                # Freed minimum joins the pool from next month on.
                released += state.debt.monthly_payment

        if not progressed:
            break

    for state in states:
        if state.active and state.waiting:
            state.status = PlanStatus.STALLED
            logger.warning(
                "Debt payment does not cover interest; plan stalled",
                extra={"debt_id": state.debt.id, "month": month, "balance": state.balance},
            )

    plans = tuple(_to_plan(s) for s in states)
    counted = [s.last_month for s in states if s.status is not PlanStatus.STALLED]
    payoff_dates = [p.payoff_date for p in plans if p.payoff_date is not None]

    result = DebtRepaymentStrategy(
        strategy=strategy,
        total_months=max(counted, default=0),
        total_interest_paid=sum(p.total_interest for p in plans),
        total_paid=sum(p.total_paid for p in plans),
        payoff_date=max(payoff_dates, default=start),
        debt_plans=plans,
    )
    logger.debug(
        "Simulated debt repayment",
        extra={
            "strategy": strategy,
            "debts": len(plans),
            "months": result.total_months,
            "unpayable": len(result.unpayable_debt_ids),
        },
    )
    return result


def snowball_plan(
    *, debts: Iterable[Debt], extra_payment: float = 0.0, today: date | None = None
) -> DebtRepaymentStrategy:
    """Return payoff plan prioritizing smallest balances first."""
    return simulate_debt_repayment(debts, "snowball", extra_payment, today=today)


def avalanche_plan(
    *, debts: Iterable[Debt], extra_payment: float = 0.0, today: date | None = None
) -> DebtRepaymentStrategy:
    """Return payoff plan prioritizing highest interest rate first."""
    return simulate_debt_repayment(debts, "avalanche", extra_payment, today=today)


def compare_strategies(
    debts: Iterable[Debt],
    extra_payment: float = 0.0,
    *,
    chosen: str = "avalanche",
    today: date | None = None,
) -> StrategyComparison:
    """Run both orderings over the same debts and pair the results."""

    if chosen not in STRATEGIES:
        raise ValueError("Invalid debt payoff strategy.")
    start = today or date.today()
    debt_list = list(debts)
    alternate = "snowball" if chosen == "avalanche" else "avalanche"
    return StrategyComparison(
        chosen=simulate_debt_repayment(debt_list, chosen, extra_payment, today=start),
        alternate=simulate_debt_repayment(debt_list, alternate, extra_payment, today=start),
    )


def calculate_loan_payoff(principal: float, annual_rate: float, monthly_payment: float) -> LoanPayoff:
    """Amortize a single balance at a fixed payment until paid, stalled or capped."""

    balance = _clamp(principal)
    rate = _clamp(annual_rate)
    payment = _clamp(monthly_payment)
    months = 0
    total_interest = 0.0
    paid = 0.0
    stalled = False

    while balance > 0 and months < MAX_MONTHS:
        step = _amortize(balance, rate, payment)
        if step is None:
            stalled = True
            break
        interest, principal_paid, balance = step
        total_interest += interest
        paid += interest + principal_paid
        months += 1

    return LoanPayoff(
        months=months,
        total_interest=total_interest,
        total_paid=paid,
        remaining_balance=balance,
        stalled=stalled,
    )


__all__ = [
    "Debt",
    "DebtPlan",
    "DebtRepaymentStrategy",
    "LoanPayoff",
    "MAX_MONTHS",
    "PaymentRecord",
    "PlanStatus",
    "STRATEGIES",
    "StrategyComparison",
    "add_months",
    "avalanche_plan",
    "calculate_loan_payoff",
    "compare_strategies",
    "order_debts",
    "simulate_debt_repayment",
    "snowball_plan",
]
