"""Savings-goal projections and the policy that splits surplus across goals."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Iterable, Mapping, Protocol, Sequence

# Goals further out than this earn returns on their current balance.
LONG_TERM_GOAL_MONTHS = 60


@dataclass(frozen=True, slots=True)
class Goal:
    """A savings target with a deadline."""

    id: int | str
    title: str
    target_amount: float
    current_amount: float
    target_date: date
    category: str = ""

    @property
    def gap(self) -> float:
        return max(self.target_amount - self.current_amount, 0.0)


@dataclass(frozen=True, slots=True)
class GoalProjection:
    """Projected state of one goal at the end of a horizon."""

    goal_id: int | str
    title: str
    projected_amount: float
    percentage_complete: float
    will_reach_target: bool
    monthly_contribution_needed: float


class GoalAllocator(Protocol):
    """Decides how much of the monthly surplus each goal receives."""

    def __call__(
        self, goals: Sequence[Goal], monthly_savings: float, today: date
    ) -> Mapping[int | str, float]:  # pragma: no cover - interface
        ...


def months_between(start: date, end: date) -> int:
    """Whole calendar months from ``start`` to ``end`` (negative when ``end`` is earlier)."""

    return (end.year - start.year) * 12 + (end.month - start.month)


def equal_split_allocation(
    goals: Sequence[Goal], monthly_savings: float, today: date
) -> dict[int | str, float]:
    """Split ``monthly_savings`` equally across goals whose deadline is still ahead.

    A deficit is split too, so goals are drawn down while spending exceeds income.
    """

    active = [g for g in goals if g.target_date > today]
    if not active:
        return {}
    share = monthly_savings / len(active)
    return {g.id: share for g in active}


def project_goal(
    goal: Goal,
    *,
    monthly_contribution: float,
    horizon_months: int,
    today: date,
    growth_rate: float = 0.0,
) -> GoalProjection:
    """Project ``goal`` forward by at most ``horizon_months`` of contributions.

    When ``growth_rate`` (annual percent) is set and the deadline is more than
    ``LONG_TERM_GOAL_MONTHS`` away, the current balance also compounds monthly
    over the funded months. Goals whose deadline has passed are reported at
    their current amount.
    """

    if goal.target_date > today:
        months_remaining = max(months_between(today, goal.target_date), 0)
        months_funded = min(months_remaining, horizon_months)
        projected = goal.current_amount + monthly_contribution * months_funded
        if growth_rate and months_remaining > LONG_TERM_GOAL_MONTHS and goal.current_amount > 0:
            projected += goal.current_amount * ((1 + growth_rate / 100 / 12) ** months_funded - 1)
        needed = goal.gap / max(months_remaining, 1)
    else:
        projected = goal.current_amount
        needed = 0.0

    if goal.target_amount > 0:
        percentage = projected / goal.target_amount * 100
    else:
        percentage = 100.0

    return GoalProjection(
        goal_id=goal.id,
        title=goal.title,
        projected_amount=projected,
        percentage_complete=percentage,
        will_reach_target=projected >= goal.target_amount,
        monthly_contribution_needed=needed,
    )


def project_goals(
    goals: Iterable[Goal],
    *,
    monthly_savings: float,
    horizon_months: int,
    today: date,
    allocator: GoalAllocator = equal_split_allocation,
    growth_rate: float = 0.0,
) -> tuple[GoalProjection, ...]:
    """Project every goal using the contribution split chosen by ``allocator``."""

    goal_list = list(goals)
    contributions = allocator(goal_list, monthly_savings, today)
    return tuple(
        project_goal(
            goal,
            monthly_contribution=contributions.get(goal.id, 0.0),
            horizon_months=horizon_months,
            today=today,
            growth_rate=growth_rate,
        )
        for goal in goal_list
    )


__all__ = [
    "Goal",
    "GoalAllocator",
    "GoalProjection",
    "LONG_TERM_GOAL_MONTHS",
    "equal_split_allocation",
    "months_between",
    "project_goal",
    "project_goals",
]
