"""Tests for goal projection and surplus allocation."""

from __future__ import annotations

from datetime import date

from payoffcast.services.goals import (
    Goal,
    equal_split_allocation,
    months_between,
    project_goal,
    project_goals,
)
from tests.conftest import TODAY, assert_float_equal


def _goal(id=1, target=6000.0, current=1000.0, target_date=date(2025, 1, 15)) -> Goal:
    return Goal(
        id=id,
        title=f"Goal {id}",
        target_amount=target,
        current_amount=current,
        target_date=target_date,
    )


def test_months_between():
    assert months_between(date(2024, 1, 15), date(2025, 1, 15)) == 12
    assert months_between(date(2024, 1, 31), date(2024, 2, 1)) == 1
    assert months_between(date(2024, 3, 1), date(2024, 1, 1)) == -2


def test_gap_never_negative():
    assert _goal(target=500.0, current=800.0).gap == 0.0
    assert _goal().gap == 5000.0


class TestEqualSplitAllocation:
    def test_splits_across_future_goals(self):
        goals = [
            _goal(id=1),
            _goal(id=2, target_date=date(2026, 6, 1)),
            _goal(id=3, target_date=date(2023, 6, 1)),  # deadline passed
        ]
        allocation = equal_split_allocation(goals, 600.0, TODAY)
        assert allocation == {1: 300.0, 2: 300.0}

    def test_deficit_is_split_too(self):
        allocation = equal_split_allocation([_goal(id=1), _goal(id=2)], -250.0, TODAY)
        assert allocation == {1: -125.0, 2: -125.0}

    def test_no_future_goals(self):
        assert equal_split_allocation([_goal(target_date=TODAY)], 500.0, TODAY) == {}


class TestProjectGoal:
    def test_contributions_until_deadline(self):
        projection = project_goal(_goal(), monthly_contribution=300.0, horizon_months=60, today=TODAY)
        assert_float_equal(projection.projected_amount, 4600.0)
        assert_float_equal(projection.percentage_complete, 4600.0 / 6000.0 * 100)
        assert projection.will_reach_target is False
        assert_float_equal(projection.monthly_contribution_needed, 5000.0 / 12)

    def test_horizon_shorter_than_deadline(self):
        projection = project_goal(_goal(), monthly_contribution=300.0, horizon_months=6, today=TODAY)
        assert_float_equal(projection.projected_amount, 2800.0)

    def test_reaches_target(self):
        projection = project_goal(_goal(), monthly_contribution=500.0, horizon_months=12, today=TODAY)
        assert projection.will_reach_target is True
        assert projection.percentage_complete >= 100

    def test_past_deadline_keeps_current_amount(self):
        goal = _goal(target_date=date(2023, 12, 1))
        projection = project_goal(goal, monthly_contribution=300.0, horizon_months=12, today=TODAY)
        assert projection.projected_amount == 1000.0
        assert projection.monthly_contribution_needed == 0.0
        assert projection.will_reach_target is False

    def test_deadline_this_month_needs_full_gap_now(self):
        goal = _goal(target_date=date(2024, 1, 28))
        projection = project_goal(goal, monthly_contribution=300.0, horizon_months=12, today=TODAY)
        assert projection.projected_amount == 1000.0
        assert_float_equal(projection.monthly_contribution_needed, 5000.0)

    def test_deficit_draws_goal_down(self):
        goal = _goal(target=1000.0, current=500.0)
        (projection,) = project_goals([goal], monthly_savings=-100.0, horizon_months=12, today=TODAY)
        assert projection.projected_amount < goal.current_amount
        assert_float_equal(projection.projected_amount, 500.0 - 100.0 * 12)
        assert projection.will_reach_target is False

    def test_long_dated_goal_balance_compounds(self):
        goal = _goal(target=50000.0, current=2000.0, target_date=date(2034, 1, 15))
        projection = project_goal(
            goal, monthly_contribution=100.0, horizon_months=120, today=TODAY, growth_rate=6.0
        )
        expected = 2000.0 * 1.005**120 + 100.0 * 120
        assert_float_equal(projection.projected_amount, expected)

    def test_growth_ignored_for_goals_within_five_years(self):
        goal = _goal(target=50000.0, current=2000.0, target_date=date(2029, 1, 15))  # 60 months out
        projection = project_goal(
            goal, monthly_contribution=100.0, horizon_months=120, today=TODAY, growth_rate=6.0
        )
        assert_float_equal(projection.projected_amount, 2000.0 + 100.0 * 60)

    def test_zero_target_is_complete(self):
        goal = _goal(target=0.0, current=0.0)
        projection = project_goal(goal, monthly_contribution=0.0, horizon_months=12, today=TODAY)
        assert projection.percentage_complete == 100.0
        assert projection.will_reach_target is True


class TestProjectGoals:
    def test_uses_default_allocator(self):
        goals = [_goal(id=1), _goal(id=2)]
        projections = project_goals(goals, monthly_savings=600.0, horizon_months=12, today=TODAY)
        assert [p.goal_id for p in projections] == [1, 2]
        assert_float_equal(projections[0].projected_amount, 1000.0 + 300.0 * 12)

    def test_custom_allocator(self):
        def first_goal_only(goals, monthly_savings, today):
            return {goals[0].id: monthly_savings}

        goals = [_goal(id=1), _goal(id=2)]
        projections = project_goals(
            goals,
            monthly_savings=400.0,
            horizon_months=12,
            today=TODAY,
            allocator=first_goal_only,
        )
        assert_float_equal(projections[0].projected_amount, 1000.0 + 400.0 * 12)
        assert projections[1].projected_amount == 1000.0

    def test_empty(self):
        assert project_goals([], monthly_savings=100.0, horizon_months=12, today=TODAY) == ()
