"""Tests for JSON payload conversion."""

from __future__ import annotations

import json
from datetime import date

import pytest

from payoffcast.serialization import (
    PayloadError,
    debts_from_payload,
    dumps,
    goal_from_payload,
    load_json,
    snapshot_from_payload,
    summary_from_payload,
    to_jsonable,
)
from payoffcast.services.debts import PlanStatus, simulate_debt_repayment
from tests.conftest import TODAY


class TestDebtsFromPayload:
    def test_accepts_camel_and_snake_case(self):
        debts = debts_from_payload(
            [
                {"id": "a", "name": "Card", "remainingAmount": "1200.50", "interestRate": 19.9, "monthlyPayment": 45},
                {"name": "Loan", "remaining_amount": 5000, "interest_rate": 6, "monthly_payment": 150},
            ]
        )
        assert debts[0].id == "a"
        assert debts[0].remaining_amount == 1200.50
        assert debts[1].id == 2  # defaults to position
        assert debts[1].monthly_payment == 150.0

    def test_wrapped_in_object(self):
        assert len(debts_from_payload({"debts": [{"remaining_amount": 10}]})) == 1
        assert debts_from_payload({}) == []

    def test_defaults_and_clamping(self):
        (debt,) = debts_from_payload([{"remaining_amount": -50, "interest_rate": None}])
        assert debt.name == "Debt 1"
        assert debt.remaining_amount == 0.0
        assert debt.interest_rate == 0.0
        assert debt.monthly_payment == 0.0

    def test_missing_balance(self):
        with pytest.raises(PayloadError, match="remaining_amount"):
            debts_from_payload([{"name": "Card"}])

    def test_non_numeric_value(self):
        with pytest.raises(PayloadError, match="valid number"):
            debts_from_payload([{"remaining_amount": "lots"}])

    @pytest.mark.parametrize("raw", ["NaN", "Infinity", "-Infinity"])
    def test_non_finite_values_rejected(self, raw):
        payload = load_json(f'[{{"remaining_amount": {raw}, "monthly_payment": 50}}]')
        with pytest.raises(PayloadError, match="finite number"):
            debts_from_payload(payload)

    def test_error_names_the_item(self):
        with pytest.raises(PayloadError, match=r"\(at \[1\]\.remaining_amount\)"):
            debts_from_payload([{"remaining_amount": 10}, {"name": "Loan"}])

    def test_negative_values_are_clamped_with_warning(self, caplog):
        with caplog.at_level("WARNING", logger="payoffcast"):
            (debt,) = debts_from_payload([{"remainingAmount": 100, "monthlyPayment": -5}])
        assert debt.monthly_payment == 0.0
        assert any(
            "Clamped" in record.getMessage() and record.field == "monthly_payment" for record in caplog.records
        )

    def test_not_a_list(self):
        with pytest.raises(PayloadError):
            debts_from_payload({"debts": "Card"})


class TestGoalsAndSnapshots:
    def test_goal_dates(self):
        goal = goal_from_payload({"title": "Trip", "targetAmount": 3000, "targetDate": "2024-08-01T00:00:00"})
        assert goal.target_date == date(2024, 8, 1)
        assert goal.current_amount == 0.0

    def test_goal_bad_date(self):
        with pytest.raises(PayloadError, match="valid date"):
            goal_from_payload({"target_amount": 100, "target_date": "next summer"})

    def test_snapshot_totals_default_to_liabilities(self):
        snapshot = snapshot_from_payload(
            {
                "monthlyIncome": 4000,
                "monthlyExpenses": 3000,
                "currentSavings": -250,
                "liabilities": [
                    {"remaining_amount": 1000, "monthly_payment": 50},
                    {"remaining_amount": 500, "monthly_payment": 25},
                ],
            }
        )
        assert snapshot.total_debt == 1500.0
        assert snapshot.monthly_debt_payment == 75.0
        assert snapshot.current_savings == -250.0  # overdrawn savings are kept
        assert snapshot.savings_rate is None

    def test_snapshot_explicit_totals_win(self):
        snapshot = snapshot_from_payload(
            {
                "monthly_income": 4000,
                "monthly_expenses": 3000,
                "total_debt": 9000,
                "monthly_debt_payment": 300,
                "budget_utilization": 72.5,
                "liabilities": [{"remaining_amount": 1000}],
            }
        )
        assert snapshot.total_debt == 9000.0
        assert snapshot.monthly_debt_payment == 300.0
        assert snapshot.budget_utilization == 72.5

    def test_snapshot_rejects_non_finite_income(self):
        with pytest.raises(PayloadError, match="monthly_income"):
            snapshot_from_payload({"monthly_income": float("inf"), "monthly_expenses": 100})

    def test_snapshot_requires_object(self):
        with pytest.raises(PayloadError):
            snapshot_from_payload([1, 2, 3])

    def test_summary(self):
        summary = summary_from_payload(
            {
                "monthly_income": 4000,
                "monthly_expenses": 3900,
                "net_worth": -1200,
                "top_expense_categories": [{"category": "Rent", "amount": 1800, "percentage": 46.2}],
            }
        )
        assert summary.net_worth == -1200.0
        assert summary.top_expense_categories[0].category == "Rent"
        assert summary.budget_utilization is None


def test_load_json_errors():
    with pytest.raises(PayloadError, match="Invalid JSON"):
        load_json("[1, 2")


def test_dumps_strategy():
    result = simulate_debt_repayment(
        debts_from_payload([{"remaining_amount": 300, "monthly_payment": 100}]), "snowball", today=TODAY
    )
    payload = json.loads(dumps(result))

    assert payload["payoff_date"] == "2024-03-15"
    assert payload["debt_plans"][0]["status"] == PlanStatus.PAID_OFF.value
    assert [p["remaining_balance"] for p in payload["debt_plans"][0]["payments"]] == [200.0, 100.0, 0.0]


def test_to_jsonable_nested_values():
    assert to_jsonable({"when": date(2024, 1, 1), "items": (1, 2), 3: [PlanStatus.STALLED]}) == {
        "when": "2024-01-01",
        "items": [1, 2],
        "3": ["stalled"],
    }
