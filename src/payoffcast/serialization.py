"""JSON payload conversion for the planning value objects.

Payloads are validated with pydantic models that accept snake_case or
camelCase keys. Numbers are coerced, non-finite values rejected and negative
amounts clamped to zero, so the services only ever see clean values.
"""

from __future__ import annotations

import dataclasses
import json
from datetime import date, datetime
from enum import Enum
from typing import Any, Mapping

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    TypeAdapter,
    ValidationError,
    ValidationInfo,
    field_validator,
    model_validator,
)
from pydantic.alias_generators import to_camel, to_snake

from .logging_config import get_logger
from .services.debts import Debt
from .services.forecast import FinancialSnapshot
from .services.goals import Goal
from .services.insights import CategorySpend, FinancialSummary

logger = get_logger("serialization")


class PayloadError(ValueError):
    """Raised when an input payload is missing fields or holds invalid values."""


def _clamp_negative(value: float, info: ValidationInfo) -> float:
    if value < 0:
        logger.warning("Clamped negative payload value to zero", extra={"field": info.field_name})
        return 0.0
    return value


class _Payload(BaseModel):
    """Shared settings: camelCase aliases, finite numbers, unknown keys ignored."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        allow_inf_nan=False,
        str_strip_whitespace=True,
        extra="ignore",
    )

    @model_validator(mode="before")
    @classmethod
    def drop_blank_values(cls, data: Any) -> Any:
        """Treat ``null`` and empty strings like absent keys so defaults apply."""

        if isinstance(data, Mapping):
            return {key: value for key, value in data.items() if value is not None and value != ""}
        return data


class DebtPayload(_Payload):
    id: int | str | None = None
    name: str | None = None
    remaining_amount: float
    interest_rate: float = 0.0
    monthly_payment: float = 0.0

    @field_validator("remaining_amount", "interest_rate", "monthly_payment")
    @classmethod
    def clamp_amounts(cls, value: float, info: ValidationInfo) -> float:
        return _clamp_negative(value, info)

    def to_debt(self, index: int = 0) -> Debt:
        return Debt(
            id=self.id if self.id is not None else index + 1,
            name=self.name or f"Debt {index + 1}",
            remaining_amount=self.remaining_amount,
            interest_rate=self.interest_rate,
            monthly_payment=self.monthly_payment,
        )


class GoalPayload(_Payload):
    id: int | str | None = None
    title: str | None = None
    target_amount: float
    current_amount: float = 0.0
    target_date: date
    category: str = ""

    @field_validator("target_amount", "current_amount")
    @classmethod
    def clamp_amounts(cls, value: float, info: ValidationInfo) -> float:
        return _clamp_negative(value, info)

    @field_validator("target_date", mode="before")
    @classmethod
    def accept_timestamps(cls, value: Any) -> Any:
        """Stored goals often carry a full ISO timestamp; only the day matters."""

        if isinstance(value, datetime):
            return value.date()
        if isinstance(value, str) and "T" in value:
            try:
                return datetime.fromisoformat(value.replace("Z", "+00:00")).date()
            except ValueError:
                return value
        return value

    def to_goal(self, index: int = 0) -> Goal:
        return Goal(
            id=self.id if self.id is not None else index + 1,
            title=self.title or f"Goal {index + 1}",
            target_amount=self.target_amount,
            current_amount=self.current_amount,
            target_date=self.target_date,
            category=self.category,
        )


class CategoryPayload(_Payload):
    category: str = "Uncategorized"
    amount: float = 0.0
    percentage: float = 0.0

    @field_validator("amount", "percentage")
    @classmethod
    def clamp_amounts(cls, value: float, info: ValidationInfo) -> float:
        return _clamp_negative(value, info)


class DebtsPayload(_Payload):
    debts: list[DebtPayload] = Field(default_factory=list)


class SnapshotPayload(_Payload):
    monthly_income: float
    monthly_expenses: float
    current_savings: float = 0.0  # may be negative (overdrawn)
    total_debt: float | None = None
    monthly_debt_payment: float | None = None
    savings_rate: float | None = None
    debt_to_income_ratio: float | None = None
    budget_utilization: float | None = None
    goals: list[GoalPayload] = Field(default_factory=list)
    liabilities: list[DebtPayload] = Field(default_factory=list)

    @field_validator("monthly_income", "monthly_expenses", "total_debt", "monthly_debt_payment")
    @classmethod
    def clamp_amounts(cls, value: float | None, info: ValidationInfo) -> float | None:
        return None if value is None else _clamp_negative(value, info)

    def to_snapshot(self) -> FinancialSnapshot:
        liabilities = tuple(item.to_debt(i) for i, item in enumerate(self.liabilities))
        return FinancialSnapshot(
            monthly_income=self.monthly_income,
            monthly_expenses=self.monthly_expenses,
            current_savings=self.current_savings,
            total_debt=(
                self.total_debt
                if self.total_debt is not None
                else sum(d.remaining_amount for d in liabilities)
            ),
            monthly_debt_payment=(
                self.monthly_debt_payment
                if self.monthly_debt_payment is not None
                else sum(d.monthly_payment for d in liabilities)
            ),
            savings_rate=self.savings_rate,
            debt_to_income_ratio=self.debt_to_income_ratio,
            budget_utilization=self.budget_utilization,
            goals=tuple(item.to_goal(i) for i, item in enumerate(self.goals)),
            liabilities=liabilities,
        )


class SummaryPayload(_Payload):
    monthly_income: float
    monthly_expenses: float
    savings_rate: float | None = None
    budget_utilization: float | None = None
    top_expense_categories: list[CategoryPayload] = Field(default_factory=list)
    goals: list[GoalPayload] = Field(default_factory=list)
    total_debt: float = 0.0
    net_worth: float = 0.0

    @field_validator("monthly_income", "monthly_expenses", "total_debt")
    @classmethod
    def clamp_amounts(cls, value: float, info: ValidationInfo) -> float:
        return _clamp_negative(value, info)

    def to_summary(self) -> FinancialSummary:
        return FinancialSummary(
            monthly_income=self.monthly_income,
            monthly_expenses=self.monthly_expenses,
            savings_rate=self.savings_rate,
            budget_utilization=self.budget_utilization,
            top_expense_categories=tuple(
                CategorySpend(category=c.category, amount=c.amount, percentage=c.percentage)
                for c in self.top_expense_categories
            ),
            goals=tuple(item.to_goal(i) for i, item in enumerate(self.goals)),
            total_debt=self.total_debt,
            net_worth=self.net_worth,
        )


_debt_list = TypeAdapter(list[DebtPayload])


def _describe(exc: ValidationError) -> str:
    """Turn the first validation error into a one-line message."""

    error = exc.errors(include_url=False)[0]
    loc = error.get("loc", ())
    names = [to_snake(part) for part in loc if isinstance(part, str)]
    field = names[-1] if names else "payload"
    path = "".join(f"[{part}]" if isinstance(part, int) else f".{to_snake(part)}" for part in loc).lstrip(".")
    where = f" (at {path})" if path and path != field else ""
    if error["type"] == "missing":
        return f"Missing required field '{field}'{where}."
    return f"Invalid '{field}'{where}: {error['msg']}."


def _validate(model: type[_Payload] | TypeAdapter, payload: Any) -> Any:
    try:
        if isinstance(model, TypeAdapter):
            return model.validate_python(payload)
        return model.model_validate(payload)
    except ValidationError as exc:
        raise PayloadError(_describe(exc)) from exc


def debt_from_payload(item: Mapping[str, Any], index: int = 0) -> Debt:
    return _validate(DebtPayload, item).to_debt(index)


def debts_from_payload(payload: Any) -> list[Debt]:
    """Accept either a bare list of debts or an object with a ``debts`` key."""

    if isinstance(payload, Mapping):
        items = _validate(DebtsPayload, payload).debts
    else:
        items = _validate(_debt_list, payload)
    return [item.to_debt(i) for i, item in enumerate(items)]


def goal_from_payload(item: Mapping[str, Any], index: int = 0) -> Goal:
    return _validate(GoalPayload, item).to_goal(index)


def snapshot_from_payload(payload: Mapping[str, Any]) -> FinancialSnapshot:
    return _validate(SnapshotPayload, payload).to_snapshot()


def summary_from_payload(payload: Mapping[str, Any]) -> FinancialSummary:
    return _validate(SummaryPayload, payload).to_summary()


def to_jsonable(value: Any) -> Any:
    """Convert value objects (dataclasses, enums, dates, tuples) to JSON-ready data."""

    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return {f.name: to_jsonable(getattr(value, f.name)) for f in dataclasses.fields(value)}
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    if isinstance(value, Mapping):
        return {str(k): to_jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_jsonable(v) for v in value]
    return value


def dumps(value: Any, *, indent: int | None = 2) -> str:
    return json.dumps(to_jsonable(value), indent=indent, default=str)


def load_json(text: str) -> Any:
    try:
        return json.loads(text)
    except json.JSONDecodeError as exc:
        raise PayloadError(f"Invalid JSON: {exc.msg} (line {exc.lineno})") from exc


__all__ = [
    "DebtPayload",
    "GoalPayload",
    "PayloadError",
    "SnapshotPayload",
    "SummaryPayload",
    "debt_from_payload",
    "debts_from_payload",
    "dumps",
    "goal_from_payload",
    "load_json",
    "snapshot_from_payload",
    "summary_from_payload",
    "to_jsonable",
]
