"""Pytest configuration and shared fixtures for PayoffCast tests.

This module provides database fixtures, test data factories, and helper utilities
for testing the planning services and repositories without touching the real data directory.
"""

from __future__ import annotations

import logging
import tempfile
from datetime import date, datetime, timezone
from pathlib import Path

import pytest
from sqlmodel import Session, SQLModel, create_engine

from payoffcast.infra.database import create_session_factory
from payoffcast.logging_config import ROOT_LOGGER_NAME
from payoffcast.models import Budget, Goal, Liability, Transaction
from payoffcast.services.debts import Debt

# Fixed reference date so payment dates and goal horizons are deterministic
TODAY = date(2024, 1, 15)


@pytest.fixture(autouse=True)
def isolated_data_dir(tmp_path, monkeypatch):
    """Point the data directory (database file and logs) at a per-test temp dir."""
    data_dir = tmp_path / "data"
    monkeypatch.setenv("PAYOFFCAST_DATA_DIR", str(data_dir))
    monkeypatch.delenv("PAYOFFCAST_DATABASE_URL", raising=False)
    monkeypatch.delenv("PAYOFFCAST_DEFAULT_STRATEGY", raising=False)
    return data_dir


@pytest.fixture(autouse=True)
def reset_package_logger():
    """Drop handlers installed by setup_logging so they don't leak across tests."""
    yield
    logger = logging.getLogger(ROOT_LOGGER_NAME)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()


@pytest.fixture
def today() -> date:
    return TODAY


# =============================================================================
# Database Fixtures
# =============================================================================


@pytest.fixture(scope="function")
def db_engine():
    """Create an isolated SQLite database file for each test.

    Yields:
        Engine: SQLModel engine connected to test database
    """
    with tempfile.NamedTemporaryFile(suffix=".db", delete=False) as f:
        db_path = Path(f.name)

    engine = create_engine(f"sqlite:///{db_path}", echo=False)
    SQLModel.metadata.create_all(engine)

    yield engine

    engine.dispose()
    db_path.unlink(missing_ok=True)


@pytest.fixture(scope="function")
def db_session(db_engine):
    """Create a database session for a single test."""
    session = Session(db_engine, expire_on_commit=False)
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


@pytest.fixture(scope="function")
def session_factory(db_engine):
    """Session factory matching what the repositories expect."""
    return create_session_factory(db_engine)


# =============================================================================
# Test Data Factories
# =============================================================================


@pytest.fixture
def liability_factory(db_session):
    """Factory for creating test liabilities (debts)."""

    def _create_liability(
        name: str = "Test Debt",
        balance: float = 1000.00,
        apr: float = 18.0,
        minimum_payment: float = 25.00,
        kind: str = "credit_card",
    ) -> Liability:
        """Create a test liability with sensible defaults.

        Args:
            name: Debt name/description
            balance: Current outstanding balance
            apr: Annual percentage rate (e.g., 18.0 for 18%)
            minimum_payment: Minimum monthly payment
            kind: loan, credit_card, mortgage, purchase or other
        """
        liability = Liability(
            name=name,
            kind=kind,
            total_amount=max(balance, 0.0),
            balance=balance,
            apr=apr,
            minimum_payment=minimum_payment,
        )
        db_session.add(liability)
        db_session.commit()
        db_session.refresh(liability)
        return liability

    return _create_liability


@pytest.fixture
def goal_factory(db_session):
    """Factory for creating savings goals."""

    def _create_goal(
        title: str = "Emergency Fund",
        target_amount: float = 6000.0,
        current_amount: float = 1000.0,
        target_date: date = date(2025, 1, 15),
        category: str = "savings",
    ) -> Goal:
        goal = Goal(
            title=title,
            target_amount=target_amount,
            current_amount=current_amount,
            target_date=target_date,
            category=category,
        )
        db_session.add(goal)
        db_session.commit()
        db_session.refresh(goal)
        return goal

    return _create_goal


@pytest.fixture
def transaction_factory(db_session):
    """Factory for creating ledger transactions.

    Amounts are positive for income and negative for expenses.
    """

    def _create_transaction(
        amount: float,
        category: str = "Uncategorized",
        occurred_at: datetime | None = None,
        memo: str = "Test transaction",
    ) -> Transaction:
        transaction = Transaction(
            amount=amount,
            category=category,
            occurred_at=occurred_at or datetime.combine(TODAY, datetime.min.time(), tzinfo=timezone.utc),
            memo=memo,
        )
        db_session.add(transaction)
        db_session.commit()
        db_session.refresh(transaction)
        return transaction

    return _create_transaction


@pytest.fixture
def budget_factory(db_session):
    """Factory for creating category budgets (defaults to the month of TODAY)."""

    def _create_budget(
        category: str,
        amount: float,
        period_start: date = date(2024, 1, 1),
        period_end: date = date(2024, 1, 31),
    ) -> Budget:
        budget = Budget(
            category=category,
            amount=amount,
            period_start=period_start,
            period_end=period_end,
        )
        db_session.add(budget)
        db_session.commit()
        db_session.refresh(budget)
        return budget

    return _create_budget


def make_debt(
    id: int | str = 1,
    name: str | None = None,
    remaining_amount: float = 1000.0,
    interest_rate: float = 12.0,
    monthly_payment: float = 100.0,
) -> Debt:
    """Build an in-memory ``Debt`` value object."""
    return Debt(
        id=id,
        name=name or f"Debt {id}",
        remaining_amount=remaining_amount,
        interest_rate=interest_rate,
        monthly_payment=monthly_payment,
    )


# =============================================================================
# Helper Utilities
# =============================================================================


def assert_float_equal(actual: float, expected: float, tolerance: float = 0.01):
    """Assert that two floats are equal within a tolerance.

    Args:
        actual: Actual value
        expected: Expected value
        tolerance: Maximum allowed difference (default 0.01 = 1 cent)
    """
    assert (
        abs(actual - expected) < tolerance
    ), f"Expected {expected}, got {actual} (diff: {abs(actual - expected)})"
