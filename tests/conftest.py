"""
Pytest fixtures for the budget core test suite.

Provides:
- Structured logging setup and a log-capture fixture
- A deterministic clock
- An in-memory Data Port and an in-memory SQLite session / SQL Data Port
- Factory fixtures for budgets, transactions and recurring series

No external database is required: SQL tests run on ``sqlite:///:memory:``.
"""

import json
import logging
from collections.abc import Generator
from datetime import date, datetime, timezone
from decimal import Decimal
from io import StringIO
from uuid import UUID, uuid4

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

import budget_kernel.models  # noqa: F401
from budget_kernel.db.base import Base
from budget_kernel.db.engine import enable_sqlite_savepoints
from budget_kernel.domain.clock import DeterministicClock
from budget_kernel.domain.dtos import (
    Budget,
    Frequency,
    RecurringSeries,
    Transaction,
    TransactionType,
)
from budget_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    reset_logging,
)
from budget_kernel.ports.memory import InMemoryDataPort
from budget_kernel.ports.sql import SqlAlchemyDataPort

# 2025-01-15 12:00 UTC
FIXED_NOW = datetime(2025, 1, 15, 12, 0, 0, tzinfo=timezone.utc)


# =============================================================================
# Logging fixtures
# =============================================================================


@pytest.fixture(autouse=True, scope="session")
def _configure_test_logging():
    """Configure structured logging for the test suite."""
    reset_logging()
    configure_logging(level=logging.DEBUG)
    yield
    reset_logging()


@pytest.fixture(autouse=True)
def _clear_log_context():
    """Clear LogContext between tests to prevent cross-test contamination."""
    LogContext.clear()
    yield
    LogContext.clear()


@pytest.fixture
def captured_logs():
    """
    Capture budget_kernel logs as parsed JSON dicts.

    Usage::

        def test_something(captured_logs, period_service):
            period_service.close_period(...)
            logs = captured_logs()
            assert any(r["message"] == "period_closed" for r in logs)
    """
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    root = logging.getLogger("budget_kernel")
    previous_level = root.level
    root.setLevel(logging.DEBUG)
    root.addHandler(handler)

    def _get_records() -> list[dict]:
        lines = stream.getvalue().strip().split("\n")
        return [json.loads(line) for line in lines if line]

    yield _get_records

    root.removeHandler(handler)
    root.setLevel(previous_level)


# =============================================================================
# Clock / identity
# =============================================================================


@pytest.fixture
def deterministic_clock() -> DeterministicClock:
    return DeterministicClock(FIXED_NOW)


@pytest.fixture
def user_id() -> UUID:
    return uuid4()


@pytest.fixture
def account_id() -> UUID:
    return uuid4()


# =============================================================================
# Data Ports
# =============================================================================


@pytest.fixture
def memory_port() -> InMemoryDataPort:
    return InMemoryDataPort()


@pytest.fixture
def sqlite_engine():
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    enable_sqlite_savepoints(engine)
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session(sqlite_engine) -> Generator[Session, None, None]:
    factory = sessionmaker(bind=sqlite_engine, expire_on_commit=False)
    sess = factory()
    yield sess
    sess.rollback()
    sess.close()


@pytest.fixture
def sql_port(session) -> SqlAlchemyDataPort:
    return SqlAlchemyDataPort(session)


# =============================================================================
# Factories
# =============================================================================


@pytest.fixture
def make_budget(user_id):
    """Factory fixture for Budget DTOs owned by ``user_id``."""

    def _make(amount="500.00", categories=("groceries",), **overrides) -> Budget:
        fields = dict(
            id=uuid4(),
            user_id=user_id,
            description="Monthly budget",
            amount=Decimal(amount),
            categories=frozenset(categories),
        )
        fields.update(overrides)
        return Budget(**fields)

    return _make


@pytest.fixture
def make_transaction(user_id, account_id):
    """Factory fixture for Transaction DTOs owned by ``user_id``."""

    def _make(
        amount="10.00",
        category="groceries",
        type=TransactionType.EXPENSE,
        when=datetime(2025, 1, 10, 9, 30, tzinfo=timezone.utc),
        **overrides,
    ) -> Transaction:
        fields = dict(
            id=uuid4(),
            user_id=user_id,
            account_id=account_id,
            type=type,
            amount=Decimal(amount),
            category=category,
            date=when,
        )
        fields.update(overrides)
        return Transaction(**fields)

    return _make


@pytest.fixture
def make_series(user_id, account_id):
    """Factory fixture for RecurringSeries DTOs owned by ``user_id``."""

    def _make(
        due=date(2025, 1, 15),
        frequency=Frequency.MONTHLY,
        amount="50.00",
        **overrides,
    ) -> RecurringSeries:
        fields = dict(
            id=uuid4(),
            user_id=user_id,
            account_id=account_id,
            description="Rent",
            amount=Decimal(amount),
            type=TransactionType.EXPENSE,
            category="housing",
            frequency=frequency,
            due_date=due,
            auto_execute=True,
        )
        fields.update(overrides)
        return RecurringSeries(**fields)

    return _make
