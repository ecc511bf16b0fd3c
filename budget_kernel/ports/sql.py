"""
Module: budget_kernel.ports.sql
Responsibility: DataPort implementation over a SQLAlchemy session.
Architecture position: Kernel > Ports.  The only place that touches both
    ORM models and domain DTOs; conversion goes through ``to_dto`` /
    ``from_dto`` on the models.

Invariants enforced:
    - Flush-only: never commits.  The caller owns the outer transaction
      (``session_scope()`` in the CLI, the request in a web host).
    - ``load_active_period(for_update=True)`` issues SELECT ... FOR UPDATE
      so concurrent closes for the same user serialize on PostgreSQL.
    - ``atomic()`` is a SAVEPOINT (``session.begin_nested()``).

Failure modes:
    - PortUnavailableError when the connection is gone (disconnect,
      interface error, invalidated connection).
    - PersistenceError for every other SQLAlchemy failure, including
      IntegrityError from the one-active-period index.
    - SeriesNotFoundError / PeriodNotFoundError on updates of unknown ids.
"""

from __future__ import annotations

import functools
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from datetime import date
from typing import TypeVar
from uuid import UUID, uuid4

from sqlalchemy import select
from sqlalchemy.exc import DBAPIError, DisconnectionError, InterfaceError, SQLAlchemyError
from sqlalchemy.orm import Session

from budget_kernel.db.base import as_utc
from budget_kernel.domain.dtos import (
    Budget,
    BudgetPeriod,
    DateRange,
    PeriodDraft,
    PeriodUpdate,
    RecurringSeries,
    SeriesUpdate,
    Transaction,
    TransactionDraft,
)
from budget_kernel.domain.values import as_datetime
from budget_kernel.exceptions import (
    PeriodNotFoundError,
    PersistenceError,
    PortUnavailableError,
    SeriesNotFoundError,
)
from budget_kernel.logging_config import get_logger
from budget_kernel.models import (
    BudgetModel,
    BudgetPeriodModel,
    RecurringSeriesModel,
    TransactionModel,
)
from budget_kernel.models.budget_period import encode_amounts

logger = get_logger("ports.sql")

F = TypeVar("F", bound=Callable)


def translate_errors(operation: str) -> Callable[[F], F]:
    """Wrap SQLAlchemy failures raised by ``operation`` as port errors."""

    def decorator(fn: F) -> F:
        @functools.wraps(fn)
        def wrapper(*args, **kwargs):
            try:
                return fn(*args, **kwargs)
            except DisconnectionError as exc:
                raise PortUnavailableError(operation, str(exc)) from exc
            except DBAPIError as exc:
                if isinstance(exc, InterfaceError) or exc.connection_invalidated:
                    raise PortUnavailableError(operation, str(exc)) from exc
                raise PersistenceError(operation, str(exc)) from exc
            except SQLAlchemyError as exc:
                raise PersistenceError(operation, str(exc)) from exc

        return wrapper  # type: ignore[return-value]

    return decorator


class SqlAlchemyDataPort:
    """
    DataPort backed by the budget ORM models.

    Contract:
        Construct one per session.  Holds no state besides the session.
    """

    def __init__(self, session: Session):
        self._session = session

    @property
    def session(self) -> Session:
        return self._session

    # -- reads ---------------------------------------------------------------

    @translate_errors("load_active_series")
    def load_active_series(self) -> list[RecurringSeries]:
        stmt = (
            select(RecurringSeriesModel)
            .where(RecurringSeriesModel.is_active.is_(True))
            .order_by(RecurringSeriesModel.due_date, RecurringSeriesModel.id)
        )
        return [row.to_dto() for row in self._session.scalars(stmt)]

    @translate_errors("load_series")
    def load_series(self, series_id: UUID) -> RecurringSeries | None:
        row = self._session.get(RecurringSeriesModel, series_id)
        return row.to_dto() if row is not None else None

    @translate_errors("load_transactions_by_user")
    def load_transactions_by_user(
        self, user_id: UUID, date_range: DateRange | None = None
    ) -> list[Transaction]:
        stmt = select(TransactionModel).where(TransactionModel.user_id == user_id)
        if date_range is not None:
            stmt = stmt.where(
                TransactionModel.date >= as_utc(as_datetime(date_range.start)),
                TransactionModel.date <= as_utc(as_datetime(date_range.end)),
            )
        stmt = stmt.order_by(TransactionModel.date)
        return [row.to_dto() for row in self._session.scalars(stmt)]

    @translate_errors("load_transactions_by_series")
    def load_transactions_by_series(self, series_id: UUID) -> list[Transaction]:
        stmt = (
            select(TransactionModel)
            .where(TransactionModel.recurring_series_id == series_id)
            .order_by(TransactionModel.date)
        )
        return [row.to_dto() for row in self._session.scalars(stmt)]

    @translate_errors("load_budgets_by_user")
    def load_budgets_by_user(self, user_id: UUID) -> list[Budget]:
        stmt = select(BudgetModel).where(BudgetModel.user_id == user_id)
        return [row.to_dto() for row in self._session.scalars(stmt)]

    @translate_errors("load_periods_by_user")
    def load_periods_by_user(self, user_id: UUID) -> list[BudgetPeriod]:
        stmt = (
            select(BudgetPeriodModel)
            .where(BudgetPeriodModel.user_id == user_id)
            .order_by(BudgetPeriodModel.start_date.desc())
        )
        return [row.to_dto() for row in self._session.scalars(stmt)]

    @translate_errors("load_active_period")
    def load_active_period(
        self, user_id: UUID, *, for_update: bool = False
    ) -> BudgetPeriod | None:
        stmt = select(BudgetPeriodModel).where(
            BudgetPeriodModel.user_id == user_id,
            BudgetPeriodModel.is_active.is_(True),
        )
        if for_update:
            stmt = stmt.with_for_update()
        row = self._session.scalars(stmt).first()
        return row.to_dto() if row is not None else None

    @translate_errors("find_closed_period")
    def find_closed_period(self, user_id: UUID, end_date: date) -> BudgetPeriod | None:
        stmt = select(BudgetPeriodModel).where(
            BudgetPeriodModel.user_id == user_id,
            BudgetPeriodModel.is_active.is_(False),
            BudgetPeriodModel.end_date == end_date,
        )
        row = self._session.scalars(stmt).first()
        return row.to_dto() if row is not None else None

    # -- writes --------------------------------------------------------------

    @translate_errors("create_transaction")
    def create_transaction(self, draft: TransactionDraft) -> Transaction:
        row = TransactionModel.from_dto(draft.to_transaction(uuid4()))
        self._session.add(row)
        self._session.flush()
        logger.debug(
            "transaction_created",
            extra={"transaction_id": str(row.id), "series_id": str(draft.recurring_series_id)},
        )
        return row.to_dto()

    @translate_errors("update_series")
    def update_series(self, series_id: UUID, update: SeriesUpdate) -> RecurringSeries:
        row = self._session.get(RecurringSeriesModel, series_id)
        if row is None:
            raise SeriesNotFoundError(series_id)
        if update.total_executions is not None:
            row.total_executions = update.total_executions
        if update.due_date is not None:
            row.due_date = update.due_date
        if update.transaction_ids is not None:
            row.transaction_ids = [str(t) for t in update.transaction_ids]
        if update.last_executed_at is not None:
            row.last_executed_at = as_utc(update.last_executed_at)
        if update.failed_executions is not None:
            row.failed_executions = update.failed_executions
        self._session.flush()
        return row.to_dto()

    @translate_errors("update_period")
    def update_period(self, period_id: UUID, update: PeriodUpdate) -> BudgetPeriod:
        row = self._session.get(BudgetPeriodModel, period_id)
        if row is None:
            raise PeriodNotFoundError(period_id)
        if update.is_active is not None:
            row.is_active = update.is_active
        if update.end_date is not None:
            row.end_date = update.end_date
        if update.total_spent is not None:
            row.total_spent = update.total_spent
        if update.total_saved is not None:
            row.total_saved = update.total_saved
        if update.category_spending is not None:
            row.category_spending = encode_amounts(update.category_spending)
        if update.updated_at is not None:
            row.updated_at = as_utc(update.updated_at)
        self._session.flush()
        return row.to_dto()

    @translate_errors("create_period")
    def create_period(self, draft: PeriodDraft) -> BudgetPeriod:
        row = BudgetPeriodModel(
            user_id=draft.user_id,
            start_date=draft.start_date,
            is_active=True,
            category_spending={},
        )
        if draft.created_at is not None:
            row.created_at = as_utc(draft.created_at)
            row.updated_at = as_utc(draft.created_at)
        self._session.add(row)
        self._session.flush()
        return row.to_dto()

    @contextmanager
    def atomic(self) -> Iterator[None]:
        try:
            savepoint = self._session.begin_nested()
        except SQLAlchemyError as exc:
            raise PersistenceError("atomic", str(exc)) from exc
        try:
            yield
        except BaseException:
            savepoint.rollback()
            raise
        try:
            savepoint.commit()
        except DBAPIError as exc:
            if exc.connection_invalidated:
                raise PortUnavailableError("atomic", str(exc)) from exc
            raise PersistenceError("atomic", str(exc)) from exc
        except SQLAlchemyError as exc:
            raise PersistenceError("atomic", str(exc)) from exc
