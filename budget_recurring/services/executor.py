"""
RecurringExecutor -- per-series isolated execution of due recurring series.

Contract:
    ``run_due()`` selects the due series, materializes one transaction per
    due series through the DataPort, advances its due date and reports
    executed / failed / summary.

Architecture: budget_recurring/services.  Imports from budget_kernel
    (domain, ports, exceptions, logging) and budget_recurring.domain.

Invariants enforced:
    - Isolation: each series fires inside its own ``port.atomic()`` unit;
      one failure never aborts the batch or leaves half a fire behind.
    - Exactly once per due date: the transaction and the advanced due date
      are written together.
    - Every generated transaction carries ``recurring_series_id``.
    - Dry run performs no writes at all.
    - Without force_execute only series flagged auto_execute fire.
    - Paused series are rejected like inactive ones.
    - All timestamps come from ``now`` (injected clock by default).

Failure modes:
    - Per-series errors are recorded in ``failed`` and the batch goes on.
    - PortUnavailableError aborts the whole batch, also when it surfaces
      while a failure count is being recorded.
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime, tzinfo
from uuid import uuid4

from budget_kernel.domain.clock import Clock, SystemClock
from budget_kernel.domain.dtos import RecurringSeries, SeriesUpdate, TransactionDraft
from budget_kernel.domain.values import UTC, ZERO, as_datetime
from budget_kernel.exceptions import (
    BudgetCoreError,
    PortUnavailableError,
    SeriesInactiveError,
    SeriesPausedError,
)
from budget_kernel.logging_config import LogContext, get_logger
from budget_kernel.ports.base import DataPort
from budget_recurring.domain.schedule import days_until_due, is_due, next_due
from budget_recurring.domain.types import (
    ExecutedEntry,
    ExecutionOptions,
    ExecutionResult,
    ExecutionSummary,
    FailureEntry,
)

logger = get_logger("recurring.executor")


class RecurringExecutor:
    """Execution engine for recurring series.

    Contract:
        - ``run_due()`` processes every due series once.
        - ``execute_series()`` fires a single series unconditionally.

    Non-goals:
        - Does NOT call ``session.commit()`` -- caller controls boundaries.
        - Does NOT schedule itself -- an external trigger calls run_due.
        - Does NOT retry failed series; they stay due and are picked up on
          the next run while inside the overdue window.
    """

    def __init__(
        self,
        port: DataPort,
        clock: Clock | None = None,
        *,
        tz: tzinfo = UTC,
    ):
        self._port = port
        self._clock = clock or SystemClock()
        self._tz = tz

    def run_due(
        self,
        series: Sequence[RecurringSeries] | None = None,
        now: datetime | None = None,
        options: ExecutionOptions | None = None,
    ) -> ExecutionResult:
        """
        Fire every due series.

        Args:
            series: Candidate series; the port's active series when omitted.
            now: Reference instant; the injected clock when omitted.
            options: dry_run / max_days_overdue / force_execute.  Without
                force_execute only series flagged auto_execute fire.

        Returns:
            ExecutionResult with executed, failed, summary and the series
            updates that were applied.

        Raises:
            PortUnavailableError: The store went away mid-batch.
        """
        options = options or ExecutionOptions()
        now = as_datetime(now or self._clock.now(), self._tz)
        if series is None:
            series = self._port.load_active_series()

        run_id = uuid4()
        executed: list[ExecutedEntry] = []
        failed: list[FailureEntry] = []
        updates: list[SeriesUpdate] = []
        processed = 0
        skipped = 0
        total_amount = ZERO

        with LogContext.bind(run_id=run_id):
            logger.info(
                "recurring_run_started",
                extra={
                    "candidates": len(series),
                    "dry_run": options.dry_run,
                    "max_days_overdue": options.max_days_overdue,
                    "force_execute": options.force_execute,
                },
            )

            for item in series:
                if not is_due(item.due_date, now, options.max_days_overdue, self._tz):
                    skipped += 1
                    logger.debug(
                        "recurring_series_not_due",
                        extra={
                            "series_id": str(item.id),
                            "days_until_due": days_until_due(item.due_date, now, self._tz),
                        },
                    )
                    continue

                if not (item.auto_execute or options.force_execute):
                    skipped += 1
                    logger.debug(
                        "recurring_series_manual_only",
                        extra={"series_id": str(item.id)},
                    )
                    continue

                processed += 1
                with LogContext.bind(series_id=item.id):
                    try:
                        entry, update, failure = self._attempt(item, now, options.dry_run)
                    except PortUnavailableError:
                        logger.error(
                            "recurring_run_aborted",
                            extra={"processed": processed},
                            exc_info=True,
                        )
                        raise
                if failure is not None:
                    failed.append(failure)
                    continue

                total_amount += item.amount
                if entry is not None:
                    executed.append(entry)
                if update is not None:
                    updates.append(update)

            summary = ExecutionSummary(
                total_processed=processed,
                successful_executions=processed - len(failed),
                failed_executions=len(failed),
                total_amount=total_amount,
                skipped=skipped,
            )

            logger.info("recurring_run_completed", extra=summary.to_dict())

        return ExecutionResult(
            executed=tuple(executed),
            failed=tuple(failed),
            summary=summary,
            series_updates=tuple(updates),
            dry_run=options.dry_run,
        )

    def execute_series(
        self, series: RecurringSeries, now: datetime | None = None
    ) -> ExecutedEntry:
        """Fire one series regardless of its due date.

        Raises:
            SeriesInactiveError: The series is deactivated.
            SeriesPausedError: The series is paused.
            UnsupportedFrequencyError: No interval rule for its frequency.
            PersistenceError: The port rejected a write.
        """
        entry, _ = self._fire(
            series, as_datetime(now or self._clock.now(), self._tz), dry_run=False
        )
        return entry

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    def _attempt(
        self, series: RecurringSeries, now: datetime, dry_run: bool
    ) -> tuple[ExecutedEntry | None, SeriesUpdate | None, FailureEntry | None]:
        """Fire one series, turning any error except PortUnavailableError into a failure."""
        try:
            entry, update = self._fire(series, now, dry_run)
        except PortUnavailableError:
            raise
        except Exception as exc:
            return None, None, self._record_failure(series, exc, dry_run)
        return entry, update, None

    def _fire(
        self, series: RecurringSeries, now: datetime, dry_run: bool
    ) -> tuple[ExecutedEntry | None, SeriesUpdate | None]:
        if not series.is_active:
            raise SeriesInactiveError(series.id)
        if series.is_paused:
            raise SeriesPausedError(series.id)

        new_due = next_due(series.due_date, series.frequency)

        if dry_run:
            logger.info(
                "recurring_series_dry_run",
                extra={
                    "series_name": series.description,
                    "amount": str(series.amount),
                    "next_due_date": new_due.isoformat(),
                },
            )
            return None, None

        draft = TransactionDraft(
            user_id=series.user_id,
            account_id=series.account_id,
            type=series.type,
            amount=series.amount,
            category=series.category,
            date=now,
            description=series.description,
            recurring_series_id=series.id,
        )

        with self._port.atomic():
            transaction = self._port.create_transaction(draft)
            update = SeriesUpdate(
                series_id=series.id,
                total_executions=series.total_executions + 1,
                due_date=new_due,
                transaction_ids=series.transaction_ids + (transaction.id,),
                last_executed_at=now,
            )
            updated = self._port.update_series(series.id, update)

        logger.info(
            "recurring_series_executed",
            extra={
                "transaction_id": str(transaction.id),
                "amount": str(series.amount),
                "due_date": series.due_date.isoformat(),
                "next_due_date": new_due.isoformat(),
                "total_executions": updated.total_executions,
            },
        )
        return ExecutedEntry(series=updated, transaction=transaction), update

    def _record_failure(
        self, series: RecurringSeries, exc: Exception, dry_run: bool
    ) -> FailureEntry:
        code = getattr(exc, "code", None)
        logger.warning(
            "recurring_series_failed",
            extra={"series_name": series.description, "error_code": code},
            exc_info=not isinstance(exc, SeriesInactiveError),
        )

        if not dry_run and not isinstance(exc, SeriesInactiveError):
            self._bump_failed_executions(series)

        return FailureEntry(
            series_id=series.id,
            series_name=series.description,
            error=str(exc),
            error_code=code,
        )

    def _bump_failed_executions(self, series: RecurringSeries) -> None:
        try:
            with self._port.atomic():
                self._port.update_series(
                    series.id,
                    SeriesUpdate(
                        series_id=series.id,
                        failed_executions=series.failed_executions + 1,
                    ),
                )
        except PortUnavailableError:
            raise
        except BudgetCoreError:
            logger.warning("recurring_failure_count_not_recorded", exc_info=True)

