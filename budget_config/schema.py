"""
Configuration schema (``budget_config.schema``).

Frozen dataclasses describing the runtime configuration of the budget
core.  Validation happens in ``__post_init__`` so an invalid value can
never reach a service.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

_LOG_LEVELS = frozenset({"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"})


@dataclass(frozen=True)
class CoreConfig:
    """
    Runtime settings shared by the period and recurring services.

    Attributes:
        timezone: IANA name used for day boundaries.
        transfer_category: Category key treated as a transfer.
        max_days_overdue: How far past its due date a series still fires.
        dry_run: Default for run_due when the caller does not say.
        chain_next_period: Open the next period after a close.
        database_url: SQLAlchemy URL for the CLI; None for hosts that
            bring their own session.
        log_level: Level for the ``budget_kernel`` logger hierarchy.
        source: Where the values came from (file path or "defaults").
        checksum: SHA-256 of the parsed source, "" for defaults.
    """

    timezone: str = "UTC"
    transfer_category: str = "trasferimento"
    max_days_overdue: int = 7
    dry_run: bool = False
    chain_next_period: bool = True
    database_url: str | None = None
    log_level: str = "INFO"
    source: str = "defaults"
    checksum: str = ""

    def __post_init__(self) -> None:
        try:
            ZoneInfo(self.timezone)
        except (ZoneInfoNotFoundError, ValueError) as exc:
            raise ValueError(f"Unknown timezone: {self.timezone!r}") from exc
        if not self.transfer_category:
            raise ValueError("transfer_category must not be empty")
        if isinstance(self.max_days_overdue, bool) or not isinstance(self.max_days_overdue, int):
            raise ValueError(f"max_days_overdue must be an integer, got {self.max_days_overdue!r}")
        if self.max_days_overdue < 0:
            raise ValueError(f"max_days_overdue must be >= 0, got {self.max_days_overdue}")
        if not isinstance(self.dry_run, bool):
            raise ValueError(f"dry_run must be a boolean, got {self.dry_run!r}")
        if not isinstance(self.chain_next_period, bool):
            raise ValueError(f"chain_next_period must be a boolean, got {self.chain_next_period!r}")
        if self.log_level.upper() not in _LOG_LEVELS:
            raise ValueError(f"Unknown log level: {self.log_level!r}")

    @property
    def tzinfo(self) -> ZoneInfo:
        return ZoneInfo(self.timezone)

    @property
    def log_level_number(self) -> int:
        return logging.getLevelName(self.log_level.upper())
