"""
budget_config -- single public entrypoint for budget core configuration.

Responsibility:
    Provides the ONLY way to obtain configuration at runtime through
    ``get_active_config()``.  Services receive plain values (timezone,
    transfer category, ...) from their host and never read files or
    environment variables themselves.

Architecture position:
    Configuration -- sits beside ``budget_kernel``.  The kernel and the
    recurring engine MUST NEVER import from ``budget_config``; the
    ``budget_services`` facade and the CLI translate a ``CoreConfig`` into
    service arguments.

Failure modes:
    - ``FileNotFoundError`` -- the configured file does not exist.
    - ``ValueError`` -- unknown keys or invalid values.
"""

from __future__ import annotations

import dataclasses
import logging
import os
from pathlib import Path

from budget_config.loader import load_core_config
from budget_config.schema import CoreConfig

_logger = logging.getLogger("budget_kernel.config")

CONFIG_PATH_ENV = "BUDGET_CORE_CONFIG"
DATABASE_URL_ENV = "BUDGET_CORE_DATABASE_URL"


def get_active_config(path: Path | str | None = None) -> CoreConfig:
    """The ONLY public configuration entrypoint.

    Resolution order:
        1. ``path`` when given.
        2. The file named by ``BUDGET_CORE_CONFIG``.
        3. Built-in defaults.
    ``BUDGET_CORE_DATABASE_URL`` then overrides ``database_url``.

    Raises:
        FileNotFoundError: The selected file does not exist.
        ValueError: The file contains unknown keys or invalid values.
    """
    if path is None:
        path = os.environ.get(CONFIG_PATH_ENV) or None

    if path is not None:
        config = load_core_config(Path(path))
    else:
        config = CoreConfig()

    database_url = os.environ.get(DATABASE_URL_ENV)
    if database_url:
        config = dataclasses.replace(config, database_url=database_url)

    _logger.info(
        "BUDGET_CONFIG_TRACE",
        extra={
            "trace_type": "BUDGET_CONFIG_TRACE",
            "source": config.source,
            "checksum": config.checksum,
            "timezone": config.timezone,
            "max_days_overdue": config.max_days_overdue,
            "dry_run": config.dry_run,
        },
    )
    return config


__all__ = ["CONFIG_PATH_ENV", "DATABASE_URL_ENV", "CoreConfig", "get_active_config"]
