"""
Configuration Loader (``budget_config.loader``).

Responsibility
--------------
Loads a YAML configuration file and parses it into a frozen
``CoreConfig``.  Services never call this directly; the runtime entry
point is ``budget_config.get_active_config()``.

Invariants enforced
-------------------
* Unknown sections or keys raise ``ValueError``; a typo never silently
  falls back to a default.
* ``compute_checksum`` produces a deterministic SHA-256 hash of the
  parsed document for change detection.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Invalid values  -> ``ValueError`` from ``CoreConfig``.

File layout::

    timezone: Europe/Rome
    transfer_category: trasferimento
    recurring:
      max_days_overdue: 7
      dry_run: false
    periods:
      chain_next_period: true
    database:
      url: sqlite:///budget.db
    logging:
      level: INFO
"""

from __future__ import annotations

import hashlib
import json
from pathlib import Path
from typing import Any

import yaml

from budget_config.schema import CoreConfig

# section -> {yaml key: CoreConfig field}
_SECTIONS: dict[str | None, dict[str, str]] = {
    None: {"timezone": "timezone", "transfer_category": "transfer_category"},
    "recurring": {"max_days_overdue": "max_days_overdue", "dry_run": "dry_run"},
    "periods": {"chain_next_period": "chain_next_period"},
    "database": {"url": "database_url"},
    "logging": {"level": "log_level"},
}


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
        ValueError: if the document is not a mapping.
    """
    with open(path) as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"{path}: top level must be a mapping, got {type(data).__name__}")
    return data


def compute_checksum(data: dict[str, Any]) -> str:
    """Deterministic SHA-256 of a parsed document."""
    canonical = json.dumps(data, sort_keys=True, default=str)
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()


def parse_core_config(
    data: dict[str, Any],
    source: str = "defaults",
) -> CoreConfig:
    """
    Parse a ``CoreConfig`` from a dict.

    Raises:
        ValueError: on unknown keys or invalid values.
    """
    values: dict[str, Any] = {}
    top_level = _SECTIONS[None]

    for key, raw in data.items():
        if key in top_level:
            values[top_level[key]] = raw
            continue
        section = _SECTIONS.get(key)
        if section is None:
            raise ValueError(f"Unknown configuration key: {key!r}")
        if raw is None:
            continue
        if not isinstance(raw, dict):
            raise ValueError(f"Section {key!r} must be a mapping")
        for sub_key, sub_value in raw.items():
            if sub_key not in section:
                raise ValueError(f"Unknown configuration key: {key}.{sub_key}")
            values[section[sub_key]] = sub_value

    return CoreConfig(source=source, checksum=compute_checksum(data), **values)


def load_core_config(path: Path) -> CoreConfig:
    """Load and parse one configuration file."""
    return parse_core_config(load_yaml_file(path), source=str(path))
