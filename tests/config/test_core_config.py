"""Tests for configuration loading and the get_active_config entrypoint."""

import logging
from pathlib import Path
from zoneinfo import ZoneInfo

import pytest
import yaml

from budget_config import (
    CONFIG_PATH_ENV,
    DATABASE_URL_ENV,
    CoreConfig,
    get_active_config,
)
from budget_config.loader import compute_checksum, load_core_config, parse_core_config

EXAMPLE_CONFIG = Path(__file__).resolve().parents[2] / "budget_core.example.yaml"


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    monkeypatch.delenv(CONFIG_PATH_ENV, raising=False)
    monkeypatch.delenv(DATABASE_URL_ENV, raising=False)


@pytest.fixture
def write_config(tmp_path):
    def _write(data, name="budget.yaml"):
        path = tmp_path / name
        path.write_text(yaml.safe_dump(data))
        return path

    return _write


class TestCoreConfig:

    def test_defaults(self):
        config = CoreConfig()

        assert config.timezone == "UTC"
        assert config.transfer_category == "trasferimento"
        assert config.max_days_overdue == 7
        assert config.dry_run is False
        assert config.chain_next_period is True
        assert config.source == "defaults"

    def test_tzinfo(self):
        assert CoreConfig(timezone="Europe/Rome").tzinfo == ZoneInfo("Europe/Rome")

    def test_log_level_number(self):
        assert CoreConfig(log_level="debug").log_level_number == logging.DEBUG

    @pytest.mark.parametrize(
        "overrides",
        [
            {"timezone": "Mars/Olympus"},
            {"transfer_category": ""},
            {"max_days_overdue": -1},
            {"max_days_overdue": "7"},
            {"max_days_overdue": True},
            {"dry_run": "yes"},
            {"chain_next_period": 1},
            {"log_level": "LOUD"},
        ],
    )
    def test_invalid_values(self, overrides):
        with pytest.raises(ValueError):
            CoreConfig(**overrides)


class TestLoader:

    def test_nested_sections(self):
        config = parse_core_config(
            {
                "timezone": "Europe/Rome",
                "recurring": {"max_days_overdue": 3, "dry_run": True},
                "periods": {"chain_next_period": False},
                "database": {"url": "sqlite:///x.db"},
                "logging": {"level": "DEBUG"},
            },
            source="inline",
        )

        assert config.timezone == "Europe/Rome"
        assert config.max_days_overdue == 3
        assert config.dry_run is True
        assert config.chain_next_period is False
        assert config.database_url == "sqlite:///x.db"
        assert config.log_level == "DEBUG"
        assert config.source == "inline"

    def test_empty_section_keeps_defaults(self):
        assert parse_core_config({"recurring": None}).max_days_overdue == 7

    def test_unknown_top_level_key(self):
        with pytest.raises(ValueError, match="Unknown configuration key"):
            parse_core_config({"timezon": "UTC"})

    def test_unknown_nested_key(self):
        with pytest.raises(ValueError, match="recurring.max_overdue"):
            parse_core_config({"recurring": {"max_overdue": 3}})

    def test_section_must_be_mapping(self):
        with pytest.raises(ValueError):
            parse_core_config({"recurring": [1, 2]})

    def test_checksum_is_order_independent(self):
        assert compute_checksum({"a": 1, "b": 2}) == compute_checksum({"b": 2, "a": 1})
        assert compute_checksum({"a": 1}) != compute_checksum({"a": 2})

    def test_load_file(self, write_config):
        path = write_config({"timezone": "Europe/Rome", "recurring": {"max_days_overdue": 2}})

        config = load_core_config(path)

        assert config.source == str(path)
        assert len(config.checksum) == 64
        assert config.max_days_overdue == 2

    def test_non_mapping_document(self, tmp_path):
        path = tmp_path / "list.yaml"
        path.write_text("- one\n- two\n")

        with pytest.raises(ValueError):
            load_core_config(path)

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_core_config(tmp_path / "absent.yaml")

    def test_example_file_loads(self):
        config = load_core_config(EXAMPLE_CONFIG)

        assert config.timezone == "Europe/Rome"
        assert config.database_url == "sqlite:///budget.db"


class TestGetActiveConfig:

    def test_defaults_without_env(self):
        assert get_active_config().source == "defaults"

    def test_explicit_path(self, write_config):
        path = write_config({"transfer_category": "giroconto"})
        assert get_active_config(path).transfer_category == "giroconto"

    def test_path_from_env(self, write_config, monkeypatch):
        path = write_config({"recurring": {"dry_run": True}})
        monkeypatch.setenv(CONFIG_PATH_ENV, str(path))

        assert get_active_config().dry_run is True

    def test_database_url_override(self, write_config, monkeypatch):
        path = write_config({"database": {"url": "sqlite:///file.db"}})
        monkeypatch.setenv(DATABASE_URL_ENV, "postgresql://db/budget")

        assert get_active_config(path).database_url == "postgresql://db/budget"

    def test_trace_logged(self, captured_logs):
        get_active_config()

        trace = next(r for r in captured_logs() if r["message"] == "BUDGET_CONFIG_TRACE")
        assert trace["source"] == "defaults"
        assert trace["logger"] == "budget_kernel.config"
