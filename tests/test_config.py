"""Tests for configuration loading.

**Feature: trade-journal**
"""

import tempfile
from pathlib import Path

import pytest
from pydantic import ValidationError

from tradejournal.config import DEFAULT_DB_PATH, get_settings, load_config


@pytest.fixture
def config_dir():
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


class TestLoadConfig:
    """Reading the TOML file."""

    def test_missing_file(self, config_dir):
        assert load_config(config_dir / "config.toml") is None

    def test_invalid_file(self, config_dir):
        path = config_dir / "config.toml"
        path.write_text("this is = = not toml")
        assert load_config(path) is None

    def test_reads_sections(self, config_dir):
        path = config_dir / "config.toml"
        path.write_text(
            'currency_symbol = "€"\n'
            "[ai]\n"
            "enabled = true\n"
            'model = "gpt-4o-mini"\n'
            "[messages]\n"
            '"offline.trend_rec" = "Take a break."\n'
        )
        config = load_config(path)
        assert config["ai"]["model"] == "gpt-4o-mini"


class TestSettings:
    """Resolving settings from the loaded config."""

    def test_defaults(self):
        settings = get_settings(None)
        assert settings.db_path == DEFAULT_DB_PATH
        assert settings.currency_symbol == "$"
        assert settings.min_trades_for_analysis == 20
        assert settings.ai.enabled is False
        assert settings.ai.timeout_seconds == 60

    def test_overrides(self):
        settings = get_settings({
            "db_path": "~/journal/trades.db",
            "currency_symbol": "€",
            "ai": {"enabled": True, "timeout_seconds": 5},
            "messages": {"offline.trend_rec": "Take a break."},
        })
        assert settings.db_path == Path.home() / "journal" / "trades.db"
        assert settings.ai.enabled
        assert settings.currency_formatter()(-1234.5) == "-€1,234.50"
        assert settings.message_catalog().text("offline.trend_rec") == "Take a break."
        assert settings.message_catalog().text("grade.summary_a")

    def test_invalid_values(self):
        with pytest.raises(ValidationError):
            get_settings({"ai": {"timeout_seconds": 0}})
