"""Configuration loading for Trade Journal.

Settings live in ``~/.config/tradejournal/config.toml``. Every key is
optional; a missing file means defaults throughout.

Example:
    db_path = "~/journal/trades.db"
    currency_symbol = "€"
    min_trades_for_analysis = 30

    [ai]
    enabled = true
    model = "gpt-5.2"
    timeout_seconds = 90

    [messages]
    "offline.trend_rec" = "Step away from the screen for a day."
"""

import logging
from pathlib import Path
from typing import Optional

import toml
from pydantic import BaseModel, Field, field_validator

from tradejournal.analysis.engine import MIN_TRADES_FOR_ANALYSIS
from tradejournal.analysis.messages import MessageCatalog, make_currency_formatter

logger = logging.getLogger(__name__)


CONFIG_DIR = Path.home() / ".config" / "tradejournal"
CONFIG_PATH = CONFIG_DIR / "config.toml"
DEFAULT_DB_PATH = CONFIG_DIR / "tradejournal.db"


class AISettings(BaseModel):
    """Settings of the optional coach enrichment."""

    enabled: bool = Field(default=False, description="Run the coach by default")
    model: Optional[str] = Field(default=None, description="Model override")
    timeout_seconds: float = Field(default=60.0, gt=0, description="Coach timeout")


class Settings(BaseModel):
    """Resolved application settings."""

    db_path: Path = Field(default=DEFAULT_DB_PATH, description="SQLite database file")
    currency_symbol: str = Field(default="$", description="Symbol used in report text")
    min_trades_for_analysis: int = Field(default=MIN_TRADES_FOR_ANALYSIS, ge=1)
    ai: AISettings = Field(default_factory=AISettings)
    messages: dict[str, str] = Field(default_factory=dict, description="Message overrides")

    @field_validator("db_path")
    @classmethod
    def _expand_home(cls, v: Path) -> Path:
        return v.expanduser()

    def message_catalog(self) -> MessageCatalog:
        return MessageCatalog(self.messages)

    def currency_formatter(self):
        return make_currency_formatter(self.currency_symbol)


def load_config(path: Optional[Path] = None) -> Optional[dict]:
    """Load the TOML configuration file.

    Args:
        path: Config file path. Defaults to ``CONFIG_PATH``.

    Returns:
        The parsed configuration, or None if the file is missing or invalid.
    """
    config_path = path or CONFIG_PATH

    if not config_path.exists():
        return None

    try:
        return toml.load(config_path)
    except toml.TomlDecodeError as e:
        logger.warning("Ignoring invalid config file %s: %s", config_path, e)
        return None


def get_settings(config: Optional[dict] = None) -> Settings:
    """Build settings from a loaded configuration dict."""
    return Settings.model_validate(config or {})
