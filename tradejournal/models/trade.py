"""Trade and tag data models."""

import time as time_module
import uuid
from datetime import date as date_type
from datetime import time as time_type
from enum import Enum
from typing import Iterable, Literal, Optional

from pydantic import BaseModel, Field, field_validator


class TagCategory(str, Enum):
    """Tag categories a trade can be labelled with."""

    STRATEGY = "strategy"
    TRIGGER = "trigger"
    SESSION = "session"
    MISTAKES = "mistakes"
    CONFIDENCE = "confidence"
    EMOTIONS = "emotions"
    CUSTOM = "custom"


# Categories holding a single value rather than a set of values
EXCLUSIVE_CATEGORIES = frozenset({TagCategory.CONFIDENCE})

_CATEGORY_NAMES = frozenset(category.value for category in TagCategory)


class Tag(BaseModel):
    """A category-qualified label attached to a trade."""

    category: TagCategory = Field(..., description="Tag category")
    value: str = Field(..., min_length=1, description="Tag value")

    model_config = {"frozen": True}

    @property
    def key(self) -> str:
        """Canonical interchange form, e.g. ``strategy:Breakout``."""
        return f"{self.category.value}:{self.value}"

    @classmethod
    def parse(cls, key: str) -> "Tag":
        """Parse a prefixed tag string.

        Strings without a known category prefix become custom tags holding
        the whole string, so ``"news:CPI"`` is a custom tag ``news:CPI``.
        """
        prefix, sep, value = key.partition(":")
        if sep and value and prefix in _CATEGORY_NAMES:
            return cls(category=TagCategory(prefix), value=value)
        return cls(category=TagCategory.CUSTOM, value=key)


class TradeTags(BaseModel):
    """Tags of a trade, grouped by category."""

    strategy: tuple[str, ...] = Field(default=(), description="Strategies used")
    trigger: tuple[str, ...] = Field(default=(), description="Entry triggers")
    session: tuple[str, ...] = Field(default=(), description="Market sessions")
    mistakes: tuple[str, ...] = Field(default=(), description="Mistakes made")
    confidence: Optional[str] = Field(default=None, description="Confidence level")
    emotions: tuple[str, ...] = Field(default=(), description="Emotional state")
    custom: tuple[str, ...] = Field(default=(), description="Free-form tags")

    model_config = {"frozen": True}

    def flatten(self) -> list[Tag]:
        """Return every tag value as a category-qualified tag."""
        tags = []
        for category in TagCategory:
            raw = getattr(self, category.value)
            values = [raw] if category in EXCLUSIVE_CATEGORIES else list(raw)
            for value in values:
                if value:
                    tags.append(Tag(category=category, value=value))
        return tags

    def keys(self) -> list[str]:
        """Return every tag as its prefixed string form."""
        return [tag.key for tag in self.flatten()]

    @classmethod
    def from_tags(cls, tags: Iterable[Tag]) -> "TradeTags":
        """Group tags back into their categories.

        For the exclusive confidence category the last value wins.
        """
        grouped: dict[str, list[str]] = {}
        confidence = None
        for tag in tags:
            if tag.category in EXCLUSIVE_CATEGORIES:
                confidence = tag.value
                continue
            values = grouped.setdefault(tag.category.value, [])
            if tag.value not in values:
                values.append(tag.value)
        return cls(confidence=confidence, **{k: tuple(v) for k, v in grouped.items()})

    @classmethod
    def from_keys(cls, keys: Iterable[str]) -> "TradeTags":
        """Build tags from prefixed strings (storage and legacy format)."""
        return cls.from_tags(Tag.parse(key) for key in keys if key)

    def is_empty(self) -> bool:
        """Whether no tag value is set."""
        return not self.flatten()


def generate_trade_id() -> str:
    """Generate a new opaque trade identifier."""
    millis = int(time_module.time() * 1000)
    return f"trade_{millis}_{uuid.uuid4().hex[:9]}"


class Trade(BaseModel):
    """Represents a single journaled trade."""

    id: str = Field(default_factory=generate_trade_id, description="Unique trade ID")
    date: date_type = Field(..., description="Trade date")
    time: Optional[time_type] = Field(default=None, description="Local trade time")
    pair: str = Field(..., min_length=1, description="Instrument symbol")
    pnl: float = Field(..., allow_inf_nan=False, description="Realized P&L")
    type: Optional[Literal["long", "short"]] = Field(
        default=None, description="Trade direction"
    )
    tags: TradeTags = Field(default_factory=TradeTags, description="Trade tags")
    rating: Optional[int] = Field(default=None, ge=1, le=5, description="1-5 star rating")
    notes: str = Field(default="", description="Rich text notes")
    photos: tuple[str, ...] = Field(default=(), description="Base64-encoded images")

    model_config = {"frozen": True}

    @field_validator("pair")
    @classmethod
    def _normalize_pair(cls, value: str) -> str:
        value = value.strip().upper()
        if not value:
            raise ValueError("pair must not be empty")
        return value

    @property
    def time_str(self) -> str:
        """Trade time as ``HH:MM``, or an empty string when absent."""
        return self.time.strftime("%H:%M") if self.time is not None else ""

    @property
    def chrono_key(self) -> str:
        """Chronological ordering key: date followed by time.

        A trade without a time sorts before any timed trade on the same date.
        """
        return self.date.isoformat() + self.time_str


def sort_chronologically(trades: Iterable[Trade], newest_first: bool = False) -> list[Trade]:
    """Sort trades by their chronological key.

    Args:
        trades: Trades in any order.
        newest_first: Return the most recent trade first.

    Returns:
        A new sorted list; ties keep their input order.
    """
    return sorted(trades, key=lambda t: t.chrono_key, reverse=newest_first)
