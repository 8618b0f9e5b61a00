"""JSON backup export and import.

Backups are a JSON array of trades with the tags grouped by category. Older
backups stored tags as a flat list of prefixed strings (``strategy:Breakout``);
those are migrated on load.
"""

import json
from datetime import date, time
from typing import Literal, Optional, Sequence, Union

from pydantic import BaseModel, Field, StrictFloat, StrictInt, StrictStr, TypeAdapter, ValidationError

from tradejournal.errors import ImportFormatError
from tradejournal.models import TagCategory, Trade, TradeTags


class BackupRecord(BaseModel):
    """One trade as stored in a backup file."""

    id: StrictStr
    date: StrictStr = Field(..., pattern=r"^\d{4}-\d{2}-\d{2}$")
    time: StrictStr = Field(default="", pattern=r"^(\d{2}:\d{2})?$")
    pair: StrictStr
    pnl: Union[StrictInt, StrictFloat]
    type: Optional[Literal["long", "short"]] = None
    notes: StrictStr = ""
    photos: list[StrictStr] = Field(default_factory=list)
    tags: Union[list[StrictStr], dict[str, Union[StrictStr, list[StrictStr], None]], None] = None
    rating: Optional[StrictInt] = None


_RECORDS = TypeAdapter(list[BackupRecord])
_CATEGORY_NAMES = frozenset(category.value for category in TagCategory)


def migrate_legacy_tags(tags: Sequence[str]) -> TradeTags:
    """Convert the legacy flat tag list into grouped tags.

    Strings with a known category prefix go to that category; anything
    else is kept whole as a custom tag.
    """
    return TradeTags.from_keys(tags)


def _tags_from_mapping(tags: dict) -> TradeTags:
    keys = []
    for category, value in tags.items():
        if value is None:
            continue
        values = [value] if isinstance(value, str) else value
        if category in _CATEGORY_NAMES:
            keys.extend(f"{category}:{v}" for v in values if v)
        else:
            keys.extend(f"{TagCategory.CUSTOM.value}:{v}" for v in values if v)
    return TradeTags.from_keys(keys)


def _to_trade(record: BackupRecord) -> Trade:
    if isinstance(record.tags, list):
        tags = migrate_legacy_tags(record.tags)
    elif isinstance(record.tags, dict):
        tags = _tags_from_mapping(record.tags)
    else:
        tags = TradeTags()

    return Trade(
        id=record.id,
        date=date.fromisoformat(record.date),
        time=time.fromisoformat(record.time) if record.time else None,
        pair=record.pair,
        pnl=float(record.pnl),
        type=record.type,
        tags=tags,
        rating=record.rating,
        notes=record.notes,
        photos=tuple(record.photos),
    )


def load_backup(data: Union[bytes, str]) -> list[Trade]:
    """Load trades from a JSON backup.

    An empty array is a valid backup.

    Raises:
        ImportFormatError: If the content is not a valid backup.
    """
    try:
        raw = json.loads(data)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise ImportFormatError("The backup file is not valid JSON.") from e

    if not isinstance(raw, list):
        raise ImportFormatError("The backup file must contain a list of trades.")

    try:
        return [_to_trade(record) for record in _RECORDS.validate_python(raw)]
    except ValidationError as e:
        raise ImportFormatError(
            f"The backup file contains invalid trade data ({e.error_count()} errors)."
        ) from e
    except ValueError as e:
        raise ImportFormatError(f"The backup file contains invalid trade data: {e}") from e


def _tags_to_mapping(tags: TradeTags) -> dict:
    return tags.model_dump(mode="json", exclude_defaults=True)


def _to_record(trade: Trade) -> dict:
    record = {
        "id": trade.id,
        "date": trade.date.isoformat(),
        "time": trade.time_str or None,
        "pair": trade.pair,
        "pnl": trade.pnl,
        "type": trade.type,
        "notes": trade.notes,
        "photos": list(trade.photos),
        "tags": _tags_to_mapping(trade.tags),
        "rating": trade.rating,
    }
    # Unset optional fields are left out rather than written as null
    return {key: value for key, value in record.items() if value is not None}


def dump_backup(trades: Sequence[Trade]) -> str:
    """Serialize trades to a JSON backup, most recent first."""
    records = [
        _to_record(trade)
        for trade in sorted(trades, key=lambda t: t.chrono_key, reverse=True)
    ]
    return json.dumps(records, indent=2)
