"""Import of spreadsheet position reports (MetaTrader 5 style).

The first sheet holds several sections, each introduced by a label in the
first column. Trades are read from the "Positions" section, which ends at the
next "Orders", "Deals" or "Summary" label.
"""

import io
import logging
from typing import Optional

import pandas as pd

from tradejournal.errors import ImportFormatError
from tradejournal.importers.pnl import parse_pnl_string
from tradejournal.models import Trade

logger = logging.getLogger(__name__)


SECTION_LABEL = "positions"
SECTION_END_LABELS = ("orders", "deals", "summary")
COLUMN_ALIASES = {
    "time": ("time", "open time"),
    "symbol": ("symbol", "item"),
    "type": ("type",),
    "profit": ("profit", "p/l", "p&l"),
}
COMMENT_ALIASES = ("comment",)
NON_TRADE_WORDS = ("balance", "deposit", "withdrawal")
TRADE_TYPES = {"buy": "long", "sell": "short"}


def _read_rows(data: bytes) -> list[list[str]]:
    try:
        frame = pd.read_excel(io.BytesIO(data), sheet_name=0, header=None, dtype=str)
    except Exception as e:
        raise ImportFormatError("The file could not be read as an XLSX spreadsheet.") from e
    return [[str(cell).strip() for cell in row] for row in frame.fillna("").values.tolist()]


def _first_cell(row: list[str]) -> str:
    return row[0].lower() if row else ""


def _find_column(header: list[str], aliases: tuple[str, ...]) -> int:
    return next((i for i, name in enumerate(header) if name in aliases), -1)


def _parse_row(row: list[str], columns: dict[str, int]) -> Optional[Trade]:
    def cell(name: str) -> str:
        index = columns.get(name, -1)
        return row[index] if 0 <= index < len(row) else ""

    trade_type = cell("type").lower()
    comment = cell("comment").lower()
    if any(word in trade_type or word in comment for word in NON_TRADE_WORDS):
        return None
    if trade_type not in TRADE_TYPES:
        return None

    opened = pd.to_datetime(cell("time").replace(".", "/"))
    if pd.isna(opened):
        return None

    pair = cell("symbol").upper()
    pnl = parse_pnl_string(cell("profit") or "0")
    if pnl == 0 or not pair:
        return None

    return Trade(
        date=opened.date(),
        time=opened.time().replace(second=0, microsecond=0),
        pair=pair,
        pnl=pnl,
        type=TRADE_TYPES[trade_type],
    )


def parse_xlsx_report(data: bytes) -> list[Trade]:
    """Parse the positions of an XLSX broker report.

    Rows that cannot be parsed are logged and skipped.

    Args:
        data: Raw workbook bytes.

    Returns:
        The imported trades, in report order.

    Raises:
        ImportFormatError: If the Positions section or its header row is
            missing, or no valid trade rows remain.
    """
    rows = _read_rows(data)

    start = next((i for i, row in enumerate(rows) if SECTION_LABEL in _first_cell(row)), -1)
    if start < 0:
        raise ImportFormatError("Could not find the 'Positions' section in the report.")

    end = next(
        (
            i for i in range(start + 1, len(rows))
            if any(label in _first_cell(rows[i]) for label in SECTION_END_LABELS)
        ),
        len(rows),
    )

    header_index = -1
    columns: dict[str, int] = {}
    for i in range(start, end):
        header = [cell.lower() for cell in rows[i]]
        found = {name: _find_column(header, aliases) for name, aliases in COLUMN_ALIASES.items()}
        if all(index >= 0 for index in found.values()):
            header_index = i
            columns = found
            columns["comment"] = _find_column(header, COMMENT_ALIASES)
            break

    if header_index < 0:
        raise ImportFormatError(
            "Could not locate the header row within the 'Positions' section. "
            "Please ensure it contains Time, Symbol, Type, and Profit columns."
        )

    trades = []
    for number in range(header_index + 1, end):
        row = rows[number]
        if not any(row):
            continue
        try:
            trade = _parse_row(row, columns)
        except ValueError as e:
            logger.warning("Skipping row %d of XLSX report: %s", number + 1, e)
            continue
        if trade is not None:
            trades.append(trade)

    if not trades:
        raise ImportFormatError(
            "No valid 'buy' or 'sell' trades were found in the 'Positions' section."
        )

    logger.info("Imported %d trades from XLSX report", len(trades))
    return trades
