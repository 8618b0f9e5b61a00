"""Import of HTML account-history reports (MetaTrader 4 style).

The report is a table whose header row names at least Open Time, Type,
Symbol and Profit columns. Only buy and sell rows are trades; balance,
deposit and other ledger rows are ignored.
"""

import logging
from datetime import date, time
from typing import Optional, Union

from lxml import etree
from lxml import html as lxml_html

from tradejournal.errors import ImportFormatError
from tradejournal.importers.pnl import parse_pnl_string
from tradejournal.models import Trade

logger = logging.getLogger(__name__)


TABLE_CAPTIONS = ("closed transactions", "closed trades", "account history")
HEADER_KEYWORDS = ("ticket", "open time", "type", "symbol", "profit")
MIN_HEADER_KEYWORDS = 3
REQUIRED_COLUMNS = {
    "open_time": "open time",
    "type": "type",
    "symbol": "symbol",
    "profit": "profit",
}
TRADE_TYPES = {"buy": "long", "sell": "short"}
# Rows whose first cell spans more columns are section titles
MAX_LEADING_COLSPAN = 5


def _cell_texts(row) -> list[str]:
    return [cell.text_content().strip().lower() for cell in row.xpath("./td|./th")]


def _find_table(doc):
    """Locate the trades table, by caption text first, then by header keywords."""
    for cell in doc.iter("td", "th", "caption"):
        text = cell.text_content().strip().lower()
        if any(caption in text for caption in TABLE_CAPTIONS):
            table = next(cell.iterancestors("table"), None)
            if table is not None:
                return table

    for table in doc.iter("table"):
        for row in table.iter("tr"):
            cells = _cell_texts(row)
            matches = sum(1 for k in HEADER_KEYWORDS if any(k in c for c in cells))
            if matches >= MIN_HEADER_KEYWORDS:
                return table
    return None


def _find_header(rows) -> tuple[int, dict[str, int]]:
    for index, row in enumerate(rows):
        headers = _cell_texts(row)
        columns = {}
        for name, keyword in REQUIRED_COLUMNS.items():
            position = next((i for i, h in enumerate(headers) if keyword in h), -1)
            if position < 0:
                break
            columns[name] = position
        else:
            return index, columns
    return -1, {}


def _colspan(cell) -> int:
    try:
        return int(cell.get("colspan", "1"))
    except ValueError:
        return 1


def _cell(cells, index: int) -> str:
    return cells[index].text_content().strip() if index < len(cells) else ""


def _parse_row(cells, columns: dict[str, int]) -> Optional[Trade]:
    trade_type = _cell(cells, columns["type"]).lower()
    if trade_type not in TRADE_TYPES:
        return None

    parts = _cell(cells, columns["open_time"]).split()
    if len(parts) < 2:
        return None
    date_part, time_part = parts[0], parts[1]

    pair = _cell(cells, columns["symbol"]).upper()
    pnl = parse_pnl_string(_cell(cells, columns["profit"]))
    if pnl == 0 or not pair:
        return None

    return Trade(
        date=date.fromisoformat(date_part.replace(".", "-").replace("/", "-")),
        time=time.fromisoformat(time_part[:5]),
        pair=pair,
        pnl=pnl,
        type=TRADE_TYPES[trade_type],
    )


def parse_html_report(data: Union[bytes, str]) -> list[Trade]:
    """Parse the closed trades of an HTML broker report.

    Rows that cannot be parsed are logged and skipped.

    Args:
        data: Raw report content.

    Returns:
        The imported trades, in report order.

    Raises:
        ImportFormatError: If no trades table or header row is found, or no
            valid trade rows remain.
    """
    try:
        doc = lxml_html.fromstring(data)
    except (etree.ParserError, ValueError) as e:
        raise ImportFormatError("The file could not be read as an HTML report.") from e

    table = _find_table(doc)
    if table is None:
        raise ImportFormatError(
            "Could not find a valid trades table. The report format may be unsupported."
        )

    rows = list(table.iter("tr"))
    header_index, columns = _find_header(rows)
    if header_index < 0:
        raise ImportFormatError(
            "Could not find the header row in the trades table. "
            "Required columns: Open Time, Type, Symbol, Profit."
        )

    trades = []
    for number, row in enumerate(rows[header_index + 1:], start=header_index + 1):
        cells = row.xpath("./td")
        if len(cells) < 4 or _colspan(cells[0]) > MAX_LEADING_COLSPAN:
            continue
        try:
            trade = _parse_row(cells, columns)
        except ValueError as e:
            logger.warning("Skipping row %d of HTML report: %s", number, e)
            continue
        if trade is not None:
            trades.append(trade)

    if not trades:
        raise ImportFormatError("No valid 'buy' or 'sell' trades were found in the report.")

    logger.info("Imported %d trades from HTML report", len(trades))
    return trades
