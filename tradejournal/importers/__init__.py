"""Trade importers for broker reports and JSON backups."""

import logging
from pathlib import Path

from tradejournal.errors import ImportFormatError
from tradejournal.importers.backup import dump_backup, load_backup, migrate_legacy_tags
from tradejournal.importers.html_report import parse_html_report
from tradejournal.importers.pnl import parse_pnl_string
from tradejournal.importers.xlsx_report import parse_xlsx_report
from tradejournal.models import Trade

logger = logging.getLogger(__name__)


PARSERS = {
    ".htm": parse_html_report,
    ".html": parse_html_report,
    ".xlsx": parse_xlsx_report,
    ".json": load_backup,
}


def load_trades_file(path: Path) -> list[Trade]:
    """Import trades from a file, picking the parser by extension.

    Raises:
        ImportFormatError: If the extension is unsupported or the content
            cannot be imported.
    """
    parser = PARSERS.get(path.suffix.lower())
    if parser is None:
        supported = ", ".join(sorted(PARSERS))
        raise ImportFormatError(
            f"Unsupported file type '{path.suffix}'. Supported types: {supported}."
        )
    logger.debug("Importing %s with %s", path, parser.__name__)
    return parser(path.read_bytes())


__all__ = [
    "PARSERS",
    "dump_backup",
    "load_backup",
    "load_trades_file",
    "migrate_legacy_tags",
    "parse_html_report",
    "parse_pnl_string",
    "parse_xlsx_report",
]
