"""Tests for broker report and backup importers.

**Feature: trade-journal**
"""

import io
import json
import tempfile
from datetime import date, time
from pathlib import Path

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st
from openpyxl import Workbook

from tradejournal.errors import ImportFormatError
from tradejournal.importers import load_trades_file
from tradejournal.importers.backup import dump_backup, load_backup, migrate_legacy_tags
from tradejournal.importers.html_report import parse_html_report
from tradejournal.importers.pnl import parse_pnl_string
from tradejournal.importers.xlsx_report import parse_xlsx_report
from tradejournal.models import Trade, TradeTags


HTML_HEADER = (
    "<tr><td>Ticket</td><td>Open Time</td><td>Type</td><td>Size</td><td>Symbol</td>"
    "<td>Price</td><td>Close Time</td><td>Price</td><td>Profit</td></tr>"
)


def html_row(open_time: str, trade_type: str, symbol: str, profit: str) -> str:
    return (
        f"<tr><td>1</td><td>{open_time}</td><td>{trade_type}</td><td>0.10</td>"
        f"<td>{symbol}</td><td>1.1</td><td>x</td><td>1.2</td><td>{profit}</td></tr>"
    )


def html_report(*rows: str, header: str = HTML_HEADER) -> str:
    return (
        "<html><head><title>Statement</title></head><body><table>"
        '<tr><td colspan="9"><b>Closed Transactions:</b></td></tr>'
        + header
        + "".join(rows)
        + "</table></body></html>"
    )


class TestPnlParsing:
    """
    **Feature: trade-journal, Property 20: P&L String Parsing**

    *For any* amount printed in either decimal convention, parsing gives
    the amount back.
    """

    @pytest.mark.parametrize(
        "text,expected",
        [
            ("1,234.56", 1234.56),
            ("1.234,56", 1234.56),
            ("(12.50)", -12.5),
            ("$ -45.00", -45.0),
            ("1 250.50", 1250.5),
            ("", 0.0),
            (None, 0.0),
            ("n/a", 0.0),
        ],
    )
    def test_examples(self, text, expected):
        assert parse_pnl_string(text) == pytest.approx(expected)

    @given(cents=st.integers(min_value=-10_000_000, max_value=10_000_000))
    @settings(max_examples=100)
    def test_both_conventions(self, cents):
        value = cents / 100
        us = f"{value:,.2f}"
        eu = us.replace(",", "_").replace(".", ",").replace("_", ".")
        assert parse_pnl_string(us) == pytest.approx(value)
        assert parse_pnl_string(eu) == pytest.approx(value)


class TestHtmlReport:
    """
    **Feature: trade-journal, Property 21: HTML Report Import**

    *For any* report, only buy and sell rows with a symbol and non-zero
    P&L become trades.
    """

    def test_parses_trades(self):
        report = html_report(
            html_row("2024.03.01 09:30:15", "buy", "eurusd", "1 250.50"),
            html_row("2024.03.01 14:05:00", "sell", "GBPUSD", "-45.00"),
            html_row("2024.03.02 10:00:00", "balance", "", "1000.00"),
            html_row("2024.03.02 11:00:00", "buy", "USDJPY", "0.00"),
            '<tr><td colspan="9">Open Trades:</td></tr>',
        )
        trades = parse_html_report(report)

        assert [(t.date, t.time, t.pair, t.pnl, t.type) for t in trades] == [
            (date(2024, 3, 1), time(9, 30), "EURUSD", 1250.5, "long"),
            (date(2024, 3, 1), time(14, 5), "GBPUSD", -45.0, "short"),
        ]
        assert all(t.tags.is_empty() and t.notes == "" for t in trades)

    def test_bad_rows_skipped(self):
        report = html_report(
            html_row("2024.13.45 10:00:00", "buy", "EURUSD", "10.00"),
            html_row("2024.03.01 10:00:00", "sell", "EURUSD", "15.00"),
        )
        trades = parse_html_report(report.encode("utf-8"))
        assert len(trades) == 1
        assert trades[0].type == "short"

    def test_table_found_by_header_keywords(self):
        report = (
            "<html><body><table>" + HTML_HEADER
            + html_row("2024/03/01 09:30", "buy", "EURUSD", "10.00")
            + "</table></body></html>"
        )
        assert len(parse_html_report(report)) == 1

    def test_missing_profit_column(self):
        header = HTML_HEADER.replace("Profit", "Result")
        report = html_report(html_row("2024.03.01 09:30:15", "buy", "EURUSD", "10"), header=header)
        with pytest.raises(ImportFormatError, match="header row"):
            parse_html_report(report)

    def test_no_table(self):
        with pytest.raises(ImportFormatError, match="trades table"):
            parse_html_report("<html><body><p>Nothing here</p></body></html>")

    def test_no_trades(self):
        report = html_report(html_row("2024.03.02 10:00:00", "balance", "", "1000.00"))
        with pytest.raises(ImportFormatError, match="No valid"):
            parse_html_report(report)


def xlsx_report(rows: list[list[str]]) -> bytes:
    workbook = Workbook()
    sheet = workbook.active
    for row in rows:
        sheet.append(row)
    buffer = io.BytesIO()
    workbook.save(buffer)
    return buffer.getvalue()


XLSX_HEADER = ["Time", "Position", "Symbol", "Type", "Volume", "Price", "Time", "Price", "Comment", "Profit"]


def xlsx_row(opened: str, symbol: str, trade_type: str, profit: str, comment: str = "") -> list[str]:
    return [opened, "1001", symbol, trade_type, "0.1", "1.1", opened, "1.2", comment, profit]


class TestXlsxReport:
    """
    **Feature: trade-journal, Property 22: XLSX Report Import**

    *For any* report, only rows of the Positions section are imported.
    """

    def test_parses_positions_section(self):
        data = xlsx_report([
            ["Trade History Report"],
            ["Positions"],
            XLSX_HEADER,
            xlsx_row("2024.03.01 09:30:15", "eurusd", "buy", "125.50"),
            xlsx_row("2024.03.01 11:00:00", "GBPUSD", "sell", "-40"),
            xlsx_row("2024.03.02 10:00:00", "", "balance", "1000"),
            xlsx_row("2024.03.02 12:00:00", "USDJPY", "buy", "10", comment="deposit"),
            ["Orders"],
            xlsx_row("2024.03.03 10:00:00", "USDJPY", "buy", "99"),
        ])
        trades = parse_xlsx_report(data)

        assert [(t.date, t.time, t.pair, t.pnl, t.type) for t in trades] == [
            (date(2024, 3, 1), time(9, 30), "EURUSD", 125.5, "long"),
            (date(2024, 3, 1), time(11, 0), "GBPUSD", -40.0, "short"),
        ]

    def test_missing_section(self):
        data = xlsx_report([XLSX_HEADER, xlsx_row("2024.03.01 09:30:15", "EURUSD", "buy", "1")])
        with pytest.raises(ImportFormatError, match="Positions"):
            parse_xlsx_report(data)

    def test_missing_header(self):
        data = xlsx_report([
            ["Positions"],
            ["Time", "Symbol", "Type"],
            ["2024.03.01 09:30:15", "EURUSD", "buy"],
        ])
        with pytest.raises(ImportFormatError, match="header row"):
            parse_xlsx_report(data)

    def test_no_trades(self):
        data = xlsx_report([["Positions"], XLSX_HEADER, ["Orders"]])
        with pytest.raises(ImportFormatError, match="No valid"):
            parse_xlsx_report(data)

    def test_not_a_workbook(self):
        with pytest.raises(ImportFormatError):
            parse_xlsx_report(b"definitely not a spreadsheet")


class TestBackup:
    """
    **Feature: trade-journal, Property 23: Backup Validation and Migration**

    *For any* backup, legacy tag lists are migrated to grouped tags and
    invalid data is rejected as a whole.
    """

    def test_legacy_tags_migrated(self):
        data = json.dumps([{
            "id": "trade_1",
            "date": "2024-03-01",
            "time": "09:30",
            "pair": "EURUSD",
            "pnl": 50,
            "tags": ["strategy:Breakout", "mistakes:FOMO", "confidence:High", "news:CPI", "scalp"],
        }])
        [trade] = load_backup(data)

        assert trade.tags == TradeTags(
            strategy=("Breakout",),
            mistakes=("FOMO",),
            confidence="High",
            custom=("news:CPI", "scalp"),
        )
        assert trade.pnl == 50.0
        assert trade.time == time(9, 30)

    def test_migrate_legacy_tags(self):
        assert migrate_legacy_tags(["session:London"]) == TradeTags(session=("London",))

    def test_grouped_tags(self):
        data = json.dumps([{
            "id": "trade_2",
            "date": "2024-03-01",
            "time": "",
            "pair": "EURUSD",
            "pnl": -12.5,
            "type": "short",
            "tags": {"strategy": ["Pullback"], "confidence": "Low", "news": ["CPI"]},
            "rating": 3,
        }])
        [trade] = load_backup(data)
        assert trade.tags == TradeTags(strategy=("Pullback",), confidence="Low", custom=("CPI",))
        assert trade.time is None
        assert trade.rating == 3

    def test_empty_backup(self):
        assert load_backup("[]") == []

    @pytest.mark.parametrize(
        "data",
        [
            "not json",
            '{"id": "x"}',
            '[{"id": "x", "date": "01/03/2024", "pair": "EURUSD", "pnl": 1}]',
            '[{"id": "x", "date": "2024-03-01", "pair": "EURUSD", "pnl": "12"}]',
            '[{"id": "x", "date": "2024-03-01", "pair": "EURUSD", "pnl": 1, "type": "flat"}]',
            '[{"id": "x", "date": "2024-02-30", "pair": "EURUSD", "pnl": 1}]',
            '[{"id": "x", "date": "2024-03-01", "pair": "EURUSD", "pnl": 1, "tags": 5}]',
        ],
    )
    def test_invalid_backups(self, data):
        with pytest.raises(ImportFormatError):
            load_backup(data)

    def test_dump_then_load(self):
        trades = [
            Trade(
                date=date(2024, 3, 1),
                time=time(9, 30),
                pair="EURUSD",
                pnl=10,
                type="long",
                tags=TradeTags(strategy=("Breakout",), confidence="High"),
                rating=5,
                notes="clean entry",
                photos=("aGVsbG8=",),
            ),
            Trade(date=date(2024, 3, 2), pair="GBPUSD", pnl=-5),
        ]
        restored = load_backup(dump_backup(trades))
        assert restored == [trades[1], trades[0]]

    def test_dump_leaves_out_unset_fields(self):
        trades = [
            Trade(date=date(2024, 3, 2), pair="GBPUSD", pnl=-5),
            Trade(date=date(2024, 3, 1), time=time(9, 30), pair="EURUSD", pnl=10, type="long", rating=4),
        ]
        untimed, timed = json.loads(dump_backup(trades))

        assert "time" not in untimed
        assert "type" not in untimed
        assert "rating" not in untimed
        assert None not in untimed.values()
        assert timed["time"] == "09:30"
        assert timed["type"] == "long"
        assert timed["rating"] == 4


class TestLoadTradesFile:
    """Dispatch by file extension."""

    def test_dispatches_by_extension(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "Statement.HTM"
            path.write_text(html_report(html_row("2024.03.01 09:30:15", "buy", "EURUSD", "10")))
            assert len(load_trades_file(path)) == 1

    def test_unsupported_extension(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "trades.csv"
            path.write_text("a,b")
            with pytest.raises(ImportFormatError, match="Unsupported"):
                load_trades_file(path)
