"""Tests for time-of-day attribution.

**Feature: trade-journal**
"""

from datetime import date, time

from tradejournal.analysis.timing import (
    DEFAULT_TIME_WINDOWS,
    find_golden_hour,
    hourly_stats,
    time_window_stats,
    timing_insights,
    weekday_hour_heatmap,
)
from tradejournal.models import TimeWindow, Trade


MONDAY = date(2024, 1, 1)
TUESDAY = date(2024, 1, 2)
SATURDAY = date(2024, 1, 6)


def make_trade(pnl: float, at: time | None, on: date = MONDAY) -> Trade:
    return Trade(date=on, time=at, pair="EURUSD", pnl=pnl)


class TestGoldenHour:
    """
    **Feature: trade-journal, Property 7: Golden Hour**

    *For any* trade list, the golden hour is the hour with the best average
    P&L among hours with at least 5 trades, and only if that average is
    positive.
    """

    def test_needs_five_trades(self):
        trades = [make_trade(100, time(10, m)) for m in range(4)]
        trades += [make_trade(10, time(9, m)) for m in range(5)]

        golden = find_golden_hour(trades)
        assert golden.hour == 9
        assert golden.count == 5
        assert golden.avg_pnl == 10

    def test_negative_hours_never_golden(self):
        trades = [make_trade(-10, time(9, m)) for m in range(6)]
        assert find_golden_hour(trades) is None

    def test_untimed_trades_ignored(self):
        trades = [make_trade(10, None) for _ in range(10)]
        assert hourly_stats(trades) == {}
        assert find_golden_hour(trades) is None


class TestHeatmap:
    """
    **Feature: trade-journal, Property 8: Weekday x Hour Heatmap**

    *For any* trade list, only Monday-Friday trades between 07:00 and
    17:59 appear, and empty cells are omitted.
    """

    def test_filters_days_and_hours(self):
        trades = [
            make_trade(50, time(9, 15), MONDAY),
            make_trade(-20, time(9, 45), MONDAY),
            make_trade(30, time(17, 30), TUESDAY),
            make_trade(99, time(6, 59), MONDAY),
            make_trade(99, time(18, 0), MONDAY),
            make_trade(99, time(10, 0), SATURDAY),
            make_trade(99, None, MONDAY),
        ]
        cells = weekday_hour_heatmap(trades)

        assert [(c.day, c.hour) for c in cells] == [(1, 9), (2, 17)]
        assert cells[0].pnl == 30
        assert cells[0].trade_count == 2
        assert cells[0].win_rate == 50


class TestTimeWindows:
    """
    **Feature: trade-journal, Property 9: Time Window Attribution**

    *For any* trade, it is counted in at most one window: the first whose
    half-open interval contains its time.
    """

    def test_half_open_boundaries(self):
        trades = [
            make_trade(10, time(9, 59)),
            make_trade(20, time(10, 0)),
            make_trade(40, time(18, 0)),
        ]
        stats = {s.name: s for s in time_window_stats(trades)}

        assert stats["Opening Bell"].trade_count == 1
        assert stats["Opening Bell"].total_pnl == 10
        assert stats["Mid-Morning"].trade_count == 1
        assert sum(s.trade_count for s in stats.values()) == 2

    def test_first_matching_window_wins(self):
        windows = (
            TimeWindow(name="Wide", start="08:00", end="12:00"),
            TimeWindow(name="Narrow", start="09:00", end="10:00"),
        )
        stats = time_window_stats([make_trade(5, time(9, 30))], windows)
        assert [s.trade_count for s in stats] == [1, 0]

    def test_all_windows_reported(self):
        assert len(time_window_stats([])) == len(DEFAULT_TIME_WINDOWS)

    def test_best_and_worst(self):
        trades = [make_trade(50, time(8, m)) for m in range(3)]
        trades += [make_trade(-40, time(12, m)) for m in range(3)]
        trades += [make_trade(5, time(16, m)) for m in range(2)]

        insights = timing_insights(trades)
        assert insights.best.name == "Opening Bell"
        assert insights.worst.name == "Lunch Lull"

    def test_window_never_both_best_and_worst(self):
        trades = [
            make_trade(100, time(8, 0)),
            make_trade(-10, time(8, 10)),
            make_trade(-10, time(8, 20)),
        ]
        insights = timing_insights(trades)
        assert insights.best.name == "Opening Bell"
        assert insights.worst is None
