"""Time-of-day attribution.

Only trades with a recorded time take part in any of these aggregations.
"""

from typing import Iterable, Optional, Sequence

from tradejournal.models import (
    HeatmapCell,
    HourStat,
    TimeWindow,
    TimeWindowStat,
    TimingInsights,
    Trade,
)


MIN_TRADES_PER_HOUR = 5
MIN_TRADES_PER_WINDOW = 3

# Monday (1) to Friday (5)
TRADING_WEEK = (1, 5)
# 07:00 to 17:00 inclusive
TRADING_HOURS = (7, 17)

DEFAULT_TIME_WINDOWS: tuple[TimeWindow, ...] = (
    TimeWindow(name="Opening Bell", start="08:00", end="10:00"),
    TimeWindow(name="Mid-Morning", start="10:00", end="12:00"),
    TimeWindow(name="Lunch Lull", start="12:00", end="14:00"),
    TimeWindow(name="Afternoon Session", start="14:00", end="16:00"),
    TimeWindow(name="Closing Bell", start="16:00", end="18:00"),
)


def _timed(trades: Iterable[Trade]) -> list[Trade]:
    return [trade for trade in trades if trade.time is not None]


def hourly_stats(trades: Iterable[Trade]) -> dict[int, HourStat]:
    """Total P&L and trade count per hour of the day."""
    totals: dict[int, tuple[float, int]] = {}
    for trade in _timed(trades):
        pnl, count = totals.get(trade.time.hour, (0.0, 0))
        totals[trade.time.hour] = (pnl + trade.pnl, count + 1)
    return {
        hour: HourStat(hour=hour, pnl=pnl, count=count)
        for hour, (pnl, count) in sorted(totals.items())
    }


def find_golden_hour(
    trades: Iterable[Trade], min_count: int = MIN_TRADES_PER_HOUR
) -> Optional[HourStat]:
    """Find the hour with the best average P&L.

    Only hours with at least ``min_count`` trades are considered, and the
    result is reported only when its average P&L is positive.
    """
    candidates = [stat for stat in hourly_stats(trades).values() if stat.count >= min_count]
    if not candidates:
        return None
    best = max(candidates, key=lambda s: s.avg_pnl)
    return best if best.avg_pnl > 0 else None


def weekday_hour_heatmap(
    trades: Iterable[Trade],
    start_hour: int = TRADING_HOURS[0],
    end_hour: int = TRADING_HOURS[1],
) -> list[HeatmapCell]:
    """Aggregate P&L on a weekday x hour grid.

    Only Monday to Friday and hours in ``[start_hour, end_hour]`` are kept.
    Cells without trades are omitted.

    Returns:
        Cells ordered by day, then hour.
    """
    first_day, last_day = TRADING_WEEK
    grid: dict[tuple[int, int], list] = {}
    for trade in _timed(trades):
        day = trade.date.isoweekday()
        hour = trade.time.hour
        if not first_day <= day <= last_day or not start_hour <= hour <= end_hour:
            continue
        cell = grid.setdefault((day, hour), [0.0, 0, 0])
        cell[0] += trade.pnl
        cell[1] += 1
        if trade.pnl > 0:
            cell[2] += 1

    return [
        HeatmapCell(
            day=day,
            hour=hour,
            pnl=pnl,
            trade_count=count,
            win_rate=wins * 100 / count,
        )
        for (day, hour), (pnl, count, wins) in sorted(grid.items())
    ]


def time_window_stats(
    trades: Iterable[Trade],
    windows: Sequence[TimeWindow] = DEFAULT_TIME_WINDOWS,
) -> list[TimeWindowStat]:
    """Aggregate trades into named time windows.

    Each trade goes into the first window whose half-open interval contains
    its time, or into none.

    Returns:
        One entry per window, in window order, including empty windows.
    """
    totals = [[0.0, 0, 0] for _ in windows]
    for trade in _timed(trades):
        hhmm = trade.time_str
        for index, window in enumerate(windows):
            if window.contains(hhmm):
                totals[index][0] += trade.pnl
                totals[index][1] += 1
                if trade.pnl > 0:
                    totals[index][2] += 1
                break

    return [
        TimeWindowStat(
            name=window.name,
            start=window.start,
            end=window.end,
            total_pnl=pnl,
            win_count=wins,
            trade_count=count,
            win_rate=wins * 100 / count if count > 0 else 0.0,
        )
        for window, (pnl, count, wins) in zip(windows, totals)
    ]


def timing_insights(
    trades: Iterable[Trade],
    windows: Sequence[TimeWindow] = DEFAULT_TIME_WINDOWS,
    min_trades: int = MIN_TRADES_PER_WINDOW,
) -> TimingInsights:
    """Pick the best and worst time windows.

    The best window has the highest win rate among profitable windows; the
    worst has the most negative total among windows that lose money or win
    less than half the time. A window is never reported as both.
    """
    valid = [stat for stat in time_window_stats(trades, windows) if stat.trade_count >= min_trades]

    profitable = [stat for stat in valid if stat.total_pnl > 0]
    best = max(profitable, key=lambda s: s.win_rate) if profitable else None

    weak = [stat for stat in valid if stat.win_rate < 50 or stat.total_pnl < 0]
    worst = min(weak, key=lambda s: s.total_pnl) if weak else None

    if best is not None and worst is not None and worst.name == best.name:
        worst = None
    return TimingInsights(best=best, worst=worst)
