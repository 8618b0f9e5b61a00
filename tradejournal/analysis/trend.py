"""Recent-performance degradation against the lifetime baseline."""

import math
from typing import Optional, Sequence

from tradejournal.analysis.metrics import profit_factor, win_rate
from tradejournal.models import Trade, TrendSignal, sort_chronologically


# Number of most recent trades compared with the lifetime baseline
TREND_WINDOW = 20

MAX_WIN_RATE_DROP = 15.0
MIN_PROFIT_FACTOR_RATIO = 0.7


def detect_degradation(
    trades: Sequence[Trade],
    lifetime_win_rate: float,
    lifetime_profit_factor: float,
    window: int = TREND_WINDOW,
) -> Optional[TrendSignal]:
    """Check whether the most recent trades underperform the lifetime stats.

    Needs at least twice ``window`` trades so the recent window is never the
    whole history. Fires when the win rate dropped by more than 15 points, or
    when a finite lifetime profit factor fell below 70% in the recent window.

    Args:
        trades: All trades, any order.
        lifetime_win_rate: Win rate over all trades.
        lifetime_profit_factor: Profit factor over all trades.
        window: Size of the recent window.

    Returns:
        The signal when degradation is detected, otherwise None.
    """
    if len(trades) < window * 2:
        return None

    recent = [trade.pnl for trade in sort_chronologically(trades, newest_first=True)[:window]]
    recent_win_rate = win_rate(recent)
    recent_profit_factor = profit_factor(recent)
    drop = lifetime_win_rate - recent_win_rate

    degraded = drop > MAX_WIN_RATE_DROP or (
        math.isfinite(lifetime_profit_factor)
        and recent_profit_factor < lifetime_profit_factor * MIN_PROFIT_FACTOR_RATIO
    )
    if not degraded:
        return None

    return TrendSignal(
        window=window,
        recent_win_rate=recent_win_rate,
        recent_profit_factor=recent_profit_factor,
        win_rate_drop=drop,
    )
