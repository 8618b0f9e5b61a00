"""Current win/loss streak detection."""

from typing import Iterable, Optional

from tradejournal.models import Streak, Trade, sort_chronologically


# Minimum run length reported as a streak
STREAK_THRESHOLD = 3


def current_streak(trades: Iterable[Trade]) -> Optional[Streak]:
    """Find the trailing run of same-outcome trades.

    Trades are ordered by date and time first, so the input order does not
    matter. A break-even trade ends a run.

    Args:
        trades: Trades in any order.

    Returns:
        The streak, or None when fewer than 3 trades trail with the same
        outcome.
    """
    ordered = sort_chronologically(trades)
    if len(ordered) < STREAK_THRESHOLD:
        return None

    last_pnl = ordered[-1].pnl
    if last_pnl == 0:
        return None
    is_win = last_pnl > 0

    length = 0
    for trade in reversed(ordered):
        if (trade.pnl > 0) if is_win else (trade.pnl < 0):
            length += 1
        else:
            break

    if length < STREAK_THRESHOLD:
        return None
    return Streak(type="win" if is_win else "loss", length=length)
