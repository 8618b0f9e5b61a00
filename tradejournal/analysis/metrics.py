"""Lifetime trading metrics.

Win rate is measured over all trades (break-even trades count as non-wins),
profit factor is gross profit over gross loss magnitude.
"""

import math
from typing import Iterable, Sequence

from tradejournal.analysis.grading import consistency_score
from tradejournal.models import KeyMetrics, Trade


def win_rate(pnls: Sequence[float]) -> float:
    """Percentage of strictly positive results, 0 for an empty sequence."""
    if not pnls:
        return 0.0
    wins = sum(1 for pnl in pnls if pnl > 0)
    return wins * 100 / len(pnls)


def _gross(pnls: Sequence[float], scale: float = 1.0) -> tuple[float, float]:
    gross_profit = 0.0
    gross_loss = 0.0
    for pnl in pnls:
        if pnl > 0:
            gross_profit += pnl / scale
        elif pnl < 0:
            gross_loss += pnl / scale
    return gross_profit, gross_loss


def profit_factor(pnls: Iterable[float]) -> float:
    """Gross profit divided by gross loss magnitude.

    Returns ``math.inf`` when there are no losing results.
    """
    pnls = list(pnls)
    gross_profit, gross_loss = _gross(pnls)
    if math.isinf(gross_profit) or math.isinf(gross_loss):
        # The sums overflowed; the ratio survives scaling by the largest result
        gross_profit, gross_loss = _gross(pnls, max(abs(pnl) for pnl in pnls))
    if gross_loss == 0:
        return math.inf
    return abs(gross_profit / gross_loss)


def lifetime_metrics(trades: Sequence[Trade]) -> KeyMetrics:
    """Calculate the authoritative key metrics of a trade list.

    Args:
        trades: Trades in any order.

    Returns:
        KeyMetrics for the whole list.
    """
    pnls = [trade.pnl for trade in trades]
    wins = [pnl for pnl in pnls if pnl > 0]
    losses = [pnl for pnl in pnls if pnl < 0]

    return KeyMetrics(
        consistency_score=consistency_score(pnls),
        profit_factor=profit_factor(pnls),
        win_rate=win_rate(pnls),
        total_pnl=sum(pnls),
        trade_count=len(pnls),
        avg_win=sum(wins) / len(wins) if wins else 0.0,
        avg_loss=sum(losses) / len(losses) if losses else 0.0,
    )
