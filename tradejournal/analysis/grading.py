"""Consistency score and performance grade."""

import math
from typing import Literal, Optional, Sequence

from tradejournal.analysis.messages import MessageCatalog, default_catalog
from tradejournal.models import KeyMetrics, PerformanceGrade


MIN_TRADES_FOR_CONSISTENCY = 5

# Weights of the grade sub-scores
PROFIT_FACTOR_WEIGHT = 0.45
WIN_RATE_WEIGHT = 0.35
CONSISTENCY_WEIGHT = 0.20


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def consistency_score(pnls: Sequence[float]) -> int:
    """Score P&L volatility relative to its magnitude on a 1-10 scale.

    Uses the coefficient of variation (population standard deviation over
    mean absolute P&L) mapped through ``10 * exp(-0.6 * cv)``. A CV of 0.5
    or less scores 7 or more, a CV of 2 or more scores 3 or less.

    Args:
        pnls: Per-trade P&L values.

    Returns:
        Score from 1 to 10, or 0 when there are fewer than 5 trades.
    """
    if len(pnls) < MIN_TRADES_FOR_CONSISTENCY:
        return 0

    # CV is scale invariant; scaling to [-1, 1] keeps the squares finite
    scale = max(abs(pnl) for pnl in pnls)
    if scale == 0:
        return 1

    count = len(pnls)
    scaled = [pnl / scale for pnl in pnls]
    mean = sum(scaled) / count
    std_dev = math.sqrt(sum((x - mean) ** 2 for x in scaled) / count)
    avg_abs = sum(abs(x) for x in scaled) / count

    cv = std_dev / avg_abs
    score = _round_half_up(10 * math.exp(-0.6 * cv))
    return max(1, min(10, score))


def profit_factor_score(profit_factor: float) -> int:
    if not math.isfinite(profit_factor):
        return 10
    if profit_factor > 2:
        return 10
    if profit_factor > 1.5:
        return 8
    if profit_factor > 1.2:
        return 6
    if profit_factor > 1:
        return 4
    return 2


def win_rate_score(win_rate: float) -> int:
    if win_rate > 65:
        return 10
    if win_rate > 55:
        return 8
    if win_rate > 50:
        return 6
    if win_rate > 40:
        return 4
    return 2


def weighted_score(metrics: KeyMetrics) -> float:
    """Weighted total of the profit factor, win rate and consistency scores."""
    return (
        profit_factor_score(metrics.profit_factor) * PROFIT_FACTOR_WEIGHT
        + win_rate_score(metrics.win_rate) * WIN_RATE_WEIGHT
        + metrics.consistency_score * CONSISTENCY_WEIGHT
    )


def grade_for_score(score: float) -> Literal["A", "B", "C", "D"]:
    if score > 8.5:
        return "A"
    if score > 7:
        return "B"
    if score > 5:
        return "C"
    return "D"


def performance_grade(
    metrics: KeyMetrics, catalog: Optional[MessageCatalog] = None
) -> PerformanceGrade:
    """Grade a set of key metrics A-D.

    Args:
        metrics: Lifetime key metrics.
        catalog: Message catalog providing the grade summaries.

    Returns:
        The letter grade and its summary text.
    """
    catalog = catalog or default_catalog()
    grade = grade_for_score(weighted_score(metrics))
    return PerformanceGrade(grade=grade, summary=catalog.text(f"grade.summary_{grade.lower()}"))
