"""Journal helpers: tag and pair suggestions, tag filtering, period summaries."""

from collections import Counter
from datetime import date, timedelta
from typing import Iterable, Literal, Sequence

from tradejournal.models import DailySummary, PeriodSummary, Trade


MAX_TAG_SUGGESTIONS = 3
MIN_TAGGED_TRADES_FOR_SUGGESTIONS = 2
# A pair is learned once it has been used more than twice
MIN_PAIR_USES = 3

Period = Literal["week", "month", "year"]


def suggest_tags_for_pair(
    trades: Iterable[Trade], pair: str, limit: int = MAX_TAG_SUGGESTIONS
) -> list[str]:
    """Suggest the tags most often used with a pair.

    Args:
        trades: Journal trades.
        pair: Instrument symbol, any case.
        limit: Maximum number of suggestions.

    Returns:
        Tag keys, most frequent first. Empty unless at least two tagged
        trades of the pair exist.
    """
    pair = pair.strip().upper()
    if not pair:
        return []

    tagged = [t for t in trades if t.pair == pair and not t.tags.is_empty()]
    if len(tagged) < MIN_TAGGED_TRADES_FOR_SUGGESTIONS:
        return []

    frequency = Counter(key for trade in tagged for key in trade.tags.keys())
    return [key for key, _ in frequency.most_common(limit)]


def learned_pairs(trades: Iterable[Trade], min_uses: int = MIN_PAIR_USES) -> list[str]:
    """Pairs used often enough to be offered as suggestions, most used first."""
    counts = Counter(trade.pair for trade in trades)
    return [pair for pair, count in counts.most_common() if count >= min_uses]


def filter_by_tags(trades: Iterable[Trade], selected: Sequence[str]) -> list[Trade]:
    """Keep the trades that carry every selected tag.

    A selected tag matches either a full key (``strategy:Breakout``) or a
    bare value (``Breakout``) in any category. No selection keeps everything.
    """
    selected = [tag for tag in selected if tag]
    if not selected:
        return list(trades)

    kept = []
    for trade in trades:
        labels = set()
        for tag in trade.tags.flatten():
            labels.add(tag.key)
            labels.add(tag.value)
        if all(tag in labels for tag in selected):
            kept.append(trade)
    return kept


def daily_summaries(trades: Iterable[Trade]) -> dict[date, DailySummary]:
    """Total P&L and trade count per calendar day, in date order."""
    totals: dict[date, tuple[float, int]] = {}
    for trade in trades:
        pnl, count = totals.get(trade.date, (0.0, 0))
        totals[trade.date] = (pnl + trade.pnl, count + 1)
    return {
        day: DailySummary(total_pnl=pnl, trade_count=count)
        for day, (pnl, count) in sorted(totals.items())
    }


def period_start(day: date, period: Period) -> date:
    """First day of the ISO week (Monday), month or year containing ``day``."""
    if period == "week":
        return day - timedelta(days=day.weekday())
    if period == "month":
        return day.replace(day=1)
    if period == "year":
        return day.replace(month=1, day=1)
    raise ValueError(f"Unknown period: {period}")


def _period_label(start: date, period: Period) -> str:
    if period == "week":
        year, week, _ = start.isocalendar()
        return f"{year}-W{week:02d}"
    if period == "month":
        return start.strftime("%Y-%m")
    return str(start.year)


def period_summaries(trades: Iterable[Trade], period: Period) -> list[PeriodSummary]:
    """P&L, trade count and win rate per week, month or year.

    Weeks are ISO weeks starting on Monday. Periods without trades are left
    out.

    Args:
        trades: Trades in any order.
        period: ``week``, ``month`` or ``year``.

    Returns:
        Summaries in chronological order.
    """
    totals: dict[date, list] = {}
    for trade in trades:
        entry = totals.setdefault(period_start(trade.date, period), [0.0, 0, 0])
        entry[0] += trade.pnl
        entry[1] += 1
        if trade.pnl > 0:
            entry[2] += 1

    return [
        PeriodSummary(
            label=_period_label(start, period),
            start=start,
            total_pnl=pnl,
            trade_count=count,
            win_rate=wins * 100 / count,
        )
        for start, (pnl, count, wins) in sorted(totals.items())
    ]


def all_tag_keys(trades: Sequence[Trade]) -> list[str]:
    """Every distinct tag key used in the journal, sorted."""
    return sorted({key for trade in trades for key in trade.tags.keys()})
