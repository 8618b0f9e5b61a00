"""Tag attribution: P&L and win rate per tag."""

from typing import Iterable, Mapping, Optional

from tradejournal.models import TagCategory, TagPerformance, TagStat, Trade


# Tags used on fewer trades than this are too noisy to rank
MIN_TAG_TRADES = 3

SUMMARY_TOP_N = 3
REPORT_TOP_N = 5


def _tag_win_rate(win_count: int, trade_count: int) -> float:
    return win_count * 100 / trade_count if trade_count > 0 else 0.0


def attribute_tags(trades: Iterable[Trade]) -> dict[str, TagStat]:
    """Aggregate P&L per tag across all tag categories.

    A trade contributes once to every tag it carries.

    Args:
        trades: Trades in any order.

    Returns:
        Mapping of tag key (``category:value``) to its statistics.
    """
    totals: dict[str, list] = {}
    for trade in trades:
        for key in dict.fromkeys(trade.tags.keys()):
            entry = totals.setdefault(key, [0.0, 0, 0])
            entry[0] += trade.pnl
            entry[1] += 1
            if trade.pnl > 0:
                entry[2] += 1

    return {
        key: TagStat(
            tag=key,
            total_pnl=total_pnl,
            trade_count=trade_count,
            win_count=win_count,
            win_rate=_tag_win_rate(win_count, trade_count),
        )
        for key, (total_pnl, trade_count, win_count) in totals.items()
    }


def significant_tags(
    stats: Mapping[str, TagStat], min_trades: int = MIN_TAG_TRADES
) -> list[TagStat]:
    """Tags with enough trades to be ranked."""
    return [stat for stat in stats.values() if stat.trade_count >= min_trades]


def top_profitable(stats: Iterable[TagStat], n: int = REPORT_TOP_N) -> list[TagStat]:
    """Profitable tags, highest total P&L first."""
    profitable = [stat for stat in stats if stat.total_pnl > 0]
    return sorted(profitable, key=lambda s: s.total_pnl, reverse=True)[:n]


def top_unprofitable(stats: Iterable[TagStat], n: int = REPORT_TOP_N) -> list[TagStat]:
    """Losing tags, most negative total P&L first."""
    unprofitable = [stat for stat in stats if stat.total_pnl < 0]
    return sorted(unprofitable, key=lambda s: s.total_pnl)[:n]


def tag_performance(
    trades: Iterable[Trade],
    n: int = REPORT_TOP_N,
    min_trades: int = MIN_TAG_TRADES,
) -> TagPerformance:
    """Top-n profitable and unprofitable significant tags."""
    significant = significant_tags(attribute_tags(trades), min_trades)
    return TagPerformance(
        profitable=top_profitable(significant, n),
        unprofitable=top_unprofitable(significant, n),
    )


def worst_tag_in_category(
    stats: Iterable[TagStat], category: TagCategory
) -> Optional[TagStat]:
    """The tag of a category with the lowest total P&L, if any."""
    prefix = f"{category.value}:"
    candidates = [stat for stat in stats if stat.tag.startswith(prefix)]
    if not candidates:
        return None
    return min(candidates, key=lambda s: s.total_pnl)


def format_tag(key: str) -> str:
    """Display form of a tag key, without its category prefix."""
    _, sep, value = key.partition(":")
    return value if sep else key
