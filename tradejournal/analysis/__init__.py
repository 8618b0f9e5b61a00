"""Offline trading-performance analysis.

- tags: P&L attribution per tag
- timing: hour-of-day, weekday x hour and named time windows
- streaks: current win/loss streak
- trend: recent-window degradation
- grading: consistency score and A-D grade
- engine: composes everything into an AnalysisResult
"""

from tradejournal.analysis.engine import (
    MIN_TRADES_FOR_ANALYSIS,
    TradeAnalyzer,
    analyze,
    analyze_offline,
    merge_enrichment,
    sanitize_trades,
)
from tradejournal.analysis.messages import MessageCatalog, make_currency_formatter
from tradejournal.analysis.streaks import current_streak
from tradejournal.analysis.tags import attribute_tags, tag_performance
from tradejournal.analysis.timing import (
    find_golden_hour,
    time_window_stats,
    timing_insights,
    weekday_hour_heatmap,
)
from tradejournal.analysis.trend import detect_degradation

__all__ = [
    "MIN_TRADES_FOR_ANALYSIS",
    "TradeAnalyzer",
    "analyze",
    "analyze_offline",
    "merge_enrichment",
    "sanitize_trades",
    "MessageCatalog",
    "make_currency_formatter",
    "current_streak",
    "attribute_tags",
    "tag_performance",
    "find_golden_hour",
    "time_window_stats",
    "timing_insights",
    "weekday_hour_heatmap",
    "detect_degradation",
]
