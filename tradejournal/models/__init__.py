"""Data models for Trade Journal."""

from tradejournal.models.trade import (
    Tag,
    TagCategory,
    Trade,
    TradeTags,
    generate_trade_id,
    sort_chronologically,
)
from tradejournal.models.analysis import (
    ActionableInsight,
    AnalysisPatch,
    AnalysisResult,
    DailySummary,
    EnrichmentOutcome,
    HeatmapCell,
    HourStat,
    KeyMetrics,
    KeyObservation,
    PerformanceGrade,
    PeriodSummary,
    SanitizedTrade,
    Streak,
    TagPerformance,
    TagStat,
    TimeWindow,
    TimeWindowStat,
    TimingInsights,
    TrendSignal,
)

__all__ = [
    "Tag",
    "TagCategory",
    "Trade",
    "TradeTags",
    "generate_trade_id",
    "sort_chronologically",
    "ActionableInsight",
    "AnalysisPatch",
    "AnalysisResult",
    "DailySummary",
    "EnrichmentOutcome",
    "HeatmapCell",
    "HourStat",
    "KeyMetrics",
    "KeyObservation",
    "PerformanceGrade",
    "PeriodSummary",
    "SanitizedTrade",
    "Streak",
    "TagPerformance",
    "TagStat",
    "TimeWindow",
    "TimeWindowStat",
    "TimingInsights",
    "TrendSignal",
]
