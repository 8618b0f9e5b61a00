"""Analysis report data models.

All of these are derived from a trade list on every analysis call and are
never persisted.
"""

from datetime import date
from typing import Literal, Optional

from pydantic import BaseModel, Field


InsightTopic = Literal["performance", "opportunity", "risk", "strategy", "timing", "default"]
ObservationTopic = Literal["consistency", "risk", "general", "performance", "strategy", "timing"]
Grade = Literal["A", "B", "C", "D"]

# Streaks at least this long are high impact
HIGH_IMPACT_STREAK_LENGTH = 5


class TagStat(BaseModel):
    """Aggregated performance of a single tag."""

    tag: str = Field(..., description="Category-qualified tag key")
    total_pnl: float = Field(..., description="Sum of P&L of tagged trades")
    trade_count: int = Field(..., ge=0, description="Number of tagged trades")
    win_count: int = Field(..., ge=0, description="Number of winning tagged trades")
    win_rate: float = Field(..., ge=0, le=100, description="Win rate percentage")

    model_config = {"frozen": True}


class Streak(BaseModel):
    """A trailing run of same-outcome trades."""

    type: Literal["win", "loss"] = Field(..., description="Streak outcome")
    length: int = Field(..., ge=1, description="Number of trades in the run")

    model_config = {"frozen": True}

    @property
    def is_high_impact(self) -> bool:
        return self.length >= HIGH_IMPACT_STREAK_LENGTH

    @property
    def impact(self) -> Literal["high", "low"]:
        return "high" if self.is_high_impact else "low"


class ActionableInsight(BaseModel):
    """A detected pattern paired with a recommendation."""

    pattern: str = Field(..., description="Observed pattern")
    recommendation: str = Field(..., description="Suggested action")
    related_tags: list[str] = Field(default_factory=list, description="Relevant tag keys")
    topic: InsightTopic = Field(default="default", description="Insight topic")

    model_config = {"frozen": True}


class KeyObservation(BaseModel):
    """A short observation about the trade history."""

    text: str = Field(..., description="Observation text")
    topic: ObservationTopic = Field(default="general", description="Observation topic")

    model_config = {"frozen": True}


class PerformanceGrade(BaseModel):
    """Overall letter grade with its canned summary."""

    grade: Grade = Field(..., description="Letter grade")
    summary: str = Field(..., description="Grade summary text")

    model_config = {"frozen": True}


class KeyMetrics(BaseModel):
    """Lifetime metrics. These are authoritative for a report."""

    consistency_score: int = Field(..., ge=0, le=10, description="1-10, 0 if too few trades")
    profit_factor: float = Field(..., ge=0, description="Gross profit / gross loss, inf without losses")
    win_rate: float = Field(..., ge=0, le=100, description="Win rate percentage")
    total_pnl: float = Field(..., description="Total P&L")
    trade_count: int = Field(..., ge=0, description="Number of trades")
    avg_win: float = Field(..., ge=0, description="Mean P&L of winning trades")
    avg_loss: float = Field(..., le=0, description="Mean P&L of losing trades (negative)")

    model_config = {"frozen": True, "ser_json_inf_nan": "constants"}


class TagPerformance(BaseModel):
    """Top profitable and unprofitable tags."""

    profitable: list[TagStat] = Field(default_factory=list)
    unprofitable: list[TagStat] = Field(default_factory=list)

    model_config = {"frozen": True}


class AnalysisResult(BaseModel):
    """Complete performance report for a trade list."""

    overall_summary: str
    strengths: list[str] = Field(default_factory=list)
    weaknesses: list[str] = Field(default_factory=list)
    actionable_insights: list[ActionableInsight] = Field(default_factory=list)
    key_observations: list[KeyObservation] = Field(default_factory=list)
    performance_grade: PerformanceGrade
    key_metrics: KeyMetrics
    tag_performance: TagPerformance = Field(default_factory=TagPerformance)

    model_config = {"frozen": True, "ser_json_inf_nan": "constants"}


class AnalysisPatch(BaseModel):
    """A partial analysis result, as produced by an external enrichment."""

    overall_summary: Optional[str] = None
    strengths: Optional[list[str]] = None
    weaknesses: Optional[list[str]] = None
    actionable_insights: Optional[list[ActionableInsight]] = None
    key_observations: Optional[list[KeyObservation]] = None
    performance_grade: Optional[PerformanceGrade] = None
    key_metrics: Optional[KeyMetrics] = None
    tag_performance: Optional[TagPerformance] = None

    model_config = {"frozen": True}


class SanitizedTrade(BaseModel):
    """Reduced trade projection that may leave the machine.

    Notes and photos are never part of it.
    """

    pnl: float
    pair: str
    type: Optional[Literal["long", "short"]] = None
    rating: Optional[int] = None
    day_of_week: int = Field(..., ge=0, le=6, description="0 = Sunday, 6 = Saturday")
    tags: list[str] = Field(default_factory=list)

    model_config = {"frozen": True}


class EnrichmentOutcome(BaseModel):
    """Result-or-error returned by an enrichment collaborator."""

    patch: Optional[AnalysisPatch] = None
    error: Optional[str] = None

    model_config = {"frozen": True}

    @property
    def ok(self) -> bool:
        return self.patch is not None and self.error is None

    @classmethod
    def success(cls, patch: AnalysisPatch) -> "EnrichmentOutcome":
        return cls(patch=patch)

    @classmethod
    def failure(cls, error: str) -> "EnrichmentOutcome":
        return cls(error=error)


# ==================== Timing ====================


class HourStat(BaseModel):
    """P&L aggregated over one hour of the day."""

    hour: int = Field(..., ge=0, le=23)
    pnl: float
    count: int = Field(..., ge=0)

    model_config = {"frozen": True}

    @property
    def avg_pnl(self) -> float:
        return self.pnl / self.count if self.count else 0.0


class HeatmapCell(BaseModel):
    """One weekday x hour cell of the profit map."""

    day: int = Field(..., ge=1, le=5, description="1 = Monday, 5 = Friday")
    hour: int = Field(..., ge=0, le=23)
    pnl: float
    trade_count: int = Field(..., ge=1)
    win_rate: float = Field(..., ge=0, le=100)

    model_config = {"frozen": True}


class TimeWindow(BaseModel):
    """A named intraday window, half-open ``[start, end)``."""

    name: str
    start: str = Field(..., pattern=r"^\d{2}:\d{2}$")
    end: str = Field(..., pattern=r"^\d{2}:\d{2}$")

    model_config = {"frozen": True}

    def contains(self, hhmm: str) -> bool:
        return self.start <= hhmm < self.end


class TimeWindowStat(BaseModel):
    """Aggregated performance inside a named time window."""

    name: str
    start: str
    end: str
    total_pnl: float
    win_count: int = Field(..., ge=0)
    trade_count: int = Field(..., ge=0)
    win_rate: float = Field(..., ge=0, le=100)

    model_config = {"frozen": True}


class TimingInsights(BaseModel):
    """Best and worst time windows."""

    best: Optional[TimeWindowStat] = None
    worst: Optional[TimeWindowStat] = None

    model_config = {"frozen": True}


class TrendSignal(BaseModel):
    """Fired when recent performance degrades against the lifetime baseline."""

    window: int
    recent_win_rate: float
    recent_profit_factor: float
    win_rate_drop: float

    model_config = {"frozen": True, "ser_json_inf_nan": "constants"}


class DailySummary(BaseModel):
    """Total P&L and trade count for one calendar day."""

    total_pnl: float
    trade_count: int = Field(..., ge=0)

    model_config = {"frozen": True}


class PeriodSummary(BaseModel):
    """P&L, trade count and win rate for one week, month or year."""

    label: str = Field(..., description="Period label, e.g. 2024-W09, 2024-03 or 2024")
    start: date = Field(..., description="First day of the period")
    total_pnl: float
    trade_count: int = Field(..., ge=0)
    win_rate: float = Field(..., ge=0, le=100)

    model_config = {"frozen": True}
