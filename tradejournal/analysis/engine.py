"""Performance analysis orchestrator.

Builds an AnalysisResult from a trade list. The offline computation is
always run first and its key metrics, grade and tag performance are
authoritative: an optional enrichment collaborator may add narrative, but
those three fields are re-asserted from the offline result after merging.
"""

import asyncio
import logging
import math
from typing import Awaitable, Callable, Optional, Sequence

from tradejournal.analysis.grading import performance_grade
from tradejournal.analysis.messages import (
    MessageCatalog,
    default_catalog,
    format_percent,
    make_currency_formatter,
)
from tradejournal.analysis.metrics import lifetime_metrics
from tradejournal.analysis.tags import (
    REPORT_TOP_N,
    attribute_tags,
    format_tag,
    significant_tags,
    top_profitable,
    top_unprofitable,
    worst_tag_in_category,
)
from tradejournal.analysis.timing import find_golden_hour
from tradejournal.analysis.trend import detect_degradation
from tradejournal.errors import InsufficientTradesError
from tradejournal.models import (
    ActionableInsight,
    AnalysisPatch,
    AnalysisResult,
    EnrichmentOutcome,
    KeyMetrics,
    KeyObservation,
    SanitizedTrade,
    TagCategory,
    TagPerformance,
    TagStat,
    Trade,
    sort_chronologically,
)

logger = logging.getLogger(__name__)


MIN_TRADES_FOR_ANALYSIS = 20
MAX_TRADES_FOR_ENRICHMENT = 5000

# Strength / weakness thresholds
STRONG_WIN_RATE = 55
WEAK_WIN_RATE = 45
STRONG_PROFIT_FACTOR = 1.5
WEAK_PROFIT_FACTOR = 1.0

Enricher = Callable[[list[SanitizedTrade]], Awaitable[EnrichmentOutcome]]
CurrencyFormatter = Callable[[float], str]


def sanitize_trades(
    trades: Sequence[Trade], limit: int = MAX_TRADES_FOR_ENRICHMENT
) -> list[SanitizedTrade]:
    """Project trades to the reduced shape sent to enrichment.

    Notes and photos are dropped; the most recent ``limit`` trades are kept.
    """
    return [
        SanitizedTrade(
            pnl=trade.pnl,
            pair=trade.pair,
            type=trade.type,
            rating=trade.rating,
            day_of_week=trade.date.isoweekday() % 7,
            tags=trade.tags.keys(),
        )
        for trade in sort_chronologically(trades, newest_first=True)[:limit]
    ]


def _tag_insights(
    significant: list[TagStat],
    catalog: MessageCatalog,
    format_currency: CurrencyFormatter,
) -> list[ActionableInsight]:
    insights = []
    if not significant:
        return insights

    best = max(significant, key=lambda s: s.total_pnl)
    if best.total_pnl > 0:
        insights.append(ActionableInsight(
            topic="strategy",
            pattern=catalog.text(
                "offline.strength_tag",
                tag=format_tag(best.tag),
                pnl=format_currency(best.total_pnl),
            ),
            recommendation=catalog.text("offline.strength_tag_rec"),
            related_tags=[best.tag],
        ))

    worst = min(significant, key=lambda s: s.total_pnl)
    if worst.total_pnl < 0:
        insights.append(ActionableInsight(
            topic="strategy",
            pattern=catalog.text(
                "offline.weakness_tag",
                tag=format_tag(worst.tag),
                pnl=format_currency(worst.total_pnl),
            ),
            recommendation=catalog.text("offline.weakness_tag_rec"),
            related_tags=[worst.tag],
        ))

    mistake = worst_tag_in_category(significant, TagCategory.MISTAKES)
    if mistake is not None and mistake.total_pnl < 0:
        insights.append(ActionableInsight(
            topic="risk",
            pattern=catalog.text(
                "offline.pattern_mistake",
                mistake=format_tag(mistake.tag),
                pnl=format_currency(mistake.total_pnl),
            ),
            recommendation=catalog.text("offline.recommendation_mistake"),
            related_tags=[mistake.tag],
        ))
    return insights


def _strengths(metrics: KeyMetrics, catalog: MessageCatalog) -> list[str]:
    strengths = []
    if metrics.win_rate > STRONG_WIN_RATE:
        strengths.append(catalog.text(
            "offline.strength_win_rate", win_rate=format_percent(metrics.win_rate)
        ))
    if metrics.profit_factor > STRONG_PROFIT_FACTOR:
        pf = f"{metrics.profit_factor:.2f}" if math.isfinite(metrics.profit_factor) else "∞"
        strengths.append(catalog.text("offline.strength_profit_factor", profit_factor=pf))
    return strengths


def _weaknesses(metrics: KeyMetrics, catalog: MessageCatalog) -> list[str]:
    weaknesses = []
    if metrics.win_rate < WEAK_WIN_RATE:
        weaknesses.append(catalog.text(
            "offline.weakness_win_rate", win_rate=format_percent(metrics.win_rate)
        ))
    if metrics.profit_factor < WEAK_PROFIT_FACTOR and math.isfinite(metrics.profit_factor):
        weaknesses.append(catalog.text(
            "offline.weakness_profit_factor", profit_factor=f"{metrics.profit_factor:.2f}"
        ))
    return weaknesses


def risk_profile(avg_win: float, avg_loss: float, win_rate: float) -> str:
    """Classify the reward/risk ratio and win rate into a risk profile.

    Returns:
        One of sniper, scalper, high_risk, effective, balanced.
    """
    rr = abs(avg_win / avg_loss) if avg_loss != 0 else math.inf
    if rr > 2.5 and win_rate < 45:
        return "sniper"
    if rr < 1.5 and win_rate > 55:
        return "scalper"
    if rr < 1.2 and win_rate < 45:
        return "high_risk"
    if rr > 2 and win_rate > 50:
        return "effective"
    return "balanced"


def _risk_observation(metrics: KeyMetrics, catalog: MessageCatalog) -> KeyObservation:
    profile = risk_profile(metrics.avg_win, metrics.avg_loss, metrics.win_rate)
    rr = abs(metrics.avg_win / metrics.avg_loss) if metrics.avg_loss != 0 else math.inf
    return KeyObservation(
        topic="risk",
        text=catalog.text(
            f"offline.risk_profile_{profile}",
            rr=f"{rr:.1f}" if math.isfinite(rr) else "N/A",
            win_rate=format_percent(metrics.win_rate),
        ),
    )


def analyze_offline(
    trades: Sequence[Trade],
    catalog: Optional[MessageCatalog] = None,
    format_currency: Optional[CurrencyFormatter] = None,
) -> AnalysisResult:
    """Analyze trades without any external service.

    Args:
        trades: Trades in any order.
        catalog: Message catalog for the report text.
        format_currency: Formatter for money amounts in the text.

    Returns:
        The complete report.
    """
    catalog = catalog or default_catalog()
    format_currency = format_currency or make_currency_formatter()

    metrics = lifetime_metrics(trades)
    grade = performance_grade(metrics, catalog)

    significant = significant_tags(attribute_tags(trades))
    tags = TagPerformance(
        profitable=top_profitable(significant, REPORT_TOP_N),
        unprofitable=top_unprofitable(significant, REPORT_TOP_N),
    )

    insights = _tag_insights(significant, catalog, format_currency)

    trend = detect_degradation(trades, metrics.win_rate, metrics.profit_factor)
    if trend is not None:
        insights.append(ActionableInsight(
            topic="performance",
            pattern=catalog.text(
                "offline.trend_pattern",
                count=trend.window,
                win_rate=format_percent(trend.recent_win_rate),
            ),
            recommendation=catalog.text("offline.trend_rec"),
        ))

    golden = find_golden_hour(trades)
    if golden is not None:
        insights.append(ActionableInsight(
            topic="timing",
            pattern=catalog.text(
                "offline.golden_hour_pattern",
                start_time=f"{golden.hour:02d}:00",
                end_time=f"{(golden.hour + 1) % 24:02d}:00",
                avg_pnl=format_currency(golden.avg_pnl),
            ),
            recommendation=catalog.text("offline.golden_hour_rec"),
        ))

    observations = [
        KeyObservation(
            topic="general",
            text=catalog.text(
                "offline.observation_overall",
                trade_count=metrics.trade_count,
                total_pnl=format_currency(metrics.total_pnl),
            ),
        ),
        _risk_observation(metrics, catalog),
    ]

    summary = catalog.text(
        "offline.summary",
        result=catalog.text("common.profitable" if metrics.total_pnl > 0 else "common.unprofitable"),
        trade_count=metrics.trade_count,
        win_rate=format_percent(metrics.win_rate),
    )

    return AnalysisResult(
        overall_summary=summary,
        strengths=_strengths(metrics, catalog),
        weaknesses=_weaknesses(metrics, catalog),
        actionable_insights=insights,
        key_observations=observations,
        performance_grade=grade,
        key_metrics=metrics,
        tag_performance=tags,
    )


def _append_new(existing: list, extra: Optional[list]) -> list:
    merged = list(existing)
    for item in extra or []:
        if item not in merged:
            merged.append(item)
    return merged


def merge_enrichment(offline: AnalysisResult, patch: AnalysisPatch) -> AnalysisResult:
    """Merge enrichment narrative into an offline result.

    The summary is replaced when the patch provides one; list fields are
    appended. Key metrics, grade and tag performance always come from the
    offline result, whatever the patch contains.
    """
    merged = offline.model_copy(update={
        "overall_summary": patch.overall_summary or offline.overall_summary,
        "strengths": _append_new(offline.strengths, patch.strengths),
        "weaknesses": _append_new(offline.weaknesses, patch.weaknesses),
        "actionable_insights": _append_new(offline.actionable_insights, patch.actionable_insights),
        "key_observations": _append_new(offline.key_observations, patch.key_observations),
        "performance_grade": patch.performance_grade or offline.performance_grade,
        "key_metrics": patch.key_metrics or offline.key_metrics,
        "tag_performance": patch.tag_performance or offline.tag_performance,
    })
    return merged.model_copy(update={
        "key_metrics": offline.key_metrics,
        "performance_grade": offline.performance_grade,
        "tag_performance": offline.tag_performance,
    })


class TradeAnalyzer:
    """Runs the offline analysis and, optionally, an enrichment step."""

    def __init__(
        self,
        min_trades: int = MIN_TRADES_FOR_ANALYSIS,
        enricher: Optional[Enricher] = None,
        catalog: Optional[MessageCatalog] = None,
        format_currency: Optional[CurrencyFormatter] = None,
    ):
        """Initialize the analyzer.

        Args:
            min_trades: Minimum number of trades required by ``analyze``.
            enricher: Optional async collaborator returning an
                EnrichmentOutcome for a sanitized trade list.
            catalog: Message catalog for the report text.
            format_currency: Formatter for money amounts in the text.
        """
        self.min_trades = min_trades
        self.enricher = enricher
        self.catalog = catalog or default_catalog()
        self.format_currency = format_currency or make_currency_formatter()

    def _check_trade_count(self, trades: Sequence[Trade]) -> None:
        if len(trades) < self.min_trades:
            raise InsufficientTradesError(self.min_trades, len(trades))

    async def _enrich(self, trades: Sequence[Trade]) -> EnrichmentOutcome:
        try:
            outcome = await self.enricher(sanitize_trades(trades))
        except Exception as e:
            return EnrichmentOutcome.failure(f"{type(e).__name__}: {e}")
        if not isinstance(outcome, EnrichmentOutcome):
            return EnrichmentOutcome.failure("enricher returned an unexpected value")
        return outcome

    async def analyze_async(self, trades: Sequence[Trade]) -> AnalysisResult:
        """Analyze trades, merging enrichment output when available.

        Raises:
            InsufficientTradesError: If fewer than ``min_trades`` trades are given.
        """
        self._check_trade_count(trades)
        offline = analyze_offline(trades, self.catalog, self.format_currency)
        if self.enricher is None:
            return offline

        outcome = await self._enrich(trades)
        if not outcome.ok:
            logger.warning("Enrichment unavailable, using offline analysis: %s", outcome.error)
            return offline
        logger.debug("Merging enrichment into offline analysis")
        return merge_enrichment(offline, outcome.patch)

    def analyze(self, trades: Sequence[Trade]) -> AnalysisResult:
        """Synchronous version of ``analyze_async``."""
        if self.enricher is None:
            self._check_trade_count(trades)
            return analyze_offline(trades, self.catalog, self.format_currency)
        return asyncio.run(self.analyze_async(trades))


def analyze(
    trades: Sequence[Trade],
    enricher: Optional[Enricher] = None,
    min_trades: int = MIN_TRADES_FOR_ANALYSIS,
    catalog: Optional[MessageCatalog] = None,
    format_currency: Optional[CurrencyFormatter] = None,
) -> AnalysisResult:
    """Analyze a trade list. See TradeAnalyzer."""
    analyzer = TradeAnalyzer(
        min_trades=min_trades,
        enricher=enricher,
        catalog=catalog,
        format_currency=format_currency,
    )
    return analyzer.analyze(trades)
