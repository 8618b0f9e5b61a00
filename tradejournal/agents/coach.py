"""Trading coach agent.

Turns a sanitized trade list into narrative feedback: a summary, strengths,
weaknesses, insights and observations. Metrics and the grade are never taken
from the agent; the analysis engine computes those itself.
"""

import asyncio
import json
import logging
from typing import Optional, get_args

from pydantic import BaseModel, Field, ValidationError

from tradejournal.agents.base import create_agent, get_api_key, run_agent_async
from tradejournal.models import (
    ActionableInsight,
    AnalysisPatch,
    EnrichmentOutcome,
    KeyObservation,
    SanitizedTrade,
)
from tradejournal.models.analysis import ObservationTopic

logger = logging.getLogger(__name__)


DEFAULT_TIMEOUT = 60.0

COACH_INSTRUCTIONS = """You are an expert trading coach and performance analyst.
Your task is to analyze a list of trades provided as JSON data and identify key
patterns, strengths and weaknesses, and provide actionable recommendations for
improvement.

You must be objective, data-driven and encouraging. Focus on psychological and
strategic aspects of trading based on the provided tags (emotions, mistakes,
strategy, etc.). The user is trying to improve their trading discipline and
profitability.

About the data:
- Tags are "category:value" strings.
- day_of_week is a number where Sunday is 0, Monday is 1, and so on.

Always provide:
- A brief, encouraging overall summary
- 3-5 specific, data-backed strengths
- 3-5 weaknesses, phrased constructively
- 2-4 actionable insights, each a recurring pattern with a concrete
  recommendation and the most relevant tags
- 2-3 other observations, each with a topic of risk, timing, strategy,
  consistency or general
"""

_OBSERVATION_TOPICS = frozenset(get_args(ObservationTopic))


class CoachInsight(BaseModel):
    """A pattern the coach found, with a recommendation."""

    pattern: str = Field(..., description="A recurring pattern observed in the trades")
    recommendation: str = Field(..., description="A concrete action addressing the pattern")
    related_tags: list[str] = Field(..., description="Tags most relevant to the pattern")


class CoachObservation(BaseModel):
    """A single concise observation."""

    text: str = Field(..., description="The observation")
    topic: str = Field(..., description="risk, timing, strategy, consistency or general")


class CoachReport(BaseModel):
    """Structured output of the trading coach agent."""

    overall_summary: str = Field(..., description="High-level overview of the performance")
    strengths: list[str] = Field(..., description="Key strengths")
    weaknesses: list[str] = Field(..., description="Key areas for improvement")
    actionable_insights: list[CoachInsight] = Field(..., description="Patterns and recommendations")
    key_observations: list[CoachObservation] = Field(..., description="Other observations")

    def to_patch(self) -> AnalysisPatch:
        """Convert to an analysis patch; unknown topics become general."""
        return AnalysisPatch(
            overall_summary=self.overall_summary,
            strengths=self.strengths,
            weaknesses=self.weaknesses,
            actionable_insights=[
                ActionableInsight(
                    pattern=insight.pattern,
                    recommendation=insight.recommendation,
                    related_tags=insight.related_tags,
                )
                for insight in self.actionable_insights
            ],
            key_observations=[
                KeyObservation(
                    text=observation.text,
                    topic=observation.topic if observation.topic in _OBSERVATION_TOPICS else "general",
                )
                for observation in self.key_observations
            ],
        )


def build_prompt(trades: list[SanitizedTrade]) -> str:
    """Build the user message carrying the trade data."""
    data = json.dumps([trade.model_dump(mode="json") for trade in trades])
    return f"Here is the trading data: {data}. Please analyze this data and provide your insights."


def _as_report(output) -> CoachReport:
    if isinstance(output, CoachReport):
        return output
    if isinstance(output, str):
        return CoachReport.model_validate_json(output)
    return CoachReport.model_validate(output)


class TradingCoachEnricher:
    """Enrichment collaborator backed by the trading coach agent.

    Any failure (no API key, timeout, SDK error, malformed output) is
    reported as a failed EnrichmentOutcome rather than raised.
    """

    def __init__(self, model: Optional[str] = None, timeout: float = DEFAULT_TIMEOUT):
        self.model = model
        self.timeout = timeout

    def create_agent(self):
        return create_agent(
            name="Trading Coach",
            instructions=COACH_INSTRUCTIONS,
            model=self.model,
            output_type=CoachReport,
        )

    async def __call__(self, trades: list[SanitizedTrade]) -> EnrichmentOutcome:
        if not get_api_key():
            return EnrichmentOutcome.failure("OPENAI_API_KEY is not set")

        agent = self.create_agent()
        try:
            output = await asyncio.wait_for(
                run_agent_async(agent, build_prompt(trades)),
                timeout=self.timeout,
            )
        except asyncio.TimeoutError:
            return EnrichmentOutcome.failure(f"coach timed out after {self.timeout:g}s")
        except Exception as e:
            logger.debug("Coach agent failed", exc_info=True)
            return EnrichmentOutcome.failure(f"coach agent failed: {e}")

        try:
            report = _as_report(output)
        except ValidationError as e:
            return EnrichmentOutcome.failure(
                f"coach returned an unexpected response format ({e.error_count()} errors)"
            )
        return EnrichmentOutcome.success(report.to_patch())
