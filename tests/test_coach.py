"""Tests for the trading coach enrichment agent.

**Feature: trade-journal**
"""

import asyncio
import json
from datetime import date, timedelta
from types import SimpleNamespace
from unittest.mock import AsyncMock, patch

import pytest

from tradejournal.agents.coach import CoachReport, TradingCoachEnricher, build_prompt
from tradejournal.analysis.engine import TradeAnalyzer, analyze_offline, sanitize_trades
from tradejournal.models import Trade, TradeTags


def make_journal(count: int = 25) -> list[Trade]:
    return [
        Trade(
            date=date(2024, 1, 1) + timedelta(days=i),
            pair="EURUSD",
            pnl=100.0 if i % 2 else -40.0,
            tags=TradeTags.from_keys(["strategy:Breakout"]),
            notes="secret plan",
            photos=("aGVsbG8=",),
        )
        for i in range(count)
    ]


REPORT = {
    "overall_summary": "Solid month with room to improve.",
    "strengths": ["Breakouts pay"],
    "weaknesses": ["Early exits"],
    "actionable_insights": [
        {
            "pattern": "Losses cluster on Mondays",
            "recommendation": "Trade smaller on Mondays",
            "related_tags": ["strategy:Breakout"],
        }
    ],
    "key_observations": [
        {"text": "Mostly long trades", "topic": "strategy"},
        {"text": "Calmer after wins", "topic": "psychology"},
    ],
}


def mock_runner(final_output=None, side_effect=None):
    runner = SimpleNamespace(run=AsyncMock(
        return_value=SimpleNamespace(final_output=final_output),
        side_effect=side_effect,
    ))
    return patch("tradejournal.agents.base.Runner", runner)


@pytest.fixture
def api_key():
    with patch("tradejournal.agents.coach.get_api_key", return_value="sk-test"):
        yield


class TestCoachEnricher:
    """
    **Feature: trade-journal, Property 24: Coach Failures Are Outcomes**

    *For any* failure of the coach, the enricher returns a failed outcome
    instead of raising.
    """

    def test_missing_api_key(self):
        with patch("tradejournal.agents.coach.get_api_key", return_value=None), mock_runner() as runner:
            outcome = asyncio.run(TradingCoachEnricher()([]))
        assert not outcome.ok
        assert "OPENAI_API_KEY" in outcome.error
        runner.run.assert_not_called()

    def test_structured_output(self, api_key):
        with mock_runner(CoachReport.model_validate(REPORT)):
            outcome = asyncio.run(TradingCoachEnricher()(sanitize_trades(make_journal())))

        assert outcome.ok
        assert outcome.patch.overall_summary == REPORT["overall_summary"]
        assert outcome.patch.actionable_insights[0].related_tags == ["strategy:Breakout"]
        assert [o.topic for o in outcome.patch.key_observations] == ["strategy", "general"]
        assert outcome.patch.performance_grade is None
        assert outcome.patch.key_metrics is None

    def test_json_text_output(self, api_key):
        with mock_runner(json.dumps(REPORT)):
            outcome = asyncio.run(TradingCoachEnricher()([]))
        assert outcome.ok
        assert outcome.patch.strengths == ["Breakouts pay"]

    def test_unexpected_shape(self, api_key):
        with mock_runner("Great job, keep trading!"):
            outcome = asyncio.run(TradingCoachEnricher()([]))
        assert not outcome.ok
        assert "unexpected response format" in outcome.error

    def test_sdk_error(self, api_key):
        with mock_runner(side_effect=RuntimeError("rate limited")):
            outcome = asyncio.run(TradingCoachEnricher()([]))
        assert not outcome.ok
        assert "rate limited" in outcome.error

    def test_timeout(self, api_key):
        async def slow(*args, **kwargs):
            await asyncio.sleep(5)

        with mock_runner(side_effect=slow):
            outcome = asyncio.run(TradingCoachEnricher(timeout=0.01)([]))
        assert not outcome.ok
        assert "timed out" in outcome.error

    def test_model_override(self, api_key):
        with mock_runner(CoachReport.model_validate(REPORT)) as runner:
            asyncio.run(TradingCoachEnricher(model="gpt-4o-mini")([]))
        agent = runner.run.call_args.args[0]
        assert agent.model == "gpt-4o-mini"
        assert agent.output_type is CoachReport


class TestCoachPrivacy:
    """
    **Feature: trade-journal, Property 25: Notes Never Leave The Machine**

    *For any* journal, the prompt sent to the coach carries no notes or
    photos.
    """

    def test_prompt_has_no_private_fields(self, api_key):
        with mock_runner(CoachReport.model_validate(REPORT)) as runner:
            asyncio.run(TradingCoachEnricher()(sanitize_trades(make_journal())))

        prompt = runner.run.call_args.args[1]
        assert "secret plan" not in prompt
        assert "aGVsbG8=" not in prompt
        assert "strategy:Breakout" in prompt
        assert "day_of_week" in prompt

    def test_build_prompt(self):
        prompt = build_prompt(sanitize_trades(make_journal(2)))
        payload = prompt.split("Here is the trading data: ", 1)[1].rsplit(". Please", 1)[0]
        assert len(json.loads(payload)) == 2


class TestCoachInAnalysis:
    """The coach plugged into the analyzer."""

    def test_metrics_and_grade_stay_offline(self, api_key):
        trades = make_journal()
        offline = analyze_offline(trades)
        with mock_runner(CoachReport.model_validate(REPORT)):
            result = TradeAnalyzer(enricher=TradingCoachEnricher()).analyze(trades)

        assert result.overall_summary == REPORT["overall_summary"]
        assert result.key_metrics == offline.key_metrics
        assert result.performance_grade == offline.performance_grade
        assert "Breakouts pay" in result.strengths

    def test_failure_gives_offline_report(self, api_key):
        trades = make_journal()
        with mock_runner(side_effect=RuntimeError("boom")):
            result = TradeAnalyzer(enricher=TradingCoachEnricher()).analyze(trades)
        assert result == analyze_offline(trades)
