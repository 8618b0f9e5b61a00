"""AI agents for narrative enrichment of trade analysis."""

from tradejournal.agents.coach import CoachReport, TradingCoachEnricher

__all__ = ["CoachReport", "TradingCoachEnricher"]
