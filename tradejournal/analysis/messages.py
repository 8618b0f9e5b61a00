"""Canned report text.

The analysis engine only computes numbers; every sentence in a report comes
from a message catalog so the wording can be replaced from configuration.
Templates use ``str.format`` placeholders.
"""

import logging
import string
from typing import Mapping, Optional

logger = logging.getLogger(__name__)


DEFAULT_MESSAGES: dict[str, str] = {
    # Grades
    "grade.summary_a": "Excellent performance. Your edge is clear and your execution is disciplined.",
    "grade.summary_b": "Solid performance. A few refinements could take you to the next level.",
    "grade.summary_c": "Average performance. There is an edge to build on, but consistency needs work.",
    "grade.summary_d": "Struggling performance. Focus on risk management and reviewing your losing trades.",
    # Summary
    "common.profitable": "profitable",
    "common.unprofitable": "unprofitable",
    "offline.summary": (
        "Across {trade_count} trades your trading has been {result}, "
        "with a win rate of {win_rate}."
    ),
    "offline.observation_overall": "You have logged {trade_count} trades for a total P&L of {total_pnl}.",
    # Strengths and weaknesses
    "offline.strength_win_rate": "High win rate of {win_rate}.",
    "offline.strength_profit_factor": "Strong profit factor of {profit_factor}.",
    "offline.weakness_win_rate": "Low win rate of {win_rate}.",
    "offline.weakness_profit_factor": "Profit factor of {profit_factor} means losses outweigh gains.",
    # Tag insights
    "offline.strength_tag": "Trades tagged '{tag}' are your most profitable, totalling {pnl}.",
    "offline.strength_tag_rec": "Look for more setups that match this tag and consider sizing up on them.",
    "offline.weakness_tag": "Trades tagged '{tag}' are your biggest drain, totalling {pnl}.",
    "offline.weakness_tag_rec": "Review these trades and consider avoiding this setup until you find what goes wrong.",
    "offline.pattern_mistake": "The mistake '{mistake}' has cost you {pnl}.",
    "offline.recommendation_mistake": "Add a pre-trade checklist item that guards against this mistake.",
    # Trend
    "offline.trend_pattern": "Your last {count} trades show a win rate of {win_rate}, below your usual performance.",
    "offline.trend_rec": "Consider reducing size or taking a short break to reset.",
    # Timing
    "offline.golden_hour_pattern": "Your golden hour is {start_time}-{end_time}, averaging {avg_pnl} per trade.",
    "offline.golden_hour_rec": "Concentrate your trading around this hour.",
    # Risk profile
    "offline.risk_profile_balanced": "Balanced risk profile: reward/risk of {rr} with a {win_rate} win rate.",
    "offline.risk_profile_sniper": (
        "Sniper profile: few winners but large ones (reward/risk {rr}, win rate {win_rate})."
    ),
    "offline.risk_profile_scalper": (
        "Scalper profile: frequent small wins (reward/risk {rr}, win rate {win_rate})."
    ),
    "offline.risk_profile_high_risk": (
        "High-risk profile: losses are large relative to wins and win rate is low "
        "(reward/risk {rr}, win rate {win_rate})."
    ),
    "offline.risk_profile_effective": (
        "Effective profile: you win often and your winners are larger than your losers "
        "(reward/risk {rr}, win rate {win_rate})."
    ),
}


def template_fields(template: str) -> set[str]:
    """Names of the placeholders in a template.

    Raises:
        ValueError: If the template is malformed, e.g. an unmatched brace.
    """
    fields = set()
    for _, name, _, _ in string.Formatter().parse(template):
        if name is not None:
            fields.add(name.split(".")[0].split("[")[0])
    return fields


class MessageCatalog:
    """Lookup of report text templates."""

    def __init__(self, messages: Optional[Mapping[str, str]] = None):
        """Initialize the catalog.

        An override of a built-in template may only use that template's
        placeholders. Overrides that do not are logged and ignored, and the
        built-in text is kept.

        Args:
            messages: Templates overriding the defaults, keyed like
                ``grade.summary_a``.
        """
        self._messages = dict(DEFAULT_MESSAGES)
        for key, template in (messages or {}).items():
            if key in DEFAULT_MESSAGES and not self._fits(key, template):
                logger.warning("Ignoring message override %r: it does not match the built-in placeholders", key)
                continue
            self._messages[key] = template

    @staticmethod
    def _fits(key: str, template: str) -> bool:
        try:
            fields = template_fields(template)
        except ValueError:
            return False
        return fields <= template_fields(DEFAULT_MESSAGES[key])

    def text(self, key: str, **params) -> str:
        """Render a template.

        Raises:
            KeyError: If the key is unknown.
        """
        return self._messages[key].format(**params)

    def __contains__(self, key: str) -> bool:
        return key in self._messages


_DEFAULT_CATALOG = MessageCatalog()


def default_catalog() -> MessageCatalog:
    """The built-in English catalog."""
    return _DEFAULT_CATALOG


def format_percent(value: float) -> str:
    return f"{value:.0f}%"


def make_currency_formatter(symbol: str = "$"):
    """Build a currency formatter, e.g. ``-$1,234.50``."""

    def format_currency(value: float) -> str:
        sign = "-" if value < 0 else ""
        return f"{sign}{symbol}{abs(value):,.2f}"

    return format_currency
