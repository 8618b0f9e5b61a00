"""Trade Journal - offline trading-performance analysis for a personal journal."""

__version__ = "0.1.0"
