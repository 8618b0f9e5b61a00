"""Command-line interface for Trade Journal."""
