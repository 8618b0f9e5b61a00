"""SQLite persistence for Trade Journal."""
