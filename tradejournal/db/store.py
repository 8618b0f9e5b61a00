"""SQLite data store for Trade Journal."""

import json
import sqlite3
from datetime import date, time
from pathlib import Path
from typing import Any, Iterable, Optional

from tradejournal.models import Trade, TradeTags


PNL_GOAL_KEY = "pnlGoal"


class DataStore:
    """SQLite-based trade store.

    Constructed explicitly and passed to whatever needs it; there is no
    shared module-level connection.
    """

    REQUIRED_TABLES = [
        "trades",
        "keyval",
    ]

    def __init__(self, db_path: Path):
        """Initialize the data store.

        Args:
            db_path: Path to the SQLite database file.
        """
        self.db_path = db_path
        self._ensure_db_dir()
        self._init_schema()

    def _ensure_db_dir(self) -> None:
        """Ensure the database directory exists."""
        self.db_path.parent.mkdir(parents=True, exist_ok=True)

    def _get_connection(self) -> sqlite3.Connection:
        """Get a database connection."""
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        return conn

    def _init_schema(self) -> None:
        """Initialize database schema on first run."""
        conn = self._get_connection()
        try:
            cursor = conn.cursor()

            # Trades table; tags are stored as a JSON list of "category:value"
            cursor.execute("""
                CREATE TABLE IF NOT EXISTS trades (
                    id TEXT PRIMARY KEY,
                    date TEXT NOT NULL,
                    time TEXT NOT NULL DEFAULT '',
                    pair TEXT NOT NULL,
                    pnl REAL NOT NULL,
                    type TEXT,
                    tags TEXT NOT NULL DEFAULT '[]',
                    rating INTEGER,
                    notes TEXT NOT NULL DEFAULT '',
                    photos TEXT NOT NULL DEFAULT '[]'
                )
            """)
            cursor.execute(
                "CREATE INDEX IF NOT EXISTS idx_trades_date ON trades (date)"
            )

            # Key-value settings table
            cursor.execute("""
                CREATE TABLE IF NOT EXISTS keyval (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL
                )
            """)

            conn.commit()
        finally:
            conn.close()

    def get_tables(self) -> list[str]:
        """Get list of all tables in the database."""
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute(
                "SELECT name FROM sqlite_master WHERE type='table' AND name NOT LIKE 'sqlite_%'"
            )
            return [row["name"] for row in cursor.fetchall()]
        finally:
            conn.close()

    # ==================== Trades ====================

    @staticmethod
    def _trade_params(trade: Trade) -> tuple:
        return (
            trade.id,
            trade.date.isoformat(),
            trade.time_str,
            trade.pair,
            trade.pnl,
            trade.type,
            json.dumps(trade.tags.keys()),
            trade.rating,
            trade.notes,
            json.dumps(list(trade.photos)),
        )

    @staticmethod
    def _row_to_trade(row: sqlite3.Row) -> Trade:
        return Trade(
            id=row["id"],
            date=date.fromisoformat(row["date"]),
            time=time.fromisoformat(row["time"]) if row["time"] else None,
            pair=row["pair"],
            pnl=row["pnl"],
            type=row["type"],
            tags=TradeTags.from_keys(json.loads(row["tags"])),
            rating=row["rating"],
            notes=row["notes"],
            photos=tuple(json.loads(row["photos"])),
        )

    def add_trade(self, trade: Trade) -> None:
        """Add a new trade.

        Args:
            trade: Trade to add.

        Raises:
            sqlite3.IntegrityError: If a trade with the same ID exists.
        """
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute(
                """
                INSERT INTO trades
                (id, date, time, pair, pnl, type, tags, rating, notes, photos)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                self._trade_params(trade),
            )
            conn.commit()
        finally:
            conn.close()

    def update_trade(self, trade: Trade) -> None:
        """Replace a stored trade with a new version.

        Args:
            trade: Full replacement, matched by ID.

        Raises:
            KeyError: If no trade with that ID exists.
        """
        params = self._trade_params(trade)
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute(
                """
                UPDATE trades
                SET date = ?, time = ?, pair = ?, pnl = ?, type = ?,
                    tags = ?, rating = ?, notes = ?, photos = ?
                WHERE id = ?
                """,
                params[1:] + params[:1],
            )
            if cursor.rowcount == 0:
                raise KeyError(trade.id)
            conn.commit()
        finally:
            conn.close()

    def bulk_upsert_trades(self, trades: Iterable[Trade]) -> int:
        """Insert or replace many trades in one transaction.

        Returns:
            Number of trades written.
        """
        rows = [self._trade_params(trade) for trade in trades]
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            cursor.executemany(
                """
                INSERT OR REPLACE INTO trades
                (id, date, time, pair, pnl, type, tags, rating, notes, photos)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                rows,
            )
            conn.commit()
            return len(rows)
        finally:
            conn.close()

    def replace_all_trades(self, trades: Iterable[Trade]) -> int:
        """Clear the journal and store the given trades in one transaction.

        Returns:
            Number of trades written.
        """
        rows = [self._trade_params(trade) for trade in trades]
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute("DELETE FROM trades")
            cursor.executemany(
                """
                INSERT INTO trades
                (id, date, time, pair, pnl, type, tags, rating, notes, photos)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                rows,
            )
            conn.commit()
            return len(rows)
        finally:
            conn.close()

    def get_trade(self, trade_id: str) -> Optional[Trade]:
        """Get a trade by ID.

        Returns:
            Trade if found, None otherwise.
        """
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute("SELECT * FROM trades WHERE id = ?", (trade_id,))
            row = cursor.fetchone()
            return self._row_to_trade(row) if row else None
        finally:
            conn.close()

    def get_trades(
        self,
        from_date: Optional[date] = None,
        to_date: Optional[date] = None,
    ) -> list[Trade]:
        """Get trades, most recent first.

        Args:
            from_date: Optional inclusive start date.
            to_date: Optional inclusive end date.

        Returns:
            Trades ordered by date and time, newest first.
        """
        query = "SELECT * FROM trades"
        clauses = []
        params: list[str] = []
        if from_date:
            clauses.append("date >= ?")
            params.append(from_date.isoformat())
        if to_date:
            clauses.append("date <= ?")
            params.append(to_date.isoformat())
        if clauses:
            query += " WHERE " + " AND ".join(clauses)
        query += " ORDER BY date || time DESC"

        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute(query, params)
            return [self._row_to_trade(row) for row in cursor.fetchall()]
        finally:
            conn.close()

    def delete_trade(self, trade_id: str) -> bool:
        """Delete a trade.

        Returns:
            True if a trade was deleted.
        """
        return self.delete_trades([trade_id]) == 1

    def delete_trades(self, trade_ids: Iterable[str]) -> int:
        """Delete several trades.

        Returns:
            Number of trades deleted.
        """
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            deleted = 0
            for trade_id in trade_ids:
                cursor.execute("DELETE FROM trades WHERE id = ?", (trade_id,))
                deleted += cursor.rowcount
            conn.commit()
            return deleted
        finally:
            conn.close()

    def clear_trades(self) -> None:
        """Delete every trade."""
        conn = self._get_connection()
        try:
            conn.execute("DELETE FROM trades")
            conn.commit()
        finally:
            conn.close()

    # ==================== Key-Value ====================

    def set_value(self, key: str, value: Any) -> None:
        """Store a JSON-serializable value under a key."""
        conn = self._get_connection()
        try:
            conn.execute(
                "INSERT OR REPLACE INTO keyval (key, value) VALUES (?, ?)",
                (key, json.dumps(value)),
            )
            conn.commit()
        finally:
            conn.close()

    def get_value(self, key: str, default: Any = None) -> Any:
        """Get a stored value, or ``default`` when the key is absent."""
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute("SELECT value FROM keyval WHERE key = ?", (key,))
            row = cursor.fetchone()
            return json.loads(row["value"]) if row else default
        finally:
            conn.close()

    def delete_value(self, key: str) -> None:
        """Remove a stored value."""
        conn = self._get_connection()
        try:
            conn.execute("DELETE FROM keyval WHERE key = ?", (key,))
            conn.commit()
        finally:
            conn.close()

    def get_pnl_goal(self) -> float:
        """Get the P&L goal, 0 when unset."""
        return float(self.get_value(PNL_GOAL_KEY, 0.0))

    def set_pnl_goal(self, goal: float) -> float:
        """Set the P&L goal; negative goals are stored as 0.

        Returns:
            The stored goal.
        """
        goal = max(0.0, goal)
        self.set_value(PNL_GOAL_KEY, goal)
        return goal

    # ==================== Stats ====================

    def get_stats(self) -> dict:
        """Get database statistics.

        Returns:
            Dictionary with table record counts.
        """
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            stats = {}
            for table in self.REQUIRED_TABLES:
                cursor.execute(f"SELECT COUNT(*) as count FROM {table}")
                stats[table] = cursor.fetchone()["count"]
            return stats
        finally:
            conn.close()
