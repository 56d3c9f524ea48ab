"""SQLite storage for conversation history."""

import json
import sqlite3
import time
from pathlib import Path
from typing import Iterable

from ..errors import StorageError
from .models import Turn


class HistoryStore:
    """Ordered per-session turn log.

    Each session's history is one JSON document. Reads and writes operate on
    the whole sequence; callers serialize exchanges per session so that the
    read-modify-write in `append` never interleaves for the same session.
    """

    def __init__(self, db_path: Path) -> None:
        """Initialize the store with a database path.

        Args:
            db_path: Path to the SQLite database file.
        """
        self.db_path = Path(db_path)
        self._conn: sqlite3.Connection | None = None

    def _get_connection(self) -> sqlite3.Connection:
        """Get or create the database connection."""
        if self._conn is None:
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
            self._conn = sqlite3.connect(self.db_path)
            self._conn.row_factory = sqlite3.Row
        return self._conn

    def init_db(self) -> None:
        """Create the history table if it doesn't exist."""
        try:
            conn = self._get_connection()
            conn.execute("""
                CREATE TABLE IF NOT EXISTS history (
                    session_id  TEXT PRIMARY KEY,
                    turns       TEXT NOT NULL,
                    updated_at  INTEGER NOT NULL
                )
            """)
            conn.commit()
        except sqlite3.Error as e:
            raise StorageError(f"Could not initialize history store: {e}") from e

    def _read(self, conn: sqlite3.Connection, session_id: str) -> list[Turn]:
        row = conn.execute(
            "SELECT turns FROM history WHERE session_id = ?", (session_id,)
        ).fetchone()
        if row is None:
            return []
        return [Turn.from_dict(item) for item in json.loads(row["turns"])]

    def load(self, session_id: str) -> list[Turn]:
        """Load the ordered history of a session (empty if none)."""
        try:
            return self._read(self._get_connection(), session_id)
        except (sqlite3.Error, json.JSONDecodeError, KeyError, ValueError) as e:
            raise StorageError(f"Could not load history: {e}") from e

    def append(self, session_id: str, turns: Iterable[Turn]) -> list[Turn]:
        """Append turns and write the whole sequence back in one transaction.

        Returns:
            The full updated history.
        """
        new_turns = list(turns)
        conn = self._get_connection()
        try:
            with conn:
                history = self._read(conn, session_id) + new_turns
                conn.execute(
                    """
                    INSERT INTO history (session_id, turns, updated_at)
                    VALUES (?, ?, ?)
                    ON CONFLICT(session_id) DO UPDATE SET
                        turns = excluded.turns,
                        updated_at = excluded.updated_at
                    """,
                    (
                        session_id,
                        json.dumps([t.to_dict() for t in history], ensure_ascii=False),
                        int(time.time() * 1000),
                    ),
                )
        except (sqlite3.Error, json.JSONDecodeError, KeyError, ValueError) as e:
            raise StorageError(f"Could not append history: {e}") from e
        return history

    def clear(self, session_id: str) -> bool:
        """Erase a session's history. Returns True if anything was removed."""
        conn = self._get_connection()
        try:
            with conn:
                cursor = conn.execute("DELETE FROM history WHERE session_id = ?", (session_id,))
        except sqlite3.Error as e:
            raise StorageError(f"Could not clear history: {e}") from e
        return cursor.rowcount > 0

    def close(self) -> None:
        """Close the database connection."""
        if self._conn is not None:
            self._conn.close()
            self._conn = None
