"""SQLite storage for per-session memory."""

import sqlite3
import time
from pathlib import Path

from ..errors import StorageError
from .models import MemoryEntry


class MemoryStore:
    """Persistent key/value memory using SQLite.

    Every row belongs to a session; keys are unique per session and a write
    to an existing key replaces its value (last write wins). Operations are
    single-row, so concurrent writes to different keys never clobber each
    other.
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
        """Create the memory table if it doesn't exist."""
        try:
            conn = self._get_connection()
            conn.execute("""
                CREATE TABLE IF NOT EXISTS memory (
                    session_id  TEXT NOT NULL,
                    key         TEXT NOT NULL,
                    value       TEXT NOT NULL,
                    updated_at  INTEGER NOT NULL,
                    PRIMARY KEY (session_id, key)
                )
            """)
            conn.commit()
        except sqlite3.Error as e:
            raise StorageError(f"Could not initialize memory store: {e}") from e

    def set(self, session_id: str, key: str, value: str) -> MemoryEntry:
        """Upsert a value for a key.

        Returns:
            The stored entry with its update timestamp.
        """
        updated_at = int(time.time() * 1000)
        try:
            conn = self._get_connection()
            conn.execute(
                """
                INSERT INTO memory (session_id, key, value, updated_at)
                VALUES (?, ?, ?, ?)
                ON CONFLICT(session_id, key) DO UPDATE SET
                    value = excluded.value,
                    updated_at = excluded.updated_at
                """,
                (session_id, key, value, updated_at),
            )
            conn.commit()
        except sqlite3.Error as e:
            raise StorageError(f"Could not save memory '{key}': {e}") from e
        return MemoryEntry(session_id=session_id, key=key, value=value, updated_at=updated_at)

    def get(self, session_id: str, key: str) -> MemoryEntry | None:
        """Look up a key. Returns None when the key was never set."""
        try:
            conn = self._get_connection()
            row = conn.execute(
                "SELECT session_id, key, value, updated_at FROM memory "
                "WHERE session_id = ? AND key = ?",
                (session_id, key),
            ).fetchone()
        except sqlite3.Error as e:
            raise StorageError(f"Could not read memory '{key}': {e}") from e
        return self._row_to_entry(row) if row else None

    def get_all(self, session_id: str) -> list[MemoryEntry]:
        """Get every entry for a session, oldest write first."""
        try:
            conn = self._get_connection()
            cursor = conn.execute(
                "SELECT session_id, key, value, updated_at FROM memory "
                "WHERE session_id = ? ORDER BY updated_at, key",
                (session_id,),
            )
            return [self._row_to_entry(row) for row in cursor.fetchall()]
        except sqlite3.Error as e:
            raise StorageError(f"Could not read memory: {e}") from e

    def clear(self, session_id: str) -> int:
        """Delete all entries of a session.

        Returns:
            Number of entries deleted.
        """
        try:
            conn = self._get_connection()
            cursor = conn.execute("DELETE FROM memory WHERE session_id = ?", (session_id,))
            conn.commit()
        except sqlite3.Error as e:
            raise StorageError(f"Could not clear memory: {e}") from e
        return cursor.rowcount

    def close(self) -> None:
        """Close the database connection."""
        if self._conn is not None:
            self._conn.close()
            self._conn = None

    def _row_to_entry(self, row: sqlite3.Row) -> MemoryEntry:
        return MemoryEntry(
            session_id=row["session_id"],
            key=row["key"],
            value=row["value"],
            updated_at=row["updated_at"],
        )
