"""Tests for MemoryStore."""

import sqlite3
from pathlib import Path

import pytest

from helpdesk.errors import StorageError
from helpdesk.memory import MemoryEntry, MemoryStore


class TestMemoryStoreInit:
    """Tests for MemoryStore initialization."""

    def test_creates_db_directory(self, tmp_path: Path):
        """Store creates parent directories if they don't exist."""
        nested_path = tmp_path / "nested" / "dir" / "memory.db"
        store = MemoryStore(nested_path)
        store.init_db()
        assert nested_path.exists()
        store.close()

    def test_creates_memory_table(self, memory_store: MemoryStore):
        conn = memory_store._get_connection()
        cursor = conn.execute(
            "SELECT name FROM sqlite_master WHERE type='table' AND name='memory'"
        )
        assert cursor.fetchone() is not None

    def test_init_db_idempotent(self, memory_store: MemoryStore):
        memory_store.init_db()
        memory_store.init_db()


class TestMemoryStoreReadWrite:
    def test_get_missing_returns_none(self, memory_store: MemoryStore):
        assert memory_store.get("s1", "name") is None

    def test_set_then_get(self, memory_store: MemoryStore):
        saved = memory_store.set("s1", "name", "John")

        assert isinstance(saved, MemoryEntry)
        assert saved.updated_at is not None
        entry = memory_store.get("s1", "name")
        assert entry.value == "John"
        assert entry.session_id == "s1"

    def test_last_write_wins(self, memory_store: MemoryStore):
        memory_store.set("s1", "name", "John")
        memory_store.set("s1", "name", "Jane")

        assert memory_store.get("s1", "name").value == "Jane"
        assert len(memory_store.get_all("s1")) == 1

    def test_keys_are_independent(self, memory_store: MemoryStore):
        memory_store.set("s1", "name", "John")
        memory_store.set("s1", "plan", "pro")

        assert {e.key: e.value for e in memory_store.get_all("s1")} == {
            "name": "John",
            "plan": "pro",
        }

    def test_sessions_are_isolated(self, memory_store: MemoryStore):
        memory_store.set("A", "name", "Alice")
        memory_store.set("B", "name", "Bob")

        assert memory_store.get("A", "name").value == "Alice"
        assert memory_store.get("B", "name").value == "Bob"
        assert [e.session_id for e in memory_store.get_all("A")] == ["A"]


class TestMemoryStoreClear:
    def test_clear_removes_session_entries(self, memory_store: MemoryStore):
        memory_store.set("s1", "name", "John")
        memory_store.set("s1", "plan", "pro")

        assert memory_store.clear("s1") == 2
        assert memory_store.get("s1", "name") is None
        assert memory_store.get_all("s1") == []

    def test_clear_is_idempotent(self, memory_store: MemoryStore):
        memory_store.set("s1", "name", "John")
        memory_store.clear("s1")
        assert memory_store.clear("s1") == 0

    def test_clear_leaves_other_sessions(self, memory_store: MemoryStore):
        memory_store.set("A", "name", "Alice")
        memory_store.set("B", "name", "Bob")

        memory_store.clear("A")

        assert memory_store.get("B", "name").value == "Bob"


def test_storage_errors_are_wrapped(tmp_path: Path):
    store = MemoryStore(tmp_path / "memory.db")
    # Table never created
    with pytest.raises(StorageError):
        store.get("s1", "name")
    with pytest.raises(StorageError):
        store.set("s1", "name", "John")
    store.close()


def test_close_and_reopen(tmp_path: Path):
    db_path = tmp_path / "memory.db"
    store = MemoryStore(db_path)
    store.init_db()
    store.set("s1", "name", "John")
    store.close()

    reopened = MemoryStore(db_path)
    assert reopened.get("s1", "name").value == "John"
    reopened.close()

    conn = sqlite3.connect(db_path)
    assert conn.execute("SELECT COUNT(*) FROM memory").fetchone()[0] == 1
    conn.close()
