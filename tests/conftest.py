"""Shared fixtures."""

from pathlib import Path

import pytest

from helpdesk.history import HistoryStore
from helpdesk.logging import JSONLLogger
from helpdesk.memory import MemoryStore


@pytest.fixture
def db_path(tmp_path: Path) -> Path:
    return tmp_path / "helpdesk.db"


@pytest.fixture
def memory_store(db_path: Path) -> MemoryStore:
    """MemoryStore on a temporary database."""
    store = MemoryStore(db_path)
    store.init_db()
    yield store
    store.close()


@pytest.fixture
def history_store(db_path: Path) -> HistoryStore:
    """HistoryStore sharing the temporary database."""
    store = HistoryStore(db_path)
    store.init_db()
    yield store
    store.close()


@pytest.fixture
def json_logger(tmp_path: Path) -> JSONLLogger:
    return JSONLLogger(log_dir=tmp_path / "logs")
