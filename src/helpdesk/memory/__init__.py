"""Per-session key/value memory."""

from .models import MemoryEntry
from .store import MemoryStore
from .tools import RecallMemoryTool, SaveMemoryTool

__all__ = ["MemoryEntry", "MemoryStore", "RecallMemoryTool", "SaveMemoryTool"]
