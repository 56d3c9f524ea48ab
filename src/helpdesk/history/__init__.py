"""Per-session conversation history."""

from .models import Role, Turn
from .store import HistoryStore

__all__ = ["HistoryStore", "Role", "Turn"]
