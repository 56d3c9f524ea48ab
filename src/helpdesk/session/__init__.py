"""Per-session serialization."""

from .actor import SessionActor
from .manager import SessionManager

__all__ = ["SessionActor", "SessionManager"]
