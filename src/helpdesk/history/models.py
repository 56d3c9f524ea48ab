"""Data models for conversation history."""

from dataclasses import dataclass
from enum import Enum
from typing import Any


class Role(str, Enum):
    """Who authored a turn."""

    USER = "user"
    ASSISTANT = "assistant"


@dataclass(frozen=True)
class Turn:
    """A single role-tagged message in a session's history."""

    role: Role
    content: str

    def to_dict(self) -> dict[str, str]:
        """Message form used both on disk and as model input."""
        return {"role": self.role.value, "content": self.content}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Turn":
        return cls(role=Role(data["role"]), content=str(data["content"]))
