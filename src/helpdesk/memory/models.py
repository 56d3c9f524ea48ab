"""Data models for the memory system."""

from dataclasses import dataclass


@dataclass(frozen=True)
class MemoryEntry:
    """A value remembered for one session.

    Attributes:
        session_id: Session that owns the entry.
        key: Entry key, unique per session.
        value: Stored text; overwritten on every write to the same key.
        updated_at: Epoch milliseconds of the last write.
    """

    session_id: str
    key: str
    value: str
    updated_at: int | None = None
