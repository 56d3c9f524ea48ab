"""Streaming events and their wire encoding.

A streamed exchange is zero or more TokenEvents followed by exactly one
DoneEvent, or by a single ErrorEvent in its place. Replies are produced in
full first and then segmented; concatenating the tokens in order gives back
the reply exactly.
"""

import json
from dataclasses import dataclass, field
from typing import Any, Iterator


@dataclass(frozen=True)
class TokenEvent:
    token: str

    def to_dict(self) -> dict[str, Any]:
        return {"token": self.token}


@dataclass(frozen=True)
class DoneEvent:
    tools_used: list[str] = field(default_factory=list)
    memory_delta: dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Terminal frame; empty summaries are left out entirely."""
        data: dict[str, Any] = {"done": True}
        if self.tools_used:
            data["tools_used"] = list(self.tools_used)
        if self.memory_delta:
            data["memory_delta"] = dict(self.memory_delta)
        return data


@dataclass(frozen=True)
class ErrorEvent:
    error: str

    def to_dict(self) -> dict[str, Any]:
        return {"error": self.error}


StreamEvent = TokenEvent | DoneEvent | ErrorEvent


def segment_reply(reply: str) -> Iterator[str]:
    """Split a reply on spaces, keeping the space on every chunk but the last."""
    words = reply.split(" ")
    last = len(words) - 1
    for i, word in enumerate(words):
        yield word + (" " if i < last else "")


def encode_frame(event: StreamEvent) -> str:
    """Encode an event as a line-delimited `data:` frame."""
    return f"data: {json.dumps(event.to_dict(), ensure_ascii=False)}\n\n"
