"""Model gateway: one call to the language model per loop iteration."""

from __future__ import annotations

import json
import logging
import os
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any

from groq import AsyncGroq

from ..errors import GatewayError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ToolCall:
    """A tool invocation requested by the model."""

    name: str
    arguments: dict[str, Any] = field(default_factory=dict)
    id: str = ""


@dataclass(frozen=True)
class FinalReply:
    """The model answered with text and wants no tools."""

    text: str


@dataclass(frozen=True)
class ToolRequest:
    """The model wants one or more tools run before it answers."""

    calls: list[ToolCall]
    text: str | None = None


Completion = FinalReply | ToolRequest


class ModelGateway(ABC):
    """Opaque access to a language model.

    Implementations may be slow and may fail; failures are raised as
    GatewayError. Retries, if any, belong to the implementation.
    """

    @abstractmethod
    async def complete(
        self,
        messages: list[dict[str, Any]],
        tools: list[dict[str, Any]],
        model: str | None = None,
    ) -> Completion:
        """Run the model on a message list with the given tool schemas."""
        ...


def parse_arguments(raw: Any) -> dict[str, Any]:
    """Decode tool-call arguments, which providers send as a JSON string or a dict."""
    if isinstance(raw, dict):
        return raw
    if not raw:
        return {}
    try:
        parsed = json.loads(raw)
    except (TypeError, json.JSONDecodeError):
        return {}
    return parsed if isinstance(parsed, dict) else {}


class GroqGateway(ModelGateway):
    """Gateway backed by the Groq chat completions API."""

    def __init__(
        self,
        client: AsyncGroq | None = None,
        model: str = "llama-3.1-8b-instant",
        max_tokens: int = 512,
    ) -> None:
        self.client = client or AsyncGroq(api_key=os.getenv("GROQ_API_KEY"))
        self.model = model
        self.max_tokens = max_tokens

    async def complete(
        self,
        messages: list[dict[str, Any]],
        tools: list[dict[str, Any]],
        model: str | None = None,
    ) -> Completion:
        try:
            response = await self.client.chat.completions.create(
                model=model or self.model,
                messages=messages,
                tools=tools or None,
                tool_choice="auto" if tools else None,
                max_tokens=self.max_tokens,
            )
        except Exception as e:
            logger.warning(f"Model call failed: {e}")
            raise GatewayError(f"Model call failed: {e}") from e

        if not response.choices:
            raise GatewayError("Model returned no choices")

        message = response.choices[0].message

        if message.tool_calls:
            calls = [
                ToolCall(
                    name=tc.function.name,
                    arguments=parse_arguments(tc.function.arguments),
                    id=tc.id or "",
                )
                for tc in message.tool_calls
            ]
            return ToolRequest(calls=calls, text=message.content)

        return FinalReply(text=message.content or "")
