"""Session controller: the per-exchange model/tool loop."""

from __future__ import annotations

import asyncio
import json
import logging
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, AsyncIterator

from ..errors import ExchangeError, ExchangeTimeoutError, GatewayError, ValidationError
from ..history import HistoryStore, Role, Turn
from ..logging import JSONLLogger, get_logger
from ..memory import MemoryStore
from ..session import SessionManager
from ..tools import ToolContext, ToolRegistry, ToolResult
from .events import DoneEvent, ErrorEvent, StreamEvent, TokenEvent, encode_frame, segment_reply
from .gateway import FinalReply, ModelGateway, ToolCall
from .prompt import build_messages, build_system_prompt, format_tool_result

logger = logging.getLogger(__name__)

SAVE_MEMORY_TOOL = "saveMemory"


class StopReason(Enum):
    """Reasons for leaving the tool loop."""

    COMPLETE = "complete"
    MAX_TURNS = "max_turns"


@dataclass
class AgentConfig:
    """Configuration for the controller."""

    model: str = "llama-3.1-8b-instant"
    max_turns: int = 5
    exchange_timeout: float | None = None
    fallback_reply: str = (
        "Sorry, I couldn't finish working on that. Please try rephrasing your question."
    )
    empty_reply: str = "Sorry, no response."


@dataclass
class ToolInvocation:
    """One tool call made during an exchange and what it returned."""

    name: str
    arguments: dict[str, Any]
    result: ToolResult


@dataclass
class ExchangeResult:
    """Outcome of one successful exchange."""

    reply: str
    stop_reason: StopReason
    turns: int
    tools_used: list[str] = field(default_factory=list)
    memory_delta: dict[str, str] = field(default_factory=dict)
    invocations: list[ToolInvocation] = field(default_factory=list)

    def to_payload(self) -> dict[str, Any]:
        """Buffered response body; empty summaries are left out entirely."""
        payload: dict[str, Any] = {"reply": self.reply}
        if self.tools_used:
            payload["tools_used"] = list(self.tools_used)
        if self.memory_delta:
            payload["memory_delta"] = dict(self.memory_delta)
        return payload


def collect_tools_used(invocations: list[ToolInvocation]) -> list[str]:
    """Distinct tool names in order of first use."""
    return list(dict.fromkeys(inv.name for inv in invocations))


def collect_memory_delta(invocations: list[ToolInvocation]) -> dict[str, str]:
    """Keys written by successful saveMemory calls; later writes win."""
    delta: dict[str, str] = {}
    for inv in invocations:
        if inv.name != SAVE_MEMORY_TOOL or not inv.result.success:
            continue
        key = inv.arguments.get("key")
        value = inv.arguments.get("value")
        if key and value:
            delta[str(key)] = str(value)
    return delta


def validate_message(message: Any) -> str:
    """Reject missing, non-text or blank messages."""
    if not isinstance(message, str) or not message.strip():
        raise ValidationError("Missing message")
    return message


class SessionController:
    """Drives exchanges for every session.

    An exchange loads the session's history, runs the bounded model/tool
    loop, and only once a final reply exists appends the user/assistant pair
    to history. Exchanges for one session run one at a time on that
    session's actor; different sessions run in parallel.
    """

    def __init__(
        self,
        gateway: ModelGateway,
        registry: ToolRegistry,
        history: HistoryStore,
        memory: MemoryStore,
        config: AgentConfig | None = None,
        sessions: SessionManager | None = None,
        json_logger: JSONLLogger | None = None,
    ) -> None:
        self.gateway = gateway
        self.registry = registry
        self.history = history
        self.memory = memory
        self.config = config or AgentConfig()
        self.sessions = sessions or SessionManager()
        self.json_logger = json_logger or get_logger()

    async def handle(
        self, session_id: str, message: str, model: str | None = None
    ) -> ExchangeResult:
        """Run one buffered exchange.

        Raises:
            ValidationError: The message is empty. Nothing was touched.
            ExchangeError: The exchange failed. No turn was recorded.
        """
        message = validate_message(message)
        return await self.sessions.run(
            session_id, lambda: self._exchange(session_id, message, model)
        )

    def handle_streaming(
        self, session_id: str, message: str, model: str | None = None
    ) -> AsyncIterator[StreamEvent]:
        """Run one exchange and deliver its reply as a stream of events.

        The reply is produced in full and persisted first, then segmented
        into chunks (segment-then-emit, not token-level generation).
        Validation happens here, before any event is produced.
        """
        message = validate_message(message)
        return self._stream(session_id, message, model)

    async def _stream(
        self, session_id: str, message: str, model: str | None
    ) -> AsyncIterator[StreamEvent]:
        try:
            result = await self.handle(session_id, message, model)
        except ExchangeError as e:
            yield ErrorEvent(error=str(e))
            return

        for chunk in segment_reply(result.reply):
            yield TokenEvent(token=chunk)
        yield DoneEvent(tools_used=result.tools_used, memory_delta=result.memory_delta)

    def stream_frames(
        self, session_id: str, message: str, model: str | None = None
    ) -> AsyncIterator[str]:
        """Like handle_streaming, encoded as `data:` frames."""
        events = self.handle_streaming(session_id, message, model)

        async def frames() -> AsyncIterator[str]:
            async for event in events:
                yield encode_frame(event)

        return frames()

    async def chat(
        self, session_id: str, message: Any, model: str | None = None
    ) -> dict[str, Any]:
        """Buffered exchange in payload form: a reply, or an error field."""
        try:
            result = await self.handle(session_id, message, model)
        except (ValidationError, ExchangeError) as e:
            return {"error": str(e)}
        return result.to_payload()

    async def reset(self, session_id: str) -> None:
        """Erase a session's history and memory. Idempotent."""

        async def clear() -> None:
            self.history.clear(session_id)
            self.memory.clear(session_id)

        await self.sessions.run(session_id, clear)
        await self.sessions.discard(session_id)
        self.json_logger.log("session_reset", session_id=session_id)

    async def _exchange(
        self, session_id: str, message: str, model: str | None
    ) -> ExchangeResult:
        model = model or self.config.model
        self.json_logger.log("exchange_start", session_id=session_id, model=model)

        try:
            history = self.history.load(session_id)
            messages = build_messages(
                build_system_prompt(self.registry.get_tools_schema()), history, message
            )

            run = self._run_loop(session_id, messages, model)
            if self.config.exchange_timeout is not None:
                try:
                    result = await asyncio.wait_for(run, self.config.exchange_timeout)
                except asyncio.TimeoutError as e:
                    raise ExchangeTimeoutError(
                        f"Exchange exceeded {self.config.exchange_timeout}s"
                    ) from e
            else:
                result = await run

            # Nothing is written to history before this point.
            self.history.append(
                session_id,
                [Turn(Role.USER, message), Turn(Role.ASSISTANT, result.reply)],
            )
        except ExchangeError as e:
            logger.warning(f"Exchange failed for session {session_id}: {e}")
            self.json_logger.log(
                "exchange_error",
                session_id=session_id,
                model=model,
                error=str(e),
                error_type=type(e).__name__,
            )
            raise

        self.json_logger.log_exchange_complete(
            result.stop_reason.value,
            session_id=session_id,
            turns=result.turns,
            tools_used=result.tools_used,
        )
        return result

    async def _complete(
        self, messages: list[dict[str, Any]], tools: list[dict[str, Any]], model: str
    ) -> Any:
        try:
            return await self.gateway.complete(messages, tools, model=model)
        except ExchangeError:
            raise
        except Exception as e:
            raise GatewayError(f"Model call failed: {e}") from e

    async def _run_loop(
        self, session_id: str, messages: list[dict[str, Any]], model: str
    ) -> ExchangeResult:
        tools = self.registry.get_tools_schema()
        context = ToolContext(session_id=session_id)
        invocations: list[ToolInvocation] = []

        for turn in range(self.config.max_turns):
            self.json_logger.log(
                "llm_request",
                session_id=session_id,
                model=model,
                messages_count=len(messages),
            )
            completion = await self._complete(messages, tools, model)

            if isinstance(completion, FinalReply):
                reply = completion.text if (completion.text or "").strip() else self.config.empty_reply
                return self._result(reply, StopReason.COMPLETE, turn + 1, invocations)

            calls = [
                ToolCall(name=c.name, arguments=c.arguments, id=c.id or f"call_{turn}_{i}")
                for i, c in enumerate(completion.calls)
            ]
            messages.append(self._assistant_tool_message(completion.text, calls))

            # One at a time, in request order.
            for call in calls:
                result = await self._invoke(session_id, call, context)
                invocations.append(ToolInvocation(call.name, call.arguments, result))
                messages.append({
                    "role": "tool",
                    "tool_call_id": call.id,
                    "name": call.name,
                    "content": format_tool_result(result),
                })

        return self._result(
            self.config.fallback_reply, StopReason.MAX_TURNS, self.config.max_turns, invocations
        )

    async def _invoke(self, session_id: str, call: ToolCall, context: ToolContext) -> ToolResult:
        self.json_logger.log_tool_call(call.name, call.arguments, session_id=session_id)
        start_time = time.monotonic()
        result = await self.registry.dispatch(call.name, call.arguments, context)
        self.json_logger.log_tool_result(
            call.name,
            result.success,
            session_id=session_id,
            duration_ms=(time.monotonic() - start_time) * 1000,
            error=result.error,
        )
        return result

    def _assistant_tool_message(self, text: str | None, calls: list[ToolCall]) -> dict[str, Any]:
        return {
            "role": "assistant",
            "content": text,
            "tool_calls": [
                {
                    "id": call.id,
                    "type": "function",
                    "function": {
                        "name": call.name,
                        "arguments": json.dumps(call.arguments, ensure_ascii=False),
                    },
                }
                for call in calls
            ],
        }

    def _result(
        self,
        reply: str,
        stop_reason: StopReason,
        turns: int,
        invocations: list[ToolInvocation],
    ) -> ExchangeResult:
        return ExchangeResult(
            reply=reply,
            stop_reason=stop_reason,
            turns=turns,
            tools_used=collect_tools_used(invocations),
            memory_delta=collect_memory_delta(invocations),
            invocations=invocations,
        )
