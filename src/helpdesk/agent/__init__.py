"""Session controller, model gateway and streaming events."""

from .controller import (
    AgentConfig,
    ExchangeResult,
    SessionController,
    StopReason,
    ToolInvocation,
    collect_memory_delta,
    collect_tools_used,
)
from .events import DoneEvent, ErrorEvent, TokenEvent, encode_frame, segment_reply
from .gateway import FinalReply, GroqGateway, ModelGateway, ToolCall, ToolRequest
from .prompt import build_system_prompt

__all__ = [
    "AgentConfig",
    "DoneEvent",
    "ErrorEvent",
    "ExchangeResult",
    "FinalReply",
    "GroqGateway",
    "ModelGateway",
    "SessionController",
    "StopReason",
    "TokenEvent",
    "ToolCall",
    "ToolInvocation",
    "ToolRequest",
    "build_system_prompt",
    "collect_memory_delta",
    "collect_tools_used",
    "encode_frame",
    "segment_reply",
]
