"""Prompt building for the helpdesk agent."""

from typing import Any

from ..history import Turn
from ..tools import ToolResult

SYSTEM_PROMPT = """You are a helpful helpdesk assistant. Be concise and helpful. Keep responses under 6 sentences.

You have access to the following tools:
{tools_description}

When the user tells you something about themselves worth keeping (their name, their product, their preferences), save it with saveMemory.
When you need something the user told you earlier, use recallMemory.
Use searchSite only for the allowed sites and getFAQ for questions about this helpdesk.
If a tool fails, explain the problem briefly instead of retrying forever."""


def build_system_prompt(tools_schema: list[dict[str, Any]]) -> str:
    """Build the static system prompt listing the available tools."""
    if not tools_schema:
        tools_desc = "No tools available."
    else:
        tools_desc = "\n".join(
            f"- {t['function']['name']}: {t['function']['description']}"
            for t in tools_schema
        )
    return SYSTEM_PROMPT.format(tools_description=tools_desc)


def build_messages(
    system_prompt: str, history: list[Turn], message: str
) -> list[dict[str, Any]]:
    """System prompt, then history in order, then the new user message."""
    messages: list[dict[str, Any]] = [{"role": "system", "content": system_prompt}]
    messages.extend(turn.to_dict() for turn in history)
    messages.append({"role": "user", "content": message})
    return messages


def format_tool_result(result: ToolResult) -> str:
    """Serialize a tool result for the conversation."""
    return result.to_json()
