"""Static FAQ tool."""

from typing import Any

from .base import Tool, ToolContext, ToolResult

FAQ_ENTRIES: tuple[dict[str, str], ...] = (
    {
        "question": "What can this assistant do?",
        "answer": (
            "Answer questions, read pages from a few trusted sites, "
            "and remember short facts you ask it to keep for this session."
        ),
    },
    {
        "question": "How do I start over?",
        "answer": "Reset the session. This erases the conversation and everything remembered.",
    },
    {
        "question": "Which websites can it read?",
        "answer": "Only an allowlist of sites and their subdomains, such as wikipedia.org.",
    },
    {
        "question": "Is my data shared between sessions?",
        "answer": "No. History and memory are scoped to your session and never read by others.",
    },
    {
        "question": "How long is my conversation kept?",
        "answer": "Until you reset the session.",
    },
)


class FAQTool(Tool):
    """Return the fixed list of frequently asked questions."""

    def __init__(self, entries: tuple[dict[str, str], ...] = FAQ_ENTRIES) -> None:
        self.entries = entries

    @property
    def name(self) -> str:
        return "getFAQ"

    @property
    def description(self) -> str:
        return "Get the list of frequently asked questions about this helpdesk and their answers."

    @property
    def parameters(self) -> dict[str, Any]:
        return {"type": "object", "properties": {}, "required": []}

    async def execute(self, context: ToolContext, **kwargs: Any) -> ToolResult:
        return ToolResult(success=True, output=[dict(entry) for entry in self.entries])
