"""Tool registry and built-in tools."""

from .base import Tool, ToolContext, ToolResult
from .faq import FAQ_ENTRIES, FAQTool
from .registry import ToolRegistry
from .search_site import DEFAULT_ALLOWED_DOMAINS, SearchSiteTool

__all__ = [
    "DEFAULT_ALLOWED_DOMAINS",
    "FAQ_ENTRIES",
    "FAQTool",
    "SearchSiteTool",
    "Tool",
    "ToolContext",
    "ToolResult",
    "ToolRegistry",
]
