"""Memory tools exposed to the model."""

from typing import Any

from ..errors import StorageError
from ..tools.base import Tool, ToolContext, ToolResult
from .store import MemoryStore


class SaveMemoryTool(Tool):
    """Tool for saving a value under a key for the current session."""

    def __init__(self, store: MemoryStore) -> None:
        self.store = store

    @property
    def name(self) -> str:
        return "saveMemory"

    @property
    def description(self) -> str:
        return (
            "Save a piece of information about the user for later in this session, "
            "e.g. their name or preferences. Writing an existing key replaces its value."
        )

    @property
    def parameters(self) -> dict[str, Any]:
        return {
            "type": "object",
            "properties": {
                "key": {
                    "type": "string",
                    "description": "Short identifier for the information (e.g. 'name', 'product')",
                },
                "value": {
                    "type": "string",
                    "description": "The value to remember",
                },
            },
            "required": ["key", "value"],
        }

    async def execute(self, context: ToolContext, **kwargs: Any) -> ToolResult:
        """Upsert a memory entry.

        Args:
            context: Session the entry belongs to.
            key: Entry key.
            value: Entry value.
        """
        key = kwargs.get("key", "")
        value = kwargs.get("value", "")

        if not key or not value:
            return ToolResult(
                success=False,
                error="Both 'key' and 'value' are required",
            )

        try:
            entry = self.store.set(context.session_id, key, value)
        except StorageError as e:
            return ToolResult(success=False, error=f"Storage failure: {e}")

        return ToolResult(
            success=True,
            output=f"Saved {entry.key} = {entry.value}",
            metadata={"key": entry.key, "value": entry.value},
        )


class RecallMemoryTool(Tool):
    """Tool for reading back a saved value."""

    def __init__(self, store: MemoryStore) -> None:
        self.store = store

    @property
    def name(self) -> str:
        return "recallMemory"

    @property
    def description(self) -> str:
        return "Recall a piece of information previously saved with saveMemory."

    @property
    def parameters(self) -> dict[str, Any]:
        return {
            "type": "object",
            "properties": {
                "key": {
                    "type": "string",
                    "description": "Identifier used when the information was saved",
                },
            },
            "required": ["key"],
        }

    async def execute(self, context: ToolContext, **kwargs: Any) -> ToolResult:
        key = kwargs.get("key", "")

        if not key:
            return ToolResult(success=False, error="'key' is required")

        try:
            entry = self.store.get(context.session_id, key)
        except StorageError as e:
            return ToolResult(
                success=False,
                error=f"Storage failure: {e}",
                metadata={"reason": "storage_error"},
            )

        if entry is None:
            return ToolResult(
                success=False,
                error=f"No memory found for key '{key}'",
                metadata={"reason": "not_found"},
            )

        return ToolResult(success=True, output=entry.value, metadata={"key": key})
