"""Tests for tool registry."""

import pytest

from helpdesk.tools import Tool, ToolContext, ToolResult, ToolRegistry


class EchoTool(Tool):
    """Simple echo tool for testing."""

    @property
    def name(self) -> str:
        return "echo"

    @property
    def description(self) -> str:
        return "Echoes the input message"

    @property
    def parameters(self) -> dict:
        return {
            "type": "object",
            "properties": {
                "message": {"type": "string", "description": "Message to echo"},
            },
            "required": ["message"],
        }

    async def execute(self, context: ToolContext, message: str) -> ToolResult:
        return ToolResult(success=True, output=f"{context.session_id}:{message}")


class ExplodingTool(EchoTool):
    @property
    def name(self) -> str:
        return "explode"

    async def execute(self, context: ToolContext, message: str) -> ToolResult:
        raise RuntimeError("boom")


@pytest.fixture
def registry() -> ToolRegistry:
    return ToolRegistry()


@pytest.fixture
def echo_tool() -> EchoTool:
    return EchoTool()


@pytest.fixture
def context() -> ToolContext:
    return ToolContext(session_id="s1")


def test_register_tool(registry: ToolRegistry, echo_tool: EchoTool) -> None:
    registry.register(echo_tool)
    assert "echo" in registry.list_tools()


def test_register_duplicate_raises(registry: ToolRegistry, echo_tool: EchoTool) -> None:
    registry.register(echo_tool)
    with pytest.raises(ValueError, match="already registered"):
        registry.register(echo_tool)


def test_get_tool(registry: ToolRegistry, echo_tool: EchoTool) -> None:
    registry.register(echo_tool)
    assert registry.get("echo") is echo_tool
    assert registry.get("unknown") is None


def test_get_tools_schema(registry: ToolRegistry, echo_tool: EchoTool) -> None:
    registry.register(echo_tool)
    schemas = registry.get_tools_schema()
    assert len(schemas) == 1
    assert schemas[0]["type"] == "function"
    assert schemas[0]["function"]["name"] == "echo"
    assert schemas[0]["function"]["parameters"]["required"] == ["message"]


@pytest.mark.asyncio
async def test_dispatch_passes_context(
    registry: ToolRegistry, echo_tool: EchoTool, context: ToolContext
) -> None:
    registry.register(echo_tool)
    result = await registry.dispatch("echo", {"message": "hello"}, context)
    assert result.success is True
    assert result.output == "s1:hello"


@pytest.mark.asyncio
async def test_dispatch_unknown_tool(registry: ToolRegistry, context: ToolContext) -> None:
    result = await registry.dispatch("launchRockets", {}, context)
    assert result.success is False
    assert result.error == "Unsupported tool: launchRockets"


@pytest.mark.asyncio
async def test_dispatch_missing_required_arg(
    registry: ToolRegistry, echo_tool: EchoTool, context: ToolContext
) -> None:
    registry.register(echo_tool)
    result = await registry.dispatch("echo", {}, context)
    assert result.success is False
    assert "Missing required" in result.error


@pytest.mark.asyncio
async def test_dispatch_captures_exceptions(registry: ToolRegistry, context: ToolContext) -> None:
    registry.register(ExplodingTool())
    result = await registry.dispatch("explode", {"message": "x"}, context)
    assert result.success is False
    assert "boom" in result.error


@pytest.mark.asyncio
async def test_dispatch_unexpected_argument(
    registry: ToolRegistry, echo_tool: EchoTool, context: ToolContext
) -> None:
    registry.register(echo_tool)
    result = await registry.dispatch("echo", {"message": "x", "extra": 1}, context)
    assert result.success is False
    assert "Tool execution failed" in result.error


def test_validate_args_type_check(echo_tool: EchoTool) -> None:
    valid, error = echo_tool.validate_args({"message": 123})
    assert valid is False
    assert "must be a string" in error


def test_tool_result_payload() -> None:
    assert ToolResult(success=True, output="ok").to_payload() == {"success": True, "result": "ok"}
    assert ToolResult(success=False, error="nope").to_payload() == {
        "success": False,
        "error": "nope",
    }
    assert ToolResult(success=False).to_payload()["error"] == "Unknown error"
