"""
Tests for the ToolRegistry implementation.

This module covers tool registration, argument validation, execution and
the containment of every tool failure in a ToolResult.
"""

import json

import pytest
from unittest.mock import AsyncMock, MagicMock

from aia_orchestrator.domains.tools import ToolCall, ToolParameter
from aia_orchestrator.exceptions import ToolNotFoundError, ToolValidationError
from aia_orchestrator.interfaces.plugins.plugins import Tool
from aia_orchestrator.plugins.registry import ToolRegistry


@pytest.fixture
def mock_tool():
    """Create a mock tool for testing."""
    tool = MagicMock(spec=Tool)
    tool.name = "create_task"
    tool.description = "Create a task"
    tool.parameters = {
        "title": ToolParameter(description="Task title", required=True),
        "priority": ToolParameter(enum=["low", "medium", "high"]),
    }
    tool.get_schema.return_value = {
        "type": "object",
        "properties": {"title": {"type": "string"}},
        "required": ["title"],
    }
    tool.execute = AsyncMock(return_value='{"id": 1}')
    return tool


@pytest.fixture
def config():
    """Sample configuration for testing."""
    return {"api_key": "test_key"}


class TestToolRegistry:
    """Test suite for ToolRegistry."""

    def test_init_default(self):
        registry = ToolRegistry()
        assert registry._tools == {}
        assert registry._config == {}

    def test_register_tool_success(self, mock_tool, config):
        registry = ToolRegistry(config)
        assert registry.register_tool(mock_tool)
        mock_tool.configure.assert_called_once_with(config)
        assert registry.get_tool("create_task") is mock_tool

    def test_register_duplicate_rejected(self, mock_tool):
        registry = ToolRegistry()
        assert registry.register_tool(mock_tool)
        assert not registry.register_tool(mock_tool)
        assert registry.list_all_tools() == ["create_task"]

    def test_register_nameless_tool_rejected(self, mock_tool):
        mock_tool.name = ""
        assert not ToolRegistry().register_tool(mock_tool)

    def test_register_tool_configure_failure(self, mock_tool):
        mock_tool.configure.side_effect = Exception("bad config")
        registry = ToolRegistry()
        assert not registry.register_tool(mock_tool)
        assert registry.get_tool("create_task") is None

    def test_resolve_missing_raises(self):
        with pytest.raises(ToolNotFoundError, match="Tool 'nope' not found"):
            ToolRegistry().resolve("nope")

    def test_validate_arguments_collects_problems(self, mock_tool):
        registry = ToolRegistry()
        with pytest.raises(ToolValidationError) as exc:
            registry.validate_arguments(mock_tool, {"priority": "urgent"})
        assert "missing required parameter 'title'" in str(exc.value)
        assert "must be one of" in str(exc.value)

    def test_validate_arguments_none_counts_as_missing(self, mock_tool):
        with pytest.raises(ToolValidationError):
            ToolRegistry().validate_arguments(mock_tool, {"title": None})

    @pytest.mark.asyncio
    async def test_execute_success(self, mock_tool):
        registry = ToolRegistry()
        registry.register_tool(mock_tool)
        call = ToolCall(name="create_task", arguments={"title": "Pay rent", "priority": "high"})

        result = await registry.execute(call)

        assert result.success
        assert result.tool_call_id == call.id
        assert result.name == "create_task"
        assert result.result == '{"id": 1}'
        mock_tool.execute.assert_awaited_once_with(title="Pay rent", priority="high")

    @pytest.mark.asyncio
    async def test_execute_missing_required_never_calls_handler(self, mock_tool):
        registry = ToolRegistry()
        registry.register_tool(mock_tool)

        result = await registry.execute(ToolCall(name="create_task", arguments={}))

        assert not result.success
        assert "title" in json.loads(result.result)["error"]
        mock_tool.execute.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_execute_unknown_tool(self):
        result = await ToolRegistry().execute(ToolCall(name="missing"))
        assert not result.success
        assert json.loads(result.result) == {"error": "Tool 'missing' not found"}

    @pytest.mark.asyncio
    async def test_execute_handler_failure_contained(self, mock_tool):
        mock_tool.execute.side_effect = RuntimeError("database locked")
        registry = ToolRegistry()
        registry.register_tool(mock_tool)

        result = await registry.execute(ToolCall(name="create_task", arguments={"title": "x"}))

        assert not result.success
        assert "database locked" in result.error
        assert "database locked" in json.loads(result.result)["error"]

    @pytest.mark.asyncio
    async def test_execute_serializes_non_string_results(self, mock_tool):
        mock_tool.execute.return_value = {"count": 3}
        registry = ToolRegistry()
        registry.register_tool(mock_tool)

        result = await registry.execute(ToolCall(name="create_task", arguments={"title": "x"}))

        assert json.loads(result.result) == {"count": 3}

    def test_get_tool_schemas(self, mock_tool):
        registry = ToolRegistry()
        registry.register_tool(mock_tool)
        schemas = registry.get_tool_schemas()
        assert schemas == [
            {
                "type": "function",
                "function": {
                    "name": "create_task",
                    "description": "Create a task",
                    "parameters": mock_tool.get_schema.return_value,
                },
            }
        ]
