"""
Tool registry for the AIA orchestration engine.

This module implements the concrete ToolRegistry that stores tools,
validates tool calls against their parameter schemas, and executes them.
"""

import json
import logging
from typing import Dict, List, Any, Optional

from aia_orchestrator.domains.tools import ToolCall, ToolResult
from aia_orchestrator.exceptions import (
    ToolExecutionError,
    ToolNotFoundError,
    ToolValidationError,
)
from aia_orchestrator.interfaces.plugins.plugins import (
    ToolRegistry as ToolRegistryInterface,
)
from aia_orchestrator.interfaces.plugins.plugins import Tool

# Setup logger for this module
logger = logging.getLogger(__name__)


class ToolRegistry(ToolRegistryInterface):
    """Instance-based registry of named tools."""

    def __init__(self, config: Dict[str, Any] = None):
        """Initialize an empty tool registry."""
        self._tools: Dict[str, Tool] = {}  # insertion ordered
        self._config = config or {}

    def register_tool(self, tool: Tool) -> bool:
        """Register a tool with this registry.

        Tool names are unique; a second registration under the same name is
        rejected so that tools stay immutable once the process has started.
        """
        if not tool.name:
            logger.error("Cannot register a tool without a name")
            return False
        if tool.name in self._tools:
            logger.warning(f"Tool '{tool.name}' is already registered; ignoring duplicate")
            return False
        try:
            tool.configure(self._config)

            self._tools[tool.name] = tool
            logger.info(f"Successfully registered and configured tool: {tool.name}")
            return True
        except Exception as e:
            logger.error(f"Error registering tool: {str(e)}")
            return False

    def get_tool(self, tool_name: str) -> Optional[Tool]:
        """Get a tool by name."""
        return self._tools.get(tool_name)

    def resolve(self, tool_name: str) -> Tool:
        """Get a tool by name or raise ToolNotFoundError."""
        tool = self._tools.get(tool_name)
        if tool is None:
            raise ToolNotFoundError(tool_name)
        return tool

    def validate_arguments(self, tool: Tool, arguments: Dict[str, Any]) -> None:
        """Check arguments against the tool's parameter schema.

        Raises:
            ToolValidationError: describing every problem found
        """
        problems = []
        for param_name, param in tool.parameters.items():
            present = param_name in arguments and arguments[param_name] is not None
            if param.required and not present:
                problems.append(f"missing required parameter '{param_name}'")
                continue
            if present and param.enum:
                value = arguments[param_name]
                if str(value) not in param.enum:
                    problems.append(
                        f"parameter '{param_name}' must be one of {param.enum}, got '{value}'"
                    )
        if problems:
            raise ToolValidationError(
                f"Invalid arguments for tool '{tool.name}': " + "; ".join(problems)
            )

    async def execute(self, tool_call: ToolCall) -> ToolResult:
        """Validate and execute a tool call.

        Every failure is contained in the returned ToolResult; nothing is
        raised past this method.
        """
        try:
            tool = self.resolve(tool_call.name)
            self.validate_arguments(tool, tool_call.arguments)
        except (ToolNotFoundError, ToolValidationError) as e:
            logger.warning(f"Rejected tool call {tool_call.id}: {e}")
            return self._failed(tool_call, str(e))

        logger.info(
            f"Executing tool '{tool_call.name}' with params: {tool_call.arguments}"
        )
        try:
            result = await tool.execute(**tool_call.arguments)
        except Exception as e:
            error = ToolExecutionError(f"Error executing tool '{tool_call.name}': {e}")
            logger.error(str(error), exc_info=True)
            return self._failed(tool_call, str(error))

        if not isinstance(result, str):
            result = json.dumps(result, default=str)
        logger.debug(f"Tool '{tool_call.name}' returned {len(result)} characters")
        return ToolResult(
            tool_call_id=tool_call.id,
            name=tool_call.name,
            result=result,
            success=True,
        )

    @staticmethod
    def _failed(tool_call: ToolCall, error: str) -> ToolResult:
        return ToolResult(
            tool_call_id=tool_call.id,
            name=tool_call.name,
            result=json.dumps({"error": error}),
            success=False,
            error=error,
        )

    def get_tool_schemas(self) -> List[Dict[str, Any]]:
        """Get OpenAI style function schemas for all registered tools."""
        tools = [
            {
                "type": "function",
                "function": {
                    "name": name,
                    "description": tool.description,
                    "parameters": tool.get_schema(),
                },
            }
            for name, tool in self._tools.items()
        ]
        logger.debug(f"Tool schemas available: {[t['function']['name'] for t in tools]}")
        return tools

    def list_all_tools(self) -> List[str]:
        """List all registered tools."""
        return list(self._tools.keys())
