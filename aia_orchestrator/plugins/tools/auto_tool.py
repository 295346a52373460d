"""
Tool base classes for the AIA orchestration engine.

AutoTool implements the Tool interface and can be extended to create custom
tools; FunctionTool wraps a plain or async callable.
"""
import asyncio
import inspect
from typing import Any, Awaitable, Callable, Dict, Optional, Union

from aia_orchestrator.domains.tools import ToolParameter
from aia_orchestrator.interfaces.plugins.plugins import Tool

Handler = Callable[..., Union[str, Awaitable[str]]]


class AutoTool(Tool):
    """Base class for tools that automatically register with the system."""

    def __init__(
        self,
        name: str,
        description: str,
        parameters: Optional[Dict[str, Union[ToolParameter, Dict[str, Any]]]] = None,
        registry=None,
    ):
        """Initialize the tool with name, description and parameter schema."""
        self._name = name
        self._description = description
        self._parameters = {
            key: value if isinstance(value, ToolParameter) else ToolParameter(**value)
            for key, value in (parameters or {}).items()
        }
        self._config = {}

        # Register with the provided registry if given
        if registry is not None:
            registry.register_tool(self)

    @property
    def name(self) -> str:
        """Get the name of the tool."""
        return self._name

    @property
    def description(self) -> str:
        """Get the description of the tool."""
        return self._description

    @property
    def parameters(self) -> Dict[str, ToolParameter]:
        """Get the ordered parameter schema of the tool."""
        return dict(self._parameters)

    def configure(self, config: Dict[str, Any]) -> None:
        """Configure the tool with settings from config."""
        if config is None:
            raise TypeError("Config cannot be None")
        self._config = config

    def get_schema(self) -> Dict[str, Any]:
        """Return the JSON schema for this tool's parameters."""
        properties: Dict[str, Any] = {}
        required = []
        for param_name, param in self._parameters.items():
            definition: Dict[str, Any] = {
                "type": param.type,
                "description": param.description,
            }
            # Only add enum if it has values
            if param.enum:
                definition["enum"] = list(param.enum)
            properties[param_name] = definition
            if param.required:
                required.append(param_name)
        return {"type": "object", "properties": properties, "required": required}

    async def execute(self, **params) -> str:
        """Execute the tool with the provided parameters."""
        # Override in subclasses
        raise NotImplementedError("Tool must implement execute method")


class FunctionTool(AutoTool):
    """Tool backed by a callable taking the resolved arguments as keywords.

    Synchronous handlers run in a worker thread so that handlers doing I/O do
    not block the event loop.
    """

    def __init__(
        self,
        name: str,
        description: str,
        handler: Handler,
        parameters: Optional[Dict[str, Union[ToolParameter, Dict[str, Any]]]] = None,
        registry=None,
    ):
        self._handler = handler
        super().__init__(name, description, parameters=parameters, registry=registry)

    async def execute(self, **params) -> str:
        if inspect.iscoroutinefunction(self._handler):
            return await self._handler(**params)
        return await asyncio.to_thread(self._handler, **params)
