"""
Plugin system interfaces.

These interfaces define the contracts for the plugin system,
enabling feature collaborators to contribute tools at process start.
"""
from abc import ABC, abstractmethod
from typing import Dict, List, Any, Optional

from aia_orchestrator.domains.tools import ToolCall, ToolParameter, ToolResult


class Tool(ABC):
    """Interface for tools that providers can call."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Get the name of the tool."""
        pass

    @property
    @abstractmethod
    def description(self) -> str:
        """Get the description of the tool."""
        pass

    @property
    @abstractmethod
    def parameters(self) -> Dict[str, ToolParameter]:
        """Get the ordered parameter schema of the tool."""
        pass

    @abstractmethod
    def configure(self, config: Dict[str, Any]) -> None:
        """Configure the tool with global configuration."""
        pass

    @abstractmethod
    def get_schema(self) -> Dict[str, Any]:
        """Get the JSON schema for the tool parameters."""
        pass

    @abstractmethod
    async def execute(self, **params) -> str:
        """Execute the tool with the given parameters and return a textual result."""
        pass


class ToolRegistry(ABC):
    """Interface for the tool registry."""

    @abstractmethod
    def register_tool(self, tool: Tool) -> bool:
        """Register a tool in the registry."""
        pass

    @abstractmethod
    def get_tool(self, tool_name: str) -> Optional[Tool]:
        """Get a tool by name."""
        pass

    @abstractmethod
    def resolve(self, tool_name: str) -> Tool:
        """Get a tool by name, raising ToolNotFoundError when it is missing."""
        pass

    @abstractmethod
    async def execute(self, tool_call: ToolCall) -> ToolResult:
        """Validate and execute a tool call. Never raises."""
        pass

    @abstractmethod
    def get_tool_schemas(self) -> List[Dict[str, Any]]:
        """Get function schemas for every registered tool."""
        pass

    @abstractmethod
    def list_all_tools(self) -> List[str]:
        """List all registered tools."""
        pass


class Plugin(ABC):
    """Interface for plugins that can be loaded by the system."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Get the name of the plugin."""
        pass

    @property
    @abstractmethod
    def description(self) -> str:
        """Get the description of the plugin."""
        pass

    @abstractmethod
    def initialize(self, tool_registry: ToolRegistry) -> bool:
        """Initialize the plugin and register its tools."""
        pass

    @abstractmethod
    def configure(self, config: Dict[str, Any]) -> None:
        """Configure the plugin."""
        pass


class PluginManager(ABC):
    """Interface for discovering plugins that contribute tools."""

    @abstractmethod
    def register_plugin(self, plugin: Plugin) -> bool:
        """Configure a plugin and let it register its tools."""
        pass

    @abstractmethod
    def load_plugins(self) -> List[str]:
        """Discover and register every installed plugin."""
        pass
