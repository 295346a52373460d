"""
AIA Orchestrator - routes prompts across AI providers and drives tool-calling conversations.

This package selects one of several configured AI providers for each prompt,
runs the request/response/tool loop against it and names conversations.
"""

# Client interface (main entry point)
from aia_orchestrator.client.aia_orchestrator import AIAOrchestrator

# Factory for creating orchestration stacks
from aia_orchestrator.factories.orchestrator_factory import OrchestratorFactory

# Cancellation and errors
from aia_orchestrator.cancellation import CancellationToken
from aia_orchestrator.exceptions import (
    ConversationCancelledError,
    OrchestrationError,
    ProviderError,
    RoutingError,
)

# Useful tools and utilities
from aia_orchestrator.plugins.manager import PluginManager
from aia_orchestrator.plugins.registry import ToolRegistry
from aia_orchestrator.plugins.tools.auto_tool import AutoTool, FunctionTool
from aia_orchestrator.interfaces.plugins.plugins import Plugin, Tool
from aia_orchestrator.interfaces.providers.context import ContextSource
from aia_orchestrator.interfaces.providers.llm import ProviderClient

# Package metadata
__all__ = [
    # Main client interfaces
    "AIAOrchestrator",
    # Factories
    "OrchestratorFactory",
    # Cancellation and errors
    "CancellationToken",
    "OrchestrationError",
    "RoutingError",
    "ProviderError",
    "ConversationCancelledError",
    # Tools
    "PluginManager",
    "ToolRegistry",
    "AutoTool",
    "FunctionTool",
    "Tool",
    "Plugin",
    # Extension points
    "ProviderClient",
    "ContextSource",
]
