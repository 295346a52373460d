"""
Factory for creating and wiring components of the AIA orchestration engine.

This module handles the creation and dependency injection for all
services and components used in the system.
"""

import logging
from typing import Any, Dict

# Service imports
from aia_orchestrator.services.context import ContextAssembler
from aia_orchestrator.services.conversation import ConversationService
from aia_orchestrator.services.naming import AutoNamer
from aia_orchestrator.services.orchestration import ConversationOrchestrator
from aia_orchestrator.services.routing import RoutingService

# Adapter imports
from aia_orchestrator.adapters.config_store import ConfigurationStore
from aia_orchestrator.adapters.context_sources import StaticContextSource
from aia_orchestrator.adapters.openai_adapter import AzureOpenAIAdapter, OpenAIAdapter

# Domain and plugin imports
from aia_orchestrator.domains.context import ContextCategory
from aia_orchestrator.interfaces.providers.context import ContextSource
from aia_orchestrator.plugins.manager import PluginManager
from aia_orchestrator.plugins.registry import ToolRegistry
from aia_orchestrator.plugins.tools.builtin import CurrentTimeTool

# Setup logger for this module
logger = logging.getLogger(__name__)


class OrchestratorFactory:
    """Factory for creating and wiring components of the orchestration engine."""

    @staticmethod
    def _create_store(config: Dict[str, Any]) -> ConfigurationStore:
        config_dir = config.get("config_dir")
        if config_dir:
            if "providers" in config or "settings" in config:
                logger.warning(
                    "Both config_dir and inline providers/settings given; using config_dir"
                )
            return ConfigurationStore.from_directory(config_dir)
        return ConfigurationStore.from_dict(config)

    @staticmethod
    def _create_context_sources(
        context_config: Dict[str, Any],
    ) -> Dict[ContextCategory, ContextSource]:
        """Build static context sources from the "context" config section."""
        sources: Dict[ContextCategory, ContextSource] = {}
        for key, items in context_config.items():
            try:
                category = ContextCategory(key)
            except ValueError:
                raise ValueError(f"Unknown context category: {key}") from None
            sources[category] = StaticContextSource(items or [])
        return sources

    @staticmethod
    def create_from_config(config: Dict[str, Any]) -> ConversationService:
        """Create the full orchestration stack from configuration.

        Args:
            config: Configuration dictionary

        Returns:
            Configured ConversationService

        Raises:
            ValueError: If the configuration is invalid
        """
        if not isinstance(config, dict):
            raise ValueError("Configuration must be a dictionary")

        store = OrchestratorFactory._create_store(config)

        logfire_api_key = None
        if "logfire" in config:
            logfire_api_key = config["logfire"].get("api_key")
            if not logfire_api_key:
                raise ValueError("Logfire API key is required when logfire is configured")

        # Tools: built-ins first, then entry-point plugins
        tool_registry = ToolRegistry(config=config.get("tools", {}))
        if config.get("tools", {}).get("builtin", True):
            tool_registry.register_tool(CurrentTimeTool())

        plugin_manager = PluginManager(tool_registry, config=config.get("plugins", {}))
        loaded_plugins = plugin_manager.load_plugins()
        logger.info(f"Plugins loaded: {loaded_plugins}")
        logger.info(f"Registered tools: {tool_registry.list_all_tools()}")

        context_service = ContextAssembler(
            OrchestratorFactory._create_context_sources(config.get("context", {}))
        )

        orchestrator = ConversationOrchestrator(
            routing_service=RoutingService(),
            tool_registry=tool_registry,
            clients=[
                OpenAIAdapter(logfire_api_key=logfire_api_key),
                AzureOpenAIAdapter(logfire_api_key=logfire_api_key),
            ],
            context_service=context_service,
        )

        # The namer shares the orchestrator's client table so hosts register once
        namer = AutoNamer(orchestrator.clients)

        return ConversationService(
            config=store,
            orchestrator=orchestrator,
            namer=namer,
        )
