"""
Simplified client interface for interacting with the AIA orchestration engine.

This module provides a clean API for end users to interact with
the engine without dealing with internal implementation details.
"""

import importlib.util
import json
from contextlib import aclosing
from typing import Any, AsyncGenerator, Dict, List, Optional, Tuple

from aia_orchestrator.cancellation import CancellationToken
from aia_orchestrator.domains.conversation import OrchestrationEvent
from aia_orchestrator.domains.messages import Response
from aia_orchestrator.domains.providers import Provider
from aia_orchestrator.domains.routing import RoutingCategory
from aia_orchestrator.factories.orchestrator_factory import OrchestratorFactory
from aia_orchestrator.interfaces.client.client import (
    AIAOrchestrator as AIAOrchestratorInterface,
)
from aia_orchestrator.interfaces.plugins.plugins import Tool
from aia_orchestrator.interfaces.providers.llm import ProviderClient


class AIAOrchestrator(AIAOrchestratorInterface):
    """Simplified client interface for interacting with the orchestration engine."""

    def __init__(self, config_path: str = None, config: Dict[str, Any] = None):
        """Initialize the engine from config file or dictionary.

        Args:
            config_path: Path to configuration file (JSON or Python)
            config: Configuration dictionary
        """
        if not config and not config_path:
            raise ValueError("Either config or config_path must be provided")

        if config_path:
            with open(config_path, "r") as f:
                if config_path.endswith(".json"):
                    config = json.load(f)
                else:
                    # Assume it's a Python file
                    spec = importlib.util.spec_from_file_location("config", config_path)
                    config_module = importlib.util.module_from_spec(spec)
                    spec.loader.exec_module(config_module)
                    config = config_module.config

        self.conversation_service = OrchestratorFactory.create_from_config(config)

    @property
    def _orchestrator(self):
        return self.conversation_service.orchestrator

    def new_conversation(self) -> str:
        return self.conversation_service.start_conversation().id

    async def process(
        self,
        conversation_id: str,
        message: str,
        provider_id: Optional[str] = None,
        cancel_token: Optional[CancellationToken] = None,
    ) -> Response:
        """Run one user turn and return the final response.

        Args:
            conversation_id: Conversation to continue; unknown ids start a new one
            message: User message
            provider_id: Optional provider that bypasses auto-routing
            cancel_token: Optional token to cancel the turn

        Returns:
            Final response with summed token usage
        """
        return await self.conversation_service.process(
            conversation_id, message, provider_id=provider_id, cancel_token=cancel_token
        )

    async def stream(
        self,
        conversation_id: str,
        message: str,
        provider_id: Optional[str] = None,
        cancel_token: Optional[CancellationToken] = None,
    ) -> AsyncGenerator[str, None]:
        async with aclosing(
            self.stream_events(conversation_id, message, provider_id, cancel_token)
        ) as events:
            async for event in events:
                if event.type == "content" and event.delta:
                    yield event.delta

    async def stream_events(
        self,
        conversation_id: str,
        message: str,
        provider_id: Optional[str] = None,
        cancel_token: Optional[CancellationToken] = None,
    ) -> AsyncGenerator[OrchestrationEvent, None]:
        async with aclosing(
            self.conversation_service.stream(
                conversation_id, message, provider_id=provider_id, cancel_token=cancel_token
            )
        ) as events:
            async for event in events:
                yield event

    def route(self, prompt: str) -> Tuple[Optional[RoutingCategory], Provider]:
        """
        Preview which provider would handle a prompt.

        Args:
            prompt: User prompt

        Returns:
            Inferred category (None when nothing matched) and the selected provider
        """
        config = self.conversation_service.config
        routing = self._orchestrator.routing_service
        provider = routing.select_provider(
            prompt, config.get_settings(), config.get_providers()
        )
        return routing.classify_prompt(prompt), provider

    def register_tool(self, tool: Tool) -> bool:
        """
        Register a tool with the orchestrator.

        Args:
            tool: Tool instance to register

        Returns:
            True if successful, False
        """
        return self._orchestrator.tool_registry.register_tool(tool)

    def register_client(self, client: ProviderClient) -> None:
        """Register the capability for a provider kind, such as Google or Anthropic."""
        self._orchestrator.register_client(client)

    def list_tools(self) -> List[Dict[str, Any]]:
        registry = self._orchestrator.tool_registry
        return [
            {"name": name, "description": registry.get_tool(name).description}
            for name in registry.list_all_tools()
        ]

    def list_providers(self) -> Tuple[Provider, ...]:
        return self.conversation_service.config.get_providers()

    def get_title(self, conversation_id: str) -> Optional[str]:
        conversation = self.conversation_service.get_conversation(conversation_id)
        return conversation.title if conversation else None

    async def wait_for_naming(self) -> None:
        """Wait for detached auto-naming to finish."""
        await self.conversation_service.wait_for_naming()
