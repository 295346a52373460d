from abc import ABC, abstractmethod
from typing import Any, AsyncGenerator, Dict, List, Optional, Tuple

from aia_orchestrator.cancellation import CancellationToken
from aia_orchestrator.domains.conversation import OrchestrationEvent
from aia_orchestrator.domains.messages import Response
from aia_orchestrator.domains.providers import Provider
from aia_orchestrator.domains.routing import RoutingCategory
from aia_orchestrator.interfaces.plugins.plugins import Tool


class AIAOrchestrator(ABC):
    """Interface for the AIA orchestrator client."""

    @abstractmethod
    def new_conversation(self) -> str:
        """Start a conversation and return its id."""
        pass

    @abstractmethod
    async def process(
        self,
        conversation_id: str,
        message: str,
        provider_id: Optional[str] = None,
        cancel_token: Optional[CancellationToken] = None,
    ) -> Response:
        """Run one user turn and return the final response."""
        pass

    @abstractmethod
    async def stream(
        self,
        conversation_id: str,
        message: str,
        provider_id: Optional[str] = None,
        cancel_token: Optional[CancellationToken] = None,
    ) -> AsyncGenerator[str, None]:
        """Run one user turn, yielding content as it arrives."""
        pass

    @abstractmethod
    async def stream_events(
        self,
        conversation_id: str,
        message: str,
        provider_id: Optional[str] = None,
        cancel_token: Optional[CancellationToken] = None,
    ) -> AsyncGenerator[OrchestrationEvent, None]:
        """Run one user turn, yielding status, content and completion events."""
        pass

    @abstractmethod
    def route(self, prompt: str) -> Tuple[Optional[RoutingCategory], Provider]:
        """Preview the routing decision for a prompt."""
        pass

    @abstractmethod
    def register_tool(self, tool: Tool) -> bool:
        """Register a tool with the orchestrator."""
        pass

    @abstractmethod
    def list_tools(self) -> List[Dict[str, Any]]:
        """List the registered tools."""
        pass

    @abstractmethod
    def list_providers(self) -> Tuple[Provider, ...]:
        """List the configured providers."""
        pass

    @abstractmethod
    def get_title(self, conversation_id: str) -> Optional[str]:
        """Get the auto-generated title of a conversation, if any."""
        pass
