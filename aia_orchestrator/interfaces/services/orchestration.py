from abc import ABC, abstractmethod
from typing import AsyncGenerator, Optional, Sequence

from aia_orchestrator.cancellation import CancellationToken
from aia_orchestrator.domains.conversation import Conversation, OrchestrationEvent
from aia_orchestrator.domains.messages import Response
from aia_orchestrator.domains.providers import Provider
from aia_orchestrator.domains.settings import OrchestrationSettings


class OrchestrationService(ABC):
    """Interface for the conversation state machine."""

    @abstractmethod
    async def run(
        self,
        conversation: Conversation,
        prompt: str,
        settings: OrchestrationSettings,
        providers: Sequence[Provider],
        provider: Optional[Provider] = None,
        cancel_token: Optional[CancellationToken] = None,
    ) -> Response:
        """Drive one user turn to completion and return the final response."""
        pass

    @abstractmethod
    async def run_stream(
        self,
        conversation: Conversation,
        prompt: str,
        settings: OrchestrationSettings,
        providers: Sequence[Provider],
        provider: Optional[Provider] = None,
        cancel_token: Optional[CancellationToken] = None,
    ) -> AsyncGenerator[OrchestrationEvent, None]:
        """Drive one user turn, streaming status and content events."""
        pass
