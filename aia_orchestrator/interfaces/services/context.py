from abc import ABC, abstractmethod

from aia_orchestrator.domains.settings import OrchestrationSettings


class ContextService(ABC):
    """Interface for assembling bounded context into the system prompt."""

    @abstractmethod
    async def assemble_context(self, settings: OrchestrationSettings) -> str:
        """Render the enabled context categories as text."""
        pass

    @abstractmethod
    def build_system_prompt(self, settings: OrchestrationSettings, context_text: str = "") -> str:
        """Compose the system prompt around the assembled context."""
        pass
