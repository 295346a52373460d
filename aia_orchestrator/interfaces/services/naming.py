from abc import ABC, abstractmethod
from typing import Optional, Sequence

from aia_orchestrator.domains.providers import Provider
from aia_orchestrator.domains.settings import OrchestrationSettings


class NamingService(ABC):
    """Interface for conversation auto-naming."""

    @abstractmethod
    async def propose_title(
        self,
        first_user_message: str,
        first_assistant_message: str,
        settings: OrchestrationSettings,
        providers: Sequence[Provider],
    ) -> Optional[str]:
        """Propose a short title, or None when skipped or unsuccessful."""
        pass
