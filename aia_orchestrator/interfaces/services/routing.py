from abc import ABC, abstractmethod
from typing import Optional, Sequence

from aia_orchestrator.domains.providers import Provider
from aia_orchestrator.domains.routing import RoutingCategory
from aia_orchestrator.domains.settings import OrchestrationSettings


class RoutingService(ABC):
    """Interface for provider routing."""

    @abstractmethod
    def classify_prompt(self, prompt: str) -> Optional[RoutingCategory]:
        """Infer the routing category of a prompt, if any."""
        pass

    @abstractmethod
    def select_provider(
        self,
        prompt: str,
        settings: OrchestrationSettings,
        providers: Sequence[Provider],
    ) -> Provider:
        """Select the provider that should handle a prompt.

        Raises:
            RoutingError: when no enabled provider exists
        """
        pass
