from abc import ABC, abstractmethod
from typing import Tuple

from aia_orchestrator.domains.providers import Provider
from aia_orchestrator.domains.settings import OrchestrationSettings


class ConfigurationProvider(ABC):
    """Read-only source of provider and settings snapshots."""

    @abstractmethod
    def get_settings(self) -> OrchestrationSettings:
        """Return the current settings snapshot."""
        pass

    @abstractmethod
    def get_providers(self) -> Tuple[Provider, ...]:
        """Return the configured providers in registration order."""
        pass
