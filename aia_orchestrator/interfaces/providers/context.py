from abc import ABC, abstractmethod
from typing import List

from aia_orchestrator.domains.context import ContextItem


class ContextSource(ABC):
    """Read-only collaborator that supplies context items for one category."""

    @abstractmethod
    async def fetch(self, limit: int) -> List[ContextItem]:
        """Return up to `limit` of the most relevant items."""
        pass
