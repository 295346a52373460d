from abc import ABC, abstractmethod
from typing import AsyncIterator

from aia_orchestrator.domains.messages import Request, Response, StreamChunk
from aia_orchestrator.domains.providers import Provider, ProviderKind


class ProviderClient(ABC):
    """Uniform capability implemented once per AI vendor."""

    @property
    @abstractmethod
    def kind(self) -> ProviderKind:
        """The vendor this client talks to."""
        pass

    @abstractmethod
    async def send(self, request: Request, provider: Provider) -> Response:
        """Send a request and return the complete response.

        Vendor failures are either raised or reported through Response.error.
        """
        pass

    async def stream(self, request: Request, provider: Provider) -> AsyncIterator[StreamChunk]:
        """Stream content chunks, ending with a chunk that carries the aggregated response.

        Clients without native streaming fall back to a single send.
        """
        response = await self.send(request, provider)
        if response.content:
            yield StreamChunk(delta=response.content)
        yield StreamChunk(response=response)

    def validate_configuration(self, provider: Provider) -> bool:
        """Check the provider carries what this vendor needs."""
        return provider.kind == self.kind and provider.is_usable()
