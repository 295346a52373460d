"""
Shared fixtures for the AIA orchestrator test suite.
"""
import asyncio
from typing import List, Optional, Sequence, Union

import pytest

from aia_orchestrator.domains.messages import Request, Response, StreamChunk
from aia_orchestrator.domains.providers import Provider, ProviderKind
from aia_orchestrator.domains.settings import OrchestrationSettings
from aia_orchestrator.interfaces.providers.llm import ProviderClient

Scripted = Union[Response, Exception]


class ScriptedClient(ProviderClient):
    """Fake provider capability that replays scripted responses.

    Every request is recorded. Once the script runs out, the last entry is
    repeated, so a single tool-call response means "always request tools".
    """

    def __init__(
        self,
        responses: Sequence[Scripted] = (),
        kind: ProviderKind = ProviderKind.OPENAI,
        delay: float = 0.0,
        chunk_size: Optional[int] = None,
    ):
        self._kind = kind
        self.responses: List[Scripted] = list(responses) or [Response(content="ok")]
        self.requests: List[Request] = []
        self.delay = delay
        self.chunk_size = chunk_size
        self.stream_closed = False

    @property
    def kind(self) -> ProviderKind:
        return self._kind

    def _next(self) -> Scripted:
        if len(self.responses) > 1:
            return self.responses.pop(0)
        return self.responses[0]

    async def send(self, request: Request, provider: Provider) -> Response:
        self.requests.append(request)
        if self.delay:
            await asyncio.sleep(self.delay)
        item = self._next()
        if isinstance(item, Exception):
            raise item
        return item

    async def stream(self, request: Request, provider: Provider):
        if self.chunk_size is None:
            async for chunk in super().stream(request, provider):
                yield chunk
            return
        try:
            response = await self.send(request, provider)
            text = response.content
            for start in range(0, len(text), self.chunk_size):
                yield StreamChunk(delta=text[start:start + self.chunk_size])
            yield StreamChunk(response=response)
        finally:
            self.stream_closed = True


@pytest.fixture
def scripted_client():
    """Factory for scripted provider clients."""
    return ScriptedClient


@pytest.fixture
def provider():
    """A usable OpenAI provider flagged as default."""
    return Provider(
        id="general",
        name="General",
        kind=ProviderKind.OPENAI,
        api_key="sk-test",
        model_id="gpt-4o",
        is_default=True,
    )


@pytest.fixture
def settings():
    """Default settings without context or auto-naming."""
    return OrchestrationSettings(
        include_tasks_context=False,
        include_reminders_context=False,
        include_data_bank_context=False,
        enable_auto_naming=False,
    )


@pytest.fixture
def provider_factory():
    """Build usable providers with overrides."""

    def _create(**overrides) -> Provider:
        values = {
            "name": "Provider",
            "kind": ProviderKind.OPENAI,
            "api_key": "sk-test",
            "model_id": "gpt-4o",
        }
        values.update(overrides)
        return Provider(**values)

    return _create
