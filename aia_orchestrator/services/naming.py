"""
Conversation auto-naming service.

Asks a provider for a short title after the first exchange of a conversation.
Naming is best-effort: every failure is logged and reported as no title.
"""
import asyncio
import logging
from typing import Dict, Optional, Sequence

from aia_orchestrator.domains.messages import Message, Request
from aia_orchestrator.domains.providers import Provider, ProviderKind, find_provider
from aia_orchestrator.domains.settings import OrchestrationSettings
from aia_orchestrator.interfaces.providers.llm import ProviderClient
from aia_orchestrator.interfaces.services.naming import (
    NamingService as NamingServiceInterface,
)

logger = logging.getLogger(__name__)

NAMING_SYSTEM_PROMPT = (
    "You are a title generator. You create very short, concise titles (3-5 words max) "
    "that capture the essence of a conversation. Respond with only the title, nothing else."
)

MAX_TITLE_LENGTH = 50
# Characters of each message shown to the naming provider
EXCERPT_LENGTH = 500


class AutoNamer(NamingServiceInterface):
    """Proposes short conversation titles."""

    def __init__(self, clients: Dict[ProviderKind, ProviderClient]):
        """Initialize the namer.

        Args:
            clients: Provider capabilities keyed by kind, usually shared with
                the orchestrator
        """
        self.clients = clients

    def select_provider(
        self, settings: OrchestrationSettings, providers: Sequence[Provider]
    ) -> Optional[Provider]:
        """Use the configured naming provider, else the first enabled one."""
        provider = find_provider(providers, settings.auto_naming_provider_id)
        if provider is not None and provider.enabled:
            return provider
        if settings.auto_naming_provider_id:
            logger.debug(
                f"Auto-naming provider {settings.auto_naming_provider_id} unavailable, "
                "falling back to first enabled provider"
            )
        return next((p for p in providers if p.enabled), None)

    async def propose_title(
        self,
        first_user_message: str,
        first_assistant_message: str,
        settings: OrchestrationSettings,
        providers: Sequence[Provider],
    ) -> Optional[str]:
        if not settings.enable_auto_naming:
            return None

        provider = self.select_provider(settings, providers)
        if provider is None:
            logger.info("No provider available for auto-naming")
            return None
        client = self.clients.get(provider.kind)
        if client is None or not client.validate_configuration(provider):
            logger.info(f"Provider '{provider.name}' cannot be used for auto-naming")
            return None

        request = Request(
            messages=(
                Message.user(
                    "Generate a concise 3-5 word title that summarizes this conversation. "
                    "Return ONLY the title, no quotes, no punctuation, no explanation:\n\n"
                    f"User: {first_user_message[:EXCERPT_LENGTH]}\n"
                    f"Assistant: {first_assistant_message[:EXCERPT_LENGTH]}"
                ),
            ),
            tools=None,
            temperature=settings.auto_naming_temperature,
            max_tokens=settings.auto_naming_max_tokens,
            system_prompt=NAMING_SYSTEM_PROMPT,
        )

        try:
            response = await asyncio.wait_for(
                client.send(request, provider), timeout=settings.auto_naming_timeout
            )
        except asyncio.TimeoutError:
            logger.warning(
                f"Auto-naming with '{provider.name}' timed out after "
                f"{settings.auto_naming_timeout} seconds"
            )
            return None
        except Exception as e:
            logger.warning(f"Auto-naming with '{provider.name}' failed: {e}")
            return None

        if not response.success or not response.content.strip():
            logger.info(f"Auto-naming produced no title: {response.error or 'empty response'}")
            return None
        return clean_title(response.content, settings.auto_naming_max_tokens)


def clean_title(raw: str, max_tokens: int) -> Optional[str]:
    """Strip quotes and trailing punctuation and bound the length."""
    lines = (raw or "").strip().splitlines()
    if not lines:
        return None
    title = lines[0].strip().strip("\"'`").strip().rstrip(".!?").strip()
    if not title:
        return None
    limit = min(MAX_TITLE_LENGTH, max_tokens * 4)
    if len(title) > limit:
        title = title[: max(limit - 3, 1)].rstrip() + "..."
    return title
