"""
Conversation service.

Owns conversation transcripts, serializes turns per conversation, snapshots
configuration for each turn and launches detached auto-naming after the first
exchange.
"""
import asyncio
import logging
from typing import AsyncGenerator, Callable, Dict, List, Optional, Set

from aia_orchestrator.cancellation import CancellationToken
from aia_orchestrator.domains.conversation import Conversation, OrchestrationEvent
from aia_orchestrator.domains.messages import Response
from aia_orchestrator.domains.providers import Provider, find_provider
from aia_orchestrator.domains.settings import OrchestrationSettings
from aia_orchestrator.exceptions import RoutingError
from aia_orchestrator.interfaces.providers.config import ConfigurationProvider
from aia_orchestrator.interfaces.services.naming import NamingService
from aia_orchestrator.interfaces.services.orchestration import OrchestrationService

logger = logging.getLogger(__name__)

TitleCallback = Callable[[str, str], None]


class ConversationService:
    """Entry point for running conversation turns."""

    def __init__(
        self,
        config: ConfigurationProvider,
        orchestrator: OrchestrationService,
        namer: Optional[NamingService] = None,
        on_title: Optional[TitleCallback] = None,
    ):
        """Initialize the conversation service.

        Args:
            config: Source of settings and provider snapshots
            orchestrator: Conversation state machine
            namer: Optional auto-naming service
            on_title: Called with (conversation_id, title) when a title is proposed
        """
        self.config = config
        self.orchestrator = orchestrator
        self.namer = namer
        self.on_title = on_title
        self._conversations: Dict[str, Conversation] = {}
        self._locks: Dict[str, asyncio.Lock] = {}
        self._naming_tasks: Set[asyncio.Task] = set()
        # Conversations whose first successful exchange has been seen
        self._named: Set[str] = set()

    def start_conversation(self, conversation_id: Optional[str] = None) -> Conversation:
        """Create a conversation, or return the existing one with that id."""
        if conversation_id and conversation_id in self._conversations:
            return self._conversations[conversation_id]
        conversation = Conversation(id=conversation_id) if conversation_id else Conversation()
        self._conversations[conversation.id] = conversation
        self._locks[conversation.id] = asyncio.Lock()
        logger.debug(f"Started conversation {conversation.id}")
        return conversation

    def get_conversation(self, conversation_id: str) -> Optional[Conversation]:
        return self._conversations.get(conversation_id)

    def list_conversations(self) -> List[Conversation]:
        return list(self._conversations.values())

    async def process(
        self,
        conversation_id: str,
        message: str,
        provider_id: Optional[str] = None,
        cancel_token: Optional[CancellationToken] = None,
    ) -> Response:
        """Run one user turn and return the final response.

        Raises:
            RoutingError, ProviderError, ConversationCancelledError
        """
        conversation = self.start_conversation(conversation_id)
        async with self._locks[conversation.id]:
            settings, providers = self._snapshot()
            provider = self._explicit_provider(providers, provider_id)
            response = await self.orchestrator.run(
                conversation, message, settings, providers, provider, cancel_token
            )
        self._schedule_naming(conversation, message, response.content, settings, providers)
        return response

    async def stream(
        self,
        conversation_id: str,
        message: str,
        provider_id: Optional[str] = None,
        cancel_token: Optional[CancellationToken] = None,
    ) -> AsyncGenerator[OrchestrationEvent, None]:
        """Run one user turn, streaming orchestration events."""
        conversation = self.start_conversation(conversation_id)
        final: Optional[Response] = None
        async with self._locks[conversation.id]:
            settings, providers = self._snapshot()
            provider = self._explicit_provider(providers, provider_id)
            events = self.orchestrator.run_stream(
                conversation, message, settings, providers, provider, cancel_token
            )
            try:
                async for event in events:
                    if event.type == "completed":
                        final = event.response
                    yield event
            finally:
                await events.aclose()
        if final is not None:
            self._schedule_naming(conversation, message, final.content, settings, providers)

    async def wait_for_naming(self) -> None:
        """Wait for pending auto-naming tasks to finish."""
        if self._naming_tasks:
            await asyncio.gather(*list(self._naming_tasks), return_exceptions=True)

    def _snapshot(self):
        settings = self.config.get_settings()
        providers = tuple(self.config.get_providers())
        return settings, providers

    @staticmethod
    def _explicit_provider(providers, provider_id: Optional[str]) -> Optional[Provider]:
        if not provider_id:
            return None
        provider = find_provider(providers, provider_id)
        if provider is None or not provider.enabled:
            raise RoutingError(f"Provider '{provider_id}' is not configured or not enabled")
        return provider

    def _schedule_naming(
        self,
        conversation: Conversation,
        user_message: str,
        assistant_message: str,
        settings: OrchestrationSettings,
        providers,
    ) -> None:
        if conversation.id in self._named:
            return
        self._named.add(conversation.id)
        if self.namer is None or not settings.enable_auto_naming or conversation.title:
            return
        task = asyncio.create_task(
            self._name_conversation(conversation, user_message, assistant_message, settings, providers)
        )
        self._naming_tasks.add(task)
        task.add_done_callback(self._naming_tasks.discard)

    async def _name_conversation(
        self,
        conversation: Conversation,
        user_message: str,
        assistant_message: str,
        settings: OrchestrationSettings,
        providers,
    ) -> None:
        try:
            title = await self.namer.propose_title(
                user_message, assistant_message, settings, providers
            )
        except Exception as e:
            logger.warning(f"Auto-naming failed for conversation {conversation.id}: {e}")
            return
        if not title:
            return
        conversation.title = title
        logger.info(f"Conversation {conversation.id} named '{title}'")
        if self.on_title is not None:
            try:
                self.on_title(conversation.id, title)
            except Exception as e:
                logger.error(f"Title callback failed: {e}")
