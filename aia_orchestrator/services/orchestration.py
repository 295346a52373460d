"""
Conversation orchestration service.

Drives one user turn through Routing -> Requesting -> (ToolExecuting ->
Requesting)* -> Completed | Failed against a single provider. Both the
blocking and the streaming entry points share one state machine.
"""
import asyncio
import json
import logging
from contextlib import aclosing
from typing import (
    Any,
    AsyncGenerator,
    Awaitable,
    Dict,
    List,
    Optional,
    Sequence,
    Tuple,
)

from aia_orchestrator.cancellation import CancellationToken
from aia_orchestrator.domains.conversation import (
    Conversation,
    ConversationState,
    OrchestrationEvent,
)
from aia_orchestrator.domains.messages import (
    ImageContent,
    Message,
    MessageRole,
    Request,
    Response,
    StreamChunk,
)
from aia_orchestrator.domains.providers import Provider, ProviderKind
from aia_orchestrator.domains.settings import OrchestrationSettings
from aia_orchestrator.domains.tools import ToolCall, ToolResult
from aia_orchestrator.exceptions import (
    ConversationCancelledError,
    OrchestrationError,
    ProviderError,
    TurnLimitExceeded,
)
from aia_orchestrator.interfaces.plugins.plugins import ToolRegistry
from aia_orchestrator.interfaces.providers.llm import ProviderClient
from aia_orchestrator.interfaces.services.context import ContextService
from aia_orchestrator.interfaces.services.orchestration import (
    OrchestrationService as OrchestrationServiceInterface,
)
from aia_orchestrator.interfaces.services.routing import RoutingService
from aia_orchestrator.services.context import estimate_tokens, trim_history

logger = logging.getLogger(__name__)

TURN_LIMIT_FALLBACK = (
    "I reached the maximum number of tool calls without producing a final answer."
)

IMAGE_PROMPT = (
    "Here is the image from the tool call. Please analyze it and describe what you see."
)

# Tool results carrying this flag hold base64 image data instead of text
IMAGE_RESULT_MARKER = "_image_response"


class ConversationOrchestrator(OrchestrationServiceInterface):
    """Runs the request/response/tool-execution loop for a conversation."""

    def __init__(
        self,
        routing_service: RoutingService,
        tool_registry: ToolRegistry,
        clients: Optional[Sequence[ProviderClient]] = None,
        context_service: Optional[ContextService] = None,
    ):
        """Initialize the orchestrator.

        Args:
            routing_service: Selects a provider per prompt
            tool_registry: Resolves and executes tool calls
            clients: One capability per provider kind
            context_service: Optional context assembler for the system prompt
        """
        self.routing_service = routing_service
        self.tool_registry = tool_registry
        self.context_service = context_service
        self.clients: Dict[ProviderKind, ProviderClient] = {}
        for client in clients or []:
            self.register_client(client)

    def register_client(self, client: ProviderClient) -> None:
        """Register the capability that serves one provider kind."""
        self.clients[client.kind] = client
        logger.info(f"Registered provider client for {client.kind.value}")

    async def run(
        self,
        conversation: Conversation,
        prompt: str,
        settings: OrchestrationSettings,
        providers: Sequence[Provider],
        provider: Optional[Provider] = None,
        cancel_token: Optional[CancellationToken] = None,
    ) -> Response:
        final: Optional[Response] = None
        async for event in self._drive(
            conversation, prompt, settings, providers, provider, cancel_token, streaming=False
        ):
            if event.type == "completed":
                final = event.response
        return final

    async def run_stream(
        self,
        conversation: Conversation,
        prompt: str,
        settings: OrchestrationSettings,
        providers: Sequence[Provider],
        provider: Optional[Provider] = None,
        cancel_token: Optional[CancellationToken] = None,
    ) -> AsyncGenerator[OrchestrationEvent, None]:
        async with aclosing(
            self._drive(
                conversation, prompt, settings, providers, provider, cancel_token, streaming=True
            )
        ) as events:
            async for event in events:
                yield event

    # ------------------------------------------------------------------
    # State machine
    # ------------------------------------------------------------------

    async def _drive(
        self,
        conversation: Conversation,
        prompt: str,
        settings: OrchestrationSettings,
        providers: Sequence[Provider],
        provider: Optional[Provider],
        cancel_token: Optional[CancellationToken],
        streaming: bool,
    ) -> AsyncGenerator[OrchestrationEvent, None]:
        token = cancel_token or CancellationToken()
        transcript = conversation.messages

        try:
            # Routing
            self._enter(conversation, ConversationState.ROUTING, token)
            transcript.append(Message.user(prompt))
            if provider is None:
                provider = self.routing_service.select_provider(prompt, settings, providers)
            client = self._client_for(provider)
            conversation.provider_id = provider.id

            system_prompt = await self._system_prompt(settings)
            tools = self._tool_schemas(settings)

            rounds = 0
            force_final = False
            prompt_tokens = 0
            completion_tokens = 0
            yield OrchestrationEvent(type="status", status="Analyzing request...")

            while True:
                # Requesting
                self._enter(conversation, ConversationState.REQUESTING, token)
                request = self._build_request(
                    transcript,
                    settings,
                    provider,
                    system_prompt,
                    tools=None if force_final else tools,
                    streaming=streaming,
                )

                if streaming:
                    response = None
                    async with aclosing(
                        self._stream_provider(client, request, provider, settings, token)
                    ) as chunks:
                        async for chunk in chunks:
                            if chunk.is_final:
                                response = chunk.response
                            elif chunk.delta:
                                yield OrchestrationEvent(type="content", delta=chunk.delta)
                    if response is None:
                        raise ProviderError(provider.id, "Stream ended without a final response")
                else:
                    response = await self._call_provider(
                        client.send(request, provider), provider, settings.request_timeout, token
                    )

                if not response.success:
                    raise ProviderError(provider.id, response.error)
                prompt_tokens += response.prompt_tokens
                completion_tokens += response.completion_tokens

                tool_calls, content = self._accept_response(response, settings, force_final)
                if force_final and not response.content and streaming:
                    yield OrchestrationEvent(type="content", delta=content)
                transcript.append(
                    Message(
                        role=MessageRole.ASSISTANT,
                        content=content,
                        tool_calls=tool_calls or None,
                    )
                )

                if not tool_calls:
                    final = response.model_copy(
                        update={
                            "content": content,
                            "tool_calls": [],
                            "prompt_tokens": prompt_tokens,
                            "completion_tokens": completion_tokens,
                            "provider_id": provider.id,
                        }
                    )
                    conversation.state = ConversationState.COMPLETED
                    logger.info(
                        f"Conversation {conversation.id} completed with provider "
                        f"'{provider.name}' after {rounds} tool rounds "
                        f"({final.total_tokens} tokens)"
                    )
                    yield OrchestrationEvent(type="completed", response=final)
                    return

                # ToolExecuting
                self._enter(conversation, ConversationState.TOOL_EXECUTING, token)
                rounds += 1
                yield OrchestrationEvent(
                    type="status",
                    status=f"Executing tools ({rounds}/{settings.max_tool_rounds})...",
                )
                for call in tool_calls:
                    yield OrchestrationEvent(type="status", status=f"Calling {call.name}...")

                results = await self._execute_tools(tool_calls)
                # Results of a cancelled turn are discarded; the calls are answered as cancelled
                self._check_cancelled(token)
                self._record_results(transcript, results)

                try:
                    self._check_turn_limit(rounds, settings)
                except TurnLimitExceeded as e:
                    logger.warning(f"{e}; forcing a final answer without tools")
                    force_final = True
                yield OrchestrationEvent(type="status", status="Generating response...")

        except OrchestrationError as e:
            conversation.state = ConversationState.FAILED
            self._close_open_tool_calls(transcript)
            e.transcript = list(transcript)
            logger.error(f"Conversation {conversation.id} failed: {e}")
            raise
        except (asyncio.CancelledError, GeneratorExit):
            conversation.state = ConversationState.FAILED
            self._close_open_tool_calls(transcript)
            raise

    def _enter(
        self,
        conversation: Conversation,
        state: ConversationState,
        token: CancellationToken,
    ) -> None:
        self._check_cancelled(token)
        conversation.state = state
        logger.debug(f"Conversation {conversation.id} -> {state.value}")

    @staticmethod
    def _check_cancelled(token: CancellationToken) -> None:
        if token.cancelled:
            raise ConversationCancelledError()

    @staticmethod
    def _check_turn_limit(rounds: int, settings: OrchestrationSettings) -> None:
        if rounds >= settings.max_tool_rounds:
            raise TurnLimitExceeded(rounds)

    def _client_for(self, provider: Provider) -> ProviderClient:
        client = self.clients.get(provider.kind)
        if client is None:
            raise ProviderError(
                provider.id, f"No client available for provider type: {provider.kind.value}"
            )
        if not client.validate_configuration(provider):
            raise ProviderError(
                provider.id, f"Provider '{provider.name}' is not properly configured."
            )
        return client

    async def _system_prompt(self, settings: OrchestrationSettings) -> Optional[str]:
        if self.context_service is None:
            return settings.system_prompt
        context_text = await self.context_service.assemble_context(settings)
        return self.context_service.build_system_prompt(settings, context_text)

    def _tool_schemas(self, settings: OrchestrationSettings) -> Optional[Tuple[Dict[str, Any], ...]]:
        if not settings.enable_tool_use:
            return None
        schemas = self.tool_registry.get_tool_schemas()
        return tuple(schemas) if schemas else None

    @staticmethod
    def _build_request(
        transcript: List[Message],
        settings: OrchestrationSettings,
        provider: Provider,
        system_prompt: Optional[str],
        tools: Optional[Tuple[Dict[str, Any], ...]],
        streaming: bool,
    ) -> Request:
        budget = (
            provider.max_context_tokens
            - settings.default_max_tokens
            - estimate_tokens(system_prompt or "")
        )
        messages = trim_history(transcript, max(budget, 1))
        return Request(
            messages=tuple(messages),
            tools=tools,
            temperature=settings.default_temperature,
            max_tokens=settings.default_max_tokens,
            system_prompt=system_prompt,
            stream=streaming,
        )

    @staticmethod
    def _accept_response(
        response: Response,
        settings: OrchestrationSettings,
        force_final: bool,
    ) -> Tuple[List[ToolCall], str]:
        """Decide which tool calls will run and what text is recorded."""
        content = response.content
        if force_final:
            if response.tool_calls:
                logger.warning(
                    f"Dropping {len(response.tool_calls)} tool calls from forced final response"
                )
            return [], content or TURN_LIMIT_FALLBACK
        if response.tool_calls and not settings.enable_tool_use:
            logger.warning("Provider requested tools while tool use is disabled; ignoring")
            return [], content
        return list(response.tool_calls), content

    @staticmethod
    def _record_results(transcript: List[Message], results: List[ToolResult]) -> None:
        """Append tool replies, moving image payloads into follow-up user messages."""
        image_messages = []
        for result in results:
            content = result.result
            image = image_from_result(result)
            if image is not None:
                label = image.description or result.name
                content = json.dumps(
                    {
                        "success": True,
                        "message": f"Image retrieved: {label}. "
                        "The image has been provided for your analysis.",
                    }
                )
                image_messages.append(
                    Message(role=MessageRole.USER, content=IMAGE_PROMPT, images=[image])
                )
                logger.info(f"Tool '{result.name}' returned an image; attaching it for the provider")
            transcript.append(
                Message(
                    role=MessageRole.TOOL,
                    content=content,
                    tool_call_id=result.tool_call_id,
                    name=result.name,
                )
            )
        # Tool replies must directly follow the message that requested them
        transcript.extend(image_messages)

    @staticmethod
    def _close_open_tool_calls(transcript: List[Message]) -> None:
        """Answer tool calls the turn ended without recording a result for.

        Keeps the saved transcript valid for the next turn: every assistant
        tool call is followed by a tool reply.
        """
        requested = None
        for index in range(len(transcript) - 1, -1, -1):
            if transcript[index].role == MessageRole.ASSISTANT:
                requested = index
                break
        if requested is None or not transcript[requested].tool_calls:
            return

        answered = {
            m.tool_call_id for m in transcript[requested + 1:] if m.role == MessageRole.TOOL
        }
        for call in transcript[requested].tool_calls:
            if call.id in answered:
                continue
            transcript.append(
                Message(
                    role=MessageRole.TOOL,
                    content=json.dumps({"error": f"Tool call '{call.name}' was cancelled"}),
                    tool_call_id=call.id,
                    name=call.name,
                )
            )

    async def _execute_tools(self, tool_calls: List[ToolCall]) -> List[ToolResult]:
        # The registry contains every failure, so one call cannot cancel its siblings
        return list(
            await asyncio.gather(*(self.tool_registry.execute(call) for call in tool_calls))
        )

    async def _call_provider(
        self,
        call: Awaitable,
        provider: Provider,
        timeout: float,
        token: CancellationToken,
    ):
        """Await a provider operation, racing it against cancellation and a timeout."""
        task = asyncio.ensure_future(call)
        waiter = asyncio.ensure_future(token.wait())
        try:
            done, _ = await asyncio.wait(
                {task, waiter}, timeout=timeout, return_when=asyncio.FIRST_COMPLETED
            )
        except asyncio.CancelledError:
            task.cancel()
            raise
        finally:
            waiter.cancel()

        if task in done and not token.cancelled:
            try:
                return task.result()
            except OrchestrationError:
                raise
            except Exception as e:
                logger.exception(f"Provider '{provider.name}' call failed: {e}")
                raise ProviderError(provider.id, str(e)) from e

        task.cancel()
        await asyncio.gather(task, return_exceptions=True)
        if token.cancelled:
            raise ConversationCancelledError()
        raise ProviderError(provider.id, f"Request timed out after {timeout} seconds")

    async def _stream_provider(
        self,
        client: ProviderClient,
        request: Request,
        provider: Provider,
        settings: OrchestrationSettings,
        token: CancellationToken,
    ) -> AsyncGenerator[StreamChunk, None]:
        """Relay provider chunks, applying one deadline to the whole request."""
        loop = asyncio.get_running_loop()
        deadline = loop.time() + settings.request_timeout
        stream = client.stream(request, provider)
        try:
            while True:
                remaining = deadline - loop.time()
                if remaining <= 0:
                    raise ProviderError(
                        provider.id, f"Request timed out after {settings.request_timeout} seconds"
                    )
                chunk = await self._call_provider(
                    _next_chunk(stream), provider, remaining, token
                )
                if chunk is None:
                    return
                yield chunk
        finally:
            await stream.aclose()


async def _next_chunk(stream: AsyncGenerator[StreamChunk, None]) -> Optional[StreamChunk]:
    try:
        return await stream.__anext__()
    except StopAsyncIteration:
        return None


def image_from_result(result: ToolResult) -> Optional[ImageContent]:
    """Return the image carried by a tool result, if it carries one.

    An image result is a JSON object with ``"_image_response": true`` and
    base64 data under ``"base64"``; ``"mime_type"`` and ``"description"``
    are optional.
    """
    if not result.success or IMAGE_RESULT_MARKER not in result.result:
        return None
    try:
        payload = json.loads(result.result)
    except json.JSONDecodeError:
        return None
    if not isinstance(payload, dict) or payload.get(IMAGE_RESULT_MARKER) is not True:
        return None
    if not isinstance(payload.get("base64"), str) or not payload["base64"]:
        logger.warning(f"Tool '{result.name}' flagged an image result without image data")
        return None
    description = payload.get("description") or payload.get("name")
    return ImageContent(
        base64_data=payload["base64"],
        mime_type=str(payload.get("mime_type") or "image/png"),
        description=str(description) if description else None,
    )
