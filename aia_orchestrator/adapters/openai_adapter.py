"""
Provider capabilities for the OpenAI family.

These adapters implement the ProviderClient interface on top of the Chat
Completions API for OpenAI and Azure OpenAI.
"""

import json
import logging
from typing import Any, AsyncIterator, Dict, List, Optional, Tuple

import logfire
from openai import AsyncAzureOpenAI, AsyncOpenAI, OpenAIError

from aia_orchestrator.domains.messages import (
    MessageRole,
    Request,
    Response,
    StreamChunk,
)
from aia_orchestrator.domains.providers import Provider, ProviderKind
from aia_orchestrator.domains.tools import ToolCall
from aia_orchestrator.interfaces.providers.llm import ProviderClient

# Setup logger for this module
logger = logging.getLogger(__name__)

DEFAULT_AZURE_API_VERSION = "2024-10-21"


def to_openai_messages(request: Request) -> List[Dict[str, Any]]:
    """Convert a request transcript into Chat Completions messages."""
    messages: List[Dict[str, Any]] = []
    if request.system_prompt:
        messages.append({"role": "system", "content": request.system_prompt})

    for message in request.messages:
        if message.role == MessageRole.TOOL:
            messages.append(
                {
                    "role": "tool",
                    "tool_call_id": message.tool_call_id,
                    "content": message.content,
                }
            )
        elif message.role == MessageRole.ASSISTANT and message.tool_calls:
            messages.append(
                {
                    "role": "assistant",
                    "content": message.content or None,
                    "tool_calls": [
                        {
                            "id": call.id,
                            "type": "function",
                            "function": {
                                "name": call.name,
                                "arguments": json.dumps(call.arguments),
                            },
                        }
                        for call in message.tool_calls
                    ],
                }
            )
        elif message.images:
            parts: List[Dict[str, Any]] = []
            if message.content:
                parts.append({"type": "text", "text": message.content})
            parts.extend(
                {"type": "image_url", "image_url": {"url": image.data_url}}
                for image in message.images
            )
            messages.append({"role": message.role.value, "content": parts})
        else:
            messages.append({"role": message.role.value, "content": message.content})
    return messages


def parse_arguments(raw: Optional[str]) -> Dict[str, Any]:
    """Decode tool call arguments, tolerating empty or malformed JSON."""
    if not raw:
        return {}
    try:
        arguments = json.loads(raw)
    except json.JSONDecodeError:
        logger.warning(f"Could not decode tool arguments: {raw[:200]}")
        return {}
    return arguments if isinstance(arguments, dict) else {}


class OpenAIAdapter(ProviderClient):
    """OpenAI implementation of ProviderClient using Chat Completions."""

    max_tokens_param = "max_completion_tokens"

    def __init__(self, logfire_api_key: Optional[str] = None):
        self._clients: Dict[Tuple[str, str, str], AsyncOpenAI] = {}

        self.logfire = False
        if logfire_api_key:
            try:
                logfire.configure(token=logfire_api_key)
                self.logfire = True
                logger.info("Logfire configured successfully.")
            except Exception as e:
                logger.error(f"Failed to configure Logfire: {e}")
                self.logfire = False

    @property
    def kind(self) -> ProviderKind:
        return ProviderKind.OPENAI

    def _create_client(self, provider: Provider) -> AsyncOpenAI:
        return AsyncOpenAI(api_key=provider.api_key)

    def _model(self, provider: Provider) -> str:
        return provider.model_id

    def get_client(self, provider: Provider) -> AsyncOpenAI:
        """Return a cached SDK client for the provider's credentials."""
        key = (provider.id, provider.api_key, provider.endpoint)
        client = self._clients.get(key)
        if client is None:
            client = self._create_client(provider)
            if self.logfire:
                logfire.instrument_openai(client)
            self._clients[key] = client
        return client

    def build_params(self, request: Request, provider: Provider) -> Dict[str, Any]:
        """Build Chat Completions keyword arguments for a request."""
        params: Dict[str, Any] = {
            "model": self._model(provider),
            "messages": to_openai_messages(request),
            "temperature": request.temperature,
            self.max_tokens_param: request.max_tokens,
        }
        if request.tools:
            params["tools"] = list(request.tools)
            params["tool_choice"] = "auto"
        return params

    async def send(self, request: Request, provider: Provider) -> Response:
        params = self.build_params(request, provider)
        logger.debug(
            f"Sending {len(params['messages'])} messages to {provider.name} ({params['model']})"
        )
        try:
            completion = await self.get_client(provider).chat.completions.create(**params)
        except OpenAIError as e:
            logger.error(f"OpenAI API error from {provider.name}: {e}")
            return Response(error=str(e), provider_id=provider.id)
        return self.parse_completion(completion, provider)

    def parse_completion(self, completion: Any, provider: Provider) -> Response:
        """Normalize a Chat Completions result into a Response."""
        if not completion.choices:
            return Response(error="Provider returned no choices", provider_id=provider.id)

        choice = completion.choices[0]
        tool_calls = [
            ToolCall(
                id=call.id,
                name=call.function.name,
                arguments=parse_arguments(call.function.arguments),
            )
            for call in (choice.message.tool_calls or [])
        ]
        usage = completion.usage
        return Response(
            content=choice.message.content or "",
            tool_calls=tool_calls,
            finish_reason=choice.finish_reason,
            prompt_tokens=usage.prompt_tokens if usage else 0,
            completion_tokens=usage.completion_tokens if usage else 0,
            provider_id=provider.id,
        )

    async def stream(
        self, request: Request, provider: Provider
    ) -> AsyncIterator[StreamChunk]:
        params = self.build_params(request, provider)
        params["stream"] = True
        params["stream_options"] = {"include_usage": True}

        content: List[str] = []
        pending: Dict[int, Dict[str, Any]] = {}
        finish_reason = None
        prompt_tokens = completion_tokens = 0

        try:
            stream = await self.get_client(provider).chat.completions.create(**params)
        except OpenAIError as e:
            logger.error(f"OpenAI API error from {provider.name}: {e}")
            yield StreamChunk(response=Response(error=str(e), provider_id=provider.id))
            return

        try:
            async for chunk in stream:
                if chunk.usage:
                    prompt_tokens = chunk.usage.prompt_tokens
                    completion_tokens = chunk.usage.completion_tokens
                if not chunk.choices:
                    continue

                choice = chunk.choices[0]
                if choice.finish_reason:
                    finish_reason = choice.finish_reason
                delta = choice.delta
                if delta is None:
                    continue

                if delta.content:
                    content.append(delta.content)
                    yield StreamChunk(delta=delta.content)

                # Tool call fragments arrive keyed by index; ids and names only on the first
                for fragment in delta.tool_calls or []:
                    entry = pending.setdefault(
                        fragment.index, {"id": None, "name": "", "arguments": ""}
                    )
                    if fragment.id:
                        entry["id"] = fragment.id
                    if fragment.function is not None:
                        if fragment.function.name:
                            entry["name"] += fragment.function.name
                        if fragment.function.arguments:
                            entry["arguments"] += fragment.function.arguments
        except OpenAIError as e:
            logger.error(f"OpenAI stream error from {provider.name}: {e}")
            yield StreamChunk(response=Response(error=str(e), provider_id=provider.id))
            return
        finally:
            await stream.close()

        tool_calls = []
        for index in sorted(pending):
            entry = pending[index]
            call = ToolCall(name=entry["name"], arguments=parse_arguments(entry["arguments"]))
            if entry["id"]:
                call = call.model_copy(update={"id": entry["id"]})
            tool_calls.append(call)

        yield StreamChunk(
            response=Response(
                content="".join(content),
                tool_calls=tool_calls,
                finish_reason=finish_reason,
                prompt_tokens=prompt_tokens,
                completion_tokens=completion_tokens,
                provider_id=provider.id,
            )
        )


class AzureOpenAIAdapter(OpenAIAdapter):
    """Azure OpenAI implementation; requests target the provider's deployment."""

    max_tokens_param = "max_tokens"

    def __init__(
        self,
        logfire_api_key: Optional[str] = None,
        api_version: str = DEFAULT_AZURE_API_VERSION,
    ):
        super().__init__(logfire_api_key=logfire_api_key)
        self.api_version = api_version

    @property
    def kind(self) -> ProviderKind:
        return ProviderKind.AZURE_OPENAI

    def _create_client(self, provider: Provider) -> AsyncAzureOpenAI:
        return AsyncAzureOpenAI(
            api_key=provider.api_key,
            azure_endpoint=provider.endpoint,
            api_version=self.api_version,
        )

    def _model(self, provider: Provider) -> str:
        return provider.deployment_name
