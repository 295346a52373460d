"""
Domain models for conversation messages, requests and responses.
"""
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from pydantic import BaseModel, Field, model_validator

from aia_orchestrator.domains.tools import ToolCall


class MessageRole(str, Enum):
    USER = "user"
    ASSISTANT = "assistant"
    TOOL = "tool"
    SYSTEM = "system"


class ImageContent(BaseModel):
    """Base64 image data attached to a user message."""

    model_config = {"frozen": True}

    base64_data: str = Field(..., min_length=1)
    mime_type: str = "image/png"
    description: Optional[str] = None

    @property
    def data_url(self) -> str:
        return f"data:{self.mime_type};base64,{self.base64_data}"


class Message(BaseModel):
    """A single transcript entry."""

    model_config = {"frozen": True}

    role: MessageRole
    content: str = ""
    tool_calls: Optional[List[ToolCall]] = None
    tool_call_id: Optional[str] = None
    name: Optional[str] = None
    images: Optional[List[ImageContent]] = None

    @model_validator(mode="after")
    def check_role_fields(self) -> "Message":
        """Tool calls belong to assistant messages, call ids to tool messages."""
        if self.tool_calls and self.role != MessageRole.ASSISTANT:
            raise ValueError("Only assistant messages may carry tool calls")
        if self.role == MessageRole.TOOL and not self.tool_call_id:
            raise ValueError("Tool messages must reference a tool call id")
        if self.tool_call_id and self.role != MessageRole.TOOL:
            raise ValueError("Only tool messages may reference a tool call id")
        if self.images and self.role != MessageRole.USER:
            raise ValueError("Only user messages may carry images")
        return self

    @classmethod
    def user(cls, content: str) -> "Message":
        return cls(role=MessageRole.USER, content=content)


class Request(BaseModel):
    """A provider request. Immutable once built."""

    model_config = {"frozen": True}

    messages: Tuple[Message, ...] = Field(default_factory=tuple)
    tools: Optional[Tuple[Dict[str, Any], ...]] = None
    temperature: float = Field(default=0.7, ge=0.0, le=2.0)
    max_tokens: int = Field(default=4096, gt=0)
    system_prompt: Optional[str] = None
    stream: bool = False


class Response(BaseModel):
    """A provider response."""

    content: str = ""
    tool_calls: List[ToolCall] = Field(default_factory=list)
    finish_reason: Optional[str] = None
    prompt_tokens: int = 0
    completion_tokens: int = 0
    error: Optional[str] = None
    provider_id: Optional[str] = None

    @property
    def success(self) -> bool:
        return not self.error

    @property
    def requires_tool_execution(self) -> bool:
        return len(self.tool_calls) > 0

    @property
    def total_tokens(self) -> int:
        return self.prompt_tokens + self.completion_tokens


class StreamChunk(BaseModel):
    """Incremental provider output; the last chunk carries the aggregated response."""

    delta: str = ""
    response: Optional[Response] = None

    @property
    def is_final(self) -> bool:
        return self.response is not None
