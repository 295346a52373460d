"""
Domain models for conversations and streamed orchestration events.
"""
import uuid
from enum import Enum
from typing import List, Literal, Optional

from pydantic import BaseModel, Field

from aia_orchestrator.domains.messages import Message, Response


class ConversationState(str, Enum):
    ROUTING = "routing"
    REQUESTING = "requesting"
    TOOL_EXECUTING = "tool_executing"
    COMPLETED = "completed"
    FAILED = "failed"


class Conversation(BaseModel):
    """A conversation transcript and its orchestration state."""

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    title: Optional[str] = None
    messages: List[Message] = Field(default_factory=list)
    state: Optional[ConversationState] = None
    provider_id: Optional[str] = None


class OrchestrationEvent(BaseModel):
    """An event streamed to the presentation layer."""

    type: Literal["content", "status", "completed"]
    delta: str = ""
    status: Optional[str] = None
    response: Optional[Response] = None
