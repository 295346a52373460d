"""
Error taxonomy for the AIA orchestration engine.

Routing, provider and cancellation errors abort a conversation turn and are
raised to the caller. Tool errors never leave the tool registry; they are
converted into failed ToolResults that the provider sees on its next turn.
"""
from typing import List, Optional, TYPE_CHECKING

if TYPE_CHECKING:  # pragma: no cover
    from aia_orchestrator.domains.messages import Message


class OrchestrationError(Exception):
    """Base class for errors that end a conversation turn in the failed state."""

    def __init__(self, message: str, transcript: Optional[List["Message"]] = None):
        super().__init__(message)
        self.transcript: List["Message"] = list(transcript or [])


class RoutingError(OrchestrationError):
    """No enabled provider is eligible to handle the prompt."""


class ProviderError(OrchestrationError):
    """A provider call failed (network, auth, rate limit, timeout or misconfiguration)."""

    def __init__(
        self,
        provider_id: str,
        detail: str,
        transcript: Optional[List["Message"]] = None,
    ):
        super().__init__(f"Provider '{provider_id}' failed: {detail}", transcript)
        self.provider_id = provider_id
        self.detail = detail


class ConversationCancelledError(OrchestrationError):
    """Cooperative cancellation was observed at a state transition."""

    def __init__(
        self,
        message: str = "Conversation was cancelled",
        transcript: Optional[List["Message"]] = None,
    ):
        super().__init__(message, transcript)


class ToolNotFoundError(LookupError):
    """No tool with the requested name is registered."""

    def __init__(self, name: str):
        super().__init__(f"Tool '{name}' not found")
        self.name = name


class ToolValidationError(ValueError):
    """Tool call arguments do not satisfy the tool's parameter schema."""


class ToolExecutionError(RuntimeError):
    """A tool handler failed."""


class TurnLimitExceeded(Exception):
    """The tool round limit was reached; the next request must be answered in text."""

    def __init__(self, rounds: int):
        super().__init__(f"Tool round limit reached after {rounds} rounds")
        self.rounds = rounds
