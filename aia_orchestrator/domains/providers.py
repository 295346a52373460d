"""
Domain models for AI provider configuration.

Providers are immutable snapshots. The configuration store replaces them
wholesale when the user edits a provider, so the orchestrator never observes a
provider changing under an in-flight conversation.
"""
import uuid
from enum import Enum
from typing import FrozenSet, Iterable, Optional

from pydantic import BaseModel, Field, field_validator


class ProviderKind(str, Enum):
    """Supported AI vendors."""

    OPENAI = "OpenAI"
    AZURE_OPENAI = "AzureOpenAI"
    GOOGLE = "Google"
    ANTHROPIC = "Anthropic"


class Provider(BaseModel):
    """A configured AI provider."""

    model_config = {"frozen": True}

    id: str = Field(default_factory=lambda: str(uuid.uuid4()), description="Unique provider id")
    name: str = Field(..., description="Display name")
    kind: ProviderKind = Field(..., description="Vendor type")
    api_key: str = Field(default="", description="Vendor credential")
    endpoint: str = Field(default="", description="Endpoint URL (AzureOpenAI only)")
    model_id: str = Field(default="", description="Model identifier")
    deployment_name: str = Field(default="", description="Deployment name (AzureOpenAI only)")
    enabled: bool = Field(default=True)
    is_default: bool = Field(default=False)
    priority: int = Field(default=50, description="Routing priority, higher is preferred")
    strengths: FrozenSet[str] = Field(
        default_factory=frozenset, description="Routing categories this provider excels at"
    )
    cost_per_million_tokens: float = Field(default=0.0, ge=0.0)
    max_context_tokens: int = Field(default=128000, gt=0)

    @field_validator("name")
    @classmethod
    def name_not_empty(cls, v: str) -> str:
        """Validate that the display name is not empty."""
        if not v.strip():
            raise ValueError("Provider name cannot be empty")
        return v

    @field_validator("strengths", mode="before")
    @classmethod
    def normalize_strengths(cls, v):
        """Accept a comma separated string or any iterable of tags."""
        if v is None:
            return frozenset()
        if isinstance(v, str):
            v = v.split(",")
        return frozenset(tag.strip().lower() for tag in v if tag and tag.strip())

    @property
    def requires_endpoint(self) -> bool:
        return self.kind == ProviderKind.AZURE_OPENAI

    @property
    def requires_deployment_name(self) -> bool:
        return self.kind == ProviderKind.AZURE_OPENAI

    def is_usable(self) -> bool:
        """Check the provider has everything its vendor needs to be called."""
        if not self.api_key or not self.model_id:
            return False
        if self.requires_endpoint and not self.endpoint.strip():
            return False
        if self.requires_deployment_name and not self.deployment_name.strip():
            return False
        return True


def ensure_single_default(providers: Iterable[Provider]) -> None:
    """Raise ValueError when more than one provider is flagged as default."""
    defaults = [p.name for p in providers if p.is_default]
    if len(defaults) > 1:
        raise ValueError(f"Only one provider may be the default, found: {defaults}")


def find_provider(providers: Iterable[Provider], provider_id: Optional[str]) -> Optional[Provider]:
    """Look up a provider by id."""
    if not provider_id:
        return None
    return next((p for p in providers if p.id == provider_id), None)
