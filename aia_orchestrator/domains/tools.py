"""
Domain models for tool calling.
"""
import uuid
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class ToolParameter(BaseModel):
    """Schema for a single tool parameter."""

    model_config = {"frozen": True}

    type: str = Field(default="string", description="JSON schema type")
    description: str = Field(default="")
    required: bool = Field(default=False)
    enum: Optional[List[str]] = Field(default=None, description="Allowed values")


class ToolCall(BaseModel):
    """A tool invocation requested by a provider."""

    model_config = {"frozen": True}

    id: str = Field(default_factory=lambda: f"call_{uuid.uuid4().hex}")
    name: str
    arguments: Dict[str, Any] = Field(default_factory=dict)


class ToolResult(BaseModel):
    """Outcome of executing a ToolCall."""

    model_config = {"frozen": True}

    tool_call_id: str
    name: str = ""
    result: str = ""
    success: bool = True
    error: Optional[str] = None
