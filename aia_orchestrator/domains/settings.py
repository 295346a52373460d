"""
Process-wide orchestration settings.

Settings are handed to the engine as frozen snapshots. Editing them produces a
new snapshot that applies from the next orchestration call onwards.
"""
from typing import Optional

from pydantic import BaseModel, Field


class OrchestrationSettings(BaseModel):
    """Configuration for routing, tool use, context assembly and auto-naming."""

    model_config = {"frozen": True}

    enable_auto_routing: bool = Field(
        default=True, description="Route prompts to the best provider automatically"
    )
    enable_tool_use: bool = Field(default=True, description="Offer registered tools to providers")

    include_tasks_context: bool = True
    include_reminders_context: bool = True
    include_data_bank_context: bool = True
    include_screenshots_context: bool = False
    max_context_items: int = Field(default=10, ge=0, description="Items per context category")

    default_temperature: float = Field(default=0.7, ge=0.0, le=2.0)
    default_max_tokens: int = Field(default=4096, gt=0)
    system_prompt: Optional[str] = Field(
        default=None, description="Replaces the base assistant prompt when set"
    )

    max_tool_rounds: int = Field(
        default=5, ge=1, description="Tool rounds before a text answer is forced"
    )
    request_timeout: float = Field(default=60.0, gt=0, description="Seconds per provider call")

    enable_auto_naming: bool = True
    auto_naming_provider_id: Optional[str] = None
    auto_naming_temperature: float = Field(default=0.3, ge=0.0, le=2.0)
    auto_naming_max_tokens: int = Field(default=30, gt=0)
    auto_naming_timeout: float = Field(default=15.0, gt=0)
