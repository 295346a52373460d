"""
Domain models for context assembly.
"""
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class ContextCategory(str, Enum):
    TASKS = "tasks"
    REMINDERS = "reminders"
    DATA_BANK = "data_bank"
    SCREENSHOTS = "screenshots"


class ContextItem(BaseModel):
    """A text-renderable record returned by a context collaborator."""

    model_config = {"frozen": True}

    title: str
    detail: Optional[str] = Field(default=None, description="Short status or summary")
    overdue: bool = False

    def render(self, marker: str = "-") -> str:
        line = f"{marker} {self.title}"
        if self.detail:
            line += f" ({self.detail})"
        if self.overdue:
            line += " [OVERDUE]"
        return line
