"""
Context assembly service.

Gathers a bounded number of items per enabled category from the context
collaborators and renders them into the system prompt.
"""
import logging
from datetime import datetime
from typing import Dict, List, Optional, Sequence, Tuple

from aia_orchestrator.domains.context import ContextCategory
from aia_orchestrator.domains.messages import Message, MessageRole
from aia_orchestrator.domains.settings import OrchestrationSettings
from aia_orchestrator.interfaces.providers.context import ContextSource
from aia_orchestrator.interfaces.services.context import (
    ContextService as ContextServiceInterface,
)

logger = logging.getLogger(__name__)

BASE_SYSTEM_PROMPT = (
    "You are AIA, a helpful AI assistant integrated into a personal productivity application."
)

TOOL_USE_HINT = (
    "You have access to tools to retrieve and manage the user's data. "
    "Use them when needed instead of guessing."
)

CLOSING_INSTRUCTION = (
    "Be concise but helpful. When the user asks about their tasks, reminders, or data, "
    "use the appropriate tools to get accurate information."
)

CATEGORY_HEADERS: Dict[ContextCategory, str] = {
    ContextCategory.TASKS: "Active tasks:",
    ContextCategory.REMINDERS: "Upcoming reminders:",
    ContextCategory.DATA_BANK: "Data bank entries:",
    ContextCategory.SCREENSHOTS: "Available screenshots:",
}

# Rough characters-per-token ratio used for context budgeting
CHARS_PER_TOKEN = 4


class ContextAssembler(ContextServiceInterface):
    """Renders bounded context from the registered collaborators."""

    def __init__(self, sources: Optional[Dict[ContextCategory, ContextSource]] = None):
        """Initialize the assembler.

        Args:
            sources: Context collaborator per category; categories without a
                source are skipped
        """
        self.sources = dict(sources or {})

    def _enabled_categories(self, settings: OrchestrationSettings) -> List[ContextCategory]:
        flags: Tuple[Tuple[ContextCategory, bool], ...] = (
            (ContextCategory.TASKS, settings.include_tasks_context),
            (ContextCategory.REMINDERS, settings.include_reminders_context),
            (ContextCategory.DATA_BANK, settings.include_data_bank_context),
            (ContextCategory.SCREENSHOTS, settings.include_screenshots_context),
        )
        return [category for category, enabled in flags if enabled]

    async def assemble_context(self, settings: OrchestrationSettings) -> str:
        limit = settings.max_context_items
        if limit <= 0:
            return ""

        blocks = []
        for category in self._enabled_categories(settings):
            source = self.sources.get(category)
            if source is None:
                continue
            try:
                items = list(await source.fetch(limit))[:limit]
            except Exception as e:
                logger.warning(f"Skipping {category.value} context, source failed: {e}")
                continue
            if not items:
                continue

            if category == ContextCategory.SCREENSHOTS:
                # Images travel out-of-band; only a placeholder goes in the prompt
                lines = [item.render(marker="- [screenshot]") for item in items]
            else:
                lines = [item.render() for item in items]
            blocks.append("\n".join([CATEGORY_HEADERS[category], *lines]))
            logger.debug(f"Added {len(items)} {category.value} context items")

        return "\n\n".join(blocks)

    def build_system_prompt(self, settings: OrchestrationSettings, context_text: str = "") -> str:
        sections = [
            settings.system_prompt or BASE_SYSTEM_PROMPT,
            f"Current date/time: {datetime.now().strftime('%A, %B %d, %Y %H:%M')}",
        ]
        if settings.enable_tool_use:
            sections.append(TOOL_USE_HINT)
        if context_text:
            sections.append(context_text)
        sections.append(CLOSING_INSTRUCTION)
        return "\n\n".join(sections)


def estimate_tokens(text: str) -> int:
    return len(text or "") // CHARS_PER_TOKEN + 1


def trim_history(messages: Sequence[Message], budget_tokens: int) -> List[Message]:
    """Drop the oldest messages until the transcript fits the token budget.

    The kept transcript never starts with a tool result, so a result is never
    sent without the assistant message that requested it. When even the
    newest message does not fit, the suffix starting at the newest non-tool
    message is kept; for a tool round that is the requesting assistant
    message plus its results.
    """
    sizes = [estimate_tokens(m.content) for m in messages]
    total = sum(sizes)
    start = None
    fallback = None
    for index, message in enumerate(messages):
        if message.role != MessageRole.TOOL:
            if total <= budget_tokens:
                start = index
                break
            fallback = index
        total -= sizes[index]
    if start is None:
        start = fallback if fallback is not None else len(messages)

    if start:
        logger.info(f"Trimmed {start} messages to fit context budget")
    return list(messages[start:])
