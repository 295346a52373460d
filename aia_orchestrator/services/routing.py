import logging
import re
from typing import List, Optional, Pattern, Sequence, Tuple

from aia_orchestrator.domains.providers import Provider
from aia_orchestrator.domains.routing import RoutingCategory
from aia_orchestrator.domains.settings import OrchestrationSettings
from aia_orchestrator.exceptions import RoutingError
from aia_orchestrator.interfaces.services.routing import (
    RoutingService as RoutingServiceInterface,
)

# Setup logger for this module
logger = logging.getLogger(__name__)

# Checked in order; the first category with a keyword hit wins.
CATEGORY_KEYWORDS: Tuple[Tuple[RoutingCategory, Tuple[str, ...]], ...] = (
    (
        RoutingCategory.CODING,
        (
            "code", "coding", "programming", "function", "class", "debug", "error",
            "compile", "syntax", "algorithm", "api", "database", "sql", "javascript",
            "python", "c#", "java", "typescript", "react", "implement", "refactor",
        ),
    ),
    (
        RoutingCategory.MATH,
        (
            "calculate", "equation", "math", "formula", "solve", "derivative",
            "integral", "probability", "statistics", "algebra", "geometry",
            "trigonometry", "calculus",
        ),
    ),
    (
        RoutingCategory.ANALYSIS,
        (
            "analyze", "analyse", "analysis", "compare", "evaluate", "assess",
            "review", "examine", "investigate", "data", "trend", "pattern", "insight",
        ),
    ),
    (
        RoutingCategory.CREATIVE,
        (
            "write", "story", "poem", "creative", "imagine", "design", "brainstorm",
            "idea", "ideas", "novel", "fiction", "art", "music", "compose", "create",
        ),
    ),
    (
        RoutingCategory.TASK_MANAGEMENT,
        (
            "task", "tasks", "todo", "reminder", "reminders", "schedule", "deadline",
            "organize", "plan", "priority", "project", "workflow", "productivity",
        ),
    ),
    (
        RoutingCategory.SUMMARIZATION,
        (
            "summarize", "summarise", "summary", "tldr", "brief", "overview",
            "key points", "main ideas", "condense", "shorten", "abstract",
        ),
    ),
    (
        RoutingCategory.RESEARCH,
        (
            "research", "find", "search", "look up", "what is", "explain",
            "how does", "why", "history", "background", "learn", "understand",
        ),
    ),
    (
        RoutingCategory.CONVERSATION,
        (
            "hi", "hello", "hey", "thanks", "thank you", "how are you", "chat",
            "good morning", "good evening",
        ),
    ),
)


def _compile(keywords: Sequence[str]) -> Pattern:
    # Word boundaries that also work for keywords ending in symbols, such as "c#"
    alternatives = "|".join(re.escape(k) for k in keywords)
    return re.compile(rf"(?<!\w)(?:{alternatives})(?!\w)")


_CATEGORY_PATTERNS: List[Tuple[RoutingCategory, Pattern]] = [
    (category, _compile(keywords)) for category, keywords in CATEGORY_KEYWORDS
]


class RoutingService(RoutingServiceInterface):
    """Selects providers for prompts.

    Routing is a pure function of the prompt, the settings snapshot and the
    provider list; the service keeps no state between calls.
    """

    def classify_prompt(self, prompt: str) -> Optional[RoutingCategory]:
        """Infer the routing category of a prompt by keyword matching.

        Args:
            prompt: User prompt

        Returns:
            The first matching category, or None when nothing matches
        """
        text = (prompt or "").lower()
        for category, pattern in _CATEGORY_PATTERNS:
            if pattern.search(text):
                return category
        return None

    def select_provider(
        self,
        prompt: str,
        settings: OrchestrationSettings,
        providers: Sequence[Provider],
    ) -> Provider:
        """Select the provider that should handle a prompt.

        Args:
            prompt: User prompt
            settings: Settings snapshot
            providers: Configured providers in registration order

        Returns:
            The selected provider

        Raises:
            RoutingError: when no enabled provider exists
        """
        enabled = [p for p in providers if p.enabled]
        if not enabled:
            raise RoutingError(
                "No AI providers are enabled. Configure at least one provider."
            )

        if not settings.enable_auto_routing:
            default = next((p for p in enabled if p.is_default), None)
            if default is None:
                logger.debug("No enabled default provider; using first enabled provider")
                default = enabled[0]
            logger.info(f"Auto-routing disabled, using provider: {default.name}")
            return default

        category = self.classify_prompt(prompt)
        pool = enabled
        if category is not None:
            matching = [p for p in enabled if category.value in p.strengths]
            if matching:
                pool = matching
        logger.debug(
            f"Routing category: {category.value if category else None}, "
            f"candidates: {[p.name for p in pool]}"
        )

        chosen = self._rank(pool)
        logger.info(
            f"Routed prompt to provider '{chosen.name}' "
            f"(category: {category.value if category else 'none'})"
        )
        return chosen

    @staticmethod
    def _rank(pool: Sequence[Provider]) -> Provider:
        """Highest priority, then lowest cost, then registration order."""
        _, chosen = min(
            enumerate(pool),
            key=lambda item: (-item[1].priority, item[1].cost_per_million_tokens, item[0]),
        )
        return chosen
