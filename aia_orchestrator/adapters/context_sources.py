"""
Context source adapters.
"""
from typing import Any, Dict, Iterable, List, Union

from aia_orchestrator.domains.context import ContextItem
from aia_orchestrator.interfaces.providers.context import ContextSource


class StaticContextSource(ContextSource):
    """Serves a fixed list of items, most relevant first."""

    def __init__(self, items: Iterable[Union[ContextItem, Dict[str, Any], str]] = ()):
        self._items = [self._coerce(item) for item in items]

    @staticmethod
    def _coerce(item) -> ContextItem:
        if isinstance(item, ContextItem):
            return item
        if isinstance(item, str):
            return ContextItem(title=item)
        return ContextItem(**item)

    async def fetch(self, limit: int) -> List[ContextItem]:
        return self._items[:limit]
