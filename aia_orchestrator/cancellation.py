"""
Cooperative cancellation for orchestration runs.
"""
import asyncio


class CancellationToken:
    """A one-shot signal that a running conversation should stop."""

    def __init__(self) -> None:
        self._event = asyncio.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    async def wait(self) -> None:
        await self._event.wait()
