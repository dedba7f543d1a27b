"""Periodic deletion of expired and revoked sessions.

Validation never depends on this task: expiry is evaluated on every
lookup. Reclaiming only frees storage.
"""

import asyncio

import logfire
from dishka import AsyncContainer

from authhost.domain.service import SessionService


class SessionReclaimer:
    """Runs ``SessionService.reclaim_expired`` every ``interval`` seconds.

    Each run opens its own request scope so it gets its own database
    transaction.
    """

    def __init__(self, container: AsyncContainer, interval: float) -> None:
        self.container = container
        self.interval = interval
        self._task: asyncio.Task | None = None

    async def run_once(self) -> int:
        async with self.container() as request_container:
            session_service = await request_container.get(SessionService)
            return await session_service.reclaim_expired()

    async def _loop(self) -> None:
        while True:
            await asyncio.sleep(self.interval)
            try:
                await self.run_once()
            except Exception:
                # Logged only, the next tick retries
                logfire.exception("Session reclaim failed")

    def start(self) -> None:
        if self.interval <= 0 or self._task is not None:
            return
        self._task = asyncio.create_task(self._loop(), name="session-reclaimer")
        logfire.info("Session reclaimer started", interval=self.interval)

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
