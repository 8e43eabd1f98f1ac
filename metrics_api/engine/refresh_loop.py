from __future__ import annotations

import asyncio
import logging
from typing import Callable

from metrics_api.models.cache import CacheKey

logger = logging.getLogger(__name__)


class RefreshLoop:
    """Requests a refresh of one key every ``interval`` seconds.

    Used for categories that should be warm before anyone asks for them.
    Requests go through the same single-flight path as stale reads, so a
    loop tick that lands on an in-flight refresh is simply dropped.
    """

    def __init__(self, key: CacheKey, refresh: Callable[[CacheKey], bool], interval: float) -> None:
        self.key = key
        self.interval = interval
        self._refresh = refresh
        self._running = False
        self._task: asyncio.Task | None = None

    # ── lifecycle ────────────────────────────────────────

    async def start(self) -> None:
        if self._running:
            return
        self._running = True
        self._task = asyncio.create_task(self._loop())
        logger.info("RefreshLoop [%s] started (interval=%.1fs)", self.key, self.interval)

    async def stop(self) -> None:
        if not self._running:
            return
        self._running = False
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None
        logger.info("RefreshLoop [%s] stopped", self.key)

    # ── internals ───────────────────────────────────────

    async def _loop(self) -> None:
        while self._running:
            try:
                self._refresh(self.key)
            except Exception:
                logger.exception("RefreshLoop [%s] error requesting refresh", self.key)
            await asyncio.sleep(self.interval)

    @property
    def running(self) -> bool:
        return self._running
