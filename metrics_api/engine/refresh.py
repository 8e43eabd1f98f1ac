from __future__ import annotations

import asyncio
import logging
from typing import Callable

from metrics_api.engine.cache_store import CacheStore
from metrics_api.models.cache import CacheKey

logger = logging.getLogger(__name__)

# Blocking recomputation of one key's document; None means "keep the old one".
Job = Callable[[], bytes | None]


class RefreshCoordinator:
    """Fixed pool of workers recomputing cache entries from a bounded queue.

    ``submit`` never blocks: when the queue is full the request is refused
    and staleness wins over making a reader wait. Each job's blocking work
    runs in a thread so the event loop keeps serving reads. Once started,
    ``submit`` may be called from any thread: calls from outside the loop are
    handed to it with ``call_soon_threadsafe``, and a refused hand-off
    releases the store mark there.
    """

    def __init__(self, store: CacheStore, workers: int = 2, maxsize: int = 2) -> None:
        self._store = store
        self._worker_count = max(workers, 1)
        self._queue: asyncio.Queue[CacheKey | None] = asyncio.Queue(maxsize=max(maxsize, 1))
        self._jobs: dict[CacheKey, Job] = {}
        self._tasks: list[asyncio.Task] = []
        self._closed = False
        self._loop: asyncio.AbstractEventLoop | None = None

    # ── lifecycle ────────────────────────────────────────

    async def start(self) -> None:
        if self._tasks or self._closed:
            return
        self._loop = asyncio.get_running_loop()
        self._tasks = [
            asyncio.create_task(self._worker(index), name=f"refresh-worker-{index}")
            for index in range(self._worker_count)
        ]
        logger.info("RefreshCoordinator started (%d workers)", self._worker_count)

    async def stop(self) -> None:
        """Close the queue, let workers drain what is queued, and wait for them."""
        if self._closed:
            return
        self._closed = True
        # one sentinel per worker, queued behind the pending jobs
        for _ in self._tasks:
            await self._queue.put(None)
        await asyncio.gather(*self._tasks)
        self._tasks = []
        logger.info("RefreshCoordinator stopped")

    # ── jobs ────────────────────────────────────────────

    def register(self, key: CacheKey, job: Job) -> None:
        self._jobs[key] = job

    def submit(self, key: CacheKey) -> bool:
        if self._closed:
            return False
        if key not in self._jobs:
            logger.warning("No refresh job registered for %s", key)
            return False
        if self._loop is not None and not self._on_loop_thread():
            self._loop.call_soon_threadsafe(self._enqueue_or_release, key)
            return True
        return self._enqueue(key)

    async def run_now(self, key: CacheKey) -> bool:
        """Recompute ``key`` immediately on the caller's task, honouring the single-flight mark."""
        if key not in self._jobs or not self._store.mark_refreshing(key):
            return False
        await self._run_job(key)
        return True

    # ── internals ───────────────────────────────────────

    def _on_loop_thread(self) -> bool:
        try:
            return asyncio.get_running_loop() is self._loop
        except RuntimeError:
            return False

    def _enqueue(self, key: CacheKey) -> bool:
        try:
            self._queue.put_nowait(key)
        except asyncio.QueueFull:
            logger.debug("Refresh queue full, dropping %s", key)
            return False
        return True

    def _enqueue_or_release(self, key: CacheKey) -> None:
        if self._closed or not self._enqueue(key):
            self._store.release(key)

    async def _worker(self, index: int) -> None:
        while True:
            key = await self._queue.get()
            try:
                if key is None:
                    return
                await self._run_job(key)
            finally:
                self._queue.task_done()

    async def _run_job(self, key: CacheKey) -> None:
        try:
            data = await asyncio.to_thread(self._jobs[key])
            if data is not None:
                self._store.set(key, self._store.ttl(key), data)
        except Exception:
            logger.exception("Refresh job for %s failed", key)
        finally:
            self._store.release(key)

    # ── introspection ───────────────────────────────────

    @property
    def pending(self) -> int:
        return self._queue.qsize()

    @property
    def running(self) -> bool:
        return bool(self._tasks) and not self._closed

    @property
    def worker_count(self) -> int:
        return self._worker_count
