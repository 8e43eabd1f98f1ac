from __future__ import annotations

import logging
import threading
import time
from typing import Callable

from metrics_api.models.cache import CacheEntry, CacheKey

logger = logging.getLogger(__name__)

StaleCallback = Callable[[CacheKey], bool]


class CacheStore:
    """Latest serialized document per metric key, with single-flight refresh marks.

    Readers never wait for a recomputation: ``get`` hands back whatever is
    cached, stale or not, and at most one refresh per key is in flight at a
    time. Entries are immutable and swapped whole on ``set``. Marks are
    taken under a lock; whether ``get`` is safe off the event loop depends on
    ``on_stale`` (``RefreshCoordinator.submit`` hands such calls to the loop).
    """

    def __init__(
        self,
        on_stale: StaleCallback | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.on_stale = on_stale
        self._clock = clock
        self._entries: dict[CacheKey, CacheEntry] = {}
        self._ttls: dict[CacheKey, float] = {}
        self._refreshing: set[CacheKey] = set()
        self._lock = threading.Lock()

    # ── registration ────────────────────────────────────

    def register(self, key: CacheKey, ttl: float) -> None:
        self._ttls[key] = ttl

    def ttl(self, key: CacheKey) -> float:
        return self._ttls.get(key, 0.0)

    @property
    def keys(self) -> list[CacheKey]:
        return list(self._ttls)

    # ── read / write ────────────────────────────────────

    def get(self, key: CacheKey) -> bytes:
        """Cached document for ``key`` (``b""`` if none), queueing a refresh when stale."""
        entry = self._entries.get(key)
        if key in self._ttls and (entry is None or entry.is_stale(self._clock())):
            self.request_refresh(key)
        return entry.data if entry is not None else b""

    def set(self, key: CacheKey, ttl: float, data: bytes) -> CacheEntry:
        now = self._clock()
        entry = CacheEntry(data=data, updated_at=now, expires_at=now + ttl)
        self._entries[key] = entry
        return entry

    def entry(self, key: CacheKey) -> CacheEntry | None:
        return self._entries.get(key)

    def is_stale(self, key: CacheKey) -> bool:
        entry = self._entries.get(key)
        return entry is None or entry.is_stale(self._clock())

    # ── refresh marks ───────────────────────────────────

    def mark_refreshing(self, key: CacheKey) -> bool:
        """Atomically claim the refresh of ``key``; False if someone else holds it."""
        with self._lock:
            if key in self._refreshing:
                return False
            self._refreshing.add(key)
            return True

    def release(self, key: CacheKey) -> None:
        with self._lock:
            self._refreshing.discard(key)

    def is_refreshing(self, key: CacheKey) -> bool:
        with self._lock:
            return key in self._refreshing

    def request_refresh(self, key: CacheKey) -> bool:
        """Hand ``key`` to the stale callback unless a refresh is already in flight.

        The mark is dropped straight away if the callback refuses the job
        (queue full or closed), so a later read can retry.
        """
        if not self.mark_refreshing(key):
            return False
        if self.on_stale is not None and self.on_stale(key):
            return True
        logger.debug("Refresh request for %s dropped", key)
        self.release(key)
        return False
