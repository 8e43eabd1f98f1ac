from __future__ import annotations

import time
from dataclasses import dataclass
from enum import StrEnum


class CacheKey(StrEnum):
    STATIC = "static"
    DYNAMIC = "dynamic"
    NETWORK_CONNECTION = "network_connection"


@dataclass(frozen=True)
class CacheEntry:
    """Serialized document plus its freshness window (monotonic seconds)."""

    data: bytes
    updated_at: float
    expires_at: float

    def is_stale(self, now: float | None = None) -> bool:
        now = time.monotonic() if now is None else now
        return now > self.expires_at
