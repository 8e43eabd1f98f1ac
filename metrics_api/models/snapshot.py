"""Previous-sample counters kept between refreshes to compute rates.

Each snapshot is owned by the refresh job of a single cache key and is never
shared between keys, so none of them carry a lock.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field


@dataclass
class Snapshot:
    # monotonic seconds of the previous sample, None before the first one
    sampled_at: float | None = None

    def elapsed(self, now: float | None = None) -> float:
        """Seconds since the previous sample, 0 when there was none."""
        if self.sampled_at is None:
            return 0.0
        now = time.monotonic() if now is None else now
        return max(now - self.sampled_at, 0.0)

    def touch(self, now: float | None = None) -> None:
        self.sampled_at = time.monotonic() if now is None else now


@dataclass
class CpuSnapUnit:
    cycles: int = 0
    idle: int = 0


@dataclass
class CpuSnap(Snapshot):
    all_cycles: int = 0
    all_idle: int = 0
    cores: list[CpuSnapUnit] = field(default_factory=list)


@dataclass
class NetSnapUnit:
    rx_bytes: float = 0.0
    tx_bytes: float = 0.0


@dataclass
class NetSnap(Snapshot):
    interfaces: dict[str, NetSnapUnit] = field(default_factory=dict)


@dataclass
class DiskSnapUnit:
    read_bytes: float = 0.0
    write_bytes: float = 0.0


@dataclass
class DiskSnap(Snapshot):
    devices: dict[str, DiskSnapUnit] = field(default_factory=dict)
