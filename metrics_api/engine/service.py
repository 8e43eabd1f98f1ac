from __future__ import annotations

import logging
import time
from typing import Callable

from pydantic import BaseModel
from pydantic_core import PydanticSerializationError

from metrics_api.collectors.conntrack import read_connection_metric
from metrics_api.collectors.cpu import read_cpu_metric
from metrics_api.collectors.memory import read_memory_metric
from metrics_api.collectors.network import read_network_metric
from metrics_api.collectors.paths import ProcfsPaths
from metrics_api.collectors.reader import FsReader, TextSource
from metrics_api.collectors.runner import CommandRunner, ProcessRunner
from metrics_api.collectors.static_network import read_static_network_metric
from metrics_api.collectors.storage import read_storage_metric
from metrics_api.collectors.system import read_static_system_metric, read_system_metric
from metrics_api.config import Settings
from metrics_api.engine.cache_store import CacheStore
from metrics_api.engine.refresh import RefreshCoordinator
from metrics_api.engine.refresh_loop import RefreshLoop
from metrics_api.models import (
    CacheKey,
    CpuSnap,
    DiskSnap,
    DynamicMetric,
    NetSnap,
    NetworkConnectionMetric,
    StaticMetric,
)
from metrics_api.models.snapshot import Snapshot

logger = logging.getLogger(__name__)

_DEFAULT_DOCUMENTS: dict[CacheKey, type[BaseModel]] = {
    CacheKey.DYNAMIC: DynamicMetric,
    CacheKey.STATIC: StaticMetric,
    CacheKey.NETWORK_CONNECTION: NetworkConnectionMetric,
}


def load_paths(settings: Settings) -> ProcfsPaths:
    if settings.paths_file:
        return ProcfsPaths.from_yaml(settings.paths_file, prefix=settings.paths_prefix)
    return ProcfsPaths(prefix=settings.paths_prefix)


def serialize(document: BaseModel) -> bytes:
    return document.model_dump_json(exclude_none=True).encode()


def default_document(key: CacheKey) -> bytes:
    """Empty-but-valid document served before the first computation lands."""
    return serialize(_DEFAULT_DOCUMENTS[key]())


class BackgroundService:
    """Owns the rate snapshots and keeps the metric cache warm.

    Constructed once at startup and handed to the HTTP layer; the routes only
    call ``get`` and ``refresh``. Each cache key has one job that rebuilds
    its document, and the single-flight mark in the store guarantees that a
    snapshot is only ever touched by one job at a time.
    """

    def __init__(
        self,
        settings: Settings,
        reader: TextSource | None = None,
        runner: ProcessRunner | None = None,
        paths: ProcfsPaths | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.settings = settings
        self.reader = reader or FsReader()
        self.runner = runner or CommandRunner()
        self.paths = paths or load_paths(settings)

        self.cpu_snap = CpuSnap()
        self.net_snap = NetSnap()
        self.disk_snap = DiskSnap()

        self.store = CacheStore(clock=clock)
        self.coordinator = RefreshCoordinator(
            self.store, workers=settings.worker_count, maxsize=settings.queue_size
        )
        self.store.on_stale = self.coordinator.submit

        self.intervals: dict[CacheKey, float] = {
            CacheKey.DYNAMIC: settings.dynamic_metric_interval,
            CacheKey.STATIC: settings.static_metric_interval,
            CacheKey.NETWORK_CONNECTION: settings.network_connection_interval,
        }
        jobs = {
            CacheKey.DYNAMIC: self.compute_dynamic,
            CacheKey.STATIC: self.compute_static,
            CacheKey.NETWORK_CONNECTION: self.compute_network_connection,
        }
        for key, job in jobs.items():
            self.store.register(key, self.intervals[key])
            self.coordinator.register(key, job)

        self._loops: list[RefreshLoop] = []
        self._started = False

    # ── lifecycle ────────────────────────────────────────

    async def start(self) -> None:
        if self._started:
            return
        self._started = True

        # warm before the first request
        for key in (CacheKey.STATIC, CacheKey.NETWORK_CONNECTION):
            await self.coordinator.run_now(key)

        await self.coordinator.start()

        if self.settings.eager_refresh:
            loop = RefreshLoop(CacheKey.DYNAMIC, self.refresh, self.intervals[CacheKey.DYNAMIC])
            await loop.start()
            self._loops.append(loop)

        logger.info(
            "BackgroundService started (dynamic=%.1fs, network_connection=%.1fs, static=%.1fs)",
            self.intervals[CacheKey.DYNAMIC],
            self.intervals[CacheKey.NETWORK_CONNECTION],
            self.intervals[CacheKey.STATIC],
        )

    async def stop(self) -> None:
        if not self._started:
            return
        for loop in self._loops:
            await loop.stop()
        self._loops = []
        await self.coordinator.stop()
        self._started = False
        logger.info("BackgroundService stopped")

    # ── reader API ──────────────────────────────────────

    def get(self, key: CacheKey) -> bytes:
        return self.store.get(key) or default_document(key)

    def refresh(self, key: CacheKey) -> bool:
        """Ask for a recomputation of ``key``; False if one is already in flight or the queue is full."""
        return self.store.request_refresh(key)

    def status(self) -> dict:
        cache = {}
        for key in self.store.keys:
            entry = self.store.entry(key)
            cache[key.value] = {
                "updated_at": entry.updated_at if entry else None,
                "expires_at": entry.expires_at if entry else None,
                "stale": self.store.is_stale(key),
                "refreshing": self.store.is_refreshing(key),
            }
        return {
            "status": "running" if self._started else "stopped",
            "workers": self.coordinator.worker_count,
            "pending_refreshes": self.coordinator.pending,
            "cache": cache,
        }

    # ── jobs ────────────────────────────────────────────

    def _rate_interval(self, snap: Snapshot, key: CacheKey) -> float:
        if self.settings.measure_elapsed and snap.sampled_at is not None:
            return snap.elapsed()
        return self.intervals[key]

    def compute_dynamic(self) -> bytes | None:
        document = DynamicMetric(
            cpu=read_cpu_metric(self.reader, self.paths, self.cpu_snap),
            memory=read_memory_metric(self.reader, self.paths),
            network=read_network_metric(
                self.reader, self.paths, self.net_snap, self._rate_interval(self.net_snap, CacheKey.DYNAMIC)
            ),
            storage=read_storage_metric(
                self.reader, self.paths, self.disk_snap, self._rate_interval(self.disk_snap, CacheKey.DYNAMIC)
            ),
            system=read_system_metric(self.reader, self.paths),
        )
        return self._serialize(CacheKey.DYNAMIC, document)

    def compute_static(self) -> bytes | None:
        document = StaticMetric(
            network=read_static_network_metric(self.reader, self.runner, self.paths),
            system=read_static_system_metric(self.reader, self.runner, self.paths),
        )
        return self._serialize(CacheKey.STATIC, document)

    def compute_network_connection(self) -> bytes | None:
        return self._serialize(CacheKey.NETWORK_CONNECTION, read_connection_metric(self.reader, self.paths))

    def _serialize(self, key: CacheKey, document: BaseModel) -> bytes | None:
        try:
            return serialize(document)
        except (PydanticSerializationError, ValueError):
            logger.exception("Could not serialize %s document, keeping previous entry", key)
            return None
