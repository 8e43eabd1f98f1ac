"""Tests for metrics_api.engine.cache_store."""

from __future__ import annotations

import threading
from unittest.mock import MagicMock

from metrics_api.engine.cache_store import CacheStore
from metrics_api.models import CacheEntry, CacheKey


class FakeClock:
    def __init__(self, now: float = 100.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now


def _store(on_stale=None, ttl: float = 5.0) -> tuple[CacheStore, FakeClock]:
    clock = FakeClock()
    store = CacheStore(on_stale=on_stale, clock=clock)
    store.register(CacheKey.DYNAMIC, ttl)
    return store, clock


class TestCacheEntry:
    def test_stale_only_after_expiry(self):
        entry = CacheEntry(data=b"{}", updated_at=10.0, expires_at=15.0)

        assert not entry.is_stale(15.0)
        assert entry.is_stale(15.1)


class TestCacheStore:
    def test_unregistered_key_never_refreshes(self):
        on_stale = MagicMock(return_value=True)
        store = CacheStore(on_stale=on_stale)

        assert store.get(CacheKey.STATIC) == b""
        on_stale.assert_not_called()

    def test_empty_entry_triggers_refresh(self):
        on_stale = MagicMock(return_value=True)
        store, _ = _store(on_stale)

        assert store.get(CacheKey.DYNAMIC) == b""
        on_stale.assert_called_once_with(CacheKey.DYNAMIC)
        assert store.is_refreshing(CacheKey.DYNAMIC)

    def test_fresh_entry_served_without_refresh(self):
        on_stale = MagicMock(return_value=True)
        store, clock = _store(on_stale)
        store.set(CacheKey.DYNAMIC, 5.0, b'{"cpu":{}}')

        clock.now += 5.0
        assert store.get(CacheKey.DYNAMIC) == b'{"cpu":{}}'
        on_stale.assert_not_called()

    def test_stale_entry_served_and_refresh_requested(self):
        on_stale = MagicMock(return_value=True)
        store, clock = _store(on_stale)
        store.set(CacheKey.DYNAMIC, 5.0, b"old")

        clock.now += 6.0
        assert store.get(CacheKey.DYNAMIC) == b"old"
        assert store.get(CacheKey.DYNAMIC) == b"old"
        on_stale.assert_called_once_with(CacheKey.DYNAMIC)

    def test_refused_refresh_releases_mark(self):
        on_stale = MagicMock(return_value=False)
        store, _ = _store(on_stale)

        store.get(CacheKey.DYNAMIC)
        assert not store.is_refreshing(CacheKey.DYNAMIC)

        store.get(CacheKey.DYNAMIC)
        assert on_stale.call_count == 2

    def test_no_callback_releases_mark(self):
        store, _ = _store()

        assert store.request_refresh(CacheKey.DYNAMIC) is False
        assert not store.is_refreshing(CacheKey.DYNAMIC)

    def test_set_replaces_entry_wholesale(self):
        store, clock = _store()
        first = store.set(CacheKey.DYNAMIC, 5.0, b"a")

        clock.now = 200.0
        second = store.set(CacheKey.DYNAMIC, 1.0, b"b")

        assert first == CacheEntry(data=b"a", updated_at=100.0, expires_at=105.0)
        assert store.entry(CacheKey.DYNAMIC) is second
        assert second.expires_at == 201.0

    def test_is_stale(self):
        store, clock = _store()
        assert store.is_stale(CacheKey.DYNAMIC)

        store.set(CacheKey.DYNAMIC, 5.0, b"a")
        assert not store.is_stale(CacheKey.DYNAMIC)

        clock.now += 10
        assert store.is_stale(CacheKey.DYNAMIC)

    def test_keys_and_ttl(self):
        store, _ = _store(ttl=2.5)
        store.register(CacheKey.STATIC, 60)

        assert store.keys == [CacheKey.DYNAMIC, CacheKey.STATIC]
        assert store.ttl(CacheKey.DYNAMIC) == 2.5
        assert store.ttl(CacheKey.NETWORK_CONNECTION) == 0.0


class TestSingleFlightMarks:
    def test_mark_is_exclusive(self):
        store, _ = _store()

        assert store.mark_refreshing(CacheKey.DYNAMIC)
        assert not store.mark_refreshing(CacheKey.DYNAMIC)
        store.release(CacheKey.DYNAMIC)
        assert store.mark_refreshing(CacheKey.DYNAMIC)

    def test_marks_are_per_key(self):
        store, _ = _store()

        assert store.mark_refreshing(CacheKey.DYNAMIC)
        assert store.mark_refreshing(CacheKey.STATIC)

    def test_concurrent_stale_reads_request_one_refresh(self):
        calls = []
        calls_lock = threading.Lock()

        def on_stale(key):
            with calls_lock:
                calls.append(key)
            return True

        store, _ = _store(on_stale)
        barrier = threading.Barrier(16)

        def reader():
            barrier.wait()
            store.get(CacheKey.DYNAMIC)

        threads = [threading.Thread(target=reader) for _ in range(16)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert calls == [CacheKey.DYNAMIC]
