"""Unit tests for the read-through cache."""

import threading
import time

import pytest

from src.userhub.core.cache import ReadThroughCache
from tests.fixtures.core import FakeClock


class TestReadThroughCache:
    """Test TTL handling, invalidation and compute semantics."""

    def test_miss_computes_and_stores(self, cache: ReadThroughCache):
        calls = []

        value = cache.get_or_compute("k", 10, lambda: calls.append(1) or "v")

        assert value == "v"
        assert cache.get("k") == "v"
        assert calls == [1]
        assert cache.stats.misses == 1

    def test_hit_skips_compute(self, cache: ReadThroughCache):
        cache.get_or_compute("k", 10, lambda: "first")

        value = cache.get_or_compute("k", 10, lambda: pytest.fail("recomputed"))

        assert value == "first"
        assert cache.stats.hits == 1

    def test_entry_expires_after_ttl(self, cache: ReadThroughCache, clock: FakeClock):
        """Should treat an entry as absent once its TTL has elapsed."""
        cache.set("k", "old", ttl=180)

        clock.advance(179)
        assert cache.get("k") == "old"

        clock.advance(2)
        assert cache.get("k") is None
        assert cache.get_or_compute("k", 180, lambda: "new") == "new"

    def test_ttl_is_per_entry(self, cache: ReadThroughCache, clock: FakeClock):
        cache.set("short", 1, ttl=180)
        cache.set("long", 2, ttl=300)

        clock.advance(200)

        assert "short" not in cache
        assert cache.get("long") == 2

    def test_compute_error_is_not_cached(self, cache: ReadThroughCache):
        """Should propagate compute failures and store nothing."""

        def boom():
            raise RuntimeError("store down")

        with pytest.raises(RuntimeError, match="store down"):
            cache.get_or_compute("k", 10, boom)

        assert "k" not in cache
        assert cache.get_or_compute("k", 10, lambda: "ok") == "ok"

    def test_invalidate(self, cache: ReadThroughCache):
        cache.set("k", "v", ttl=10)

        assert cache.invalidate("k") is True
        assert cache.invalidate("k") is False
        assert cache.get("k") is None

    def test_clear_removes_everything_and_bumps_generation(self, cache: ReadThroughCache):
        cache.set("a", 1, ttl=10)
        cache.set("b", 2, ttl=10)
        generation = cache.generation

        cache.clear()

        assert len(cache) == 0
        assert cache.generation == generation + 1

    def test_generation_is_monotonic(self, cache: ReadThroughCache):
        assert cache.generation == 0
        assert cache.bump_generation() == 1
        assert cache.bump_generation() == 2
        assert cache.generation == 2

    def test_value_computed_across_a_bump_is_not_stored(self, cache: ReadThroughCache):
        """A read racing a write must not re-insert data read before the write."""

        def compute_while_writing():
            cache.bump_generation()
            return "pre-write"

        value = cache.get_or_compute("k", 10, compute_while_writing)

        assert value == "pre-write"
        assert "k" not in cache

    def test_max_entries_bounds_size(self, clock: FakeClock):
        cache = ReadThroughCache(max_entries=2, timer=clock)

        for key in ("a", "b", "c"):
            cache.set(key, key, ttl=60)

        assert len(cache) == 2
        assert "c" in cache


class TestSingleFlight:
    """Test that concurrent misses on one key run compute once."""

    def test_concurrent_misses_compute_once(self):
        cache = ReadThroughCache()
        calls = 0
        calls_lock = threading.Lock()
        started = threading.Event()

        def slow_compute():
            nonlocal calls
            with calls_lock:
                calls += 1
            started.set()
            time.sleep(0.05)
            return "value"

        results = []

        def reader():
            results.append(cache.get_or_compute("k", 60, slow_compute))

        threads = [threading.Thread(target=reader) for _ in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join(timeout=5)

        assert results == ["value"] * 8
        assert calls == 1

    def test_distinct_keys_do_not_block_each_other(self):
        cache = ReadThroughCache()

        results = {}

        def reader(key):
            results[key] = cache.get_or_compute(key, 60, lambda: key.upper())

        threads = [threading.Thread(target=reader, args=(k,)) for k in ("a", "b", "c")]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join(timeout=5)

        assert results == {"a": "A", "b": "B", "c": "C"}
