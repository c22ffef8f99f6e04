"""Tests for the bounded, time-expiring response cache."""

from concurrent.futures import ThreadPoolExecutor

import pytest

from fundbot.context.response_cache import ResponseCache, cache_key


class FakeClock:
    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


class TestCacheKey:
    def test_lowercases_trims_and_collapses(self):
        assert cache_key("  Find   User\tABC ") == "find user abc"

    def test_none_is_empty(self):
        assert cache_key(None) == ""


class TestResponseCache:
    def test_case_and_whitespace_equivalence(self):
        cache = ResponseCache()
        cache.put("  Find User ABC ", "found")
        assert cache.get("find user abc") == "found"
        assert cache.get("FIND  USER  ABC") == "found"

    def test_miss_returns_none(self):
        assert ResponseCache().get("nothing here") is None

    def test_entry_expires_after_ttl(self):
        clock = FakeClock()
        cache = ResponseCache(ttl_seconds=300, clock=clock)
        cache.put("q", "a")
        clock.now += 299
        assert cache.get("q") == "a"
        clock.now += 1
        assert cache.get("q") is None

    def test_eviction_drops_first_inserted(self):
        cache = ResponseCache(max_entries=100)
        for i in range(101):
            cache.put(f"query {i}", f"answer {i}")
        assert len(cache) == 100
        assert "query 0" not in cache
        assert cache.get("query 100") == "answer 100"

    def test_overwrite_replaces_value_without_growth(self):
        cache = ResponseCache(max_entries=2)
        cache.put("a", "1")
        cache.put("b", "2")
        cache.put("A", "3")
        assert len(cache) == 2
        assert cache.get("a") == "3"

    def test_overwrite_keeps_eviction_position(self):
        cache = ResponseCache(max_entries=2)
        cache.put("a", "1")
        cache.put("b", "2")
        cache.put("a", "1b")
        cache.put("c", "3")
        assert "a" not in cache
        assert cache.get("b") == "2"
        assert cache.get("c") == "3"

    def test_overwrite_resets_ttl(self):
        clock = FakeClock()
        cache = ResponseCache(ttl_seconds=10, clock=clock)
        cache.put("q", "old")
        clock.now += 8
        cache.put("q", "new")
        clock.now += 8
        assert cache.get("q") == "new"

    def test_clear(self):
        cache = ResponseCache()
        cache.put("q", "a")
        cache.clear()
        assert len(cache) == 0

    def test_rejects_zero_capacity(self):
        with pytest.raises(ValueError):
            ResponseCache(max_entries=0)

    def test_concurrent_access_keeps_bound(self):
        cache = ResponseCache(max_entries=50)

        def worker(n: int) -> None:
            for i in range(200):
                cache.put(f"query {n} {i}", f"answer {i}")
                cache.get(f"query {n} {i // 2}")
                cache.put(f"shared {i % 10}", str(n))

        with ThreadPoolExecutor(max_workers=8) as pool:
            futures = [pool.submit(worker, n) for n in range(8)]
            for future in futures:
                future.result()

        assert len(cache) == 50
