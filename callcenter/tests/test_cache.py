"""
Tests for shared/cache.py — TTL expiry, pattern clears and get_or_set.
"""

import pytest
from unittest.mock import patch

from callcenter.shared.cache import TTLCache


class TestTTLCache:
    def test_set_and_get(self):
        cache = TTLCache(default_ttl=60)
        cache.set("ecommerce", {"a": 1})
        assert cache.get("ecommerce") == {"a": 1}
        assert cache.has("ecommerce")

    def test_missing_key_returns_none(self):
        assert TTLCache().get("nope") is None

    def test_entry_expires(self):
        cache = TTLCache(default_ttl=10)
        with patch("callcenter.shared.cache.time.monotonic", return_value=100.0):
            cache.set("k", "v")
        with patch("callcenter.shared.cache.time.monotonic", return_value=109.0):
            assert cache.get("k") == "v"
        with patch("callcenter.shared.cache.time.monotonic", return_value=110.0):
            assert cache.get("k") is None
            assert not cache.has("k")

    def test_per_entry_ttl_overrides_default(self):
        cache = TTLCache(default_ttl=1000)
        with patch("callcenter.shared.cache.time.monotonic", return_value=0.0):
            cache.set("short", 1, ttl=5)
        with patch("callcenter.shared.cache.time.monotonic", return_value=6.0):
            assert cache.get("short") is None

    def test_delete(self):
        cache = TTLCache()
        cache.set("k", 1)
        assert cache.delete("k") is True
        assert cache.delete("k") is False

    def test_clear_all(self):
        cache = TTLCache()
        cache.set("a", 1)
        cache.set("b", 2)
        assert cache.clear() == 2
        assert cache.keys() == []

    def test_clear_by_pattern(self):
        cache = TTLCache()
        cache.set("ecommerce_en", 1)
        cache.set("ecommerce_hi", 2)
        cache.set("healthcare_en", 3)
        assert cache.clear(r"^ecommerce_") == 2
        assert cache.keys() == ["healthcare_en"]

    def test_stats_track_hits_and_misses(self):
        cache = TTLCache()
        cache.set("k", 1)
        cache.get("k")
        cache.get("missing")
        stats = cache.stats()
        assert stats["size"] == 1
        assert stats["hits"] == 1
        assert stats["misses"] == 1
        assert stats["hit_rate"] == 0.5


@pytest.mark.asyncio
class TestGetOrSet:
    async def test_sync_fetcher_called_once(self):
        cache = TTLCache()
        calls = []

        def fetch():
            calls.append(1)
            return "value"

        assert await cache.get_or_set("k", fetch) == "value"
        assert await cache.get_or_set("k", fetch) == "value"
        assert len(calls) == 1

    async def test_async_fetcher(self):
        cache = TTLCache()

        async def fetch():
            return [1, 2]

        assert await cache.get_or_set("k", fetch) == [1, 2]
        assert cache.get("k") == [1, 2]

    async def test_none_is_not_cached(self):
        cache = TTLCache()
        assert await cache.get_or_set("k", lambda: None) is None
        assert not cache.has("k")
