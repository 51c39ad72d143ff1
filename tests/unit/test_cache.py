"""Tests for the in-memory TTL cache."""

from __future__ import annotations

import pytest

from hub.core import cache as cache_module
from hub.core.cache import TTLCache, cache_key


class TestTTLCache:
    def test_get_returns_value_until_expiry(self, monkeypatch: pytest.MonkeyPatch) -> None:
        now = [100.0]
        monkeypatch.setattr(cache_module.time, "monotonic", lambda: now[0])
        cache = TTLCache(default_ttl=10)
        cache.set("k", {"a": 1})
        assert cache.get("k") == {"a": 1}
        now[0] = 111.0
        assert cache.get("k") is None
        assert len(cache) == 0

    def test_per_entry_ttl(self, monkeypatch: pytest.MonkeyPatch) -> None:
        now = [0.0]
        monkeypatch.setattr(cache_module.time, "monotonic", lambda: now[0])
        cache = TTLCache(default_ttl=100)
        cache.set("short", 1, ttl=1)
        cache.set("long", 2)
        now[0] = 5.0
        assert cache.get("short") is None
        assert cache.get("long") == 2

    def test_invalidate_prefix(self) -> None:
        cache = TTLCache()
        cache.set("positions:active_only=True", [1])
        cache.set("positions:active_only=False", [2])
        cache.set("system_links:active_only=True", [3])
        assert cache.invalidate("positions:") == 2
        assert cache.get("system_links:active_only=True") == [3]
        cache.delete("system_links:active_only=True")
        assert len(cache) == 0

    def test_full_cache_skips_new_keys(self) -> None:
        cache = TTLCache(max_size=2)
        cache.set("a", 1)
        cache.set("b", 2)
        cache.set("c", 3)
        assert cache.get("c") is None
        cache.set("a", 10)
        assert cache.get("a") == 10


def test_cache_key_is_order_independent() -> None:
    assert cache_key("t", b=2, a=1) == cache_key("t", a=1, b=2) == "t:a=1&b=2"
