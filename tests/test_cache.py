"""Tests for the TTL cache."""

from teampulse.tools.cache import TTLCache


def test_get_within_ttl(clock):
    cache = TTLCache(300, clock=clock)
    cache.set("key", [1, 2])

    clock.advance(299)
    assert cache.get("key") == [1, 2]
    assert "key" in cache


def test_entry_expires_at_ttl(clock):
    cache = TTLCache(300, clock=clock)
    cache.set("key", "value")

    clock.advance(300)
    assert cache.get("key") is None
    assert "key" not in cache
    assert len(cache) == 0


def test_missing_key_returns_default(clock):
    cache = TTLCache(clock=clock)
    assert cache.get("nope", default=[]) == []


def test_set_refreshes_expiry(clock):
    cache = TTLCache(10, clock=clock)
    cache.set("key", 1)
    clock.advance(8)
    cache.set("key", 2)
    clock.advance(8)

    assert cache.get("key") == 2


def test_clear(clock):
    cache = TTLCache(clock=clock)
    cache.set("a", 1)
    cache.set("b", 2)
    cache.clear()

    assert len(cache) == 0
