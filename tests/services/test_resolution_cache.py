"""Tests for the TTL resolution cache."""
from datetime import datetime, timedelta, timezone

import pytest

from event_locator.services.cache import ResolutionCache


class FakeClock:
    """Manually advanced clock."""

    def __init__(self):
        self.now = datetime(2026, 1, 1, tzinfo=timezone.utc)

    def __call__(self):
        return self.now

    def advance(self, **kwargs):
        self.now += timedelta(**kwargs)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def cache(clock):
    return ResolutionCache(ttl=60, clock=clock)


def test_get_missing_key(cache):
    """Test that an unknown key is a miss."""
    assert cache.get("absent") is None
    assert cache.get_metrics()["misses"] == 1


def test_set_and_get(cache):
    """Test storing and reading back a value."""
    cache.set("geocode:kigali", (30.0619, -1.9441))
    assert cache.get("geocode:kigali") == (30.0619, -1.9441)
    assert cache.get_metrics()["hits"] == 1


def test_entry_expires_at_ttl(cache, clock):
    """Test that a read at exactly the expiry instant is a miss."""
    cache.set("key", "value")

    clock.advance(seconds=59)
    assert cache.get("key") == "value"

    clock.advance(seconds=1)
    assert cache.get("key") is None
    assert len(cache) == 0
    assert cache.get_metrics()["expired"] == 1


def test_per_entry_ttl(cache, clock):
    """Test that an explicit TTL overrides the default."""
    cache.set("short", 1, ttl=5)
    cache.set("long", 2, ttl=timedelta(hours=1))

    clock.advance(seconds=10)
    assert cache.get("short") is None
    assert cache.get("long") == 2


def test_set_replaces_and_extends(cache, clock):
    """Test that setting an existing key replaces value and expiry."""
    cache.set("key", "old")
    clock.advance(seconds=50)
    cache.set("key", "new")
    clock.advance(seconds=50)
    assert cache.get("key") == "new"


def test_invalidate_and_clear(cache):
    """Test removing one entry and all entries."""
    cache.set("a", 1)
    cache.set("b", 2)

    cache.invalidate("a")
    cache.invalidate("missing")
    assert cache.get("a") is None
    assert cache.get("b") == 2

    cache.clear()
    assert len(cache) == 0


def test_metrics_hit_rate(cache):
    """Test the computed hit rate."""
    cache.set("a", 1)
    cache.get("a")
    cache.get("b")

    metrics = cache.get_metrics()
    assert metrics["hit_rate"] == 50.0
    assert metrics["entries"] == 1


def test_default_ttl_is_one_day():
    """Test the default time-to-live."""
    assert ResolutionCache().ttl == timedelta(hours=24)


def test_purge_expired(cache, clock):
    """Test sweeping out every expired entry at once."""
    cache.set("short", 1, ttl=5)
    cache.set("shorter", 2, ttl=1)
    cache.set("long", 3, ttl=3600)

    clock.advance(seconds=10)

    assert cache.purge_expired() == 2
    assert len(cache) == 1
    assert cache.get("long") == 3
    assert cache.get_metrics()["expired"] == 2


def test_max_entries_purges_expired_first(clock):
    """Test that a full cache drops expired entries before live ones."""
    cache = ResolutionCache(ttl=60, clock=clock, max_entries=2)
    cache.set("stale", 1, ttl=5)
    cache.set("live", 2)
    clock.advance(seconds=10)

    cache.set("new", 3)

    assert len(cache) == 2
    assert cache.get("live") == 2
    assert cache.get("new") == 3
    assert cache.get_metrics()["evicted"] == 0


def test_max_entries_evicts_least_recently_stored(clock):
    """Test eviction order when nothing has expired."""
    cache = ResolutionCache(ttl=60, clock=clock, max_entries=2)
    cache.set("a", 1)
    cache.set("b", 2)
    cache.set("a", 10)

    cache.set("c", 3)

    assert cache.get("b") is None
    assert cache.get("a") == 10
    assert cache.get("c") == 3
    assert len(cache) == 2
    assert cache.get_metrics()["evicted"] == 1
