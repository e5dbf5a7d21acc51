#!/usr/bin/env python3
"""
Test script for the in-memory TTL cache
"""

import threading
import time

from cache import TTLCache


class FakeClock:
    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def test_set_get_has_delete():
    """Basic set/get/has/delete"""
    print("🧪 Testing basic cache operations...")
    cache = TTLCache(clock=FakeClock())

    cache.set("test-key", {"data": "test-value"}, 5)
    assert cache.get("test-key") == {"data": "test-value"}
    assert cache.has("test-key")

    assert cache.get("non-existent") is None
    assert not cache.has("non-existent")

    cache.delete("test-key")
    assert not cache.has("test-key")
    cache.delete("test-key")
    print("✅ Basic operations work")


def test_none_value_is_a_live_entry():
    """A cached None is distinguishable from a miss"""
    clock = FakeClock()
    cache = TTLCache(clock=clock)

    cache.set("k", None, 60)
    assert cache.has("k")
    missing = object()
    assert cache.get("k", missing) is None
    assert cache.get("absent", missing) is missing

    clock.advance(61)
    assert not cache.has("k")
    assert cache.get("k", missing) is missing
    assert cache.stats()["totalEntries"] == 0


def test_expired_entry_is_a_miss_without_sweep():
    """A read after expiry misses and purges the entry even though no sweep ran"""
    print("🧪 Testing lazy expiry...")
    clock = FakeClock()
    cache = TTLCache(clock=clock)

    cache.set("expire-key", "will-expire", 2)
    clock.advance(2)
    assert cache.get("expire-key") == "will-expire"

    clock.advance(0.5)
    assert cache.stats()["expiredEntries"] == 1
    assert not cache.has("expire-key")
    assert cache.get("expire-key") is None
    assert cache.stats()["totalEntries"] == 0
    print("✅ Expired entries miss on read")


def test_overwrite_replaces_value_and_expiry():
    """Second set wins and the first entry's expiry no longer applies"""
    print("🧪 Testing overwrite semantics...")
    clock = FakeClock()
    cache = TTLCache(clock=clock)

    cache.set("key", "v1", 10)
    clock.advance(8)
    cache.set("key", "v2", 10)

    assert cache.stats() == {"totalEntries": 1, "activeEntries": 1, "expiredEntries": 0}
    assert cache.get("key") == "v2"

    # Past the first entry's deadline, before the second's
    clock.advance(5)
    assert cache.cleanup() == 0
    assert cache.get("key") == "v2"

    clock.advance(6)
    assert cache.cleanup() == 1
    assert cache.get("key") is None
    print("✅ Overwrite cancels the previous expiry")


def test_overwrite_with_shorter_ttl():
    clock = FakeClock()
    cache = TTLCache(clock=clock)

    cache.set("key", "long", 100)
    cache.set("key", "short", 1)
    clock.advance(2)

    assert cache.get("key") is None


def test_cleanup_and_stats():
    print("🧪 Testing cleanup and stats...")
    clock = FakeClock()
    cache = TTLCache(clock=clock)

    cache.set("a", 1, 1)
    cache.set("b", 2, 1)
    cache.set("c", 3, 60)
    clock.advance(5)

    assert cache.stats() == {"totalEntries": 3, "activeEntries": 1, "expiredEntries": 2}
    assert cache.cleanup() == 2
    assert cache.stats() == {"totalEntries": 1, "activeEntries": 1, "expiredEntries": 0}

    cache.clear()
    assert cache.stats()["totalEntries"] == 0
    print("✅ Cleanup removed expired entries")


def test_deleted_key_is_not_resurrected_by_cleanup():
    clock = FakeClock()
    cache = TTLCache(clock=clock)

    cache.set("key", "old", 1)
    cache.delete("key")
    cache.set("key", "new", 100)
    clock.advance(2)

    assert cache.cleanup() == 0
    assert cache.get("key") == "new"


def test_background_sweeper_reclaims_entries():
    """The sweeper thread evicts expired entries on its own"""
    print("🧪 Testing background sweeper...")
    cache = TTLCache(sweep_interval=0.05)

    with cache:
        assert cache.running
        cache.set("short", "value", 0.01)
        cache.set("long", "value", 60)

        deadline = time.monotonic() + 2
        while cache.stats()["totalEntries"] > 1 and time.monotonic() < deadline:
            time.sleep(0.02)

        assert cache.stats()["totalEntries"] == 1
        assert cache.get("long") == "value"

    assert not cache.running
    assert cache.stats()["totalEntries"] == 0
    print("✅ Sweeper reclaimed expired entry and stopped cleanly")


def test_concurrent_writers_leave_consistent_state():
    print("🧪 Testing concurrent access...")
    cache = TTLCache()
    errors = []

    def worker(n: int):
        try:
            for i in range(200):
                cache.set("shared", (n, i), 60)
                value = cache.get("shared")
                assert value is None or isinstance(value, tuple)
                if i % 50 == 0:
                    cache.delete("shared")
        except Exception as e:
            errors.append(e)

    threads = [threading.Thread(target=worker, args=(n,)) for n in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert not errors
    stats = cache.stats()
    assert stats["totalEntries"] <= 1
    assert stats["expiredEntries"] == 0
    print("✅ Concurrent access left one consistent entry")


if __name__ == "__main__":
    test_set_get_has_delete()
    test_none_value_is_a_live_entry()
    test_expired_entry_is_a_miss_without_sweep()
    test_overwrite_replaces_value_and_expiry()
    test_overwrite_with_shorter_ttl()
    test_cleanup_and_stats()
    test_deleted_key_is_not_resurrected_by_cleanup()
    test_background_sweeper_reclaims_entries()
    test_concurrent_writers_leave_consistent_state()
    print("\n✅ All cache tests completed!")
