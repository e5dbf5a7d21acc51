import heapq
import itertools
import threading
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Tuple


@dataclass
class CacheEntry:
    key: str
    value: Any
    expires_at: float
    version: int


class TTLCache:
    """
    In-memory key/value cache with per-entry time-to-live.

    Expired entries are evicted lazily on read, and a background sweeper thread
    periodically reclaims whatever was never read again. The sweeper walks a
    min-heap of (expires_at, version, key) records; a record whose version no
    longer matches the live entry belongs to an overwritten or deleted value
    and is discarded.

    All durations are in seconds.
    """

    def __init__(self, sweep_interval: float = 60 * 60, clock: Callable[[], float] = time.monotonic):
        self.sweep_interval = sweep_interval
        self._clock = clock
        self._entries: Dict[str, CacheEntry] = {}
        self._expiry_heap: List[Tuple[float, int, str]] = []
        self._versions = itertools.count(1)
        self._lock = threading.RLock()
        self._stop_event = threading.Event()
        self._sweeper: Optional[threading.Thread] = None

    def set(self, key: str, value: Any, ttl: float = 24 * 60 * 60) -> None:
        """Store value under key, replacing any previous entry and its expiry"""
        with self._lock:
            entry = CacheEntry(
                key=key,
                value=value,
                expires_at=self._clock() + ttl,
                version=next(self._versions)
            )
            self._entries[key] = entry
            heapq.heappush(self._expiry_heap, (entry.expires_at, entry.version, key))

    def get(self, key: str, default: Any = None) -> Any:
        """Return the cached value, or default if missing or expired"""
        with self._lock:
            entry = self._live_entry(key)
            return default if entry is None else entry.value

    def delete(self, key: str) -> None:
        with self._lock:
            self._entries.pop(key, None)

    def has(self, key: str) -> bool:
        with self._lock:
            return self._live_entry(key) is not None

    def _live_entry(self, key: str) -> Optional[CacheEntry]:
        # Caller holds self._lock
        entry = self._entries.get(key)
        if entry is not None and self._clock() > entry.expires_at:
            del self._entries[key]
            return None
        return entry

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
            self._expiry_heap.clear()

    def stats(self) -> Dict[str, int]:
        with self._lock:
            now = self._clock()
            expired_entries = sum(1 for e in self._entries.values() if now > e.expires_at)
            return {
                "totalEntries": len(self._entries),
                "activeEntries": len(self._entries) - expired_entries,
                "expiredEntries": expired_entries,
            }

    def cleanup(self) -> int:
        """Evict every expired entry and return how many were removed"""
        removed = 0
        with self._lock:
            now = self._clock()
            while self._expiry_heap and self._expiry_heap[0][0] < now:
                expires_at, version, key = heapq.heappop(self._expiry_heap)
                entry = self._entries.get(key)
                if entry is not None and entry.version == version:
                    del self._entries[key]
                    removed += 1

            # Stale heap records left behind by overwrites and deletes
            if len(self._expiry_heap) > 2 * len(self._entries) + 64:
                self._expiry_heap = [
                    (e.expires_at, e.version, e.key) for e in self._entries.values()
                ]
                heapq.heapify(self._expiry_heap)

        return removed

    # =========================================================================
    # BACKGROUND SWEEPER
    # =========================================================================

    def start(self) -> "TTLCache":
        """Start the background sweeper thread (idempotent)"""
        with self._lock:
            if self._sweeper is not None and self._sweeper.is_alive():
                return self

            self._stop_event.clear()
            self._sweeper = threading.Thread(
                target=self._sweep_loop,
                name="ttl-cache-sweeper",
                daemon=True
            )
            self._sweeper.start()

        print(f"🧹 Cache sweeper started (every {self.sweep_interval}s)")
        return self

    def close(self) -> None:
        """Stop the sweeper and drop all entries"""
        self._stop_event.set()
        sweeper = self._sweeper
        if sweeper is not None:
            sweeper.join(timeout=5)
            self._sweeper = None
        self.clear()
        print("🛑 Cache sweeper stopped")

    @property
    def running(self) -> bool:
        return self._sweeper is not None and self._sweeper.is_alive()

    def _sweep_loop(self) -> None:
        while not self._stop_event.wait(self.sweep_interval):
            cleaned = self.cleanup()
            if cleaned > 0:
                print(f"[Cache] Cleaned up {cleaned} expired entries")

    def __enter__(self) -> "TTLCache":
        return self.start()

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
