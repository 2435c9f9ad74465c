"""TTL read-through cache for day summaries.

Entries are keyed by spot and upstream timeline version. At most one computation
per key runs at a time: concurrent callers for the same key wait for the
first one and then read its result.
"""

import logging
import threading
import time
from dataclasses import dataclass
from typing import Any, Callable, Hashable, Optional


logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 1200  # 20 minutes, upstream refreshes every 15-30
MIN_TTL_SECONDS = 900
MAX_TTL_SECONDS = 1800


@dataclass
class CacheEntry:
    value: Any
    stored_at: float  # time.monotonic()


class SummaryCache:
    """Thread-safe TTL cache with one in-flight computation per key."""

    def __init__(self, ttl_seconds: float = DEFAULT_TTL_SECONDS) -> None:
        """Initialize the cache.

        Args:
            ttl_seconds: Entry lifetime, between 15 and 30 minutes
        """
        if not MIN_TTL_SECONDS <= ttl_seconds <= MAX_TTL_SECONDS:
            raise ValueError(
                f"ttl_seconds must be between {MIN_TTL_SECONDS} and {MAX_TTL_SECONDS}, got {ttl_seconds}"
            )
        self.ttl_seconds = ttl_seconds
        self._lock = threading.Lock()
        self._entries: dict[Hashable, CacheEntry] = {}
        self._key_locks: dict[Hashable, threading.Lock] = {}

        self.hits: int = 0
        self.misses: int = 0

    def _is_fresh(self, entry: CacheEntry, now: float) -> bool:
        return now - entry.stored_at <= self.ttl_seconds

    def get(self, key: Hashable) -> Optional[Any]:
        """Cached value if present and fresh."""
        now = time.monotonic()
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            if not self._is_fresh(entry, now):
                del self._entries[key]
                return None
            return entry.value

    def get_or_compute(self, key: Hashable, compute: Callable[[], Any]) -> Any:
        """Return the cached value for key, computing it at most once.

        Args:
            key: Cache key, typically (spot_id, timeline_version)
            compute: Zero-argument function producing the value

        Returns:
            Cached or freshly computed value
        """
        cached = self.get(key)
        if cached is not None:
            with self._lock:
                self.hits += 1
            return cached

        with self._lock:
            key_lock = self._key_locks.setdefault(key, threading.Lock())

        with key_lock:
            # Another caller may have filled the entry while we waited
            cached = self.get(key)
            if cached is not None:
                with self._lock:
                    self.hits += 1
                return cached

            logger.debug(f"Summary cache miss for {key}")
            value = compute()
            with self._lock:
                self.misses += 1
                self._entries[key] = CacheEntry(value=value, stored_at=time.monotonic())
            return value

    def _drop_key_lock(self, key: Hashable) -> None:
        # Caller holds self._lock; a held key lock belongs to a computation in flight
        key_lock = self._key_locks.get(key)
        if key_lock is not None and not key_lock.locked():
            del self._key_locks[key]

    def invalidate(self, key: Hashable) -> None:
        with self._lock:
            self._entries.pop(key, None)
            self._drop_key_lock(key)

    def prune(self) -> int:
        """Drop expired entries and idle key locks. Returns how many entries were removed."""
        now = time.monotonic()
        with self._lock:
            expired = [k for k, e in self._entries.items() if not self._is_fresh(e, now)]
            for key in expired:
                del self._entries[key]
            for key in [k for k in self._key_locks if k not in self._entries]:
                self._drop_key_lock(key)
        return len(expired)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
