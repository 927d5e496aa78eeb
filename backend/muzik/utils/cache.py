"""In-memory expiring cache with insertion-order eviction.

Process-level cache for hot data (YouTube search results, network quality).
Entries expire lazily: a stale entry is dropped when it is next looked up,
there is no background sweep. When full, the oldest inserted entry is
evicted. Reads never reorder entries.
"""

import threading
import time
from collections import OrderedDict
from dataclasses import dataclass
from typing import Callable, Generic, Hashable, TypeVar

K = TypeVar("K", bound=Hashable)
V = TypeVar("V")


@dataclass
class CacheEntry(Generic[V]):
    value: V
    inserted_at: float


class ExpiringCache(Generic[K, V]):
    """Bounded TTL cache.

    Args:
        capacity: Maximum number of entries kept at once.
        ttl_seconds: Age after which an entry is no longer served.
        clock: Monotonic time source, injectable for tests.
    """

    def __init__(
        self,
        capacity: int,
        ttl_seconds: float,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if capacity <= 0:
            raise ValueError("capacity must be positive")
        if ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be positive")
        self._entries: OrderedDict[K, CacheEntry[V]] = OrderedDict()
        self._capacity = capacity
        self._ttl = ttl_seconds
        self._clock = clock
        self._lock = threading.Lock()

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def ttl(self) -> float:
        return self._ttl

    def get(self, key: K) -> V | None:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            if self._clock() - entry.inserted_at > self._ttl:
                del self._entries[key]
                return None
            return entry.value

    def set(self, key: K, value: V) -> None:
        with self._lock:
            if key in self._entries:
                # Overwrite resets the age and moves the key to the back.
                del self._entries[key]
            elif len(self._entries) >= self._capacity:
                self._entries.popitem(last=False)
            self._entries[key] = CacheEntry(value=value, inserted_at=self._clock())

    def delete(self, key: K) -> bool:
        with self._lock:
            return self._entries.pop(key, None) is not None

    def clear(self) -> int:
        """Drop every entry and return how many were removed."""
        with self._lock:
            removed = len(self._entries)
            self._entries.clear()
            return removed

    def size(self) -> int:
        with self._lock:
            return len(self._entries)

    def __len__(self) -> int:
        return self.size()

    def stats(self) -> dict:
        with self._lock:
            return {
                "size": len(self._entries),
                "max_size": self._capacity,
                "ttl_seconds": self._ttl,
            }


def search_cache_key(query: str, max_results: int) -> str:
    """Build a normalized cache key for a search request.

    Example:
        >>> search_cache_key("  Lofi Beats ", 10)
        'lofi beats::10'
    """
    return f"{query.strip().lower()}::{max_results}"
