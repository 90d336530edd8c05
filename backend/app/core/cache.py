# app/core/cache.py
"""
Single-process TTL cache used in front of the credential store on login.

Entries carry an absolute expiry and are checked lazily on access; a bounded
size evicts the least recently used entry. The structure is guarded by a
lock so concurrent get/set for the same key cannot corrupt it. Serving a
slightly stale record inside its TTL is acceptable.
"""
from __future__ import annotations

import time
from collections import OrderedDict
from dataclasses import dataclass
from threading import Lock
from typing import Any, Callable, Optional


@dataclass(frozen=True)
class CacheEntry:
    value: Any
    expires_at: float

    def is_expired(self, now: float) -> bool:
        return now >= self.expires_at


class TTLCache:
    """
    In-memory cache with per-entry TTL and LRU eviction.

    Args:
        default_ttl: TTL in seconds used when `set` gets none.
        max_size: Maximum number of entries kept at once.
        clock: Monotonic time source in seconds. Tests pass a fake one.
    """

    def __init__(
        self,
        default_ttl: float = 3600,
        max_size: int = 1024,
        clock: Callable[[], float] = time.monotonic,
    ):
        if default_ttl <= 0:
            raise ValueError("default_ttl must be > 0")
        if max_size <= 0:
            raise ValueError("max_size must be > 0")
        self._default_ttl = float(default_ttl)
        self._max_size = int(max_size)
        self._clock = clock
        self._entries: "OrderedDict[str, CacheEntry]" = OrderedDict()
        self._lock = Lock()

        self._hits = 0
        self._misses = 0
        self._expired = 0
        self._evictions = 0

    def get(self, key: str) -> Optional[Any]:
        """Return the cached value, or None when absent or expired."""
        now = self._clock()
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                self._misses += 1
                return None
            if entry.is_expired(now):
                del self._entries[key]
                self._expired += 1
                self._misses += 1
                return None
            self._entries.move_to_end(key)
            self._hits += 1
            return entry.value

    def set(self, key: str, value: Any, ttl_seconds: float | None = None) -> None:
        if ttl_seconds is None:
            ttl = self._default_ttl
        elif ttl_seconds > 0:
            ttl = float(ttl_seconds)
        else:
            raise ValueError("ttl_seconds must be > 0")
        entry = CacheEntry(value=value, expires_at=self._clock() + ttl)
        with self._lock:
            if key in self._entries:
                self._entries[key] = entry
                self._entries.move_to_end(key)
                return
            if len(self._entries) >= self._max_size:
                self._entries.popitem(last=False)
                self._evictions += 1
            self._entries[key] = entry

    def delete(self, key: str) -> bool:
        with self._lock:
            return self._entries.pop(key, None) is not None

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def purge_expired(self) -> int:
        """Active sweep; returns how many entries were dropped."""
        now = self._clock()
        with self._lock:
            stale = [k for k, e in self._entries.items() if e.is_expired(now)]
            for key in stale:
                del self._entries[key]
            self._expired += len(stale)
            return len(stale)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def stats(self) -> dict:
        with self._lock:
            return {
                "backend": "in-memory",
                "size": len(self._entries),
                "max_size": self._max_size,
                "ttl_seconds": self._default_ttl,
                "hits": self._hits,
                "misses": self._misses,
                "expired": self._expired,
                "evictions": self._evictions,
            }


class NullCache:
    """Same interface as TTLCache; stores nothing. Used when caching is disabled."""

    def get(self, key: str) -> None:
        return None

    def set(self, key: str, value: Any, ttl_seconds: float | None = None) -> None:
        pass

    def delete(self, key: str) -> bool:
        return False

    def clear(self) -> None:
        pass

    def purge_expired(self) -> int:
        return 0

    def __len__(self) -> int:
        return 0

    def stats(self) -> dict:
        return {"backend": "disabled", "size": 0}
