"""
In-process TTL cache.

Flat time-to-live eviction only: entries expire when read after their
deadline. Used for sector agent sets, intent pattern sets and any other
lookup that is expensive to rebuild on every call.
"""

import inspect
import logging
import re
import time
from threading import Lock
from typing import Any, Callable, Optional

logger = logging.getLogger(__name__)


class TTLCache:
    """Thread-safe key/value cache with per-entry expiry."""

    def __init__(self, default_ttl: float = 300):
        self._default_ttl = default_ttl
        self._entries: dict[str, tuple[Any, float]] = {}
        self._lock = Lock()
        self._hits = 0
        self._misses = 0

    def set(self, key: str, value: Any, ttl: Optional[float] = None) -> None:
        expires_at = time.monotonic() + (ttl if ttl is not None else self._default_ttl)
        with self._lock:
            self._entries[key] = (value, expires_at)

    def get(self, key: str) -> Any:
        """Return the cached value, or None when missing or expired."""
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                self._misses += 1
                return None
            value, expires_at = entry
            if time.monotonic() >= expires_at:
                del self._entries[key]
                self._misses += 1
                return None
            self._hits += 1
            return value

    def has(self, key: str) -> bool:
        with self._lock:
            entry = self._entries.get(key)
            return entry is not None and time.monotonic() < entry[1]

    def delete(self, key: str) -> bool:
        with self._lock:
            return self._entries.pop(key, None) is not None

    def clear(self, pattern: Optional[str] = None) -> int:
        """
        Remove entries. With a regex pattern only matching keys are removed.
        Returns the number of entries removed.
        """
        with self._lock:
            if pattern is None:
                count = len(self._entries)
                self._entries.clear()
            else:
                regex = re.compile(pattern)
                doomed = [k for k in self._entries if regex.search(k)]
                for k in doomed:
                    del self._entries[k]
                count = len(doomed)
        logger.debug(f"Cache cleared: {count} entries (pattern={pattern})")
        return count

    def keys(self) -> list[str]:
        now = time.monotonic()
        with self._lock:
            return [k for k, (_, exp) in self._entries.items() if now < exp]

    async def get_or_set(
        self, key: str, fetcher: Callable[[], Any], ttl: Optional[float] = None
    ) -> Any:
        """Return the cached value or compute, store and return it. Fetcher may be async."""
        value = self.get(key)
        if value is not None:
            return value
        value = fetcher()
        if inspect.isawaitable(value):
            value = await value
        if value is not None:
            self.set(key, value, ttl)
        return value

    def stats(self) -> dict:
        with self._lock:
            total = self._hits + self._misses
            return {
                "size": len(self._entries),
                "hits": self._hits,
                "misses": self._misses,
                "hit_rate": round(self._hits / total, 4) if total else 0.0,
            }
