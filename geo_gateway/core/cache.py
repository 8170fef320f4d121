"""
Process-lifetime in-memory cache with a fixed time-to-live.

Entries expire a fixed number of seconds after insertion. Expired entries are
treated as absent and evicted lazily on the next lookup; there is no
background sweep. Values are replaced wholesale, never mutated in place.

Usage:
    from geo_gateway.core.cache import TTLCache

    cache = TTLCache(ttl_seconds=3600)
    cache.set(("ChIJ...", "en"), reviews)
    reviews = cache.get(("ChIJ...", "en"))  # None once expired
"""

import threading
import time
from typing import Any, Callable, Dict, Hashable, Optional, Tuple


class TTLCache:
    """Keyed in-memory cache with lazy expiry."""

    def __init__(
        self,
        ttl_seconds: float = 3600,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: Dict[Hashable, Tuple[float, Any]] = {}
        self._lock = threading.Lock()

    def get(self, key: Hashable) -> Optional[Any]:
        """Return the cached value, or None if missing or expired."""
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None

            inserted_at, value = entry
            if self._clock() - inserted_at >= self.ttl_seconds:
                del self._entries[key]
                return None

            return value

    def set(self, key: Hashable, value: Any) -> None:
        with self._lock:
            self._entries[key] = (self._clock(), value)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __contains__(self, key: Hashable) -> bool:
        return self.get(key) is not None

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
