"""
In-memory TTL caches.

`auth_cache` holds resolved tokens for a short time so parallel requests
carrying the same token hit Supabase Auth once. `read_cache` holds
rarely-changing public lists (indicators, system links, work locations) and
is invalidated by the write paths of those resources.
"""

import threading
import time
from typing import Any, Dict, Optional, Tuple

from hub.config import settings


class TTLCache:
    def __init__(self, default_ttl: float = 300, max_size: int = 1000):
        self.default_ttl = default_ttl
        self.max_size = max_size
        self._entries: Dict[str, Tuple[Any, float]] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[Any]:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            value, expires_at = entry
            if time.monotonic() >= expires_at:
                del self._entries[key]
                return None
            return value

    def set(self, key: str, value: Any, ttl: Optional[float] = None) -> None:
        with self._lock:
            if key not in self._entries and len(self._entries) >= self.max_size:
                self._evict_expired()
                if len(self._entries) >= self.max_size:
                    return
            self._entries[key] = (value, time.monotonic() + (ttl or self.default_ttl))

    def delete(self, key: str) -> None:
        with self._lock:
            self._entries.pop(key, None)

    def invalidate(self, prefix: str) -> int:
        """Drop every key starting with prefix. Returns how many were dropped."""
        with self._lock:
            keys = [k for k in self._entries if k.startswith(prefix)]
            for k in keys:
                del self._entries[k]
            return len(keys)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)

    def _evict_expired(self) -> None:
        now = time.monotonic()
        for key in [k for k, (_, exp) in self._entries.items() if now >= exp]:
            del self._entries[key]


def cache_key(table: str, **filters: Any) -> str:
    """Stable key for a table read: "table:k1=v1&k2=v2" with keys sorted."""
    parts = "&".join(f"{k}={filters[k]}" for k in sorted(filters))
    return f"{table}:{parts}"


auth_cache = TTLCache(default_ttl=settings.auth_cache_ttl_seconds, max_size=500)
read_cache = TTLCache(default_ttl=settings.read_cache_ttl_seconds)
