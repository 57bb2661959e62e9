# core/cache.py

"""
In-process TTL cache for per-user lookups that are read far more often
than written (condominium pickers, supplier lists).

Entries are keyed "<namespace>:<user_id>:<...>" so a write can drop every
entry of one user with `invalidate_user(namespace, user_id)`.
"""

import time
from threading import Lock
from typing import Any, Optional

from core.logging_config import logger

DEFAULT_TTL_SECONDS = 300


class CacheEntry:
    """A cached value with its expiry (monotonic clock)."""

    __slots__ = ("value", "expires_at")

    def __init__(self, value: Any, ttl_seconds: int):
        self.value = value
        self.expires_at = time.monotonic() + ttl_seconds

    def is_expired(self) -> bool:
        return time.monotonic() >= self.expires_at


class SimpleCache:
    """Thread-safe dict with TTL."""

    def __init__(self):
        self._cache: dict[str, CacheEntry] = {}
        self._lock = Lock()

    def get(self, key: str) -> Optional[Any]:
        with self._lock:
            entry = self._cache.get(key)
            if entry is None:
                return None

            if entry.is_expired():
                del self._cache[key]
                return None

            return entry.value

    def set(self, key: str, value: Any, ttl_seconds: int = DEFAULT_TTL_SECONDS):
        with self._lock:
            self._cache[key] = CacheEntry(value, ttl_seconds)

    def delete(self, key: str):
        with self._lock:
            self._cache.pop(key, None)

    def delete_prefix(self, prefix: str) -> int:
        """Drop every key starting with `prefix`; returns how many were removed."""
        with self._lock:
            keys = [k for k in self._cache if k.startswith(prefix)]
            for k in keys:
                del self._cache[k]
            return len(keys)

    def clear(self):
        with self._lock:
            self._cache.clear()

    def size(self) -> int:
        with self._lock:
            return len(self._cache)


# Global cache instance
_cache = SimpleCache()


def user_key(namespace: str, user_id: str, *parts) -> str:
    return ":".join([namespace, user_id, *[str(p) for p in parts]])


def cache_get(key: str) -> Optional[Any]:
    return _cache.get(key)


def cache_set(key: str, value: Any, ttl_seconds: int = DEFAULT_TTL_SECONDS):
    _cache.set(key, value, ttl_seconds)


def cache_delete(key: str):
    _cache.delete(key)


def invalidate_user(namespace: str, user_id: str):
    removed = _cache.delete_prefix(f"{namespace}:{user_id}:")
    if removed:
        logger.debug(f"Cache invalidated: {namespace}:{user_id} ({removed} keys)")


def cache_clear():
    _cache.clear()
