import logging
import math
import threading
import time
from typing import Any, Callable

from cachetools import Cache, TLRUCache

logger = logging.getLogger(__name__)

DEFAULT_TTL_MINUTES = 60
DEFAULT_MAX_ENTRIES = 10000

_MISSING = object()


def _time_to_use(key, item, now):
    # An entry stays live while now <= now_at_set + ttl.
    _, ttl_seconds = item
    return math.nextafter(now + ttl_seconds, math.inf)


class TtlCache:
    """Key/value store with per-entry expiry, checked lazily on read.

    Backed by ``cachetools.TLRUCache``; each value is stored with its own
    TTL. ``clock`` returns seconds as a float and defaults to
    time.monotonic; tests inject their own to control expiry.
    """

    def __init__(self, default_ttl_minutes: float = DEFAULT_TTL_MINUTES,
                 clock: Callable[[], float] = time.monotonic,
                 maxsize: int = DEFAULT_MAX_ENTRIES):
        self.default_ttl_minutes = default_ttl_minutes
        self._cache = TLRUCache(maxsize=maxsize, ttu=_time_to_use, timer=clock)
        self._lock = threading.Lock()
        self._key_locks: dict[str, threading.Lock] = {}

    def set(self, key: str, value: Any, ttl_minutes: float | None = None) -> None:
        ttl = self.default_ttl_minutes if ttl_minutes is None else ttl_minutes
        with self._lock:
            self._cache[key] = (value, ttl * 60)
        logger.debug("Cached key %s for %s minutes", key, ttl)

    def get_with_info(self, key: str) -> tuple[bool, Any]:
        """Return (found, value); value is None on a miss."""
        with self._lock:
            self._cache.expire()
            item = self._cache.get(key, _MISSING)
        if item is _MISSING:
            logger.debug("Cache miss for key %s", key)
            return False, None
        logger.debug("Cache hit for key %s", key)
        return True, item[0]

    def get(self, key: str, default: Any = None) -> Any:
        found, value = self.get_with_info(key)
        return value if found else default

    def has(self, key: str) -> bool:
        found, _ = self.get_with_info(key)
        return found

    def delete(self, key: str) -> bool:
        with self._lock:
            self._cache.expire()
            deleted = self._cache.pop(key, _MISSING) is not _MISSING
        if deleted:
            logger.debug("Deleted cache entry for key %s", key)
        return deleted

    def clear(self) -> None:
        with self._lock:
            size = len(self._cache)
            self._cache.clear()
        logger.info("Cleared cache, removed %d entries", size)

    def cleanup(self) -> int:
        """Drop expired entries and return how many were removed."""
        with self._lock:
            expired = self._cache.expire()
        if expired:
            logger.info("Cleaned up %d expired cache entries", len(expired))
        return len(expired)

    def stats(self) -> dict:
        with self._lock:
            # Cache.__iter__ also yields entries the TLRU view already hides.
            held = list(Cache.__iter__(self._cache))
            keys = [k for k in held if k in self._cache]
        expired_keys = [k for k in held if k not in keys]
        return {"size": len(held), "keys": keys, "expired_keys": expired_keys}

    def __len__(self) -> int:
        with self._lock:
            return len(self._cache)

    def get_or_set(self, key: str, compute: Callable[[], Any],
                   ttl_minutes: float | None = None) -> Any:
        """Return the live entry for ``key`` or compute, store and return it.

        Callers racing on the same key wait for one another so ``compute``
        runs once per miss.
        """
        found, value = self.get_with_info(key)
        if found:
            return value

        with self._lock:
            key_lock = self._key_locks.setdefault(key, threading.Lock())
        try:
            with key_lock:
                found, value = self.get_with_info(key)
                if not found:
                    value = compute()
                    self.set(key, value, ttl_minutes)
        finally:
            with self._lock:
                if not key_lock.locked():
                    self._key_locks.pop(key, None)
        return value
