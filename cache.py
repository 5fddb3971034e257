"""Thread-safe in-memory TTL cache for upstream API responses."""

import logging
import re
import threading
from datetime import datetime, timedelta

from config import CACHE_TTL
from models import CacheEntry

log = logging.getLogger(__name__)


def make_key(kind, city, country=None):
    """Build a cache key like ``weather_new-york_us`` or ``city_paris_default``."""
    city_part = re.sub(r"\s+", "-", city.strip().lower())
    country_part = (country or "").strip().lower() or "default"
    return f"{kind}_{city_part}_{country_part}"


class ResponseCache:
    """Cache-aside store with a fixed TTL.

    Reads and writes of the mapping happen under a lock; producers run
    outside it, so two threads missing the same key may both fetch. The
    later write wins.
    """

    def __init__(self, ttl=CACHE_TTL, now=datetime.now):
        self.ttl = ttl
        self._now = now
        self._lock = threading.Lock()
        self._entries = {}        # key -> CacheEntry
        self._stats = {"hits": 0, "misses": 0, "sets": 0, "expired": 0}

    def _live(self, key):
        """Return the live entry for key, dropping it if expired. Caller holds the lock."""
        entry = self._entries.get(key)
        if entry is None:
            return None
        if entry.is_expired(self._now()):
            del self._entries[key]
            self._stats["expired"] += 1
            return None
        return entry

    def get(self, key):
        with self._lock:
            entry = self._live(key)
            if entry is None:
                self._stats["misses"] += 1
                return None
            self._stats["hits"] += 1
            return entry.value

    def set(self, key, value):
        entry = CacheEntry(
            key=key,
            value=value,
            expires_at=self._now() + timedelta(seconds=self.ttl),
        )
        with self._lock:
            self._entries[key] = entry
            self._stats["sets"] += 1

    def get_or_compute(self, key, producer):
        """Return the cached value for key, or call producer and cache its result.

        Exceptions from producer propagate and nothing is stored.
        """
        value = self.get(key)
        if value is not None:
            log.info("Cache hit for: %s", key)
            return value

        log.info("Upstream fetch for: %s", key)
        try:
            value = producer()
        except Exception:
            log.error("Upstream fetch failed for: %s", key)
            raise
        self.set(key, value)
        return value

    def delete(self, key):
        """Remove one key. Returns True if a live entry was removed."""
        with self._lock:
            entry = self._live(key)
            if entry is None:
                return False
            del self._entries[key]
            return True

    def clear(self):
        """Remove every entry and return how many live ones there were."""
        with self._lock:
            now = self._now()
            count = sum(1 for e in self._entries.values() if not e.is_expired(now))
            self._entries.clear()
            return count

    def purge_expired(self):
        with self._lock:
            now = self._now()
            stale = [k for k, e in self._entries.items() if e.is_expired(now)]
            for k in stale:
                del self._entries[k]
            self._stats["expired"] += len(stale)
        if stale:
            log.info("Purged %d expired cache entries", len(stale))
        return len(stale)

    def keys(self):
        with self._lock:
            now = self._now()
            return [k for k, e in self._entries.items() if not e.is_expired(now)]

    def stats(self):
        keys = self.keys()
        with self._lock:
            return dict(self._stats, keys=len(keys))
