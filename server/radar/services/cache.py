"""Namespaced TTL-based cache store."""

import logging
import threading
from enum import Enum
from typing import Any, Callable, Optional
from dataclasses import dataclass

from .clock import Clock, SystemClock

logger = logging.getLogger(__name__)


class CacheNamespace(str, Enum):
    """Data categories kept apart in the cache."""

    DASHBOARD = "dashboard"
    TIMELINE = "timeline"
    CHANGELOG = "changelog"


def cache_key(namespace: CacheNamespace, package_name: str, version: Optional[str] = None) -> str:
    """Build the natural key for a package (and version, for changelogs)."""
    if namespace is CacheNamespace.CHANGELOG:
        if not version:
            raise ValueError("changelog keys require a version")
        return f"{package_name}@{version}"
    return package_name


@dataclass(frozen=True)
class CacheEntry:
    """A single cache entry with TTL."""
    data: Any
    stored_at: float
    ttl: float  # TTL in seconds

    def __post_init__(self):
        if self.ttl <= 0:
            raise ValueError(f"ttl must be positive, got {self.ttl}")

    def is_expired(self, now: float) -> bool:
        return now - self.stored_at > self.ttl


class CacheStore:
    """In-memory cache with one key space per namespace and TTL support.

    Reads check expiry lazily: an expired entry is dropped by the ``get``
    that notices it. ``clear_expired`` compacts every namespace on demand.
    All map access goes through a single lock.
    """

    def __init__(self, clock: Optional[Clock] = None):
        self._clock = clock or SystemClock()
        self._lock = threading.Lock()
        self._namespaces: dict[CacheNamespace, dict[str, CacheEntry]] = {
            namespace: {} for namespace in CacheNamespace
        }

    def get(self, namespace: CacheNamespace, key: str, default: Any = None) -> Any:
        """Get cached data if not expired, else ``default``.

        Pass a sentinel as ``default`` to tell a stored ``None`` from a miss.
        """
        with self._lock:
            entries = self._namespaces[namespace]
            entry = entries.get(key)
            if entry is None:
                return default

            if entry.is_expired(self._clock.now()):
                del entries[key]
                logger.debug("Expired %s:%s", namespace.value, key)
                return default

            return entry.data

    def set(self, namespace: CacheNamespace, key: str, data: Any, ttl: float) -> None:
        """Set cache data with TTL in seconds."""
        entry = CacheEntry(data=data, stored_at=self._clock.now(), ttl=ttl)
        with self._lock:
            self._namespaces[namespace][key] = entry

    def delete(self, namespace: CacheNamespace, key: str) -> bool:
        """Remove a cache entry. Returns whether one was present."""
        with self._lock:
            return self._namespaces[namespace].pop(key, None) is not None

    def delete_matching(self, namespace: CacheNamespace, predicate: Callable[[str], bool]) -> int:
        """Remove every entry whose key satisfies ``predicate``."""
        with self._lock:
            entries = self._namespaces[namespace]
            doomed = [key for key in entries if predicate(key)]
            for key in doomed:
                del entries[key]
            return len(doomed)

    def clear(self, namespace: Optional[CacheNamespace] = None) -> None:
        """Clear one namespace, or all of them."""
        with self._lock:
            if namespace is None:
                for entries in self._namespaces.values():
                    entries.clear()
            else:
                self._namespaces[namespace].clear()

    def clear_expired(self) -> int:
        """Drop stale entries from all namespaces. Returns how many were removed."""
        removed = 0
        with self._lock:
            now = self._clock.now()
            for entries in self._namespaces.values():
                stale = [key for key, entry in entries.items() if entry.is_expired(now)]
                for key in stale:
                    del entries[key]
                removed += len(stale)
        if removed:
            logger.debug("Compacted %d expired cache entries", removed)
        return removed

    def size(self, namespace: Optional[CacheNamespace] = None) -> int:
        """Number of stored entries, expired or not."""
        with self._lock:
            if namespace is None:
                return sum(len(entries) for entries in self._namespaces.values())
            return len(self._namespaces[namespace])

    def keys(self, namespace: CacheNamespace) -> list[str]:
        with self._lock:
            return list(self._namespaces[namespace])
