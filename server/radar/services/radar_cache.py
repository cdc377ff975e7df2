"""Retrieve-or-fetch caching in front of the package registries.

``RadarCacheService`` answers from the ``CacheStore`` when it can and
otherwise runs the caller's fetch coroutine through the ``RetryExecutor``,
storing the result under the namespace TTL. Failures are counted and
propagated; they are never cached.

Concurrent misses for the same key on one event loop share a single fetch
task. The task is cancelled only when every caller waiting on it has been
cancelled, in which case nothing is stored.
"""

import asyncio
import logging
import re
import threading
from dataclasses import dataclass, replace
from functools import partial
from typing import Any, Awaitable, Callable, Optional, TypeVar, Union

from .cache import CacheNamespace, CacheStore, cache_key
from .retry import DEFAULT_BASE_DELAY, DEFAULT_MAX_RETRIES, RetryExecutor

logger = logging.getLogger(__name__)

T = TypeVar("T")

FetchFn = Callable[[], Awaitable[T]]

_MISSING = object()

DEFAULT_TTLS: dict[CacheNamespace, float] = {
    CacheNamespace.DASHBOARD: 5 * 60,
    CacheNamespace.TIMELINE: 10 * 60,
    CacheNamespace.CHANGELOG: 15 * 60,
}


@dataclass
class CacheOptions:
    """Per-call overrides for ``retrieve_or_fetch``."""
    ttl: Optional[float] = None
    force_refresh: bool = False
    max_retries: Optional[int] = None
    retry_delay: Optional[float] = None


@dataclass
class RadarCacheMetrics:
    """Accumulated request counters. Reset only on request."""
    hits: int = 0
    misses: int = 0
    errors: int = 0
    total_requests: int = 0

    @property
    def hit_rate(self) -> float:
        if self.total_requests == 0:
            return 0.0
        return self.hits / self.total_requests

    def to_dict(self) -> dict:
        return {
            "hits": self.hits,
            "misses": self.misses,
            "errors": self.errors,
            "totalRequests": self.total_requests,
            "hitRate": self.hit_rate,
        }


class _InFlight:
    """A shared fetch task and the number of callers awaiting it."""

    __slots__ = ("loop", "task", "waiters")

    def __init__(self, loop: asyncio.AbstractEventLoop, task: asyncio.Task):
        self.loop = loop
        self.task = task
        self.waiters = 0


class RadarCacheService:
    """Cache-aware fetching for dashboard, timeline and changelog data."""

    def __init__(
        self,
        store: CacheStore,
        retry: Optional[RetryExecutor] = None,
        *,
        default_ttls: Optional[dict[CacheNamespace, float]] = None,
        max_retries: int = DEFAULT_MAX_RETRIES,
        retry_delay: float = DEFAULT_BASE_DELAY,
        single_flight: bool = True,
    ):
        self._store = store
        self._retry = retry or RetryExecutor()
        self._default_ttls = {**DEFAULT_TTLS, **(default_ttls or {})}
        self._max_retries = max_retries
        self._retry_delay = retry_delay
        self._single_flight = single_flight

        self._lock = threading.Lock()
        self._metrics = RadarCacheMetrics()
        self._in_flight: dict[tuple[CacheNamespace, str], _InFlight] = {}

    @property
    def store(self) -> CacheStore:
        return self._store

    def default_ttl(self, namespace: CacheNamespace) -> float:
        return self._default_ttls[namespace]

    async def retrieve_or_fetch(
        self,
        namespace: CacheNamespace,
        key: str,
        fetch_fn: FetchFn,
        options: Optional[CacheOptions] = None,
    ) -> Any:
        """Return the cached value for ``key`` or fetch, store and return it."""
        options = options or CacheOptions()
        ttl = options.ttl if options.ttl is not None else self._default_ttls[namespace]
        max_retries = options.max_retries if options.max_retries is not None else self._max_retries
        retry_delay = options.retry_delay if options.retry_delay is not None else self._retry_delay

        with self._lock:
            self._metrics.total_requests += 1

        if not options.force_refresh:
            cached = self._store.get(namespace, key, _MISSING)
            if cached is not _MISSING:
                with self._lock:
                    self._metrics.hits += 1
                logger.debug("Cache HIT %s:%s", namespace.value, key)
                return cached

        with self._lock:
            self._metrics.misses += 1
        logger.debug("Cache MISS %s:%s", namespace.value, key)

        fetch = partial(
            self._fetch_and_store, namespace, key, fetch_fn, ttl, max_retries, retry_delay
        )
        try:
            if self._single_flight:
                return await self._join_or_start(namespace, key, fetch)
            return await fetch()
        except Exception as exc:
            with self._lock:
                self._metrics.errors += 1
            logger.warning("Fetch failed for %s:%s: %s", namespace.value, key, exc)
            raise

    async def retrieve_or_fetch_dashboard(
        self, package_name: str, fetch_fn: FetchFn, options: Optional[CacheOptions] = None
    ) -> Any:
        """Package summary for the dashboard card."""
        key = cache_key(CacheNamespace.DASHBOARD, package_name)
        return await self.retrieve_or_fetch(CacheNamespace.DASHBOARD, key, fetch_fn, options)

    async def retrieve_or_fetch_timeline(
        self, package_name: str, fetch_fn: FetchFn, options: Optional[CacheOptions] = None
    ) -> Any:
        """Full version history of a package."""
        key = cache_key(CacheNamespace.TIMELINE, package_name)
        return await self.retrieve_or_fetch(CacheNamespace.TIMELINE, key, fetch_fn, options)

    async def retrieve_or_fetch_changelog(
        self,
        package_name: str,
        version: str,
        fetch_fn: FetchFn,
        options: Optional[CacheOptions] = None,
    ) -> Any:
        """Release notes of one published version."""
        key = cache_key(CacheNamespace.CHANGELOG, package_name, version)
        return await self.retrieve_or_fetch(CacheNamespace.CHANGELOG, key, fetch_fn, options)

    async def _fetch_and_store(
        self,
        namespace: CacheNamespace,
        key: str,
        fetch_fn: FetchFn,
        ttl: float,
        max_retries: int,
        retry_delay: float,
    ) -> Any:
        value = await self._retry.execute(fetch_fn, max_retries, retry_delay)
        self._store.set(namespace, key, value, ttl)
        return value

    async def _join_or_start(
        self, namespace: CacheNamespace, key: str, fetch: Callable[[], Awaitable[Any]]
    ) -> Any:
        loop = asyncio.get_running_loop()
        flight_key = (namespace, key)

        with self._lock:
            flight = self._in_flight.get(flight_key)
            if flight is not None and flight.task.done():
                # Finished or cancelled; its done-callback has not run yet
                del self._in_flight[flight_key]
                flight = None
            if flight is not None and flight.loop is not loop:
                # Owned by another thread's loop; its task cannot be awaited here
                flight = None
                shared = False
            elif flight is None:
                task = loop.create_task(fetch())
                flight = _InFlight(loop, task)
                self._in_flight[flight_key] = flight
                task.add_done_callback(partial(self._forget, flight_key, flight))
                shared = True
            else:
                logger.debug("Joining in-flight fetch %s:%s", namespace.value, key)
                shared = True
            if shared:
                flight.waiters += 1

        if not shared:
            return await fetch()

        cancelled = False
        try:
            return await asyncio.shield(flight.task)
        except asyncio.CancelledError:
            cancelled = True
            raise
        finally:
            with self._lock:
                flight.waiters -= 1
                orphaned = cancelled and flight.waiters == 0 and not flight.task.done()
                if orphaned and self._in_flight.get(flight_key) is flight:
                    # Later callers must start a fresh fetch, not join this one
                    del self._in_flight[flight_key]
            if orphaned:
                logger.debug("Cancelling orphaned fetch %s:%s", namespace.value, key)
                flight.task.cancel()

    def _forget(self, flight_key: tuple[CacheNamespace, str], flight: _InFlight, task: asyncio.Task) -> None:
        with self._lock:
            if self._in_flight.get(flight_key) is flight:
                del self._in_flight[flight_key]
        if not task.cancelled():
            # Mark the exception as retrieved; waiters re-raise it themselves
            task.exception()

    def in_flight_count(self) -> int:
        with self._lock:
            return len(self._in_flight)

    def invalidate(self, namespace: CacheNamespace, key: str) -> int:
        """Remove ``key`` from ``namespace`` and from every other namespace.

        Keys written under an older namespace assignment are dropped too.
        """
        removed = int(self._store.delete(namespace, key))
        for other in CacheNamespace:
            if other is not namespace:
                removed += int(self._store.delete(other, key))
        logger.info("Cache INVALIDATED %s:%s (%d entries)", namespace.value, key, removed)
        return removed

    def invalidate_package(self, package_name: str) -> int:
        """Drop the dashboard and timeline entries of a package.

        Changelog bodies of published releases do not change and are kept.
        """
        removed = 0
        for namespace in (CacheNamespace.DASHBOARD, CacheNamespace.TIMELINE):
            removed += int(self._store.delete(namespace, cache_key(namespace, package_name)))
        logger.info("Cache INVALIDATED package %s (%d entries)", package_name, removed)
        return removed

    def invalidate_by_pattern(self, pattern: Union[str, re.Pattern]) -> int:
        """Remove every key, in every namespace, that the regex matches."""
        regex = re.compile(pattern) if isinstance(pattern, str) else pattern
        removed = sum(
            self._store.delete_matching(namespace, lambda key: regex.search(key) is not None)
            for namespace in CacheNamespace
        )
        logger.info("Cache INVALIDATED pattern %r (%d entries)", regex.pattern, removed)
        return removed

    def get_metrics(self) -> RadarCacheMetrics:
        with self._lock:
            return replace(self._metrics)

    def reset_metrics(self) -> None:
        with self._lock:
            self._metrics = RadarCacheMetrics()

    def describe_state(self) -> dict:
        """Snapshot of cache contents and metrics for debugging."""
        state = {
            "namespaces": {
                namespace.value: {
                    "size": self._store.size(namespace),
                    "keys": self._store.keys(namespace),
                }
                for namespace in CacheNamespace
            },
            "inFlight": self.in_flight_count(),
            "metrics": self.get_metrics().to_dict(),
        }
        logger.debug("Radar cache state: %s", state)
        return state
