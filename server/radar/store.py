"""Composition root holding the cache service and the navigation machine."""

import logging
import re
from typing import Optional, Union
from fastapi import Request

from .config import Settings
from .services.cache import CacheNamespace, CacheStore
from .services.clock import Clock, SystemClock
from .services.github_releases import GitHubReleasesClient
from .services.navigation import NavigationMachine
from .services.npm_registry import NpmRegistryClient
from .services.radar_cache import RadarCacheMetrics, RadarCacheService
from .services.retry import RetryExecutor

logger = logging.getLogger(__name__)


class RadarStore:
    """All per-session state of the radar: cached registry data and navigation.

    One instance is created by the application factory and handed to every
    collaborator; nothing here is a module-level singleton.
    """

    def __init__(
        self,
        cache: RadarCacheService,
        navigation: Optional[NavigationMachine] = None,
        npm: Optional[NpmRegistryClient] = None,
        github: Optional[GitHubReleasesClient] = None,
    ):
        self.cache = cache
        self.navigation = navigation or NavigationMachine()
        self.npm = npm or NpmRegistryClient()
        self.github = github or GitHubReleasesClient()

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        clock: Optional[Clock] = None,
        retry: Optional[RetryExecutor] = None,
    ) -> "RadarStore":
        cache = RadarCacheService(
            CacheStore(clock or SystemClock()),
            retry or RetryExecutor(),
            default_ttls={
                CacheNamespace.DASHBOARD: settings.dashboard_cache_ttl,
                CacheNamespace.TIMELINE: settings.timeline_cache_ttl,
                CacheNamespace.CHANGELOG: settings.changelog_cache_ttl,
            },
            max_retries=settings.max_retries,
            retry_delay=settings.retry_base_delay,
            single_flight=settings.single_flight,
        )
        npm = NpmRegistryClient(
            base_url=settings.npm_registry_url,
            timeout=settings.request_timeout,
            user_agent=settings.user_agent,
        )
        github = GitHubReleasesClient(
            api_token=settings.github_token,
            base_url=settings.github_api_url,
            timeout=settings.request_timeout,
            user_agent=settings.user_agent,
        )
        return cls(cache, NavigationMachine(), npm, github)

    def clear_all(self) -> None:
        self.cache.store.clear()
        logger.info("Radar cache cleared")

    def clear_expired(self) -> int:
        return self.cache.store.clear_expired()

    def invalidate(self, namespace: CacheNamespace, key: str) -> int:
        return self.cache.invalidate(namespace, key)

    def invalidate_package(self, npm_name: str) -> int:
        return self.cache.invalidate_package(npm_name)

    def reset_navigation(self) -> None:
        self.navigation.reset()
        logger.info("Navigation reset to dashboard")

    def invalidate_by_pattern(self, pattern: Union[str, re.Pattern]) -> int:
        return self.cache.invalidate_by_pattern(pattern)

    def get_metrics(self) -> RadarCacheMetrics:
        return self.cache.get_metrics()

    def reset_metrics(self) -> None:
        self.cache.reset_metrics()

    def cache_stats(self) -> dict:
        """Entry counts per namespace."""
        store = self.cache.store
        return {
            "dashboardCacheSize": store.size(CacheNamespace.DASHBOARD),
            "timelineCacheSize": store.size(CacheNamespace.TIMELINE),
            "changelogCacheSize": store.size(CacheNamespace.CHANGELOG),
            "totalEntries": store.size(),
        }


def get_radar_store(request: Request) -> RadarStore:
    """FastAPI dependency returning the store created by the app factory."""
    return request.app.state.radar_store
