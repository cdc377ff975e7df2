"""Services for Versions Radar."""

from .cache import CacheNamespace, CacheStore
from .navigation import NavigationMachine, NavigationView
from .radar_cache import CacheOptions, RadarCacheMetrics, RadarCacheService
from .retry import RetryExecutor

__all__ = [
    "CacheNamespace",
    "CacheStore",
    "NavigationMachine",
    "NavigationView",
    "CacheOptions",
    "RadarCacheMetrics",
    "RadarCacheService",
    "RetryExecutor",
]
