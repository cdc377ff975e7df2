"""API Routers for Versions Radar."""

from .stats import router as stats_router
from .packages import router as packages_router
from .navigation import router as navigation_router
from .cache import router as cache_router

__all__ = [
    "stats_router",
    "packages_router",
    "navigation_router",
    "cache_router",
]
