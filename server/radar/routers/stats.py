"""Health check endpoint."""

import platform
import sys
from fastapi import APIRouter, Depends

from ..packages import TRACKED_PACKAGES
from ..store import RadarStore, get_radar_store

router = APIRouter(tags=["stats"])


@router.get("/health")
async def health_check(store: RadarStore = Depends(get_radar_store)):
    """Health check and status endpoint."""
    return {
        "status": "ok",
        "version": "1.0.0",
        "trackedPackages": len(TRACKED_PACKAGES),
        "cacheEntries": store.cache_stats()["totalEntries"],
        "currentView": store.navigation.current_view.value,
        "platform": platform.system().lower(),
        "pythonVersion": sys.version,
    }
