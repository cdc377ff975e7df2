"""Operator endpoints for inspecting and invalidating the radar cache."""

import re
from pydantic import BaseModel, Field
from fastapi import APIRouter, Depends, HTTPException

from ..services.cache import CacheNamespace
from ..store import RadarStore, get_radar_store

router = APIRouter(prefix="/cache", tags=["cache"])


class InvalidateRequest(BaseModel):
    """Invalidate keys matching a regular expression."""
    pattern: str = Field(..., description="Regular expression searched in cache keys")


@router.get("/metrics")
async def get_metrics(store: RadarStore = Depends(get_radar_store)):
    return {
        "metrics": store.get_metrics().to_dict(),
        "entries": store.cache_stats(),
    }


@router.get("/state")
async def get_state(store: RadarStore = Depends(get_radar_store)):
    """Keys per namespace, in-flight fetches and metrics."""
    return store.cache.describe_state()


@router.post("/reset-metrics")
async def reset_metrics(store: RadarStore = Depends(get_radar_store)):
    store.reset_metrics()
    return {"metrics": store.get_metrics().to_dict()}


@router.post("/clear-expired")
async def clear_expired(store: RadarStore = Depends(get_radar_store)):
    return {"removed": store.clear_expired()}


@router.post("/invalidate")
async def invalidate_by_pattern(request: InvalidateRequest, store: RadarStore = Depends(get_radar_store)):
    try:
        pattern = re.compile(request.pattern)
    except re.error as e:
        raise HTTPException(status_code=400, detail=f"Invalid pattern: {e}")
    return {"removed": store.invalidate_by_pattern(pattern)}


@router.post("/packages/{npm_name:path}/invalidate")
async def invalidate_package(npm_name: str, store: RadarStore = Depends(get_radar_store)):
    """Drop the dashboard and timeline entries of one package; changelogs stay."""
    return {"removed": store.invalidate_package(npm_name)}


@router.delete("")
async def clear_all(store: RadarStore = Depends(get_radar_store)):
    store.clear_all()
    return {"entries": store.cache_stats()}


@router.delete("/{namespace}/{key:path}")
async def invalidate(namespace: CacheNamespace, key: str, store: RadarStore = Depends(get_radar_store)):
    """Remove one key (from every namespace that holds it)."""
    return {"removed": store.invalidate(namespace, key)}
