"""Navigation state endpoints driving the radar screens."""

from pydantic import BaseModel, Field
from fastapi import APIRouter, Depends, HTTPException

from ..models import PackageInfo, VersionInfo
from ..packages import get_package_by_name
from ..services.navigation import InvalidTransitionError
from ..store import RadarStore, get_radar_store

router = APIRouter(prefix="/navigation", tags=["navigation"])


class TimelineRequest(BaseModel):
    """Open the timeline of a tracked package."""
    npm_name: str = Field(..., alias="npmName")


class ChangelogRequest(BaseModel):
    """Open the changelog of a version."""
    npm_name: str = Field(..., alias="npmName")
    version: VersionInfo


def _tracked(npm_name: str) -> PackageInfo:
    package = get_package_by_name(npm_name)
    if package is None:
        raise HTTPException(status_code=404, detail=f"Package {npm_name} is not tracked")
    return package


@router.get("")
async def get_navigation(store: RadarStore = Depends(get_radar_store)):
    return store.navigation.state.to_dict()


@router.post("/dashboard")
async def to_dashboard(store: RadarStore = Depends(get_radar_store)):
    return store.navigation.to_dashboard().to_dict()


@router.post("/timeline")
async def to_timeline(request: TimelineRequest, store: RadarStore = Depends(get_radar_store)):
    try:
        state = store.navigation.to_timeline(_tracked(request.npm_name))
    except InvalidTransitionError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return state.to_dict()


@router.post("/changelog")
async def to_changelog(request: ChangelogRequest, store: RadarStore = Depends(get_radar_store)):
    try:
        state = store.navigation.to_changelog(_tracked(request.npm_name), request.version)
    except InvalidTransitionError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return state.to_dict()


@router.post("/back")
async def back(store: RadarStore = Depends(get_radar_store)):
    """Return to the previous screen."""
    return store.navigation.back().to_dict()


@router.post("/reset")
async def reset(store: RadarStore = Depends(get_radar_store)):
    """Drop the history and selections and start over at the dashboard."""
    store.reset_navigation()
    return store.navigation.state.to_dict()
