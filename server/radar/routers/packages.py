"""Dashboard, timeline and changelog data endpoints."""

import asyncio
from datetime import datetime, timezone
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, Query

from ..models import PackageInfo
from ..packages import TRACKED_PACKAGES, get_package_by_name
from ..services.error_handling import (
    item_error_message,
    process_error,
    retry_delay_for,
    should_auto_retry,
)
from ..services.errors import RadarError
from ..services.radar_cache import CacheOptions
from ..services.version_filtering import (
    SortOrder,
    analyze_version_history,
    detect_release_patterns,
    filter_version_history,
)
from ..store import RadarStore, get_radar_store

router = APIRouter(tags=["packages"])


def _lookup(npm_name: str) -> PackageInfo:
    package = get_package_by_name(npm_name)
    if package is None:
        raise HTTPException(status_code=404, detail=f"Package {npm_name} is not tracked")
    return package


async def _package_summary(store: RadarStore, package: PackageInfo, options: CacheOptions) -> dict:
    summary = {**package.model_dump(by_alias=True), "latestVersion": None, "error": None}
    try:
        summary["latestVersion"] = await store.cache.retrieve_or_fetch_dashboard(
            package.npm_name,
            lambda: store.npm.get_latest_version(package.npm_name),
            options,
        )
    except RadarError as e:
        processed = process_error(e, f"{package.name} package")
        summary["error"] = item_error_message(e)
        summary["isRetryable"] = processed.is_retryable
        summary["autoRetry"] = should_auto_retry(processed)
        summary["retryAfter"] = retry_delay_for(processed)
    return summary


@router.get("/packages")
async def get_dashboard(
    refresh: Optional[str] = Query(None),
    store: RadarStore = Depends(get_radar_store),
):
    """Latest version of every tracked package. Failures are reported per package."""
    options = CacheOptions(force_refresh=refresh == "1")
    packages = await asyncio.gather(
        *(_package_summary(store, package, options) for package in TRACKED_PACKAGES)
    )
    return {
        "packages": packages,
        "lastRefresh": datetime.now(timezone.utc).isoformat(),
    }


@router.get("/packages/{npm_name:path}/timeline")
async def get_timeline(
    npm_name: str,
    show_prerelease: bool = Query(False, alias="showPrerelease"),
    sort: SortOrder = Query(SortOrder.NEWEST),
    refresh: Optional[str] = Query(None),
    store: RadarStore = Depends(get_radar_store),
):
    """Version history of a package with statistics and release cadence."""
    package = _lookup(npm_name)
    versions = await store.cache.retrieve_or_fetch_timeline(
        package.npm_name,
        lambda: store.npm.get_version_history(package.npm_name),
        CacheOptions(force_refresh=refresh == "1"),
    )

    filtered = filter_version_history(versions, show_prerelease=show_prerelease, sort_order=sort)
    return {
        "package": package.model_dump(by_alias=True),
        "versions": [v.model_dump(by_alias=True) for v in filtered],
        "stats": analyze_version_history(versions),
        "patterns": detect_release_patterns(versions),
    }


@router.get("/packages/{npm_name:path}/changelog/{version}")
async def get_changelog(
    npm_name: str,
    version: str,
    refresh: Optional[str] = Query(None),
    store: RadarStore = Depends(get_radar_store),
):
    """Release notes of one version from GitHub."""
    package = _lookup(npm_name)
    changelog = await store.cache.retrieve_or_fetch_changelog(
        package.npm_name,
        version,
        lambda: store.github.get_changelog_for_version(
            package.github_owner, package.github_name, version
        ),
        CacheOptions(force_refresh=refresh == "1"),
    )
    return {
        "package": package.model_dump(by_alias=True),
        "changelog": changelog.model_dump(by_alias=True),
    }
