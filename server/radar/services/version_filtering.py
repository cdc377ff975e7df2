"""Filtering, sorting and statistics over a version history."""

from datetime import datetime
from enum import Enum
from typing import Optional

from ..models import VersionInfo


class SortOrder(str, Enum):
    NEWEST = "newest"
    OLDEST = "oldest"


def _published(version: VersionInfo) -> datetime:
    return datetime.fromisoformat(version.published_at.replace("Z", "+00:00"))


def filter_version_history(
    versions: list[VersionInfo],
    show_prerelease: bool = False,
    sort_order: SortOrder = SortOrder.NEWEST,
) -> list[VersionInfo]:
    """Drop prereleases unless asked for, then sort chronologically."""
    filtered = versions if show_prerelease else [v for v in versions if not v.is_prerelease]
    return sorted(filtered, key=_published, reverse=sort_order is SortOrder.NEWEST)


def analyze_version_history(versions: list[VersionInfo]) -> dict:
    """Counts of stable and prerelease versions plus the latest tag."""
    total = len(versions)
    stable = sum(1 for v in versions if not v.is_prerelease)
    latest: Optional[VersionInfo] = next((v for v in versions if v.is_latest), None)

    return {
        "total": total,
        "stable": stable,
        "prerelease": total - stable,
        "latest": latest.version if latest else "Unknown",
    }


def detect_release_patterns(versions: list[VersionInfo]) -> dict:
    """Classify the release cadence from the average gap between stable releases."""
    if len(versions) < 2:
        return {"frequency": "insufficient-data"}

    stable = sorted((v for v in versions if not v.is_prerelease), key=_published)
    if len(stable) < 2:
        return {"frequency": "irregular"}

    gaps = [
        (_published(current) - _published(previous)).total_seconds()
        for previous, current in zip(stable, stable[1:])
    ]
    days = round(sum(gaps) / len(gaps) / 86400)

    if days < 30:
        frequency = "rapid"
    elif days < 90:
        frequency = "regular"
    elif days < 180:
        frequency = "quarterly"
    else:
        frequency = "slow"
    return {"frequency": frequency, "averageDays": days}
