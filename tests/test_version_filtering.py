"""Tests for version history filtering and release cadence detection."""

from radar.models import VersionInfo
from radar.services.version_filtering import (
    SortOrder,
    analyze_version_history,
    detect_release_patterns,
    filter_version_history,
)


def v(version: str, published_at: str, latest: bool = False) -> VersionInfo:
    return VersionInfo(
        version=version,
        published_at=published_at,
        is_latest=latest,
        is_prerelease="-" in version,
    )


HISTORY = [
    v("1.0.0", "2024-01-01T00:00:00.000Z"),
    v("1.1.0-beta.1", "2024-01-10T00:00:00.000Z"),
    v("1.1.0", "2024-01-21T00:00:00.000Z", latest=True),
]


class TestFilterVersionHistory:
    def test_hides_prereleases_by_default(self) -> None:
        result = filter_version_history(HISTORY)
        assert [x.version for x in result] == ["1.1.0", "1.0.0"]

    def test_oldest_first_with_prereleases(self) -> None:
        result = filter_version_history(HISTORY, show_prerelease=True, sort_order=SortOrder.OLDEST)
        assert [x.version for x in result] == ["1.0.0", "1.1.0-beta.1", "1.1.0"]

    def test_does_not_mutate_input(self) -> None:
        history = list(HISTORY)
        filter_version_history(history, show_prerelease=True, sort_order=SortOrder.NEWEST)
        assert history == HISTORY


class TestAnalyzeVersionHistory:
    def test_counts(self) -> None:
        assert analyze_version_history(HISTORY) == {
            "total": 3,
            "stable": 2,
            "prerelease": 1,
            "latest": "1.1.0",
        }

    def test_unknown_latest(self) -> None:
        assert analyze_version_history([])["latest"] == "Unknown"


class TestDetectReleasePatterns:
    def test_insufficient_data(self) -> None:
        assert detect_release_patterns(HISTORY[:1]) == {"frequency": "insufficient-data"}

    def test_irregular_when_only_prereleases(self) -> None:
        history = [v("2.0.0-rc.1", "2024-01-01T00:00:00Z"), v("2.0.0-rc.2", "2024-02-01T00:00:00Z")]
        assert detect_release_patterns(history) == {"frequency": "irregular"}

    def test_rapid(self) -> None:
        assert detect_release_patterns(HISTORY) == {"frequency": "rapid", "averageDays": 20}

    def test_slow(self) -> None:
        history = [v("1.0.0", "2020-01-01T00:00:00Z"), v("2.0.0", "2021-01-01T00:00:00Z")]
        assert detect_release_patterns(history) == {"frequency": "slow", "averageDays": 366}

    def test_quarterly(self) -> None:
        history = [v("1.0.0", "2023-01-01T00:00:00Z"), v("1.1.0", "2023-05-01T00:00:00Z")]
        assert detect_release_patterns(history)["frequency"] == "quarterly"
