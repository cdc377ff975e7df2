"""
Pytest configuration and shared fixtures for Versions Radar tests.

Time and sleeping are faked: the cache reads a manual clock and the retry
executor records requested delays instead of waiting.
"""

from __future__ import annotations

import httpx
import pytest

from radar.models import PackageInfo, VersionInfo
from radar.services.cache import CacheStore
from radar.services.github_releases import GitHubReleasesClient
from radar.services.npm_registry import NpmRegistryClient
from radar.services.radar_cache import RadarCacheService
from radar.services.retry import RetryExecutor
from radar.store import RadarStore


class ManualClock:
    """Clock that only moves when told to."""

    def __init__(self, start: float = 0.0) -> None:
        self.current = start

    def now(self) -> float:
        return self.current

    def advance(self, seconds: float) -> None:
        self.current += seconds


class RecordingSleep:
    """Async sleep replacement that records delays and returns immediately."""

    def __init__(self) -> None:
        self.delays: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


REACT_DOCUMENT = {
    "name": "react",
    "dist-tags": {"latest": "18.2.0", "next": "18.3.0-canary-1"},
    "time": {
        "created": "2011-10-26T17:46:21.942Z",
        "modified": "2024-04-26T16:42:56.018Z",
        "17.0.2": "2021-03-22T21:56:19.536Z",
        "18.0.0-rc.0": "2022-02-15T18:40:02.123Z",
        "18.0.0": "2022-03-29T15:59:52.214Z",
        "18.2.0": "2022-06-14T19:46:38.369Z",
        "experimental-abc": "2022-07-01T00:00:00.000Z",
    },
}

REACT_RELEASES = [
    {
        "id": 2,
        "tag_name": "v18.2.0",
        "name": "18.2.0 (June 14, 2022)",
        "body": "### React DOM\n* Provide a component stack as a second argument.",
        "published_at": "2022-06-14T19:50:00Z",
        "html_url": "https://github.com/facebook/react/releases/tag/v18.2.0",
        "prerelease": False,
        "draft": False,
    },
    {
        "id": 1,
        "tag_name": "v18.0.0",
        "name": "",
        "body": "",
        "published_at": "2022-03-29T16:00:00Z",
        "html_url": "https://github.com/facebook/react/releases/tag/v18.0.0",
        "prerelease": False,
        "draft": False,
    },
    {
        "id": 3,
        "tag_name": "v19.0.0",
        "name": "19 draft",
        "body": "wip",
        "published_at": "2024-12-05T00:00:00Z",
        "html_url": "https://github.com/facebook/react/releases/tag/v19.0.0",
        "prerelease": False,
        "draft": True,
    },
]


@pytest.fixture
def clock() -> ManualClock:
    return ManualClock()


@pytest.fixture
def sleep() -> RecordingSleep:
    return RecordingSleep()


@pytest.fixture
def cache_store(clock: ManualClock) -> CacheStore:
    return CacheStore(clock)


@pytest.fixture
def retry(sleep: RecordingSleep) -> RetryExecutor:
    return RetryExecutor(sleep=sleep)


@pytest.fixture
def cache_service(cache_store: CacheStore, retry: RetryExecutor) -> RadarCacheService:
    return RadarCacheService(cache_store, retry)


@pytest.fixture
def react() -> PackageInfo:
    return PackageInfo(
        name="React",
        npm_name="react",
        github_repo="facebook/react",
        icon="react",
    )


@pytest.fixture
def react_version() -> VersionInfo:
    return VersionInfo(version="18.2.0", published_at="2022-06-14T19:46:38.369Z", is_latest=True)


@pytest.fixture
def registry_calls() -> list[str]:
    """Paths requested from the fake registries, in order."""
    return []


@pytest.fixture
def registry_transport(registry_calls: list[str]) -> httpx.MockTransport:
    """Fake NPM registry and GitHub API.

    ``react`` and ``facebook/react`` answer normally, ``typescript`` fails
    with 500, everything else is a 404.
    """

    def handler(request: httpx.Request) -> httpx.Response:
        registry_calls.append(request.url.path)
        if request.url.host == "registry.test":
            if request.url.path == "/react":
                return httpx.Response(200, json=REACT_DOCUMENT)
            if request.url.path == "/typescript":
                return httpx.Response(500)
        if request.url.host == "github.test":
            if request.url.path == "/repos/facebook/react/releases":
                return httpx.Response(200, json=REACT_RELEASES)
        return httpx.Response(404, json={"error": "Not found"})

    return httpx.MockTransport(handler)


@pytest.fixture
def npm_client(registry_transport: httpx.MockTransport) -> NpmRegistryClient:
    return NpmRegistryClient(base_url="https://registry.test", transport=registry_transport)


@pytest.fixture
def github_client(registry_transport: httpx.MockTransport) -> GitHubReleasesClient:
    return GitHubReleasesClient(base_url="https://github.test", transport=registry_transport)


@pytest.fixture
def radar_store(
    cache_service: RadarCacheService,
    npm_client: NpmRegistryClient,
    github_client: GitHubReleasesClient,
) -> RadarStore:
    return RadarStore(cache_service, npm=npm_client, github=github_client)
