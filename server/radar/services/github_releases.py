"""Client for the GitHub Releases API."""

from typing import Optional

import httpx

from ..models import ChangelogInfo
from .errors import NetworkError, NotFoundError, UpstreamError, ValidationError

EMPTY_CHANGELOG = "No changelog available."


def _to_changelog(release: dict) -> ChangelogInfo:
    return ChangelogInfo(
        version=release["tag_name"],
        title=release.get("name") or release["tag_name"],
        content=release.get("body") or EMPTY_CHANGELOG,
        published_at=release.get("published_at") or "",
        url=release.get("html_url") or "",
    )


class GitHubReleasesClient:
    """Fetch release notes, with optional token for higher rate limits."""

    def __init__(
        self,
        api_token: Optional[str] = None,
        base_url: str = "https://api.github.com",
        timeout: float = 10.0,
        user_agent: str = "Versions-Radar/1.0",
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_token = api_token
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.user_agent = user_agent
        self._transport = transport

    def _headers(self) -> dict[str, str]:
        headers = {
            "Accept": "application/vnd.github.v3+json",
            "User-Agent": self.user_agent,
        }
        if self.api_token:
            headers["Authorization"] = f"Bearer {self.api_token}"
        return headers

    async def get_published_releases(self, owner: str, repo: str) -> list[dict]:
        """Raw release objects of a repository."""
        url = f"{self.base_url}/repos/{owner}/{repo}/releases"

        try:
            async with httpx.AsyncClient(
                headers=self._headers(), timeout=self.timeout, transport=self._transport
            ) as client:
                response = await client.get(url)
        except httpx.TransportError as e:
            raise NetworkError(f"Failed to fetch releases for {owner}/{repo}: {e}", cause=e) from e

        if response.status_code == 403:
            raise UpstreamError(
                "GitHub API rate limit exceeded. Consider adding a GitHub token.",
                status=403,
            )
        if response.status_code == 404:
            raise NotFoundError(f"Repository {owner}/{repo} not found")
        if response.status_code != 200:
            raise UpstreamError(
                f"GitHub API error: {response.status_code} {response.reason_phrase}",
                status=response.status_code,
            )

        try:
            releases = response.json()
        except ValueError as e:
            raise ValidationError(f"Malformed releases payload for {owner}/{repo}", cause=e) from e

        if not isinstance(releases, list) or not all(
            isinstance(r, dict) and "tag_name" in r for r in releases
        ):
            raise ValidationError(f"Invalid releases payload for {owner}/{repo}")
        return releases

    async def get_changelog_for_version(self, owner: str, repo: str, version: str) -> ChangelogInfo:
        """Release notes of one version, matching tags with or without a 'v' prefix."""
        releases = await self.get_published_releases(owner, repo)

        for release in releases:
            tag = release["tag_name"]
            if tag == version or tag == f"v{version}" or tag.removeprefix("v") == version:
                return _to_changelog(release)

        raise NotFoundError(f"No changelog for {owner}/{repo} {version}")
