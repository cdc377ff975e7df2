"""Client for the NPM registry."""

import re
import urllib.parse
from typing import Optional

import httpx

from ..models import VersionInfo
from .errors import NetworkError, NotFoundError, UpstreamError, ValidationError

SEMVER_PREFIX = re.compile(r"^\d+\.\d+\.\d+")


class NpmRegistryClient:
    """Fetch package documents and publication history from the NPM registry."""

    def __init__(
        self,
        base_url: str = "https://registry.npmjs.org",
        timeout: float = 10.0,
        user_agent: str = "Versions-Radar/1.0",
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.user_agent = user_agent
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            headers={"Accept": "application/json", "User-Agent": self.user_agent},
            timeout=self.timeout,
            transport=self._transport,
        )

    async def get_package_info(self, package_name: str) -> dict:
        """Fetch the full registry document of a package (e.g. 'react', '@angular/core')."""
        url = f"{self.base_url}/{urllib.parse.quote(package_name, safe='@')}"

        try:
            async with self._client() as client:
                response = await client.get(url)
        except httpx.TransportError as e:
            raise NetworkError(f"Failed to fetch package info for {package_name}: {e}", cause=e) from e

        if response.status_code == 404:
            raise NotFoundError(f"Package {package_name} not found on the NPM registry")
        if response.status_code != 200:
            raise UpstreamError(
                f"NPM API error: {response.status_code} {response.reason_phrase}",
                status=response.status_code,
            )

        try:
            data = response.json()
        except ValueError as e:
            raise ValidationError(f"Malformed registry document for {package_name}", cause=e) from e

        if not isinstance(data, dict) or not isinstance(data.get("dist-tags"), dict):
            raise ValidationError(f"Invalid registry document for {package_name}: missing dist-tags")
        return data

    async def get_latest_version(self, package_name: str) -> str:
        """Latest stable version string, e.g. '18.3.1'."""
        info = await self.get_package_info(package_name)
        latest = info["dist-tags"].get("latest")
        if not latest:
            raise ValidationError(f"Invalid registry document for {package_name}: no latest tag")
        return latest

    async def get_version_history(self, package_name: str) -> list[VersionInfo]:
        """All published versions, newest first."""
        info = await self.get_package_info(package_name)
        times = info.get("time")
        if not isinstance(times, dict):
            raise ValidationError(f"Invalid registry document for {package_name}: missing time map")

        latest = info["dist-tags"].get("latest")
        versions = []
        for version, published_at in times.items():
            if version in ("created", "modified"):
                continue
            if not SEMVER_PREFIX.match(version):
                continue
            versions.append(VersionInfo(
                version=version,
                published_at=published_at,
                is_latest=version == latest,
                is_prerelease="-" in version,
            ))

        # ISO-8601 timestamps from the registry sort lexicographically
        versions.sort(key=lambda v: v.published_at, reverse=True)
        return versions
