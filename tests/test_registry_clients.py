"""Tests for the NPM registry and GitHub releases clients."""

import httpx
import pytest

from radar.services.errors import NetworkError, NotFoundError, UpstreamError, ValidationError
from radar.services.github_releases import EMPTY_CHANGELOG, GitHubReleasesClient
from radar.services.npm_registry import NpmRegistryClient


def _client_for(handler) -> NpmRegistryClient:
    return NpmRegistryClient(base_url="https://registry.test", transport=httpx.MockTransport(handler))


def _github_for(handler, token=None) -> GitHubReleasesClient:
    return GitHubReleasesClient(
        api_token=token, base_url="https://github.test", transport=httpx.MockTransport(handler)
    )


class TestNpmRegistryClient:
    @pytest.mark.asyncio
    async def test_latest_version(self, npm_client: NpmRegistryClient) -> None:
        assert await npm_client.get_latest_version("react") == "18.2.0"

    @pytest.mark.asyncio
    async def test_version_history_newest_first(self, npm_client: NpmRegistryClient) -> None:
        versions = await npm_client.get_version_history("react")

        assert [v.version for v in versions] == ["18.2.0", "18.0.0", "18.0.0-rc.0", "17.0.2"]
        assert versions[0].is_latest
        assert not any(v.is_latest for v in versions[1:])
        assert [v.is_prerelease for v in versions] == [False, False, True, False]

    @pytest.mark.asyncio
    async def test_scoped_package_name_is_escaped(self) -> None:
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request.url.raw_path)
            return httpx.Response(200, json={"dist-tags": {"latest": "17.3.0"}, "time": {}})

        assert await _client_for(handler).get_latest_version("@angular/core") == "17.3.0"
        assert seen == [b"/@angular%2Fcore"]

    @pytest.mark.asyncio
    async def test_not_found(self, npm_client: NpmRegistryClient) -> None:
        with pytest.raises(NotFoundError):
            await npm_client.get_package_info("no-such-package")

    @pytest.mark.asyncio
    async def test_server_error_carries_status(self, npm_client: NpmRegistryClient) -> None:
        with pytest.raises(UpstreamError) as exc_info:
            await npm_client.get_package_info("typescript")
        assert exc_info.value.status == 500

    @pytest.mark.asyncio
    async def test_transport_failure_becomes_network_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(NetworkError) as exc_info:
            await _client_for(handler).get_package_info("react")
        assert isinstance(exc_info.value.cause, httpx.ConnectError)

    @pytest.mark.asyncio
    async def test_undecodable_body(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, content=b"<html>oops</html>")

        with pytest.raises(ValidationError):
            await _client_for(handler).get_package_info("react")

    @pytest.mark.asyncio
    async def test_missing_time_map(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"dist-tags": {"latest": "1.0.0"}})

        with pytest.raises(ValidationError, match="time"):
            await _client_for(handler).get_version_history("react")


class TestGitHubReleasesClient:
    @pytest.mark.asyncio
    async def test_changelog_matches_v_prefixed_tag(self, github_client: GitHubReleasesClient) -> None:
        changelog = await github_client.get_changelog_for_version("facebook", "react", "18.2.0")

        assert changelog.version == "v18.2.0"
        assert changelog.title == "18.2.0 (June 14, 2022)"
        assert "component stack" in changelog.content
        assert changelog.url.endswith("/v18.2.0")

    @pytest.mark.asyncio
    async def test_empty_release_fields_get_defaults(self, github_client: GitHubReleasesClient) -> None:
        changelog = await github_client.get_changelog_for_version("facebook", "react", "v18.0.0")

        assert changelog.title == "v18.0.0"
        assert changelog.content == EMPTY_CHANGELOG

    @pytest.mark.asyncio
    async def test_missing_version(self, github_client: GitHubReleasesClient) -> None:
        with pytest.raises(NotFoundError):
            await github_client.get_changelog_for_version("facebook", "react", "0.1.0")

    @pytest.mark.asyncio
    async def test_rate_limit(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(403, json={"message": "API rate limit exceeded"})

        with pytest.raises(UpstreamError, match="rate limit") as exc_info:
            await _github_for(handler).get_published_releases("facebook", "react")
        assert exc_info.value.status == 403

    @pytest.mark.asyncio
    async def test_unknown_repository(self, github_client: GitHubReleasesClient) -> None:
        with pytest.raises(NotFoundError):
            await github_client.get_published_releases("nobody", "nothing")

    @pytest.mark.asyncio
    async def test_token_sent_as_bearer(self) -> None:
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request.headers.get("Authorization"))
            return httpx.Response(200, json=[])

        await _github_for(handler, token="ghp_test").get_published_releases("facebook", "react")
        assert seen == ["Bearer ghp_test"]

    @pytest.mark.asyncio
    async def test_malformed_payload(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"message": "not a list"})

        with pytest.raises(ValidationError):
            await _github_for(handler).get_published_releases("facebook", "react")
