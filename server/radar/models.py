"""Domain models shared by the registry clients, the store and the API."""

from typing import Optional
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class RadarModel(BaseModel):
    """Immutable model serialized with camelCase keys."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )


class PackageInfo(RadarModel):
    """A package tracked on the dashboard."""
    name: str
    npm_name: str
    github_repo: str
    description: Optional[str] = None
    icon: str = ""

    @property
    def github_owner(self) -> str:
        return self.github_repo.split("/", 1)[0]

    @property
    def github_name(self) -> str:
        return self.github_repo.split("/", 1)[1]


class VersionInfo(RadarModel):
    """One published version of a package."""
    version: str
    published_at: str
    is_latest: bool = False
    is_prerelease: bool = False


class ChangelogInfo(RadarModel):
    """Release notes attached to a version."""
    version: str
    title: str
    content: str
    published_at: str
    url: str
