"""Configuration settings for the Versions Radar server."""

from pathlib import Path
from functools import lru_cache
from typing import Optional
from pydantic_settings import BaseSettings, SettingsConfigDict


def _find_env_file() -> str:
    """Find .env file - check current dir, then parent (repository root)."""
    current = Path.cwd()

    # Check current directory
    if (current / ".env").exists():
        return str(current / ".env")

    # Check parent directory (when running from server/)
    if (current.parent / ".env").exists():
        return str(current.parent / ".env")

    # Check two levels up (when running from server/radar/)
    if (current.parent.parent / ".env").exists():
        return str(current.parent.parent / ".env")

    # Default to current directory
    return ".env"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="RADAR_",
        env_file=_find_env_file(),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Server settings
    port: int = 3457
    host: str = "127.0.0.1"
    debug: bool = False
    log_level: str = "INFO"

    # Upstream registries
    npm_registry_url: str = "https://registry.npmjs.org"
    github_api_url: str = "https://api.github.com"
    github_token: Optional[str] = None
    request_timeout: float = 10.0
    user_agent: str = "Versions-Radar/1.0"

    # Cache TTLs (in seconds)
    dashboard_cache_ttl: float = 300  # 5 minutes - package info changes infrequently
    timeline_cache_ttl: float = 600  # 10 minutes - new versions published occasionally
    changelog_cache_ttl: float = 900  # 15 minutes - static once published

    # Retry policy around upstream fetches
    max_retries: int = 3
    retry_base_delay: float = 1.0  # seconds, doubled on every attempt

    # Coalesce concurrent misses for the same key into one fetch
    single_flight: bool = True


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
