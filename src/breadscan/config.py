"""Application configuration using Pydantic Settings."""

from functools import lru_cache
from pathlib import Path

import platformdirs
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from breadscan.core.exceptions import MissingConfigurationError


class BreadScanSettings(BaseSettings):
    """Application configuration from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        env_prefix="BREADSCAN_",
    )

    # Cache
    cache_dir: Path = Field(
        default_factory=lambda: Path(platformdirs.user_cache_dir("breadscan")),
        description="Directory holding the persistent lookup cache",
    )

    # HTTP
    user_agent: str = Field(
        default="breadscan/0.1.0",
        description="User-Agent sent to registries and project pages",
    )
    http_timeout: float = Field(
        default=30.0,
        gt=0,
        description="Transport timeout in seconds for a stalled connection",
    )

    # Rate limiting, applied per destination host
    requests_per_second: float = Field(
        default=5.0,
        gt=0,
        description="Sustained requests per second per host",
    )
    max_jitter_ms: int = Field(
        default=500,
        ge=0,
        description="Upper bound of random delay added to each rate-limited wait",
    )

    # Weights
    default_weight: int = Field(
        default=100,
        ge=0,
        description="Weight given to newly discovered accounts and projects",
    )
    manifest_filename: str = Field(
        default=".bread.yml",
        description="Name of the weighted configuration file in a project",
    )

    # Remote donation account
    account_url: str | None = Field(
        default=None,
        description="Endpoint of the remote donation account (GET and POST)",
    )
    account_token: str | None = Field(
        default=None,
        description="Bearer token for the remote donation account",
    )

    # App settings
    log_level: str = Field(
        default="INFO",
        description="Logging level",
    )

    def require_account(self) -> tuple[str, str]:
        """Return the remote account endpoint and token, or raise if either is missing."""
        missing = []
        if not self.account_url:
            missing.append("BREADSCAN_ACCOUNT_URL")
        if not self.account_token:
            missing.append("BREADSCAN_ACCOUNT_TOKEN")
        if missing:
            raise MissingConfigurationError(f"Missing configuration for: {', '.join(missing)}")
        return self.account_url, self.account_token


@lru_cache
def get_settings() -> BreadScanSettings:
    """Get cached settings instance."""
    return BreadScanSettings()
