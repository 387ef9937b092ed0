"""
Configuration settings for the Lightsurvey application.
"""

from pathlib import Path
from typing import Literal, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings with environment variable support.

    Attributes:
        kmz_fetch_timeout_seconds: Timeout for fetching remote KMZ files
        parse_cache_ttl_seconds: Lifetime of cached parse results (0 disables the cache)
        parse_cache_max_entries: Maximum number of cached parse results
        recordings_dir: Directory for storing route recordings
        route_recordings_url: Endpoint the position tracker submits routes to
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        env_prefix="LIGHTSURVEY_",
    )

    # KMZ fetch settings
    kmz_fetch_timeout_seconds: float = 20.0

    # Parse cache settings
    parse_cache_ttl_seconds: int = 0
    parse_cache_max_entries: int = 256

    # Route recording settings
    recordings_dir: Path = Path("./data/route_recordings")
    route_recordings_url: Optional[str] = None

    # API settings
    api_v1_prefix: str = "/api/v1"
    port: int = 8000

    # CORS settings
    cors_origins: str = "http://localhost:3000,http://localhost:5173"

    # Environment
    environment: Literal["development", "staging", "production"] = "development"

    @property
    def cors_origins_list(self) -> list[str]:
        """Get CORS origins as a list."""
        return [origin.strip() for origin in self.cors_origins.split(",")]

    @property
    def parse_cache_enabled(self) -> bool:
        """Whether parse results should be cached."""
        return self.parse_cache_ttl_seconds > 0

    def model_post_init(self, __context: object) -> None:
        """Create recordings directory if it doesn't exist."""
        self.recordings_dir.mkdir(parents=True, exist_ok=True)


# Global settings instance
settings = Settings()
