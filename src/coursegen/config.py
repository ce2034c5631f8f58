"""Configuration management for coursegen."""

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings with environment variable overrides.

    All settings can be overridden via environment variables
    prefixed with COURSEGEN_ (e.g. COURSEGEN_PORT, COURSEGEN_MAX_RETRIES).
    The YouTube key is also read from the conventional YOUTUBE_API_KEY.
    """

    model_config = {"env_prefix": "COURSEGEN_", "populate_by_name": True}

    # Provider
    youtube_api_key: str | None = Field(
        default=None,
        validation_alias=AliasChoices(
            "youtube_api_key", "YOUTUBE_API_KEY", "COURSEGEN_YOUTUBE_API_KEY"
        ),
        description="YouTube Data API v3 key; without it the pipeline returns no videos",
    )

    # Server
    host: str = "127.0.0.1"
    port: int = 9093

    # Request gateway
    max_requests_per_minute: int = 50
    min_request_interval: float = 0.1  # seconds between dispatches
    max_retries: int = 3
    backoff_multiplier: float = 2.0
    request_timeout: float = 30.0  # per HTTP attempt

    # Pipeline
    search_max_results: int = 5
    segment_count: int = 5
    excerpt_length: int = 100

    @property
    def has_api_key(self) -> bool:
        """Whether a YouTube API key is configured."""
        return bool(self.youtube_api_key)


# Module-level singleton — import this throughout the app
settings = Settings()
