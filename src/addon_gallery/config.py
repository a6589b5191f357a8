"""Configuration settings using pydantic-settings."""

from typing import Optional
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables and .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # GitHub catalog
    github_org: str = Field("seeq12", description="GitHub user/organisation whose repos form the gallery")
    github_api_url: str = Field("https://api.github.com", description="GitHub REST API base URL")
    github_raw_url: str = Field(
        "https://raw.githubusercontent.com",
        description="Base URL for raw repository content"
    )
    github_token: Optional[str] = Field(None, description="Optional GitHub token for higher rate limits")

    # Gemini enrichment
    gemini_api_key: Optional[str] = Field(None, description="Gemini API key")
    gemini_model: str = Field("gemini-3-flash-preview", description="Gemini model used for summaries")
    max_use_cases: int = Field(3, description="Maximum use cases kept per enrichment record")

    # Queue pacing
    pacing_seconds: float = Field(1.0, description="Delay before each enrichment request")
    provider_timeout: Optional[float] = Field(
        None, description="Timeout for a single enrichment request (None waits forever)"
    )

    # Concurrency for media lookups
    max_concurrency: int = Field(5, description="Maximum concurrent readme/detail requests")

    # Caching
    cache_dir: str = Field(".cache", description="Directory for disk cache")
    cache_ttl_days: int = Field(7, description="Cache TTL in days")

    # Logging
    log_level: str = Field("INFO", description="Logging level")

    # Timeouts
    http_timeout: float = Field(30.0, description="HTTP request timeout in seconds")

    @property
    def github_headers(self) -> dict[str, str]:
        """Get GitHub API request headers."""
        headers = {"Accept": "application/vnd.github+json"}
        if self.github_token:
            headers["Authorization"] = f"Bearer {self.github_token}"
        return headers


# Global settings instance
settings = Settings()
