"""Application settings via Pydantic Settings."""

from functools import lru_cache

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # App
    app_name: str = "Top Movies API"
    app_version: str = "0.1.0"
    debug: bool = False

    # Server
    host: str = "0.0.0.0"
    port: int = 8080

    # Remote feed (tv-api.com Top250Movies)
    feed_base_url: str = "https://tv-api.com/en/API/Top250Movies"
    feed_api_key: str = Field(
        default="",
        validation_alias=AliasChoices("TV_API_KEY", "FEED_API_KEY"),
    )
    feed_timeout_seconds: float = Field(default=15.0, gt=0)
    image_timeout_seconds: float = Field(default=10.0, gt=0)

    # Local store
    database_url: str = "sqlite+aiosqlite:///./top_movies.db"

    @property
    def async_database_url(self) -> str:
        """Get database URL with an async driver.

        Hosted Postgres usually provides postgresql:// but we need postgresql+asyncpg://.
        """
        url = self.database_url
        if url.startswith("postgresql://"):
            url = url.replace("postgresql://", "postgresql+asyncpg://", 1)
        elif url.startswith("sqlite:///"):
            url = url.replace("sqlite:///", "sqlite+aiosqlite:///", 1)
        return url

    @property
    def feed_url(self) -> str:
        """Full feed URL; the API key is a path segment on tv-api.com."""
        base = self.feed_base_url.rstrip("/")
        if not self.feed_api_key:
            return base
        return f"{base}/{self.feed_api_key}"

    # Fast cache (Redis). Empty URL disables the cache.
    redis_url: str = "redis://localhost:6379/0"
    cache_key: str = "movies:top250"
    cache_ttl_seconds: int = Field(default=604800, ge=1)  # 7 days

    # Session
    auto_refresh_on_startup: bool = Field(
        default=True,
        description="Activate the sync engine (cache -> store -> feed) on app startup",
    )


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
