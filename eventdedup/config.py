"""Application configuration using pydantic-settings.

All environment variables are loaded from .env file or environment.
The dedup policy itself lives in a separate properties file (see core.policy).
"""

from functools import lru_cache
from typing import Literal

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Redis configuration (dedup cache)
    redis_host: str = Field(
        default="localhost",
        validation_alias=AliasChoices("redis_host", "redis_endpoint"),
        description="Redis host (REDIS_ENDPOINT accepted for Lambda deployments)",
    )
    redis_port: int = Field(default=6379, description="Redis port")
    redis_password: str = Field(default="", description="Redis password (requirepass)")
    redis_db: int = Field(default=0, description="Redis database number")
    redis_socket_timeout: float = Field(default=2.0, description="Redis socket timeout in seconds")
    redis_connect_timeout: float = Field(default=2.0, description="Redis connect timeout in seconds")

    # Dedup policy
    dedup_properties_path: str = Field(
        default="de-dup.properties",
        description="Path to eventType=windowSeconds policy file (.properties or .yaml)",
    )
    dedup_atomic: bool = Field(
        default=False,
        description="Use a single SET NX EX instead of EXISTS followed by SET",
    )
    dedup_cache_error_fallback: Literal["proceed", "suppress"] = Field(
        default="proceed",
        description="Whether events with unknown dedup status are still processed",
    )
    dedup_batch_concurrency: int = Field(
        default=1,
        ge=1,
        description="Maximum number of batch items decided concurrently",
    )

    # Application settings
    log_level: str = Field(default="INFO", description="Logging level")

    @property
    def redis_url(self) -> str:
        """Construct Redis URL."""
        if self.redis_password:
            return f"redis://:{self.redis_password}@{self.redis_host}:{self.redis_port}/{self.redis_db}"
        return f"redis://{self.redis_host}:{self.redis_port}/{self.redis_db}"


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance.

    Using @lru_cache prevents crash on import when .env is missing (e.g. during tests).
    Settings are loaded lazily on first access.
    """
    return Settings()
