"""
Configuration using Pydantic settings.

Usage:
    from radcache.config import get_settings
    settings = get_settings()

Per-instance cache options (the key prefix) live in CacheOptions so a
process can run several accessors with different prefixes over one client.
"""

from functools import lru_cache
from typing import Optional
from urllib.parse import quote

from pydantic import BaseModel, ConfigDict, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_PREFIX = "rad_"


class CacheOptions(BaseModel):
    """
    Options for a single cache accessor.

    Frozen: the prefix of an accessor never changes after construction.
    """
    model_config = ConfigDict(frozen=True)

    prefix: str = DEFAULT_PREFIX


class Settings(BaseSettings):
    """
    Settings loaded from environment variables and .env file.

    Only used by RadCache.from_settings(); accessors built directly from a
    client never read the environment.
    """
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    debug: bool = Field(default=False, validation_alias="DEBUG")
    log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")

    # Redis
    redis_host: str = Field(default="localhost", validation_alias="REDIS_HOST")
    redis_port: int = Field(default=6379, validation_alias="REDIS_PORT")
    redis_db: int = Field(default=0, validation_alias="REDIS_DB")
    redis_password: Optional[str] = Field(default=None, validation_alias="REDIS_PASSWORD")
    redis_socket_timeout: float = Field(default=5.0, validation_alias="REDIS_SOCKET_TIMEOUT")
    redis_max_connections: int = Field(default=50, validation_alias="REDIS_MAX_CONNECTIONS")

    # Cache
    cache_prefix: str = Field(default=DEFAULT_PREFIX, validation_alias="RADCACHE_PREFIX")
    # Route accessor errors to a structlog logger instead of dropping them
    log_errors: bool = Field(default=True, validation_alias="RADCACHE_LOG_ERRORS")

    @property
    def redis_url(self) -> str:
        """Construct Redis URL from components."""
        auth = f":{quote(self.redis_password, safe='')}@" if self.redis_password else ""
        return f"redis://{auth}{self.redis_host}:{self.redis_port}/{self.redis_db}"

    @property
    def cache_options(self) -> CacheOptions:
        return CacheOptions(prefix=self.cache_prefix)


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


__all__ = ["CacheOptions", "DEFAULT_PREFIX", "Settings", "get_settings"]
