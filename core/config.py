"""
Application configuration using Pydantic settings.

Usage:
    from core.config import get_settings
    settings = get_settings()
"""

from functools import lru_cache
from typing import Literal, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Unified application settings loaded from environment variables and .env file.

    DATABASE_URL wins when set; otherwise the URL is assembled from the
    DATABASE_* component variables.
    """
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # App settings
    app_name: str = "Explore Service"
    api_prefix: str = "/api"
    debug: bool = Field(default=False)
    env: str = Field(default="development", validation_alias="ENV")

    # Database
    database_url: Optional[str] = Field(default=None, validation_alias="DATABASE_URL")
    database_host: str = Field(default="localhost", validation_alias="DATABASE_HOST")
    database_port: int = Field(default=5432, validation_alias="DATABASE_PORT")
    database_user: str = Field(default="postgres", validation_alias="DATABASE_USER")
    database_password: str = Field(default="password", validation_alias="DATABASE_PASSWORD")
    database_dbname: str = Field(default="explore", validation_alias="DATABASE_DBNAME")
    database_sslmode: str = Field(default="disable", validation_alias="DATABASE_SSLMODE")
    db_pool_size: int = Field(default=25, validation_alias="DB_POOL_SIZE")
    db_max_overflow: int = Field(default=10, validation_alias="DB_MAX_OVERFLOW")
    db_pool_pre_ping: bool = Field(default=True, validation_alias="DB_POOL_PRE_PING")

    # Redis
    redis_host: str = Field(default="localhost", validation_alias="REDIS_HOST")
    redis_port: int = Field(default=6379, validation_alias="REDIS_PORT")
    redis_db: int = Field(default=0, validation_alias="REDIS_DB")
    redis_password: Optional[str] = Field(default=None, validation_alias="REDIS_PASSWORD")
    redis_max_connections: int = Field(default=50, validation_alias="REDIS_MAX_CONNECTIONS")
    redis_socket_timeout: float = Field(default=5.0, validation_alias="REDIS_SOCKET_TIMEOUT")

    # Logging
    log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")
    log_format: Literal["json", "console"] = Field(default="json", validation_alias="LOG_FORMAT")

    # Pagination
    default_page_size: int = Field(default=20, validation_alias="DEFAULT_PAGE_SIZE")
    max_page_size: int = Field(default=100, validation_alias="MAX_PAGE_SIZE")

    # Cache TTLs (seconds)
    likers_cache_ttl: int = Field(default=30, validation_alias="LIKERS_CACHE_TTL")
    new_likers_cache_ttl: int = Field(default=20, validation_alias="NEW_LIKERS_CACHE_TTL")
    likers_count_cache_ttl: int = Field(default=15, validation_alias="LIKERS_COUNT_CACHE_TTL")

    # Detached cache writes
    cache_write_workers: int = Field(default=4, validation_alias="CACHE_WRITE_WORKERS")

    @field_validator("default_page_size", "max_page_size", "cache_write_workers")
    @classmethod
    def validate_positive(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("must be a positive integer")
        return v

    @property
    def sqlalchemy_url(self) -> str:
        """Database URL, assembled from components when DATABASE_URL is unset."""
        if self.database_url:
            return self.database_url
        return (
            f"postgresql+psycopg2://{self.database_user}:{self.database_password}"
            f"@{self.database_host}:{self.database_port}/{self.database_dbname}"
            f"?sslmode={self.database_sslmode}"
        )


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings."""
    return Settings()


__all__ = ["Settings", "get_settings"]
