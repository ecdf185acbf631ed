"""Application configuration using pydantic-settings."""
from functools import lru_cache
from typing import Annotated, Literal
from urllib.parse import quote

from pydantic import field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


def _split_comma_separated(value: str | list[str]) -> list[str]:
    """Split a comma-separated string, dropping whitespace and empty entries."""
    if isinstance(value, str):
        return [item.strip() for item in value.split(",") if item.strip()]
    return value


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Read once at startup; instances are frozen and handed to the components
    that need them (cache default TTL, token secret, allow-list, rate limits).
    Required values have no default, so a missing variable fails startup.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        frozen=True,
    )

    # Server
    port: int
    environment: Literal["development", "test", "production"] = "development"

    # Database
    database_url: str
    db_connect_retries: int = 5
    db_connect_retry_delay: float = 5.0

    # Redis
    redis_host: str = "localhost"
    redis_port: int = 6379
    redis_password: str | None = None
    redis_expiration: int = 3600
    redis_enabled: bool = True

    # Auth
    jwt_secret: str
    jwt_algorithm: str = "HS256"
    jwt_expiration_hours: int = 24

    # Request pipeline
    whitelisted_ips: Annotated[list[str], NoDecode]
    allowed_origins: Annotated[list[str], NoDecode]
    rate_limit_window_seconds: int = 120
    rate_limit_max_requests: int = 50

    @field_validator("whitelisted_ips", "allowed_origins", mode="before")
    @classmethod
    def parse_comma_separated(cls, v: str | list[str]) -> list[str]:
        """Accept either a list or a comma-separated string."""
        return _split_comma_separated(v)

    @property
    def redis_url(self) -> str:
        """Redis connection URL derived from host, port and password."""
        if self.redis_password:
            password = quote(self.redis_password, safe="")
            return f"redis://:{password}@{self.redis_host}:{self.redis_port}/0"
        return f"redis://{self.redis_host}:{self.redis_port}/0"

    @property
    def is_production(self) -> bool:
        """Whether error responses must hide stack traces."""
        return self.environment == "production"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
