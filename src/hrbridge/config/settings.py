"""Application settings loaded from environment variables."""

from enum import Enum
from functools import lru_cache
from typing import Literal

from pydantic import SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class TokenCacheBackend(str, Enum):
    """Where the workforce API bearer token is cached."""

    MEMORY = "memory"
    REDIS = "redis"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application Configuration
    ENVIRONMENT: Literal["development", "test", "staging", "production"] = "development"
    DEBUG: bool = False
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    CORS_ORIGINS: list[str] = []

    # Database
    DATABASE_URL: str = "sqlite+aiosqlite:///./hrbridge.db"
    DATABASE_POOL_SIZE: int = 5
    DATABASE_MAX_OVERFLOW: int = 10

    # Workforce API (OAuth2 client credentials)
    REMOTE_API_BASE_URL: str = "http://localhost:8080/v1"
    REMOTE_TOKEN_URL: str = "http://localhost:8080/oauth/token"
    REMOTE_CLIENT_ID: str = ""
    REMOTE_CLIENT_SECRET: SecretStr | None = None
    REMOTE_SCOPE: str = "employees:read employees:write"
    REMOTE_HTTP_TIMEOUT_SECONDS: float = 15.0

    # Token cache
    TOKEN_CACHE_BACKEND: TokenCacheBackend = TokenCacheBackend.MEMORY
    TOKEN_CACHE_KEY: str = "workforce_access_token"
    TOKEN_CACHE_TTL_SECONDS: int = 3600

    # Redis (token cache backend)
    REDIS_URL: str = "redis://localhost:6379/0"
    REDIS_MAX_CONNECTIONS: int = 10

    # Circuit breaker around token acquisition
    AUTH_CIRCUIT_ENABLED: bool = True
    AUTH_CIRCUIT_FAILURE_THRESHOLD: int = 5
    AUTH_CIRCUIT_RESET_SECONDS: float = 60.0

    # Inbound provider authentication
    PROVIDER_AUTH_ENABLED: bool | None = None
    API_SECRET_KEY: SecretStr | None = None

    @property
    def provider_auth_active(self) -> bool:
        """Whether inbound provider requests must carry a bearer token.

        Defaults to on only in production unless explicitly configured.
        """
        if self.PROVIDER_AUTH_ENABLED is not None:
            return self.PROVIDER_AUTH_ENABLED
        return self.ENVIRONMENT == "production"

    @property
    def is_sqlite(self) -> bool:
        """Check whether the configured database is SQLite."""
        return self.DATABASE_URL.startswith("sqlite")


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
