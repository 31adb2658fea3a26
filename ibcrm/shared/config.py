"""Application configuration loaded from environment variables."""

from datetime import timedelta
from functools import lru_cache
from typing import Literal

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Environment
    environment: Literal["development", "staging", "production"] = "development"
    log_level: str = "INFO"

    # Database (postgresql+asyncpg://... in deployments, sqlite+aiosqlite://... locally)
    database_url: str
    db_auto_create: bool = False

    # Database Pool Settings
    db_pool_size: int = 5
    db_max_overflow: int = 10
    db_pool_timeout: int = 30
    db_pool_recycle: int = 3600  # Recycle connections after 1 hour

    # JWT Authentication - one secret per token class
    jwt_access_secret: str
    jwt_refresh_secret: str
    jwt_reset_secret: str
    jwt_algorithm: str = "HS256"
    access_token_expire_hours: int = 24
    refresh_token_expire_days: int = 7
    reset_token_expire_minutes: int = 60

    # Password hashing
    bcrypt_rounds: int = 12

    # Account lockout
    max_login_attempts: int = 5
    lockout_minutes: int = 120
    max_refresh_tokens: int = 5

    # Refresh cookie
    refresh_cookie_name: str = "refreshToken"

    # API Settings
    api_host: str = "0.0.0.0"
    api_port: int = 8000
    request_timeout_seconds: float = 30.0
    rate_limit_enabled: bool = True

    # CORS Settings
    # In production, set CORS_ORIGINS to a comma-separated list of allowed origins
    cors_origins: str = ""

    @model_validator(mode="after")
    def _require_distinct_secrets(self) -> "Settings":
        secrets = [self.jwt_access_secret, self.jwt_refresh_secret, self.jwt_reset_secret]
        if any(not s for s in secrets):
            raise ValueError("JWT secrets must not be empty")
        if len(set(secrets)) != len(secrets):
            raise ValueError(
                "JWT_ACCESS_SECRET, JWT_REFRESH_SECRET and JWT_RESET_SECRET must all differ"
            )
        return self

    @property
    def is_development(self) -> bool:
        return self.environment == "development"

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @property
    def access_token_ttl(self) -> timedelta:
        return timedelta(hours=self.access_token_expire_hours)

    @property
    def refresh_token_ttl(self) -> timedelta:
        return timedelta(days=self.refresh_token_expire_days)

    @property
    def reset_token_ttl(self) -> timedelta:
        return timedelta(minutes=self.reset_token_expire_minutes)

    @property
    def lockout_duration(self) -> timedelta:
        return timedelta(minutes=self.lockout_minutes)

    @property
    def cors_origins_list(self) -> list[str]:
        """Get CORS origins as a list.

        Returns:
            List of allowed origins. In development, includes localhost.
            In production, only returns explicitly configured origins.
        """
        if self.cors_origins:
            return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]
        if self.is_development:
            return [
                "http://localhost:3000",
                "http://localhost:5173",
                "http://127.0.0.1:3000",
                "http://127.0.0.1:5173",
            ]
        return []


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
