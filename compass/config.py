import logging
from functools import lru_cache
from typing import List

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Decision Compass settings, read from the environment or a local ``.env``."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    app_env: str = Field(default="local", alias="APP_ENV")
    app_port: int = Field(default=5000, alias="APP_PORT")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    database_url: str = Field(..., alias="DATABASE_URL")

    # Tokens are long-lived; there is no refresh endpoint
    jwt_secret: str = Field(..., alias="JWT_SECRET")
    jwt_issuer: str = Field(default="decision-compass", alias="JWT_ISSUER")
    jwt_audience: str = Field(default="decision-compass", alias="JWT_AUDIENCE")
    jwt_algorithm: str = Field(default="HS256", alias="JWT_ALGORITHM")
    jwt_access_token_expire_minutes: int = Field(default=60 * 24 * 30, alias="JWT_ACCESS_TOKEN_EXPIRE_MINUTES")

    cors_origins: str = Field(default="*", alias="CORS_ORIGINS")

    # Applies to /auth/register and /auth/login
    rate_limit_enabled: bool = Field(default=True, alias="RATE_LIMIT_ENABLED")

    # Insert the default outcome rules at startup
    seed_on_start: bool = Field(default=False, alias="SEED_ON_START")

    @field_validator("log_level")
    @classmethod
    def _known_log_level(cls, value: str) -> str:
        level = value.strip().upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"Unknown log level: {value}")
        return level

    @property
    def log_level_number(self) -> int:
        return logging.getLevelName(self.log_level)

    @property
    def cors_origins_list(self) -> List[str]:
        """``["*"]`` or the comma-separated origins, blanks dropped."""
        if self.cors_origins.strip() == "*":
            return ["*"]
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    @property
    def is_production(self) -> bool:
        return self.app_env.lower() == "production"

    @property
    def is_sqlite(self) -> bool:
        return self.database_url.startswith("sqlite")


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
