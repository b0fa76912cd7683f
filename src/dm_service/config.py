from __future__ import annotations

from typing import Literal

from pydantic import ConfigDict
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    POSTGRES_USER: str
    POSTGRES_PASSWORD: str
    POSTGRES_DB: str
    DB_HOST: str = "localhost"
    DB_PORT: int = 5432

    DB_POOL_SIZE: int = 10
    DB_MAX_OVERFLOW: int = 20
    DB_POOL_RECYCLE: int = 300
    DB_ECHO: bool = False

    HTTP_HOST: str = "0.0.0.0"
    HTTP_PORT: int = 8000

    REDIS_URL: str = "redis://localhost:6379/0"

    JWT_SECRET: str = ""
    JWT_VERIFY_MODE: Literal["hs256", "jwks"] = "hs256"
    JWT_ALGORITHM: str = "HS256"
    JWKS_URL: str | None = None

    CORS_ORIGINS: list[str] = ["*"]

    ENVIRONMENT: Literal["development", "test", "production"] = "production"
    LOG_LEVEL: str = "INFO"

    REAPER_ENABLED: bool = True
    REAPER_INTERVAL_SECONDS: float = 3600.0

    NOTIFICATIONS_CHANNEL: str = "notifications.write"
    NOTIFICATION_QUEUE_SIZE: int = 1000

    UPLOAD_DIR: str = "uploads/chat"
    UPLOAD_URL_PREFIX: str = "/uploads/chat"
    UPLOAD_MAX_FILES: int = 5
    UPLOAD_MAX_BYTES: int = 50 * 1024 * 1024

    @property
    def database_url(self) -> str:
        return (
            f"postgresql+asyncpg://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD}"
            f"@{self.DB_HOST}:{self.DB_PORT}/{self.POSTGRES_DB}"
        )

    @property
    def expose_error_details(self) -> bool:
        return self.ENVIRONMENT != "production"

    model_config = ConfigDict(
        env_file=".env",
        extra="ignore",
    )


settings = Settings()  # type: ignore[call-arg]
