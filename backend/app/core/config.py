from __future__ import annotations

from functools import lru_cache
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Centralized configuration for DataCanvas.
    """

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Postgres
    postgres_db: str = "datacanvas"
    postgres_user: str = "datacanvas"
    postgres_password: str = "datacanvas_pass"
    postgres_host: str = "postgres"
    postgres_port: int = 5432

    # Full SQLAlchemy URL, overrides the Postgres parts when set
    database_url: str | None = None

    # Backend
    backend_host: str = "0.0.0.0"
    backend_port: int = 8000
    log_level: str = "INFO"
    cors_origins: list[str] = [
        "http://localhost:3000",
        "http://localhost:3001",
    ]

    # SQLAlchemy
    sqlalchemy_echo: bool = False

    # Sessions
    jwt_secret: str = "change-me"
    access_token_expire_minutes: int = 60 * 24
    session_cookie_name: str = "datacanvas_session"
    session_cookie_secure: bool = False

    # Uploads
    upload_dir: str = "uploads"
    max_upload_bytes: int = 25 * 1024 * 1024

    @property
    def postgres_dsn(self) -> str:
        # SQLAlchemy DSN (psycopg3)
        return (
            f"postgresql+psycopg://{self.postgres_user}:{self.postgres_password}"
            f"@{self.postgres_host}:{self.postgres_port}/{self.postgres_db}"
        )

    @property
    def sqlalchemy_url(self) -> str:
        return self.database_url or self.postgres_dsn


@lru_cache
def get_settings() -> Settings:
    return Settings()
