"""
PURPOSE: Configuration settings for the Signal Ledger webhook service.

This module uses Pydantic Settings to manage configuration from environment
variables and .env files. All settings are validated and typed.
"""

from typing import List

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from sqlalchemy.engine import URL, make_url

from signal_ledger.config.constants import SchemaVariant, StorageBackend


class Settings(BaseSettings):
    """
    PURPOSE: Central configuration class for Signal Ledger.

    Selects the storage backend and schema variant, and carries the HTTP,
    database, file-store and logging options. Settings are loaded from
    environment variables and the .env file.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # Server
    HOST: str = "0.0.0.0"
    PORT: int = 3001

    # Storage selection
    STORAGE_BACKEND: StorageBackend = StorageBackend.FILE
    SCHEMA_VARIANT: SchemaVariant = SchemaVariant.MINIMAL

    # File-backed store
    DATA_FILE: str = "webhook_events.json"
    FILE_STORE_LOCKING: bool = True

    # Relational store. DATABASE_URL wins over the DB_* pieces when set.
    DATABASE_URL: str = ""
    DB_DRIVER: str = "postgresql+asyncpg"
    DB_HOST: str = "localhost"
    DB_PORT: int = 5432
    DB_USER: str = "postgres"
    DB_PASSWORD: str = ""
    DB_NAME: str = "webhooks"
    DB_POOL_SIZE: int = 10
    EVENTS_TABLE: str = "webhook_events"

    # HTTP boundary
    CORS_ORIGINS: List[str] = ["*"]
    RATE_LIMIT_ENABLED: bool = False
    EXPOSE_ERROR_DETAILS: bool = False

    # System
    APP_ENV: str = "development"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Normalise and check the log level name."""
        level = v.strip().upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"LOG_LEVEL must be a standard level name, got {v!r}")
        return level

    @field_validator("DB_POOL_SIZE")
    @classmethod
    def validate_pool_size(cls, v: int) -> int:
        """Pool capacity must allow at least one connection."""
        if v < 1:
            raise ValueError("DB_POOL_SIZE must be at least 1")
        return v

    def database_url(self) -> URL:
        """
        PURPOSE: Build the SQLAlchemy URL for the relational store.

        CALLED BY: signal_ledger.db.engine.build_engine

        Returns:
            URL: DATABASE_URL when set, otherwise a URL assembled from DB_*.
        """
        if self.DATABASE_URL:
            return make_url(self.DATABASE_URL)
        return URL.create(
            drivername=self.DB_DRIVER,
            username=self.DB_USER,
            password=self.DB_PASSWORD or None,
            host=self.DB_HOST,
            port=self.DB_PORT,
            database=self.DB_NAME,
        )

    def is_development(self) -> bool:
        """
        PURPOSE: Determine whether the app is running in development mode.

        Returns:
            bool: True when APP_ENV indicates development or debug is on.
        """
        return self.APP_ENV.strip().lower() in {"dev", "development"} or self.DEBUG


settings: Settings = Settings()
