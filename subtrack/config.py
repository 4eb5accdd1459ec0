"""
SubTrack Backend: Application Configuration
===========================================

What:  Centralized configuration management using Pydantic Settings.
Why:   Type-safe environment variable loading with validation on startup.
How:   Pydantic Settings reads from environment variables, an optional .env
       file and an optional YAML file named by CONFIG_PATH, validates types
       and ranges, and provides a singleton `settings` object.
Who:   Imported by every module that needs configuration values.
When:  Loaded once at module import time; prod requirements are checked in
       the lifespan hook before the storage is built.

Source precedence (highest first):
    1. Explicit init kwargs (tests)
    2. Environment variables (PG_USER, PG_PASS, ENV, ...)
    3. .env file
    4. YAML file at $CONFIG_PATH (non-secret deployment settings)
"""

import os
from typing import Tuple, Type

from pydantic import Field, field_validator
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    YamlConfigSettingsSource,
)
from sqlalchemy.engine import URL

DEV_ENV = "dev"
PROD_ENV = "prod"


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables and YAML.

    Attributes are grouped by concern for readability.
    """

    # ── Environment ───────────────────────────────────────────────────────
    # What: Selects the storage backend
    #   dev  → embedded SQLite file at storage_path
    #   prod → PostgreSQL server described by the pg_* fields
    env: str = Field(default=DEV_ENV)

    # ── Dev Storage (SQLite) ──────────────────────────────────────────────
    storage_path: str = Field(default="./storage/subscriptions.db")

    # ── Prod Storage (PostgreSQL) ─────────────────────────────────────────
    pg_host: str = Field(default="")
    pg_port: int = Field(default=5432, ge=1, le=65535)
    pg_db_name: str = Field(default="")

    # Credentials come from the environment only (PG_USER / PG_PASS);
    # keep them out of the YAML file.
    pg_user: str = Field(default="")
    pg_pass: str = Field(default="")

    pg_max_pool_size: int = Field(default=1, ge=1, le=100)

    # What: Bounded retry for the first connection at startup
    # Example: 3 attempts, 30s apart → fail startup after ~60s of waiting
    pg_connection_attempts: int = Field(default=3, ge=1, le=20)
    pg_connection_retry_delay: float = Field(default=30.0, ge=0, le=300)

    # ── Storage Operations ────────────────────────────────────────────────
    # What: Deadline for a single storage call (seconds)
    # The call is cancelled and reported as a StorageError when exceeded.
    operation_timeout: float = Field(default=10.0, gt=0, le=300)

    # ── Server ────────────────────────────────────────────────────────────
    backend_host: str = Field(default="0.0.0.0")
    backend_port: int = Field(default=8082, ge=1024, le=65535)

    # Valid: DEBUG, INFO, WARNING, ERROR, CRITICAL
    log_level: str = Field(default="INFO")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Ensures log level is a valid Python logging level name."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper = v.upper()
        if upper not in valid_levels:
            raise ValueError(f"Invalid log_level '{v}'. Must be one of: {valid_levels}")
        return upper

    @field_validator("env")
    @classmethod
    def validate_env(cls, v: str) -> str:
        """Only 'dev' and 'prod' select a backend."""
        lower = v.strip().lower()
        if lower not in {DEV_ENV, PROD_ENV}:
            raise ValueError(f"Unsupported env '{v}' (use '{DEV_ENV}' or '{PROD_ENV}' only)")
        return lower

    # ── Pydantic Settings Config ──────────────────────────────────────────
    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,  # PG_USER and pg_user both work
        "extra": "ignore",
    }

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: Type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> Tuple[PydanticBaseSettingsSource, ...]:
        """
        Append the YAML file named by CONFIG_PATH as the lowest-priority source.

        Why lowest: Deployment files hold shared defaults (hosts, pool sizes);
        anything set in the environment must still win.
        """
        sources = [init_settings, env_settings, dotenv_settings]
        config_path = os.environ.get("CONFIG_PATH")
        if config_path:
            sources.append(YamlConfigSettingsSource(settings_cls, yaml_file=config_path))
        sources.append(file_secret_settings)
        return tuple(sources)

    @property
    def database_url(self) -> str:
        """
        SQLAlchemy async URL for the active backend.

        Used by the storage factory and by Alembic so both target the same database.
        """
        if self.env == PROD_ENV:
            url = URL.create(
                "postgresql+asyncpg",
                username=self.pg_user,
                password=self.pg_pass,
                host=self.pg_host,
                port=self.pg_port,
                database=self.pg_db_name,
            )
            return url.render_as_string(hide_password=False)
        return f"sqlite+aiosqlite:///{self.storage_path}"

    def validate_required_for_production(self) -> None:
        """
        What:  Validates that the settings needed by the active backend are present.
        When:  Called during app startup (lifespan), before the storage is built.
        Why:   Fail fast with one message listing every gap, instead of a
               driver error on the first connection attempt.
        """
        errors = []
        if self.env == DEV_ENV:
            if not self.storage_path:
                errors.append("STORAGE_PATH must be set while using 'dev' env")
        else:
            if not self.pg_host:
                errors.append("PG_HOST must be set while using 'prod' env")
            if not self.pg_db_name:
                errors.append("PG_DB_NAME must be set while using 'prod' env")
            if not self.pg_user:
                errors.append("PG_USER environment variable is not set")
            if not self.pg_pass:
                errors.append("PG_PASS environment variable is not set")
        if errors:
            raise ValueError(
                "Configuration validation failed:\n" + "\n".join(f"  - {e}" for e in errors)
            )


# Singleton instance, imported throughout the application
settings = Settings()
