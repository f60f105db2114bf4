"""
FamilyLinX settings.

Values come from the environment or a ``.env`` file in the working
directory. Names are case-insensitive, so ``STORAGE_ROOT`` sets
``storage_root``.
"""

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime configuration for the API server and the command line tool."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    python_env: Literal["development", "production"] = Field(
        default="development", description="Deployment environment"
    )
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO", description="Root log level for the server and CLI"
    )

    # Family documents and calendar rows
    database_url: str = Field(
        default="sqlite:///./data/familylinx.db",
        description="SQLAlchemy URL of the document store",
    )

    # Photo blobs
    storage_root: str = Field(
        default="./data/storage", description="Directory holding uploaded photos"
    )
    storage_base_url: str = Field(
        default="/storage", description="URL prefix stored photos are served from"
    )
    max_upload_bytes: int = Field(
        default=20 * 1024 * 1024, ge=1, description="Per-file photo upload limit"
    )

    default_family_id: str = Field(
        default="demo-family", description="Family opened by POST /families/open"
    )
    upcoming_event_days: int = Field(
        default=30, ge=1, description="Days ahead covered by the upcoming events list"
    )

    api_host: str = Field(default="0.0.0.0", description="Bind address for uvicorn")
    api_port: int = Field(default=8000, description="Port for uvicorn")
    api_reload: bool = Field(default=True, description="Reload uvicorn on code changes")

    @property
    def is_development(self) -> bool:
        return self.python_env == "development"

    @property
    def is_production(self) -> bool:
        return self.python_env == "production"

    @property
    def uses_postgresql(self) -> bool:
        return self.database_url.lower().startswith("postgresql")

    def validate_production_config(self) -> None:
        """
        Reject settings that are only acceptable on a developer machine.

        Raises:
            ValueError: Listing every problem found, one per line
        """
        if not self.is_production:
            return

        problems = []
        if not self.uses_postgresql:
            problems.append("DATABASE_URL must point at PostgreSQL in production")
        if not self.storage_root:
            problems.append("STORAGE_ROOT must be set in production")

        if problems:
            raise ValueError("Invalid production settings:\n- " + "\n- ".join(problems))


@lru_cache()
def get_settings() -> Settings:
    """Return the process-wide settings, loading them on first use."""
    return Settings()
