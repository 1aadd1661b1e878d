"""Application configuration using pydantic-settings."""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="ASSETTAGS_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Application
    app_name: str = "Asset Tags"
    version: str = "0.1.0"
    debug: bool = False
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"

    # Server
    host: str = "0.0.0.0"
    port: int = Field(default=5050, description="Server port")

    # Paths
    config_path: Path = Field(
        default=Path("/config"),
        description="Path for configuration files and database",
    )

    # Database
    database_url: str | None = Field(
        default=None,
        description="Database connection URL (defaults to SQLite under config_path)",
    )

    # CORS
    cors_origins: list[str] = Field(
        default=["*"],
        description="Allowed CORS origins",
    )

    # Tagging
    org_id: str = Field(
        default="default",
        description="Organization that owns frameworks and tag keys",
    )
    frameworks_page_size: int = Field(
        default=25,
        ge=1,
        le=100,
        description="Frameworks returned per page when listing",
    )
    summary_max_chips: int = Field(
        default=4,
        ge=0,
        description="Default chip limit for compact tag summaries",
    )

    @property
    def db_path(self) -> Path:
        """Get the SQLite database file path."""
        return self.config_path / "assettags.db"


# Global settings instance
settings = Settings()
