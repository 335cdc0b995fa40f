"""Configuration management for Compagnon using Pydantic Settings."""

from functools import lru_cache
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        env_prefix="COMPAGNON_",
        extra="ignore",
    )

    debug: bool = Field(default=False, description="Enable debug mode")

    # Local datastore
    database_url: str = Field(
        default="sqlite+aiosqlite:///./data/compagnon.db",
        description="Database connection URL",
    )

    # Reference data
    data_root: Path = Field(default=Path("./data"), description="Root data directory")

    # Rules
    rupture_cap: int = Field(
        default=6, description="Highest rupture value reachable through modifiers"
    )

    # Logging
    log_level: str = Field(default="INFO", description="Logging level")
    log_format: str = Field(default="console", description="Log format (console or json)")

    @property
    def data_dir(self) -> Path:
        """Get the data directory path."""
        return self.data_root

    @property
    def reference_dir(self) -> Path:
        """Get the reference data directory path."""
        return self.data_dir / "reference"

    @property
    def equipment_file(self) -> Path:
        """Get the default equipment reference file."""
        return self.reference_dir / "equipements.yaml"

    @property
    def game_rules_file(self) -> Path:
        """Get the default game rules reference file."""
        return self.reference_dir / "regles.yaml"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
