"""Configuration management for Slab Nest."""

from pathlib import Path
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="SLAB_",
        extra="ignore",
    )

    # Paths
    output_dir: Path = Field(default=Path("output"), description="Output directory for exported layouts")

    # Slab defaults (cm)
    slab_width: float = Field(default=80.0, gt=0, description="Default slab width in cm")
    slab_height: float = Field(default=60.0, gt=0, description="Default slab height in cm")

    # Packing
    margin: float = Field(default=1.0, ge=0, description="Clearance kept free along the slab edges (cm)")
    min_spacing: float = Field(default=0.5, ge=0, description="Smallest gap the packers will leave between shapes (cm)")
    default_spacing: float = Field(default=1.0, ge=0, description="Spacing used when a layout does not set one (cm)")
    iteration_delay: float = Field(default=0.0, ge=0, description="Pause between optimizer iterations (seconds)")

    # Logging
    log_level: str = Field(default="INFO", description="Log level for the CLI")


# Global settings instance
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get the global settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def configure(settings: Settings) -> None:
    """Override global settings."""
    global _settings
    _settings = settings
