"""
Application settings loaded from environment variables.
Uses pydantic-settings for validation and type coercion.
"""

from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Station
    station_id: str = "debilt"

    # NOAA ISD-Lite
    isd_base_url: str = "https://www.ncei.noaa.gov/pub/data/noaa/isd-lite"
    isd_request_delay: float = 1.0

    # Density windows
    density_window_years: int = 10
    density_grid_min: float = -20.0
    density_grid_max: float = 35.0
    density_grid_points: int = 512

    # Application
    log_level: str = "INFO"
    data_dir: str = "./data"
    output_dir: str = "./output"
    max_workers: int = 4

    @property
    def raw_dir(self) -> Path:
        """Cache directory for downloaded ISD-Lite yearly files."""
        return Path(self.data_dir) / "isd-lite"

    @property
    def output_path(self) -> Path:
        return Path(self.output_dir)


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
