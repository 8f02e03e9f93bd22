"""Configuration module."""

from src.config.settings import Settings, get_settings
from src.config.stations import (
    STATION_IDS,
    STATIONS,
    StationConfig,
    get_station,
    get_station_by_isd_id,
)

__all__ = [
    "Settings",
    "get_settings",
    "StationConfig",
    "STATIONS",
    "STATION_IDS",
    "get_station",
    "get_station_by_isd_id",
]
