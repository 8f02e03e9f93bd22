"""
Station configuration - single source of truth for station id mappings.

ISD-Lite files are keyed by USAF + WBAN identifiers; the rest of the project
refers to stations by a short lowercase id.
"""

from dataclasses import dataclass
from typing import Dict, Optional


@dataclass(frozen=True)
class StationConfig:
    """Configuration for a single weather station."""

    station_id: str  # Canonical identifier: 'debilt', 'eelde', etc.
    usaf: str  # 6-digit USAF id used by ISD
    wban: str  # 5-digit WBAN id ('99999' outside the US)
    name: str
    country: str  # ISO 3166-1 alpha-2
    first_year: int  # First year with usable hourly temperatures in ISD-Lite

    @property
    def isd_id(self) -> str:
        """ISD file stem: '062600-99999'."""
        return f"{self.usaf}-{self.wban}"

    def isd_filename(self, year: int) -> str:
        return f"{self.isd_id}-{year}.gz"


STATIONS: Dict[str, StationConfig] = {
    "debilt": StationConfig(
        station_id="debilt",
        usaf="062600",
        wban="99999",
        name="De Bilt",
        country="NL",
        first_year=1956,
    ),
    "eelde": StationConfig(
        station_id="eelde",
        usaf="062800",
        wban="99999",
        name="Groningen Airport Eelde",
        country="NL",
        first_year=1956,
    ),
    "maastricht": StationConfig(
        station_id="maastricht",
        usaf="063800",
        wban="99999",
        name="Maastricht Aachen Airport",
        country="NL",
        first_year=1956,
    ),
    "schiphol": StationConfig(
        station_id="schiphol",
        usaf="062400",
        wban="99999",
        name="Amsterdam Schiphol",
        country="NL",
        first_year=1956,
    ),
}

STATION_IDS = list(STATIONS.keys())


def get_station(station_id: str) -> StationConfig:
    """Get station configuration by id.

    Raises:
        ValueError: If the station is not configured
    """
    station_id = station_id.lower()
    if station_id not in STATIONS:
        raise ValueError(f"Unknown station: {station_id}. Available: {STATION_IDS}")
    return STATIONS[station_id]


def get_station_by_isd_id(isd_id: str) -> Optional[StationConfig]:
    """Look up a station from its 'USAF-WBAN' identifier."""
    for station in STATIONS.values():
        if station.isd_id == isd_id:
            return station
    return None
