#!/usr/bin/env python3
"""
NOAA ISD-Lite client and parser for hourly station observations.

ISD-Lite is a fixed-width, one-file-per-station-per-year extract of the
Integrated Surface Database:
    https://www.ncei.noaa.gov/pub/data/noaa/isd-lite/{year}/{usaf}-{wban}-{year}.gz

Each line holds one hourly observation:

    cols  1-4   year
    cols  6-7   month
    cols  9-10  day
    cols 12-13  hour (UTC)
    cols 14-19  air temperature        (°C x 10)
    cols 20-25  dew point              (°C x 10)
    cols 26-31  sea level pressure     (hPa x 10)
    cols 32-37  wind direction         (degrees)
    cols 38-43  wind speed             (m/s x 10)
    cols 44-49  sky coverage code
    cols 50-55  1-hour precipitation   (mm x 10)
    cols 56-61  6-hour precipitation   (mm x 10)

Missing values are -9999. This module only turns files into an observation
frame in °C; all analysis lives in analysis.climate.
"""

import gzip
import io
import logging
import time
import zlib
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Union

import pandas as pd
import requests

from analysis.climate.errors import IngestionError
from src.config.stations import StationConfig
from src.utils.retry import isd_retry

logger = logging.getLogger(__name__)


MISSING = -9999

# (column, start, end, scale) using 0-based [start, end) slices
ISD_LITE_FIELDS = [
    ("year", 0, 4, None),
    ("month", 5, 7, None),
    ("day", 8, 10, None),
    ("hour", 11, 13, None),
    ("temperature", 13, 19, 10.0),
    ("dew_point", 19, 25, 10.0),
    ("sea_level_pressure", 25, 31, 10.0),
    ("wind_direction", 31, 37, None),
    ("wind_speed", 37, 43, 10.0),
    ("sky_coverage", 43, 49, None),
    ("precip_1h", 49, 55, 10.0),
    ("precip_6h", 55, 61, 10.0),
]
REQUIRED_FIELDS = {"year", "month", "day", "hour", "temperature"}
OBSERVATION_COLUMNS = ["station_id", "date", "hour"] + [
    name for name, _, _, _ in ISD_LITE_FIELDS if name not in {"year", "month", "day", "hour"}
]


def _parse_line(line: str, line_no: int) -> Dict[str, Optional[float]]:
    """Parse one fixed-width line into raw (unscaled) integers.

    Raises:
        IngestionError: If a required field is absent or not an integer
    """
    row: Dict[str, Optional[float]] = {}
    for name, start, end, scale in ISD_LITE_FIELDS:
        token = line[start:end].strip()
        if not token:
            if name in REQUIRED_FIELDS:
                raise IngestionError(f"Line {line_no}: missing {name} in {line!r}")
            row[name] = None
            continue
        try:
            value = int(token)
        except ValueError:
            raise IngestionError(f"Line {line_no}: bad {name} value {token!r} in {line!r}") from None

        if name in {"year", "month", "day", "hour"}:
            row[name] = value
        elif value == MISSING:
            row[name] = None
        else:
            row[name] = value / scale if scale else float(value)
    return row


def _read_lines(source: Union[Path, str, bytes, Iterable[str]]) -> Iterable[str]:
    """Yield text lines from a path (.gz or plain), raw bytes, or lines."""
    if isinstance(source, bytes):
        data = gzip.decompress(source) if source[:2] == b"\x1f\x8b" else source
        yield from io.StringIO(data.decode("ascii"))
        return

    if isinstance(source, (str, Path)):
        path = Path(source)
        opener = gzip.open if path.suffix == ".gz" else open
        with opener(path, "rt", encoding="ascii") as f:
            yield from f
        return

    yield from source


def _source_name(source) -> str:
    if isinstance(source, (str, Path)):
        return Path(source).name
    if isinstance(source, bytes):
        return f"<{len(source)} bytes>"
    return "<lines>"


def parse_isd_lite(
    source: Union[Path, str, bytes, Iterable[str]],
    station_id: str,
) -> pd.DataFrame:
    """Parse an ISD-Lite yearly file into an observation frame.

    Args:
        source: Path to a .gz/plain file, the raw (optionally gzipped) bytes,
            or an iterable of lines
        station_id: Identifier stored in the station_id column

    Returns:
        DataFrame with columns station_id, date, hour, temperature (°C) and
        the remaining sensor fields in physical units; missing readings NaN.

    Raises:
        IngestionError: On the first malformed row, impossible date, or a
            file that cannot be decompressed or decoded (truncated gzip,
            non-ASCII bytes). No partial frame is returned.
    """
    rows: List[Dict[str, Optional[float]]] = []
    try:
        for line_no, line in enumerate(_read_lines(source), start=1):
            line = line.rstrip("\r\n")
            if not line.strip():
                continue
            rows.append(_parse_line(line, line_no))
    except (OSError, EOFError, UnicodeDecodeError, zlib.error) as e:
        raise IngestionError(f"Unreadable ISD-Lite file {_source_name(source)}: {e}") from e

    if not rows:
        return pd.DataFrame(columns=OBSERVATION_COLUMNS)

    df = pd.DataFrame(rows)
    dates = pd.to_datetime(df[["year", "month", "day"]], errors="coerce")
    bad = dates.isna() | ~df["hour"].between(0, 23)
    if bad.any():
        first = df[bad].iloc[0]
        raise IngestionError(
            f"{int(bad.sum())} row(s) with impossible date/hour, first: "
            f"{int(first['year'])}-{int(first['month'])}-{int(first['day'])} hour {int(first['hour'])}"
        )

    df["station_id"] = station_id
    df["date"] = dates
    df["hour"] = df["hour"].astype(int)
    out = df[OBSERVATION_COLUMNS].copy()
    for column in OBSERVATION_COLUMNS[3:]:
        out[column] = out[column].astype(float)
    return out


class ISDLiteClient:
    """Downloader for ISD-Lite yearly files with a local cache.

    Files are cached as {cache_dir}/{year}/{usaf}-{wban}-{year}.gz, so
    repeated runs only hit the network for years not seen before.
    """

    BASE_URL = "https://www.ncei.noaa.gov/pub/data/noaa/isd-lite"

    def __init__(
        self,
        cache_dir: Path,
        base_url: Optional[str] = None,
        session: Optional[requests.Session] = None,
        request_delay: float = 1.0,
    ):
        self.cache_dir = Path(cache_dir)
        self.base_url = (base_url or self.BASE_URL).rstrip("/")
        self.session = session or requests.Session()
        self.session.headers.update({
            "User-Agent": "StationClimate/1.0 (Climate Research)"
        })
        self.request_delay = request_delay
        self._last_request = 0.0

    def _rate_limit(self):
        """Apply rate limiting between requests."""
        elapsed = time.time() - self._last_request
        if elapsed < self.request_delay:
            time.sleep(self.request_delay - elapsed)
        self._last_request = time.time()

    def file_url(self, station: StationConfig, year: int) -> str:
        return f"{self.base_url}/{year}/{station.isd_filename(year)}"

    def cache_path(self, station: StationConfig, year: int) -> Path:
        return self.cache_dir / str(year) / station.isd_filename(year)

    @isd_retry
    def _get(self, url: str) -> Optional[bytes]:
        """GET a file; None on 404, raise on any other HTTP error."""
        self._rate_limit()
        response = self.session.get(url, timeout=60)
        if response.status_code == 404:
            return None
        response.raise_for_status()
        return response.content

    def download_year(
        self,
        station: StationConfig,
        year: int,
        overwrite: bool = False,
    ) -> Optional[Path]:
        """Fetch one yearly file into the cache.

        Returns:
            Cached path, or None if the archive has no file for that year
        """
        path = self.cache_path(station, year)
        if path.exists() and not overwrite:
            logger.debug(f"[SKIP] {path.name} already cached")
            return path

        url = self.file_url(station, year)
        logger.info(f"Fetching ISD-Lite {station.isd_id} {year}")
        content = self._get(url)
        if content is None:
            logger.warning(f"No ISD-Lite file for {station.isd_id} in {year} ({url})")
            return None

        # Only a complete download may appear under the cache name
        path.parent.mkdir(parents=True, exist_ok=True)
        part = path.with_suffix(".part")
        part.write_bytes(content)
        part.replace(path)
        return path

    def load_years(
        self,
        station: StationConfig,
        start_year: int,
        end_year: int,
        offline: bool = False,
    ) -> pd.DataFrame:
        """Load an inclusive year range into one observation frame.

        Years without a file (404, or not cached when offline) are skipped
        with a warning.

        Args:
            station: Station to load
            start_year: First year (inclusive)
            end_year: Last year (inclusive)
            offline: Only read the cache, never hit the network

        Returns:
            Concatenated output of parse_isd_lite() for every available year
        """
        if start_year > end_year:
            raise ValueError(f"start_year ({start_year}) must be <= end_year ({end_year})")

        frames: List[pd.DataFrame] = []
        for year in range(start_year, end_year + 1):
            if offline:
                path = self.cache_path(station, year)
                if not path.exists():
                    logger.warning(f"Not cached (offline): {path}")
                    continue
            else:
                path = self.download_year(station, year)
                if path is None:
                    continue

            frame = parse_isd_lite(path, station.station_id)
            logger.info(f"Parsed {len(frame)} observations from {path.name}")
            frames.append(frame)

        if not frames:
            return pd.DataFrame(columns=OBSERVATION_COLUMNS)
        return pd.concat(frames, ignore_index=True)
