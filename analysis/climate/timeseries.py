"""
Observation store and calendar indexing.

Normalizes a parsed hourly temperature series into the enriched dataset every
downstream index reads, and derives the per-day aggregates:

- ingest(): validate timestamps, reject duplicate station-hours, sort, and
  attach calendar keys (date, year, day_of_year, month, month_name, decade)
- daily_aggregates(): group by (year, day_of_year) into daily high/low/mean

Both functions return new DataFrames and never modify their input, so the
result can be shared read-only between the index computations.
"""

import logging
from typing import Dict, List

import pandas as pd

from analysis.climate.errors import DataError

logger = logging.getLogger(__name__)


# Explicit month lookup table; used wherever months need a stable order
MONTH_NAMES: Dict[int, str] = {
    1: "January",
    2: "February",
    3: "March",
    4: "April",
    5: "May",
    6: "June",
    7: "July",
    8: "August",
    9: "September",
    10: "October",
    11: "November",
    12: "December",
}
MONTH_ORDER: List[str] = [MONTH_NAMES[m] for m in sorted(MONTH_NAMES)]

ENRICHED_COLUMNS = [
    "timestamp",
    "date",
    "year",
    "day_of_year",
    "month",
    "month_name",
    "decade",
    "hour",
    "temperature",
]

DAILY_COLUMNS = [
    "date",
    "year",
    "day_of_year",
    "month",
    "daily_high",
    "daily_low",
    "daily_mean",
    "n_obs",
]


def _describe_bad_rows(raw: pd.Series, mask: pd.Series, limit: int = 5) -> str:
    """Format the first few offending values for an error message."""
    bad = raw[mask].head(limit).tolist()
    return f"{int(mask.sum())} row(s), e.g. {bad}"


def _parse_timestamps(df: pd.DataFrame) -> pd.Series:
    """Build hour-resolution timestamps from either supported input shape.

    Accepts a single `timestamp` column, or separate `date` + `hour` columns
    (the shape produced by the ISD-Lite parser). Strings are read as ISO 8601,
    row by row, so date-only and date-time values may be mixed.

    Raises:
        DataError: If a timestamp is missing or cannot be parsed
    """
    if "timestamp" in df.columns:
        raw = df["timestamp"]
        ts = pd.to_datetime(raw, errors="coerce", format="ISO8601")
        bad = ts.isna()
        if bad.any():
            raise DataError(f"Unparsable timestamps: {_describe_bad_rows(raw, bad)}")
        return ts.dt.floor("h")

    if "date" in df.columns and "hour" in df.columns:
        day = pd.to_datetime(df["date"], errors="coerce", format="ISO8601")
        hour = pd.to_numeric(df["hour"], errors="coerce")
        bad = day.isna() | hour.isna() | (hour < 0) | (hour > 23) | (hour % 1 != 0)
        if bad.any():
            raw = df["date"].astype(str) + " " + df["hour"].astype(str)
            raise DataError(f"Unparsable timestamps: {_describe_bad_rows(raw, bad)}")
        return day.dt.normalize() + pd.to_timedelta(hour.astype(int), unit="h")

    raise DataError(
        "Observations need a 'timestamp' column or 'date' + 'hour' columns "
        f"(got: {list(df.columns)})"
    )


def ingest(observations: pd.DataFrame) -> pd.DataFrame:
    """Validate observations and derive calendar keys.

    Args:
        observations: One row per station-hour with a temperature in °C
            (nullable) and either `timestamp` or `date` + `hour`. An optional
            `station_id` column is honoured for duplicate detection.

    Returns:
        Enriched DataFrame sorted by timestamp with columns
        [station_id,] timestamp, date, year, day_of_year, month, month_name,
        decade, hour, temperature.

    Raises:
        DataError: Unparsable timestamps, non-numeric temperatures, duplicate
            station-hour entries, or more than one station in the series
    """
    if "temperature" not in observations.columns:
        raise DataError(f"Observations have no 'temperature' column (got: {list(observations.columns)})")

    observations = observations.reset_index(drop=True)
    df = pd.DataFrame(index=observations.index)
    if "station_id" in observations.columns:
        df["station_id"] = observations["station_id"].astype(str)
        stations = df["station_id"].unique()
        if len(stations) > 1:
            raise DataError(f"Expected a single station, got {len(stations)}: {sorted(stations)[:5]}")

    df["timestamp"] = _parse_timestamps(observations)

    try:
        df["temperature"] = pd.to_numeric(observations["temperature"]).astype(float)
    except (ValueError, TypeError) as e:
        raise DataError(f"Non-numeric temperature values: {e}") from e

    keys = ["station_id", "timestamp"] if "station_id" in df.columns else ["timestamp"]
    dupes = df.duplicated(subset=keys, keep=False)
    if dupes.any():
        raise DataError(
            f"Duplicate station-hour entries: {_describe_bad_rows(df['timestamp'], dupes)}"
        )

    df = df.sort_values(keys, kind="mergesort").reset_index(drop=True)

    ts = df["timestamp"].dt
    df["date"] = ts.normalize()
    df["year"] = ts.year.astype(int)
    df["day_of_year"] = ts.dayofyear.astype(int)
    df["month"] = ts.month.astype(int)
    df["month_name"] = pd.Categorical(
        df["month"].map(MONTH_NAMES), categories=MONTH_ORDER, ordered=True
    )
    df["decade"] = (df["year"] // 10) * 10
    df["hour"] = ts.hour.astype(int)

    columns = (["station_id"] if "station_id" in df.columns else []) + ENRICHED_COLUMNS
    df = df[columns]

    if df.empty:
        logger.warning("Ingested an empty observation series")
    else:
        n_missing = int(df["temperature"].isna().sum())
        logger.info(
            f"Ingested {len(df)} observations for {df['year'].min()}-{df['year'].max()} "
            f"({n_missing} missing readings)"
        )

    return df


def daily_aggregates(enriched: pd.DataFrame) -> pd.DataFrame:
    """Group enriched observations into one row per calendar day.

    Null temperature readings are ignored. A day whose readings are all null
    keeps its row with NaN high/low/mean and n_obs = 0 (a data gap, not an
    error); downstream indices skip such rows.

    Args:
        enriched: Output of ingest()

    Returns:
        DataFrame sorted by (year, day_of_year) with columns date, year,
        day_of_year, month, daily_high, daily_low, daily_mean, n_obs.
    """
    if enriched.empty:
        return pd.DataFrame(columns=DAILY_COLUMNS)

    daily = (
        enriched.groupby(["year", "day_of_year"], sort=True)
        .agg(
            date=("date", "first"),
            month=("month", "first"),
            daily_high=("temperature", "max"),
            daily_low=("temperature", "min"),
            daily_mean=("temperature", "mean"),
            n_obs=("temperature", "count"),
        )
        .reset_index()
    )

    n_gaps = int((daily["n_obs"] == 0).sum())
    if n_gaps:
        logger.debug(f"{n_gaps} day(s) without valid readings")

    return daily[DAILY_COLUMNS]
