"""Pytest fixtures and configuration."""

import os
import sys

import matplotlib
import numpy as np
import pandas as pd
import pytest

matplotlib.use("Agg")

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))


def make_observations(
    start_year: int,
    end_year: int,
    freq: str = "h",
    station_id: str = "test",
    seed: int = 42,
) -> pd.DataFrame:
    """Deterministic synthetic station series: seasonal cycle + daily cycle + noise."""
    idx = pd.date_range(f"{start_year}-01-01 00:00", f"{end_year}-12-31 23:00", freq=freq)
    doy = idx.dayofyear.to_numpy()
    hour = idx.hour.to_numpy()
    years = idx.year.to_numpy()

    rng = np.random.default_rng(seed)
    temperature = (
        10.0
        - 12.0 * np.cos(2 * np.pi * (doy - 15) / 365.25)
        + 4.0 * np.sin(2 * np.pi * (hour - 9) / 24)
        + 0.05 * (years - start_year)
        + rng.normal(0.0, 2.0, len(idx))
    )
    return pd.DataFrame({
        "station_id": station_id,
        "timestamp": idx,
        "temperature": np.round(temperature, 1),
    })


@pytest.fixture(scope="session")
def hourly_observations():
    """Five years of hourly readings, including the 2000 and 2004 leap years."""
    return make_observations(2000, 2004)


@pytest.fixture(scope="session")
def enriched(hourly_observations):
    from analysis.climate.timeseries import ingest

    return ingest(hourly_observations)


@pytest.fixture(scope="session")
def daily(enriched):
    from analysis.climate.timeseries import daily_aggregates

    return daily_aggregates(enriched)


@pytest.fixture
def project_root():
    """Return project root directory."""
    from pathlib import Path
    return Path(__file__).parent.parent
