"""
Hellmann winter severity index (Hellmann Wintergetal).

The index of a winter is the running sum of |daily mean| over all days from
November 1 to March 31 whose mean temperature is below 0 °C. A winter is
labelled by the calendar year in which it starts, so January-March days are
credited to the previous year.

Classification cut points (°C·day): 10, 20, 40, 100, 160, 300. A score lying
exactly on a cut point belongs to the band on the Normal side of it:

    score > 300          Strong
    160 < score <= 300   Very cold
    100 < score <= 160   Cold
    40 <= score <= 100   Normal
    20 <= score < 40     Gentle
    10 <= score < 20     Very gentle
    score < 10           Extremely gentle
"""

import logging
from typing import Dict, List, Optional, Tuple

import numpy as np
import pandas as pd

from analysis.climate.datastructures import WinterPeriod

logger = logging.getLogger(__name__)


WINTER_START_DOY = 305  # Nov 1 in a non-leap year
WINTER_END_DOY = 365
SPRING_END_DOY = 90  # Mar 31 in a non-leap year
SPRING_DAY_OFFSET = 61  # days from WINTER_START_DOY to Dec 31

# Checked top-down with `score > cut`
HARSH_CLASSES: List[Tuple[float, str]] = [
    (300.0, "Strong"),
    (160.0, "Very cold"),
    (100.0, "Cold"),
]
# Checked bottom-up with `score < cut`
MILD_CLASSES: List[Tuple[float, str]] = [
    (10.0, "Extremely gentle"),
    (20.0, "Very gentle"),
    (40.0, "Gentle"),
]
NORMAL_CLASS = "Normal"

# (label, lower, upper) bands for plotting, mildest first; None = unbounded
WINTER_CLASS_BANDS: List[Tuple[str, float, Optional[float]]] = [
    ("Extremely gentle", 0.0, 10.0),
    ("Very gentle", 10.0, 20.0),
    ("Gentle", 20.0, 40.0),
    ("Normal", 40.0, 100.0),
    ("Cold", 100.0, 160.0),
    ("Very cold", 160.0, 300.0),
    ("Strong", 300.0, None),
]


def classify_winter(score: float) -> str:
    """Map a final Hellmann score to its severity class.

    Example:
        classify_winter(250.0) -> "Very cold"
        classify_winter(100.0) -> "Normal"
        classify_winter(100.1) -> "Cold"
    """
    for cut, label in HARSH_CLASSES:
        if score > cut:
            return label
    for cut, label in MILD_CLASSES:
        if score < cut:
            return label
    return NORMAL_CLASS


def in_winter_window(day_of_year) -> np.ndarray:
    """True for days inside [305, 365] or [1, 90]."""
    doy = np.asarray(day_of_year)
    return ((doy >= WINTER_START_DOY) & (doy <= WINTER_END_DOY)) | ((doy >= 1) & (doy <= SPRING_END_DOY))


def winter_year_of(year, day_of_year) -> np.ndarray:
    """Winter a day is credited to: its own year from Nov, the previous one before Apr."""
    return np.where(np.asarray(day_of_year) >= WINTER_START_DOY, np.asarray(year), np.asarray(year) - 1)


def day_of_winter(day_of_year) -> np.ndarray:
    """Position inside the winter: 0 on day 305, 61 + day_of_year after New Year."""
    doy = np.asarray(day_of_year)
    return np.where(doy >= WINTER_START_DOY, doy - WINTER_START_DOY, doy + SPRING_DAY_OFFSET)


def compute_winter_severity(daily: pd.DataFrame) -> List[WinterPeriod]:
    """Compute the cumulative Hellmann curve for every winter in the record.

    Steps:
    1. Keep winter-window days that have a daily mean (data gaps dropped)
    2. Credit each day to its winter year
    3. Keep frost days (mean < 0 °C), in date order per winter
    4. Fold a running sum of |mean| into (day_of_winter, severity) pairs

    A winter that has data but no frost day yields an empty curve (score 0).
    Winters with no data at all are not reported.

    Args:
        daily: Output of daily_aggregates() (needs year, day_of_year,
            daily_mean)

    Returns:
        WinterPeriod list ordered by winter_year
    """
    if daily.empty:
        return []

    mask = in_winter_window(daily["day_of_year"]) & daily["daily_mean"].notna().to_numpy()
    days = daily.loc[mask]
    if days.empty:
        logger.info("No winter days with data; nothing to score")
        return []

    days = days.assign(
        winter_year=winter_year_of(days["year"], days["day_of_year"]),
        day_of_winter=day_of_winter(days["day_of_year"]),
    ).sort_values(["year", "day_of_year"], kind="mergesort")

    frost = days[days["daily_mean"] < 0]
    frost_by_winter: Dict[int, pd.DataFrame] = {
        int(wy): group for wy, group in frost.groupby("winter_year", sort=True)
    }

    periods: List[WinterPeriod] = []
    for wy in sorted(int(y) for y in days["winter_year"].unique()):
        curve: List[Tuple[int, float]] = []
        severity = 0.0
        group = frost_by_winter.get(wy)
        if group is not None:
            for dow, mean in zip(group["day_of_winter"], group["daily_mean"]):
                severity += abs(float(mean))
                curve.append((int(dow), severity))
        periods.append(WinterPeriod(winter_year=wy, curve=curve))

    logger.info(
        f"Scored {len(periods)} winters "
        f"({sum(1 for p in periods if p.n_frost_days == 0)} without frost days)"
    )
    return periods


def winter_summary_frame(periods: List[WinterPeriod]) -> pd.DataFrame:
    """One row per winter: score, frost-day count and class."""
    return pd.DataFrame(
        [
            {
                "winter_year": p.winter_year,
                "score": p.score,
                "n_frost_days": p.n_frost_days,
                "classification": classify_winter(p.score),
            }
            for p in periods
        ],
        columns=["winter_year", "score", "n_frost_days", "classification"],
    )


def winter_curves_frame(periods: List[WinterPeriod]) -> pd.DataFrame:
    """Long-format curves: one row per (winter_year, day_of_winter)."""
    rows = [
        {"winter_year": p.winter_year, "day_of_winter": dow, "cumulative_severity": severity}
        for p in periods
        for dow, severity in p.curve
    ]
    return pd.DataFrame(rows, columns=["winter_year", "day_of_winter", "cumulative_severity"])
