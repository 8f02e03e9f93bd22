"""
Climate indices for a single weather station.

Computes, from decades of hourly temperatures:
- Hellmann winter severity curves and classes
- Per-calendar-day record highs/lows, their evolution and ages
- Kernel density estimates over a sliding window of years

Public API:
- ingest, daily_aggregates (timeseries)
- compute_winter_severity, classify_winter (winter)
- compute_record_tracking (records)
- compute_windowed_density, WindowedDensityEstimator (density)
- run_climate_analysis, write_report_csv (pipeline)
"""

from analysis.climate.datastructures import (
    DensityWindow,
    RecordAge,
    RecordAgeHistogram,
    RecordEntry,
    RecordEvolution,
    RecordKind,
    RecordTrackingResult,
    WinterPeriod,
)
from analysis.climate.density import WindowedDensityEstimator, compute_windowed_density
from analysis.climate.errors import ClimateError, DataError, IngestionError
from analysis.climate.pipeline import ClimateReport, run_climate_analysis, write_report_csv
from analysis.climate.records import compute_record_tracking, record_age
from analysis.climate.timeseries import MONTH_NAMES, daily_aggregates, ingest
from analysis.climate.winter import classify_winter, compute_winter_severity

__all__ = [
    "DensityWindow",
    "RecordAge",
    "RecordAgeHistogram",
    "RecordEntry",
    "RecordEvolution",
    "RecordKind",
    "RecordTrackingResult",
    "WinterPeriod",
    "ClimateError",
    "DataError",
    "IngestionError",
    "MONTH_NAMES",
    "ingest",
    "daily_aggregates",
    "compute_winter_severity",
    "classify_winter",
    "compute_record_tracking",
    "record_age",
    "compute_windowed_density",
    "WindowedDensityEstimator",
    "ClimateReport",
    "run_climate_analysis",
    "write_report_csv",
]
