"""
End-to-end run of the climate indices over one station's history.

ingest -> daily_aggregates -> {winter severity, high/low records, densities}

The three index computations share one read-only snapshot and do not depend
on each other, so they can run in a thread pool. Re-running on the same
input gives the same report.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional, Tuple

import numpy as np
import pandas as pd

from analysis.climate.datastructures import (
    DensityWindow,
    RecordKind,
    RecordTrackingResult,
    WinterPeriod,
)
from analysis.climate.density import compute_windowed_density, density_windows_frame
from analysis.climate.records import (
    compute_record_tracking,
    current_records_frame,
    record_age_histogram_frame,
    record_evolution_frame,
)
from analysis.climate.timeseries import daily_aggregates, ingest
from analysis.climate.winter import (
    compute_winter_severity,
    winter_curves_frame,
    winter_summary_frame,
)

logger = logging.getLogger(__name__)


@dataclass
class ClimateReport:
    """All indices computed for one station."""

    observations: pd.DataFrame
    daily: pd.DataFrame
    winters: List[WinterPeriod]
    records: Dict[RecordKind, RecordTrackingResult]
    densities: List[DensityWindow]
    window_years: int
    station_id: Optional[str] = None
    years: Tuple[Optional[int], Optional[int]] = (None, None)


def run_climate_analysis(
    observations: pd.DataFrame,
    window_years: int = 10,
    reference_year: Optional[int] = None,
    grid: Optional[np.ndarray] = None,
    max_workers: int = 1,
) -> ClimateReport:
    """Compute every index from a parsed observation series.

    Args:
        observations: Parsed hourly series (see ingest())
        window_years: Density window width
        reference_year: Year record ages are measured from (default: last)
        grid: Temperature grid for the densities
        max_workers: >1 runs the index computations in a thread pool

    Returns:
        ClimateReport

    Raises:
        DataError: If the observations fail ingestion
    """
    enriched = ingest(observations)
    daily = daily_aggregates(enriched)

    tasks = {
        "winters": (compute_winter_severity, (daily,)),
        "records_high": (compute_record_tracking, (daily, RecordKind.HIGH, reference_year)),
        "records_low": (compute_record_tracking, (daily, RecordKind.LOW, reference_year)),
        "densities": (compute_windowed_density, (enriched, window_years, grid)),
    }

    if max_workers > 1:
        with ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="climate") as executor:
            futures = {name: executor.submit(fn, *args) for name, (fn, args) in tasks.items()}
            results = {name: future.result() for name, future in futures.items()}
    else:
        results = {name: fn(*args) for name, (fn, args) in tasks.items()}

    station_id = None
    if "station_id" in enriched.columns and not enriched.empty:
        station_id = str(enriched["station_id"].iloc[0])

    years = (None, None)
    if not enriched.empty:
        years = (int(enriched["year"].min()), int(enriched["year"].max()))

    return ClimateReport(
        observations=enriched,
        daily=daily,
        winters=results["winters"],
        records={
            RecordKind.HIGH: results["records_high"],
            RecordKind.LOW: results["records_low"],
        },
        densities=results["densities"],
        window_years=window_years,
        station_id=station_id,
        years=years,
    )


def write_report_csv(report: ClimateReport, out_dir: Path) -> List[Path]:
    """Write every table of a report as CSV.

    Creates out_dir if needed.

    Returns:
        Paths written, in a fixed order
    """
    out_dir = Path(out_dir)
    out_dir.mkdir(parents=True, exist_ok=True)

    tables: Dict[str, pd.DataFrame] = {
        "winter_severity.csv": winter_summary_frame(report.winters),
        "winter_curves.csv": winter_curves_frame(report.winters),
    }
    for kind, result in report.records.items():
        tables[f"records_{kind.value}.csv"] = current_records_frame(result)
        tables[f"record_evolution_{kind.value}.csv"] = record_evolution_frame(result)
        tables[f"record_age_histogram_{kind.value}.csv"] = record_age_histogram_frame(
            result.histogram, by_month=True
        )
    tables["density_windows.csv"] = density_windows_frame(report.densities)

    written: List[Path] = []
    for name, frame in tables.items():
        path = out_dir / name
        frame.to_csv(path, index=False)
        written.append(path)
        logger.info(f"Wrote {len(frame)} rows to {path}")

    return written
