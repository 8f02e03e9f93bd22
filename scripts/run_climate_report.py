#!/usr/bin/env python3
"""
Station climate report.

Loads hourly ISD-Lite observations for one station, computes the Hellmann
winter severity, high/low record tracking and sliding-window temperature
densities, then writes CSV tables and charts.

Usage:
    # Full De Bilt history, 10-year density windows
    python scripts/run_climate_report.py --station debilt --start-year 1956 --end-year 2015

    # Re-run from the local cache only, tables without charts
    python scripts/run_climate_report.py --station debilt --start-year 1956 --end-year 2015 \
        --offline --no-plots
"""

import argparse
import logging
import sys
from pathlib import Path

import matplotlib

matplotlib.use("Agg")

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from analysis.climate import DataError, RecordKind, run_climate_analysis, write_report_csv
from analysis.climate.density import make_grid
from analysis.climate.winter import classify_winter
from src.config import STATION_IDS, get_settings, get_station
from src.weather.isd_lite import ISDLiteClient

logger = logging.getLogger(__name__)


def write_plots(report, out_dir: Path) -> int:
    """Render every chart of a report; returns number of files written."""
    import matplotlib.pyplot as plt

    from visualizations.climate_plots import (
        plot_record_age_histogram,
        plot_record_evolution,
        plot_winter_scores,
        plot_winter_severity,
        save_density_frames,
    )

    out_dir.mkdir(parents=True, exist_ok=True)
    n_written = 0

    if report.winters:
        plot_winter_severity(report.winters, save_path=out_dir / "winter_severity.png")
        plot_winter_scores(report.winters, save_path=out_dir / "winter_scores.png")
        n_written += 2

    for kind, result in report.records.items():
        if not result.current_records:
            continue
        plot_record_age_histogram(
            result.histogram,
            by_month=True,
            save_path=out_dir / f"record_age_{kind.value}.png",
        )
        # Day with the most record breaks is the most interesting staircase
        busiest = max(result.evolutions, key=lambda e: e.n_broken)
        plot_record_evolution(
            busiest,
            save_path=out_dir / f"record_evolution_{kind.value}_day{busiest.day_of_year:03d}.png",
        )
        n_written += 2
    plt.close("all")

    if report.densities:
        n_written += len(save_density_frames(report.densities, out_dir / "density_frames"))

    return n_written


def main():
    """Main report entry point."""
    settings = get_settings()

    parser = argparse.ArgumentParser(
        description="Compute winter severity, temperature records and windowed densities for a station"
    )
    parser.add_argument(
        "--station",
        type=str,
        default=settings.station_id,
        help=f"Station id (default: {settings.station_id}). Available: {', '.join(STATION_IDS)}"
    )
    parser.add_argument(
        "--start-year",
        type=int,
        required=True,
        help="First year to load (inclusive)"
    )
    parser.add_argument(
        "--end-year",
        type=int,
        required=True,
        help="Last year to load (inclusive)"
    )
    parser.add_argument(
        "--input-dir",
        type=Path,
        default=settings.raw_dir,
        help=f"ISD-Lite cache directory (default: {settings.raw_dir})"
    )
    parser.add_argument(
        "--output-dir",
        type=Path,
        default=settings.output_path,
        help=f"Where tables and charts go (default: {settings.output_path})"
    )
    parser.add_argument(
        "--window-years",
        type=int,
        default=settings.density_window_years,
        help=f"Density window width in years (default: {settings.density_window_years})"
    )
    parser.add_argument(
        "--reference-year",
        type=int,
        default=None,
        help="Year record ages are measured from (default: last year loaded)"
    )
    parser.add_argument(
        "--no-plots",
        action="store_true",
        help="Only write CSV tables"
    )
    parser.add_argument(
        "--offline",
        action="store_true",
        help="Use cached files only, never download"
    )

    args = parser.parse_args()

    # Setup logging
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )

    if args.start_year > args.end_year:
        logger.error(f"Invalid year range: {args.start_year} > {args.end_year}")
        return 1

    try:
        station = get_station(args.station)
    except ValueError as e:
        logger.error(str(e))
        return 1

    client = ISDLiteClient(
        cache_dir=args.input_dir,
        base_url=settings.isd_base_url,
        request_delay=settings.isd_request_delay,
    )

    try:
        observations = client.load_years(station, args.start_year, args.end_year, offline=args.offline)
    except DataError as e:
        logger.error(f"Ingestion failed, aborting: {e}")
        return 1

    if observations.empty:
        logger.error(f"No observations for {station.name} in {args.start_year}-{args.end_year}")
        return 1

    grid = make_grid(settings.density_grid_min, settings.density_grid_max, settings.density_grid_points)

    try:
        report = run_climate_analysis(
            observations,
            window_years=args.window_years,
            reference_year=args.reference_year,
            grid=grid,
            max_workers=settings.max_workers,
        )
    except DataError as e:
        logger.error(f"Invalid observation series, aborting: {e}")
        return 1

    out_dir = args.output_dir / station.station_id
    tables = write_report_csv(report, out_dir)
    n_plots = 0 if args.no_plots else write_plots(report, out_dir / "plots")

    # Print summary
    print("\n" + "="*60)
    print(f"CLIMATE REPORT: {station.name.upper()} ({station.isd_id})")
    print("="*60)
    print(f"Years: {report.years[0]} to {report.years[1]}")
    print(f"Observations: {len(report.observations)} hourly, {len(report.daily)} days")
    print()
    if report.winters:
        harshest = max(report.winters, key=lambda w: w.score)
        latest = report.winters[-1]
        print(f"Winters scored: {len(report.winters)}")
        print(f"  Harshest: {harshest.winter_year}/{harshest.winter_year + 1} "
              f"score {harshest.score:.1f} ({classify_winter(harshest.score)})")
        print(f"  Latest:   {latest.winter_year}/{latest.winter_year + 1} "
              f"score {latest.score:.1f} ({classify_winter(latest.score)})")
    for kind in (RecordKind.HIGH, RecordKind.LOW):
        result = report.records[kind]
        n_breaks = sum(e.n_broken for e in result.evolutions)
        print(f"Record {kind.value}s: {len(result.current_records)} days, {n_breaks} record breaks "
              f"(ages as of {result.reference_year})")
    n_gaps = sum(1 for w in report.densities if not w.has_density)
    print(f"Density windows: {len(report.densities)} x {report.window_years} years ({n_gaps} without data)")
    print()
    print(f"Tables written: {len(tables)} -> {out_dir}")
    print(f"Charts written: {n_plots}")
    print("="*60 + "\n")

    return 0


if __name__ == "__main__":
    sys.exit(main())
