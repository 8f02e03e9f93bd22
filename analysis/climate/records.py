"""
Per-calendar-day temperature record tracking.

For each day of the year (1-366) this module answers:
- How did the record evolve? (every year it was strictly beaten)
- Which record stands as of a reference year, and how old is it?
- How are record ages distributed over the year (optionally per month)?

High and low records are two symmetric passes that differ only in the
comparison (RecordKind.improves). Ties never replace a standing record, so
the earliest year holding a value keeps it.

Day 366 is its own group and is only ever fed by leap years; it is never
folded into day 365.
"""

import logging
from collections import Counter
from typing import Dict, List, Optional

import pandas as pd

from analysis.climate.datastructures import (
    RecordAge,
    RecordAgeHistogram,
    RecordEntry,
    RecordEvolution,
    RecordKind,
    RecordTrackingResult,
)

logger = logging.getLogger(__name__)


def build_evolution(
    day_of_year: int,
    kind: RecordKind,
    years: List[int],
    values: List[float],
) -> RecordEvolution:
    """Scan a year-sorted series and keep only record-setting entries.

    Example (High):
        years  [1990, 1991, 1992, 1993]
        values [ 20.1,  19.0,  20.1,  22.4]
        -> (1990, 20.1), (1993, 22.4)    # 1992 only ties, 1991 is lower

    Args:
        day_of_year: Calendar day the series belongs to
        kind: High or low pass
        years: Strictly increasing years
        values: Daily extreme for each year (no nulls)

    Returns:
        RecordEvolution whose first entry is the earliest year
    """
    evolution = RecordEvolution(day_of_year=day_of_year, kind=kind)
    if not years:
        return evolution

    running = values[0]
    evolution.entries.append(RecordEntry(day_of_year, years[0], running, kind))

    for year, value in zip(years[1:], values[1:]):
        if kind.improves(value, running):
            running = value
            evolution.entries.append(RecordEntry(day_of_year, year, value, kind))

    return evolution


def standing_record(evolution: RecordEvolution, reference_year: int) -> Optional[RecordEntry]:
    """Record in force for a calendar day as of reference_year.

    Returns None when the day has no data at or before reference_year.
    """
    standing = None
    for entry in evolution.entries:
        if entry.year > reference_year:
            break
        standing = entry
    return standing


def record_age(evolution: RecordEvolution, reference_year: int) -> Optional[int]:
    """Years since the standing record was set, or None without data."""
    entry = standing_record(evolution, reference_year)
    if entry is None:
        return None
    return reference_year - entry.year


def _histogram(
    current_records: List[RecordAge],
    reference_year: int,
    kind: RecordKind,
) -> RecordAgeHistogram:
    counts = Counter(r.age for r in current_records)

    by_month: Dict[int, Counter] = {}
    for r in current_records:
        by_month.setdefault(r.month, Counter())[r.age] += 1

    return RecordAgeHistogram(
        reference_year=reference_year,
        kind=kind,
        counts=dict(sorted(counts.items())),
        counts_by_month={
            month: dict(sorted(by_month[month].items())) for month in sorted(by_month)
        },
    )


def _records_per_decade(evolutions: List[RecordEvolution]) -> Dict[int, int]:
    """Count record-breaking events per decade.

    The first entry of each evolution only establishes the baseline and is
    not counted.
    """
    counts: Counter = Counter()
    for evolution in evolutions:
        for entry in evolution.entries[1:]:
            counts[(entry.year // 10) * 10] += 1
    return dict(sorted(counts.items()))


def compute_record_tracking(
    daily: pd.DataFrame,
    kind: RecordKind = RecordKind.HIGH,
    reference_year: Optional[int] = None,
) -> RecordTrackingResult:
    """Run one record pass over the daily aggregates.

    Args:
        daily: Output of daily_aggregates() (needs year, day_of_year, month
            and the kind's column)
        kind: RecordKind.HIGH (daily_high, max) or RecordKind.LOW
            (daily_low, min); plain "high"/"low" strings are accepted
        reference_year: Year record ages are measured from; defaults to the
            last year in the data

    Returns:
        RecordTrackingResult with evolutions and current records ordered by
        day_of_year. Days without any valid value are skipped.
    """
    kind = RecordKind(kind)
    column = kind.column

    if reference_year is None:
        reference_year = int(daily["year"].max()) if not daily.empty else 0

    valid = daily.loc[daily[column].notna(), ["year", "day_of_year", "month", column]]
    valid = valid.sort_values(["day_of_year", "year"], kind="mergesort")

    evolutions: List[RecordEvolution] = []
    current_records: List[RecordAge] = []

    for doy, group in valid.groupby("day_of_year", sort=True):
        doy = int(doy)
        years = [int(y) for y in group["year"]]
        values = [float(v) for v in group[column]]
        months = dict(zip(years, (int(m) for m in group["month"])))

        evolution = build_evolution(doy, kind, years, values)
        evolutions.append(evolution)

        entry = standing_record(evolution, reference_year)
        if entry is None:
            continue
        current_records.append(
            RecordAge(
                day_of_year=doy,
                record_year=entry.year,
                temperature=entry.temperature,
                age=reference_year - entry.year,
                month=months[entry.year],
            )
        )

    result = RecordTrackingResult(
        kind=kind,
        reference_year=reference_year,
        evolutions=evolutions,
        current_records=current_records,
        histogram=_histogram(current_records, reference_year, kind),
        records_per_decade=_records_per_decade(evolutions),
    )

    logger.info(
        f"Tracked {kind.value} records for {len(evolutions)} calendar days "
        f"({sum(e.n_broken for e in evolutions)} record breaks, reference year {reference_year})"
    )
    return result


def record_evolution_frame(result: RecordTrackingResult) -> pd.DataFrame:
    """Long-format record history: one row per record-setting event."""
    rows = [
        {
            "day_of_year": entry.day_of_year,
            "year": entry.year,
            "temperature": entry.temperature,
            "kind": entry.kind.value,
        }
        for evolution in result.evolutions
        for entry in evolution.entries
    ]
    return pd.DataFrame(rows, columns=["day_of_year", "year", "temperature", "kind"])


def current_records_frame(result: RecordTrackingResult) -> pd.DataFrame:
    """Standing record per calendar day as of the reference year."""
    rows = [
        {
            "day_of_year": r.day_of_year,
            "month": r.month,
            "record_year": r.record_year,
            "temperature": r.temperature,
            "age": r.age,
        }
        for r in result.current_records
    ]
    return pd.DataFrame(rows, columns=["day_of_year", "month", "record_year", "temperature", "age"])


def record_age_histogram_frame(histogram: RecordAgeHistogram, by_month: bool = False) -> pd.DataFrame:
    """Histogram as a table: (age, n_days) or (month, age, n_days)."""
    if not by_month:
        return pd.DataFrame(
            [{"age": age, "n_days": n} for age, n in histogram.counts.items()],
            columns=["age", "n_days"],
        )
    return pd.DataFrame(
        [
            {"month": month, "age": age, "n_days": n}
            for month, counts in histogram.counts_by_month.items()
            for age, n in counts.items()
        ],
        columns=["month", "age", "n_days"],
    )
