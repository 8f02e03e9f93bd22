"""
Core data structures for the climate indices.

These are the structured outputs the analysis core hands to the rendering
collaborator. All of them are plain containers: the computations live in
winter.py, records.py and density.py.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Tuple

import numpy as np


class RecordKind(str, Enum):
    """Which daily extreme a record pass tracks."""

    HIGH = "high"
    LOW = "low"

    @property
    def column(self) -> str:
        """Daily aggregate column holding the tracked value."""
        return "daily_high" if self is RecordKind.HIGH else "daily_low"

    def improves(self, candidate: float, current: float) -> bool:
        """True if candidate strictly beats the current record."""
        if self is RecordKind.HIGH:
            return candidate > current
        return candidate < current


@dataclass
class WinterPeriod:
    """Cumulative Hellmann severity curve for one winter.

    Attributes:
        winter_year: Calendar year in which the winter starts (Nov 1)
        curve: Ordered (day_of_winter, cumulative_severity) pairs, one per
            frost day (daily mean below 0 °C), in date order
    """

    winter_year: int
    curve: List[Tuple[int, float]] = field(default_factory=list)

    @property
    def score(self) -> float:
        """Final Hellmann number; 0.0 for a winter without frost days."""
        if not self.curve:
            return 0.0
        return max(severity for _, severity in self.curve)

    @property
    def n_frost_days(self) -> int:
        return len(self.curve)


@dataclass(frozen=True)
class RecordEntry:
    """One record-setting event for a calendar day."""

    day_of_year: int
    year: int
    temperature: float
    kind: RecordKind


@dataclass
class RecordEvolution:
    """Minimal monotonic sequence of records for one calendar day.

    The first entry is the earliest year with data; every later entry
    strictly beats the one before it.
    """

    day_of_year: int
    kind: RecordKind
    entries: List[RecordEntry] = field(default_factory=list)

    @property
    def current(self) -> Optional[RecordEntry]:
        """Record standing at the end of the series."""
        return self.entries[-1] if self.entries else None

    @property
    def n_broken(self) -> int:
        """Times the initial value was beaten."""
        return max(len(self.entries) - 1, 0)


@dataclass(frozen=True)
class RecordAge:
    """Standing record for a calendar day as of a reference year.

    Attributes:
        day_of_year: Calendar day (1-366)
        record_year: Year the standing record was set (earliest on ties)
        temperature: Record value in °C
        age: reference_year - record_year, always >= 0
        month: Month of the date on which the record was set
    """

    day_of_year: int
    record_year: int
    temperature: float
    age: int
    month: int


@dataclass
class RecordAgeHistogram:
    """Record ages for every calendar day, bucketed by integer age.

    Attributes:
        reference_year: Year the ages are measured from
        kind: High or low records
        counts: age -> number of calendar days whose record has that age
        counts_by_month: month -> (age -> count)
    """

    reference_year: int
    kind: RecordKind
    counts: Dict[int, int] = field(default_factory=dict)
    counts_by_month: Dict[int, Dict[int, int]] = field(default_factory=dict)

    @property
    def total_days(self) -> int:
        return sum(self.counts.values())


@dataclass
class RecordTrackingResult:
    """Everything one record pass (high or low) produces."""

    kind: RecordKind
    reference_year: int
    evolutions: List[RecordEvolution]
    current_records: List[RecordAge]
    histogram: RecordAgeHistogram
    records_per_decade: Dict[int, int] = field(default_factory=dict)


@dataclass(eq=False)
class DensityWindow:
    """Kernel density estimate of temperature for one slide position.

    Attributes:
        start_year: First year in the window (inclusive)
        end_year: Last year in the window (inclusive)
        n_obs: Valid hourly readings that went into the estimate
        grid: Temperature grid (°C) the density is evaluated on
        density: Density values on the grid, or None when the window has too
            few distinct readings for a KDE (data gap)
        bandwidth: Kernel bandwidth in °C, None when density is None
    """

    start_year: int
    end_year: int
    n_obs: int
    grid: np.ndarray
    density: Optional[np.ndarray] = None
    bandwidth: Optional[float] = None

    @property
    def has_density(self) -> bool:
        return self.density is not None

    @property
    def span_years(self) -> int:
        return self.end_year - self.start_year + 1

    @property
    def curve(self) -> List[Tuple[float, float]]:
        """Ordered (temperature, density) pairs; empty for a data gap."""
        if self.density is None:
            return []
        return list(zip(self.grid.tolist(), self.density.tolist()))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, DensityWindow):
            return NotImplemented
        if (self.start_year, self.end_year, self.n_obs, self.bandwidth) != (
            other.start_year,
            other.end_year,
            other.n_obs,
            other.bandwidth,
        ):
            return False
        if not np.array_equal(self.grid, other.grid):
            return False
        if self.density is None or other.density is None:
            return self.density is None and other.density is None
        return np.array_equal(self.density, other.density)
