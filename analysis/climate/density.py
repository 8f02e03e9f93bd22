"""
Windowed kernel density estimation of hourly temperatures.

A window of `window_years` consecutive years slides one year at a time from
min(year) + 1 up to max(year) - 1 (the first and last years are usually
partial and are left out). For every slide position a Gaussian KDE with
Silverman's bandwidth is evaluated on a fixed temperature grid, so successive
curves are directly comparable.

The estimator is a finite, restartable iterable: each iteration recomputes
the windows from the same immutable arrays, in slide order. How many past
curves to overlay, and how, is left to the renderer.
"""

import logging
from typing import Iterator, List, Optional, Union

import numpy as np
import pandas as pd
from scipy.stats import gaussian_kde

from analysis.climate.datastructures import DensityWindow

logger = logging.getLogger(__name__)


DEFAULT_GRID_MIN = -20.0
DEFAULT_GRID_MAX = 35.0
DEFAULT_GRID_POINTS = 512


def make_grid(
    grid_min: float = DEFAULT_GRID_MIN,
    grid_max: float = DEFAULT_GRID_MAX,
    n_points: int = DEFAULT_GRID_POINTS,
) -> np.ndarray:
    """Evenly spaced temperature grid (°C), both ends included."""
    if grid_max <= grid_min:
        raise ValueError(f"grid_max ({grid_max}) must be > grid_min ({grid_min})")
    if n_points < 2:
        raise ValueError(f"n_points must be >= 2, got {n_points}")
    return np.linspace(grid_min, grid_max, n_points)


def window_positions(first_year: int, last_year: int, window_years: int) -> List[int]:
    """Start year of every slide position.

    Example:
        window_positions(1956, 2015, 10) -> [1957, 1958, ..., 2005]  (49 windows)
    """
    if window_years < 1:
        raise ValueError(f"window_years must be >= 1, got {window_years}")
    start_year = first_year + 1
    final_year = last_year - 1
    return list(range(start_year, final_year - window_years + 2))


class WindowedDensityEstimator:
    """Restartable sequence of DensityWindow, one per slide position.

    Args:
        observations: Frame with `year` and `temperature` columns (the
            output of ingest()); null temperatures are ignored
        window_years: Width of every window in years
        grid: Temperature grid to evaluate on; defaults to [-20, 35] °C
        bw_method: Bandwidth rule passed to scipy's gaussian_kde
    """

    def __init__(
        self,
        observations: pd.DataFrame,
        window_years: int,
        grid: Optional[np.ndarray] = None,
        bw_method: Union[str, float] = "silverman",
    ):
        missing = {"year", "temperature"} - set(observations.columns)
        if missing:
            raise ValueError(f"Observations missing columns: {sorted(missing)}")

        self.window_years = int(window_years)
        self.grid = make_grid() if grid is None else np.asarray(grid, dtype=float)
        self.bw_method = bw_method

        if observations.empty:
            self.positions: List[int] = []
        else:
            self.positions = window_positions(
                int(observations["year"].min()),
                int(observations["year"].max()),
                self.window_years,
            )

        valid = observations.loc[observations["temperature"].notna(), ["year", "temperature"]]
        valid = valid.sort_values("year", kind="mergesort")
        self._years = valid["year"].to_numpy(dtype=int)
        self._temps = valid["temperature"].to_numpy(dtype=float)

        if not self.positions:
            logger.warning(
                f"Series too short for {self.window_years}-year windows; no densities produced"
            )

    def __len__(self) -> int:
        return len(self.positions)

    def __iter__(self) -> Iterator[DensityWindow]:
        for start_year in self.positions:
            yield self.estimate(start_year)

    def sample(self, start_year: int) -> np.ndarray:
        """Valid temperatures with year in [start_year, start_year + window_years - 1]."""
        end_year = start_year + self.window_years - 1
        lo = np.searchsorted(self._years, start_year, side="left")
        hi = np.searchsorted(self._years, end_year, side="right")
        return self._temps[lo:hi]

    def estimate(self, start_year: int) -> DensityWindow:
        """KDE for the window starting at start_year.

        Windows with fewer than two distinct readings cannot be smoothed and
        come back with density=None.
        """
        end_year = start_year + self.window_years - 1
        sample = self.sample(start_year)

        if np.unique(sample).size < 2:
            logger.debug(f"Window {start_year}-{end_year}: {sample.size} readings, no density")
            return DensityWindow(
                start_year=start_year,
                end_year=end_year,
                n_obs=int(sample.size),
                grid=self.grid,
            )

        kde = gaussian_kde(sample, bw_method=self.bw_method)
        return DensityWindow(
            start_year=start_year,
            end_year=end_year,
            n_obs=int(sample.size),
            grid=self.grid,
            density=kde(self.grid),
            bandwidth=float(np.sqrt(kde.covariance[0, 0])),
        )


def compute_windowed_density(
    observations: pd.DataFrame,
    window_years: int,
    grid: Optional[np.ndarray] = None,
) -> List[DensityWindow]:
    """Materialize every density window in slide order."""
    estimator = WindowedDensityEstimator(observations, window_years, grid=grid)
    windows = list(estimator)
    logger.info(
        f"Estimated {len(windows)} density windows of {estimator.window_years} years "
        f"({sum(1 for w in windows if not w.has_density)} without enough data)"
    )
    return windows


def density_windows_frame(windows: List[DensityWindow]) -> pd.DataFrame:
    """Long-format curves: one row per (window, grid point)."""
    frames = [
        pd.DataFrame(
            {
                "start_year": w.start_year,
                "end_year": w.end_year,
                "temperature": w.grid,
                "density": w.density,
            }
        )
        for w in windows
        if w.has_density
    ]
    if not frames:
        return pd.DataFrame(columns=["start_year", "end_year", "temperature", "density"])
    return pd.concat(frames, ignore_index=True)
