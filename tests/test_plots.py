"""
Smoke tests for the charts: each renders and saves without error.
"""

import matplotlib.pyplot as plt
import pytest

from analysis.climate import RecordKind, run_climate_analysis
from conftest import make_observations
from visualizations.climate_plots import (
    plot_density_overlay,
    plot_record_age_histogram,
    plot_record_evolution,
    plot_winter_scores,
    plot_winter_severity,
    save_density_frames,
)


@pytest.fixture(scope="module")
def report():
    return run_climate_analysis(make_observations(1990, 1997, freq="6h"), window_years=3)


@pytest.fixture(autouse=True)
def close_figures():
    yield
    plt.close("all")


class TestPlots:
    """Render every chart type."""

    def test_winter_severity(self, report, tmp_path):
        path = tmp_path / "winter.png"
        fig, ax = plot_winter_severity(report.winters, highlight=[1995], save_path=path)
        assert path.exists()
        assert ax.get_title() == "Hellmann Winter Severity"

    def test_winter_month_ticks(self, report):
        """Month ticks sit on the day_of_winter of each month's first day."""
        fig, ax = plot_winter_severity(report.winters)
        assert list(ax.get_xticks()) == [0, 30, 62, 93, 121]
        assert [t.get_text() for t in ax.get_xticklabels()] == ["Nov", "Dec", "Jan", "Feb", "Mar"]

    def test_winter_scores(self, report, tmp_path):
        path = tmp_path / "scores.png"
        plot_winter_scores(report.winters, save_path=path)
        assert path.exists()

    @pytest.mark.parametrize("by_month", [False, True])
    def test_record_age_histogram(self, report, tmp_path, by_month):
        path = tmp_path / "ages.png"
        plot_record_age_histogram(report.records[RecordKind.LOW].histogram, by_month=by_month, save_path=path)
        assert path.exists()

    def test_record_evolution(self, report):
        evolution = report.records[RecordKind.HIGH].evolutions[0]
        fig, ax = plot_record_evolution(evolution)
        assert "day 1" in ax.get_title()

    def test_density_overlay(self, report):
        fig, ax = plot_density_overlay(report.densities, n_previous=2)
        assert len(ax.lines) == 3

    def test_density_frames(self, report, tmp_path):
        paths = save_density_frames(report.densities, tmp_path / "frames")

        assert len(paths) == len(report.densities)
        assert paths[0].name == "density_000_1991_1993.png"
        assert all(p.exists() for p in paths)
