"""
Tests for the Hellmann winter severity index.
"""

import numpy as np
import pandas as pd
import pytest

from analysis.climate.winter import (
    classify_winter,
    compute_winter_severity,
    day_of_winter,
    winter_curves_frame,
    winter_summary_frame,
    winter_year_of,
)

EPS = 1e-6


def _daily(rows):
    """Daily frame from (year, day_of_year, daily_mean) tuples."""
    return pd.DataFrame(rows, columns=["year", "day_of_year", "daily_mean"])


class TestClassification:
    """Test score -> class mapping, including the cut points."""

    def test_very_cold(self):
        assert classify_winter(250.0) == "Very cold"

    @pytest.mark.parametrize(
        "score, expected",
        [
            (0.0, "Extremely gentle"),
            (10.0 - EPS, "Extremely gentle"),
            (10.0, "Very gentle"),
            (20.0 - EPS, "Very gentle"),
            (20.0, "Gentle"),
            (40.0 - EPS, "Gentle"),
            (40.0, "Normal"),
            (100.0, "Normal"),
            (100.0 + EPS, "Cold"),
            (160.0, "Cold"),
            (160.0 + EPS, "Very cold"),
            (300.0, "Very cold"),
            (300.0 + EPS, "Strong"),
            (1000.0, "Strong"),
        ],
    )
    def test_cut_points(self, score, expected):
        """A score on a cut point stays on the Normal side of it."""
        assert classify_winter(score) == expected


class TestCalendarHelpers:
    """Test winter-year and day-of-winter assignment."""

    def test_winter_year(self):
        assert winter_year_of(1996, 305) == 1996
        assert winter_year_of(1996, 365) == 1996
        assert winter_year_of(1997, 1) == 1996
        assert winter_year_of(1997, 90) == 1996

    def test_day_of_winter(self):
        assert day_of_winter(305) == 0
        assert day_of_winter(365) == 60
        assert day_of_winter(1) == 62
        assert day_of_winter(90) == 151


class TestWinterSeverity:
    """Test the cumulative severity fold."""

    def test_running_sum_skips_thawing_days(self):
        """Means [-3.2, 2.1, -4.5]: severity 3.2, unchanged, then 7.7."""
        daily = _daily([(2010, 335, -3.2), (2010, 336, 2.1), (2010, 337, -4.5)])

        periods = compute_winter_severity(daily)

        assert len(periods) == 1
        period = periods[0]
        assert period.winter_year == 2010
        assert [d for d, _ in period.curve] == [30, 32]
        assert [s for _, s in period.curve] == pytest.approx([3.2, 7.7])
        assert period.score == pytest.approx(7.7)
        assert period.n_frost_days == 2

    def test_january_credited_to_previous_winter(self):
        daily = _daily([(2010, 360, -1.0), (2011, 5, -2.0), (2011, 80, -0.5)])

        periods = compute_winter_severity(daily)

        assert [p.winter_year for p in periods] == [2010]
        assert periods[0].curve == [(55, 1.0), (66, 3.0), (141, 3.5)]

    def test_order_follows_dates_not_input(self):
        daily = _daily([(2011, 5, -2.0), (2010, 360, -1.0)])
        curve = compute_winter_severity(daily)[0].curve
        assert curve == [(55, 1.0), (66, 3.0)]

    def test_days_outside_window_ignored(self):
        daily = _daily([
            (2010, 304, -10.0),   # Oct 31
            (2010, 305, -1.0),    # Nov 1
            (2011, 91, -10.0),    # Apr 1
            (2012, 366, -10.0),   # leap-year Dec 31
        ])

        periods = compute_winter_severity(daily)

        assert [p.winter_year for p in periods] == [2010]
        assert periods[0].score == pytest.approx(1.0)

    def test_winter_without_frost_scores_zero(self):
        daily = _daily([(2014, 320, 3.0), (2015, 20, 1.5)])

        periods = compute_winter_severity(daily)

        assert len(periods) == 1
        assert periods[0].curve == []
        assert periods[0].score == 0.0
        assert classify_winter(periods[0].score) == "Extremely gentle"

    def test_days_without_data_skipped(self):
        daily = _daily([(2010, 330, np.nan), (2010, 331, -2.0)])
        assert compute_winter_severity(daily)[0].curve == [(26, 2.0)]

    def test_no_winter_data(self):
        assert compute_winter_severity(_daily([(2010, 200, -5.0)])) == []
        assert compute_winter_severity(_daily([])) == []

    def test_curves_non_decreasing(self, daily):
        periods = compute_winter_severity(daily)

        assert periods, "synthetic data should contain winters"
        for period in periods:
            severities = [s for _, s in period.curve]
            assert all(b >= a for a, b in zip(severities, severities[1:]))
            days = [d for d, _ in period.curve]
            assert days == sorted(days)

    def test_synthetic_winter_years(self, daily):
        """Jan-Mar 2000 forms winter 1999; Nov-Dec 2004 forms winter 2004."""
        years = [p.winter_year for p in compute_winter_severity(daily)]
        assert years == [1999, 2000, 2001, 2002, 2003, 2004]

    def test_idempotent(self, daily):
        assert compute_winter_severity(daily) == compute_winter_severity(daily)


class TestFrames:
    """Test tabular exports."""

    def test_summary_frame(self):
        daily = _daily([(2010, 335, -3.2), (2010, 337, -4.5), (2014, 320, 3.0)])
        summary = winter_summary_frame(compute_winter_severity(daily))

        assert list(summary["winter_year"]) == [2010, 2014]
        assert list(summary["n_frost_days"]) == [2, 0]
        assert list(summary["classification"]) == ["Extremely gentle", "Extremely gentle"]

    def test_curves_frame(self):
        daily = _daily([(2010, 335, -3.2), (2010, 337, -4.5)])
        curves = winter_curves_frame(compute_winter_severity(daily))

        assert list(curves.columns) == ["winter_year", "day_of_winter", "cumulative_severity"]
        assert len(curves) == 2
