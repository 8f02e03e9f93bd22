"""
End-to-end test of the report script against a pre-filled offline cache.
"""

import gzip
import importlib.util
import sys

import pytest

from conftest import make_observations
from src.config.settings import get_settings
from src.config.stations import get_station


@pytest.fixture
def report_script(project_root):
    module_spec = importlib.util.spec_from_file_location(
        "run_climate_report", project_root / "scripts" / "run_climate_report.py"
    )
    module = importlib.util.module_from_spec(module_spec)
    module_spec.loader.exec_module(module)
    return module


@pytest.fixture
def isd_cache(tmp_path):
    """ISD-Lite files for De Bilt, 2000-2005, built from synthetic hourly data."""
    station = get_station("debilt")
    cache = tmp_path / "isd-lite"
    obs = make_observations(2000, 2005, station_id="debilt")

    for year, group in obs.groupby(obs["timestamp"].dt.year):
        lines = [
            f"{ts.year:4d} {ts.month:02d} {ts.day:02d} {ts.hour:02d}{int(round(t * 10)):6d}"
            + "-9999".rjust(6) * 7
            for ts, t in zip(group["timestamp"], group["temperature"])
        ]
        path = cache / str(year) / station.isd_filename(year)
        path.parent.mkdir(parents=True)
        path.write_bytes(gzip.compress(("\n".join(lines) + "\n").encode("ascii")))
    return cache


class TestRunClimateReport:
    """Run main() offline, tables only."""

    def test_offline_report(self, report_script, isd_cache, tmp_path, monkeypatch, capsys):
        get_settings.cache_clear()
        out_dir = tmp_path / "output"
        monkeypatch.setattr(sys, "argv", [
            "run_climate_report.py",
            "--station", "debilt",
            "--start-year", "2000",
            "--end-year", "2005",
            "--input-dir", str(isd_cache),
            "--output-dir", str(out_dir),
            "--window-years", "3",
            "--offline",
            "--no-plots",
        ])

        assert report_script.main() == 0

        tables = out_dir / "debilt"
        assert (tables / "winter_severity.csv").exists()
        assert (tables / "records_low.csv").exists()
        assert (tables / "density_windows.csv").exists()
        assert not (tables / "plots").exists()
        assert "CLIMATE REPORT: DE BILT" in capsys.readouterr().out

    def test_offline_report_with_plots(self, report_script, isd_cache, tmp_path, monkeypatch):
        get_settings.cache_clear()
        out_dir = tmp_path / "output"
        monkeypatch.setattr(sys, "argv", [
            "run_climate_report.py",
            "--start-year", "2000",
            "--end-year", "2005",
            "--input-dir", str(isd_cache),
            "--output-dir", str(out_dir),
            "--window-years", "3",
            "--offline",
        ])

        assert report_script.main() == 0

        plots = out_dir / "debilt" / "plots"
        for name in ("winter_severity.png", "winter_scores.png", "record_age_high.png", "record_age_low.png"):
            assert (plots / name).exists()
        assert len(list(plots.glob("record_evolution_high_day*.png"))) == 1
        frames = sorted(p.name for p in (plots / "density_frames").iterdir())
        assert frames == ["density_000_2001_2003.png", "density_001_2002_2004.png"]

    def test_truncated_cache_file_fails(self, report_script, isd_cache, tmp_path, monkeypatch):
        get_settings.cache_clear()
        path = isd_cache / "2001" / get_station("debilt").isd_filename(2001)
        path.write_bytes(path.read_bytes()[:-20])
        monkeypatch.setattr(sys, "argv", [
            "run_climate_report.py",
            "--start-year", "2000",
            "--end-year", "2005",
            "--input-dir", str(isd_cache),
            "--output-dir", str(tmp_path / "output"),
            "--offline",
            "--no-plots",
        ])

        assert report_script.main() == 1
        assert not (tmp_path / "output").exists()

    def test_empty_cache_fails(self, report_script, tmp_path, monkeypatch):
        get_settings.cache_clear()
        monkeypatch.setattr(sys, "argv", [
            "run_climate_report.py",
            "--start-year", "2000",
            "--end-year", "2001",
            "--input-dir", str(tmp_path / "empty"),
            "--output-dir", str(tmp_path / "output"),
            "--offline",
        ])

        assert report_script.main() == 1

    def test_unknown_station(self, report_script, tmp_path, monkeypatch):
        monkeypatch.setattr(sys, "argv", [
            "run_climate_report.py",
            "--station", "atlantis",
            "--start-year", "2000",
            "--end-year", "2001",
            "--offline",
        ])

        assert report_script.main() == 1
