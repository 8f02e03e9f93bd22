"""
Charts for the climate indices.

Renders the structured outputs of analysis.climate:
- Winter severity curves over the class bands, and final scores per winter
- Record age histogram (optionally stacked by month) and record evolution
- Density windows, with a fading trail of previous windows, and per-window
  PNG frames for assembling an animation

Every plot function returns (fig, ax) and optionally saves a PNG.
"""

from pathlib import Path
from typing import Dict, List, Optional, Sequence

import matplotlib.pyplot as plt
import numpy as np
import seaborn as sns

from analysis.climate.datastructures import (
    DensityWindow,
    RecordAgeHistogram,
    RecordEvolution,
    RecordKind,
    WinterPeriod,
)
from analysis.climate.timeseries import MONTH_NAMES
from analysis.climate.winter import WINTER_CLASS_BANDS, classify_winter, day_of_winter

sns.set_style("whitegrid")

# Mildest to harshest
CLASS_COLORS: Dict[str, str] = {
    "Extremely gentle": "#d73027",
    "Very gentle": "#fc8d59",
    "Gentle": "#fee090",
    "Normal": "#e0f3f8",
    "Cold": "#91bfdb",
    "Very cold": "#4575b4",
    "Strong": "#313695",
}

KIND_COLORS = {RecordKind.HIGH: "#C0392B", RecordKind.LOW: "#2E86AB"}

# First day of Nov..Mar (non-leap day_of_year) on the day_of_winter axis
WINTER_MONTH_TICKS = [int(d) for d in day_of_winter([305, 335, 1, 32, 60])]
WINTER_MONTH_LABELS = ["Nov", "Dec", "Jan", "Feb", "Mar"]


def _save(fig, save_path: Optional[Path], what: str) -> None:
    if save_path is None:
        return
    save_path = Path(save_path)
    save_path.parent.mkdir(parents=True, exist_ok=True)
    fig.savefig(save_path, bbox_inches="tight", dpi=120)
    print(f"Saved {what} to {save_path}")


def plot_winter_severity(
    winters: List[WinterPeriod],
    highlight: Optional[Sequence[int]] = None,
    title: Optional[str] = None,
    save_path: Optional[Path] = None,
):
    """Cumulative Hellmann curves for all winters over the class bands.

    Args:
        winters: Output of compute_winter_severity()
        highlight: Winter years drawn in colour (default: the latest one)
        title: Optional plot title
        save_path: If provided, save PNG here

    Returns:
        Tuple of (fig, ax) matplotlib objects
    """
    if highlight is None:
        highlight = [winters[-1].winter_year] if winters else []
    highlight = set(highlight)

    fig, ax = plt.subplots(figsize=(12, 7))

    top = max([w.score for w in winters] + [350.0]) * 1.05
    for label, lower, upper in WINTER_CLASS_BANDS:
        ax.axhspan(lower, upper if upper is not None else top, color=CLASS_COLORS[label], alpha=0.25, lw=0)
        ax.text(151, lower + 2, label, fontsize=9, color="dimgray", ha="right", va="bottom")

    for w in winters:
        if not w.curve:
            continue
        days = [0] + [d for d, _ in w.curve] + [151]
        severity = [0.0] + [s for _, s in w.curve] + [w.score]
        if w.winter_year in highlight:
            ax.step(days, severity, where="post", linewidth=2.5, label=f"{w.winter_year}/{w.winter_year + 1}")
        else:
            ax.step(days, severity, where="post", color="gray", alpha=0.3, linewidth=1)

    ax.set_xlim(0, 151)
    ax.set_ylim(0, top)
    ax.set_xticks(WINTER_MONTH_TICKS)
    ax.set_xticklabels(WINTER_MONTH_LABELS)
    ax.set_ylabel("Cumulative severity (°C·day)", fontsize=12)
    ax.set_title(title or "Hellmann Winter Severity", fontsize=14, fontweight="bold")
    if highlight:
        ax.legend(loc="upper left", fontsize=10)

    plt.tight_layout()
    _save(fig, save_path, "winter severity curves")
    return fig, ax


def plot_winter_scores(
    winters: List[WinterPeriod],
    title: Optional[str] = None,
    save_path: Optional[Path] = None,
):
    """Bar chart of final scores per winter, coloured by class."""
    fig, ax = plt.subplots(figsize=(14, 5))

    years = [w.winter_year for w in winters]
    scores = [w.score for w in winters]
    colors = [CLASS_COLORS[classify_winter(s)] for s in scores]
    ax.bar(years, scores, color=colors, edgecolor="black", linewidth=0.3)

    for _, lower, _ in WINTER_CLASS_BANDS[1:]:
        ax.axhline(lower, color="gray", linestyle=":", linewidth=1, alpha=0.6)

    ax.set_xlabel("Winter (starting year)", fontsize=12)
    ax.set_ylabel("Hellmann score (°C·day)", fontsize=12)
    ax.set_title(title or "Winter Severity per Year", fontsize=14, fontweight="bold")

    plt.tight_layout()
    _save(fig, save_path, "winter scores")
    return fig, ax


def plot_record_age_histogram(
    histogram: RecordAgeHistogram,
    by_month: bool = False,
    title: Optional[str] = None,
    save_path: Optional[Path] = None,
):
    """Histogram of record ages; stacked by month if by_month."""
    fig, ax = plt.subplots(figsize=(14, 6))

    max_age = max(histogram.counts) if histogram.counts else 0
    ages = np.arange(0, max_age + 1)

    if by_month:
        palette = sns.color_palette("husl", 12)
        bottom = np.zeros(len(ages))
        for month in sorted(MONTH_NAMES):
            counts = histogram.counts_by_month.get(month, {})
            heights = np.array([counts.get(a, 0) for a in ages])
            ax.bar(ages, heights, bottom=bottom, color=palette[month - 1], label=MONTH_NAMES[month], width=0.9)
            bottom += heights
        ax.legend(ncol=2, fontsize=8, loc="upper right")
    else:
        heights = [histogram.counts.get(a, 0) for a in ages]
        ax.bar(ages, heights, color=KIND_COLORS[histogram.kind], width=0.9)

    ax.set_xlabel(f"Record age in {histogram.reference_year} (years)", fontsize=12)
    ax.set_ylabel("Calendar days", fontsize=12)
    ax.set_title(
        title or f"Age of daily {histogram.kind.value} records",
        fontsize=14,
        fontweight="bold",
    )

    plt.tight_layout()
    _save(fig, save_path, "record age histogram")
    return fig, ax


def plot_record_evolution(
    evolution: RecordEvolution,
    title: Optional[str] = None,
    save_path: Optional[Path] = None,
):
    """Staircase of successive records for one calendar day."""
    fig, ax = plt.subplots(figsize=(10, 5))

    years = [e.year for e in evolution.entries]
    temps = [e.temperature for e in evolution.entries]
    ax.step(years, temps, where="post", color=KIND_COLORS[evolution.kind], linewidth=2)
    ax.scatter(years, temps, color=KIND_COLORS[evolution.kind], zorder=3)

    ax.set_xlabel("Year", fontsize=12)
    ax.set_ylabel("Temperature (°C)", fontsize=12)
    ax.set_title(
        title or f"Record {evolution.kind.value} for day {evolution.day_of_year}",
        fontsize=14,
        fontweight="bold",
    )

    plt.tight_layout()
    _save(fig, save_path, "record evolution")
    return fig, ax


def plot_density_overlay(
    windows: List[DensityWindow],
    index: Optional[int] = None,
    n_previous: int = 5,
    ylim: Optional[float] = None,
    title: Optional[str] = None,
    save_path: Optional[Path] = None,
):
    """Draw one density window with a fading trail of earlier windows.

    Args:
        windows: Output of compute_windowed_density(), in slide order
        index: Window to draw in front (default: last)
        n_previous: How many earlier windows to keep as a trail
        ylim: Fixed y-axis top, so successive frames share a scale
        title: Optional plot title
        save_path: If provided, save PNG here

    Returns:
        Tuple of (fig, ax) matplotlib objects
    """
    if index is None:
        index = len(windows) - 1

    fig, ax = plt.subplots(figsize=(10, 6))

    first = max(0, index - n_previous)
    for i in range(first, index + 1):
        w = windows[i]
        if not w.has_density:
            continue
        if i == index:
            ax.plot(w.grid, w.density, color="#C0392B", linewidth=2.5, label=f"{w.start_year}-{w.end_year}")
        else:
            alpha = 0.15 + 0.5 * (i - first + 1) / (index - first + 1)
            ax.plot(w.grid, w.density, color="gray", alpha=alpha, linewidth=1)

    current = windows[index]
    ax.set_xlim(current.grid[0], current.grid[-1])
    if ylim is not None:
        ax.set_ylim(0, ylim)
    ax.set_xlabel("Temperature (°C)", fontsize=12)
    ax.set_ylabel("Density", fontsize=12)
    ax.set_title(
        title or f"Hourly temperature distribution, {current.start_year}-{current.end_year}",
        fontsize=14,
        fontweight="bold",
    )
    if current.has_density:
        ax.legend(loc="upper left", fontsize=10)

    plt.tight_layout()
    _save(fig, save_path, "density overlay")
    return fig, ax


def save_density_frames(
    windows: List[DensityWindow],
    out_dir: Path,
    n_previous: int = 5,
) -> List[Path]:
    """Write one PNG per window, in slide order, for an animation.

    All frames share the y-axis of the tallest curve.

    Returns:
        Paths written
    """
    out_dir = Path(out_dir)
    out_dir.mkdir(parents=True, exist_ok=True)

    peaks = [float(w.density.max()) for w in windows if w.has_density]
    ylim = max(peaks) * 1.1 if peaks else None

    paths: List[Path] = []
    for i, w in enumerate(windows):
        path = out_dir / f"density_{i:03d}_{w.start_year}_{w.end_year}.png"
        fig, _ = plot_density_overlay(windows, index=i, n_previous=n_previous, ylim=ylim)
        fig.savefig(path, bbox_inches="tight", dpi=100)
        plt.close(fig)
        paths.append(path)

    print(f"Saved {len(paths)} density frames to {out_dir}")
    return paths
