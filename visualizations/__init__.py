"""
Visualization tools for the station climate indices.

This package renders the structured outputs of analysis.climate:
1. Winter severity curves and scores
2. Record ages and record evolution
3. Sliding-window temperature densities (single plot or animation frames)
"""

from visualizations.climate_plots import (
    plot_density_overlay,
    plot_record_age_histogram,
    plot_record_evolution,
    plot_winter_scores,
    plot_winter_severity,
    save_density_frames,
)

__all__ = [
    "plot_winter_severity",
    "plot_winter_scores",
    "plot_record_age_histogram",
    "plot_record_evolution",
    "plot_density_overlay",
    "save_density_frames",
]
