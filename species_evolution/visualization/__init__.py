"""Visualization utilities for simulation snapshots."""

from .plots import plot_snapshot_history, save_snapshot_plot

__all__ = [
    'plot_snapshot_history',
    'save_snapshot_plot',
]
