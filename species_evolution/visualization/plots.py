"""
Matplotlib-based visualization for simulation snapshots.

These functions create static plots of the sampled fitness trajectories.
"""

from typing import Optional, List, Tuple, Union
from pathlib import Path
import numpy as np

# Matplotlib imports with non-GUI backend
import matplotlib
matplotlib.use('Agg')
import matplotlib.pyplot as plt

from ..core.persistence import read_snapshots


def plot_snapshot_history(
    rows: List[List[int]],
    snapshot_every: Optional[int] = None,
    figsize: Tuple[int, int] = (10, 5),
    title: Optional[str] = None,
    ax: Optional[plt.Axes] = None,
) -> plt.Figure:
    """
    Plot sampled fitness values across snapshots.

    One line per sample column (rank 0 is the fittest individual). Fitness
    spans many orders of magnitude, so the y axis is logarithmic.

    Args:
        rows: Snapshot lines as returned by read_snapshots()
        snapshot_every: Generations between snapshots, to label the x axis
            in generations instead of snapshot index
        figsize: Figure size
        title: Plot title
        ax: Existing axes to plot on

    Returns:
        matplotlib Figure
    """
    if ax is None:
        fig, ax = plt.subplots(figsize=figsize)
    else:
        fig = ax.figure

    n_columns = max((len(row) for row in rows), default=0)
    x = np.arange(len(rows))
    if snapshot_every:
        x = x * snapshot_every

    cmap = plt.get_cmap('viridis')
    for col in range(n_columns):
        # float64 is enough for plotting; zeros cannot go on a log axis
        values = np.array(
            [float(row[col]) if col < len(row) else np.nan for row in rows]
        )
        values[values <= 0] = np.nan
        ax.plot(
            x, values,
            color=cmap(col / max(n_columns - 1, 1)),
            linewidth=1.5,
            label=f'rank {col}',
        )

    ax.set_yscale('log')
    ax.set_xlabel('Generation' if snapshot_every else 'Snapshot')
    ax.set_ylabel('Fitness')
    ax.grid(True, alpha=0.3)
    if n_columns:
        ax.legend(loc='upper left', fontsize=8)
    ax.set_title(title or 'Sampled Fitness per Snapshot')

    plt.tight_layout()
    return fig


def save_snapshot_plot(
    csv_path: Union[str, Path],
    output_path: Union[str, Path],
    snapshot_every: Optional[int] = None,
) -> Path:
    """Read a snapshot file and save its fitness plot as an image."""
    rows = read_snapshots(csv_path)
    fig = plot_snapshot_history(rows, snapshot_every=snapshot_every)

    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    fig.savefig(output_path, dpi=150, bbox_inches='tight')
    plt.close(fig)
    print(f'Saved: {output_path}')
    return output_path
