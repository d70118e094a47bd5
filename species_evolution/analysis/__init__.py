"""Analysis utilities for simulation runs."""

from .statistics import (
    BranchProbabilities,
    recombination_branch_probabilities,
    summarize_snapshots,
)

__all__ = [
    'BranchProbabilities',
    'recombination_branch_probabilities',
    'summarize_snapshots',
]
