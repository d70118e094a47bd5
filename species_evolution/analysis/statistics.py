"""
Statistical analysis utilities for simulation runs.

Provides functions for:
- Exact recombination branch probabilities under the normal decision draw
- Per-snapshot summaries of sampled fitness values
"""

import math
from dataclasses import dataclass, asdict
from typing import List, Dict, Any
import numpy as np

from ..evolution.config import NORMAL_STD
from ..evolution.individual import AMPLIFY_ABOVE, INHERIT_SELF_ABOVE, branch_residue


@dataclass
class BranchProbabilities:
    """Probability of each recombination branch for one gene."""
    amplify: float
    inherit_self: float
    inherit_partner: float

    def to_dict(self) -> Dict[str, float]:
        return asdict(self)


def recombination_branch_probabilities(
    mean: float,
    std: float = NORMAL_STD,
    n_sigma: float = 12.0,
) -> BranchProbabilities:
    """
    Exact per-gene branch probabilities of Individual.recombine_with.

    The decision draw x ~ Normal(mean, std) is truncated toward zero to an
    integer k, then reduced as an unsigned 64-bit value,
    r = (k mod 2**64) % 10, so -1 maps to 5 and -7 to 9. Truncation maps
    [k, k + 1) to k for k > 0, (k - 1, k] to k for k < 0 and (-1, 1) to 0,
    so zero collects twice the mass of its neighbours.

    Args:
        mean: Mean of the decision draw
        std: Standard deviation of the decision draw
        n_sigma: Integers within mean +/- n_sigma * std are summed

    Returns:
        BranchProbabilities (amplify: r > 8, inherit_self: 5 < r <= 8,
        inherit_partner: r <= 5)
    """
    if std <= 0:
        raise ValueError(f"std must be positive, got {std}")

    low = math.floor(mean - n_sigma * std) - 1
    high = math.ceil(mean + n_sigma * std) + 1

    residue_mass = [0.0] * 10
    for k in range(low, high + 1):
        if k > 0:
            p = _normal_cdf((k + 1 - mean) / std) - _normal_cdf((k - mean) / std)
        elif k < 0:
            p = _normal_cdf((k - mean) / std) - _normal_cdf((k - 1 - mean) / std)
        else:
            p = _normal_cdf((1 - mean) / std) - _normal_cdf((-1 - mean) / std)
        residue_mass[branch_residue(k)] += p

    amplify = sum(residue_mass[AMPLIFY_ABOVE + 1:])
    inherit_self = sum(residue_mass[INHERIT_SELF_ABOVE + 1:AMPLIFY_ABOVE + 1])
    inherit_partner = sum(residue_mass[:INHERIT_SELF_ABOVE + 1])
    return BranchProbabilities(
        amplify=amplify,
        inherit_self=inherit_self,
        inherit_partner=inherit_partner,
    )


def summarize_snapshots(rows: List[List[int]]) -> List[Dict[str, Any]]:
    """
    Summarize each snapshot line of sampled fitness values.

    Values can exceed the float64 integer range, so best/worst are taken on
    Python ints and only the median goes through numpy.
    """
    summaries = []
    for i, row in enumerate(rows):
        if not row:
            summaries.append({'snapshot': i, 'n_samples': 0})
            continue
        summaries.append({
            'snapshot': i,
            'n_samples': len(row),
            'best': max(row),
            'worst': min(row),
            'median': float(np.median(np.array(row, dtype=float))),
            'log10_best': math.log10(max(row)) if max(row) > 0 else 0.0,
        })
    return summaries


def _normal_cdf(x: float) -> float:
    """Standard normal CDF."""
    return 0.5 * (1 + math.erf(x / math.sqrt(2)))
