"""
Run configuration for the species evolution simulation.

All tunable numbers of the reference run live here as named constants and
are gathered into EvolutionConfig. Nothing is read from the environment.
"""

from dataclasses import dataclass, asdict
from typing import Dict, Any, Optional, Tuple


# Reference configuration
POPULATION_SIZE = 5000
GENOME_LENGTH = 10
CROSS_COUNT = 20  # children bred and individuals culled per generation

# Largest max fitness still allowed to breed. Leaves headroom below 2**64 - 1
# for the amplification branch of recombination.
HALT_THRESHOLD = 18446744071749127043
UINT64_MASK = (1 << 64) - 1

# Recombination decision variable: Normal(mean, NORMAL_STD), mean drawn once
# uniformly from NORMAL_MEAN_RANGE (inclusive).
NORMAL_STD = 2.0
NORMAL_MEAN_RANGE = (0, 10)

# Cap on the accept/reject pairing loop before the best pair seen is taken
MAX_PAIR_ATTEMPTS = 100_000

# Snapshots
SNAPSHOT_EVERY = 200
SNAPSHOT_STRIDE = 900
DEFAULT_SNAPSHOT_PATH = 'parents.csv'


@dataclass
class EvolutionConfig:
    """Configuration for a simulation run."""
    # Population parameters
    population_size: int = POPULATION_SIZE
    genome_length: int = GENOME_LENGTH
    cross_count: int = CROSS_COUNT

    # Stopping rule
    halt_threshold: int = HALT_THRESHOLD
    max_generations: Optional[int] = None

    # Recombination sampling
    normal_std: float = NORMAL_STD
    normal_mean_range: Tuple[int, int] = NORMAL_MEAN_RANGE
    max_pair_attempts: int = MAX_PAIR_ATTEMPTS

    # Snapshots
    snapshot_every: int = SNAPSHOT_EVERY
    snapshot_stride: int = SNAPSHOT_STRIDE
    snapshot_path: str = DEFAULT_SNAPSHOT_PATH

    def __post_init__(self):
        """Validate configuration consistency."""
        # JSON round trips turn tuples into lists
        self.normal_mean_range = tuple(self.normal_mean_range)

        if self.population_size < 2:
            raise ValueError(
                f"population_size must be at least 2, got {self.population_size}"
            )
        if self.genome_length < 1:
            raise ValueError(f"genome_length must be positive, got {self.genome_length}")
        if not 0 < self.cross_count < self.population_size:
            raise ValueError(
                f"cross_count ({self.cross_count}) must be in "
                f"[1, population_size - 1] = [1, {self.population_size - 1}]"
            )
        if not 0 <= self.halt_threshold <= UINT64_MASK:
            raise ValueError(f"halt_threshold {self.halt_threshold} is not a uint64")
        if self.normal_std <= 0:
            raise ValueError(f"normal_std must be positive, got {self.normal_std}")
        low, high = self.normal_mean_range
        if low > high:
            raise ValueError(f"Invalid normal_mean_range {self.normal_mean_range}")
        if self.max_pair_attempts < 1:
            raise ValueError("max_pair_attempts must be at least 1")
        if self.snapshot_every < 1 or self.snapshot_stride < 1:
            raise ValueError("snapshot_every and snapshot_stride must be positive")
        if self.max_generations is not None and self.max_generations < 0:
            raise ValueError("max_generations cannot be negative")

    def to_dict(self) -> Dict[str, Any]:
        d = asdict(self)
        d['normal_mean_range'] = list(self.normal_mean_range)
        return d

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'EvolutionConfig':
        return cls(**data)
