"""
Random number source for the simulation.

One numpy Generator stream feeds two samplers:
- uniform indices over the nominal population size (pairing, culling,
  random genome initialization)
- a normal decision variable used per gene during recombination

The normal mean is itself random, drawn once when the source is built.
"""

from typing import Dict, Any, Optional, Tuple
import numpy as np

from .config import POPULATION_SIZE, NORMAL_STD, NORMAL_MEAN_RANGE


class RandomSource:
    """
    Explicitly owned random source.

    Pass a seed for reproducible runs; without one the generator is seeded
    from OS entropy. Not thread-safe.
    """

    def __init__(
        self,
        population_size: int = POPULATION_SIZE,
        seed: Optional[int] = None,
        normal_std: float = NORMAL_STD,
        normal_mean_range: Tuple[int, int] = NORMAL_MEAN_RANGE,
    ):
        self.population_size = population_size
        self.normal_std = normal_std
        self._rng = np.random.default_rng(seed)

        low, high = normal_mean_range
        self.normal_mean = int(self._rng.integers(low, high, endpoint=True))

    def uniform_index(self) -> int:
        """Uniform index in [0, population_size - 1] (nominal size, not live size)."""
        return int(self._rng.integers(0, self.population_size))

    def normal_sample(self) -> int:
        """Normal draw truncated toward zero. May be negative."""
        return int(self._rng.normal(self.normal_mean, self.normal_std))

    def get_state(self) -> Dict[str, Any]:
        """Export generator state (JSON-serializable) for checkpointing."""
        return {
            'population_size': self.population_size,
            'normal_mean': self.normal_mean,
            'normal_std': self.normal_std,
            'bit_generator': self._rng.bit_generator.state,
        }

    @classmethod
    def from_state(cls, state: Dict[str, Any]) -> 'RandomSource':
        """Rebuild a source that continues the exported stream exactly."""
        source = cls(
            population_size=state['population_size'],
            seed=0,
            normal_std=state['normal_std'],
        )
        source.normal_mean = state['normal_mean']
        source._rng.bit_generator.state = state['bit_generator']
        return source

    def __repr__(self) -> str:
        return (
            f"RandomSource(population_size={self.population_size}, "
            f"normal_mean={self.normal_mean}, normal_std={self.normal_std})"
        )
