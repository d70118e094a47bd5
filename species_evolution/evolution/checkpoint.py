"""
Checkpointing for simulation runs.

Enables:
- Saving simulation state (population, RNG stream) for resumption
- Recording generation history
"""

from dataclasses import dataclass, asdict
from typing import List, Dict, Any
from pathlib import Path
from datetime import datetime
import json

from .individual import Individual


@dataclass
class EvolutionCheckpoint:
    """
    Checkpoint for resuming simulation runs.

    Contains all state needed to continue from a saved generation with the
    same random stream.
    """
    run_id: str
    generation: int
    state: str                        # EngineState value
    population: List[Dict[str, Any]]  # Serialized individuals
    random_state: Dict[str, Any]      # RandomSource.get_state()
    history: Dict[str, List[Any]]     # Generation-by-generation stats
    config: Dict[str, Any]            # EvolutionConfig.to_dict()
    timestamp: str

    def to_dict(self) -> Dict[str, Any]:
        """Convert to JSON-serializable dictionary."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'EvolutionCheckpoint':
        """Create from dictionary."""
        return cls(**data)

    def save(self, path: Path) -> None:
        """Save checkpoint to JSON file."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, 'w') as f:
            json.dump(self.to_dict(), f, indent=2)

    @classmethod
    def load(cls, path: Path) -> 'EvolutionCheckpoint':
        """Load checkpoint from JSON file."""
        with open(path, 'r') as f:
            data = json.load(f)
        return cls.from_dict(data)

    def get_population(self) -> List[Individual]:
        """Deserialize population to Individual objects."""
        return [Individual.from_dict(d) for d in self.population]


@dataclass
class GenerationStats:
    """Statistics for a single generation."""
    generation: int
    best_fitness: int
    mean_fitness: float
    min_fitness: int
    population_size: int
    pairing_attempts: int
    forced_pairings: int
    timestamp: str

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


class EvolutionHistory:
    """
    Tracks simulation progress over generations.

    The driver records stats at snapshot cadence rather than every
    generation, since a run can last millions of generations.
    """

    def __init__(self):
        self.generations: List[GenerationStats] = []
        self.fitness_trajectory: List[int] = []

    def record(self, stats: GenerationStats) -> None:
        self.generations.append(stats)
        self.fitness_trajectory.append(stats.best_fitness)

    @property
    def total_forced_pairings(self) -> int:
        return sum(g.forced_pairings for g in self.generations)

    def to_dict(self) -> Dict[str, Any]:
        """Convert history to dictionary for serialization."""
        return {
            'generations': [g.to_dict() for g in self.generations],
            'fitness_trajectory': self.fitness_trajectory,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'EvolutionHistory':
        """Restore history from dictionary."""
        history = cls()
        history.generations = [
            GenerationStats(**g) for g in data.get('generations', [])
        ]
        history.fitness_trajectory = data.get('fitness_trajectory', [])
        return history

    def __len__(self) -> int:
        return len(self.generations)


def generate_run_id() -> str:
    """Generate unique run identifier."""
    import uuid
    timestamp = datetime.now().strftime('%Y%m%d_%H%M%S')
    short_uuid = uuid.uuid4().hex[:6]
    return f"evo_{timestamp}_{short_uuid}"
