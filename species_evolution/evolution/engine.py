"""
Generational evolution engine.

Each call to step() runs one generation on the engine-owned population:
1. Check max fitness against the halt threshold
2. Breed cross_count children from fitness-compatible pairs
3. Cull cross_count random individuals
4. Merge the children into the population
5. Re-sort by descending fitness
"""

from enum import Enum
from typing import List, Optional, Tuple
from pathlib import Path
from datetime import datetime

from .config import EvolutionConfig
from .individual import Individual
from .random_source import RandomSource
from .population import (
    create_initial_population,
    max_fitness,
    sort_by_fitness,
)
from .checkpoint import (
    EvolutionCheckpoint,
    EvolutionHistory,
    GenerationStats,
    generate_run_id,
)


class EngineState(Enum):
    """Lifecycle of a simulation run. CONVERGED and HALTED are terminal."""
    RUNNING = 'running'
    CONVERGED = 'converged'  # generation budget completed
    HALTED = 'halted'        # max fitness crossed the overflow guard

    @property
    def is_terminal(self) -> bool:
        return self is not EngineState.RUNNING


class EvolutionEngine:
    """
    Evolution engine for a fixed-size population of Individuals.

    The random source is injected so that runs are reproducible under a
    fixed seed and so tests can script the draws.
    """

    def __init__(
        self,
        config: Optional[EvolutionConfig] = None,
        random_source: Optional[RandomSource] = None,
        population: Optional[List[Individual]] = None,
        run_id: Optional[str] = None,
        verbose: bool = False,
    ):
        """
        Initialize evolution engine.

        Args:
            config: Run configuration (reference configuration if omitted)
            random_source: Random source (seeded from OS entropy if omitted)
            population: Starting population; call initialize_population()
                to build a random one instead
            run_id: Optional run identifier (auto-generated if not provided)
            verbose: Print a notice whenever pairing falls back to the best
                pair seen
        """
        self.config = config or EvolutionConfig()
        self.random_source = random_source or RandomSource(
            population_size=self.config.population_size,
            normal_std=self.config.normal_std,
            normal_mean_range=self.config.normal_mean_range,
        )
        self.population: List[Individual] = population if population is not None else []
        self.run_id = run_id or generate_run_id()
        self.verbose = verbose

        self.state = EngineState.RUNNING
        self.generation = 0
        self.last_stats: Optional[GenerationStats] = None
        self.history = EvolutionHistory()

    def initialize_population(self) -> None:
        """Create a random starting population and reset run state."""
        self.population = create_initial_population(
            self.random_source,
            population_size=self.config.population_size,
            genome_length=self.config.genome_length,
        )
        self.state = EngineState.RUNNING
        self.generation = 0
        self.last_stats = None
        self.history = EvolutionHistory()

    def step(self) -> EngineState:
        """
        Execute one generation of evolution.

        Terminal engines are left untouched.

        Returns:
            Engine state after the generation
        """
        if self.state.is_terminal:
            return self.state

        if len(self.population) < 2:
            raise ValueError(
                f"Population needs at least 2 individuals, has {len(self.population)}"
            )

        # 1. Convergence check
        best = max_fitness(self.population)
        if best > self.config.halt_threshold:
            self.state = EngineState.HALTED
            return self.state

        if (self.config.max_generations is not None
                and self.generation >= self.config.max_generations):
            self.state = EngineState.CONVERGED
            return self.state

        # 2. Recombination against the pre-cull population
        acceptance = best >> 1
        children = []
        total_attempts = 0
        forced = 0
        for _ in range(self.config.cross_count):
            s1, s2, attempts, was_forced = self._select_pair(acceptance)
            total_attempts += attempts
            if was_forced:
                forced += 1
                if self.verbose:
                    print(
                        f"Generation #{self.generation}: no pair within "
                        f"{acceptance} after {attempts} attempts, "
                        f"using closest pair ({s1}, {s2})"
                    )
            children.append(
                self.population[s1].recombine_with(self.population[s2], self.random_source)
            )

        # 3. Culling, removals shift later indices
        for _ in range(self.config.cross_count):
            self.population.pop(self._sample_live_index())

        # 4. Merge
        self.population.extend(children)

        # 5. Resort
        sort_by_fitness(self.population)

        self.generation += 1
        self.last_stats = self._compute_stats(total_attempts, forced)
        return self.state

    def _sample_live_index(self) -> int:
        """Nominal-range uniform index, resampled until valid for the live population."""
        index = self.random_source.uniform_index()
        while index >= len(self.population):
            index = self.random_source.uniform_index()
        return index

    def _select_pair(self, acceptance: int) -> Tuple[int, int, int, bool]:
        """
        Rejection-sample two distinct indices whose fitness difference is
        at most acceptance.

        After max_pair_attempts rejections the closest pair seen is used.

        Returns:
            (first index, second index, attempts used, forced)
        """
        closest: Optional[Tuple[int, int, int]] = None
        for attempt in range(1, self.config.max_pair_attempts + 1):
            s1 = self._sample_live_index()
            s2 = self._sample_live_index()
            while s1 == s2:
                s2 = self._sample_live_index()

            diff = self.population[s1].fitness_difference(self.population[s2])
            if diff <= acceptance:
                return s1, s2, attempt, False

            if closest is None or diff < closest[2]:
                closest = (s1, s2, diff)

        return closest[0], closest[1], self.config.max_pair_attempts, True

    def _compute_stats(self, attempts: int, forced: int) -> GenerationStats:
        fitnesses = [individual.fitness() for individual in self.population]
        return GenerationStats(
            generation=self.generation,
            best_fitness=fitnesses[0],
            mean_fitness=sum(fitnesses) / len(fitnesses),
            min_fitness=fitnesses[-1],
            population_size=len(fitnesses),
            pairing_attempts=attempts,
            forced_pairings=forced,
            timestamp=datetime.now().isoformat(),
        )

    def record_history(self) -> Optional[GenerationStats]:
        """Append the last generation's stats to the history, if not already there."""
        if self.last_stats is None:
            return None
        recorded = self.history.generations
        if not recorded or recorded[-1].generation != self.last_stats.generation:
            self.history.record(self.last_stats)
        return self.last_stats

    def save_checkpoint(self, path: Path) -> Path:
        """Save current simulation state to a checkpoint file."""
        checkpoint = EvolutionCheckpoint(
            run_id=self.run_id,
            generation=self.generation,
            state=self.state.value,
            population=[individual.to_dict() for individual in self.population],
            random_state=self.random_source.get_state(),
            history=self.history.to_dict(),
            config=self.config.to_dict(),
            timestamp=datetime.now().isoformat(),
        )
        path = Path(path)
        checkpoint.save(path)
        return path

    @classmethod
    def from_checkpoint(cls, path: Path, verbose: bool = False) -> 'EvolutionEngine':
        """Rebuild an engine that resumes exactly where the checkpoint left off."""
        checkpoint = EvolutionCheckpoint.load(path)

        engine = cls(
            config=EvolutionConfig.from_dict(checkpoint.config),
            random_source=RandomSource.from_state(checkpoint.random_state),
            population=checkpoint.get_population(),
            run_id=checkpoint.run_id,
            verbose=verbose,
        )
        engine.generation = checkpoint.generation
        engine.state = EngineState(checkpoint.state)
        engine.history = EvolutionHistory.from_dict(checkpoint.history)
        return engine
