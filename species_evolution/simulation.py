"""
Driver loop for a full simulation run.

Snapshots are taken before the generation whose number is a multiple of
snapshot_every (generation 0 included), and once more after the loop
regardless of why it stopped.
"""

from dataclasses import dataclass
from typing import List, Optional, Callable
from pathlib import Path
import time

from .core.persistence import SnapshotWriter
from .evolution.config import EvolutionConfig
from .evolution.engine import EvolutionEngine, EngineState
from .evolution.individual import Individual
from .evolution.checkpoint import EvolutionHistory, GenerationStats
from .evolution.random_source import RandomSource


@dataclass
class EvolutionResult:
    """Results from a simulation run."""
    run_id: str
    generations_completed: int
    final_state: EngineState
    best_fitness: int
    snapshots_written: int
    history: EvolutionHistory
    final_population: List[Individual]
    runtime_seconds: float

    def summary(self) -> str:
        """Generate summary string."""
        lines = [
            f"Simulation Run: {self.run_id}",
            f"Generations: {self.generations_completed}",
            f"Final state: {self.final_state.value}",
            f"Best fitness: {self.best_fitness}",
            f"Snapshots written: {self.snapshots_written}",
            f"Forced pairings: {self.history.total_forced_pairings}",
            f"Runtime: {self.runtime_seconds:.1f}s",
        ]
        return '\n'.join(lines)


def build_engine(
    config: EvolutionConfig,
    seed: Optional[int] = None,
    verbose: bool = False,
) -> EvolutionEngine:
    """Create an engine with a fresh random population."""
    random_source = RandomSource(
        population_size=config.population_size,
        seed=seed,
        normal_std=config.normal_std,
        normal_mean_range=config.normal_mean_range,
    )
    engine = EvolutionEngine(config, random_source=random_source, verbose=verbose)
    engine.initialize_population()
    return engine


def run_simulation(
    engine: EvolutionEngine,
    writer: SnapshotWriter,
    progress_callback: Optional[Callable[[int, Optional[GenerationStats]], None]] = None,
    checkpoint_path: Optional[Path] = None,
) -> EvolutionResult:
    """
    Run the engine until it leaves the RUNNING state.

    Args:
        engine: Engine with an initialized population
        writer: Snapshot destination (OSError propagates to the caller)
        progress_callback: Optional callback(generation, last_stats), called
            before every generation
        checkpoint_path: If given, a checkpoint is saved after every
            snapshot generation and at the end of the run

    Returns:
        EvolutionResult with final population and history
    """
    start_time = time.time()
    snapshot_every = engine.config.snapshot_every
    snapshots = 0

    # Fail before the first generation if the destination is unwritable
    writer.ensure_writable()

    while engine.state is EngineState.RUNNING:
        if progress_callback:
            progress_callback(engine.generation, engine.last_stats)

        snapshot_due = engine.generation % snapshot_every == 0
        if snapshot_due:
            writer.write(engine.population)
            snapshots += 1
            engine.record_history()

        engine.step()

        # Saved after the step so a resumed run does not repeat the snapshot
        if snapshot_due and checkpoint_path:
            engine.save_checkpoint(checkpoint_path)

    writer.write(engine.population)
    snapshots += 1
    engine.record_history()
    if checkpoint_path:
        engine.save_checkpoint(checkpoint_path)

    return EvolutionResult(
        run_id=engine.run_id,
        generations_completed=engine.generation,
        final_state=engine.state,
        best_fitness=max(individual.fitness() for individual in engine.population),
        snapshots_written=snapshots,
        history=engine.history,
        final_population=engine.population,
        runtime_seconds=time.time() - start_time,
    )
