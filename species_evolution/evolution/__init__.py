"""
Species Evolution - generational engine

A fixed-size population of individuals, each carrying a genome of unsigned
64-bit genes, evolves through fitness-compatible pairing, per-gene
recombination and random culling until the maximum fitness crosses an
overflow guard.

Key components:
- RandomSource: Injected uniform-index and normal-decision sampler
- Individual: Genome plus frozen-on-read fitness
- EvolutionEngine: One generation per step()
- EvolutionCheckpoint: Save/resume of a run

Example usage:
    from species_evolution.evolution import EvolutionEngine, EvolutionConfig, RandomSource

    config = EvolutionConfig(population_size=500, max_generations=1000)
    engine = EvolutionEngine(config, random_source=RandomSource(500, seed=7))
    engine.initialize_population()
    while not engine.step().is_terminal:
        pass

    print(f"Best fitness: {engine.population[0].fitness()}")
"""

from .config import EvolutionConfig
from .random_source import RandomSource
from .individual import Individual, FrozenGenomeError
from .population import (
    create_initial_population,
    max_fitness,
    sort_by_fitness,
    is_sorted_by_fitness,
    sample_fitness,
    get_population_stats,
)
from .engine import EvolutionEngine, EngineState
from .checkpoint import EvolutionCheckpoint, EvolutionHistory, GenerationStats

__all__ = [
    # Core classes
    'EvolutionConfig',
    'RandomSource',
    'Individual',
    'FrozenGenomeError',
    'EvolutionEngine',
    'EngineState',
    'EvolutionCheckpoint',
    'EvolutionHistory',
    'GenerationStats',
    # Population
    'create_initial_population',
    'max_fitness',
    'sort_by_fitness',
    'is_sorted_by_fitness',
    'sample_fitness',
    'get_population_stats',
]
