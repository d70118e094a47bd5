"""
Population management for the species evolution simulation.

A population is a plain list of Individuals. After every generation it is
sorted by descending fitness, so index 0 is the fittest individual.

Handles:
- Initial population creation
- Fitness ordering and bounds
- Stride sampling for snapshots
- Summary statistics
"""

from typing import List, Dict, Any

from .individual import Individual
from .random_source import RandomSource
from .config import POPULATION_SIZE, GENOME_LENGTH, SNAPSHOT_STRIDE


def create_initial_population(
    random_source: RandomSource,
    population_size: int = POPULATION_SIZE,
    genome_length: int = GENOME_LENGTH,
) -> List[Individual]:
    """
    Create population_size randomly initialized individuals.

    The result is unsorted; the engine sorts it at the end of the first
    generation.
    """
    return [
        Individual.random(random_source, genome_length)
        for _ in range(population_size)
    ]


def max_fitness(population: List[Individual]) -> int:
    """Highest fitness in the population."""
    if not population:
        raise ValueError("max_fitness of an empty population")
    return max(individual.fitness() for individual in population)


def sort_by_fitness(population: List[Individual]) -> None:
    """Sort in place by descending fitness (stable)."""
    population.sort(key=lambda individual: individual.fitness(), reverse=True)


def is_sorted_by_fitness(population: List[Individual]) -> bool:
    """True if fitness is non-increasing along the population."""
    return all(
        population[i].fitness() >= population[i + 1].fitness()
        for i in range(len(population) - 1)
    )


def sample_fitness(
    population: List[Individual],
    stride: int = SNAPSHOT_STRIDE,
) -> List[int]:
    """Fitness of every stride-th individual, starting at index 0."""
    return [population[i].fitness() for i in range(0, len(population), stride)]


def get_population_stats(population: List[Individual]) -> Dict[str, Any]:
    """
    Compute statistics about the population.

    Args:
        population: List of individuals

    Returns:
        Dictionary with population statistics
    """
    if not population:
        return {'size': 0}

    fitnesses = [individual.fitness() for individual in population]
    genome_lengths = {individual.genome_length for individual in population}

    return {
        'size': len(population),
        'max_fitness': max(fitnesses),
        'min_fitness': min(fitnesses),
        # Python ints: uint64 sums would wrap in numpy
        'mean_fitness': sum(fitnesses) / len(fitnesses),
        'unique_fitness': len(set(fitnesses)),
        'genome_lengths': sorted(genome_lengths),
    }

