"""
Individual representation for the species evolution simulation.

An Individual carries a genome of unsigned 64-bit genes. Its fitness is the
genome sum, computed on first request and frozen from then on.

Key features:
- Genes and fitness wrap modulo 2**64, like unsigned machine integers
- Explicit uncomputed/frozen fitness state; appending after freezing raises
- Per-gene recombination driven by a normal decision variable
"""

from typing import List, Dict, Optional, Iterable, Any

from .config import GENOME_LENGTH, UINT64_MASK


# Recombination branch boundaries on r = branch_residue(normal_sample())
AMPLIFY_ABOVE = 8
INHERIT_SELF_ABOVE = 5


def branch_residue(sample: int) -> int:
    """Reduce a decision draw to 0..9 as an unsigned 64-bit value (-1 -> 5)."""
    return (sample & UINT64_MASK) % 10


class FrozenGenomeError(RuntimeError):
    """Raised when a gene is appended after fitness has been read."""


class Individual:
    """
    Genome-bearing member of the population.

    Attributes:
        genome: Tuple view of the genes (read-only)
        is_frozen: True once fitness() has been called
    """

    def __init__(self, genes: Optional[Iterable[int]] = None):
        self._genes: List[int] = []
        self._fitness: Optional[int] = None  # None = uncomputed
        if genes is not None:
            for gene in genes:
                self.append_gene(gene)

    @classmethod
    def random(cls, random_source, genome_length: int = GENOME_LENGTH) -> 'Individual':
        """Create an individual with genome_length uniformly drawn genes."""
        individual = cls()
        individual.initialize_random(random_source, genome_length)
        return individual

    def initialize_random(self, random_source, genome_length: int = GENOME_LENGTH) -> None:
        """Fill an empty genome with draws from random_source.uniform_index()."""
        if self._genes:
            raise ValueError(
                f"initialize_random called on a genome that already has "
                f"{len(self._genes)} genes"
            )
        for _ in range(genome_length):
            self.append_gene(random_source.uniform_index())

    def append_gene(self, value: int) -> None:
        """Append one gene. Only valid while the fitness is still uncomputed."""
        if self._fitness is not None:
            raise FrozenGenomeError("Cannot append genes after fitness has been read")
        self._genes.append(int(value) & UINT64_MASK)

    @property
    def genome(self) -> tuple:
        return tuple(self._genes)

    @property
    def genome_length(self) -> int:
        return len(self._genes)

    @property
    def is_frozen(self) -> bool:
        return self._fitness is not None

    def fitness(self) -> int:
        """Sum of genes modulo 2**64. Computed once, then frozen."""
        if self._fitness is None:
            self._fitness = sum(self._genes) & UINT64_MASK
        return self._fitness

    def fitness_difference(self, other: 'Individual') -> int:
        """Absolute fitness difference, larger minus smaller."""
        mine, theirs = self.fitness(), other.fitness()
        return mine - theirs if mine > theirs else theirs - mine

    def recombine_with(self, partner: 'Individual', random_source) -> 'Individual':
        """
        Breed one child with partner.

        For each gene position a decision r = branch_residue(normal_sample())
        is drawn, so negative draws wrap through 2**64 first:
        - r > 8: child gene is the sum of both parents' genes (amplification)
        - r > 5: child inherits this individual's gene
        - else:  child inherits the partner's gene

        The decision variable is normally distributed, so the branch
        frequencies depend on the source's mean (see
        analysis.statistics.recombination_branch_probabilities).

        Args:
            partner: The other parent
            random_source: Source of normal_sample() draws

        Returns:
            A new Individual with the same genome length as its parents
        """
        if partner.genome_length != self.genome_length:
            raise ValueError(
                f"Genome length mismatch: {self.genome_length} vs {partner.genome_length}"
            )

        child = Individual()
        for mine, theirs in zip(self._genes, partner._genes):
            r = branch_residue(random_source.normal_sample())
            if r > AMPLIFY_ABOVE:
                child.append_gene(mine + theirs)
            elif r > INHERIT_SELF_ABOVE:
                child.append_gene(mine)
            else:
                child.append_gene(theirs)
        return child

    def to_dict(self) -> Dict[str, Any]:
        """Convert to JSON-serializable dictionary."""
        return {'genome': list(self._genes)}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Individual':
        return cls(data['genome'])

    def __repr__(self) -> str:
        fitness_str = f", fitness={self._fitness}" if self._fitness is not None else ""
        return f"Individual(genome={list(self._genes)}{fitness_str})"
