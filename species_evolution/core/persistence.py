"""
Snapshot persistence for simulation runs.

Appends one line of sampled fitness values per snapshot to a text file:

    <f0>, <f900>, <f1800>, ..., \n

The file is never truncated, so it accumulates across runs until cleared.
"""

from pathlib import Path
from typing import List, Union
from filelock import FileLock

from ..evolution.config import DEFAULT_SNAPSHOT_PATH, SNAPSHOT_STRIDE
from ..evolution.individual import Individual
from ..evolution.population import sample_fitness


SEPARATOR = ', '


class SnapshotWriter:
    """
    Append-only writer of population fitness samples.

    Every write samples every stride-th individual of the (sorted)
    population starting at index 0.
    """

    def __init__(
        self,
        path: Union[str, Path] = DEFAULT_SNAPSHOT_PATH,
        stride: int = SNAPSHOT_STRIDE,
    ):
        if stride < 1:
            raise ValueError(f"stride must be positive, got {stride}")
        self.path = Path(path)
        self.stride = stride
        self.lines_written = 0

    def _get_lock(self) -> FileLock:
        """Get a file lock for atomic appends."""
        return FileLock(str(self.path) + '.lock')

    def ensure_writable(self) -> None:
        """
        Open the destination in append mode without writing.

        Raises OSError early when the destination cannot be written.
        """
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with self._get_lock():
            with open(self.path, 'a'):
                pass

    def format_line(self, population: List[Individual]) -> str:
        values = sample_fitness(population, self.stride)
        return ''.join(f"{value}{SEPARATOR}" for value in values) + '\n'

    def write(self, population: List[Individual]) -> str:
        """
        Append one snapshot line.

        Returns:
            The line written (including the trailing newline)
        """
        line = self.format_line(population)
        with self._get_lock():
            with open(self.path, 'a') as f:
                f.write(line)
        self.lines_written += 1
        return line


def parse_snapshot_line(line: str) -> List[int]:
    """Parse '1, 2, 3, ' into [1, 2, 3]."""
    return [int(token) for token in line.strip().split(',') if token.strip()]


def read_snapshots(path: Union[str, Path]) -> List[List[int]]:
    """
    Read every snapshot line from a snapshot file.

    Blank lines are skipped.
    """
    path = Path(path)
    with FileLock(str(path) + '.lock'):
        text = path.read_text()
    return [parse_snapshot_line(line) for line in text.splitlines() if line.strip()]
