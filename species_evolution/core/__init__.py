"""Snapshot persistence."""

from .persistence import SnapshotWriter, read_snapshots, parse_snapshot_line

__all__ = [
    'SnapshotWriter',
    'read_snapshots',
    'parse_snapshot_line',
]
