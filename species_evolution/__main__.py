"""
Run the species evolution simulation.

Usage:
    python -m species_evolution [options]

Options:
    --seed N              Random seed for reproducibility
    --output PATH         Snapshot file (default: parents.csv)
    --max-generations N   Stop after N generations instead of waiting for the halt
    --checkpoint PATH     Save a checkpoint at every snapshot and at the end
    --resume PATH         Resume from checkpoint file
    --plot PATH           Save a fitness plot of the snapshot file after the run
    --quiet               Do not print per-generation progress
"""

import argparse
import sys
from pathlib import Path

from .core.persistence import SnapshotWriter
from .evolution.config import EvolutionConfig, DEFAULT_SNAPSHOT_PATH
from .evolution.engine import EvolutionEngine, EngineState
from .simulation import build_engine, run_simulation


def parse_args(argv=None):
    parser = argparse.ArgumentParser(
        prog='species_evolution',
        description='Run the species evolution simulation'
    )
    parser.add_argument(
        '--seed', type=int, default=None,
        help='Random seed for reproducibility'
    )
    parser.add_argument(
        '--output', type=str, default=None,
        help=f'Snapshot file, appended to (default: {DEFAULT_SNAPSHOT_PATH})'
    )
    parser.add_argument(
        '--max-generations', type=int, default=None,
        help='Stop after this many generations (default: run until halt)'
    )
    parser.add_argument(
        '--checkpoint', type=str, default=None,
        help='Path to write checkpoints to'
    )
    parser.add_argument(
        '--resume', type=str, default=None,
        help='Path to checkpoint file to resume from'
    )
    parser.add_argument(
        '--plot', type=str, default=None,
        help='Save a fitness plot of the snapshot file to this path'
    )
    parser.add_argument(
        '--quiet', action='store_true',
        help='Do not print per-generation progress'
    )
    return parser.parse_args(argv)


def print_banner(engine: EvolutionEngine, output: str):
    config = engine.config
    print("=" * 60)
    print("   SPECIES EVOLUTION")
    print("=" * 60)
    print(f"   Run:                {engine.run_id}")
    print(f"   Population size:    {config.population_size}")
    print(f"   Genome length:      {config.genome_length}")
    print(f"   Cross count:        {config.cross_count}")
    print(f"   Normal mean:        {engine.random_source.normal_mean}")
    print(f"   Snapshots:          every {config.snapshot_every} generations -> {output}")
    if engine.generation:
        print(f"   Resuming at:        generation {engine.generation}")
    print()


def progress_callback(generation: int, stats):
    print(f"Generation #{generation}")


def main(argv=None) -> int:
    args = parse_args(argv)

    if args.resume:
        engine = EvolutionEngine.from_checkpoint(Path(args.resume))
        if args.max_generations is not None:
            engine.config.max_generations = args.max_generations
            # A larger budget reopens a run that only stopped on its budget
            if (engine.state is EngineState.CONVERGED
                    and engine.generation < args.max_generations):
                engine.state = EngineState.RUNNING
        if engine.state.is_terminal:
            print(f"Run {engine.run_id} already finished ({engine.state.value})")
            return 0
    else:
        config = EvolutionConfig(
            max_generations=args.max_generations,
            snapshot_path=args.output or DEFAULT_SNAPSHOT_PATH,
        )
        engine = build_engine(config, seed=args.seed)

    output = args.output or engine.config.snapshot_path
    writer = SnapshotWriter(output, stride=engine.config.snapshot_stride)

    print_banner(engine, output)

    try:
        result = run_simulation(
            engine,
            writer,
            progress_callback=None if args.quiet else progress_callback,
            checkpoint_path=Path(args.checkpoint) if args.checkpoint else None,
        )
    except OSError as e:
        print(f"ERROR: run output could not be written: {e}", file=sys.stderr)
        return 1

    print()
    print(result.summary())

    if args.plot:
        from .visualization.plots import save_snapshot_plot
        save_snapshot_plot(output, args.plot, snapshot_every=engine.config.snapshot_every)

    return 0


if __name__ == '__main__':
    sys.exit(main())
