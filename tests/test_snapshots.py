"""
Tests for snapshot persistence, analysis, plotting and the driver loop.

Run with: python -m pytest tests/test_snapshots.py -v
"""

import json
import pytest
import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from species_evolution.core.persistence import (
    SnapshotWriter,
    read_snapshots,
    parse_snapshot_line,
)
from species_evolution.analysis.statistics import (
    recombination_branch_probabilities,
    summarize_snapshots,
)
from species_evolution.evolution.config import EvolutionConfig
from species_evolution.evolution.engine import EngineState
from species_evolution.evolution.individual import Individual, branch_residue
from species_evolution.evolution.random_source import RandomSource
from species_evolution.simulation import build_engine, run_simulation
from species_evolution.__main__ import main


def sorted_population(size):
    return [Individual([size - i]) for i in range(size)]


class TestSnapshotWriter:
    """Tests for SnapshotWriter."""

    def test_stride_sampling(self, tmp_path):
        """1800 individuals with stride 900 give exactly two values."""
        path = tmp_path / 'parents.csv'
        writer = SnapshotWriter(path, stride=900)

        line = writer.write(sorted_population(1800))

        assert line == '1800, 900, \n'
        assert path.read_text() == '1800, 900, \n'
        assert read_snapshots(path) == [[1800, 900]]

    def test_reference_population_line(self, tmp_path):
        """A 5000-individual population yields six samples per line."""
        writer = SnapshotWriter(tmp_path / 'parents.csv')
        line = writer.write(sorted_population(5000))
        assert parse_snapshot_line(line) == [5000, 4100, 3200, 2300, 1400, 500]

    def test_appends_without_truncating(self, tmp_path):
        """Existing content is kept and each write adds one line."""
        path = tmp_path / 'parents.csv'
        path.write_text('7, 3, \n')
        writer = SnapshotWriter(path, stride=2)

        writer.write(sorted_population(4))
        writer.write(sorted_population(3))

        assert path.read_text() == '7, 3, \n4, 2, \n3, 1, \n'
        assert writer.lines_written == 2
        assert read_snapshots(path) == [[7, 3], [4, 2], [3, 1]]

    def test_large_values(self, tmp_path):
        """uint64-sized fitness values are written exactly."""
        path = tmp_path / 'parents.csv'
        big = (1 << 64) - 2
        SnapshotWriter(path, stride=1).write([Individual([big]), Individual([1])])
        assert read_snapshots(path) == [[big, 1]]

    def test_unwritable_destination(self, tmp_path):
        """Write failures surface as OSError."""
        blocker = tmp_path / 'not_a_dir'
        blocker.write_text('')
        writer = SnapshotWriter(blocker / 'parents.csv')

        with pytest.raises(OSError):
            writer.ensure_writable()

    def test_invalid_stride(self, tmp_path):
        """Stride must be positive."""
        with pytest.raises(ValueError):
            SnapshotWriter(tmp_path / 'x.csv', stride=0)

    def test_parse_blank_lines(self):
        """Blank lines and trailing separators are ignored."""
        assert parse_snapshot_line('1, 2, 3, \n') == [1, 2, 3]
        assert parse_snapshot_line('\n') == []


class TestAnalysis:
    """Tests for analysis utilities."""

    def test_branch_probabilities_sum_to_one(self):
        """Branch probabilities form a distribution for every mean."""
        for mean in range(0, 11):
            probs = recombination_branch_probabilities(mean, 2.0)
            total = probs.amplify + probs.inherit_self + probs.inherit_partner
            assert total == pytest.approx(1.0, abs=1e-9)

    def test_branch_probabilities_mean_zero(self):
        """With mean 0, small negative draws wrap to 0..5 and inherit the partner."""
        probs = recombination_branch_probabilities(0, 2.0)
        # amplify: k = -7 (x in (-8, -7]) plus k = 9; inherit_self: k = 6..8 and -8..-10
        assert probs.amplify == pytest.approx(2.041e-4, rel=0.02)
        assert probs.inherit_self == pytest.approx(1.378e-3, rel=0.02)
        assert probs.inherit_partner == pytest.approx(0.99842, abs=1e-4)

    def test_branch_probabilities_match_sampling(self):
        """Analytic probabilities agree with RandomSource draws."""
        source = RandomSource(seed=21)
        probs = recombination_branch_probabilities(source.normal_mean, source.normal_std)

        n = 20000
        amplify = sum(1 for _ in range(n) if branch_residue(source.normal_sample()) > 8)

        assert amplify / n == pytest.approx(probs.amplify, abs=0.02)

    def test_invalid_std(self):
        """Standard deviation must be positive."""
        with pytest.raises(ValueError):
            recombination_branch_probabilities(0, 0)

    def test_summarize_snapshots(self):
        """Per-snapshot summaries."""
        summaries = summarize_snapshots([[100, 10, 1], [], [(1 << 64) - 1, 5]])

        assert summaries[0]['best'] == 100
        assert summaries[0]['worst'] == 1
        assert summaries[0]['median'] == pytest.approx(10.0)
        assert summaries[0]['log10_best'] == pytest.approx(2.0)
        assert summaries[1] == {'snapshot': 1, 'n_samples': 0}
        assert summaries[2]['best'] == (1 << 64) - 1


class TestPlots:
    """Tests for snapshot plotting."""

    def test_plot_snapshot_history(self):
        """The plot has one line per sample column."""
        from species_evolution.visualization.plots import plot_snapshot_history
        import matplotlib.pyplot as plt

        fig = plot_snapshot_history([[100, 10, 0], [200, 20, 2]], snapshot_every=200)

        ax = fig.axes[0]
        assert len(ax.get_lines()) == 3
        assert ax.get_yscale() == 'log'
        assert ax.get_xlabel() == 'Generation'
        plt.close(fig)

    def test_save_snapshot_plot(self, tmp_path):
        """A snapshot file can be rendered to an image."""
        from species_evolution.visualization.plots import save_snapshot_plot

        csv_path = tmp_path / 'parents.csv'
        csv_path.write_text('500, 40, \n900, 80, \n')

        out = save_snapshot_plot(csv_path, tmp_path / 'plots' / 'fitness.png')

        assert out.exists()
        assert out.stat().st_size > 0


class TestSimulation:
    """Tests for the driver loop."""

    def test_snapshot_cadence(self, tmp_path):
        """Snapshots at every snapshot_every generations plus a final one."""
        config = EvolutionConfig(
            population_size=50,
            cross_count=5,
            snapshot_every=2,
            snapshot_stride=10,
            max_generations=5,
        )
        engine = build_engine(config, seed=3)
        writer = SnapshotWriter(tmp_path / 'parents.csv', stride=config.snapshot_stride)

        result = run_simulation(engine, writer)

        rows = read_snapshots(tmp_path / 'parents.csv')
        # generations 0, 2, 4 and the final snapshot
        assert len(rows) == 4
        assert result.snapshots_written == 4
        assert all(len(row) == 5 for row in rows)
        assert all(row == sorted(row, reverse=True) for row in rows[1:])
        assert result.final_state is EngineState.CONVERGED
        assert result.generations_completed == 5
        assert len(result.final_population) == 50
        assert result.best_fitness == rows[-1][0]
        assert 'Final state: converged' in result.summary()

    def test_halt_still_writes_final_snapshot(self, tmp_path):
        """A halted run writes the generation 0 and final snapshots."""
        config = EvolutionConfig(population_size=20, cross_count=2, halt_threshold=0)
        engine = build_engine(config, seed=1)
        writer = SnapshotWriter(tmp_path / 'parents.csv', stride=5)

        result = run_simulation(engine, writer)

        assert result.final_state is EngineState.HALTED
        assert result.generations_completed == 0
        assert len(read_snapshots(tmp_path / 'parents.csv')) == 2

    def test_progress_and_checkpoint(self, tmp_path):
        """Progress is reported before every generation and checkpoints are saved."""
        config = EvolutionConfig(
            population_size=30, cross_count=3, snapshot_every=2, max_generations=3,
        )
        engine = build_engine(config, seed=8)
        seen = []

        run_simulation(
            engine,
            SnapshotWriter(tmp_path / 'parents.csv', stride=10),
            progress_callback=lambda gen, stats: seen.append(gen),
            checkpoint_path=tmp_path / 'run.json',
        )

        assert seen == [0, 1, 2, 3]
        data = json.loads((tmp_path / 'run.json').read_text())
        assert data['generation'] == 3
        assert data['state'] == 'converged'
        assert len(data['population']) == 30


class TestCLI:
    """Tests for the command line entry point."""

    def test_run_with_budget(self, tmp_path, capsys):
        """A budgeted run writes snapshots and prints a summary."""
        output = tmp_path / 'parents.csv'

        code = main(['--output', str(output), '--max-generations', '3', '--seed', '1'])

        out = capsys.readouterr().out
        assert code == 0
        assert 'Generation #0' in out
        assert 'Generation #3' in out
        assert 'Final state: converged' in out
        rows = read_snapshots(output)
        assert len(rows) == 2
        assert all(len(row) == 6 for row in rows)

    def test_resume_extends_budget(self, tmp_path, capsys):
        """Resuming with a larger budget continues the run."""
        output = tmp_path / 'parents.csv'
        checkpoint = tmp_path / 'run.json'

        assert main([
            '--output', str(output), '--max-generations', '2', '--seed', '5',
            '--checkpoint', str(checkpoint), '--quiet',
        ]) == 0
        assert main([
            '--resume', str(checkpoint), '--max-generations', '4',
            '--checkpoint', str(checkpoint), '--quiet',
        ]) == 0

        assert len(read_snapshots(output)) == 3
        assert json.loads(checkpoint.read_text())['generation'] == 4

        # Without a larger budget the run is already finished
        assert main(['--resume', str(checkpoint), '--quiet']) == 0
        assert 'already finished' in capsys.readouterr().out

    def test_unwritable_output(self, tmp_path, capsys):
        """An unwritable snapshot destination exits with status 1."""
        blocker = tmp_path / 'blocker'
        blocker.write_text('')

        code = main(['--output', str(blocker / 'parents.csv'), '--max-generations', '1', '--quiet'])

        assert code == 1
        assert 'ERROR' in capsys.readouterr().err

    def test_plot_option(self, tmp_path):
        """--plot renders the snapshot file after the run."""
        output = tmp_path / 'parents.csv'
        plot = tmp_path / 'fitness.png'

        assert main([
            '--output', str(output), '--max-generations', '1', '--seed', '2',
            '--quiet', '--plot', str(plot),
        ]) == 0
        assert plot.exists()


if __name__ == '__main__':
    pytest.main([__file__, '-v'])
