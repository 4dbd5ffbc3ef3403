"""
Tests for run configuration handling and the solve workflow.
"""

import io
import shutil
import tempfile
import unittest
from contextlib import redirect_stderr, redirect_stdout
from pathlib import Path

import numpy as np
import yaml

from goldmine.cli import (
    ConfigValidationError,
    DEFAULT_RUN_CONFIG,
    apply_defaults,
    load_run_config,
    main,
    run_from_config,
    validate_run_config,
)
from goldmine.evolver import build_evolver
from goldmine.maps import parse_map
from goldmine.orchestration import run_solve_mode, solve_map
from goldmine.path import Path as MovePath
from goldmine.solver import SolverInput, default_registry

MAPS = """=3,5,5
w...1
..s..
2d1..

=2,3,4
abc
s..

=4,6,10
..d..1
.ww.w.
s..2..
1..w.d
"""


class TestConfigValidation(unittest.TestCase):
    """Test loading, defaulting, and validating run configuration."""

    def setUp(self):
        self.temp_dir = Path(tempfile.mkdtemp())
        self.registry = default_registry()

    def tearDown(self):
        shutil.rmtree(self.temp_dir)

    def write_config(self, text: str) -> Path:
        path = self.temp_dir / "run.yaml"
        path.write_text(text)
        return path

    def test_load_missing_file(self):
        with self.assertRaises(FileNotFoundError):
            load_run_config(str(self.temp_dir / "missing.yaml"))

    def test_load_empty_file(self):
        with self.assertRaises(ConfigValidationError):
            load_run_config(str(self.write_config("")))

    def test_load_invalid_yaml(self):
        with self.assertRaises(ConfigValidationError):
            load_run_config(str(self.write_config("strategy: [graph")))

    def test_load_non_mapping(self):
        with self.assertRaises(ConfigValidationError):
            load_run_config(str(self.write_config("- graph\n- bruteforce\n")))

    def test_apply_defaults(self):
        """Missing keys come from defaults; evolver keys merge one by one."""
        config = apply_defaults({'strategy': 'graph', 'evolver': {'mutation': 'swap'}})

        self.assertEqual(config['strategy'], 'graph')
        self.assertEqual(config['population_size'], 50)
        self.assertEqual(config['evolver']['mutation'], 'swap')
        self.assertEqual(config['evolver']['crossover'], 'single_point')

        # Defaults stay untouched
        self.assertEqual(DEFAULT_RUN_CONFIG['strategy'], 'bruteforce')
        self.assertEqual(DEFAULT_RUN_CONFIG['evolver']['mutation'], 'point')

    def test_defaults_are_valid(self):
        validate_run_config(apply_defaults({}), self.registry)

    def test_invalid_values(self):
        cases = [
            {'strategy': 'annealing'},
            {'population_size': 0},
            {'steps': -1},
            {'generations_per_step': 'many'},
            {'sample_rate': 0},
            {'random_seed': -5},
            {'time_limit': 0},
            {'evolver': {'crossover_rate': 1.5}},
            {'evolver': {'replacement_count': -1}},
            {'evolver': {'crossover': 'three_point'}},
            {'evolver': {'selection': 'tournament'}},
            {'evolver': {'permutation_crossover': 'uniform'}},
            {'evolver': {'permutation_mutation': 'point'}},
            {'plots': {'dir': 'plots'}},
        ]
        for case in cases:
            with self.subTest(case=case):
                with self.assertRaises(ConfigValidationError):
                    validate_run_config(apply_defaults(case), self.registry)

    def test_strategy_error_lists_known_solvers(self):
        with self.assertRaises(ConfigValidationError) as ctx:
            validate_run_config(apply_defaults({'strategy': 'annealing'}), self.registry)
        self.assertIn("bruteforce, graph", str(ctx.exception))


class TestSolveWorkflow(unittest.TestCase):
    """Test solving a whole map file end to end."""

    def setUp(self):
        self.temp_dir = Path(tempfile.mkdtemp())
        self.maps_path = self.temp_dir / "maps.txt"
        self.maps_path.write_text(MAPS)
        self.output_path = self.temp_dir / "out" / "paths.txt"

    def tearDown(self):
        shutil.rmtree(self.temp_dir)

    def make_config(self, **overrides):
        config = {
            'strategy': 'bruteforce',
            'input': str(self.maps_path),
            'output': str(self.output_path),
            'random_seed': 1,
            'population_size': 10,
            'steps': 4,
            'generations_per_step': 5,
            'sample_rate': 2,
        }
        config.update(overrides)
        return apply_defaults(config)

    def run_quietly(self, fn, *args):
        with redirect_stdout(io.StringIO()), redirect_stderr(io.StringIO()):
            return fn(*args)

    def check_output(self, paths):
        lines = self.output_path.read_text().split("\n")
        self.assertEqual(lines[-1], "")
        self.assertEqual(lines[:-1], paths)
        self.assertEqual(len(paths), 3)

        # Bad record leaves an empty line in its place
        self.assertEqual(paths[1], "")

        maps = MAPS.split("\n\n")
        for index in (0, 2):
            m = parse_map(maps[index])
            self.assertEqual(len(paths[index]), m.steps_allowed)
            self.assertGreater(MovePath.parse(paths[index]).score(m), 0)

    def test_bruteforce_run(self):
        paths = self.run_quietly(run_solve_mode, self.make_config(), default_registry())
        self.check_output(paths)

    def test_graph_run(self):
        config = self.make_config(strategy='graph', evolver={'mutation': 'swap'})
        paths = self.run_quietly(run_solve_mode, config, default_registry())
        self.check_output(paths)

    def test_same_seed_same_paths(self):
        first = self.run_quietly(run_solve_mode, self.make_config(), default_registry())
        second = self.run_quietly(run_solve_mode, self.make_config(), default_registry())
        self.assertEqual(first, second)

    def test_missing_input(self):
        config = self.make_config(input=str(self.temp_dir / "nope.txt"))
        with self.assertRaises(FileNotFoundError):
            self.run_quietly(run_solve_mode, config, default_registry())

    def test_unencodable_map_is_skipped(self):
        self.maps_path.write_text("=1,5,30\ns...1\n")
        paths = self.run_quietly(run_solve_mode, self.make_config(), default_registry())
        self.assertEqual(paths, [""])
        self.assertEqual(self.output_path.read_text(), "\n")

    def test_plots(self):
        plot_dir = self.temp_dir / "plots"
        config = self.make_config(plots={'output_dir': str(plot_dir)})
        self.run_quietly(run_solve_mode, config, default_registry())

        self.assertTrue((plot_dir / "map_000.png").exists())
        self.assertFalse((plot_dir / "map_001.png").exists())
        self.assertTrue((plot_dir / "map_002.png").exists())

    def test_run_from_config(self):
        config_path = self.temp_dir / "run.yaml"
        with open(config_path, 'w') as f:
            yaml.safe_dump({
                'strategy': 'graph',
                'input': str(self.maps_path),
                'output': str(self.output_path),
                'random_seed': 3,
                'population_size': 10,
                'steps': 2,
                'generations_per_step': 5,
            }, f)

        paths = self.run_quietly(run_from_config, str(config_path))
        self.check_output(paths)

    def test_main_reports_bad_config(self):
        config_path = self.temp_dir / "run.yaml"
        config_path.write_text("strategy: annealing\n")
        self.assertEqual(self.run_quietly(main, [str(config_path)]), 1)

    def test_solve_map_history(self):
        m = parse_map(MAPS.split("\n\n")[0])
        config = self.make_config()

        solver = default_registry().create(
            'bruteforce',
            SolverInput(map=m, evolver=build_evolver(config['evolver']), rng=np.random.default_rng(0)),
        )
        history = solve_map(solver, population_size=10, steps=6, generations_per_step=2, sample_rate=2)

        self.assertEqual(len(history), 3)
        self.assertEqual(history, sorted(history))
        self.assertEqual(history[-1], solver.score())


if __name__ == "__main__":
    unittest.main()
