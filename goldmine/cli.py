"""
CLI module for Goldmine.

Handles run configuration loading, validation, and dispatching to the solve
workflow.
"""

import argparse
import copy
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from .crossover import CROSSOVERS, PERMUTATION_CROSSOVERS
from .mutation import MUTATIONS, PERMUTATION_MUTATIONS
from .selection import SELECTIONS
from .solver import SolverRegistry, UnknownSolverError, default_registry


class ConfigValidationError(Exception):
    """Raised when run configuration is invalid."""
    pass


DEFAULT_RUN_CONFIG: Dict[str, Any] = {
    'strategy': 'bruteforce',
    'input': '-',
    'output': '-',
    'random_seed': None,
    'population_size': 50,
    'steps': 1000,
    'generations_per_step': 100,
    'sample_rate': 10,
    'time_limit': None,
    'evolver': {
        'replacement_count': 20,
        'crossover_rate': 0.7,
        'mutation_rate': 0.02,
        'selection': 'sus',
        'crossover': 'single_point',
        'mutation': 'point',
        'permutation_crossover': 'order',
        'permutation_mutation': 'swap',
    },
    'plots': None,
}


def load_run_config(config_path: str) -> Dict[str, Any]:
    """
    Load run configuration from YAML file.

    Args:
        config_path: Path to run configuration YAML file

    Returns:
        Dictionary containing run configuration

    Raises:
        FileNotFoundError: If config file doesn't exist
        ConfigValidationError: If config is invalid
    """
    config_file = Path(config_path)

    if not config_file.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    try:
        with open(config_file, 'r') as f:
            config = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigValidationError(f"Invalid YAML in configuration file: {e}")

    if config is None:
        raise ConfigValidationError("Configuration file is empty")
    if not isinstance(config, dict):
        raise ConfigValidationError("Configuration file must contain a mapping")

    return config


def apply_defaults(config: Dict[str, Any]) -> Dict[str, Any]:
    """
    Fill missing keys from DEFAULT_RUN_CONFIG.

    Returns:
        New configuration dictionary; the input is not modified
    """
    merged = copy.deepcopy(DEFAULT_RUN_CONFIG)
    for key, value in config.items():
        if key == 'evolver' and isinstance(value, dict):
            merged['evolver'].update(value)
        else:
            merged[key] = value
    return merged


def _require_int(config: Dict[str, Any], field: str, minimum: int) -> None:
    value = config[field]
    if not isinstance(value, int) or isinstance(value, bool) or value < minimum:
        qualifier = "positive" if minimum > 0 else "non-negative"
        raise ConfigValidationError(f"'{field}' must be a {qualifier} integer, got: {value}")


def validate_run_config(config: Dict[str, Any], registry: Optional[SolverRegistry] = None) -> None:
    """
    Validate run configuration structure.

    Args:
        config: Run configuration dictionary (with defaults applied)
        registry: Solver registry used to check the strategy name

    Raises:
        ConfigValidationError: If configuration is invalid
    """
    if registry is None:
        registry = default_registry()

    try:
        registry.resolve(config.get('strategy'))
    except UnknownSolverError as e:
        raise ConfigValidationError(f"Invalid strategy: {e}")

    _require_int(config, 'population_size', 1)
    _require_int(config, 'steps', 1)
    _require_int(config, 'generations_per_step', 0)
    _require_int(config, 'sample_rate', 1)

    seed = config.get('random_seed')
    if seed is not None and (not isinstance(seed, int) or seed < 0):
        raise ConfigValidationError(f"'random_seed' must be a non-negative integer, got: {seed}")

    time_limit = config.get('time_limit')
    if time_limit is not None and (not isinstance(time_limit, (int, float)) or time_limit <= 0):
        raise ConfigValidationError(f"'time_limit' must be a positive number of seconds, got: {time_limit}")

    _validate_evolver_config(config['evolver'])

    plots = config.get('plots')
    if plots is not None:
        if not isinstance(plots, dict) or 'output_dir' not in plots:
            raise ConfigValidationError("'plots' must be a dictionary with an 'output_dir' field")


def _validate_evolver_config(evolver: Any) -> None:
    """
    Validate the evolver section.

    Raises:
        ConfigValidationError: If configuration is invalid
    """
    if not isinstance(evolver, dict):
        raise ConfigValidationError("'evolver' must be a dictionary")

    count = evolver['replacement_count']
    if not isinstance(count, int) or count < 0:
        raise ConfigValidationError(
            f"'evolver.replacement_count' must be a non-negative integer, got: {count}"
        )

    for field in ('crossover_rate', 'mutation_rate'):
        rate = evolver[field]
        if not isinstance(rate, (int, float)) or not 0.0 <= rate <= 1.0:
            raise ConfigValidationError(f"'evolver.{field}' must be between 0 and 1, got: {rate}")

    for field, known in (
        ('selection', SELECTIONS),
        ('crossover', CROSSOVERS),
        ('mutation', MUTATIONS),
        ('permutation_crossover', PERMUTATION_CROSSOVERS),
        ('permutation_mutation', PERMUTATION_MUTATIONS),
    ):
        if evolver[field] not in known:
            raise ConfigValidationError(
                f"Invalid evolver.{field}: '{evolver[field]}'. Must be one of: {', '.join(sorted(known))}"
            )


def run_from_config(config_path: str) -> List[str]:
    """
    Load run configuration and solve every map it names.

    This is the main entry point called by goldmine_cli.py.

    Args:
        config_path: Path to run configuration YAML file

    Returns:
        Best path per map record, in input order

    Raises:
        FileNotFoundError: If config or input file doesn't exist
        ConfigValidationError: If config is invalid
    """
    print(f"Loading configuration from: {config_path}")
    config = apply_defaults(load_run_config(config_path))

    print("Validating configuration...")
    registry = default_registry()
    validate_run_config(config, registry)

    print(f"Strategy: {config['strategy']}\n")

    from .orchestration import run_solve_mode
    paths = run_solve_mode(config, registry)

    print("\nRun completed successfully!")
    return paths


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the goldmine command."""
    parser = argparse.ArgumentParser(
        prog="goldmine",
        description="Evolve high scoring paths for Goldmine maps.",
    )
    parser.add_argument('config', help="Run configuration YAML file")
    parser.add_argument('-v', '--verbose', action='store_true', help="Enable debug logging")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        run_from_config(args.config)
    except KeyboardInterrupt:
        print("\n\nInterrupted by user")
        return 1
    except (FileNotFoundError, ConfigValidationError) as e:
        print(f"\nError: {e}", file=sys.stderr)
        return 1
    return 0
