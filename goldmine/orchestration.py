"""
Orchestration module for Goldmine.

Implements the solve workflow: read every map record, run one solver per
map, and write the best path found for each.
"""

import sys
import time
from contextlib import ExitStack
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, TextIO

import numpy as np

from .evolver import build_evolver
from .genetics import SpeciesError
from .maps import MapParseError, MapReader, Map
from .solver import Solver, SolverInput, SolverRegistry


@dataclass
class MapRun:
    """
    Outcome of solving one map record.

    Attributes:
        index: Position of the record in the input stream
        map: Parsed map, or None if the record failed to parse
        path: Best path found ("" when the record could not be solved)
        score: Score of path
        history: Best score sampled every sample_rate steps
        error: Why the record could not be solved, if it couldn't
    """
    index: int
    map: Optional[Map] = None
    path: str = ""
    score: int = 0
    history: List[int] = field(default_factory=list)
    error: Optional[str] = None


def _open_input(name: str, stack: ExitStack) -> TextIO:
    if name in (None, '-'):
        return sys.stdin
    input_path = Path(name)
    if not input_path.exists():
        raise FileNotFoundError(f"Map file not found: {input_path}")
    return stack.enter_context(open(input_path, 'r'))


def _open_output(name: str, stack: ExitStack) -> TextIO:
    if name in (None, '-'):
        return sys.stdout
    output_path = Path(name)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    return stack.enter_context(open(output_path, 'w'))


def solve_map(
    solver: Solver,
    population_size: int,
    steps: int,
    generations_per_step: int,
    sample_rate: int,
    deadline: Optional[float] = None,
) -> List[int]:
    """
    Run one solver to completion or until the deadline passes.

    Args:
        solver: Uninitialized solver
        population_size: Chromosomes per generation
        steps: Number of step() calls
        generations_per_step: Generations per step() call
        sample_rate: Record the score every this many steps
        deadline: time.monotonic() value after which no more steps run

    Returns:
        Sampled score history

    Raises:
        SpeciesError: If the map can't be encoded by the solver's strategy
    """
    solver.init(population_size)

    history = []
    for x in range(steps):
        if x > 0 and deadline is not None and time.monotonic() >= deadline:
            break
        solver.step(generations_per_step)
        if (x + 1) % sample_rate == 0:
            history.append(solver.score())

    if not history or history[-1] != solver.score():
        history.append(solver.score())
    return history


def run_solve_mode(run_config: Dict[str, Any], registry: SolverRegistry) -> List[str]:
    """
    Solve every map in the configured input.

    Args:
        run_config: Run configuration dict (defaults applied, validated)
        registry: Solver registry holding the configured strategy

    Returns:
        Best path per map record, in input order

    Algorithm:
        1. Setup RNG (run_config['random_seed'] or a fresh seed)
        2. Read all map records; bad records are reported and kept as gaps
        3. For each map, with its own child RNG:
           a. Create solver from the registry
           b. init(), then step() until steps or the time budget run out
           c. Write the best path (empty line if the map failed)
        4. Optionally plot each board and its score history
        5. Print summary report
    """
    output_name = run_config.get('output', '-')
    # Keep progress out of the paths when they go to stdout
    report = sys.stderr if output_name in (None, '-') else sys.stdout

    def say(message: str = "") -> None:
        print(message, file=report)

    say("=" * 70)
    say("SOLVE MODE")
    say("=" * 70)

    seed = run_config.get('random_seed')
    if seed is None:
        seed = int(np.random.randint(0, 2**31))
    say(f"Random seed: {seed}")
    seed_sequence = np.random.SeedSequence(seed)

    evolver = build_evolver(run_config['evolver'], np.random.default_rng(seed_sequence.spawn(1)[0]))

    runs: List[MapRun] = []
    with ExitStack() as stack:
        stream = _open_input(run_config.get('input', '-'), stack)
        say(f"Reading maps from: {'stdin' if stream is sys.stdin else run_config['input']}")

        reader = MapReader(stream)
        index = 0
        while True:
            try:
                runs.append(MapRun(index=index, map=next(reader)))
            except StopIteration:
                break
            except MapParseError as e:
                say(f"  Skipping map {index}: {e}")
                runs.append(MapRun(index=index, error=str(e)))
            index += 1

    say(f"Loaded {sum(1 for r in runs if r.map is not None)}/{len(runs)} maps\n")

    time_limit = run_config.get('time_limit')
    started = time.monotonic()
    solvable = [r for r in runs if r.map is not None]
    child_seeds = seed_sequence.spawn(len(solvable))

    for n, (run, child_seed) in enumerate(zip(solvable, child_seeds)):
        deadline = None
        if time_limit is not None:
            # Split what is left of the budget evenly across remaining maps
            remaining = time_limit - (time.monotonic() - started)
            deadline = time.monotonic() + max(remaining, 0) / (len(solvable) - n)

        solver = registry.create(
            run_config['strategy'],
            SolverInput(map=run.map, evolver=evolver, rng=np.random.default_rng(child_seed)),
        )

        say(f"Map {run.index} ({run.map.rows()}x{run.map.cols()}, "
            f"{run.map.steps_allowed} steps, {len(run.map.points_of_interest)} points of interest)")
        try:
            run.history = solve_map(
                solver,
                population_size=run_config['population_size'],
                steps=run_config['steps'],
                generations_per_step=run_config['generations_per_step'],
                sample_rate=run_config['sample_rate'],
                deadline=deadline,
            )
        except SpeciesError as e:
            say(f"  Could not initialize solver: {e}")
            run.error = str(e)
            continue

        best = solver.best()
        if best is not None:
            run.path = str(solver.path(best))
        run.score = solver.score()
        say(f"  Scores: {','.join(str(s) for s in run.history)}")
        say(f"  Best: {run.path} ({run.score} points)")

    with ExitStack() as stack:
        out = _open_output(output_name, stack)
        for run in runs:
            out.write(run.path + "\n")
        out.flush()

    plots = run_config.get('plots')
    if plots:
        from .visualization_utils import save_run_plots
        plot_dir = Path(plots['output_dir'])
        for run in runs:
            if run.map is not None and run.error is None:
                save_run_plots(run.map, run.path, run.history, plot_dir / f"map_{run.index:03d}.png")
                say(f"  Saved visualization: {plot_dir / f'map_{run.index:03d}.png'}")

    say()
    say("=" * 70)
    say("SUMMARY")
    say("=" * 70)
    say(f"Maps read: {len(runs)}")
    say(f"Maps solved: {sum(1 for r in runs if r.map is not None and r.error is None)}")
    say(f"Total score: {sum(r.score for r in runs)}")
    say(f"Elapsed: {time.monotonic() - started:.1f}s")
    if output_name not in (None, '-'):
        say(f"Output: {output_name}")

    return [r.path for r in runs]
