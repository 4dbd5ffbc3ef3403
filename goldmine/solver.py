"""
Solver framework shared by every Goldmine strategy.

A solver owns one map's optimization run:

    uninitialized --init()--> ready --step()--> ready --step()--> ...

init() builds the species and a random population, step() runs whole
generations, and score()/best()/path() read the results at any time.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, List, Optional

from .evolver import Evolver
from .genetics import Chromosome, Fitness, RandomSource, Species, SpeciesError
from .maps import Map
from .path import Path

logger = logging.getLogger(__name__)

DEFAULT_SOLVER = "bruteforce"


class SolverKind(str, Enum):
    """Every solving strategy the package ships."""
    BRUTEFORCE = "bruteforce"
    GRAPH = "graph"


class UnknownSolverError(KeyError):
    """Raised when a strategy name has no registered factory."""

    def __str__(self) -> str:
        return str(self.args[0]) if self.args else ""


@dataclass
class SolverInput:
    """
    Everything needed to create a solver for one map.

    Attributes:
        map: Board to solve
        evolver: Creates each next generation
        rng: Random source owned by this solver
    """
    map: Map
    evolver: Evolver
    rng: RandomSource


class Solver:
    """
    Base class for genetic Goldmine solvers.

    Subclasses define the encoding: which species to build, how to create
    the initial population and how a chromosome decodes into a Path.
    """

    kind: SolverKind

    def __init__(self, solver_input: SolverInput):
        self.input = solver_input
        self.species: Optional[Species] = None
        self.population: List[Chromosome] = []
        self.generation = 0
        self._best: Optional[Chromosome] = None
        self._score = 0

    @property
    def map(self) -> Map:
        return self.input.map

    @property
    def rng(self) -> RandomSource:
        return self.input.rng

    def init(self, population_size: int) -> None:
        """
        Build the species and a random initial population.

        Args:
            population_size: Number of chromosomes per generation (> 0)

        Raises:
            ValueError: If population_size is not positive
            SpeciesError: If the map can't be encoded by this strategy
        """
        if population_size <= 0:
            raise ValueError(f"population size must be positive, got {population_size}")

        self.species = self._build_species()
        self._prepare()
        self.population = [self._new_chromosome() for _ in range(population_size)]
        self.generation = 0
        self._best = None
        self._score = 0

    def step(self, count: int) -> None:
        """
        Run count generations of evolution, updating the population, score
        and best chromosome.
        """
        if self.species is None:
            raise RuntimeError(f"{type(self).__name__}.init() must be called before step()")

        for _ in range(count):
            fitness = self._evaluate()
            self.population = self.input.evolver.evolve(self.rng, self.population, fitness)
            self._after_generation()
            self.generation += 1

    def score(self) -> int:
        """Best score found so far."""
        return self._score

    def best(self) -> Optional[Chromosome]:
        """Chromosome that earned score(); None before the first step."""
        return self._best

    def path(self, chromosome: Chromosome) -> Path:
        """
        Decode a chromosome of this solver's species into a full-length path.

        Raises:
            SpeciesError: If the chromosome belongs to another species
        """
        if self.species is None:
            raise RuntimeError(f"{type(self).__name__}.init() must be called before path()")
        if chromosome.species != self.species:
            raise SpeciesError(f"Chromosome species {chromosome.species} does not match solver species {self.species}")

        p = self._decode(chromosome)
        # In case we ran out of valid genes before the step budget
        p.pad(self.map)
        return p

    def _evaluate(self) -> List[Fitness]:
        fitness = []
        for chromosome in self.population:
            score = self.path(chromosome).score(self.map)
            fitness.append(score)
            if self._best is None or score > self._score:
                if self._best is not None:
                    logger.debug("Generation %d improved score %d -> %d", self.generation, self._score, score)
                self._score = score
                self._best = chromosome.copy()
        return fitness

    def _build_species(self) -> Species:
        raise NotImplementedError

    def _prepare(self) -> None:
        """Hook for precomputation that depends on the map."""
        pass

    def _new_chromosome(self) -> Chromosome:
        return self.species.new_random(self.rng)

    def _decode(self, chromosome: Chromosome) -> Path:
        raise NotImplementedError

    def _after_generation(self) -> None:
        pass


SolverFactory = Callable[[SolverInput], Solver]


class SolverRegistry:
    """
    Maps strategy names to solver factories.

    The application builds one registry and registers each strategy module
    explicitly (see default_registry).
    """

    def __init__(self):
        self._factories: Dict[str, SolverFactory] = {}

    def register(self, name: str, factory: SolverFactory) -> None:
        """
        Raises:
            ValueError: If name is already registered
        """
        if name in self._factories:
            raise ValueError(f"Double registering solver factory {name}")
        self._factories[name] = factory

    def resolve(self, name: Optional[str]) -> SolverFactory:
        """
        Look up the factory for a strategy name ("" or None means the default).

        Raises:
            UnknownSolverError: If no factory is registered under name
        """
        name = name or DEFAULT_SOLVER
        try:
            return self._factories[name]
        except KeyError:
            raise UnknownSolverError(
                f"unknown solver {name}; known solvers: {', '.join(self.names())}"
            ) from None

    def create(self, name: Optional[str], solver_input: SolverInput) -> Solver:
        return self.resolve(name)(solver_input)

    def names(self) -> List[str]:
        return sorted(self._factories)

    def __contains__(self, name: str) -> bool:
        return name in self._factories


def default_registry() -> SolverRegistry:
    """Registry with every strategy shipped in this package."""
    from . import bruteforce, graph

    registry = SolverRegistry()
    bruteforce.register(registry)
    graph.register(registry)
    return registry
