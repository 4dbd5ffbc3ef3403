"""
Goldmine: genetic search for high scoring paths on Goldmine maps.

A Goldmine map is a grid with a start cell, walls, value cells and pickaxe
cells. A path of at most the map's step budget collects value cells once
each; every pickaxe collected doubles the worth of later value cells.

Modules:
- maps: Board model and map record reader
- path: Paths, padding and the scoring function
- genetics: Species/Chromosome bit-packed encoding and gene scorers
- selection: Natural selection (stochastic universal sampling)
- crossover: Chromosome crossover operators
- mutation: Chromosome mutation operators
- evolver: Next-generation creation from a scored population
- solver: Solver state machine and strategy registry
- bruteforce: Direct move encoding solver
- graph: Points-of-interest permutation solver over shortest paths
- orchestration: Solve every map of an input stream
- cli: Run configuration loading, validation, and entry point
"""

__version__ = "0.1.0"

from .maps import Map, MapReader, MapParseError, Vertex, Direction, INVALID_VERTEX
from .path import Path
from .genetics import Species, Chromosome, SpeciesError, GEOMETRIC, EXPONENTIAL
from .selection import StochasticUniversalSampling
from .evolver import StandardEvolver, build_evolver
from .solver import Solver, SolverInput, SolverKind, SolverRegistry, UnknownSolverError, default_registry

__all__ = [
    "Map",
    "MapReader",
    "MapParseError",
    "Vertex",
    "Direction",
    "INVALID_VERTEX",
    "Path",
    "Species",
    "Chromosome",
    "SpeciesError",
    "GEOMETRIC",
    "EXPONENTIAL",
    "StochasticUniversalSampling",
    "StandardEvolver",
    "build_evolver",
    "Solver",
    "SolverInput",
    "SolverKind",
    "SolverRegistry",
    "UnknownSolverError",
    "default_registry",
]
