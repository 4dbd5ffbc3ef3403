"""
Graph solver: reduce a map to shortest paths between points of interest
and evolve the order in which they are visited.
"""

import logging
from typing import Dict, List, Optional

from .genetics import Chromosome, CorruptChromosomeError, Species
from .maps import Direction, Map, Vertex, SPACE
from .path import Path
from .solver import Solver, SolverKind, SolverRegistry

logger = logging.getLogger(__name__)

# Order in which neighbours are expanded; fixes which of several equally
# short paths is kept
EXPANSION_ORDER = (Direction.UP, Direction.DOWN, Direction.LEFT, Direction.RIGHT)

ConnectivityTable = List[List[Optional[Path]]]


def connectivity_graph(m: Map, poi_lookup: Dict[Vertex, int], start: Vertex) -> List[Optional[Path]]:
    """
    Find the shortest path from start to every other point of interest.

    This is a breadth-first expansion: every move costs one step, so the
    first time a cell is reached it is reached by a shortest path and no
    cell needs to be visited twice. Expansion stops at the map's step budget
    and does not continue through other points of interest.

    Args:
        m: Map to search
        poi_lookup: Vertex -> index into m.points_of_interest
        start: Vertex to search from

    Returns:
        One entry per point of interest: the shortest path from start, or
        None if it can't be reached within the step budget. The entry for
        start itself is None.
    """
    res: List[Optional[Path]] = [None] * len(m.points_of_interest)

    frontier = [(Path(), start)]
    seen = {start}

    for _ in range(m.steps_allowed):
        next_frontier = []
        for path, v in frontier:
            for d in EXPANSION_ORDER:
                v2 = v.move(d)
                if not m.can_be_at(v2) or v2 in seen:
                    continue
                seen.add(v2)

                p2 = path.push(d)
                if m.at(v2) != SPACE:
                    res[poi_lookup[v2]] = p2
                    continue

                next_frontier.append((p2, v2))
        frontier = next_frontier
        if not frontier:
            break

    return res


def build_connectivity_table(m: Map) -> ConnectivityTable:
    """Shortest paths between every ordered pair of points of interest."""
    poi_lookup = {poi: i for i, poi in enumerate(m.points_of_interest)}
    return [connectivity_graph(m, poi_lookup, v) for v in m.points_of_interest]


class GraphSolver(Solver):
    """
    Solves a Goldmine map as a route through its points of interest.

    init() precomputes the connectivity table. Each allele names the next
    point of interest to walk to (allele n is point n + 1, since the start
    is always first). Edges that don't exist or would overrun the step
    budget are skipped.

    Chromosomes belong to a permutation species, so the evolver breeds them
    with its permutation operators. Because the permutation space is huge,
    one random chromosome is replaced by a fresh permutation after every
    generation.
    """

    kind = SolverKind.GRAPH

    def __init__(self, solver_input):
        super().__init__(solver_input)
        self.paths: ConnectivityTable = []

    def _build_species(self) -> Species:
        # -1 because we always start at points_of_interest[0]
        nodes = len(self.map.points_of_interest) - 1
        bits = max(1, (nodes - 1).bit_length())
        return Species(bits_per_gene=bits, num_genes=nodes, allele_count=max(nodes, 1), permutation=True)

    def _prepare(self) -> None:
        self.paths = build_connectivity_table(self.map)
        edges = sum(1 for row in self.paths for p in row if p is not None)
        logger.info(
            "Map has %d points of interest and %d meaningful paths",
            len(self.map.points_of_interest), edges
        )

    def _new_chromosome(self) -> Chromosome:
        return self.species.new_permutation(self.rng)

    def _decode(self, chromosome: Chromosome) -> Path:
        p = Path()
        targets = len(self.paths)

        current = 0
        for gene in chromosome.genes:
            target = gene + 1
            if not 0 < target < targets:
                raise CorruptChromosomeError(f"Gene {gene} names no point of interest")
            candidate = self.paths[current][target]
            if candidate is None or len(candidate) + len(p) > self.map.steps_allowed:
                continue
            p.concat(candidate)
            current = target

        return p

    def _after_generation(self) -> None:
        victim = int(self.rng.integers(0, len(self.population)))
        self.population[victim] = self.species.new_permutation(self.rng)


def register(registry: SolverRegistry) -> None:
    registry.register(SolverKind.GRAPH.value, GraphSolver)
