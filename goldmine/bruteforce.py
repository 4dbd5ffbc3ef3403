"""
Brute force solver: every allele is one move.
"""

from .genetics import Chromosome, CorruptChromosomeError, Gene, Species
from .maps import Direction
from .path import Path
from .solver import Solver, SolverKind, SolverRegistry

# How many extra genes to allow for walking into disallowed spaces
GENOME_PADDING_RATIO = 1.2

# Allele value -> move
DIRECTIONS = (Direction.UP, Direction.DOWN, Direction.LEFT, Direction.RIGHT)


def to_direction(gene: Gene) -> Direction:
    """
    Raises:
        CorruptChromosomeError: If gene is not one of the four moves
    """
    if not 0 <= gene < len(DIRECTIONS):
        raise CorruptChromosomeError(f"Unexpected gene {gene}")
    return DIRECTIONS[gene]


class BruteforceSolver(Solver):
    """
    Solves a Goldmine map by evolving raw move sequences.

    A chromosome holds steps_allowed * GENOME_PADDING_RATIO two-bit alleles.
    Decoding follows the moves in order and skips any move that would leave
    the board or hit a wall, so the extra alleles make up for skipped moves.
    """

    kind = SolverKind.BRUTEFORCE

    def _build_species(self) -> Species:
        num_genes = int(self.map.steps_allowed * GENOME_PADDING_RATIO)
        return Species(bits_per_gene=2, num_genes=num_genes, allele_count=len(DIRECTIONS))

    def _decode(self, chromosome: Chromosome) -> Path:
        p = Path()
        v = self.map.start

        for gene in chromosome.genes:
            if len(p) >= self.map.steps_allowed:
                break
            d = to_direction(gene)
            v2 = v.move(d)
            if not self.map.can_be_at(v2):
                continue
            p.append(d)
            v = v2

        return p


def register(registry: SolverRegistry) -> None:
    registry.register(SolverKind.BRUTEFORCE.value, BruteforceSolver)
