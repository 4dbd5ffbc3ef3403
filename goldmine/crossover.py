"""
Crossover operators for chromosomes.

Operators exchange whole alleles between two parents, so every child allele
is a value one of its parents already held and stays within its species'
allele range.
"""

from typing import List, Tuple

import numpy as np

from .genetics import Chromosome, SpeciesError


def _check_parents(parent_a: Chromosome, parent_b: Chromosome) -> None:
    if parent_a.species != parent_b.species:
        raise SpeciesError("Cannot cross chromosomes of different species")


def single_point_crossover(
    parent_a: Chromosome,
    parent_b: Chromosome,
    rng: np.random.Generator
) -> Tuple[Chromosome, Chromosome]:
    """
    Swap the tails of two chromosomes after a random gene boundary.

    The crossover point is drawn from [1, num_genes), so both children
    always keep at least one allele from each parent. Chromosomes with
    fewer than two genes are returned as copies.

    Args:
        parent_a: First parent
        parent_b: Second parent
        rng: Random number generator

    Returns:
        Tuple of (child_a, child_b)
    """
    _check_parents(parent_a, parent_b)

    num_genes = len(parent_a.genes)
    if num_genes < 2:
        return parent_a.copy(), parent_b.copy()

    point = int(rng.integers(1, num_genes))

    child_a = Chromosome(parent_a.species, parent_a.genes[:point] + parent_b.genes[point:])
    child_b = Chromosome(parent_b.species, parent_b.genes[:point] + parent_a.genes[point:])
    return child_a, child_b


def uniform_crossover(
    parent_a: Chromosome,
    parent_b: Chromosome,
    rng: np.random.Generator,
    swap_rate: float = 0.5
) -> Tuple[Chromosome, Chromosome]:
    """
    Independently swap each allele position between two chromosomes.

    Args:
        parent_a: First parent
        parent_b: Second parent
        rng: Random number generator
        swap_rate: Probability that a given position is swapped

    Returns:
        Tuple of (child_a, child_b)
    """
    _check_parents(parent_a, parent_b)

    child_a = parent_a.copy()
    child_b = parent_b.copy()
    for i in range(len(child_a.genes)):
        if rng.random() < swap_rate:
            child_a.genes[i], child_b.genes[i] = child_b.genes[i], child_a.genes[i]

    return child_a, child_b


def _order_fill(keep: List[int], donor: List[int], start: int, end: int) -> List[int]:
    segment = keep[start:end]
    used = set(segment)
    rest = [g for g in donor if g not in used]
    return rest[:start] + segment + rest[start:]


def order_crossover(
    parent_a: Chromosome,
    parent_b: Chromosome,
    rng: np.random.Generator
) -> Tuple[Chromosome, Chromosome]:
    """
    Order crossover (OX) for permutation chromosomes.

    Each child keeps a random slice of one parent in place and fills the
    remaining positions with the other parent's alleles in the order they
    appear there, so both children are permutations again.

    Args:
        parent_a: First parent
        parent_b: Second parent
        rng: Random number generator

    Returns:
        Tuple of (child_a, child_b)

    Raises:
        SpeciesError: If the parents are not orderings of the same alleles
    """
    _check_parents(parent_a, parent_b)
    if sorted(parent_a.genes) != sorted(parent_b.genes) or len(set(parent_a.genes)) != len(parent_a.genes):
        raise SpeciesError("Order crossover needs parents that are permutations of the same alleles")

    num_genes = len(parent_a.genes)
    if num_genes < 2:
        return parent_a.copy(), parent_b.copy()

    start, end = sorted(int(i) for i in rng.choice(num_genes + 1, size=2, replace=False))

    child_a = Chromosome(parent_a.species, _order_fill(parent_a.genes, parent_b.genes, start, end))
    child_b = Chromosome(parent_b.species, _order_fill(parent_b.genes, parent_a.genes, start, end))
    return child_a, child_b


CROSSOVERS = {
    "single_point": single_point_crossover,
    "uniform": uniform_crossover,
}

# Operators that turn permutations into permutations
PERMUTATION_CROSSOVERS = {
    "order": order_crossover,
}
