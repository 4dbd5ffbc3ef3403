"""
Mutation operators for chromosomes.

Every operator returns a new chromosome and leaves its input untouched.
Mutated alleles are always drawn from the species' legal allele range.
"""

import numpy as np

from .genetics import Chromosome


def point_mutation(chromosome: Chromosome, rng: np.random.Generator) -> Chromosome:
    """
    Replace one random allele with a random legal value.

    Args:
        chromosome: Chromosome to mutate
        rng: Random number generator

    Returns:
        Mutated copy
    """
    mutated = chromosome.copy()
    if not mutated.genes:
        return mutated

    idx = int(rng.integers(0, len(mutated.genes)))
    mutated.genes[idx] = mutated.species.random_allele(rng)
    return mutated


def swap_mutation(chromosome: Chromosome, rng: np.random.Generator) -> Chromosome:
    """
    Swap two random alleles.

    Keeps the multiset of alleles intact, so permutations stay permutations.
    """
    mutated = chromosome.copy()
    if len(mutated.genes) < 2:
        return mutated

    idx1, idx2 = (int(i) for i in rng.choice(len(mutated.genes), size=2, replace=False))
    mutated.genes[idx1], mutated.genes[idx2] = mutated.genes[idx2], mutated.genes[idx1]
    return mutated


MUTATIONS = {
    "point": point_mutation,
    "swap": swap_mutation,
}

# Operators that turn permutations into permutations
PERMUTATION_MUTATIONS = {
    "swap": swap_mutation,
}
