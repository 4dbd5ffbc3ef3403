"""
Evolvers turn a scored population into the next generation.
"""

import logging
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

import numpy as np

from .crossover import CROSSOVERS, PERMUTATION_CROSSOVERS
from .genetics import Chromosome, Fitness, RandomSource
from .mutation import MUTATIONS, PERMUTATION_MUTATIONS
from .selection import SELECTIONS, NaturalSelection, StochasticUniversalSampling

logger = logging.getLogger(__name__)

CrossoverFn = Callable[[Chromosome, Chromosome, RandomSource], Tuple[Chromosome, Chromosome]]
MutationFn = Callable[[Chromosome, RandomSource], Chromosome]

DEFAULT_EVOLVER_CONFIG = {
    'replacement_count': 20,
    'crossover_rate': 0.7,
    'mutation_rate': 0.02,
    'selection': 'sus',
    'crossover': 'single_point',
    'mutation': 'point',
    'permutation_crossover': 'order',
    'permutation_mutation': 'swap',
}


class Evolver:
    """
    Creates the next generation of a population from its fitness.

    The population passed in is only read; the next generation is returned
    as a new list of new chromosomes.
    """

    def evolve(
        self,
        rng: RandomSource,
        population: Sequence[Chromosome],
        fitness: Sequence[Fitness]
    ) -> List[Chromosome]:
        raise NotImplementedError


class StandardEvolver(Evolver):
    """
    Steady-state evolver.

    Each generation the replacement_count weakest chromosomes die. They are
    replaced by children of parents picked through natural selection; a pair
    of parents is crossed over with probability crossover_rate and each
    child is mutated with probability mutation_rate.

    Populations of a permutation species are bred with the permutation
    operators instead, so every child stays a permutation.

    Attributes:
        replacement_count: Chromosomes replaced per generation
        crossover_rate: Probability that a pair of parents is crossed over
        mutation_rate: Probability that a child receives a mutation
        selector: Natural selection strategy used to pick parents
        crossover: Crossover operator
        mutator: Mutation operator
        permutation_crossover: Crossover operator for permutation species
        permutation_mutator: Mutation operator for permutation species
    """

    def __init__(
        self,
        replacement_count: int = 20,
        crossover_rate: float = 0.7,
        mutation_rate: float = 0.02,
        selector: Optional[NaturalSelection] = None,
        crossover: CrossoverFn = CROSSOVERS['single_point'],
        mutator: MutationFn = MUTATIONS['point'],
        permutation_crossover: CrossoverFn = PERMUTATION_CROSSOVERS['order'],
        permutation_mutator: MutationFn = PERMUTATION_MUTATIONS['swap'],
    ):
        if replacement_count < 0:
            raise ValueError(f"replacement_count must not be negative, got {replacement_count}")
        self.replacement_count = replacement_count
        self.crossover_rate = crossover_rate
        self.mutation_rate = mutation_rate
        self.selector = selector if selector is not None else StochasticUniversalSampling()
        self.crossover = crossover
        self.mutator = mutator
        self.permutation_crossover = permutation_crossover
        self.permutation_mutator = permutation_mutator

    def evolve(
        self,
        rng: RandomSource,
        population: Sequence[Chromosome],
        fitness: Sequence[Fitness]
    ) -> List[Chromosome]:
        """
        Args:
            rng: Random source for crossover and mutation decisions
            population: Current generation
            fitness: Fitness of each chromosome, parallel to population

        Returns:
            Next generation, same size as population

        Raises:
            ValueError: If population and fitness have different lengths
        """
        if len(population) != len(fitness):
            raise ValueError(
                f"chromosomes and fitness scores are different lengths "
                f"({len(population)} and {len(fitness)})"
            )

        size = len(population)
        replacements = min(self.replacement_count, size)
        if replacements == 0:
            return [c.copy() for c in population]

        # Weakest first; stable so ties keep population order
        order = np.argsort(np.asarray(fitness, dtype=np.int64), kind='stable')
        victims = {int(i) for i in order[:replacements]}
        survivors = [population[i].copy() for i in range(size) if i not in victims]

        # Every candidate keeps a slice of the wheel even with a score of 0
        weights = [max(int(f), 0) + 1 for f in fitness]

        if population[0].species.permutation:
            crossover, mutator = self.permutation_crossover, self.permutation_mutator
        else:
            crossover, mutator = self.crossover, self.mutator

        num_pairs = (replacements + 1) // 2
        # At most one parent per candidate keeps the pointer distance >= 1
        parents = self.selector.select_parents(min(num_pairs * 2, size), weights)
        # Selection returns sorted indexes; shuffle so pairs aren't neighbours
        parents = [parents[int(i)] for i in rng.permutation(len(parents))]

        children = []
        for n in range(num_pairs):
            child_a = population[parents[(2 * n) % len(parents)]].copy()
            child_b = population[parents[(2 * n + 1) % len(parents)]].copy()
            if rng.random() < self.crossover_rate:
                child_a, child_b = crossover(child_a, child_b, rng)
            for child in (child_a, child_b):
                if rng.random() < self.mutation_rate:
                    child = mutator(child, rng)
                children.append(child)

        return survivors + children[:replacements]


def build_evolver(config: Optional[Dict[str, Any]] = None, rng: Optional[np.random.Generator] = None) -> StandardEvolver:
    """
    Create a StandardEvolver from an 'evolver' configuration section.

    Args:
        config: Keys as in DEFAULT_EVOLVER_CONFIG; missing keys use defaults
        rng: Random source handed to the natural selection strategy

    Returns:
        Configured StandardEvolver

    Raises:
        KeyError: If a selection, crossover or mutation name is unknown
    """
    settings = dict(DEFAULT_EVOLVER_CONFIG)
    settings.update(config or {})

    for key, known in (
        ('selection', SELECTIONS),
        ('crossover', CROSSOVERS),
        ('mutation', MUTATIONS),
        ('permutation_crossover', PERMUTATION_CROSSOVERS),
        ('permutation_mutation', PERMUTATION_MUTATIONS),
    ):
        if settings[key] not in known:
            raise KeyError(f"Unknown {key} '{settings[key]}'. Must be one of: {sorted(known)}")

    selector = SELECTIONS[settings['selection']](rng)
    logger.debug(
        "Evolver: replace %d per generation, crossover=%s@%.2f, mutation=%s@%.2f, selection=%s",
        settings['replacement_count'], settings['crossover'], settings['crossover_rate'],
        settings['mutation'], settings['mutation_rate'], settings['selection'],
    )

    return StandardEvolver(
        replacement_count=settings['replacement_count'],
        crossover_rate=settings['crossover_rate'],
        mutation_rate=settings['mutation_rate'],
        selector=selector,
        crossover=CROSSOVERS[settings['crossover']],
        mutator=MUTATIONS[settings['mutation']],
        permutation_crossover=PERMUTATION_CROSSOVERS[settings['permutation_crossover']],
        permutation_mutator=PERMUTATION_MUTATIONS[settings['permutation_mutation']],
    )
