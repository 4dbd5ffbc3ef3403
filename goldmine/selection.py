"""
Natural selection strategies for choosing parents.
"""

from typing import List, Optional, Sequence

import numpy as np

from .genetics import Fitness, RandomSource


class NaturalSelection:
    """
    Picks which members of a population get to breed.

    A NaturalSelection is not thread safe: it owns its random source and
    may only be used by one evolver at a time.
    """

    name = "abstract"

    def select_parents(self, num_parents: int, fitness: Sequence[Fitness]) -> List[int]:
        """
        Args:
            num_parents: How many parent indexes to return
            fitness: Fitness of each candidate; non-negative

        Returns:
            Indexes into fitness, possibly repeated
        """
        raise NotImplementedError


class StochasticUniversalSampling(NaturalSelection):
    """
    Roulette wheel selection with evenly spaced pointers.

    Every candidate gets a slice of the wheel proportional to its fitness.
    Instead of spinning once per parent, the wheel is spun once and
    num_parents pointers are laid out total/num_parents apart. A candidate
    whose slice holds several pointers is selected repeatedly.

    Integer arithmetic is used for the pointer distance, so results are only
    proportional when the total fitness is much larger than num_parents.
    With a total fitness of 0 every pointer lands on index 0.
    """

    name = "sus"

    def __init__(self, rng: Optional[RandomSource] = None):
        """
        Args:
            rng: Random source owned by this selector; a fresh
                numpy Generator when omitted
        """
        self.rng = rng if rng is not None else np.random.default_rng()

    def select_parents(self, num_parents: int, fitness: Sequence[Fitness]) -> List[int]:
        if num_parents <= 0 or not len(fitness):
            return []

        total_fitness = sum(fitness)
        if total_fitness <= 0:
            return [0] * num_parents

        distance = total_fitness // num_parents
        # Spinning the wheel once is the same as picking an offset in [0, distance)
        pos = int(self.rng.integers(0, distance)) if distance > 0 else 0

        indexes = []
        accum_fitness = 0
        for n, f in enumerate(fitness):
            accum_fitness += f
            while len(indexes) < num_parents and pos < accum_fitness:
                indexes.append(n)
                pos += distance
            if len(indexes) == num_parents:
                break

        return indexes


SELECTIONS = {
    StochasticUniversalSampling.name: StochasticUniversalSampling,
}
