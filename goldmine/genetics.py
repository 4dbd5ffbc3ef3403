"""
Genetic encoding: species, chromosomes and gene scoring.

A Species describes how a fixed number of fixed-width alleles are packed into
a single 64-bit integer. A Chromosome is one candidate solution of a Species.
Keeping the two apart lets the same genetic machinery be reused for different
encodings (direct moves, permutations of points of interest, weights).
"""

from dataclasses import dataclass, field
from typing import List, Optional, Protocol, Sequence, Tuple


# Single trait controlling behavior
Gene = int

# Arbitrary fitness number based on genes and their matching traits
Fitness = int

MAX_BITS_PER_GENE = 8
MAX_CHROMOSOME_BITS = 64
MAX_GENE = 0xF


class RandomSource(Protocol):
    """
    The subset of numpy.random.Generator the genetic code relies on.

    Tests swap in deterministic implementations. A RandomSource is not
    thread safe; every solver or selector owns its own.
    """

    def integers(self, low, high=None): ...

    def random(self): ...

    def permutation(self, x): ...

    def choice(self, a, size=None, replace=True): ...


class SpeciesError(ValueError):
    """Raised for invalid species parameters or incompatible chromosomes."""
    pass


class CorruptChromosomeError(RuntimeError):
    """Raised when an allele holds a value its species can never produce."""
    pass


class GeneScorer:
    """Computes a fitness contribution from a trait and its gene weight."""

    name = "abstract"

    def score_fitness(self, trait: int, gene: Gene) -> Fitness:
        raise NotImplementedError

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


class GeometricScorer(GeneScorer):
    """trait * gene, with the gene's magnitude capped at MAX_GENE."""

    name = "geometric"

    def score_fitness(self, trait: int, gene: Gene) -> Fitness:
        gene = max(-MAX_GENE, min(MAX_GENE, gene))
        return trait * gene


class ExponentialScorer(GeneScorer):
    """trait ** |gene|, negative when exactly one of trait and gene is."""

    name = "exponential"

    def score_fitness(self, trait: int, gene: Gene) -> Fitness:
        negative = (trait < 0) != (gene < 0)
        power = min(abs(gene), MAX_GENE)
        total = abs(trait) ** power
        return -total if negative else total


GEOMETRIC = GeometricScorer()
EXPONENTIAL = ExponentialScorer()


@dataclass(frozen=True)
class Species:
    """
    Factory and schema for all chromosomes of one evolutionary experiment.

    Attributes:
        bits_per_gene: Width of a single allele (1..8)
        num_genes: Number of alleles per chromosome
        scorer: How gene weights turn traits into fitness
        signed_genes: Allele indices whose value is centred on zero
        allele_count: Number of legal allele values; defaults to 2**bits_per_gene
        permutation: Every chromosome is an ordering of range(num_genes)
    """
    bits_per_gene: int
    num_genes: int
    scorer: GeneScorer = GEOMETRIC
    signed_genes: Tuple[int, ...] = ()
    allele_count: Optional[int] = None
    permutation: bool = False

    def __post_init__(self):
        """Validate encoding limits."""
        if self.bits_per_gene > MAX_BITS_PER_GENE:
            raise SpeciesError(f"Cannot support more than {MAX_BITS_PER_GENE} bits per gene")
        if self.bits_per_gene < 1:
            raise SpeciesError("A gene needs at least one bit")
        if self.num_genes < 0:
            raise SpeciesError(f"Gene count must not be negative, got {self.num_genes}")
        if self.bits_per_gene * self.num_genes > MAX_CHROMOSOME_BITS:
            raise SpeciesError(f"Cannot support more than {MAX_CHROMOSOME_BITS} bits per chromosome")

        object.__setattr__(self, "signed_genes", tuple(self.signed_genes))
        for n in self.signed_genes:
            if not 0 <= n < self.num_genes:
                raise SpeciesError(f"Signed gene {n} is out of range [0, {self.num_genes})")

        limit = 1 << self.bits_per_gene
        if self.allele_count is None:
            object.__setattr__(self, "allele_count", limit)
        elif not 1 <= self.allele_count <= limit:
            raise SpeciesError(
                f"Allele count {self.allele_count} does not fit in {self.bits_per_gene} bits"
            )
        if self.permutation and self.num_genes > self.allele_count:
            raise SpeciesError(
                f"Cannot permute {self.num_genes} genes with only {self.allele_count} allele values"
            )

    @property
    def mask(self) -> int:
        return (1 << self.bits_per_gene) - 1

    def new_chromosome(self, genes: Sequence[Gene]) -> "Chromosome":
        """
        Wrap alleles in a chromosome of this species.

        Raises:
            SpeciesError: If the gene count or an allele value doesn't fit, or
                a permutation species gets alleles that aren't a permutation
        """
        genes = [int(g) for g in genes]
        if len(genes) != self.num_genes:
            raise SpeciesError(f"Wrong gene count; expected={self.num_genes} got={len(genes)}")
        for g in genes:
            if not 0 <= g < self.allele_count:
                raise SpeciesError(f"Allele {g} is out of range [0, {self.allele_count})")
        if self.permutation and sorted(genes) != list(range(self.num_genes)):
            raise SpeciesError(f"Alleles {genes} are not a permutation of range({self.num_genes})")
        return Chromosome(species=self, genes=genes)

    def random_allele(self, rng: RandomSource) -> Gene:
        return int(rng.integers(0, self.allele_count))

    def new_random(self, rng: RandomSource) -> "Chromosome":
        """
        Chromosome with every allele drawn uniformly from the legal range.

        Permutation species get a random permutation instead.
        """
        if self.permutation:
            return self.new_permutation(rng)
        return Chromosome(species=self, genes=[self.random_allele(rng) for _ in range(self.num_genes)])

    def new_permutation(self, rng: RandomSource) -> "Chromosome":
        """
        Chromosome whose alleles are a random ordering of range(num_genes).

        Raises:
            SpeciesError: If num_genes distinct values don't fit the allele range
        """
        if self.num_genes > self.allele_count:
            raise SpeciesError(
                f"Cannot permute {self.num_genes} genes with only {self.allele_count} allele values"
            )
        return Chromosome(species=self, genes=[int(g) for g in rng.permutation(self.num_genes)])

    def serialize_chromosome(self, chromosome: "Chromosome") -> int:
        """
        Pack alleles into an integer, first allele in the most significant bits.

        Raises:
            SpeciesError: If the chromosome's gene count doesn't match
        """
        if len(chromosome.genes) != self.num_genes:
            raise SpeciesError(
                f"Wrong gene count; expected={self.num_genes} got={len(chromosome.genes)}"
            )

        serialized = 0
        for allele in chromosome.genes:
            if not 0 <= allele <= self.mask:
                raise SpeciesError(f"Allele {allele} does not fit in {self.bits_per_gene} bits")
            serialized = (serialized << self.bits_per_gene) | allele
        return serialized

    def deserialize_chromosome(self, serialized: int) -> "Chromosome":
        """
        Unpack a value created by serialize_chromosome.

        Raises:
            SpeciesError: If the value has bits beyond num_genes * bits_per_gene
        """
        if serialized < 0:
            raise SpeciesError(f"serialized chromosome must not be negative; got {serialized}")

        # Reverse fill; the least significant chunk is the last allele
        alleles = [0] * self.num_genes
        for n in range(self.num_genes - 1, -1, -1):
            alleles[n] = serialized & self.mask
            serialized >>= self.bits_per_gene
        if serialized != 0:
            raise SpeciesError(
                f"serialized chromosome is too long; after deserialization have {serialized:x}"
            )
        return Chromosome(species=self, genes=alleles)

    def weight(self, chromosome: "Chromosome", index: int) -> int:
        """
        Weight encoded by one allele.

        Signed alleles are shifted so that the middle of their range is zero,
        which keeps small genetic changes small behavioral changes.
        """
        gene = chromosome.genes[index]
        if index in self.signed_genes:
            gene -= 1 << (self.bits_per_gene - 1)
        return gene

    def fitness(self, chromosome: "Chromosome", traits: Sequence[int]) -> Fitness:
        """Sum of the scorer over (trait, weight) pairs, one trait per gene."""
        if len(traits) != self.num_genes:
            raise SpeciesError(f"Expected {self.num_genes} traits, got {len(traits)}")
        return sum(
            self.scorer.score_fitness(trait, self.weight(chromosome, i))
            for i, trait in enumerate(traits)
        )


@dataclass
class Chromosome:
    """
    A single genetic strategy for a Species.

    Attributes:
        species: Schema describing how to read the alleles
        genes: Allele values, len(genes) == species.num_genes
    """
    species: Species
    genes: List[Gene] = field(default_factory=list)

    def copy(self) -> "Chromosome":
        return Chromosome(species=self.species, genes=list(self.genes))

    def serialize(self) -> int:
        return self.species.serialize_chromosome(self)

    def __len__(self) -> int:
        return len(self.genes)
