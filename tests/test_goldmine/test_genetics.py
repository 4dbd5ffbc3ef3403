"""
Tests for species construction, chromosome serialization and gene scoring.
"""

import unittest

import numpy as np

from goldmine.genetics import (
    EXPONENTIAL,
    GEOMETRIC,
    Chromosome,
    Species,
    SpeciesError,
)


class TestSpeciesConstruction(unittest.TestCase):
    """Test encoding limits enforced by Species."""

    def test_valid_species(self):
        species = Species(bits_per_gene=4, num_genes=16, scorer=GEOMETRIC, signed_genes=(0, 15))
        self.assertEqual(species.allele_count, 16)
        self.assertEqual(species.mask, 0xF)
        self.assertEqual(species.signed_genes, (0, 15))

    def test_too_many_bits_per_gene(self):
        with self.assertRaises(SpeciesError):
            Species(bits_per_gene=9, num_genes=1)

    def test_too_many_bits_per_chromosome(self):
        Species(bits_per_gene=8, num_genes=8)
        with self.assertRaises(SpeciesError):
            Species(bits_per_gene=8, num_genes=9)
        with self.assertRaises(SpeciesError):
            Species(bits_per_gene=2, num_genes=33)

    def test_signed_gene_out_of_range(self):
        with self.assertRaises(SpeciesError):
            Species(bits_per_gene=4, num_genes=3, signed_genes=(3,))
        with self.assertRaises(SpeciesError):
            Species(bits_per_gene=4, num_genes=3, signed_genes=(-1,))

    def test_allele_count_must_fit(self):
        Species(bits_per_gene=2, num_genes=4, allele_count=3)
        with self.assertRaises(SpeciesError):
            Species(bits_per_gene=2, num_genes=4, allele_count=5)


class TestSerialization(unittest.TestCase):
    """Test packing chromosomes into integers."""

    def test_serialize_most_significant_first(self):
        species = Species(bits_per_gene=4, num_genes=3)
        chromosome = species.new_chromosome([0x1, 0x2, 0xF])
        self.assertEqual(species.serialize_chromosome(chromosome), 0x12F)
        self.assertEqual(chromosome.serialize(), 0x12F)

    def test_deserialize_least_significant_is_last(self):
        species = Species(bits_per_gene=3, num_genes=3)
        chromosome = species.deserialize_chromosome(0b001_010_111)
        self.assertEqual(chromosome.genes, [1, 2, 7])
        self.assertIs(chromosome.species, species)

    def test_roundtrip(self):
        rng = np.random.default_rng(42)
        for bits in range(1, 9):
            num_genes = 1
            while bits * num_genes < 64:
                species = Species(bits_per_gene=bits, num_genes=num_genes)
                for _ in range(5):
                    value = int(rng.integers(0, 1 << (bits * num_genes), dtype=np.uint64))
                    chromosome = species.deserialize_chromosome(value)
                    self.assertEqual(
                        species.serialize_chromosome(chromosome), value,
                        f"bits={bits} genes={num_genes} value={value:x}"
                    )
                num_genes += 1

    def test_full_64_bit_chromosome(self):
        species = Species(bits_per_gene=8, num_genes=8)
        value = 0xFFEEDDCCBBAA9988
        self.assertEqual(species.serialize_chromosome(species.deserialize_chromosome(value)), value)

    def test_serialized_value_too_long(self):
        species = Species(bits_per_gene=2, num_genes=3)
        species.deserialize_chromosome(0b111111)
        with self.assertRaises(SpeciesError):
            species.deserialize_chromosome(0b1000000)

    def test_wrong_gene_count(self):
        species = Species(bits_per_gene=2, num_genes=3)
        with self.assertRaises(SpeciesError):
            species.serialize_chromosome(Chromosome(species=species, genes=[1, 2]))
        with self.assertRaises(SpeciesError):
            species.new_chromosome([1, 2, 3, 0])

    def test_allele_too_wide(self):
        species = Species(bits_per_gene=2, num_genes=2)
        with self.assertRaises(SpeciesError):
            species.serialize_chromosome(Chromosome(species=species, genes=[1, 4]))


class TestChromosomeFactories(unittest.TestCase):
    """Test random and permutation chromosomes."""

    def setUp(self):
        self.rng = np.random.default_rng(42)

    def test_new_random_respects_allele_count(self):
        species = Species(bits_per_gene=3, num_genes=20, allele_count=5)
        for _ in range(20):
            chromosome = species.new_random(self.rng)
            self.assertEqual(len(chromosome), 20)
            self.assertTrue(all(0 <= g < 5 for g in chromosome.genes))

    def test_new_permutation(self):
        species = Species(bits_per_gene=3, num_genes=6, allele_count=6)
        chromosome = species.new_permutation(self.rng)
        self.assertEqual(sorted(chromosome.genes), list(range(6)))
        self.assertTrue(all(isinstance(g, int) for g in chromosome.genes))

    def test_permutation_needs_enough_alleles(self):
        species = Species(bits_per_gene=2, num_genes=5)
        with self.assertRaises(SpeciesError):
            species.new_permutation(self.rng)

    def test_permutation_species(self):
        species = Species(bits_per_gene=2, num_genes=4, permutation=True)
        self.assertEqual(sorted(species.new_random(self.rng).genes), [0, 1, 2, 3])
        self.assertEqual(species.new_chromosome([3, 1, 0, 2]).genes, [3, 1, 0, 2])
        with self.assertRaises(SpeciesError):
            species.new_chromosome([3, 1, 1, 2])
        with self.assertRaises(SpeciesError):
            Species(bits_per_gene=2, num_genes=5, allele_count=4, permutation=True)

    def test_copy_is_independent(self):
        species = Species(bits_per_gene=2, num_genes=3)
        original = species.new_chromosome([0, 1, 2])
        clone = original.copy()
        clone.genes[0] = 3
        self.assertEqual(original.genes, [0, 1, 2])
        self.assertEqual(clone.species, original.species)


class TestGeneScoring(unittest.TestCase):
    """Test gene scorers and signed weights."""

    def test_geometric(self):
        self.assertEqual(GEOMETRIC.score_fitness(3, 4), 12)
        self.assertEqual(GEOMETRIC.score_fitness(3, 0x1F), 3 * 0xF)
        self.assertEqual(GEOMETRIC.score_fitness(2, -20), -2 * 0xF)

    def test_exponential(self):
        self.assertEqual(EXPONENTIAL.score_fitness(2, 3), 8)
        self.assertEqual(EXPONENTIAL.score_fitness(-2, 3), -8)
        self.assertEqual(EXPONENTIAL.score_fitness(-2, -3), 8)
        self.assertEqual(EXPONENTIAL.score_fitness(5, 0), 1)

    def test_signed_weight_is_centred(self):
        species = Species(bits_per_gene=4, num_genes=2, signed_genes=(1,))
        chromosome = species.new_chromosome([3, 3])
        self.assertEqual(species.weight(chromosome, 0), 3)
        self.assertEqual(species.weight(chromosome, 1), 3 - 8)

    def test_fitness_sums_traits(self):
        species = Species(bits_per_gene=4, num_genes=3, scorer=GEOMETRIC, signed_genes=(2,))
        chromosome = species.new_chromosome([2, 5, 8])
        # 10*2 + 1*5 + 7*(8-8)
        self.assertEqual(species.fitness(chromosome, [10, 1, 7]), 25)
        with self.assertRaises(SpeciesError):
            species.fitness(chromosome, [1, 2])


if __name__ == "__main__":
    unittest.main()
