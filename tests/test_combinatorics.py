"""
Combinatorics Tests

Tests exhaustive permutation and combination enumeration.
"""

import itertools
import math
import unittest

from tests.fixtures import EvolutionFixtures
from evo_exceptions import ExhaustedSequence, InvalidArgument, InvalidConfiguration
from evo_logging import setup_logging
from evo_components.combinatorics import CombinationGenerator, PermutationGenerator, factorial


class TestPermutationGenerator(unittest.TestCase):
    """Test the lexicographic permutation enumerator."""

    def setUp(self):
        setup_logging(level="ERROR", log_to_file=False)

    def test_first_permutation_is_input_order(self):
        generator = PermutationGenerator(["x", "y", "z"])
        self.assertEqual(generator.next_permutation(), ["x", "y", "z"])

    def test_lexicographic_order(self):
        generator = PermutationGenerator("abc")
        self.assertEqual(["".join(p) for p in generator],
                         ["abc", "acb", "bac", "bca", "cab", "cba"])

    def test_all_distinct_and_complete(self):
        for n in range(1, 7):
            elements = list(range(n))
            generator = PermutationGenerator(elements)
            produced = []
            while generator.has_next():
                produced.append(tuple(generator.next_permutation()))
            self.assertEqual(len(produced), math.factorial(n))
            self.assertEqual(set(produced), set(itertools.permutations(elements)))

    def test_remaining_counts_down(self):
        generator = PermutationGenerator([1, 2, 3])
        self.assertEqual(generator.total_permutations, 6)
        self.assertEqual(generator.remaining_permutations, 6)
        generator.next_permutation()
        self.assertEqual(generator.remaining_permutations, 5)

    def test_exhausted(self):
        generator = PermutationGenerator([1, 2])
        generator.next_permutation()
        generator.next_permutation()
        self.assertFalse(generator.has_next())
        with self.assertRaises(ExhaustedSequence):
            generator.next_permutation()

    def test_reset_repeats_sequence(self):
        generator = PermutationGenerator("abcd")
        first_run = list(generator)
        generator.reset()
        self.assertTrue(generator.has_next())
        self.assertEqual(list(generator), first_run)

    def test_single_element(self):
        generator = PermutationGenerator([7])
        self.assertEqual(generator.next_permutation(), [7])
        self.assertFalse(generator.has_next())

    def test_fill_destination(self):
        generator = PermutationGenerator("ab")
        buffer = [None, None]
        self.assertIs(generator.next_permutation_into(buffer), buffer)
        self.assertEqual(buffer, ["a", "b"])
        generator.next_permutation_into(buffer)
        self.assertEqual(buffer, ["b", "a"])

    def test_destination_length_mismatch(self):
        generator = PermutationGenerator("abc")
        with self.assertRaises(InvalidArgument):
            generator.next_permutation_into([None, None])
        # A rejected call must not consume a permutation
        self.assertEqual(generator.remaining_permutations, 6)

    def test_input_is_copied(self):
        elements = [1, 2, 3]
        generator = PermutationGenerator(elements)
        elements[0] = 99
        self.assertEqual(generator.next_permutation(), [1, 2, 3])

    def test_size_limits(self):
        with self.assertRaises(InvalidConfiguration):
            PermutationGenerator([])
        with self.assertRaises(InvalidConfiguration):
            PermutationGenerator(range(21))
        self.assertEqual(PermutationGenerator(range(20)).total_permutations, factorial(20))

    def test_factorial(self):
        self.assertEqual(factorial(0), 1)
        self.assertEqual(factorial(20), 2432902008176640000)
        with self.assertRaises(InvalidArgument):
            factorial(21)
        with self.assertRaises(InvalidArgument):
            factorial(-1)


class TestCombinationGenerator(unittest.TestCase):
    """Test the k-combination enumerator."""

    def setUp(self):
        setup_logging(level="ERROR", log_to_file=False)

    def test_matches_itertools(self):
        elements = EvolutionFixtures.STRINGS + ["uvwxy"]
        generator = CombinationGenerator(elements, 3)
        self.assertEqual(generator.total_combinations, 10)
        self.assertEqual(list(generator), list(itertools.combinations(elements, 3)))

    def test_exhausted_and_reset(self):
        generator = CombinationGenerator("abc", 3)
        self.assertEqual(generator.next_combination(), ["a", "b", "c"])
        with self.assertRaises(ExhaustedSequence):
            generator.next_combination()
        generator.reset()
        self.assertEqual(generator.remaining_combinations, 1)

    def test_fill_destination(self):
        generator = CombinationGenerator("abcd", 2)
        buffer = [None, None]
        generator.next_combination_into(buffer)
        self.assertEqual(buffer, ["a", "b"])
        with self.assertRaises(InvalidArgument):
            generator.next_combination_into([None])

    def test_invalid_length(self):
        with self.assertRaises(InvalidConfiguration):
            CombinationGenerator("abc", 0)
        with self.assertRaises(InvalidConfiguration):
            CombinationGenerator("abc", 4)


if __name__ == '__main__':
    unittest.main()
