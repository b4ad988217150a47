"""
Mutation Operator Tests

Tests gating, mutation counts and representation invariants of the
mutation operators.
"""

import unittest

from tests.fixtures import EvolutionFixtures, SequenceGenerator
from evo_exceptions import InvalidConfiguration
from evo_logging import setup_logging
from evo_components.mutation import BitStringMutation, ListOrderMutation, StringMutation


class TestStringMutation(unittest.TestCase):

    def setUp(self):
        setup_logging(level="ERROR", log_to_file=False)
        self.rng = EvolutionFixtures.rng()

    def test_size_and_length_preserved(self):
        mutation = StringMutation("xyz", mutation_probability=1.0, mutation_count=2)
        result = mutation.apply(EvolutionFixtures.STRINGS, self.rng)
        self.assertEqual(len(result), 4)
        for before, after in zip(EvolutionFixtures.STRINGS, result):
            self.assertEqual(len(after), len(before))
            differences = sum(1 for a, b in zip(before, after) if a != b)
            self.assertLessEqual(differences, 2)
            self.assertTrue(set(after) <= set(before) | set("xyz"))

    def test_always_mutates_with_probability_one(self):
        mutation = StringMutation("z", mutation_probability=1.0, mutation_count=1)
        result = mutation.apply(["aaaa"] * 10, self.rng)
        self.assertTrue(all(candidate.count("z") == 1 for candidate in result))
        self.assertEqual(mutation.get_statistics()['mutations_performed'], 10)

    def test_zero_count_leaves_candidate(self):
        mutation = StringMutation("z", mutation_probability=1.0, mutation_count=SequenceGenerator([0]))
        self.assertEqual(mutation.apply(["aaaa"], self.rng), ["aaaa"])
        self.assertEqual(mutation.get_statistics()['mutations_performed'], 0)

    def test_negative_count_rejected(self):
        mutation = StringMutation("z", mutation_probability=1.0, mutation_count=SequenceGenerator([-2]))
        with self.assertRaises(InvalidConfiguration):
            mutation.apply(["aaaa"], self.rng)

    def test_invalid_configuration(self):
        with self.assertRaises(InvalidConfiguration):
            StringMutation("", mutation_probability=0.5)
        with self.assertRaises(InvalidConfiguration):
            StringMutation("ab", mutation_probability=0.0)
        with self.assertRaises(InvalidConfiguration):
            StringMutation("ab", mutation_probability=1.5)
        with self.assertRaises(InvalidConfiguration):
            StringMutation("ab", mutation_count=0)


class TestBitStringMutation(unittest.TestCase):

    def setUp(self):
        setup_logging(level="ERROR", log_to_file=False)

    def test_flips_exact_number_of_bits(self):
        mutation = BitStringMutation(mutation_probability=1.0, mutation_count=3)
        (result,) = mutation.apply(["00000000"], EvolutionFixtures.rng())
        self.assertEqual(result.count("1"), 3)

    def test_count_capped_at_length(self):
        mutation = BitStringMutation(mutation_probability=1.0, mutation_count=10)
        self.assertEqual(mutation.apply(["0000"], EvolutionFixtures.rng()), ["1111"])


class TestListOrderMutation(unittest.TestCase):

    def setUp(self):
        setup_logging(level="ERROR", log_to_file=False)

    def test_elements_conserved(self):
        mutation = ListOrderMutation(mutation_probability=1.0, mutation_count=4)
        rng = EvolutionFixtures.rng()
        candidate = list(range(10))
        for _ in range(20):
            (candidate,) = mutation.apply([candidate], rng)
            self.assertEqual(sorted(candidate), list(range(10)))

    def test_tuple_type_kept_and_input_untouched(self):
        mutation = ListOrderMutation(mutation_probability=1.0)
        original = [1, 2, 3]
        (mutated_list,) = mutation.apply([original], EvolutionFixtures.rng())
        self.assertEqual(original, [1, 2, 3])
        self.assertNotEqual(mutated_list, original)
        (mutated_tuple,) = mutation.apply([(1, 2, 3)], EvolutionFixtures.rng())
        self.assertIsInstance(mutated_tuple, tuple)

    def test_single_element_unchanged(self):
        mutation = ListOrderMutation(mutation_probability=1.0)
        self.assertEqual(mutation.apply([[5]], EvolutionFixtures.rng()), [[5]])


if __name__ == '__main__':
    unittest.main()
