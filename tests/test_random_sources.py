"""
Random Source Tests

Tests reproducibility, bounds checking, sampling and seed splitting of the
random sources shared by every stochastic component.
"""

import threading
import unittest

from tests.fixtures import EvolutionFixtures
from evo_exceptions import InvalidArgument, InvalidConfiguration
from evo_logging import setup_logging
from evo_components.random_sources import (
    MersenneTwisterRNG, PCG64RNG, SynchronizedRandomSource, create_random_source, generate_seed
)


class TestRandomSources(unittest.TestCase):
    """Test the concrete random sources."""

    def setUp(self):
        setup_logging(level="ERROR", log_to_file=False)

    def test_same_seed_same_stream(self):
        for source_class in (MersenneTwisterRNG, PCG64RNG):
            first = source_class(123)
            second = source_class(123)
            self.assertEqual([first.next_int(1000) for _ in range(50)],
                             [second.next_int(1000) for _ in range(50)])
            self.assertEqual([first.next_double() for _ in range(10)],
                             [second.next_double() for _ in range(10)])

    def test_different_seeds_differ(self):
        first = MersenneTwisterRNG(1)
        second = MersenneTwisterRNG(2)
        self.assertNotEqual([first.next_int(10 ** 9) for _ in range(5)],
                            [second.next_int(10 ** 9) for _ in range(5)])

    def test_bounds(self):
        rng = EvolutionFixtures.rng()
        for _ in range(500):
            self.assertTrue(0 <= rng.next_int(7) < 7)
            self.assertTrue(0.0 <= rng.next_double() < 1.0)
            self.assertTrue(-3 <= rng.next_int_between(-3, 4) < 4)

    def test_invalid_bounds_rejected(self):
        rng = EvolutionFixtures.rng()
        with self.assertRaises(InvalidArgument):
            rng.next_int(0)
        with self.assertRaises(InvalidArgument):
            rng.next_int(-5)
        with self.assertRaises(InvalidArgument):
            rng.next_int_between(5, 5)
        with self.assertRaises(InvalidArgument):
            rng.choice([])

    def test_invalid_seed_rejected(self):
        with self.assertRaises(InvalidConfiguration):
            MersenneTwisterRNG(-1)
        with self.assertRaises(InvalidConfiguration):
            PCG64RNG("seed")

    def test_unseeded_source_uses_entropy(self):
        self.assertIsInstance(MersenneTwisterRNG().seed, int)
        self.assertGreaterEqual(generate_seed(), 0)

    def test_shuffle_is_permutation(self):
        rng = EvolutionFixtures.rng()
        items = list(range(20))
        rng.shuffle(items)
        self.assertEqual(sorted(items), list(range(20)))

    def test_sample_distinct(self):
        rng = EvolutionFixtures.rng()
        sample = rng.sample(range(10), 6)
        self.assertEqual(len(sample), 6)
        self.assertEqual(len(set(sample)), 6)
        self.assertTrue(all(0 <= value < 10 for value in sample))
        self.assertEqual(rng.sample("abc", 0), [])
        with self.assertRaises(InvalidArgument):
            rng.sample(range(3), 4)

    def test_gaussian_roughly_standard(self):
        rng = PCG64RNG(7)
        values = [rng.next_gaussian() for _ in range(5000)]
        mean = sum(values) / len(values)
        self.assertAlmostEqual(mean, 0.0, delta=0.1)


class TestSeedSplitting(unittest.TestCase):
    """Test per-worker stream derivation."""

    def setUp(self):
        setup_logging(level="ERROR", log_to_file=False)

    def test_spawn_is_reproducible(self):
        first = [child.seed for child in MersenneTwisterRNG(99).spawn(4)]
        second = [child.seed for child in MersenneTwisterRNG(99).spawn(4)]
        self.assertEqual(first, second)
        self.assertEqual(len(set(first)), 4)

    def test_spawn_independent_of_consumption(self):
        untouched = MersenneTwisterRNG(5)
        consumed = MersenneTwisterRNG(5)
        for _ in range(100):
            consumed.next_double()
        self.assertEqual([c.seed for c in untouched.spawn(3)],
                         [c.seed for c in consumed.spawn(3)])

    def test_successive_spawns_differ(self):
        rng = MersenneTwisterRNG(5)
        first = [c.seed for c in rng.spawn(2)]
        second = [c.seed for c in rng.spawn(2)]
        self.assertNotEqual(first, second)

    def test_children_keep_source_type(self):
        for child in PCG64RNG(3).spawn(2):
            self.assertIsInstance(child, PCG64RNG)


class TestSynchronizedRandomSource(unittest.TestCase):
    """Test the locking wrapper."""

    def setUp(self):
        setup_logging(level="ERROR", log_to_file=False)

    def test_shared_across_threads(self):
        shared = SynchronizedRandomSource(MersenneTwisterRNG(11))
        results = []
        results_lock = threading.Lock()

        def draw():
            values = [shared.next_int(100) for _ in range(200)]
            with results_lock:
                results.extend(values)

        threads = [threading.Thread(target=draw) for _ in range(4)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        self.assertEqual(len(results), 800)
        self.assertTrue(all(0 <= value < 100 for value in results))

    def test_same_values_as_delegate_single_threaded(self):
        wrapped = SynchronizedRandomSource(MersenneTwisterRNG(8))
        plain = MersenneTwisterRNG(8)
        self.assertEqual([wrapped.next_int(50) for _ in range(20)],
                         [plain.next_int(50) for _ in range(20)])
        self.assertEqual(wrapped.seed, 8)

    def test_factory(self):
        self.assertIsInstance(create_random_source("pcg64", 1), PCG64RNG)
        self.assertIsInstance(create_random_source("mersenne", 1, synchronized=True),
                              SynchronizedRandomSource)
        with self.assertRaises(InvalidConfiguration):
            create_random_source("xorshift")


if __name__ == '__main__':
    unittest.main()
