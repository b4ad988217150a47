"""
Test Fixtures and Utilities for Evolution Engine Tests

Provides reusable test data, stub collaborators, and a builder for
fully wired engines.
"""

import os
import sys
import threading
from typing import Any, Callable, Iterable, List, Optional, Sequence

# Add project root and source directory to path
PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
sys.path.append(PROJECT_ROOT)
sys.path.insert(0, os.path.join(PROJECT_ROOT, 'src'))

from evo_config import EvolutionConfig
from evolution_engine import GenerationalEvolutionEngine
from evo_components.candidates import (
    CandidateFactory, FitnessEvaluator, PopulationData, StringFactory, StochasticFitnessEvaluator
)
from evo_components.crossover import StringCrossover
from evo_components.mutation import StringMutation
from evo_components.number_generators import NumberGenerator
from evo_components.observers import EvolutionObserver
from evo_components.pipeline import EvolutionPipeline
from evo_components.random_sources import MersenneTwisterRNG
from evo_components.selection import RouletteWheelSelection, SelectionStrategy


class EvolutionFixtures:
    """Centralized test data."""

    SEED = 42
    ALPHABET = "abcdefghijklmnopqrstuvwxyz "
    TARGET = "hello world"
    STRINGS = ["abcde", "fghij", "klmno", "pqrst"]

    @staticmethod
    def rng(seed: int = SEED) -> MersenneTwisterRNG:
        return MersenneTwisterRNG(seed)

    @staticmethod
    def get_test_config(population_size: int = 20, elite_count: int = 2,
                        max_workers: int = 2, seed: int = SEED, log_level: str = "ERROR",
                        **kwargs) -> EvolutionConfig:
        """Get test configuration with sensible defaults."""
        return EvolutionConfig(
            population_size=population_size,
            elite_count=elite_count,
            max_workers=max_workers,
            seed=seed,
            log_level=log_level,
            **kwargs
        )


def snapshot(generation: int = 0, best: float = 1.0, mean: float = 0.5,
             elapsed: float = 0.0, natural: bool = True) -> PopulationData:
    """Hand-made generation snapshot for termination and observer tests."""
    return PopulationData(
        best_candidate=EvolutionFixtures.TARGET,
        best_fitness=best,
        mean_fitness=mean,
        fitness_std_dev=0.0,
        natural_fitness=natural,
        population_size=10,
        elite_count=0,
        generation_number=generation,
        elapsed_time=elapsed
    )


def matching_characters(target: str) -> Callable[[str], float]:
    """Fitness function counting positions that already match ``target``."""
    def score(candidate: str) -> float:
        return float(sum(1 for a, b in zip(candidate, target) if a == b))
    return score


class CountingEvaluator(FitnessEvaluator):
    """Wraps a fitness function and records every candidate it scores."""

    def __init__(self, function: Callable[[Any], float], natural: bool = True):
        self.function = function
        self.natural = natural
        self.calls: List[Any] = []
        self.populations: List[Sequence[Any]] = []
        self._lock = threading.Lock()

    def get_fitness(self, candidate, population):
        with self._lock:
            self.calls.append(candidate)
            self.populations.append(population)
        return self.function(candidate)

    @property
    def is_natural(self) -> bool:
        return self.natural


class FailingEvaluator(FitnessEvaluator):
    """Raises for one specific candidate, scores everything else as 1.0."""

    def __init__(self, failing_candidate: Any, error: Exception = None):
        self.failing_candidate = failing_candidate
        self.error = error if error is not None else RuntimeError("evaluator exploded")

    def get_fitness(self, candidate, population):
        if candidate == self.failing_candidate:
            raise self.error
        return 1.0


class NoisyEvaluator(StochasticFitnessEvaluator):
    """Stochastic evaluator: a base score plus noise from the supplied stream."""

    def __init__(self, function: Callable[[Any], float]):
        self.function = function
        self.streams = []
        self._lock = threading.Lock()

    def get_fitness_with_rng(self, candidate, population, rng):
        with self._lock:
            self.streams.append(rng)
        return self.function(candidate) + rng.next_double()


class SequenceGenerator(NumberGenerator):
    """Replays a fixed list of values, repeating the last one."""

    def __init__(self, values: Iterable[Any]):
        self.values = list(values)
        self.position = 0

    def next_value(self):
        value = self.values[min(self.position, len(self.values) - 1)]
        self.position += 1
        return value


class FixedListFactory(CandidateFactory):
    """Hands out a fixed list of candidates in order, cycling if needed."""

    def __init__(self, candidates: Sequence[Any]):
        self.candidates = list(candidates)
        self.position = 0

    def generate_random_candidate(self, rng):
        candidate = self.candidates[self.position % len(self.candidates)]
        self.position += 1
        return candidate


class RecordingObserver(EvolutionObserver):
    """Collects every snapshot it receives."""

    def __init__(self):
        self.snapshots: List[PopulationData] = []
        self._lock = threading.Lock()

    def population_update(self, data: PopulationData) -> None:
        with self._lock:
            self.snapshots.append(data)

    @property
    def generations(self) -> List[int]:
        with self._lock:
            return [snapshot.generation_number for snapshot in self.snapshots]


class EngineBuilder:
    """Builder pattern for wiring string-evolution engines in tests."""

    def __init__(self):
        self.target = EvolutionFixtures.TARGET
        self.evaluator: Optional[FitnessEvaluator] = None
        self.factory: Optional[CandidateFactory] = None
        self.operators = None
        self.selection: Optional[SelectionStrategy] = None
        self.config: Optional[EvolutionConfig] = None
        self.seed = EvolutionFixtures.SEED

    def with_evaluator(self, evaluator: FitnessEvaluator) -> 'EngineBuilder':
        self.evaluator = evaluator
        return self

    def with_factory(self, factory: CandidateFactory) -> 'EngineBuilder':
        self.factory = factory
        return self

    def with_operators(self, operators) -> 'EngineBuilder':
        self.operators = operators
        return self

    def with_selection(self, selection: SelectionStrategy) -> 'EngineBuilder':
        self.selection = selection
        return self

    def with_config(self, **kwargs) -> 'EngineBuilder':
        self.config = EvolutionFixtures.get_test_config(**kwargs)
        return self

    def with_seed(self, seed: int) -> 'EngineBuilder':
        self.seed = seed
        return self

    def build(self) -> GenerationalEvolutionEngine:
        evaluator = self.evaluator or CountingEvaluator(matching_characters(self.target))
        factory = self.factory or StringFactory(EvolutionFixtures.ALPHABET, len(self.target))
        operators = self.operators if self.operators is not None else [
            StringCrossover(),
            StringMutation(EvolutionFixtures.ALPHABET, mutation_probability=0.5)
        ]
        return GenerationalEvolutionEngine(
            factory,
            EvolutionPipeline(operators),
            evaluator,
            self.selection or RouletteWheelSelection(),
            rng=MersenneTwisterRNG(self.seed),
            config=self.config
        )
