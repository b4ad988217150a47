"""
Candidates Module

Data types shared across the engine: evaluated candidates, per-generation
population snapshots, and the user-facing fitness evaluator and candidate
factory contracts.

Features:
- EvaluatedCandidate pairing with stable fitness ordering
- Immutable PopulationData snapshots (best/mean/standard deviation)
- Natural (higher is better) and inverted (lower is better) fitness
- Stochastic evaluators with a dedicated random source per evaluation
- Factories for strings, bit strings and permutations
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Callable, Generic, Iterable, List, Optional, Sequence, TypeVar

import numpy as np

from evo_constants import OperatorConstants
from evo_exceptions import InvalidConfiguration, InvalidPopulationSize
from evo_components.random_sources import RandomSource

T = TypeVar("T")


@dataclass(frozen=True)
class EvaluatedCandidate(Generic[T]):
    """A candidate together with the fitness score it was given."""
    candidate: T
    fitness: float


def sort_evaluated_population(population: Iterable[EvaluatedCandidate],
                              natural_fitness: bool) -> List[EvaluatedCandidate]:
    """
    Sort fittest first.

    The sort is stable in both directions, so candidates with equal fitness
    keep their input order.
    """
    return sorted(population, key=lambda evaluated: evaluated.fitness, reverse=natural_fitness)


def is_fitter(fitness: float, other: float, natural_fitness: bool) -> bool:
    """Whether ``fitness`` is strictly better than ``other``."""
    return fitness > other if natural_fitness else fitness < other


@dataclass(frozen=True)
class PopulationData(Generic[T]):
    """Immutable statistics about one generation, handed to observers and termination checks."""
    best_candidate: T
    best_fitness: float
    mean_fitness: float
    fitness_std_dev: float
    natural_fitness: bool
    population_size: int
    elite_count: int
    generation_number: int
    elapsed_time: float

    @classmethod
    def from_population(cls, evaluated_population: Sequence[EvaluatedCandidate],
                        natural_fitness: bool, elite_count: int,
                        generation_number: int, elapsed_time: float) -> 'PopulationData':
        """
        Build a snapshot from a population sorted fittest first.

        The standard deviation is the population (not sample) deviation.
        """
        scores = np.fromiter((e.fitness for e in evaluated_population), dtype=float,
                             count=len(evaluated_population))
        best = evaluated_population[0]
        return cls(
            best_candidate=best.candidate,
            best_fitness=best.fitness,
            mean_fitness=float(scores.mean()),
            fitness_std_dev=float(scores.std()),
            natural_fitness=natural_fitness,
            population_size=len(evaluated_population),
            elite_count=elite_count,
            generation_number=generation_number,
            elapsed_time=elapsed_time,
        )


class FitnessEvaluator(ABC, Generic[T]):
    """
    Scores candidates.

    Implementations are called from worker threads and must not mutate the
    candidate or the population they are given.
    """

    @abstractmethod
    def get_fitness(self, candidate: T, population: Sequence[T]) -> float:
        """
        Args:
            candidate: Candidate to score
            population: The whole population the candidate belongs to, for
                evaluators whose score depends on the other candidates

        Returns:
            Fitness score
        """

    @property
    def is_natural(self) -> bool:
        """True if higher scores are better, False if lower scores are better."""
        return True

    @property
    def is_deterministic(self) -> bool:
        """False if scoring the same candidate twice can give different results."""
        return True


class StochasticFitnessEvaluator(FitnessEvaluator[T]):
    """
    Evaluator whose scoring consumes randomness.

    Each evaluation receives its own RandomSource derived from the engine's
    stream, so concurrent evaluations never share generator state and a
    seeded run scores identically however the work is scheduled.
    """

    @abstractmethod
    def get_fitness_with_rng(self, candidate: T, population: Sequence[T],
                             rng: RandomSource) -> float:
        """Score ``candidate`` using ``rng`` for any random draws."""

    def get_fitness(self, candidate: T, population: Sequence[T]) -> float:
        raise TypeError(f"{type(self).__name__} needs a random source; "
                        f"call get_fitness_with_rng instead")

    @property
    def is_deterministic(self) -> bool:
        return False


class FunctionFitnessEvaluator(FitnessEvaluator[T]):
    """Adapts a plain ``fn(candidate) -> float`` into a FitnessEvaluator."""

    def __init__(self, function: Callable[[T], float], natural: bool = True,
                 deterministic: bool = True):
        self.function = function
        self._natural = natural
        self._deterministic = deterministic

    def get_fitness(self, candidate: T, population: Sequence[T]) -> float:
        return self.function(candidate)

    @property
    def is_natural(self) -> bool:
        return self._natural

    @property
    def is_deterministic(self) -> bool:
        return self._deterministic


class CandidateFactory(ABC, Generic[T]):
    """Creates the candidates of the initial population."""

    @abstractmethod
    def generate_random_candidate(self, rng: RandomSource) -> T:
        """Create one random candidate."""

    def generate_initial_population(self, population_size: int, rng: RandomSource,
                                    seed_candidates: Optional[Iterable[T]] = None) -> List[T]:
        """
        Create the initial population, optionally seeded.

        Args:
            population_size: Number of candidates to return
            rng: Random source for generated candidates
            seed_candidates: Candidates placed first; the rest are generated

        Returns:
            List of exactly ``population_size`` candidates

        Raises:
            InvalidPopulationSize: If there are more seeds than population slots
        """
        population = list(seed_candidates) if seed_candidates is not None else []
        if len(population) > population_size:
            raise InvalidPopulationSize(
                f"Too many seed candidates ({len(population)}) for population size ({population_size})",
                population_size=population_size
            )
        while len(population) < population_size:
            population.append(self.generate_random_candidate(rng))
        return population


class StringFactory(CandidateFactory[str]):
    """Random fixed-length strings over an alphabet."""

    def __init__(self, alphabet: Sequence[str], string_length: int):
        if not alphabet:
            raise InvalidConfiguration("Alphabet must not be empty", parameter="alphabet")
        if string_length < 1:
            raise InvalidConfiguration(f"String length ({string_length}) must be positive",
                                       parameter="string_length", value=string_length)
        self.alphabet = list(alphabet)
        self.string_length = string_length

    def generate_random_candidate(self, rng: RandomSource) -> str:
        return "".join(rng.choice(self.alphabet) for _ in range(self.string_length))


class BitStringFactory(StringFactory):
    """Random strings of '0' and '1'."""

    def __init__(self, length: int):
        super().__init__(OperatorConstants.BIT_ALPHABET, length)


class ListPermutationFactory(CandidateFactory[List[Any]]):
    """Random orderings of a fixed list of elements."""

    def __init__(self, elements: Sequence[Any]):
        if not elements:
            raise InvalidConfiguration("Elements must not be empty", parameter="elements")
        self.elements = list(elements)

    def generate_random_candidate(self, rng: RandomSource) -> List[Any]:
        candidate = list(self.elements)
        rng.shuffle(candidate)
        return candidate
