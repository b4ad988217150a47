"""
Selection Strategies Module

Converts a fitness-evaluated population into breeding selections.

Features:
- Fitness-proportionate roulette wheel selection
- Stochastic universal sampling (single spin, evenly spaced pointers)
- Tournament selection with a configurable chance of keeping a loser
- Rank-based selection to damp fitness-scale disparities
- Truncation selection

Every strategy draws only from the RandomSource it is given, returns
exactly ``selection_size`` candidates (with repetition) and breaks fitness
ties by input order. Inverted (lower-is-better) scores are converted to
weights as 1/fitness for the proportionate strategies.
"""

import math
from abc import ABC, abstractmethod
from bisect import bisect_right
from itertools import accumulate
from typing import Generic, List, Sequence, TypeVar

from evo_constants import OperatorConstants
from evo_exceptions import InvalidArgument, InvalidConfiguration, SelectionError, validate_probability
from evo_components.candidates import EvaluatedCandidate, is_fitter, sort_evaluated_population
from evo_components.random_sources import RandomSource

T = TypeVar("T")


class SelectionStrategy(ABC, Generic[T]):
    """Maps an evaluated population to a multiset of selected candidates."""

    def __init__(self):
        self.selection_stats = {
            'selections_made': 0,
            'calls': 0
        }

    def select(self, population: Sequence[EvaluatedCandidate], natural_fitness: bool,
               selection_size: int, rng: RandomSource) -> List[T]:
        """
        Select candidates for breeding.

        Args:
            population: Evaluated candidates, conventionally sorted fittest first
            natural_fitness: True if higher fitness is better
            selection_size: Number of candidates to return
            rng: Source of every random decision

        Returns:
            ``selection_size`` candidates, repetition allowed
        """
        if isinstance(selection_size, bool) or not isinstance(selection_size, int) or selection_size < 0:
            raise InvalidArgument(f"Selection size must be a non-negative integer, got {selection_size!r}")
        if selection_size == 0:
            return []
        if not population:
            raise SelectionError("Cannot select from an empty population",
                                 population_size=0, selection_type=type(self).__name__)

        selected = self._select(list(population), natural_fitness, selection_size, rng)

        self.selection_stats['calls'] += 1
        self.selection_stats['selections_made'] += len(selected)
        return selected

    @abstractmethod
    def _select(self, population: List[EvaluatedCandidate], natural_fitness: bool,
                selection_size: int, rng: RandomSource) -> List[T]:
        """Strategy-specific selection on a non-empty population."""

    def get_statistics(self) -> dict:
        """Get selection statistics."""
        return self.selection_stats.copy()


def selection_weights(population: Sequence[EvaluatedCandidate], natural_fitness: bool,
                      selection_type: str) -> List[float]:
    """
    Turn fitness scores into non-negative selection weights.

    Natural scores are used as they are. Inverted scores become 1/fitness;
    if any inverted score is exactly zero those candidates are perfect and
    share all of the weight. A population with no weight at all is treated
    as uniform.
    """
    weights = []
    for evaluated in population:
        if evaluated.fitness < 0:
            raise SelectionError(
                f"Fitness-proportionate selection requires non-negative fitness, got {evaluated.fitness}",
                population_size=len(population), selection_type=selection_type
            )
        if natural_fitness:
            weights.append(evaluated.fitness)
        else:
            weights.append(math.inf if evaluated.fitness == 0 else 1.0 / evaluated.fitness)

    if any(math.isinf(w) for w in weights):
        return [1.0 if math.isinf(w) else 0.0 for w in weights]
    if sum(weights) <= 0:
        return [1.0] * len(weights)
    return weights


class RouletteWheelSelection(SelectionStrategy[T]):
    """Each selection is an independent spin; chance proportional to fitness."""

    def _select(self, population: List[EvaluatedCandidate], natural_fitness: bool,
                selection_size: int, rng: RandomSource) -> List[T]:
        cumulative = list(accumulate(selection_weights(population, natural_fitness, type(self).__name__)))
        total = cumulative[-1]
        last = len(population) - 1

        selected = []
        for _ in range(selection_size):
            index = bisect_right(cumulative, rng.next_double() * total)
            selected.append(population[min(index, last)].candidate)
        return selected


class StochasticUniversalSampling(SelectionStrategy[T]):
    """
    One spin of a wheel with ``selection_size`` evenly spaced pointers.

    Each candidate is selected either floor or ceil of its expected number of
    times, in O(N + k). The selections are shuffled before being returned so
    that copies of the same candidate are not adjacent when paired for crossover.
    """

    def _select(self, population: List[EvaluatedCandidate], natural_fitness: bool,
                selection_size: int, rng: RandomSource) -> List[T]:
        cumulative = list(accumulate(selection_weights(population, natural_fitness, type(self).__name__)))
        step = cumulative[-1] / selection_size
        start = rng.next_double() * step
        last = len(population) - 1

        selected = []
        index = 0
        for i in range(selection_size):
            pointer = start + i * step
            while index < last and cumulative[index] <= pointer:
                index += 1
            selected.append(population[index].candidate)

        rng.shuffle(selected)
        return selected


class TournamentSelection(SelectionStrategy[T]):
    """
    Repeated tournaments between uniformly sampled contestants.

    The fittest contestant wins with ``selection_probability``; otherwise a
    random other contestant is kept, which preserves some diversity.
    """

    def __init__(self, tournament_size: int = OperatorConstants.DEFAULT_TOURNAMENT_SIZE,
                 selection_probability: float = OperatorConstants.DEFAULT_TOURNAMENT_PROBABILITY):
        super().__init__()
        if isinstance(tournament_size, bool) or not isinstance(tournament_size, int) or tournament_size < 1:
            raise InvalidConfiguration(f"Tournament size ({tournament_size}) must be a positive integer",
                                       parameter="tournament_size", value=tournament_size)
        probability = validate_probability(selection_probability, "selection_probability")
        if probability <= 0.5:
            raise InvalidConfiguration(
                f"Selection probability ({probability}) must be greater than 0.5, "
                f"otherwise weaker candidates are favoured",
                parameter="selection_probability", value=probability
            )
        self.tournament_size = tournament_size
        self.selection_probability = probability

    def _select(self, population: List[EvaluatedCandidate], natural_fitness: bool,
                selection_size: int, rng: RandomSource) -> List[T]:
        size = min(self.tournament_size, len(population))
        positions = range(len(population))

        selected = []
        for _ in range(selection_size):
            # Sorted so equal fitness is won by the earlier candidate
            contestants = sorted(rng.sample(positions, size))
            winner = contestants[0]
            for position in contestants[1:]:
                if is_fitter(population[position].fitness, population[winner].fitness, natural_fitness):
                    winner = position

            if size > 1 and rng.next_double() >= self.selection_probability:
                winner = rng.choice([c for c in contestants if c != winner])

            selected.append(population[winner].candidate)
        return selected


class RankSelection(SelectionStrategy[T]):
    """
    Selection probability proportional to rank rather than raw fitness.

    The fittest of N candidates gets weight N and the least fit weight 1;
    the weighted population is then handed to a proportionate delegate.
    """

    def __init__(self, delegate: SelectionStrategy = None):
        super().__init__()
        self.delegate = delegate if delegate is not None else StochasticUniversalSampling()

    def _select(self, population: List[EvaluatedCandidate], natural_fitness: bool,
                selection_size: int, rng: RandomSource) -> List[T]:
        ranked = sort_evaluated_population(population, natural_fitness)
        size = len(ranked)
        weighted = [EvaluatedCandidate(e.candidate, float(size - position))
                    for position, e in enumerate(ranked)]
        return self.delegate.select(weighted, True, selection_size, rng)


class TruncationSelection(SelectionStrategy[T]):
    """Selects only from the fittest ``ratio`` of the population, cycling through them."""

    def __init__(self, selection_ratio: float = OperatorConstants.DEFAULT_TRUNCATION_RATIO):
        super().__init__()
        self.selection_ratio = validate_probability(selection_ratio, "selection_ratio")

    def _select(self, population: List[EvaluatedCandidate], natural_fitness: bool,
                selection_size: int, rng: RandomSource) -> List[T]:
        ranked = sort_evaluated_population(population, natural_fitness)
        keep = max(1, int(self.selection_ratio * len(ranked)))
        selected = [ranked[i % keep].candidate for i in range(selection_size)]
        rng.shuffle(selected)
        return selected
