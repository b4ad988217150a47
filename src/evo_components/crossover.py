"""
Crossover Operators Module

Pairwise recombination operators. Candidates are paired in population order
(an odd final candidate passes through untouched), each pair is recombined
with the configured probability, and recombination only ever redistributes
elements between the two parents, never creating or destroying any.

Features:
- Multi-point crossover for strings, bit strings, lists and tuples
- Number of cut points drawn from a NumberGenerator per pairing
- Partially-mapped crossover for permutation candidates
- Whole-population compatibility check before any recombination
"""

from abc import abstractmethod
from collections import Counter
from typing import Any, Dict, List, Sequence, Tuple, TypeVar, Union

from evo_constants import OperatorConstants
from evo_exceptions import IncompatibleCandidates, InvalidConfiguration, validate_probability
from evo_components.number_generators import ConstantGenerator, NumberGenerator, as_number_generator
from evo_components.pipeline import EvolutionaryOperator
from evo_components.random_sources import RandomSource

T = TypeVar("T")


class AbstractCrossover(EvolutionaryOperator[T]):
    """
    Base class for crossover operators.

    Subclasses implement ``mate`` for one pair and may override
    ``check_compatible`` to reject pairs they cannot recombine.
    """

    def __init__(self, crossover_points: Union[int, NumberGenerator] = OperatorConstants.DEFAULT_CROSSOVER_POINTS,
                 crossover_probability: float = OperatorConstants.DEFAULT_CROSSOVER_PROBABILITY):
        """
        Args:
            crossover_points: Cut points per pairing, fixed or drawn per pairing
            crossover_probability: Chance in (0, 1] that a pair is recombined

        Raises:
            InvalidConfiguration: For fewer than one fixed cut point or a
                probability outside (0, 1]
        """
        self.crossover_points = as_number_generator(crossover_points)
        if isinstance(self.crossover_points, ConstantGenerator):
            points = self.crossover_points.value
            if isinstance(points, bool) or not isinstance(points, int) or points < 1:
                raise InvalidConfiguration(
                    f"Number of crossover points must be a positive integer, got {points!r}",
                    parameter="crossover_points", value=points
                )
        self.crossover_probability = validate_probability(crossover_probability, "crossover_probability")

        # Statistics tracking
        self.stats = {
            'pairs_considered': 0,
            'crossovers_performed': 0
        }

    def apply(self, selected_candidates: Sequence[T], rng: RandomSource) -> List[T]:
        candidates = list(selected_candidates)
        pairs = [(candidates[i], candidates[i + 1]) for i in range(0, len(candidates) - 1, 2)]

        # Reject the whole population before touching any pair
        for parent1, parent2 in pairs:
            self.check_compatible(parent1, parent2)

        offspring: List[T] = []
        for parent1, parent2 in pairs:
            self.stats['pairs_considered'] += 1
            children = None
            if rng.next_double() < self.crossover_probability:
                points = self._draw_points()
                if points > 0:
                    children = self.mate(parent1, parent2, points, rng)
                    self.stats['crossovers_performed'] += 1
            offspring.extend(children if children is not None else (parent1, parent2))

        if len(candidates) % 2 == 1:
            offspring.append(candidates[-1])
        return offspring

    def _draw_points(self) -> int:
        points = self.crossover_points.next_value()
        if points < 0:
            raise InvalidConfiguration(f"Crossover point generator produced {points}",
                                       parameter="crossover_points", value=points)
        return int(points)

    def check_compatible(self, parent1: T, parent2: T) -> None:
        """Raise IncompatibleCandidates if the pair cannot be recombined."""

    @abstractmethod
    def mate(self, parent1: T, parent2: T, number_of_points: int,
             rng: RandomSource) -> Tuple[T, T]:
        """Recombine one pair into two offspring."""

    def get_statistics(self) -> Dict[str, int]:
        """Get statistics about crossovers performed."""
        return self.stats.copy()

    def reset_statistics(self):
        self.stats = {
            'pairs_considered': 0,
            'crossovers_performed': 0
        }


def choose_cut_points(length: int, number_of_points: int, rng: RandomSource) -> List[int]:
    """
    Pick distinct, sorted cut positions strictly inside a sequence.

    A sequence of length L has L - 1 interior positions, so the request is
    clamped to that; sequences of length 0 or 1 cannot be cut.
    """
    available = max(0, length - 1)
    count = min(number_of_points, available)
    if count == 0:
        return []
    return sorted(rng.sample(range(1, length), count))


def alternate_segments(parent1: Sequence[Any], parent2: Sequence[Any],
                       cut_points: Sequence[int]) -> Tuple[List[Any], List[Any]]:
    """Build two children by swapping the parents' contributions at every cut."""
    child1: List[Any] = []
    child2: List[Any] = []
    bounds = [0, *cut_points, len(parent1)]
    swapped = False
    for start, end in zip(bounds, bounds[1:]):
        first, second = (parent2, parent1) if swapped else (parent1, parent2)
        child1.extend(first[start:end])
        child2.extend(second[start:end])
        swapped = not swapped
    return child1, child2


class SequenceCrossover(AbstractCrossover[T]):
    """Multi-point crossover for fixed-length sequences."""

    def check_compatible(self, parent1: T, parent2: T) -> None:
        if len(parent1) != len(parent2):
            raise IncompatibleCandidates(
                f"Cannot perform crossover with different length parents "
                f"({len(parent1)} and {len(parent2)})",
                parent1=parent1, parent2=parent2, sizes=(len(parent1), len(parent2))
            )

    def mate(self, parent1: T, parent2: T, number_of_points: int,
             rng: RandomSource) -> Tuple[T, T]:
        cut_points = choose_cut_points(len(parent1), number_of_points, rng)
        if not cut_points:
            return parent1, parent2
        child1, child2 = alternate_segments(parent1, parent2, cut_points)
        return self.rebuild(child1, parent1), self.rebuild(child2, parent2)

    def rebuild(self, elements: List[Any], template: T) -> T:
        """Convert a list of elements back into the candidate type."""
        return elements


class StringCrossover(SequenceCrossover[str]):
    """Multi-point crossover for equal-length strings."""

    def rebuild(self, elements: List[str], template: str) -> str:
        return "".join(elements)


class BitStringCrossover(StringCrossover):
    """Multi-point crossover for equal-length strings of '0' and '1'."""

    def check_compatible(self, parent1: str, parent2: str) -> None:
        super().check_compatible(parent1, parent2)
        for parent in (parent1, parent2):
            if set(parent) - set(OperatorConstants.BIT_ALPHABET):
                raise IncompatibleCandidates(f"Not a bit string: {parent!r}",
                                             parent1=parent1, parent2=parent2)


class ListCrossover(SequenceCrossover[Sequence[Any]]):
    """Multi-point crossover for lists and tuples; offspring keep the parent's type."""

    def rebuild(self, elements: List[Any], template: Sequence[Any]) -> Sequence[Any]:
        return tuple(elements) if isinstance(template, tuple) else elements


class ListOrderCrossover(AbstractCrossover[List[Any]]):
    """
    Partially-mapped crossover (PMX) for permutation candidates.

    A segment between two cut points is exchanged between the parents and
    the resulting duplicates outside the segment are repaired through the
    segment mapping, so each child is still a permutation of the same set.
    """

    def __init__(self, crossover_probability: float = OperatorConstants.DEFAULT_CROSSOVER_PROBABILITY):
        super().__init__(crossover_points=2, crossover_probability=crossover_probability)

    def check_compatible(self, parent1: List[Any], parent2: List[Any]) -> None:
        if len(parent1) != len(parent2) or len(set(parent1)) != len(parent1) \
                or Counter(parent1) != Counter(parent2):
            raise IncompatibleCandidates(
                "Partially-mapped crossover needs parents that are permutations of the same distinct elements",
                parent1=parent1, parent2=parent2, sizes=(len(parent1), len(parent2))
            )

    def mate(self, parent1: List[Any], parent2: List[Any], number_of_points: int,
             rng: RandomSource) -> Tuple[List[Any], List[Any]]:
        if len(parent1) < 2:
            return parent1, parent2
        start, end = sorted(rng.sample(range(len(parent1) + 1), 2))
        return (self._mapped_child(parent1, parent2, start, end),
                self._mapped_child(parent2, parent1, start, end))

    @staticmethod
    def _mapped_child(base: List[Any], donor: List[Any], start: int, end: int) -> List[Any]:
        child = list(base)
        child[start:end] = donor[start:end]
        mapping = {donor[i]: base[i] for i in range(start, end)}
        for i in [*range(0, start), *range(end, len(base))]:
            item = base[i]
            while item in mapping:
                item = mapping[item]
            child[i] = item
        return child
