"""
Operator Pipeline Module

The population-in, population-out contract every variation operator
implements, and the composites that chain or split operators.

Every operator must return exactly as many candidates as it received; the
pipeline checks this after each stage.
"""

from abc import ABC, abstractmethod
from typing import Generic, List, Sequence, TypeVar

from evo_exceptions import InvalidConfiguration, OperatorContractViolation, validate_probability
from evo_components.random_sources import RandomSource

T = TypeVar("T")


class EvolutionaryOperator(ABC, Generic[T]):
    """Transforms a population of candidates into a new population of the same size."""

    @abstractmethod
    def apply(self, selected_candidates: Sequence[T], rng: RandomSource) -> List[T]:
        """
        Args:
            selected_candidates: Candidates chosen by the selection strategy;
                never modified in place
            rng: Random source for every stochastic decision

        Returns:
            New list of the same length
        """

    @property
    def name(self) -> str:
        return type(self).__name__


def check_size_preserved(operator: EvolutionaryOperator, expected: int, result: Sequence) -> None:
    if len(result) != expected:
        raise OperatorContractViolation(
            f"{operator.name} returned {len(result)} candidates, expected {expected}",
            operator_name=operator.name, expected_size=expected, actual_size=len(result)
        )


class IdentityOperator(EvolutionaryOperator[T]):
    """Returns the candidates unchanged."""

    def apply(self, selected_candidates: Sequence[T], rng: RandomSource) -> List[T]:
        return list(selected_candidates)


class EvolutionPipeline(EvolutionaryOperator[T]):
    """
    Applies operators in order, each stage consuming the previous stage's output.

    An empty pipeline is the identity transform.
    """

    def __init__(self, operators: Sequence[EvolutionaryOperator[T]] = ()):
        for operator in operators:
            if not isinstance(operator, EvolutionaryOperator):
                raise InvalidConfiguration(
                    f"Pipeline stages must be EvolutionaryOperators, got {type(operator).__name__}",
                    parameter="operators"
                )
        self.operators = list(operators)

    def apply(self, selected_candidates: Sequence[T], rng: RandomSource) -> List[T]:
        population = list(selected_candidates)
        for operator in self.operators:
            result = operator.apply(population, rng)
            check_size_preserved(operator, len(population), result)
            population = list(result)
        return population

    def __len__(self) -> int:
        return len(self.operators)


class SplitEvolution(EvolutionaryOperator[T]):
    """
    Sends one share of the population through one operator and the rest
    through another.

    The first ``round(weight * n)`` candidates (in input order) go to
    ``first`` and the remainder to ``second``; results are concatenated in
    that order.
    """

    def __init__(self, first: EvolutionaryOperator[T], second: EvolutionaryOperator[T],
                 weight: float):
        self.first = first
        self.second = second
        self.weight = validate_probability(weight, "weight", allow_zero=True)

    def apply(self, selected_candidates: Sequence[T], rng: RandomSource) -> List[T]:
        candidates = list(selected_candidates)
        split = int(round(self.weight * len(candidates)))
        head, tail = candidates[:split], candidates[split:]

        head_result = self.first.apply(head, rng) if head else []
        check_size_preserved(self.first, len(head), head_result)
        tail_result = self.second.apply(tail, rng) if tail else []
        check_size_preserved(self.second, len(tail), tail_result)

        return list(head_result) + list(tail_result)
