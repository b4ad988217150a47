"""
Mutation Operators Module

Single-candidate perturbation operators. Each candidate is independently
gated by the mutation probability; a candidate that passes the gate is
changed by an amount drawn from a NumberGenerator.

Features:
- Character replacement for strings over an alphabet
- Bit-flip mutation for bit strings
- Order-preserving swap mutation for permutations
"""

from abc import abstractmethod
from typing import Any, Dict, List, Sequence, TypeVar, Union

from evo_constants import OperatorConstants
from evo_exceptions import InvalidConfiguration, validate_probability
from evo_components.number_generators import ConstantGenerator, NumberGenerator, as_number_generator
from evo_components.pipeline import EvolutionaryOperator
from evo_components.random_sources import RandomSource

T = TypeVar("T")


def _check_constant_count(generator: NumberGenerator, name: str) -> None:
    if isinstance(generator, ConstantGenerator):
        value = generator.value
        if isinstance(value, bool) or not isinstance(value, int) or value < 1:
            raise InvalidConfiguration(f"{name} must be a positive integer, got {value!r}",
                                       parameter=name, value=value)


class AbstractMutation(EvolutionaryOperator[T]):
    """
    Base class for mutation operators.

    Args:
        mutation_probability: Chance in (0, 1] that a candidate is mutated
        mutation_count: How many changes to make to a mutated candidate
    """

    def __init__(self, mutation_probability: float = OperatorConstants.DEFAULT_MUTATION_PROBABILITY,
                 mutation_count: Union[int, NumberGenerator] = OperatorConstants.DEFAULT_MUTATION_COUNT):
        self.mutation_probability = validate_probability(mutation_probability, "mutation_probability")
        self.mutation_count = as_number_generator(mutation_count)
        _check_constant_count(self.mutation_count, "mutation_count")

        # Statistics tracking
        self.stats = {
            'candidates_considered': 0,
            'mutations_performed': 0
        }

    def apply(self, selected_candidates: Sequence[T], rng: RandomSource) -> List[T]:
        mutated: List[T] = []
        for candidate in selected_candidates:
            self.stats['candidates_considered'] += 1
            if rng.next_double() < self.mutation_probability:
                count = self.mutation_count.next_value()
                if count < 0:
                    raise InvalidConfiguration(f"Mutation count generator produced {count}",
                                               parameter="mutation_count", value=count)
                if count > 0:
                    candidate = self.mutate(candidate, int(count), rng)
                    self.stats['mutations_performed'] += 1
            mutated.append(candidate)
        return mutated

    @abstractmethod
    def mutate(self, candidate: T, count: int, rng: RandomSource) -> T:
        """Return a changed copy of ``candidate``; never modify it in place."""

    def get_statistics(self) -> Dict[str, int]:
        return self.stats.copy()


class StringMutation(AbstractMutation[str]):
    """Replaces randomly chosen characters with random characters from an alphabet."""

    def __init__(self, alphabet: Sequence[str],
                 mutation_probability: float = OperatorConstants.DEFAULT_MUTATION_PROBABILITY,
                 mutation_count: Union[int, NumberGenerator] = OperatorConstants.DEFAULT_MUTATION_COUNT):
        super().__init__(mutation_probability, mutation_count)
        if not alphabet:
            raise InvalidConfiguration("Alphabet must not be empty", parameter="alphabet")
        self.alphabet = list(alphabet)

    def mutate(self, candidate: str, count: int, rng: RandomSource) -> str:
        if not candidate:
            return candidate
        characters = list(candidate)
        for _ in range(count):
            characters[rng.next_int(len(characters))] = rng.choice(self.alphabet)
        return "".join(characters)


class BitStringMutation(AbstractMutation[str]):
    """Flips ``count`` distinct bits of a '0'/'1' string."""

    def mutate(self, candidate: str, count: int, rng: RandomSource) -> str:
        bits = list(candidate)
        for position in rng.sample(range(len(bits)), min(count, len(bits))):
            bits[position] = '1' if bits[position] == '0' else '0'
        return "".join(bits)


class ListOrderMutation(AbstractMutation[Sequence[Any]]):
    """
    Swaps elements of a permutation; the element set never changes.

    Each of ``count`` swaps exchanges a random position with the one
    ``mutation_amount`` places further along (wrapping around).
    """

    def __init__(self, mutation_probability: float = OperatorConstants.DEFAULT_MUTATION_PROBABILITY,
                 mutation_count: Union[int, NumberGenerator] = OperatorConstants.DEFAULT_MUTATION_COUNT,
                 mutation_amount: Union[int, NumberGenerator] = 1):
        super().__init__(mutation_probability, mutation_count)
        self.mutation_amount = as_number_generator(mutation_amount)
        _check_constant_count(self.mutation_amount, "mutation_amount")

    def mutate(self, candidate: Sequence[Any], count: int, rng: RandomSource) -> Sequence[Any]:
        elements = list(candidate)
        if len(elements) < 2:
            return candidate
        for _ in range(count):
            source = rng.next_int(len(elements))
            target = (source + int(self.mutation_amount.next_value())) % len(elements)
            elements[source], elements[target] = elements[target], elements[source]
        return tuple(elements) if isinstance(candidate, tuple) else elements
