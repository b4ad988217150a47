"""
Combinatorics Module

Exhaustive, order-exact enumeration of small finite sets. Used by
combinatorial operators and by tests that need to try every ordering.

Features:
- Exact factorial for the supported range
- Lexicographic permutation enumeration (sets of 1-20 elements)
- Lexicographic k-combination enumeration
- Allocate-per-call and fill-caller-buffer access patterns

Generators are not thread-safe; use one instance per consumer.
"""

import math
from typing import Any, Iterable, Iterator, List, MutableSequence, Tuple

from evo_constants import CombinatoricsConstants
from evo_exceptions import ExhaustedSequence, InvalidArgument, InvalidConfiguration


def factorial(n: int) -> int:
    """Exact n! for 0 <= n <= 20."""
    if isinstance(n, bool) or not isinstance(n, int) or not 0 <= n <= CombinatoricsConstants.MAX_ELEMENTS:
        raise InvalidArgument(f"Argument must be in the range 0 - {CombinatoricsConstants.MAX_ELEMENTS}, got {n!r}")
    return math.factorial(n)


def _copy_elements(elements: Iterable[Any]) -> Tuple[Any, ...]:
    copied = tuple(elements)
    size = len(copied)
    if not CombinatoricsConstants.MIN_ELEMENTS <= size <= CombinatoricsConstants.MAX_ELEMENTS:
        raise InvalidConfiguration(
            f"Size must be between {CombinatoricsConstants.MIN_ELEMENTS} and "
            f"{CombinatoricsConstants.MAX_ELEMENTS}, got {size}",
            parameter="elements", value=size
        )
    return copied


class PermutationGenerator:
    """
    Generates every ordering of a set of up to 20 elements.

    Orderings are produced in lexicographic order of element positions,
    starting with the input order and ending with its reverse. 21 elements
    would have more permutations than fit in a signed 64-bit count, which is
    far beyond anything that could be enumerated anyway, so that is refused.

    Example:
        >>> generator = PermutationGenerator("abc")
        >>> ["".join(p) for p in generator]
        ['abc', 'acb', 'bac', 'bca', 'cab', 'cba']
    """

    def __init__(self, elements: Iterable[Any]):
        """
        Args:
            elements: 1-20 elements to permute; a private copy is kept

        Raises:
            InvalidConfiguration: If there are fewer than 1 or more than 20 elements
        """
        self._elements = _copy_elements(elements)
        self._indices = list(range(len(self._elements)))
        self._total = factorial(len(self._elements))
        self._remaining = self._total

    @property
    def total_permutations(self) -> int:
        return self._total

    @property
    def remaining_permutations(self) -> int:
        """Number of permutations not yet generated since the last reset."""
        return self._remaining

    def has_next(self) -> bool:
        """Are there more permutations that have not yet been returned?"""
        return self._remaining > 0

    def reset(self) -> None:
        """Return to the identity ordering with every permutation outstanding."""
        self._indices = list(range(len(self._elements)))
        self._remaining = self._total

    def next_permutation(self) -> List[Any]:
        """Generate the next permutation as a new list."""
        self._advance()
        return [self._elements[i] for i in self._indices]

    def next_permutation_into(self, destination: MutableSequence[Any]) -> MutableSequence[Any]:
        """
        Generate the next permutation into a caller-supplied sequence.

        Reusing one buffer avoids allocating a fresh list per permutation when
        iterating in a hot loop.

        Args:
            destination: Sequence of exactly n slots; it is filled and returned

        Raises:
            InvalidArgument: If the destination length differs from the element count
        """
        if len(destination) != len(self._elements):
            raise InvalidArgument(
                f"Destination must be the same length as permutations "
                f"({len(self._elements)}), got {len(destination)}"
            )
        self._advance()
        for position, index in enumerate(self._indices):
            destination[position] = self._elements[index]
        return destination

    def __iter__(self) -> Iterator[Tuple[Any, ...]]:
        """Yield the remaining permutations as tuples."""
        while self.has_next():
            self._advance()
            yield tuple(self._elements[i] for i in self._indices)

    def _advance(self) -> None:
        """
        Move the index array to the next permutation.

        Algorithm from Rosen, Discrete Mathematics and its Applications
        (2nd ed., p. 284). The first call after construction or reset leaves
        the identity ordering in place.
        """
        if self._remaining <= 0:
            raise ExhaustedSequence(f"All {self._total} permutations have been generated",
                                    total=self._total)

        if self._remaining < self._total:
            indices = self._indices

            # Largest j with indices[j] < indices[j + 1]
            j = len(indices) - 2
            while indices[j] > indices[j + 1]:
                j -= 1

            # Largest k > j with indices[k] > indices[j]
            k = len(indices) - 1
            while indices[j] > indices[k]:
                k -= 1

            indices[j], indices[k] = indices[k], indices[j]

            # Tail after j back into increasing order
            r = len(indices) - 1
            s = j + 1
            while r > s:
                indices[s], indices[r] = indices[r], indices[s]
                r -= 1
                s += 1

        self._remaining -= 1


class CombinationGenerator:
    """
    Generates every k-element combination of a set of up to 20 elements.

    Combinations preserve the input order of elements and are produced in
    lexicographic order of positions.
    """

    def __init__(self, elements: Iterable[Any], combination_length: int):
        self._elements = _copy_elements(elements)
        n = len(self._elements)
        if isinstance(combination_length, bool) or not isinstance(combination_length, int) \
                or not 0 < combination_length <= n:
            raise InvalidConfiguration(
                f"Combination length must be between 1 and {n}, got {combination_length!r}",
                parameter="combination_length", value=combination_length
            )
        self._length = combination_length
        self._total = math.comb(n, combination_length)
        self.reset()

    @property
    def total_combinations(self) -> int:
        return self._total

    @property
    def remaining_combinations(self) -> int:
        return self._remaining

    def has_next(self) -> bool:
        return self._remaining > 0

    def reset(self) -> None:
        self._indices = list(range(self._length))
        self._remaining = self._total

    def next_combination(self) -> List[Any]:
        self._advance()
        return [self._elements[i] for i in self._indices]

    def next_combination_into(self, destination: MutableSequence[Any]) -> MutableSequence[Any]:
        if len(destination) != self._length:
            raise InvalidArgument(
                f"Destination must be the same length as combinations "
                f"({self._length}), got {len(destination)}"
            )
        self._advance()
        for position, index in enumerate(self._indices):
            destination[position] = self._elements[index]
        return destination

    def __iter__(self) -> Iterator[Tuple[Any, ...]]:
        while self.has_next():
            self._advance()
            yield tuple(self._elements[i] for i in self._indices)

    def _advance(self) -> None:
        if self._remaining <= 0:
            raise ExhaustedSequence(f"All {self._total} combinations have been generated",
                                    total=self._total)

        if self._remaining < self._total:
            n = len(self._elements)
            indices = self._indices
            # Rightmost position that can still move right
            i = self._length - 1
            while indices[i] == n - self._length + i:
                i -= 1
            indices[i] += 1
            for j in range(i + 1, self._length):
                indices[j] = indices[i] + j - i

        self._remaining -= 1
