"""
Random Sources Module

Seeded pseudo-random generators shared by every stochastic component.

Features:
- Deterministic streams for a fixed seed (reproducible runs)
- Mersenne Twister (CPython) and PCG64 (numpy) implementations
- Seed splitting through numpy SeedSequence for per-worker streams
- Explicit synchronized wrapper for sources shared across threads

None of the concrete sources lock internally. A source is either owned by a
single thread (the engine's orchestration thread, one evaluation task) or it
is wrapped in SynchronizedRandomSource before being shared.
"""

import os
import random
import threading
from abc import ABC, abstractmethod
from typing import Any, List, MutableSequence, Optional, Sequence

import numpy as np

from evo_constants import AlgorithmConstants
from evo_exceptions import InvalidArgument, InvalidConfiguration


def generate_seed() -> int:
    """Draw a fresh seed from operating system entropy."""
    return int.from_bytes(os.urandom(AlgorithmConstants.SEED_BITS // 8), "big")


class RandomSource(ABC):
    """
    Uniform random primitives on top of a seeded generator.

    Subclasses provide the raw stream (``_next_below``, ``next_double``,
    ``next_gaussian``); bounds checking, sampling, shuffling and seed
    splitting are shared here so all sources behave identically for callers.
    """

    def __init__(self, seed: Optional[int] = None):
        if seed is None:
            seed = generate_seed()
        if isinstance(seed, bool) or not isinstance(seed, int) or seed < 0:
            raise InvalidConfiguration(f"Seed must be a non-negative integer, got {seed!r}",
                                       parameter="seed", value=seed)
        self._seed = seed
        self._seed_sequence = np.random.SeedSequence(seed)

    @property
    def seed(self) -> int:
        return self._seed

    @abstractmethod
    def _next_below(self, bound: int) -> int:
        """Uniform integer in [0, bound); bound is already validated."""

    @abstractmethod
    def next_double(self) -> float:
        """Uniform double in [0, 1)."""

    @abstractmethod
    def next_gaussian(self) -> float:
        """Standard normal deviate (mean 0, standard deviation 1)."""

    def next_int(self, bound: int) -> int:
        """Uniform integer in [0, bound)."""
        if isinstance(bound, bool) or not isinstance(bound, int) or bound <= 0:
            raise InvalidArgument(f"Bound must be a positive integer, got {bound!r}")
        return self._next_below(bound)

    def next_int_between(self, low: int, high: int) -> int:
        """Uniform integer in [low, high)."""
        if high <= low:
            raise InvalidArgument(f"Empty range [{low}, {high})")
        return low + self._next_below(high - low)

    def next_boolean(self) -> bool:
        return self._next_below(2) == 1

    def choice(self, sequence: Sequence[Any]) -> Any:
        if not sequence:
            raise InvalidArgument("Cannot choose from an empty sequence")
        return sequence[self._next_below(len(sequence))]

    def shuffle(self, items: MutableSequence[Any]) -> None:
        """In-place Fisher-Yates shuffle."""
        for i in range(len(items) - 1, 0, -1):
            j = self._next_below(i + 1)
            items[i], items[j] = items[j], items[i]

    def sample(self, sequence: Sequence[Any], k: int) -> List[Any]:
        """
        Select k distinct positions of ``sequence`` without replacement.

        Uses a partial Fisher-Yates shuffle over indices so the result depends
        only on this source's stream.
        """
        n = len(sequence)
        if k < 0 or k > n:
            raise InvalidArgument(f"Sample size {k} outside [0, {n}]")
        indices = list(range(n))
        for i in range(k):
            j = i + self._next_below(n - i)
            indices[i], indices[j] = indices[j], indices[i]
        return [sequence[i] for i in indices[:k]]

    def spawn(self, n: int) -> List['RandomSource']:
        """
        Derive ``n`` independent child sources.

        Children are a pure function of this source's seed and the number of
        children spawned so far, never of how much of the stream was consumed,
        so concurrent consumers get reproducible, non-overlapping streams.
        """
        if n < 0:
            raise InvalidArgument(f"Cannot spawn {n} random sources")
        children = self._seed_sequence.spawn(n)
        return [type(self)(self._seed_from_sequence(child)) for child in children]

    @staticmethod
    def _seed_from_sequence(sequence: np.random.SeedSequence) -> int:
        words = sequence.generate_state(2, dtype=np.uint32)
        return (int(words[0]) << 32) | int(words[1])

    def __repr__(self) -> str:
        return f"{type(self).__name__}(seed={self._seed})"


class MersenneTwisterRNG(RandomSource):
    """MT19937 generator backed by CPython's ``random.Random``."""

    def __init__(self, seed: Optional[int] = None):
        super().__init__(seed)
        self._random = random.Random(self._seed)

    def _next_below(self, bound: int) -> int:
        return self._random.randrange(bound)

    def next_double(self) -> float:
        return self._random.random()

    def next_gaussian(self) -> float:
        return self._random.gauss(0.0, 1.0)


class PCG64RNG(RandomSource):
    """PCG64 generator backed by ``numpy.random.Generator``."""

    def __init__(self, seed: Optional[int] = None):
        super().__init__(seed)
        self._generator = np.random.Generator(np.random.PCG64(self._seed_sequence))

    def _next_below(self, bound: int) -> int:
        return int(self._generator.integers(0, bound))

    def next_double(self) -> float:
        return float(self._generator.random())

    def next_gaussian(self) -> float:
        return float(self._generator.standard_normal())


class SynchronizedRandomSource(RandomSource):
    """
    Thread-safe view of another source.

    Every primitive runs under one lock, so a single stream can be shared by
    several threads. The interleaving (and so the values each thread sees)
    depends on scheduling; use ``spawn`` when per-thread reproducibility matters.
    """

    def __init__(self, delegate: RandomSource):
        self._delegate = delegate
        self._lock = threading.RLock()
        self._seed = delegate.seed

    @property
    def seed(self) -> int:
        return self._delegate.seed

    def _next_below(self, bound: int) -> int:
        with self._lock:
            return self._delegate.next_int(bound)

    def next_double(self) -> float:
        with self._lock:
            return self._delegate.next_double()

    def next_gaussian(self) -> float:
        with self._lock:
            return self._delegate.next_gaussian()

    def shuffle(self, items: MutableSequence[Any]) -> None:
        with self._lock:
            self._delegate.shuffle(items)

    def sample(self, sequence: Sequence[Any], k: int) -> List[Any]:
        with self._lock:
            return self._delegate.sample(sequence, k)

    def spawn(self, n: int) -> List[RandomSource]:
        with self._lock:
            return self._delegate.spawn(n)

    def __repr__(self) -> str:
        return f"SynchronizedRandomSource({self._delegate!r})"


_SOURCES = {
    "mersenne": MersenneTwisterRNG,
    "pcg64": PCG64RNG,
}


def create_random_source(kind: str = "mersenne", seed: Optional[int] = None,
                         synchronized: bool = False) -> RandomSource:
    """
    Create a random source by name.

    Args:
        kind: "mersenne" or "pcg64"
        seed: Seed value, None for system entropy
        synchronized: Wrap the source for sharing across threads

    Returns:
        Configured RandomSource
    """
    try:
        source_class = _SOURCES[kind]
    except KeyError:
        raise InvalidConfiguration(f"Unknown random source '{kind}', expected one of {sorted(_SOURCES)}",
                                   parameter="kind", value=kind) from None
    source = source_class(seed)
    return SynchronizedRandomSource(source) if synchronized else source


