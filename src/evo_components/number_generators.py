"""
Number Generators Module

Runtime-configurable parameters for stochastic operators. Anywhere an
operator needs a count or magnitude (crossover points, mutations per
candidate) it asks a NumberGenerator instead of holding a hard-coded value,
so the operator's mechanics and its tuning can be tested independently.
"""

import math
import threading
from abc import ABC, abstractmethod
from numbers import Real
from typing import Union

from evo_exceptions import InvalidConfiguration
from evo_components.random_sources import RandomSource


class NumberGenerator(ABC):
    """Source of numbers drawn from some distribution."""

    @abstractmethod
    def next_value(self):
        """Return the next number in the sequence."""


class ConstantGenerator(NumberGenerator):
    """Always returns the configured value."""

    def __init__(self, value):
        self.value = value

    def next_value(self):
        return self.value

    def __repr__(self) -> str:
        return f"ConstantGenerator({self.value!r})"


class AdjustableNumberGenerator(NumberGenerator):
    """
    Constant generator whose value can be changed while a run is in progress.

    Reads and writes are guarded so another thread (a tuning observer, for
    instance) can adjust operator parameters between generations.
    """

    def __init__(self, value):
        self._value = value
        self._lock = threading.Lock()

    def set_value(self, value):
        with self._lock:
            self._value = value

    def next_value(self):
        with self._lock:
            return self._value


class DiscreteUniformGenerator(NumberGenerator):
    """Uniform integers in [minimum, maximum], both inclusive."""

    def __init__(self, minimum: int, maximum: int, rng: RandomSource):
        if maximum < minimum:
            raise InvalidConfiguration(f"Maximum ({maximum}) must not be less than minimum ({minimum})",
                                       parameter="maximum", value=maximum)
        self.minimum = minimum
        self.maximum = maximum
        self.rng = rng

    def next_value(self) -> int:
        return self.minimum + self.rng.next_int(self.maximum - self.minimum + 1)


class ContinuousUniformGenerator(NumberGenerator):
    """Uniform doubles in [minimum, maximum)."""

    def __init__(self, minimum: float, maximum: float, rng: RandomSource):
        if maximum <= minimum:
            raise InvalidConfiguration(f"Maximum ({maximum}) must be greater than minimum ({minimum})",
                                       parameter="maximum", value=maximum)
        self.minimum = minimum
        self.maximum = maximum
        self.rng = rng

    def next_value(self) -> float:
        return self.minimum + (self.maximum - self.minimum) * self.rng.next_double()


class PoissonGenerator(NumberGenerator):
    """
    Poisson-distributed non-negative integers.

    Uses Knuth's multiplication method, which is exact and fast for the small
    means operators use (a handful of crossover points or mutations).
    """

    def __init__(self, mean: float, rng: RandomSource):
        if not isinstance(mean, Real) or not mean > 0 or math.isinf(mean):
            raise InvalidConfiguration(f"Mean ({mean}) must be a positive finite number",
                                       parameter="mean", value=mean)
        if math.exp(-mean) == 0.0:
            raise InvalidConfiguration(f"Mean ({mean}) is too large for Poisson sampling",
                                       parameter="mean", value=mean)
        self.mean = mean
        self.rng = rng
        self._limit = math.exp(-mean)

    def next_value(self) -> int:
        count = 0
        product = self.rng.next_double()
        while product >= self._limit:
            count += 1
            product *= self.rng.next_double()
        return count


class GaussianGenerator(NumberGenerator):
    """Normally distributed doubles."""

    def __init__(self, mean: float, standard_deviation: float, rng: RandomSource):
        if not standard_deviation > 0:
            raise InvalidConfiguration(f"Standard deviation ({standard_deviation}) must be positive",
                                       parameter="standard_deviation", value=standard_deviation)
        self.mean = mean
        self.standard_deviation = standard_deviation
        self.rng = rng

    def next_value(self) -> float:
        return self.mean + self.standard_deviation * self.rng.next_gaussian()


class ExponentialGenerator(NumberGenerator):
    """Exponentially distributed doubles (inverse transform sampling)."""

    def __init__(self, rate: float, rng: RandomSource):
        if not rate > 0:
            raise InvalidConfiguration(f"Rate ({rate}) must be positive",
                                       parameter="rate", value=rate)
        self.rate = rate
        self.rng = rng

    def next_value(self) -> float:
        # 1 - u lies in (0, 1], so the logarithm is always defined
        return -math.log(1.0 - self.rng.next_double()) / self.rate


class BinomialGenerator(NumberGenerator):
    """Number of successes in n Bernoulli(p) trials."""

    def __init__(self, n: int, p: float, rng: RandomSource):
        if not isinstance(n, int) or n < 1:
            raise InvalidConfiguration(f"Trial count ({n}) must be a positive integer",
                                       parameter="n", value=n)
        if not 0 <= p <= 1:
            raise InvalidConfiguration(f"Probability ({p}) must be between 0 and 1",
                                       parameter="p", value=p)
        self.n = n
        self.p = p
        self.rng = rng

    def next_value(self) -> int:
        return sum(1 for _ in range(self.n) if self.rng.next_double() < self.p)


def as_number_generator(value: Union[NumberGenerator, Real]) -> NumberGenerator:
    """Wrap plain numbers in a ConstantGenerator; pass generators through."""
    if isinstance(value, NumberGenerator):
        return value
    if isinstance(value, bool) or not isinstance(value, Real):
        raise InvalidConfiguration(f"Expected a number or NumberGenerator, got {type(value).__name__}",
                                   value=value)
    return ConstantGenerator(value)
