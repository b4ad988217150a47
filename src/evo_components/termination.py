"""
Termination Conditions Module

Predicates over a generation snapshot that decide when an evolutionary run
stops. The engine checks every condition once per generation, after the
generation's population has been evaluated, and stops as soon as any is
satisfied.

Features:
- Generation count, elapsed time and target fitness limits
- Stagnation detection (no improvement for a number of generations)
- Convergence detection over a sliding window of best fitness values
- Thread-safe cooperative user abort
"""

import threading
from abc import ABC, abstractmethod
from typing import List, Optional

import numpy as np

from evo_constants import AlgorithmConstants
from evo_exceptions import InvalidConfiguration
from evo_components.candidates import PopulationData, is_fitter


class TerminationCondition(ABC):
    """Decides, from one generation snapshot, whether the run should stop."""

    @abstractmethod
    def should_terminate(self, data: PopulationData) -> bool:
        """Return True to stop after the generation described by ``data``."""

    def reset(self):
        """Forget any history from a previous run."""

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


def _positive_int(value, name: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        raise InvalidConfiguration(f"{name} ({value!r}) must be a positive integer",
                                   parameter=name, value=value)
    return value


def _direction(natural: Optional[bool], data: PopulationData) -> bool:
    return data.natural_fitness if natural is None else natural


class GenerationCount(TerminationCondition):
    """
    Stops once ``generation_count`` generations have been evaluated.

    Generation 0 is the initial population, so the condition is satisfied by
    the snapshot numbered ``generation_count - 1``.
    """

    def __init__(self, generation_count: int):
        self.generation_count = _positive_int(generation_count, "generation_count")

    def should_terminate(self, data: PopulationData) -> bool:
        return data.generation_number + 1 >= self.generation_count

    def __repr__(self) -> str:
        return f"GenerationCount({self.generation_count})"


class ElapsedTime(TerminationCondition):
    """Stops once the run has been going for at least ``max_seconds``."""

    def __init__(self, max_seconds: float):
        if isinstance(max_seconds, bool) or not isinstance(max_seconds, (int, float)) or max_seconds <= 0:
            raise InvalidConfiguration(f"Duration ({max_seconds!r}) must be positive",
                                       parameter="max_seconds", value=max_seconds)
        self.max_seconds = float(max_seconds)

    def should_terminate(self, data: PopulationData) -> bool:
        return data.elapsed_time >= self.max_seconds

    def __repr__(self) -> str:
        return f"ElapsedTime({self.max_seconds})"


class TargetFitness(TerminationCondition):
    """
    Stops once the best candidate reaches ``target_fitness``.

    The fitness direction is taken from each snapshot unless ``natural`` is given.
    """

    def __init__(self, target_fitness: float, natural: Optional[bool] = None):
        self.target_fitness = target_fitness
        self.natural = natural

    def should_terminate(self, data: PopulationData) -> bool:
        if _direction(self.natural, data):
            return data.best_fitness >= self.target_fitness
        return data.best_fitness <= self.target_fitness

    def __repr__(self) -> str:
        return f"TargetFitness({self.target_fitness}, natural={self.natural})"


class Stagnation(TerminationCondition):
    """
    Stops when fitness has not improved for ``generation_limit`` generations.

    Tracks the best fitness (or the mean fitness, with
    ``use_population_average``) seen so far and the generation it was reached in.
    """

    def __init__(self, generation_limit: int = AlgorithmConstants.DEFAULT_STAGNATION_GENERATIONS,
                 natural: Optional[bool] = None, use_population_average: bool = False):
        self.generation_limit = _positive_int(generation_limit, "generation_limit")
        self.natural = natural
        self.use_population_average = use_population_average
        self.reset()

    def reset(self):
        self._best_value: Optional[float] = None
        self._best_generation = 0

    def should_terminate(self, data: PopulationData) -> bool:
        value = data.mean_fitness if self.use_population_average else data.best_fitness
        natural = _direction(self.natural, data)
        if self._best_value is None or self._improves_on(value, self._best_value, natural):
            self._best_value = value
            self._best_generation = data.generation_number
            return False
        return data.generation_number - self._best_generation >= self.generation_limit

    def _improves_on(self, value: float, best: float, natural: bool) -> bool:
        if abs(value - best) <= AlgorithmConstants.FITNESS_IMPROVEMENT_PRECISION:
            return False
        return is_fitter(value, best, natural)

    def __repr__(self) -> str:
        return f"Stagnation({self.generation_limit}, natural={self.natural})"


class ConvergenceThreshold(TerminationCondition):
    """
    Convergence detection over a sliding window of best fitness values.

    The run has converged when the spread of the best fitness over the last
    ``window`` generations, relative to its magnitude, falls below
    ``threshold``. Detection only starts after ``min_generations`` generations
    so that early plateaus do not end the run prematurely.
    """

    def __init__(self, window: int = AlgorithmConstants.DEFAULT_CONVERGENCE_WINDOW,
                 threshold: float = AlgorithmConstants.DEFAULT_CONVERGENCE_THRESHOLD,
                 min_generations: int = 0):
        self.window = _positive_int(window, "window")
        if isinstance(threshold, bool) or not isinstance(threshold, (int, float)) or threshold < 0:
            raise InvalidConfiguration(f"Convergence threshold ({threshold!r}) must be non-negative",
                                       parameter="threshold", value=threshold)
        if isinstance(min_generations, bool) or not isinstance(min_generations, int) or min_generations < 0:
            raise InvalidConfiguration(f"Minimum generations ({min_generations!r}) must be non-negative",
                                       parameter="min_generations", value=min_generations)
        self.threshold = float(threshold)
        self.min_generations = min_generations
        self.fitness_history: List[float] = []

    def reset(self):
        self.fitness_history = []

    def should_terminate(self, data: PopulationData) -> bool:
        self.fitness_history.append(data.best_fitness)

        if data.generation_number + 1 < self.min_generations:
            return False
        if len(self.fitness_history) < self.window:
            return False

        return self.relative_improvement() < self.threshold

    def relative_improvement(self) -> float:
        """Spread of the recent best fitness values relative to their magnitude."""
        recent = self.fitness_history[-self.window:]
        best_recent = max(recent)
        worst_recent = min(recent)
        scale = max(abs(best_recent), abs(worst_recent))
        if scale == 0:
            return 0.0
        return (best_recent - worst_recent) / scale

    def get_statistics(self) -> dict:
        """Get convergence detection statistics."""
        if len(self.fitness_history) >= 2:
            recent = self.fitness_history[-self.window:]
            trend = float(np.polyfit(np.arange(len(recent)), recent, 1)[0]) if len(recent) >= 2 else 0.0
        else:
            trend = 0.0
        return {
            'generations_tracked': len(self.fitness_history),
            'convergence_window': self.window,
            'fitness_trend': trend
        }

    def __repr__(self) -> str:
        return f"ConvergenceThreshold(window={self.window}, threshold={self.threshold})"


class UserAbort(TerminationCondition):
    """
    Cooperative cancellation from any thread.

    ``abort()`` only takes effect at the next generation boundary; a running
    evaluation is never interrupted.
    """

    def __init__(self):
        self._aborted = threading.Event()

    def abort(self):
        self._aborted.set()

    @property
    def is_aborted(self) -> bool:
        return self._aborted.is_set()

    def reset(self):
        self._aborted.clear()

    def should_terminate(self, data: PopulationData) -> bool:
        return self._aborted.is_set()
