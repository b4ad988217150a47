"""
Custom Exception Classes for the Evolution Engine

Provides specific, meaningful exceptions for the different failure modes of
an evolutionary run so callers can react to configuration mistakes, structural
mismatches and evaluation failures separately.
"""

import math
from numbers import Real
from typing import Any, Optional


class EvolutionException(Exception):
    """Base exception for all evolution engine related errors."""
    pass


class InvalidConfiguration(EvolutionException, ValueError):
    """Raised when operator or engine parameters are invalid."""

    def __init__(self, message: str, parameter: str = None, value: Any = None):
        super().__init__(message)
        self.parameter = parameter
        self.value = value


class InvalidArgument(EvolutionException, ValueError):
    """Raised when a call receives an argument it cannot work with."""
    pass


class IncompatibleCandidates(EvolutionException, ValueError):
    """Raised when paired candidates are structurally incompatible."""

    def __init__(self, message: str, parent1: Any = None, parent2: Any = None,
                 sizes: tuple = None):
        super().__init__(message)
        self.parent1 = parent1
        self.parent2 = parent2
        self.sizes = sizes


class ExhaustedSequence(EvolutionException, LookupError):
    """Raised when an enumerator is asked for more values than it holds."""

    def __init__(self, message: str, total: int = None):
        super().__init__(message)
        self.total = total


class EvaluationFailure(EvolutionException):
    """Raised when a fitness evaluation fails; fatal to the current run."""

    def __init__(self, message: str, candidate: Any = None, index: int = None,
                 cause: BaseException = None):
        super().__init__(message)
        self.candidate = candidate
        self.index = index
        self.cause = cause


class NoTerminationCondition(InvalidConfiguration):
    """Raised when a run is requested without any termination condition."""

    def __init__(self, message: str = "At least one termination condition must be specified"):
        super().__init__(message, parameter="termination_conditions")


class InvalidPopulationSize(InvalidConfiguration):
    """Raised when the population size is unusable for the requested run."""

    def __init__(self, message: str, population_size: int = None, elite_count: int = None):
        super().__init__(message, parameter="population_size", value=population_size)
        self.population_size = population_size
        self.elite_count = elite_count


class SelectionError(EvolutionException):
    """Raised when selection operations fail."""

    def __init__(self, message: str, population_size: int = None,
                 selection_type: str = None):
        super().__init__(message)
        self.population_size = population_size
        self.selection_type = selection_type


class OperatorContractViolation(EvolutionException):
    """Raised when an operator does not return a population of the expected size."""

    def __init__(self, message: str, operator_name: str = None,
                 expected_size: int = None, actual_size: int = None):
        super().__init__(message)
        self.operator_name = operator_name
        self.expected_size = expected_size
        self.actual_size = actual_size


def validate_probability(value: float, name: str = "probability",
                         allow_zero: bool = False) -> float:
    """
    Validate a probability parameter at construction time.

    Args:
        value: Probability to validate
        name: Parameter name for error context
        allow_zero: Whether 0 is an acceptable value

    Returns:
        The validated probability as a float

    Raises:
        InvalidConfiguration: If the value is not a number in the accepted range
    """
    if isinstance(value, bool) or not isinstance(value, Real) or math.isnan(value):
        raise InvalidConfiguration(f"{name} must be a number, got {value!r}",
                                   parameter=name, value=value)
    if value > 1:
        raise InvalidConfiguration(f"{name} ({value}) cannot be greater than 1",
                                   parameter=name, value=value)
    if value < 0 or (value == 0 and not allow_zero):
        lower = "0 or greater" if allow_zero else "greater than 0"
        raise InvalidConfiguration(f"{name} ({value}) must be {lower}",
                                   parameter=name, value=value)
    return float(value)


def validate_fitness(fitness: Any, candidate: Any = None,
                     index: Optional[int] = None) -> float:
    """
    Validate a fitness score returned by a user-supplied evaluator.

    Args:
        fitness: Value returned by the evaluator
        candidate: Candidate that was scored, for error context
        index: Position of the candidate in its population

    Returns:
        Validated fitness value as a float

    Raises:
        EvaluationFailure: If the score is not a finite real number
    """
    if fitness is None:
        raise EvaluationFailure("Fitness is None", candidate=candidate, index=index)

    if isinstance(fitness, bool) or not isinstance(fitness, Real):
        raise EvaluationFailure(
            f"Fitness must be numeric, got {type(fitness).__name__}",
            candidate=candidate, index=index
        )

    if not math.isfinite(fitness):
        raise EvaluationFailure(f"Fitness must be finite, got {fitness}",
                                candidate=candidate, index=index)

    return float(fitness)
