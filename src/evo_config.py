"""
Configuration Management for the Evolution Engine

Validates and organizes run parameters into a single structure that the
engine, evaluation scheduler and observer dispatcher read from.
"""

import os
from dataclasses import dataclass, asdict
from typing import Optional

import psutil

from evo_constants import AlgorithmConstants, EngineConstants
from evo_exceptions import InvalidConfiguration, InvalidPopulationSize


def hardware_concurrency() -> int:
    """Number of logical CPUs available to this process."""
    return psutil.cpu_count(logical=True) or os.cpu_count() or 1


def validate_population_size(population_size: int, elite_count: int = 0) -> None:
    """
    Check the population/elitism preconditions of a run.

    Raises:
        InvalidPopulationSize: If N < 1, e < 0 or N < e
    """
    if isinstance(population_size, bool) or not isinstance(population_size, int):
        raise InvalidPopulationSize(f"Population size must be an integer, got {population_size!r}",
                                    population_size=population_size, elite_count=elite_count)
    if isinstance(elite_count, bool) or not isinstance(elite_count, int) or elite_count < 0:
        raise InvalidPopulationSize(f"Elite count must be a non-negative integer, got {elite_count!r}",
                                    population_size=population_size, elite_count=elite_count)
    if population_size < EngineConstants.MIN_POPULATION_SIZE:
        raise InvalidPopulationSize(f"Population size ({population_size}) must be at least "
                                    f"{EngineConstants.MIN_POPULATION_SIZE}",
                                    population_size=population_size, elite_count=elite_count)
    if population_size < elite_count:
        raise InvalidPopulationSize(f"Elite count ({elite_count}) cannot exceed population "
                                    f"size ({population_size})",
                                    population_size=population_size, elite_count=elite_count)


@dataclass
class EvolutionConfig:
    """
    Configuration container for an evolutionary run.

    All values are validated eagerly so that a misconfigured run never starts.
    """

    # Core parameters
    population_size: int
    elite_count: int = EngineConstants.DEFAULT_ELITE_COUNT

    # Evaluation
    max_workers: Optional[int] = None   # None = hardware concurrency
    show_progress: bool = False

    # Reproducibility
    seed: Optional[int] = None          # None = seed from system entropy
    random_source: str = "mersenne"     # "mersenne" or "pcg64"

    # Observers
    observer_queue_size: int = EngineConstants.DEFAULT_OBSERVER_QUEUE_SIZE
    observer_overflow_policy: str = EngineConstants.DEFAULT_OBSERVER_POLICY

    log_level: str = "INFO"

    def __post_init__(self):
        """Validate parameters after initialization."""
        self._validate()

    def _validate(self):
        """Validate critical parameters to catch errors early."""
        validate_population_size(self.population_size, self.elite_count)

        errors = []

        if self.max_workers is not None:
            if isinstance(self.max_workers, bool) or not isinstance(self.max_workers, int) \
                    or self.max_workers < EngineConstants.MIN_WORKERS:
                errors.append(f"Max workers ({self.max_workers}) must be a positive integer")

        if self.seed is not None and (isinstance(self.seed, bool) or not isinstance(self.seed, int)
                                      or self.seed < 0):
            errors.append(f"Seed ({self.seed}) must be a non-negative integer")

        if self.random_source not in AlgorithmConstants.SUPPORTED_RANDOM_SOURCES:
            errors.append(f"Random source ({self.random_source}) must be one of: "
                          f"{list(AlgorithmConstants.SUPPORTED_RANDOM_SOURCES)}")

        if isinstance(self.observer_queue_size, bool) or not isinstance(self.observer_queue_size, int) \
                or self.observer_queue_size < 1:
            errors.append(f"Observer queue size ({self.observer_queue_size}) must be a positive integer")
        if self.observer_overflow_policy not in EngineConstants.OBSERVER_POLICIES:
            errors.append(f"Observer overflow policy ({self.observer_overflow_policy}) must be one of: "
                          f"{list(EngineConstants.OBSERVER_POLICIES)}")

        if str(self.log_level).upper() not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            errors.append(f"Log level ({self.log_level}) is not a recognised level")

        if errors:
            raise InvalidConfiguration("Configuration validation failed:\n" +
                                       "\n".join(f"  - {error}" for error in errors))

    def resolved_workers(self) -> int:
        """Worker count to use for fitness evaluation."""
        if self.max_workers is not None:
            return self.max_workers
        return hardware_concurrency()

    @property
    def num_offspring(self) -> int:
        """Number of offspring needed to fill the population after elites."""
        return self.population_size - self.elite_count

    def summary(self) -> str:
        """Generate human-readable configuration summary."""
        return f"""Evolution Configuration:
  Population: {self.population_size} (offspring: {self.num_offspring}, elites: {self.elite_count})
  Workers: {self.resolved_workers()}{' (hardware default)' if self.max_workers is None else ''}
  Random source: {self.random_source} (seed: {self.seed if self.seed is not None else 'entropy'})
  Observers: queue={self.observer_queue_size}, overflow={self.observer_overflow_policy}"""

    def __str__(self) -> str:
        return f"EvolutionConfig(pop={self.population_size}, elites={self.elite_count}, workers={self.max_workers})"

    def to_dict(self) -> dict:
        """Convert config to dictionary for serialization."""
        return asdict(self)

    @classmethod
    def from_dict(cls, config_dict: dict) -> 'EvolutionConfig':
        """Create config from dictionary."""
        unknown = set(config_dict) - set(cls.__dataclass_fields__)
        if unknown:
            raise InvalidConfiguration(f"Unknown configuration keys: {sorted(unknown)}")
        return cls(**config_dict)

    def update(self, **kwargs) -> 'EvolutionConfig':
        """Create a new config with updated values."""
        current_config = self.to_dict()
        current_config.update(kwargs)
        return self.from_dict(current_config)
