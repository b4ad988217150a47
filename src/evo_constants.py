"""
Configuration Constants for the Evolution Engine

Centralizes all magic numbers and hard-coded values for better maintainability.
All constants are organized by category with clear documentation.
"""


class EngineConstants:
    """Constants governing the generational loop and its collaborators."""

    # Population
    MIN_POPULATION_SIZE = 1               # Smallest population the engine accepts
    DEFAULT_ELITE_COUNT = 0               # Elitism disabled unless requested

    # Observer notification
    DEFAULT_OBSERVER_QUEUE_SIZE = 64      # Pending snapshots before overflow policy applies
    OBSERVER_POLICIES = ("drop", "block")
    DEFAULT_OBSERVER_POLICY = "drop"
    OBSERVER_JOIN_TIMEOUT_SECONDS = 5.0   # Wait for the observer thread on close

    # Worker pool
    MIN_WORKERS = 1
    MAX_WORKERS_PER_CPU = 4               # Warn above this oversubscription factor


class OperatorConstants:
    """Defaults for crossover, mutation and selection operators."""

    DEFAULT_CROSSOVER_POINTS = 1
    DEFAULT_CROSSOVER_PROBABILITY = 1.0
    DEFAULT_MUTATION_PROBABILITY = 0.1
    DEFAULT_MUTATION_COUNT = 1

    DEFAULT_TOURNAMENT_SIZE = 2
    DEFAULT_TOURNAMENT_PROBABILITY = 0.7  # Chance that the fitter contestant wins
    DEFAULT_TRUNCATION_RATIO = 0.5

    BIT_ALPHABET = "01"


class CombinatoricsConstants:
    """Limits for exhaustive enumeration utilities."""

    # 21! exceeds a signed 64-bit integer; enumeration beyond 20 elements is refused.
    MAX_ELEMENTS = 20
    MIN_ELEMENTS = 1


class AlgorithmConstants:
    """Algorithm-specific configuration constants."""

    # Termination
    DEFAULT_STAGNATION_GENERATIONS = 20
    DEFAULT_CONVERGENCE_WINDOW = 20
    DEFAULT_CONVERGENCE_THRESHOLD = 0.001
    FITNESS_IMPROVEMENT_PRECISION = 1e-12  # Differences below this count as no change

    # Random number generation
    SEED_BITS = 64
    SUPPORTED_RANDOM_SOURCES = ("mersenne", "pcg64")
