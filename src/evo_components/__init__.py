"""
Evolution Components Module

Modular components for the generational evolution engine.
Each component handles a specific aspect of the evolutionary process:

- RandomSource: Seeded, splittable pseudo-random streams
- NumberGenerator: Fixed or random parameters for operators
- PermutationGenerator: Exhaustive lexicographic permutation enumeration
- EvolutionaryOperator: Crossover, mutation and operator pipelines
- SelectionStrategy: Roulette, SUS, tournament, rank and truncation selection
- FitnessEvaluationScheduler: Ordered parallel fitness evaluation
- TerminationCondition: Stopping criteria checked once per generation
- ObserverDispatcher: Non-blocking per-generation snapshot delivery

Usage:
    from evo_components import StringCrossover, TournamentSelection
    from evo_components.combinatorics import PermutationGenerator
"""

from .random_sources import (
    RandomSource,
    MersenneTwisterRNG,
    PCG64RNG,
    SynchronizedRandomSource,
    create_random_source
)
from .number_generators import (
    NumberGenerator,
    ConstantGenerator,
    AdjustableNumberGenerator,
    DiscreteUniformGenerator,
    ContinuousUniformGenerator,
    PoissonGenerator,
    GaussianGenerator,
    ExponentialGenerator,
    BinomialGenerator
)
from .combinatorics import PermutationGenerator, CombinationGenerator, factorial
from .candidates import (
    EvaluatedCandidate,
    PopulationData,
    FitnessEvaluator,
    StochasticFitnessEvaluator,
    FunctionFitnessEvaluator,
    CandidateFactory,
    StringFactory,
    BitStringFactory,
    ListPermutationFactory
)
from .pipeline import EvolutionaryOperator, EvolutionPipeline, IdentityOperator, SplitEvolution
from .crossover import (
    AbstractCrossover,
    StringCrossover,
    BitStringCrossover,
    ListCrossover,
    ListOrderCrossover
)
from .mutation import AbstractMutation, StringMutation, BitStringMutation, ListOrderMutation
from .selection import (
    SelectionStrategy,
    RouletteWheelSelection,
    StochasticUniversalSampling,
    TournamentSelection,
    RankSelection,
    TruncationSelection
)
from .evaluation import FitnessEvaluationScheduler
from .termination import (
    TerminationCondition,
    GenerationCount,
    ElapsedTime,
    TargetFitness,
    Stagnation,
    ConvergenceThreshold,
    UserAbort
)
from .observers import EvolutionObserver, FunctionObserver, ObserverDispatcher

__all__ = [
    # Randomness
    'RandomSource',
    'MersenneTwisterRNG',
    'PCG64RNG',
    'SynchronizedRandomSource',
    'create_random_source',
    'NumberGenerator',
    'ConstantGenerator',
    'AdjustableNumberGenerator',
    'DiscreteUniformGenerator',
    'ContinuousUniformGenerator',
    'PoissonGenerator',
    'GaussianGenerator',
    'ExponentialGenerator',
    'BinomialGenerator',
    'PermutationGenerator',
    'CombinationGenerator',
    'factorial',

    # Candidates
    'EvaluatedCandidate',
    'PopulationData',
    'FitnessEvaluator',
    'StochasticFitnessEvaluator',
    'FunctionFitnessEvaluator',
    'CandidateFactory',
    'StringFactory',
    'BitStringFactory',
    'ListPermutationFactory',

    # Operators
    'EvolutionaryOperator',
    'EvolutionPipeline',
    'IdentityOperator',
    'SplitEvolution',
    'AbstractCrossover',
    'StringCrossover',
    'BitStringCrossover',
    'ListCrossover',
    'ListOrderCrossover',
    'AbstractMutation',
    'StringMutation',
    'BitStringMutation',
    'ListOrderMutation',

    # Selection
    'SelectionStrategy',
    'RouletteWheelSelection',
    'StochasticUniversalSampling',
    'TournamentSelection',
    'RankSelection',
    'TruncationSelection',

    # Run control
    'FitnessEvaluationScheduler',
    'TerminationCondition',
    'GenerationCount',
    'ElapsedTime',
    'TargetFitness',
    'Stagnation',
    'ConvergenceThreshold',
    'UserAbort',
    'EvolutionObserver',
    'FunctionObserver',
    'ObserverDispatcher'
]

# Version information
__version__ = '1.0.0'
