"""
Generational Evolution Engine

Drives the generational loop: evaluate, keep elites, select, vary,
re-evaluate, check termination, notify observers. Orchestration is
single-threaded; fitness evaluation is the only parallel phase and is a
full barrier every generation.
"""

import threading
import time
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Generic, Iterable, List, Optional, Sequence, TypeVar, Union

from evo_config import EvolutionConfig, validate_population_size
from evo_constants import EngineConstants
from evo_exceptions import EvolutionException, InvalidPopulationSize, NoTerminationCondition
from evo_logging import get_logger
from evo_components.candidates import (
    CandidateFactory, EvaluatedCandidate, FitnessEvaluator, PopulationData, sort_evaluated_population
)
from evo_components.evaluation import FitnessEvaluationScheduler
from evo_components.observers import EvolutionObserver, FunctionObserver, ObserverDispatcher
from evo_components.pipeline import EvolutionaryOperator, check_size_preserved
from evo_components.random_sources import RandomSource, create_random_source
from evo_components.selection import SelectionStrategy
from evo_components.termination import TerminationCondition, UserAbort

T = TypeVar("T")


class EngineState(Enum):
    IDLE = "idle"
    INITIALIZING = "initializing"
    EVALUATING = "evaluating"
    SELECTING = "selecting"
    VARYING = "varying"
    CHECKING_TERMINATION = "checking_termination"
    TERMINATED = "terminated"


@dataclass(frozen=True)
class EvolutionResult(Generic[T]):
    """Outcome of one ``evolve`` call."""
    best_candidate: T
    best_fitness: float
    population: List[EvaluatedCandidate]      # final generation, fittest first
    data: PopulationData                      # snapshot of the final generation
    satisfied_conditions: List[TerminationCondition]
    generations: int                          # generations evaluated, initial one included


class GenerationalEvolutionEngine(Generic[T]):
    """
    Generational evolutionary algorithm.

    Each generation the ``elite_count`` fittest candidates survive unchanged
    and the rest of the population is replaced by offspring produced by the
    selection strategy and the evolution scheme.
    """

    def __init__(self, candidate_factory: CandidateFactory[T],
                 evolution_scheme: EvolutionaryOperator[T],
                 fitness_evaluator: FitnessEvaluator[T],
                 selection_strategy: SelectionStrategy[T],
                 rng: Optional[RandomSource] = None,
                 config: Optional[EvolutionConfig] = None) -> None:
        """
        Args:
            candidate_factory: Creates the initial population
            evolution_scheme: Operator (usually an EvolutionPipeline) producing offspring
            fitness_evaluator: Scores candidates
            selection_strategy: Chooses parents from the evaluated population
            rng: Random source for every stochastic step; built from
                ``config`` when omitted
            config: Run defaults (population size, elitism, workers, observers)
        """
        self.candidate_factory = candidate_factory
        self.evolution_scheme = evolution_scheme
        self.fitness_evaluator = fitness_evaluator
        self.selection_strategy = selection_strategy
        self.config = config
        self.logger = get_logger()
        if config is not None:
            self.logger.set_level(config.log_level)

        if rng is None:
            rng = create_random_source(config.random_source, config.seed) if config else create_random_source()
        self.rng = rng

        self.scheduler = FitnessEvaluationScheduler(
            fitness_evaluator,
            max_workers=config.max_workers if config else None,
            show_progress=config.show_progress if config else False
        )
        self.dispatcher = ObserverDispatcher(
            queue_size=config.observer_queue_size if config else EngineConstants.DEFAULT_OBSERVER_QUEUE_SIZE,
            overflow_policy=config.observer_overflow_policy if config else EngineConstants.DEFAULT_OBSERVER_POLICY
        )

        self._user_abort = UserAbort()
        self._state = EngineState.IDLE
        self._state_lock = threading.Lock()
        self.satisfied_conditions: List[TerminationCondition] = []

    @property
    def state(self) -> EngineState:
        with self._state_lock:
            return self._state

    def _set_state(self, state: EngineState):
        with self._state_lock:
            self._state = state

    def add_evolution_observer(self, observer: Union[EvolutionObserver, Callable[[PopulationData], None]]):
        """Register an observer (or plain callable) for per-generation snapshots."""
        if not isinstance(observer, EvolutionObserver):
            observer = FunctionObserver(observer)
        self.dispatcher.add_observer(observer)
        return observer

    def remove_evolution_observer(self, observer: EvolutionObserver):
        self.dispatcher.remove_observer(observer)

    def abort(self):
        """Ask a running ``evolve`` to stop at the next generation boundary."""
        self._user_abort.abort()

    def evolve(self, termination_conditions: Iterable[TerminationCondition],
               population_size: Optional[int] = None, elite_count: Optional[int] = None,
               seed_candidates: Optional[Iterable[T]] = None) -> EvolutionResult[T]:
        """
        Run the generational loop until a termination condition is satisfied.

        Args:
            termination_conditions: Stopping criteria; the run ends as soon as any holds
            population_size: Number of candidates per generation (defaults to config)
            elite_count: Fittest candidates carried over unchanged (defaults to config, else 0)
            seed_candidates: Candidates placed into the initial population

        Returns:
            EvolutionResult describing the final generation

        Raises:
            NoTerminationCondition: If no termination condition is given
            InvalidPopulationSize: If the population size or elite count is unusable
            EvaluationFailure: If any fitness evaluation fails
        """
        conditions = list(termination_conditions or [])
        if not conditions:
            raise NoTerminationCondition()

        if population_size is None:
            if self.config is None:
                raise InvalidPopulationSize("Population size must be given when no config is supplied")
            population_size = self.config.population_size
        if elite_count is None:
            elite_count = self.config.elite_count if self.config else EngineConstants.DEFAULT_ELITE_COUNT
        validate_population_size(population_size, elite_count)

        with self._state_lock:
            if self._state not in (EngineState.IDLE, EngineState.TERMINATED):
                raise EvolutionException(f"Engine is already running ({self._state.value})")
            self._state = EngineState.INITIALIZING

        start_time = time.perf_counter()
        try:
            for condition in conditions:
                condition.reset()
            self._user_abort.reset()
            checks = conditions + [self._user_abort]
            natural = self.fitness_evaluator.is_natural

            if self.config is not None:
                self.logger.log_config_summary(self.config)
            self.logger.info("Starting evolution", population=population_size, elites=elite_count,
                             natural_fitness=natural, rng=repr(self.rng))

            population = self.candidate_factory.generate_initial_population(
                population_size, self.rng, seed_candidates
            )

            generation = 0
            generation_start = start_time
            self.logger.log_generation_start(generation, population_size)
            self._set_state(EngineState.EVALUATING)
            evaluated = sort_evaluated_population(
                self.scheduler.evaluate_population(population, self.rng), natural
            )

            while True:
                data = PopulationData.from_population(evaluated, natural, elite_count, generation,
                                                      time.perf_counter() - start_time)
                self.logger.log_generation_complete(generation, data.best_fitness, data.mean_fitness,
                                                    time.perf_counter() - generation_start)
                self.dispatcher.publish(data)

                self._set_state(EngineState.CHECKING_TERMINATION)
                # Every condition sees every snapshot, stateful ones included
                satisfied = [condition for condition in checks if condition.should_terminate(data)]
                if satisfied:
                    break

                generation += 1
                generation_start = time.perf_counter()
                self.logger.log_generation_start(generation, population_size)
                evaluated = self.next_evolution_step(evaluated, elite_count, natural)

            self.satisfied_conditions = satisfied
            self.logger.log_termination(generation, satisfied)
            return EvolutionResult(
                best_candidate=data.best_candidate,
                best_fitness=data.best_fitness,
                population=evaluated,
                data=data,
                satisfied_conditions=satisfied,
                generations=generation + 1
            )
        finally:
            self.dispatcher.close()
            self._set_state(EngineState.TERMINATED)

    def next_evolution_step(self, evaluated_population: Sequence[EvaluatedCandidate],
                            elite_count: int, natural: bool) -> List[EvaluatedCandidate]:
        """
        Produce the next generation from a population sorted fittest first.

        Returns:
            The next evaluated population, sorted fittest first
        """
        elites = list(evaluated_population[:elite_count])
        offspring_count = len(evaluated_population) - elite_count

        self._set_state(EngineState.SELECTING)
        self.logger.debug("Selecting parents", selection_size=offspring_count,
                          strategy=type(self.selection_strategy).__name__)
        selected = self.selection_strategy.select(evaluated_population, natural, offspring_count, self.rng)

        self._set_state(EngineState.VARYING)
        offspring = self.evolution_scheme.apply(selected, self.rng)
        check_size_preserved(self.evolution_scheme, offspring_count, offspring)

        self._set_state(EngineState.EVALUATING)
        elite_candidates = [elite.candidate for elite in elites]
        if self.fitness_evaluator.is_deterministic:
            scored = self.scheduler.evaluate_population(offspring, self.rng,
                                                        context=elite_candidates + list(offspring))
            next_population = elites + scored
        else:
            next_population = self.scheduler.evaluate_population(elite_candidates + list(offspring), self.rng)

        # Stable sort: elites stay ahead of equally fit offspring
        return sort_evaluated_population(next_population, natural)

    def get_statistics(self) -> dict:
        """Collect statistics from the engine's components."""
        component_stats = {
            'evaluation': self.scheduler.get_statistics(),
            'selection': self.selection_strategy.get_statistics(),
            'observers': self.dispatcher.get_statistics()
        }
        if hasattr(self.evolution_scheme, 'get_statistics'):
            component_stats['evolution_scheme'] = self.evolution_scheme.get_statistics()
        return component_stats

    def shutdown(self):
        """Release the evaluation worker pool and the observer thread."""
        self.dispatcher.close()
        self.scheduler.shutdown()

    def __enter__(self) -> 'GenerationalEvolutionEngine[T]':
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.shutdown()
