"""
Evaluation Module

Handles fitness evaluation of whole populations with a bounded worker pool.

Features:
- Parallel fitness evaluation using ThreadPoolExecutor
- Results always returned in population order
- Generation-fatal failure handling (pending work cancelled)
- Dedicated random source per evaluation for stochastic evaluators
- Evaluation statistics and optional progress bar
"""

import concurrent.futures
import threading
import time
from typing import Any, List, Optional, Sequence

from tqdm import tqdm

from evo_config import hardware_concurrency
from evo_constants import EngineConstants
from evo_exceptions import EvaluationFailure, InvalidConfiguration, validate_fitness
from evo_logging import get_logger
from evo_components.candidates import EvaluatedCandidate, FitnessEvaluator, StochasticFitnessEvaluator
from evo_components.random_sources import MersenneTwisterRNG, RandomSource


def resolve_worker_count(requested: Optional[int] = None) -> int:
    """
    Work out how many evaluation workers to use.

    Args:
        requested: Explicit worker count, or None for hardware concurrency

    Returns:
        Positive worker count
    """
    cpus = hardware_concurrency()
    if requested is None:
        return cpus

    if isinstance(requested, bool) or not isinstance(requested, int) or requested < EngineConstants.MIN_WORKERS:
        raise InvalidConfiguration(f"Max workers ({requested}) must be a positive integer",
                                   parameter="max_workers", value=requested)

    if requested > cpus * EngineConstants.MAX_WORKERS_PER_CPU:
        get_logger().warning("Worker count far exceeds available CPUs",
                             requested=requested, cpus=cpus)
    return requested


class FitnessEvaluationScheduler:
    """
    Evaluates populations against a FitnessEvaluator.

    Owns its worker pool for its whole lifetime; call ``shutdown`` (or use the
    scheduler as a context manager) to release it. Every call is a full
    barrier: it returns only once every candidate has been scored.
    """

    def __init__(self, fitness_evaluator: FitnessEvaluator, max_workers: Optional[int] = None,
                 show_progress: bool = False):
        """
        Initialize the scheduler.

        Args:
            fitness_evaluator: Scores individual candidates
            max_workers: Size of the worker pool (None = hardware concurrency)
            show_progress: Whether to display a tqdm progress bar per batch
        """
        self.fitness_evaluator = fitness_evaluator
        self.max_workers = resolve_worker_count(max_workers)
        self.show_progress = show_progress
        self.logger = get_logger()

        self._executor: Optional[concurrent.futures.ThreadPoolExecutor] = None
        self._executor_lock = threading.Lock()

        # Statistics
        self.stats = {
            'evaluations_performed': 0,
            'batches': 0,
            'evaluation_failures': 0,
            'total_evaluation_time': 0.0
        }

    @property
    def is_stochastic(self) -> bool:
        return isinstance(self.fitness_evaluator, StochasticFitnessEvaluator)

    def evaluate_population(self, population: Sequence[Any], rng: Optional[RandomSource] = None,
                            context: Optional[Sequence[Any]] = None) -> List[EvaluatedCandidate]:
        """
        Score every candidate of a population.

        Args:
            population: Candidates to evaluate
            rng: Parent random source; stochastic evaluators get one child
                stream per candidate spawned from it
            context: Population handed to the evaluator alongside each
                candidate; defaults to ``population`` itself

        Returns:
            EvaluatedCandidates in the same order as ``population``

        Raises:
            EvaluationFailure: If any evaluation raises or returns an invalid score
        """
        candidates = tuple(population)
        if not candidates:
            return []
        context = tuple(context) if context is not None else candidates

        if self.is_stochastic:
            parent = rng if rng is not None else MersenneTwisterRNG()
            streams = parent.spawn(len(candidates))
        else:
            streams = [None] * len(candidates)

        start_time = time.perf_counter()
        try:
            if self.max_workers == 1 or len(candidates) == 1:
                results = self._evaluate_sequential(candidates, context, streams)
            else:
                results = self._evaluate_parallel(candidates, context, streams)
        except EvaluationFailure as failure:
            self.stats['evaluation_failures'] += 1
            self.logger.log_evaluation_failure(failure.index, failure.candidate, failure.cause or failure)
            raise

        evaluation_time = time.perf_counter() - start_time
        self.stats['evaluations_performed'] += len(results)
        self.stats['batches'] += 1
        self.stats['total_evaluation_time'] += evaluation_time
        return results

    def _score(self, index: int, candidate: Any, population: Sequence[Any],
               rng: Optional[RandomSource]) -> EvaluatedCandidate:
        """Evaluate one candidate, converting any error into EvaluationFailure."""
        try:
            if rng is not None:
                fitness = self.fitness_evaluator.get_fitness_with_rng(candidate, population, rng)
            else:
                fitness = self.fitness_evaluator.get_fitness(candidate, population)
        except EvaluationFailure:
            raise
        except Exception as e:
            raise EvaluationFailure(
                f"Fitness evaluation of candidate {index} raised {type(e).__name__}: {e}",
                candidate=candidate, index=index, cause=e
            ) from e
        return EvaluatedCandidate(candidate, validate_fitness(fitness, candidate, index))

    def _evaluate_sequential(self, candidates: Sequence[Any], context: Sequence[Any],
                             streams: Sequence[Optional[RandomSource]]) -> List[EvaluatedCandidate]:
        progress = tqdm(candidates, desc="Evaluating Population", disable=not self.show_progress)
        return [self._score(index, candidate, context, streams[index])
                for index, candidate in enumerate(progress)]

    def _evaluate_parallel(self, candidates: Sequence[Any], context: Sequence[Any],
                           streams: Sequence[Optional[RandomSource]]) -> List[EvaluatedCandidate]:
        start_time = time.perf_counter()
        executor = self._get_executor()
        futures = {
            executor.submit(self._score, index, candidate, context, streams[index]): index
            for index, candidate in enumerate(candidates)
        }

        results: List[Optional[EvaluatedCandidate]] = [None] * len(candidates)
        progress = tqdm(total=len(candidates), disable=not self.show_progress,
                        desc=f"Evaluating Population ({self.max_workers} workers)")
        try:
            for future in concurrent.futures.as_completed(futures):
                results[futures[future]] = future.result()
                progress.update(1)
        except BaseException:
            for future in futures:
                future.cancel()
            raise
        finally:
            progress.close()

        self.logger.log_parallel_evaluation(self.max_workers, len(candidates),
                                            time.perf_counter() - start_time)
        return results

    def _get_executor(self) -> concurrent.futures.ThreadPoolExecutor:
        with self._executor_lock:
            if self._executor is None:
                self._executor = concurrent.futures.ThreadPoolExecutor(
                    max_workers=self.max_workers, thread_name_prefix="fitness-eval"
                )
            return self._executor

    def get_statistics(self) -> dict:
        """Get evaluation statistics."""
        stats = self.stats.copy()
        if stats['evaluations_performed'] > 0:
            stats['avg_evaluation_time'] = stats['total_evaluation_time'] / stats['evaluations_performed']
        else:
            stats['avg_evaluation_time'] = 0.0
        stats['max_workers'] = self.max_workers
        return stats

    def shutdown(self, wait: bool = True):
        """Release the worker pool; a later batch creates a fresh one."""
        with self._executor_lock:
            if self._executor is not None:
                self._executor.shutdown(wait=wait, cancel_futures=True)
                self._executor = None

    def __enter__(self) -> 'FitnessEvaluationScheduler':
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.shutdown()
