"""
Observers Module

Delivery of per-generation snapshots to external observers without blocking
the generational loop.

Snapshots go into a bounded queue drained by a single daemon thread, so
observers see them in generation order. When the queue is full the
overflow policy decides: "drop" discards the new snapshot (and counts it),
"block" makes the engine wait for space. Exceptions raised by observers are
logged and never reach the engine.
"""

import queue
import threading
from abc import ABC, abstractmethod
from typing import Callable, List, Optional

from evo_constants import EngineConstants
from evo_exceptions import InvalidConfiguration
from evo_logging import get_logger
from evo_components.candidates import PopulationData

_STOP = object()


class EvolutionObserver(ABC):
    """Receives one immutable snapshot per generation."""

    @abstractmethod
    def population_update(self, data: PopulationData) -> None:
        """Called from the dispatcher thread; must not assume the engine is paused."""


class FunctionObserver(EvolutionObserver):
    """Adapts a plain callable into an EvolutionObserver."""

    def __init__(self, function: Callable[[PopulationData], None]):
        self.function = function

    def population_update(self, data: PopulationData) -> None:
        self.function(data)

    def __repr__(self) -> str:
        return f"FunctionObserver({getattr(self.function, '__name__', self.function)!r})"


class ObserverDispatcher:
    """
    Bounded, single-consumer snapshot queue.

    The consumer thread is started by ``start()`` and stopped by ``close()``,
    which first delivers everything already queued. A closed dispatcher can
    be started again.
    """

    def __init__(self, queue_size: int = EngineConstants.DEFAULT_OBSERVER_QUEUE_SIZE,
                 overflow_policy: str = EngineConstants.DEFAULT_OBSERVER_POLICY):
        if isinstance(queue_size, bool) or not isinstance(queue_size, int) or queue_size < 1:
            raise InvalidConfiguration(f"Observer queue size ({queue_size!r}) must be a positive integer",
                                       parameter="queue_size", value=queue_size)
        if overflow_policy not in EngineConstants.OBSERVER_POLICIES:
            raise InvalidConfiguration(
                f"Observer overflow policy ({overflow_policy!r}) must be one of: "
                f"{list(EngineConstants.OBSERVER_POLICIES)}",
                parameter="overflow_policy", value=overflow_policy
            )
        self.queue_size = queue_size
        self.overflow_policy = overflow_policy
        self.logger = get_logger()

        self._observers: List[EvolutionObserver] = []
        self._observers_lock = threading.Lock()
        self._queue: queue.Queue = queue.Queue(maxsize=queue_size)
        self._thread: Optional[threading.Thread] = None

        self.stats = {
            'published': 0,
            'delivered': 0,
            'dropped': 0,
            'observer_errors': 0
        }

    def add_observer(self, observer: EvolutionObserver):
        if not isinstance(observer, EvolutionObserver):
            raise InvalidConfiguration(f"Expected an EvolutionObserver, got {type(observer).__name__}",
                                       parameter="observer")
        with self._observers_lock:
            self._observers.append(observer)

    def remove_observer(self, observer: EvolutionObserver):
        with self._observers_lock:
            if observer in self._observers:
                self._observers.remove(observer)

    @property
    def observers(self) -> List[EvolutionObserver]:
        with self._observers_lock:
            return list(self._observers)

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    @property
    def dropped_count(self) -> int:
        return self.stats['dropped']

    def start(self):
        """Start the consumer thread if it is not already running."""
        if self.is_running:
            return
        self._thread = threading.Thread(target=self._consume, name="evolution-observers", daemon=True)
        self._thread.start()

    def publish(self, data: PopulationData) -> bool:
        """
        Queue a snapshot for delivery.

        Returns:
            False if the snapshot was dropped because the queue was full
        """
        if not self.observers:
            return True
        if not self.is_running:
            self.start()

        self.stats['published'] += 1
        if self.overflow_policy == "block":
            self._queue.put(data)
            return True

        try:
            self._queue.put_nowait(data)
        except queue.Full:
            self.stats['dropped'] += 1
            self.logger.log_dropped_snapshot(data.generation_number, self.stats['dropped'])
            return False
        return True

    def flush(self):
        """Wait until every queued snapshot has been delivered."""
        if self.is_running:
            self._queue.join()

    def close(self, timeout: float = EngineConstants.OBSERVER_JOIN_TIMEOUT_SECONDS):
        """Deliver everything queued, then stop the consumer thread."""
        if not self.is_running:
            return
        self._queue.put(_STOP)
        self._thread.join(timeout=timeout)
        if self._thread.is_alive():
            self.logger.warning("Observer thread did not stop in time", timeout=timeout)
        self._thread = None

    def _consume(self):
        while True:
            data = self._queue.get()
            try:
                if data is _STOP:
                    return
                for observer in self.observers:
                    try:
                        observer.population_update(data)
                    except Exception as e:
                        self.stats['observer_errors'] += 1
                        self.logger.log_observer_error(observer, e)
                self.stats['delivered'] += 1
            finally:
                self._queue.task_done()

    def get_statistics(self) -> dict:
        return self.stats.copy()
