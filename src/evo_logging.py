"""
Centralized Logging System for the Evolution Engine

Provides consistent formatting, log levels, optional file output and a set
of evolution-specific logging helpers shared by every component.
"""

import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Optional


class EvoFormatter(logging.Formatter):
    """Custom formatter with color support and structured output."""

    # Color codes for console output
    COLORS = {
        'DEBUG': '\033[36m',    # Cyan
        'INFO': '\033[32m',     # Green
        'WARNING': '\033[33m',  # Yellow
        'ERROR': '\033[31m',    # Red
        'CRITICAL': '\033[35m', # Magenta
        'RESET': '\033[0m'      # Reset
    }

    def __init__(self, use_colors: bool = True, include_timestamp: bool = True):
        self.use_colors = use_colors and hasattr(sys.stdout, 'isatty') and sys.stdout.isatty()
        self.include_timestamp = include_timestamp

        if include_timestamp:
            fmt = '[%(asctime)s] %(levelname)-8s | %(name)s | %(message)s'
            datefmt = '%H:%M:%S'
        else:
            fmt = '%(levelname)-8s | %(name)s | %(message)s'
            datefmt = None

        super().__init__(fmt, datefmt)

    def format(self, record):
        if self.use_colors:
            # Colour a copy so other handlers see the plain level name
            record = logging.makeLogRecord(record.__dict__)
            color = self.COLORS.get(record.levelname, '')
            reset = self.COLORS['RESET']
            record.levelname = f"{color}{record.levelname}{reset}"

        return super().format(record)


class EvoLogger:
    """
    Centralized logger for the evolution engine with console and optional file output.

    Wraps a standard library logger and adds keyword context formatting plus
    helpers for the events every run produces (generations, failures, termination).
    """

    def __init__(self, name: str = "evolution", level: str = "INFO",
                 log_to_file: bool = False, output_dir: str = "logs",
                 console_colors: bool = True):
        """
        Initialize the logger.

        Args:
            name: Logger name
            level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
            log_to_file: Whether to also write a timestamped log file
            output_dir: Directory for log files
            console_colors: Whether to use colors in console output
        """
        self.logger = logging.getLogger(name)
        self.logger.setLevel(getattr(logging, level.upper(), logging.INFO))
        self.logger.propagate = False
        self.log_file = None

        # Clear any existing handlers
        self.logger.handlers.clear()

        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(self.logger.level)
        console_handler.setFormatter(EvoFormatter(use_colors=console_colors, include_timestamp=False))
        self.logger.addHandler(console_handler)

        if log_to_file:
            self._setup_file_logging(output_dir)

    def _setup_file_logging(self, output_dir: str):
        """Attach a file handler writing every level to a timestamped file."""
        log_dir = Path(output_dir)
        log_dir.mkdir(parents=True, exist_ok=True)

        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        log_file = log_dir / f"evolution_{timestamp}.log"

        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(EvoFormatter(use_colors=False, include_timestamp=True))
        self.logger.addHandler(file_handler)

        self.log_file = str(log_file)

    def set_level(self, level: str):
        """Change the console level; a log file keeps recording everything."""
        self.logger.setLevel(getattr(logging, level.upper(), logging.INFO))
        for handler in self.logger.handlers:
            if not isinstance(handler, logging.FileHandler):
                handler.setLevel(self.logger.level)

    def close(self):
        """Close and detach all handlers."""
        for handler in list(self.logger.handlers):
            handler.close()
            self.logger.removeHandler(handler)

    def debug(self, message: str, **kwargs):
        """Log debug message with optional context."""
        if self.logger.isEnabledFor(logging.DEBUG):
            self.logger.debug(self._format_message(message, **kwargs))

    def info(self, message: str, **kwargs):
        """Log info message with optional context."""
        self.logger.info(self._format_message(message, **kwargs))

    def warning(self, message: str, exception: Exception = None, **kwargs):
        """Log warning message with optional exception details."""
        self.logger.warning(self._with_exception(self._format_message(message, **kwargs), exception))

    def error(self, message: str, exception: Exception = None, **kwargs):
        """Log error message with optional exception details."""
        self.logger.error(self._with_exception(self._format_message(message, **kwargs), exception))

    def critical(self, message: str, exception: Exception = None, **kwargs):
        """Log critical message with optional exception details."""
        self.logger.critical(self._with_exception(self._format_message(message, **kwargs), exception))

    @staticmethod
    def _with_exception(message: str, exception: Optional[BaseException]) -> str:
        if exception is not None:
            message += f" | Exception: {type(exception).__name__}: {exception}"
        return message

    @staticmethod
    def _format_message(message: str, **kwargs) -> str:
        """Format message with optional context parameters."""
        if kwargs:
            context = " | ".join(f"{k}={v}" for k, v in kwargs.items())
            return f"{message} | {context}"
        return message

    # Evolution-specific logging methods
    def log_generation_start(self, generation: int, population_size: int):
        self.debug(f"Starting generation {generation}", population_size=population_size)

    def log_generation_complete(self, generation: int, best_fitness: float,
                                mean_fitness: float, time_taken: float):
        """Log generation completion."""
        self.info(f"Generation {generation} complete",
                  best_fitness=f"{best_fitness:.4f}",
                  mean_fitness=f"{mean_fitness:.4f}",
                  time_taken=f"{time_taken:.3f}s")

    def log_evaluation_failure(self, index: int, candidate, error: BaseException):
        """Log a fatal evaluation failure before it is re-raised."""
        self.error(f"Fitness evaluation failed for candidate {index}",
                   candidate=repr(candidate)[:80],
                   action="aborting generation",
                   exception=error)

    def log_termination(self, generation: int, conditions):
        """Log which conditions ended the run."""
        names = ", ".join(type(c).__name__ for c in conditions) or "none"
        self.info(f"Evolution terminated after generation {generation}", satisfied=names)

    def log_config_summary(self, config):
        """Log configuration summary."""
        self.info("Evolution configuration loaded",
                  population=config.population_size,
                  elites=config.elite_count,
                  workers=config.resolved_workers(),
                  observer_policy=config.observer_overflow_policy)

    def log_parallel_evaluation(self, worker_count: int, task_count: int,
                                time_taken: float):
        """Log parallel evaluation performance."""
        rate = task_count / time_taken if time_taken > 0 else float('inf')
        self.debug("Parallel evaluation complete",
                   workers=worker_count,
                   tasks=task_count,
                   time_taken=f"{time_taken:.3f}s",
                   tasks_per_second=f"{rate:.1f}")

    def log_observer_error(self, observer, error: BaseException):
        self.warning("Evolution observer raised an exception",
                     observer=type(observer).__name__, exception=error)

    def log_dropped_snapshot(self, generation: int, dropped_total: int):
        self.debug("Observer queue full, snapshot dropped",
                   generation=generation, dropped_total=dropped_total)


# Global logger instance
_global_logger: Optional[EvoLogger] = None


def get_logger(name: str = "evolution") -> EvoLogger:
    """Get or create global logger instance."""
    global _global_logger
    if _global_logger is None:
        _global_logger = EvoLogger(name)
    return _global_logger


def setup_logging(level: str = "INFO", log_to_file: bool = False,
                  output_dir: str = "logs", console_colors: bool = True) -> EvoLogger:
    """
    Setup global logging configuration.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_to_file: Whether to log to file
        output_dir: Directory for log files
        console_colors: Whether to use colors in console output

    Returns:
        Configured EvoLogger instance
    """
    global _global_logger
    if _global_logger is not None:
        _global_logger.close()
    _global_logger = EvoLogger(
        level=level,
        log_to_file=log_to_file,
        output_dir=output_dir,
        console_colors=console_colors
    )
    return _global_logger
