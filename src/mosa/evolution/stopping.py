"""Stopping conditions and budget tracking."""

from __future__ import annotations

import time
from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass

from mosa.config import SearchConfig, StoppingKind

Clock = Callable[[], float]


@dataclass
class SearchProgress:
    """Counters polled by stopping conditions once per generation."""

    generation: int = 0
    evaluations: int = 0
    elapsed: float = 0.0


class StoppingCondition(ABC):
    """A budget predicate. Interchangeable; the loop polls one per generation."""

    @abstractmethod
    def is_finished(self, progress: SearchProgress) -> bool: ...

    def reset(self) -> None:
        """Called when the search starts."""


class MaxGenerationsCondition(StoppingCondition):
    def __init__(self, limit: int) -> None:
        self.limit = limit

    def is_finished(self, progress: SearchProgress) -> bool:
        return progress.generation >= self.limit


class MaxEvaluationsCondition(StoppingCondition):
    def __init__(self, limit: int) -> None:
        self.limit = limit

    def is_finished(self, progress: SearchProgress) -> bool:
        return progress.evaluations >= self.limit


class MaxTimeCondition(StoppingCondition):
    """Wall-clock budget in seconds, measured from ``reset``."""

    def __init__(self, seconds: float, clock: Clock = time.monotonic) -> None:
        self.seconds = seconds
        self._clock = clock
        self._started = clock()

    def reset(self) -> None:
        self._started = self._clock()

    def is_finished(self, progress: SearchProgress) -> bool:
        return self._clock() - self._started >= self.seconds


def make_stopping_condition(config: SearchConfig, clock: Clock = time.monotonic) -> StoppingCondition:
    if config.stopping_condition is StoppingKind.MAX_TIME:
        return MaxTimeCondition(config.search_budget, clock=clock)
    if config.stopping_condition is StoppingKind.MAX_EVALUATIONS:
        return MaxEvaluationsCondition(int(config.search_budget))
    return MaxGenerationsCondition(int(config.search_budget))


class BudgetMonitor:
    """Tracks elapsed time and when coverage last went up."""

    def __init__(self, clock: Clock = time.monotonic) -> None:
        self._clock = clock
        self._started = clock()
        self._best_covered = 0
        self.time_to_max_coverage = 0.0

    def start(self) -> None:
        self._started = self._clock()
        self._best_covered = 0
        self.time_to_max_coverage = 0.0

    @property
    def elapsed(self) -> float:
        return self._clock() - self._started

    def record_coverage(self, covered: int) -> None:
        if covered > self._best_covered:
            self._best_covered = covered
            self.time_to_max_coverage = self.elapsed
