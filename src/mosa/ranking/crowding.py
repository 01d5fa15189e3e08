"""Diversity scores used to truncate the front that overflows the population."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol

import numpy as np

from mosa.candidates.base import Candidate, Objective
from mosa.candidates.objectives import FitnessProvider
from mosa.config import Direction
from mosa.ranking.dominance import fitness_matrix


class DiversityMetric(Protocol):
    def assign(self, front: Sequence[Candidate], uncovered: Sequence[Objective]) -> np.ndarray: ...


class CrowdingDistance:
    """Crowding distance over the uncovered objectives.

    Boundary members of each objective score ``inf``; interior members add
    the gap between their neighbours normalised by the objective's spread.
    Objectives on which the whole front agrees contribute nothing.
    """

    def __init__(self, fitness: FitnessProvider, direction: Direction = Direction.MINIMIZE) -> None:
        self._fitness = fitness
        self._direction = direction

    def assign(self, front: Sequence[Candidate], uncovered: Sequence[Objective]) -> np.ndarray:
        n = len(front)
        distances = np.zeros(n, dtype=np.float64)
        if n == 1:
            distances[0] = np.inf
        elif n > 1 and uncovered:
            values = fitness_matrix(front, uncovered, self._fitness, self._direction)
            for column in values.T:
                order = np.argsort(column, kind="stable")
                low, high = column[order[0]], column[order[-1]]
                spread = high - low
                if np.isnan(spread) or spread == 0:
                    continue
                distances[order[0]] = np.inf
                distances[order[-1]] = np.inf
                # an unbounded spread (missing fitness) only marks the extremes
                if np.isfinite(spread):
                    distances[order[1:-1]] += (column[order[2:]] - column[order[:-2]]) / spread

        for candidate, distance in zip(front, distances):
            candidate.distance = float(distance)
        return distances


class SubvectorDominanceDistance:
    """Rewards the members holding the best value on some uncovered objective.

    For every objective with a spread, each member sharing the best value gets
    ``(|front| - |best set|) / |front|`` unless it already scores higher.
    The fewer members share the best value, the larger the reward.
    """

    def __init__(self, fitness: FitnessProvider, direction: Direction = Direction.MINIMIZE) -> None:
        self._fitness = fitness
        self._direction = direction

    def assign(self, front: Sequence[Candidate], uncovered: Sequence[Objective]) -> np.ndarray:
        n = len(front)
        distances = np.zeros(n, dtype=np.float64)
        if n == 1:
            distances[0] = np.inf
        elif n > 1 and uncovered:
            values = fitness_matrix(front, uncovered, self._fitness, self._direction)
            for column in values.T:
                low, high = column.min(), column.max()
                if low == high:
                    continue
                best = column == low
                reward = (n - int(best.sum())) / n
                distances[best] = np.maximum(distances[best], reward)

        for candidate, distance in zip(front, distances):
            candidate.distance = float(distance)
        return distances


def sort_by_diversity(front: Sequence[Candidate]) -> list[Candidate]:
    """Stable sort, most diverse first."""
    return sorted(front, key=lambda c: c.distance, reverse=True)
