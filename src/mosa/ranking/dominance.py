"""Dominance ranking restricted to the unsatisfied objectives.

Classical non-dominated sorting compares candidates on every objective.
Here only objectives that are still uncovered take part, so the comparison
shrinks as the search makes progress and scales to many objectives.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol

import numpy as np

from mosa.candidates.base import Candidate, Objective
from mosa.candidates.objectives import FitnessProvider
from mosa.config import Direction
from mosa.errors import RankingInvariantError


def dominates(a: Sequence[float], b: Sequence[float], direction: Direction = Direction.MINIMIZE) -> bool:
    """Returns True if ``a`` is no worse than ``b`` everywhere and strictly better once."""
    if direction is Direction.MAXIMIZE:
        a = [-v for v in a]
        b = [-v for v in b]
    return all(a_i <= b_i for a_i, b_i in zip(a, b)) and any(a_i < b_i for a_i, b_i in zip(a, b))


def fitness_matrix(
    candidates: Sequence[Candidate],
    objectives: Sequence[Objective],
    fitness: FitnessProvider,
    direction: Direction = Direction.MINIMIZE,
) -> np.ndarray:
    """Fitness values as an (n_candidates, n_objectives) matrix where lower is better."""
    matrix = np.array(
        [[fitness.fitness(c, o) for o in objectives] for c in candidates],
        dtype=np.float64,
    ).reshape(len(candidates), len(objectives))
    return -matrix if direction is Direction.MAXIMIZE else matrix


class Ranking:
    """Ordered fronts of one ranking pass. Front 0 is the best."""

    def __init__(self, fronts: list[list[Candidate]]) -> None:
        self.fronts = [front for front in fronts if front]
        for index, front in enumerate(self.fronts):
            for candidate in front:
                candidate.rank = index

    def subfront(self, index: int) -> list[Candidate]:
        """Copy of front ``index``, empty when out of range."""
        if 0 <= index < len(self.fronts):
            return list(self.fronts[index])
        return []

    @property
    def number_of_subfronts(self) -> int:
        return len(self.fronts)

    def candidates(self) -> list[Candidate]:
        return [c for front in self.fronts for c in front]

    def __len__(self) -> int:
        return sum(len(front) for front in self.fronts)


class RankingFunction(Protocol):
    def compute(self, candidates: Sequence[Candidate], uncovered: Sequence[Objective]) -> Ranking: ...


def _check_distinct(candidates: Sequence[Candidate]) -> None:
    if len({id(c) for c in candidates}) != len(candidates):
        raise RankingInvariantError("ranking input contains the same candidate object twice")


def _check_exhaustive(candidates: Sequence[Candidate], ranking: Ranking) -> None:
    ranked = ranking.candidates()
    if len(ranked) != len(candidates) or {id(c) for c in ranked} != {id(c) for c in candidates}:
        raise RankingInvariantError(
            f"fronts cover {len(ranked)} candidates but {len(candidates)} were ranked"
        )


class DominanceRanking:
    """Fast non-dominated sorting against the uncovered objectives.

    Deterministic: candidates inside a front keep their input order and
    objectives are compared in the order given.
    """

    def __init__(self, fitness: FitnessProvider, direction: Direction = Direction.MINIMIZE) -> None:
        self._fitness = fitness
        self._direction = direction

    def compute(self, candidates: Sequence[Candidate], uncovered: Sequence[Objective]) -> Ranking:
        candidates = list(candidates)
        _check_distinct(candidates)
        if not candidates:
            return Ranking([])
        if not uncovered:
            ranking = Ranking([candidates])
        else:
            ranking = Ranking(self._sort(candidates, uncovered))
        _check_exhaustive(candidates, ranking)
        return ranking

    def _sort(self, candidates: list[Candidate], uncovered: Sequence[Objective]) -> list[list[Candidate]]:
        values = fitness_matrix(candidates, uncovered, self._fitness, self._direction)
        n = len(candidates)
        # dominated[i, j] is True when i dominates j
        dominated = np.zeros((n, n), dtype=bool)
        for i in range(n):
            no_worse = (values[i] <= values).all(axis=1)
            better = (values[i] < values).any(axis=1)
            dominated[i] = no_worse & better
        domination_count = dominated.sum(axis=0)

        fronts: list[list[Candidate]] = []
        current = [i for i in range(n) if domination_count[i] == 0]
        while current:
            fronts.append([candidates[i] for i in current])
            next_front: list[int] = []
            for i in current:
                for j in np.flatnonzero(dominated[i]):
                    domination_count[j] -= 1
                    if domination_count[j] == 0:
                        next_front.append(int(j))
            current = sorted(next_front)
        return fronts


class PreferenceRanking:
    """Preference sorting: the best candidate for each uncovered objective forms front 0.

    Remaining candidates are ranked by dominance into fronts 1..k. Ties on an
    objective go to the candidate that comes first in the input.
    """

    def __init__(self, fitness: FitnessProvider, direction: Direction = Direction.MINIMIZE) -> None:
        self._fitness = fitness
        self._direction = direction
        self._dominance = DominanceRanking(fitness, direction)

    def compute(self, candidates: Sequence[Candidate], uncovered: Sequence[Objective]) -> Ranking:
        candidates = list(candidates)
        _check_distinct(candidates)
        if not candidates or not uncovered:
            return self._dominance.compute(candidates, uncovered)

        values = fitness_matrix(candidates, uncovered, self._fitness, self._direction)
        # argmin returns the first index on ties
        best = sorted(set(int(i) for i in values.argmin(axis=0)))
        chosen = set(best)
        zero_front = [candidates[i] for i in best]
        rest = [c for i, c in enumerate(candidates) if i not in chosen]

        ranking = Ranking([zero_front, *self._dominance.compute(rest, uncovered).fronts])
        _check_exhaustive(candidates, ranking)
        return ranking


def demote(ranking: Ranking, demoted: Sequence[Candidate]) -> Ranking:
    """Move ``demoted`` out of their fronts into a new trailing front."""
    if not demoted:
        return ranking
    marked = {id(c) for c in demoted}
    fronts = [[c for c in front if id(c) not in marked] for front in ranking.fronts]
    trailing = [c for front in ranking.fronts for c in front if id(c) in marked]
    return Ranking([*fronts, trailing])
