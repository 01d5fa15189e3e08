"""Protocols for objective capabilities and a default stored-fitness implementation."""

from __future__ import annotations

import math
from collections.abc import Iterable, Sequence
from typing import Protocol

from mosa.candidates.base import Candidate, Objective
from mosa.config import Direction


class FitnessProvider(Protocol):
    """Exposes an already computed fitness value per candidate and objective."""

    def fitness(self, candidate: Candidate, objective: Objective) -> float: ...


class ObjectiveUniverse(Protocol):
    """The full objective set and the satisfaction predicate."""

    def all_objectives(self) -> Sequence[Objective]: ...
    def is_satisfied(self, candidate: Candidate, objective: Objective) -> bool: ...


class FitnessEvaluator(Protocol):
    """Executes a candidate and fills in its fitness vector."""

    async def evaluate(self, candidate: Candidate) -> Candidate: ...


class CoverageGoals:
    """Objective universe over fitness values stored on each candidate.

    An objective is satisfied once its fitness reaches ``target``. Missing
    values count as the worst possible fitness.
    """

    def __init__(
        self,
        objectives: Iterable[Objective],
        direction: Direction = Direction.MINIMIZE,
        target: float = 0.0,
    ) -> None:
        # dict keeps first-seen order and drops duplicates
        self._objectives: tuple[Objective, ...] = tuple(dict.fromkeys(objectives))
        self.direction = direction
        self.target = target

    @property
    def worst(self) -> float:
        return math.inf if self.direction is Direction.MINIMIZE else -math.inf

    def all_objectives(self) -> Sequence[Objective]:
        return self._objectives

    def fitness(self, candidate: Candidate, objective: Objective) -> float:
        return candidate.fitness.get(objective, self.worst)

    def is_satisfied(self, candidate: Candidate, objective: Objective) -> bool:
        value = self.fitness(candidate, objective)
        if self.direction is Direction.MINIMIZE:
            return value <= self.target
        return value >= self.target

    def satisfied_by(self, candidate: Candidate) -> list[Objective]:
        return [o for o in self._objectives if self.is_satisfied(candidate, o)]

    def __len__(self) -> int:
        return len(self._objectives)


class StoredFitnessEvaluator:
    """Evaluator for candidates whose fitness travels with them."""

    async def evaluate(self, candidate: Candidate) -> Candidate:
        return candidate
