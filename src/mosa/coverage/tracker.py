"""Tracks which objectives are still unsatisfied."""

from __future__ import annotations

from collections.abc import Iterable

import structlog

from mosa.candidates.base import Candidate, Objective
from mosa.candidates.objectives import ObjectiveUniverse

logger = structlog.get_logger()


class GoalTracker:
    """Set of objectives not yet satisfied by any evaluated candidate.

    Shrinks monotonically: an objective is removed exactly once and never
    comes back. Iteration follows the universe's objective order.
    """

    def __init__(self, universe: ObjectiveUniverse) -> None:
        self._universe = universe
        self._uncovered: dict[Objective, None] = dict.fromkeys(universe.all_objectives())

    @property
    def uncovered(self) -> tuple[Objective, ...]:
        return tuple(self._uncovered)

    @property
    def num_uncovered(self) -> int:
        return len(self._uncovered)

    @property
    def num_covered(self) -> int:
        return len(self._universe.all_objectives()) - len(self._uncovered)

    def is_covered(self, objective: Objective) -> bool:
        return objective not in self._uncovered

    def update(self, candidate: Candidate) -> list[Objective]:
        """Remove every uncovered objective the candidate satisfies.

        Returns the objectives this candidate was the first to satisfy.
        """
        newly = [o for o in self._uncovered if self._universe.is_satisfied(candidate, o)]
        for objective in newly:
            del self._uncovered[objective]
        if newly:
            logger.debug(
                "goals_covered",
                candidate_id=candidate.id,
                covered=len(newly),
                remaining=len(self._uncovered),
            )
        return newly

    def update_all(self, candidates: Iterable[Candidate]) -> dict[Objective, Candidate]:
        covered: dict[Objective, Candidate] = {}
        for candidate in candidates:
            for objective in self.update(candidate):
                covered[objective] = candidate
        return covered
