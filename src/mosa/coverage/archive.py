"""Best-solutions archive."""

from __future__ import annotations

from collections.abc import Iterable

from mosa.candidates.base import Candidate, Objective


class BestSolutionsArchive:
    """Running set of candidates that together satisfy the most objectives.

    A candidate is admitted only when it is the first to satisfy some
    objective; entries are never replaced or removed. ``len()`` counts
    covered objectives, ``solutions()`` the distinct candidates.
    """

    def __init__(self) -> None:
        self._by_objective: dict[Objective, Candidate] = {}

    def admit(self, candidate: Candidate, objectives: Iterable[Objective]) -> bool:
        """Record ``candidate`` as the satisfier of the given objectives.

        Objectives already in the archive are ignored. Returns True when the
        candidate covered at least one new objective.
        """
        fresh = [o for o in objectives if o not in self._by_objective]
        if not fresh:
            return False
        stored = candidate.snapshot()
        for objective in fresh:
            self._by_objective[objective] = stored
        return True

    def covers(self, objective: Objective) -> bool:
        return objective in self._by_objective

    def satisfier(self, objective: Objective) -> Candidate | None:
        return self._by_objective.get(objective)

    @property
    def covered_objectives(self) -> list[Objective]:
        return list(self._by_objective)

    def solutions(self) -> list[Candidate]:
        """Distinct archived candidates in admission order."""
        seen: dict[str, Candidate] = {}
        for candidate in self._by_objective.values():
            seen.setdefault(candidate.id, candidate)
        return list(seen.values())

    def __len__(self) -> int:
        return len(self._by_objective)

    def __contains__(self, candidate_id: object) -> bool:
        return any(c.id == candidate_id for c in self._by_objective.values())
