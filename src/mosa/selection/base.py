"""Selection function interface."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence

from mosa.candidates.base import Candidate


class SelectionFunction(ABC):
    """Picks up to ``k`` distinct candidates from a population.

    Used both for choosing breeding parents and for choosing emigrants.
    """

    @abstractmethod
    def select(self, population: Sequence[Candidate], k: int) -> list[Candidate]: ...


def by_preference(population: Sequence[Candidate]) -> list[Candidate]:
    """Stable sort on front index, then diversity (descending)."""
    return sorted(population, key=Candidate.preference_key)
