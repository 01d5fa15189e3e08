"""Deterministic best-k selection."""

from __future__ import annotations

from collections.abc import Sequence

from mosa.candidates.base import Candidate
from mosa.selection.base import SelectionFunction, by_preference


class BestKSelection(SelectionFunction):
    """The k candidates with the best front, ties broken by diversity."""

    def select(self, population: Sequence[Candidate], k: int) -> list[Candidate]:
        if k <= 0:
            return []
        return by_preference(population)[:k]
