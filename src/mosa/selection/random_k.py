"""Uniform random selection without replacement."""

from __future__ import annotations

import random
from collections.abc import Sequence

from mosa.candidates.base import Candidate
from mosa.selection.base import SelectionFunction


class RandomKSelection(SelectionFunction):
    def __init__(self, rng: random.Random | None = None) -> None:
        self._rng = rng or random.Random()

    def select(self, population: Sequence[Candidate], k: int) -> list[Candidate]:
        if k <= 0:
            return []
        if len(population) <= k:
            return list(population)
        return self._rng.sample(list(population), k)
