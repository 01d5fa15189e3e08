"""Linear ranking selection."""

from __future__ import annotations

import math
import random
from collections.abc import Sequence

from mosa.candidates.base import Candidate
from mosa.selection.base import SelectionFunction, by_preference


class RankSelection(SelectionFunction):
    """Samples biased towards better ranked candidates, without replacement.

    The population is sorted by preference and an index is drawn with a
    linear ranking bias in ``(1, 2]``: the best candidate is picked ``bias``
    times as often as the median one.
    """

    def __init__(self, rank_bias: float = 1.7, rng: random.Random | None = None) -> None:
        if not 1.0 < rank_bias <= 2.0:
            raise ValueError(f"rank_bias must be in (1, 2], got {rank_bias}")
        self.rank_bias = rank_bias
        self._rng = rng or random.Random()

    def get_index(self, length: int) -> int:
        """Draw an index into a population of ``length`` sorted best first."""
        bias = self.rank_bias
        r = self._rng.random()
        d = (bias - math.sqrt(bias * bias - 4.0 * (bias - 1.0) * r)) / 2.0 / (bias - 1.0)
        return min(int(length * d), length - 1)

    def select(self, population: Sequence[Candidate], k: int) -> list[Candidate]:
        if k <= 0:
            return []
        ranked = by_preference(population)
        if len(ranked) <= k:
            return ranked

        picked: dict[int, Candidate] = {}
        attempts = 0
        while len(picked) < k and attempts < 10 * k:
            index = self.get_index(len(ranked))
            picked.setdefault(index, ranked[index])
            attempts += 1

        # fill what sampling could not reach, best first
        for index, candidate in enumerate(ranked):
            if len(picked) >= k:
                break
            picked.setdefault(index, candidate)
        return list(picked.values())
