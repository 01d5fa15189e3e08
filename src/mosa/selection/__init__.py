"""Selection strategies shared by breeding and emigration."""

from __future__ import annotations

import random

from mosa.config import SelectionPolicy
from mosa.selection.base import SelectionFunction, by_preference
from mosa.selection.best_k import BestKSelection
from mosa.selection.random_k import RandomKSelection
from mosa.selection.rank import RankSelection

__all__ = [
    "BestKSelection",
    "RandomKSelection",
    "RankSelection",
    "SelectionFunction",
    "by_preference",
    "make_selection",
]


def make_selection(
    policy: SelectionPolicy,
    rng: random.Random | None = None,
    rank_bias: float = 1.7,
) -> SelectionFunction:
    """Build the selection function for a configured policy."""
    if policy is SelectionPolicy.RANK:
        return RankSelection(rank_bias=rank_bias, rng=rng)
    if policy is SelectionPolicy.RANDOM_K:
        return RandomKSelection(rng=rng)
    return BestKSelection()
