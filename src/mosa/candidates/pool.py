"""Population container."""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Sequence

from mosa.candidates.base import Candidate


class Population:
    """Ordered population of candidates.

    Order only records insertion history; ranking and selection treat the
    population as a set.
    """

    def __init__(self, candidates: Iterable[Candidate] = ()) -> None:
        self._candidates: list[Candidate] = list(candidates)

    @property
    def candidates(self) -> list[Candidate]:
        return list(self._candidates)

    @property
    def size(self) -> int:
        return len(self._candidates)

    def is_empty(self) -> bool:
        return not self._candidates

    def replace_population(self, candidates: Sequence[Candidate]) -> None:
        """Replace the entire population."""
        self._candidates = list(candidates)

    def __len__(self) -> int:
        return len(self._candidates)

    def __iter__(self) -> Iterator[Candidate]:
        return iter(self._candidates)
