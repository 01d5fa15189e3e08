"""Candidate solutions evolved by the search."""

from __future__ import annotations

import copy
import uuid
from collections.abc import Hashable
from typing import Any

Objective = Hashable


class Candidate:
    """One evolved solution (e.g. a test case) with its fitness vector.

    Equality and hashing are by identity: two snapshots of the same solution
    share an ``id`` but are distinct objects. ``rank`` and ``distance`` are
    annotations written by each ranking pass and carry no identity.
    """

    __slots__ = ("id", "generation", "parent_id", "payload", "fitness", "rank", "distance")

    def __init__(
        self,
        payload: Any = None,
        fitness: dict[Objective, float] | None = None,
        *,
        id: str | None = None,
        generation: int = 0,
        parent_id: str | None = None,
    ) -> None:
        self.id = id or str(uuid.uuid4())
        self.generation = generation
        self.parent_id = parent_id
        self.payload = payload
        self.fitness: dict[Objective, float] = dict(fitness or {})
        self.rank: int = 0
        self.distance: float = 0.0

    def snapshot(self) -> Candidate:
        """Detached copy sharing this candidate's id. Used for migration and archives."""
        return Candidate(
            copy.deepcopy(self.payload),
            self.fitness,
            id=self.id,
            generation=self.generation,
            parent_id=self.parent_id,
        )

    def clone(self, payload: Any = None) -> Candidate:
        """Create an unevaluated child of this candidate."""
        return Candidate(
            copy.deepcopy(self.payload) if payload is None else payload,
            generation=self.generation + 1,
            parent_id=self.id,
        )

    def preference_key(self) -> tuple[int, float]:
        """Sort key: lower front first, then larger diversity first."""
        return (self.rank, -self.distance)

    def __getstate__(self) -> dict[str, Any]:
        return {name: getattr(self, name) for name in self.__slots__}

    def __setstate__(self, state: dict[str, Any]) -> None:
        for name, value in state.items():
            setattr(self, name, value)

    def __repr__(self) -> str:
        return f"Candidate(id={self.id[:8]!r}, generation={self.generation}, rank={self.rank})"
