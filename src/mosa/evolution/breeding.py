"""Breeding capability and a default selection + variation breeder."""

from __future__ import annotations

import random
from collections.abc import Callable, Sequence
from typing import Any, Protocol

import structlog

from mosa.candidates.base import Candidate
from mosa.candidates.objectives import FitnessEvaluator
from mosa.selection.base import SelectionFunction

logger = structlog.get_logger()

Crossover = Callable[[Any, Any, random.Random], tuple[Any, Any]]
Mutation = Callable[[Any, random.Random], Any]


class BreedingOperator(Protocol):
    """Produces evaluated offspring from the current population."""

    async def produce_offspring(self, population: Sequence[Candidate]) -> list[Candidate]: ...


class PopulationFactory(Protocol):
    """Creates evaluated candidates for the initial population."""

    async def create(self, size: int) -> list[Candidate]: ...


class VariationBreeder:
    """Selects parents, recombines and mutates their payloads, evaluates children.

    Produces as many offspring as there are candidates in the population.
    ``crossover`` and ``mutate`` work on payloads only; the breeder wraps
    results in fresh candidates so offspring never alias their parents.
    """

    def __init__(
        self,
        selection: SelectionFunction,
        evaluator: FitnessEvaluator,
        crossover: Crossover,
        mutate: Mutation,
        crossover_rate: float = 0.75,
        mutation_rate: float = 1.0,
        rng: random.Random | None = None,
    ) -> None:
        self._selection = selection
        self._evaluator = evaluator
        self._crossover = crossover
        self._mutate = mutate
        self.crossover_rate = crossover_rate
        self.mutation_rate = mutation_rate
        self._rng = rng or random.Random()

    async def produce_offspring(self, population: Sequence[Candidate]) -> list[Candidate]:
        if not population:
            return []
        target = len(population)
        offspring: list[Candidate] = []
        while len(offspring) < target:
            parents = self._selection.select(population, 2)
            mother = parents[0]
            father = parents[-1]
            left, right = mother.payload, father.payload
            if len(parents) == 2 and self._rng.random() < self.crossover_rate:
                left, right = self._crossover(left, right, self._rng)
            for parent, payload in ((mother, left), (father, right)):
                if len(offspring) >= target:
                    break
                if self._rng.random() < self.mutation_rate:
                    payload = self._mutate(payload, self._rng)
                # an untouched payload is still the parent's object
                child = parent.clone(None if payload is parent.payload else payload)
                offspring.append(await self._evaluator.evaluate(child))

        logger.debug("offspring_bred", count=len(offspring))
        return offspring
