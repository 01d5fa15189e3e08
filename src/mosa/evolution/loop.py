"""Main evolution loop - orchestrates the many-objective search of one instance."""

from __future__ import annotations

import asyncio
import random
import time
from dataclasses import dataclass, field
from typing import Any

import structlog

from mosa.candidates.base import Candidate, Objective
from mosa.candidates.objectives import (
    FitnessEvaluator,
    FitnessProvider,
    ObjectiveUniverse,
    StoredFitnessEvaluator,
)
from mosa.candidates.pool import Population
from mosa.config import DiversityKind, RankingKind, SearchConfig
from mosa.coverage.archive import BestSolutionsArchive
from mosa.coverage.tracker import GoalTracker
from mosa.errors import ConfigurationError
from mosa.evolution.breeding import BreedingOperator, PopulationFactory
from mosa.evolution.stopping import (
    BudgetMonitor,
    Clock,
    SearchProgress,
    StoppingCondition,
    make_stopping_condition,
)
from mosa.migration.channel import MigrationBatch, MigrationChannel
from mosa.migration.transport import PRIMARY_ID, Transport
from mosa.ranking.crowding import (
    CrowdingDistance,
    DiversityMetric,
    SubvectorDominanceDistance,
    sort_by_diversity,
)
from mosa.ranking.dominance import (
    DominanceRanking,
    PreferenceRanking,
    Ranking,
    RankingFunction,
    demote,
)
from mosa.selection import SelectionFunction, make_selection

logger = structlog.get_logger()


@dataclass
class SearchResult:
    """Outcome of one instance's search."""

    instance_id: int
    population: list[Candidate]
    solutions: list[Candidate]
    covered: list[Objective]
    uncovered: list[Objective]
    generations: int
    evaluations: int
    output_variables: dict[str, Any] = field(default_factory=dict)
    history: list[dict[str, Any]] = field(default_factory=list)

    @property
    def coverage(self) -> float:
        total = len(self.covered) + len(self.uncovered)
        return len(self.covered) / total if total else 1.0


class EvolutionLoop:
    """Many-objective sorting search for one instance.

    Each generation:
    1. Breed offspring from the current population
    2. Pool parents, offspring and at most one immigrant batch
    3. Drop objectives satisfied by the pool from the uncovered set
    4. Rank the pool by dominance on the uncovered objectives
    5. Refill the population front by front, truncating the overflowing
       front by diversity
    6. Periodically emigrate a selection of the population
    """

    def __init__(
        self,
        config: SearchConfig,
        universe: ObjectiveUniverse,
        factory: PopulationFactory,
        breeder: BreedingOperator,
        evaluator: FitnessEvaluator | None = None,
        fitness: FitnessProvider | None = None,
        *,
        ranking: RankingFunction | None = None,
        diversity: DiversityMetric | None = None,
        emigrant_selection: SelectionFunction | None = None,
        stopping: StoppingCondition | None = None,
        transport: Transport | None = None,
        channel: MigrationChannel | None = None,
        population: Population | None = None,
        clock: Clock = time.monotonic,
    ) -> None:
        if fitness is None:
            if not hasattr(universe, "fitness"):
                raise ConfigurationError("a FitnessProvider is required when the universe does not provide fitness")
            fitness = universe  # type: ignore[assignment]
        if config.multi_instance and transport is None:
            raise ConfigurationError(
                f"{config.num_parallel_instances} parallel instances configured but no transport given"
            )

        self._config = config
        self._universe = universe
        self._factory = factory
        self._breeder = breeder
        self._evaluator = evaluator or StoredFitnessEvaluator()
        self._transport = transport
        self.instance_id = transport.instance_id if transport is not None else PRIMARY_ID

        seed = None if config.seed is None else config.seed + self.instance_id
        self._rng = random.Random(seed)

        if ranking is None:
            ranking_cls = PreferenceRanking if config.ranking is RankingKind.PREFERENCE else DominanceRanking
            ranking = ranking_cls(fitness, config.direction)
        if diversity is None:
            diversity_cls = (
                SubvectorDominanceDistance if config.diversity is DiversityKind.SUBVECTOR else CrowdingDistance
            )
            diversity = diversity_cls(fitness, config.direction)
        self._ranking = ranking
        self._diversity = diversity
        self._emigrant_selection = emigrant_selection or make_selection(
            config.emigrant_selection, self._rng, config.rank_bias
        )
        self._stopping = stopping or make_stopping_condition(config, clock)
        if channel is None and config.multi_instance:
            channel = MigrationChannel(config.immigrant_queue_capacity)
        self._channel = channel

        self.population = population if population is not None else Population()
        self.tracker = GoalTracker(universe)
        self.archive = BestSolutionsArchive()
        self.progress = SearchProgress()
        self.monitor = BudgetMonitor(clock)
        self.history: list[dict[str, Any]] = []
        self.output_variables: dict[str, Any] = {}

    @property
    def config(self) -> SearchConfig:
        return self._config

    @property
    def channel(self) -> MigrationChannel | None:
        return self._channel

    @property
    def uncovered_goals(self) -> tuple[Objective, ...]:
        return self.tracker.uncovered

    # -- lifecycle --------------------------------------------------------

    async def initialize(self) -> None:
        """Create the initial population if needed and rank it."""
        if self.population.is_empty():
            initial = await self._factory.create(self._config.population_size)
            self.population.replace_population(initial)
            self.progress.evaluations += len(initial)
        self._absorb(self.population.candidates)

        uncovered = self.tracker.uncovered
        ranking = self._rank(self.population.candidates, uncovered)
        for front in ranking.fronts:
            self._diversity.assign(front, uncovered)
        logger.info(
            "search_initialized",
            instance_id=self.instance_id,
            population=self.population.size,
            objectives=len(self._universe.all_objectives()),
            uncovered=len(uncovered),
        )

    def is_finished(self) -> bool:
        self.progress.elapsed = self.monitor.elapsed
        return self.tracker.num_uncovered == 0 or self._stopping.is_finished(self.progress)

    async def evolve(self) -> dict[str, Any]:
        """Execute one generation. Returns a summary dict with generation stats."""
        generation = self.progress.generation
        logger.debug(
            "generation_start",
            instance_id=self.instance_id,
            generation=generation,
            population=self.population.size,
            uncovered=self.tracker.num_uncovered,
        )

        # 1-2. Offspring, then the union with parents and immigrants
        offspring = await self._breed()
        self.progress.evaluations += len(offspring)
        immigrants = self._receive_immigrants()
        # a breeder may pass parents through unchanged; keep one reference each
        union = list({id(c): c for c in [*self.population.candidates, *offspring, *immigrants]}.values())

        # 3. Parents were absorbed when they entered the population
        self._absorb([*offspring, *immigrants])
        uncovered = self.tracker.uncovered

        # 4-5. Rank and refill
        ranking = self._rank(union, uncovered)
        self.population.replace_population(self._refill(ranking, uncovered))

        # 6. Emigration
        emigrated = await self._emigrate(generation)

        # 7. Advance the generation counter
        self.progress.generation += 1

        summary = {
            "instance_id": self.instance_id,
            "generation": generation,
            "population_size": self.population.size,
            "offspring": len(offspring),
            "immigrants": len(immigrants),
            "fronts": ranking.number_of_subfronts,
            "covered": self.tracker.num_covered,
            "uncovered": self.tracker.num_uncovered,
            "emigrated": emigrated,
        }
        logger.info("generation_complete", **summary)
        return summary

    async def run(self) -> SearchResult:
        """Search until the budget runs out or every objective is covered."""
        self._stopping.reset()
        self.monitor.start()
        attached = self._config.multi_instance and self._channel is not None and self._transport is not None
        if attached:
            self._channel.attach(self._transport)

        try:
            await self.initialize()
            while not self.is_finished():
                self.history.append(await self.evolve())
                # let instances sharing this event loop make progress
                await asyncio.sleep(0)
        finally:
            if attached:
                self._channel.detach()

        if self._config.multi_instance:
            await self._reconcile()
        await self._report_output_variables()

        logger.info(
            "search_finished",
            instance_id=self.instance_id,
            generations=self.progress.generation,
            evaluations=self.progress.evaluations,
            covered=self.tracker.num_covered,
            uncovered=self.tracker.num_uncovered,
        )
        return self.result()

    def result(self) -> SearchResult:
        return SearchResult(
            instance_id=self.instance_id,
            population=self.population.candidates,
            solutions=self.archive.solutions(),
            covered=self.archive.covered_objectives,
            uncovered=list(self.tracker.uncovered),
            generations=self.progress.generation,
            evaluations=self.progress.evaluations,
            output_variables=dict(self.output_variables),
            history=list(self.history),
        )

    # -- generation steps -------------------------------------------------

    async def _breed(self) -> list[Candidate]:
        try:
            offspring = await self._breeder.produce_offspring(self.population.candidates)
        except Exception as exc:
            logger.warning(
                "breeding_failed",
                instance_id=self.instance_id,
                generation=self.progress.generation,
                error=str(exc),
            )
            return []
        if not offspring:
            logger.warning("empty_offspring", instance_id=self.instance_id, generation=self.progress.generation)
            return []
        return list(offspring)

    def _receive_immigrants(self) -> list[Candidate]:
        if not self._config.multi_instance or self._channel is None:
            return []
        batch = self._channel.receive()
        if batch is None:
            return []
        logger.debug(
            "immigrants_received",
            instance_id=self.instance_id,
            source_id=batch.source_id,
            count=len(batch),
        )
        return list(batch.candidates)

    def _absorb(self, candidates: list[Candidate]) -> None:
        """Update the uncovered set and the archive with newly seen candidates."""
        for candidate in candidates:
            newly = self.tracker.update(candidate)
            if newly:
                self.archive.admit(candidate, newly)
        self.monitor.record_coverage(self.tracker.num_covered)

    def _rank(self, candidates: list[Candidate], uncovered: tuple[Objective, ...]) -> Ranking:
        ranking = self._ranking.compute(candidates, uncovered)
        limit = self._config.max_stale_generations
        if limit is None:
            return ranking
        stale = [c for c in candidates if self._is_stale(c, limit)]
        if stale:
            logger.debug("stale_candidates_demoted", instance_id=self.instance_id, count=len(stale))
        return demote(ranking, stale)

    def _is_stale(self, candidate: Candidate, limit: int) -> bool:
        if self.progress.generation - candidate.generation <= limit:
            return False
        return not any(self._universe.is_satisfied(candidate, o) for o in self._universe.all_objectives())

    def _refill(self, ranking: Ranking, uncovered: tuple[Objective, ...]) -> list[Candidate]:
        """Admit whole fronts while they fit, then the most diverse of the next one."""
        remain = self._config.population_size
        selected: list[Candidate] = []
        for front in ranking.fronts:
            if remain <= 0:
                break
            self._diversity.assign(front, uncovered)
            if len(front) <= remain:
                selected.extend(front)
                remain -= len(front)
            else:
                selected.extend(sort_by_diversity(front)[:remain])
                remain = 0
        return selected

    async def _emigrate(self, generation: int) -> int:
        if not self._config.migration_enabled or self._channel is None:
            return 0
        if (generation + 1) % self._config.migration_interval != 0 or self.population.is_empty():
            return 0
        emigrants = self._emigrant_selection.select(self.population.candidates, self._config.migration_batch_size)
        self._channel.send(MigrationBatch.of(self.instance_id, generation, emigrants))
        delivered = await self._channel.flush()
        return len(emigrants) if delivered else 0

    # -- end of search ----------------------------------------------------

    async def _reconcile(self) -> None:
        transport = self._transport
        if transport is None:
            return
        if transport.is_primary:
            try:
                archives = await transport.collect_archives()
            except Exception as exc:
                logger.warning("archive_collection_failed", instance_id=self.instance_id, error=str(exc))
                return
            logger.info("archives_received", instance_id=self.instance_id, count=len(archives))
            for archive in archives:
                for candidate in archive:
                    evaluated = await self._evaluator.evaluate(candidate)
                    self.progress.evaluations += 1
                    self._absorb([evaluated])
        else:
            solutions = self.archive.solutions()
            try:
                await transport.send_archive(PRIMARY_ID, solutions)
            except Exception as exc:
                logger.warning("archive_send_failed", instance_id=self.instance_id, error=str(exc))
                return
            logger.info("archive_sent", instance_id=self.instance_id, solutions=len(solutions))

    async def _report_output_variables(self) -> None:
        self.output_variables.update(
            time_to_max_coverage=self.monitor.time_to_max_coverage,
            covered_goals=self.tracker.num_covered,
            total_goals=len(self._universe.all_objectives()),
        )
        if self._transport is None:
            return
        for name, value in self.output_variables.items():
            try:
                await self._transport.track_output_variable(name, value)
            except Exception as exc:
                logger.warning("output_variable_failed", name=name, error=str(exc))
