"""Basic example: cover a handful of integer targets with three cooperating instances."""

import asyncio
import random

from mosa import SearchConfig
from mosa.candidates.base import Candidate
from mosa.candidates.objectives import CoverageGoals
from mosa.evolution.breeding import VariationBreeder
from mosa.evolution.loop import EvolutionLoop
from mosa.logging import configure_logging
from mosa.migration import LocalTransport
from mosa.runner import run_cooperative
from mosa.selection import make_selection

TARGETS = [3, 17, 42, 64, 88, 99]


class DistanceEvaluator:
    """Fitness on each target is the distance of the payload to it."""

    async def evaluate(self, candidate: Candidate) -> Candidate:
        candidate.fitness = {t: float(abs(candidate.payload - t)) for t in TARGETS}
        return candidate


class RandomIntegers:
    def __init__(self, evaluator: DistanceEvaluator, rng: random.Random) -> None:
        self._evaluator = evaluator
        self._rng = rng

    async def create(self, size: int) -> list[Candidate]:
        return [await self._evaluator.evaluate(Candidate(self._rng.randint(0, 100))) for _ in range(size)]


def build_instance(config: SearchConfig, transport: LocalTransport) -> EvolutionLoop:
    rng = random.Random((config.seed or 0) + transport.instance_id)
    evaluator = DistanceEvaluator()
    breeder = VariationBreeder(
        selection=make_selection(config.parent_selection, rng, config.rank_bias),
        evaluator=evaluator,
        crossover=lambda a, b, r: (r.randint(min(a, b), max(a, b)), r.randint(min(a, b), max(a, b))),
        mutate=lambda x, r: x + r.randint(-3, 3),
        crossover_rate=config.crossover_rate,
        mutation_rate=config.mutation_rate,
        rng=rng,
    )
    goals = CoverageGoals(TARGETS, config.direction)
    return EvolutionLoop(config, goals, RandomIntegers(evaluator, rng), breeder, evaluator, transport=transport)


async def main() -> None:
    configure_logging("WARNING")
    config = SearchConfig(
        population_size=12,
        search_budget=40,
        num_parallel_instances=3,
        migration_interval=2,
        migration_batch_size=3,
        seed=11,
    )

    print(f"Starting search: population={config.population_size}, instances={config.num_parallel_instances}")
    print(f"Budget: {config.search_budget:g} generations, migration every {config.migration_interval}\n")

    result = await run_cooperative(config, build_instance)

    for instance in result.instances:
        print(f"  Instance {instance.instance_id}: {instance.generations} generations, covered={sorted(instance.covered)}")
    primary = result.primary
    print(f"\nSearch complete! Coverage {primary.coverage:.0%}")
    for solution in primary.solutions:
        print(f"  {solution.payload} (generation {solution.generation})")


if __name__ == "__main__":
    asyncio.run(main())
