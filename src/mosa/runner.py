"""Runs cooperating search instances inside one event loop.

Each instance gets its own population, archive and goal tracker; they only
share a :class:`LocalMigrationHub` for migration and the final
reconciliation on the primary instance.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from dataclasses import dataclass

import structlog

from mosa.config import SearchConfig
from mosa.evolution.loop import EvolutionLoop, SearchResult
from mosa.migration.transport import PRIMARY_ID, LocalMigrationHub, LocalTransport

logger = structlog.get_logger()

InstanceBuilder = Callable[[SearchConfig, LocalTransport], EvolutionLoop]


@dataclass
class CooperativeResult:
    """Results of every instance; ``primary`` holds the reconciled outcome."""

    primary: SearchResult
    instances: list[SearchResult]
    output_variables: dict[int, dict[str, object]]


async def run_cooperative(config: SearchConfig, build_instance: InstanceBuilder) -> CooperativeResult:
    """Build ``config.num_parallel_instances`` instances and run them concurrently.

    ``build_instance`` receives the shared config and the instance's transport
    and returns a ready :class:`EvolutionLoop`.
    """
    hub = LocalMigrationHub(config.num_parallel_instances, archive_timeout=config.archive_timeout)
    loops = [build_instance(config, hub.transport(i)) for i in range(config.num_parallel_instances)]

    logger.info("cooperative_search_start", instances=len(loops), migration_interval=config.migration_interval)
    results = await asyncio.gather(*(loop.run() for loop in loops))
    primary = next(r for r in results if r.instance_id == PRIMARY_ID)
    logger.info(
        "cooperative_search_complete",
        covered=len(primary.covered),
        uncovered=len(primary.uncovered),
        solutions=len(primary.solutions),
    )
    return CooperativeResult(primary=primary, instances=list(results), output_variables=hub.output_variables)
