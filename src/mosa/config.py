"""Configuration for many-objective search runs."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field


class Direction(str, Enum):
    """Whether lower or higher fitness values are better."""
    MINIMIZE = "minimize"
    MAXIMIZE = "maximize"


class SelectionPolicy(str, Enum):
    """Policies for picking a subset of a population."""
    BEST_K = "best_k"      # front order, then diversity
    RANK = "rank"          # linear ranking bias
    RANDOM_K = "random_k"  # uniform without replacement


class StoppingKind(str, Enum):
    """Which budget `search_budget` is measured in."""
    MAX_GENERATIONS = "max_generations"
    MAX_TIME = "max_time"  # seconds
    MAX_EVALUATIONS = "max_evaluations"


class RankingKind(str, Enum):
    DOMINANCE = "dominance"
    PREFERENCE = "preference"


class DiversityKind(str, Enum):
    CROWDING = "crowding"
    SUBVECTOR = "subvector"


class SearchConfig(BaseModel):
    """Top-level configuration for a search instance.

    Built once at startup and shared by reference; never mutated. Use
    ``model_copy(update=...)`` to derive a variant.
    """
    population_size: int = Field(default=50, gt=0, description="Target generation size")
    stopping_condition: StoppingKind = StoppingKind.MAX_GENERATIONS
    search_budget: float = Field(default=100, ge=0, description="Budget for the stopping condition")
    direction: Direction = Direction.MINIMIZE
    parent_selection: SelectionPolicy = SelectionPolicy.RANK
    emigrant_selection: SelectionPolicy = SelectionPolicy.BEST_K
    rank_bias: float = Field(default=1.7, gt=1.0, le=2.0)
    crossover_rate: float = Field(default=0.75, ge=0.0, le=1.0)
    mutation_rate: float = Field(default=1.0, ge=0.0, le=1.0)
    ranking: RankingKind = RankingKind.DOMINANCE
    diversity: DiversityKind = DiversityKind.CROWDING
    max_stale_generations: int | None = Field(
        default=None, ge=1, description="Demote non-covering candidates older than this"
    )

    # Cooperative search
    num_parallel_instances: int = Field(default=1, ge=1)
    migration_interval: int = Field(default=5, ge=0, description="Generations between emigrations, 0 disables")
    migration_batch_size: int = Field(default=5, ge=1)
    immigrant_queue_capacity: int = Field(default=16, ge=1)
    archive_timeout: float | None = Field(default=None, gt=0, description="Seconds the primary waits for archives")

    seed: int | None = None

    model_config = {"frozen": True}

    @property
    def multi_instance(self) -> bool:
        return self.num_parallel_instances > 1

    @property
    def migration_enabled(self) -> bool:
        return self.multi_instance and self.migration_interval > 0
