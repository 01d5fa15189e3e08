"""Shared test fixtures."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

# Make _helpers importable from test files
sys.path.insert(0, str(Path(__file__).parent))

from _helpers import make_candidate  # noqa: E402

from mosa.candidates.objectives import CoverageGoals  # noqa: E402
from mosa.config import SearchConfig  # noqa: E402

__all__ = ["make_candidate"]


@pytest.fixture
def config() -> SearchConfig:
    return SearchConfig(population_size=10, search_budget=5, seed=7)


@pytest.fixture
def goals() -> CoverageGoals:
    return CoverageGoals(["o0", "o1", "o2", "o3"])
