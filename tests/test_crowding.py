"""Tests for diversity metrics."""

import math

import numpy as np
import pytest
from _helpers import make_candidate

from mosa.ranking.crowding import CrowdingDistance, SubvectorDominanceDistance, sort_by_diversity

OBJECTIVES = ["o0", "o1"]


@pytest.fixture
def crowding(goals) -> CrowdingDistance:
    return CrowdingDistance(goals)


def test_single_member_front_is_infinite(crowding):
    c = make_candidate(1, 2)
    distances = crowding.assign([c], OBJECTIVES)
    assert math.isinf(c.distance)
    assert math.isinf(distances[0])


def test_empty_front(crowding):
    assert len(crowding.assign([], OBJECTIVES)) == 0


def test_boundaries_are_infinite_and_interior_normalised(crowding):
    front = [make_candidate(1, 4), make_candidate(2, 3), make_candidate(3, 2), make_candidate(4, 1)]

    crowding.assign(front, OBJECTIVES)

    assert math.isinf(front[0].distance)
    assert math.isinf(front[3].distance)
    assert front[1].distance == pytest.approx(4 / 3)
    assert front[2].distance == pytest.approx(4 / 3)


def test_boundaries_sort_first(crowding):
    front = [make_candidate(2, 3), make_candidate(1, 4), make_candidate(3, 2), make_candidate(4, 1)]
    crowding.assign(front, OBJECTIVES)

    ordered = sort_by_diversity(front)

    assert {id(c) for c in ordered[:2]} == {id(front[1]), id(front[3])}


def test_degenerate_objective_contributes_nothing(crowding):
    front = [make_candidate(5, 5) for _ in range(3)]
    distances = crowding.assign(front, OBJECTIVES)
    assert np.all(distances == 0)
    assert not np.any(np.isnan(distances))


def test_partially_degenerate_front_has_no_nan(crowding):
    front = [make_candidate(1, 7), make_candidate(2, 7), make_candidate(3, 7)]
    distances = crowding.assign(front, OBJECTIVES)
    assert not np.any(np.isnan(distances))
    assert front[1].distance == pytest.approx(1.0)


def test_missing_fitness_marks_extremes_only(crowding):
    front = [make_candidate(1, 1), make_candidate(2, 2), make_candidate(3)]
    distances = crowding.assign(front, OBJECTIVES)
    assert not np.any(np.isnan(distances))
    assert math.isinf(front[2].distance)


def test_no_uncovered_objectives_gives_zero(crowding):
    front = [make_candidate(1, 2), make_candidate(2, 1)]
    assert np.all(crowding.assign(front, []) == 0)


def test_subvector_rewards_unique_best(goals):
    metric = SubvectorDominanceDistance(goals)
    unique = make_candidate(1, 5)
    shared_a = make_candidate(3, 2)
    shared_b = make_candidate(3, 2)
    front = [unique, shared_a, shared_b]

    metric.assign(front, OBJECTIVES)

    assert unique.distance == pytest.approx(2 / 3)
    assert shared_a.distance == pytest.approx(1 / 3)
    assert shared_b.distance == pytest.approx(1 / 3)


def test_sort_by_diversity_is_stable():
    a, b, c = make_candidate(1), make_candidate(2), make_candidate(3)
    a.distance, b.distance, c.distance = 1.0, 2.0, 1.0
    assert sort_by_diversity([a, b, c]) == [b, a, c]
