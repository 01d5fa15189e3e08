"""Tests for objective coverage: goals, tracker and archive."""

import math

import pytest
from _helpers import make_candidate

from mosa.candidates.objectives import CoverageGoals, StoredFitnessEvaluator
from mosa.config import Direction
from mosa.coverage.archive import BestSolutionsArchive
from mosa.coverage.tracker import GoalTracker


def test_goals_deduplicate_and_keep_order():
    goals = CoverageGoals(["b", "a", "b", "c"])
    assert list(goals.all_objectives()) == ["b", "a", "c"]
    assert len(goals) == 3


def test_missing_fitness_is_worst():
    assert math.isinf(CoverageGoals(["o0"]).fitness(make_candidate(), "o0"))
    maximize = CoverageGoals(["o0"], Direction.MAXIMIZE)
    assert maximize.fitness(make_candidate(), "o0") == -math.inf


def test_satisfaction_respects_direction():
    minimize = CoverageGoals(["o0", "o1"])
    c = make_candidate(0.0, 0.5)
    assert minimize.satisfied_by(c) == ["o0"]

    maximize = CoverageGoals(["o0", "o1"], Direction.MAXIMIZE, target=1.0)
    assert maximize.satisfied_by(make_candidate(1.0, 0.5)) == ["o0"]


def test_tracker_starts_with_every_objective(goals):
    tracker = GoalTracker(goals)
    assert tracker.uncovered == ("o0", "o1", "o2", "o3")
    assert tracker.num_covered == 0


def test_tracker_shrinks_monotonically(goals):
    tracker = GoalTracker(goals)
    history = [set(tracker.uncovered)]

    for values in [(0, 1, 1, 1), (1, 1, 1, 1), (0, 0, 1, 1), (1, 1, 1, 0)]:
        tracker.update(make_candidate(*values))
        history.append(set(tracker.uncovered))

    for before, after in zip(history, history[1:]):
        assert after <= before
    assert tracker.uncovered == ("o2",)
    assert tracker.is_covered("o0")
    assert not tracker.is_covered("o2")


def test_tracker_reports_first_satisfier_only(goals):
    tracker = GoalTracker(goals)
    first = make_candidate(0, 0, 1, 1)
    second = make_candidate(0, 1, 0, 1)

    assert tracker.update(first) == ["o0", "o1"]
    assert tracker.update(second) == ["o2"]
    assert tracker.update(second) == []


def test_update_all(goals):
    tracker = GoalTracker(goals)
    a = make_candidate(0, 1, 1, 1)
    b = make_candidate(0, 0, 1, 1)
    covered = tracker.update_all([a, b])
    assert covered == {"o0": a, "o1": b}


def test_archive_admits_first_satisfier():
    archive = BestSolutionsArchive()
    first = make_candidate(0, 1)
    later = make_candidate(0, 0)

    assert archive.admit(first, ["o0"])
    assert not archive.admit(later, ["o0"])
    assert archive.admit(later, ["o0", "o1"])

    assert len(archive) == 2
    assert archive.satisfier("o0").id == first.id
    assert archive.satisfier("o1").id == later.id
    assert archive.covered_objectives == ["o0", "o1"]


def test_archive_stores_snapshots():
    archive = BestSolutionsArchive()
    c = make_candidate(0, 0)
    archive.admit(c, ["o0", "o1"])
    c.payload.append(99)

    stored = archive.satisfier("o0")
    assert stored is not c
    assert 99 not in stored.payload
    assert c.id in archive


def test_archive_solutions_are_distinct():
    archive = BestSolutionsArchive()
    a = make_candidate(0, 0, 1)
    b = make_candidate(1, 1, 0)
    archive.admit(a, ["o0", "o1"])
    archive.admit(b, ["o2"])
    assert [s.id for s in archive.solutions()] == [a.id, b.id]
    assert archive.satisfier("missing") is None
    assert not archive.covers("missing")


@pytest.mark.asyncio
async def test_stored_fitness_evaluator_is_identity():
    c = make_candidate(1.0)
    assert await StoredFitnessEvaluator().evaluate(c) is c
