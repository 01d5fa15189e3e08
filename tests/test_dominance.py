"""Tests for dominance and preference ranking."""

import random

import pytest
from _helpers import make_candidate

from mosa.candidates.objectives import CoverageGoals
from mosa.config import Direction
from mosa.errors import RankingInvariantError
from mosa.ranking.dominance import DominanceRanking, PreferenceRanking, Ranking, demote, dominates

OBJECTIVES = ["o0", "o1", "o2", "o3"]


@pytest.fixture
def ranking(goals) -> DominanceRanking:
    return DominanceRanking(goals)


def test_dominates():
    assert dominates([1, 2], [2, 2])
    assert not dominates([1, 2], [1, 2])
    assert not dominates([1, 3], [2, 2])
    assert dominates([3, 2], [1, 2], Direction.MAXIMIZE)


def test_fronts_are_disjoint_and_exhaustive(ranking):
    rng = random.Random(3)
    candidates = [make_candidate(*(rng.uniform(1, 10) for _ in OBJECTIVES)) for _ in range(30)]

    result = ranking.compute(candidates, OBJECTIVES)

    ranked = result.candidates()
    assert len(ranked) == len(candidates)
    assert {id(c) for c in ranked} == {id(c) for c in candidates}
    for index, front in enumerate(result.fronts):
        assert front
        assert all(c.rank == index for c in front)


def test_every_later_front_member_is_dominated_by_earlier_front(ranking):
    rng = random.Random(11)
    candidates = [make_candidate(*(rng.randint(1, 6) for _ in OBJECTIVES)) for _ in range(25)]

    result = ranking.compute(candidates, OBJECTIVES)

    for index in range(1, result.number_of_subfronts):
        previous = [[c.fitness[o] for o in OBJECTIVES] for c in result.subfront(index - 1)]
        for c in result.subfront(index):
            values = [c.fitness[o] for o in OBJECTIVES]
            assert any(dominates(p, values) for p in previous)
    for a in result.subfront(0):
        for b in result.subfront(0):
            assert not dominates([a.fitness[o] for o in OBJECTIVES], [b.fitness[o] for o in OBJECTIVES])


def test_two_dominators_form_first_front(ranking):
    a = make_candidate(1, 2, 1, 2)
    b = make_candidate(2, 1, 2, 1)
    rest = [make_candidate(3 + i, 3, 4, 3 + (7 - i)) for i in range(8)]

    result = ranking.compute([*rest[:4], a, *rest[4:], b], OBJECTIVES)

    assert result.subfront(0) == [a, b]
    assert all(c.rank >= 1 for c in rest)


def test_only_uncovered_objectives_are_compared(ranking):
    better_on_covered = make_candidate(1, 5)
    worse_on_covered = make_candidate(9, 5)

    result = ranking.compute([better_on_covered, worse_on_covered], ["o1"])

    assert result.number_of_subfronts == 1
    assert result.subfront(0) == [better_on_covered, worse_on_covered]


def test_no_uncovered_objectives_gives_single_front(ranking):
    candidates = [make_candidate(i, i) for i in range(5)]
    result = ranking.compute(candidates, [])
    assert result.number_of_subfronts == 1
    assert result.subfront(0) == candidates


def test_empty_input_has_no_fronts(ranking):
    result = ranking.compute([], OBJECTIVES)
    assert result.number_of_subfronts == 0
    assert result.subfront(0) == []


def test_front_order_follows_input_order(ranking):
    candidates = [make_candidate(i, 10 - i) for i in range(6)]
    first = ranking.compute(candidates, ["o0", "o1"])
    second = ranking.compute(candidates, ["o0", "o1"])
    assert first.subfront(0) == candidates
    assert [f for f in first.fronts] == [f for f in second.fronts]


def test_missing_fitness_counts_as_worst(ranking):
    complete = make_candidate(5, 5)
    partial = make_candidate(5)
    result = ranking.compute([partial, complete], ["o0", "o1"])
    assert result.subfront(0) == [complete]
    assert result.subfront(1) == [partial]


def test_maximize_direction():
    goals = CoverageGoals(["o0", "o1"], Direction.MAXIMIZE, target=1.0)
    high = make_candidate(0.9, 0.8)
    low = make_candidate(0.1, 0.2)
    result = DominanceRanking(goals, Direction.MAXIMIZE).compute([low, high], ["o0", "o1"])
    assert result.subfront(0) == [high]
    assert result.subfront(1) == [low]


def test_duplicate_reference_raises(ranking):
    c = make_candidate(1, 2)
    with pytest.raises(RankingInvariantError):
        ranking.compute([c, c], ["o0", "o1"])


def test_snapshots_with_same_id_are_ranked_separately(ranking):
    c = make_candidate(1, 2)
    result = ranking.compute([c, c.snapshot()], ["o0", "o1"])
    assert len(result) == 2


def test_preference_ranking_puts_best_per_objective_first(goals):
    best_o0 = make_candidate(1, 9, 9)
    best_o1 = make_candidate(9, 1, 9)
    middling = make_candidate(5, 5, 5)
    best_o2 = make_candidate(9, 9, 1)
    worst = make_candidate(8, 8, 8)
    candidates = [best_o0, middling, best_o1, worst, best_o2]

    result = PreferenceRanking(goals).compute(candidates, ["o0", "o1", "o2"])

    assert result.subfront(0) == [best_o0, best_o1, best_o2]
    assert result.subfront(1) == [middling]
    assert result.subfront(2) == [worst]
    assert len(result) == len(candidates)


def test_preference_ranking_shared_best_appears_once(goals):
    both = make_candidate(1, 1)
    other = make_candidate(2, 2)
    result = PreferenceRanking(goals).compute([both, other], ["o0", "o1"])
    assert result.subfront(0) == [both]
    assert result.subfront(1) == [other]


def test_demote_moves_candidates_to_trailing_front():
    a, b, c = make_candidate(1), make_candidate(2), make_candidate(3)
    ranking = Ranking([[a, b], [c]])

    demoted = demote(ranking, [a])

    assert demoted.fronts == [[b], [c], [a]]
    assert a.rank == 2


def test_ranking_drops_empty_fronts():
    a = make_candidate(1)
    ranking = Ranking([[], [a], []])
    assert ranking.number_of_subfronts == 1
    assert a.rank == 0
