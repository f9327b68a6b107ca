import random
from collections import Counter
from types import SimpleNamespace

import pytest

from giftraffle.services.matching import MatchingImpossible, match, reduce_step


def _user(uid, name):
    return SimpleNamespace(id=uid, name=name)


def _pairs(*names):
    return [SimpleNamespace(giver=_user(i, n), receiver=None) for i, n in enumerate(names, start=1)]


def first(seq):
    return seq[0]


def last(seq):
    return seq[-1]


def _assignment(pairs):
    return {p.giver.name: p.receiver.name for p in pairs}


def test_two_givers_always_swap():
    for seed in range(20):
        pairs = _pairs("a", "b")
        result = match(pairs, random.Random(seed).choice)
        assert _assignment(result) == {"a": "b", "b": "a"}


def test_pick_first_candidate():
    result = match(_pairs("a", "b", "c"), first)
    assert _assignment(result) == {"a": "b", "b": "c", "c": "a"}


def test_pick_last_candidate():
    result = match(_pairs("a", "b", "c"), last)
    assert _assignment(result) == {"a": "c", "b": "a", "c": "b"}


def test_result_keeps_join_order():
    pairs = _pairs("a", "b", "c", "d")
    result = match(pairs, first)
    assert [p.giver.name for p in result] == ["a", "b", "c", "d"]


@pytest.mark.parametrize("size", [2, 3, 4, 5, 8, 13])
def test_successful_matches_are_derangements(size):
    names = [f"user{i}" for i in range(size)]
    successes = 0

    for seed in range(200):
        pairs = _pairs(*names)
        try:
            result = match(pairs, random.Random(seed).choice)
        except MatchingImpossible:
            assert all(p.receiver is None for p in pairs)
            continue

        successes += 1
        assert all(p.receiver is not None for p in result)
        assert all(p.receiver.id != p.giver.id for p in result)
        # every participant receives exactly once
        assert Counter(p.receiver.id for p in result) == Counter(p.giver.id for p in result)

    assert successes > 0


def test_dead_end_raises_and_leaves_pairs_untouched():
    # a -> b, b -> a leaves c with nobody but itself
    def avoid_c(seq):
        return min(seq, key=lambda u: u.name == "c")

    pairs = _pairs("a", "b", "c")
    with pytest.raises(MatchingImpossible):
        match(pairs, avoid_c)
    assert all(p.receiver is None for p in pairs)


def test_chooser_never_sees_the_giver():
    seen = []

    def recording(seq):
        seen.append(seq)
        return seq[-1]

    pairs = _pairs("a", "b", "c", "d")
    match(pairs, recording)
    for pair, candidates in zip(pairs, seen):
        assert pair.giver.id not in {c.id for c in candidates}


def test_needs_two_distinct_givers():
    with pytest.raises(MatchingImpossible):
        match(_pairs("solo"), first)
    with pytest.raises(MatchingImpossible):
        match([], first)

    same = _user(1, "twin")
    with pytest.raises(MatchingImpossible):
        match([SimpleNamespace(giver=same, receiver=None), SimpleNamespace(giver=same, receiver=None)], first)


def test_reduce_step_moves_present_giver_to_end():
    a, b, c = _user(1, "a"), _user(2, "b"), _user(3, "c")
    pool = (a, b, c)

    pick, next_pool = reduce_step(pool, a, first)

    assert pick is b
    assert next_pool == (c, a)
    assert pool == (a, b, c)


def test_reduce_step_without_giver_in_pool():
    a, b, c = _user(1, "a"), _user(2, "b"), _user(3, "c")

    pick, next_pool = reduce_step((c, a), b, first)

    assert pick is c
    assert next_pool == (a,)


def test_reduce_step_empty_candidates():
    a = _user(1, "a")
    with pytest.raises(MatchingImpossible):
        reduce_step((a,), a, first)
