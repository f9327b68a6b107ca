from __future__ import annotations

import random
from typing import Callable, Sequence, TypeVar

T = TypeVar("T")

Chooser = Callable[[Sequence[T]], T]


class MatchingImpossible(RuntimeError):
    code = "error.raffle.matchingImpossible"


def _without(pool: tuple, user) -> tuple:
    return tuple(r for r in pool if r.id != user.id)


def reduce_step(pool: tuple, giver, choose: Chooser):
    """
    One step of the reduction.

    Returns (pick, next_pool). The giver never picks themselves; if the giver
    was still an unassigned receiver it stays in the pool, moved to the end.
    """
    candidates = _without(pool, giver)
    giver_was_present = len(candidates) != len(pool)

    if not candidates:
        raise MatchingImpossible(f"No receiver left for giver {giver.id}.")

    pick = choose(candidates)
    rest = _without(candidates, pick)
    return pick, (rest + (giver,) if giver_was_present else rest)


def match(pairs: Sequence, choose: Chooser | None = None) -> list:
    """
    Assign a receiver to every pair so nobody gifts to themselves.

    Pairs are walked in the given (join) order. Receivers are only written
    once the whole reduction has succeeded.
    """
    choose = choose or random.choice

    if len({p.giver.id for p in pairs}) < 2:
        raise MatchingImpossible("Need at least 2 distinct givers to match.")

    pool = tuple(p.giver for p in pairs)
    picks = []
    for pair in pairs:
        pick, pool = reduce_step(pool, pair.giver, choose)
        picks.append((pair, pick))

    for pair, pick in picks:
        pair.receiver = pick
    return [pair for pair, _ in picks]
