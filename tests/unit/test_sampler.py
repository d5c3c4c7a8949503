"""Unit tests for random probe sampling."""

from __future__ import annotations

import random

from lockwatch.harvest.sampler import ID_SPACE, next_unseen_id


class _ScriptedRandom:
    def __init__(self, *values: int) -> None:
        self._values = list(values)

    def randrange(self, stop: int, /) -> int:
        assert stop == ID_SPACE
        return self._values.pop(0)


def test_draws_are_distinct_and_recorded() -> None:
    """Every draw is new to the seen set and is added to it."""
    seen: set[int] = set()
    rng = random.Random(1234)

    draws = [next_unseen_id(seen, rng) for _ in range(200)]

    assert len(set(draws)) == 200
    assert seen == set(draws)
    assert all(0 <= value < ID_SPACE for value in draws)


def test_seen_values_are_redrawn() -> None:
    """Values already seen are rejected until a fresh one comes up."""
    seen = {5, 9}

    value = next_unseen_id(seen, _ScriptedRandom(5, 9, 5, 11))

    assert value == 11
    assert seen == {5, 9, 11}

