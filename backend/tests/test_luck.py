import random

import pytest

from majlis.game.luck import LuckEffect, apply_luck, roll_luck


@pytest.mark.parametrize(
    "effect, expected",
    [
        (LuckEffect.DOUBLE, 500),
        (LuckEffect.LOSE_VALUE, 200),
        (LuckEffect.KEEP_VALUE, 400),
        (LuckEffect.HALVE_SCORE, 150),
        (LuckEffect.DOUBLE_SCORE, 600),
        (LuckEffect.NOTHING, 300),
    ],
)
def test_apply_luck(effect, expected):
    assert apply_luck(effect, 300, 100) == expected


def test_halve_score_truncates_toward_zero():
    assert apply_luck(LuckEffect.HALVE_SCORE, -5, 100) == -2
    assert apply_luck(LuckEffect.HALVE_SCORE, 5, 100) == 2


def test_roll_luck_respects_probability():
    rng = random.Random(7)
    assert all(roll_luck(rng, 0.0) is None for _ in range(50))
    assert all(isinstance(roll_luck(rng, 1.0), LuckEffect) for _ in range(50))


def test_roll_luck_is_reproducible_with_seed():
    a = [roll_luck(random.Random(3), 0.5) for _ in range(5)]
    b = [roll_luck(random.Random(3), 0.5) for _ in range(5)]
    assert a == b
