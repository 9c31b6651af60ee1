from __future__ import annotations

import random
from enum import Enum


class LuckEffect(str, Enum):
    DOUBLE = "double"
    LOSE_VALUE = "lose_value"
    KEEP_VALUE = "keep_value"
    HALVE_SCORE = "halve_score"
    DOUBLE_SCORE = "double_score"
    NOTHING = "nothing"


LUCK_MESSAGES = {
    LuckEffect.DOUBLE: "Lucky! Double the value.",
    LuckEffect.LOSE_VALUE: "Unlucky! You lose the value.",
    LuckEffect.KEEP_VALUE: "Free points! Keep the value.",
    LuckEffect.HALVE_SCORE: "Ouch! Your score is halved.",
    LuckEffect.DOUBLE_SCORE: "Jackpot! Your score is doubled.",
    LuckEffect.NOTHING: "Nothing happens this time.",
}


def roll_luck(rng: random.Random, probability: float) -> LuckEffect | None:
    """Returns the luck effect replacing a question, or None to ask it normally."""
    if probability <= 0 or rng.random() >= probability:
        return None
    return rng.choice(list(LuckEffect))


def apply_luck(effect: LuckEffect, score: int, value: int) -> int:
    """Returns the new score after applying `effect`."""
    if effect is LuckEffect.DOUBLE:
        return score + 2 * value
    if effect is LuckEffect.LOSE_VALUE:
        return score - value
    if effect is LuckEffect.KEEP_VALUE:
        return score + value
    if effect is LuckEffect.HALVE_SCORE:
        return int(score / 2)
    if effect is LuckEffect.DOUBLE_SCORE:
        return score * 2
    return score
