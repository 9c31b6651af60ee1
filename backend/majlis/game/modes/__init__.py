from .base import GameMode
from .letter_claim import LetterClaimMode
from .quiz_board import QuizBoardMode
from .word_builder import WordBuilderMode
from .word_definition import WordDefinitionMode


MODES: dict[str, GameMode] = {
    mode.game_type: mode
    for mode in (QuizBoardMode(), LetterClaimMode(), WordBuilderMode(), WordDefinitionMode())
}


def get_mode(game_type: str) -> GameMode:
    return MODES[game_type]


__all__ = [
    "GameMode",
    "LetterClaimMode",
    "MODES",
    "QuizBoardMode",
    "WordBuilderMode",
    "WordDefinitionMode",
    "get_mode",
]
