from __future__ import annotations

import random
from dataclasses import dataclass, field, replace
from typing import Literal, Union


GameType = Literal["quiz_board", "letter_claim", "word_builder", "word_definition"]
GAME_TYPES: tuple[str, ...] = ("quiz_board", "letter_claim", "word_builder", "word_definition")

RoomStatus = Literal[
    "lobby",
    "selecting_category",
    "selecting_value",
    "selecting_letter",
    "question",
    "feedback",
    "countdown",
    "round_active",
    "round_scoring",
    "game_over",
]

# Phases driven by the per-room ticker.
TIMED_STATUSES = frozenset({"question", "countdown", "round_active", "round_scoring"})

Team = Literal["red", "blue"]
TEAMS: tuple[str, str] = ("red", "blue")


@dataclass(frozen=True)
class GameRules:
    """Gameplay numbers carried by every room."""

    min_players: int = 1
    default_question_count: int = 5
    default_round_count: int = 5
    question_duration_sec: int = 15
    retry_duration_sec: int = 10
    countdown_sec: int = 3
    word_round_duration_sec: int = 60
    word_round_grace_sec: int = 2
    meaning_duration_sec: int = 15
    scoring_duration_sec: int = 8
    meaning_reveal_sec: int = 4
    meaning_points: int = 50
    letter_points: int = 100
    luck_probability: float = 0.1

    @classmethod
    def from_config(cls, config) -> "GameRules":
        return cls(
            min_players=config.MIN_PLAYERS,
            default_question_count=config.DEFAULT_QUESTION_COUNT,
            default_round_count=config.DEFAULT_ROUND_COUNT,
            question_duration_sec=config.QUESTION_DURATION_SEC,
            retry_duration_sec=config.RETRY_DURATION_SEC,
            countdown_sec=config.COUNTDOWN_SEC,
            word_round_duration_sec=config.WORD_ROUND_DURATION_SEC,
            word_round_grace_sec=config.WORD_ROUND_GRACE_SEC,
            meaning_duration_sec=config.MEANING_DURATION_SEC,
            scoring_duration_sec=config.SCORING_DURATION_SEC,
            meaning_reveal_sec=config.MEANING_REVEAL_SEC,
            meaning_points=config.MEANING_POINTS,
            letter_points=config.LETTER_POINTS,
            luck_probability=config.LUCK_PROBABILITY,
        )


@dataclass
class Player:
    id: str
    name: str
    score: int = 0
    number: int = 0
    team: Team | None = None
    connected: bool = True
    player_key: str = ""


@dataclass
class Question:
    id: str
    category: str
    value: int
    question: str
    answer: str = ""
    options: list[str] = field(default_factory=list)
    is_answered: bool = False

    def redacted(self) -> "Question":
        return replace(self, answer="", options=list(self.options))

    def public(self) -> dict:
        return {
            "id": self.id,
            "category": self.category,
            "value": self.value,
            "question": self.question,
            "options": list(self.options),
        }


@dataclass
class GridCell:
    id: int
    letter: str
    owner_id: str | None = None
    owner_team: Team | None = None


@dataclass
class Feedback:
    kind: str  # correct, wrong, all_wrong, timeout, override, luck, forfeit, reveal
    message: str
    player_id: str | None = None
    answer: str | None = None
    points: int = 0
    effect: str | None = None


@dataclass
class RoundResult:
    round: int
    letter: str | None = None
    answer: str | None = None
    submissions: dict[str, dict[str, str]] = field(default_factory=dict)
    scores: dict[str, int] = field(default_factory=dict)


@dataclass
class BuzzerState:
    """Question being asked in the buzzer modes; answer kept server-side only."""

    active_question: Question | None = None
    correct_answer: str | None = None
    buzzed_player_id: str | None = None
    attempts: set[str] = field(default_factory=set)

    def clear_question(self) -> None:
        self.active_question = None
        self.correct_answer = None
        self.buzzed_player_id = None
        self.attempts = set()


@dataclass
class QuizBoardState(BuzzerState):
    questions: list[Question] = field(default_factory=list)
    selected_category: str | None = None


@dataclass
class LetterClaimState(BuzzerState):
    grid: list[GridCell] = field(default_factory=list)
    pool: list[Question] = field(default_factory=list)
    used_question_ids: set[str] = field(default_factory=set)
    active_cell_id: int | None = None


@dataclass
class WordBuilderState:
    current_round: int = 0
    round_count: int = 5
    current_letter: str | None = None
    used_letters: list[str] = field(default_factory=list)
    round_submissions: dict[int, dict[str, dict[str, str]]] = field(default_factory=dict)
    round_results: list[RoundResult] = field(default_factory=list)
    closing: bool = False


@dataclass
class WordDefinitionState:
    questions: list[Question] = field(default_factory=list)
    current_round: int = 0
    round_count: int = 5
    active_question: Question | None = None
    correct_answer: str | None = None
    answers: dict[int, dict[str, str]] = field(default_factory=dict)
    round_results: list[RoundResult] = field(default_factory=list)


ModeState = Union[QuizBoardState, LetterClaimState, WordBuilderState, WordDefinitionState]


@dataclass
class Room:
    id: str
    game_type: GameType
    state: ModeState
    rules: GameRules = field(default_factory=GameRules)
    rng: random.Random = field(default_factory=random.Random, repr=False)
    creator_id: str | None = None
    status: RoomStatus = "lobby"
    players: list[Player] = field(default_factory=list)
    current_player_index: int = 0
    question_count: int = 5
    timer: int = 0
    feedback: Feedback | None = None
    winner: dict | None = None

    def find_player(self, player_id: str | None) -> Player | None:
        if not player_id:
            return None
        for p in self.players:
            if p.id == player_id:
                return p
        return None

    def find_player_by_name(self, name: str) -> Player | None:
        key = (name or "").strip().casefold()
        for p in self.players:
            if p.name.strip().casefold() == key:
                return p
        return None

    @property
    def current_player(self) -> Player | None:
        if not self.players:
            return None
        return self.players[self.current_player_index % len(self.players)]

    @property
    def host_id(self) -> str | None:
        if self.creator_id and self.find_player(self.creator_id):
            return self.creator_id
        return self.players[0].id if self.players else None
