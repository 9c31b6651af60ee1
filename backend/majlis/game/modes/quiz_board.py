from __future__ import annotations

import logging
import random

from ..luck import LUCK_MESSAGES, apply_luck, roll_luck
from ..models import Feedback, Player, QuizBoardState, Question, Room
from ..outcome import Outcome, accept, reject
from ..questions import QuestionPool
from .buzzer import BuzzerMode


logger = logging.getLogger(__name__)


class QuizBoardMode(BuzzerMode):
    """Categories x values board with a buzzer and the occasional luck event."""

    game_type = "quiz_board"
    selecting_status = "selecting_category"
    first_status = "selecting_category"

    def build_state(self, pool: QuestionPool, question_count: int, rng: random.Random) -> QuizBoardState:
        return QuizBoardState(questions=pool.board_questions(question_count, rng))

    def _find(self, room: Room, question_id: str) -> Question | None:
        state: QuizBoardState = room.state  # type: ignore[assignment]
        for q in state.questions:
            if q.id == question_id:
                return q
        return None

    def pick_category(self, room: Room, player: Player, category: str) -> Outcome:
        state: QuizBoardState = room.state  # type: ignore[assignment]
        if room.status != "selecting_category":
            return reject(room, "pick_category", "wrong_phase")
        if room.current_player is not player:
            return reject(room, "pick_category", "not_your_turn")
        if not any(q.category == category and not q.is_answered for q in state.questions):
            return reject(room, "pick_category", "category_exhausted")

        state.selected_category = category
        room.feedback = None
        room.status = "selecting_value"
        return accept(player)

    def pick_value(self, room: Room, player: Player, value: int) -> Outcome:
        state: QuizBoardState = room.state  # type: ignore[assignment]
        if room.status != "selecting_value":
            return reject(room, "pick_value", "wrong_phase")
        if room.current_player is not player:
            return reject(room, "pick_value", "not_your_turn")

        question = next(
            (
                q
                for q in state.questions
                if q.category == state.selected_category and q.value == value and not q.is_answered
            ),
            None,
        )
        if question is None:
            return reject(room, "pick_value", "question_not_found")

        effect = roll_luck(room.rng, room.rules.luck_probability)
        if effect is None:
            self.pose_question(room, question)
            return accept(player)

        before = player.score
        player.score = apply_luck(effect, player.score, question.value)
        question.is_answered = True
        state.selected_category = None
        room.feedback = Feedback(
            kind="luck",
            message=LUCK_MESSAGES[effect],
            player_id=player.id,
            points=player.score - before,
            effect=effect.value,
        )
        room.status = "feedback"
        room.timer = 0
        logger.info("[luck] room=%s player=%s effect=%s delta=%d", room.id, player.name, effect.value, player.score - before)
        return accept(player)

    def mark_resolved(self, room: Room) -> None:
        state: QuizBoardState = room.state  # type: ignore[assignment]
        if state.active_question is None:
            return
        q = self._find(room, state.active_question.id)
        if q is not None:
            q.is_answered = True

    def clear_selection(self, room: Room) -> None:
        room.state.selected_category = None  # type: ignore[union-attr]

    def is_exhausted(self, room: Room) -> bool:
        state: QuizBoardState = room.state  # type: ignore[assignment]
        return all(q.is_answered for q in state.questions)

    def public_state(self, room: Room) -> dict:
        state: QuizBoardState = room.state  # type: ignore[assignment]
        categories: list[str] = []
        for q in state.questions:
            if q.category not in categories:
                categories.append(q.category)
        payload = {
            "categories": categories,
            "board": [
                {"id": q.id, "category": q.category, "value": q.value, "isAnswered": q.is_answered}
                for q in state.questions
            ],
            "selectedCategory": state.selected_category,
        }
        payload.update(self.buzzer_public_state(room))
        return payload
