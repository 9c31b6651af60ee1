"""Turn-based buzzer flow shared by the quiz-board and letter-claim modes.

The player whose turn it is picks a question; anyone may buzz once per
question; only the buzzed player may answer. A wrong answer releases the
buzz for the others, and the question resolves once it is answered
correctly, everyone has tried, or the timer runs out.
"""

from __future__ import annotations

import logging

from ..models import BuzzerState, Feedback, Player, Question, Room
from ..normalize import answers_match
from ..outcome import Outcome, accept, reject
from .base import GameMode, finish_game, next_turn_index


logger = logging.getLogger(__name__)


class BuzzerMode(GameMode):
    selecting_status = "selecting_category"
    first_status = "selecting_category"
    arabic_answers = False

    # --- hooks for the concrete modes ---

    def points_for(self, room: Room, question: Question) -> int:
        return question.value

    def mark_resolved(self, room: Room) -> None:
        raise NotImplementedError

    def after_correct(self, room: Room, player: Player) -> None:
        pass

    def clear_selection(self, room: Room) -> None:
        pass

    def exhausted_winner(self, room: Room) -> dict | None:
        return None

    # --- shared flow ---

    def pose_question(self, room: Room, question: Question) -> None:
        state: BuzzerState = room.state  # type: ignore[assignment]
        state.active_question = question.redacted()
        state.correct_answer = question.answer
        state.buzzed_player_id = None
        state.attempts = set()
        room.feedback = None
        room.status = "question"
        room.timer = room.rules.question_duration_sec
        logger.info("[question] room=%s question=%s value=%s", room.id, question.id, question.value)

    def _active_points(self, room: Room) -> int:
        state: BuzzerState = room.state  # type: ignore[assignment]
        if state.active_question is None:
            return 0
        return self.points_for(room, state.active_question)

    def buzz(self, room: Room, player: Player) -> Outcome:
        state: BuzzerState = room.state  # type: ignore[assignment]
        if room.status != "question" or state.active_question is None:
            return reject(room, "buzz", "not_in_question")
        if state.buzzed_player_id is not None:
            return reject(room, "buzz", "already_buzzed")
        if player.id in state.attempts:
            return reject(room, "buzz", "already_attempted")

        state.buzzed_player_id = player.id
        logger.info("[buzz] room=%s player=%s", room.id, player.name)
        return accept(player)

    def submit_answer(self, room: Room, player: Player, answer: str) -> Outcome:
        state: BuzzerState = room.state  # type: ignore[assignment]
        if room.status != "question" or state.active_question is None:
            return reject(room, "submit_answer", "not_in_question")
        if state.buzzed_player_id != player.id:
            return reject(room, "submit_answer", "not_buzzed")

        points = self._active_points(room)
        if answers_match(answer, state.correct_answer, arabic=self.arabic_answers):
            player.score += points
            room.feedback = Feedback(
                kind="correct",
                message=f"Correct! {player.name} gets {points}.",
                player_id=player.id,
                answer=state.correct_answer,
                points=points,
            )
            self.mark_resolved(room)
            state.buzzed_player_id = None
            room.status = "feedback"
            room.timer = 0
            self.after_correct(room, player)
            return accept(player)

        player.score -= points
        state.attempts.add(player.id)
        state.buzzed_player_id = None
        if len(state.attempts) >= len(room.players):
            self._resolve_all_wrong(room)
        else:
            room.feedback = Feedback(
                kind="wrong",
                message=f"Wrong! {player.name} loses {points}.",
                player_id=player.id,
                points=-points,
            )
            room.timer = room.rules.retry_duration_sec
        return accept(player)

    def _resolve_all_wrong(self, room: Room) -> None:
        state: BuzzerState = room.state  # type: ignore[assignment]
        room.feedback = Feedback(
            kind="all_wrong",
            message="Nobody got it right.",
            answer=state.correct_answer,
        )
        self.mark_resolved(room)
        state.buzzed_player_id = None
        room.status = "feedback"
        room.timer = 0

    def answer_question(self, room: Room, is_correct: bool, kind: str = "override") -> Outcome:
        """Resolve the active question without the buzzer and pass the turn."""
        state: BuzzerState = room.state  # type: ignore[assignment]
        if room.status != "question" or state.active_question is None:
            return reject(room, "answer_question", "not_in_question")

        player = room.current_player
        points = self._active_points(room)
        answer = state.correct_answer
        if is_correct and player is not None:
            player.score += points

        room.feedback = Feedback(
            kind=kind,
            message="Time is up." if kind == "timeout" else "Resolved by the host.",
            player_id=player.id if (is_correct and player) else None,
            answer=answer,
            points=points if is_correct else 0,
        )
        self.mark_resolved(room)
        if is_correct and player is not None:
            self.after_correct(room, player)

        state.clear_question()
        self.clear_selection(room)
        self.advance(room)
        return accept(player)

    def close_feedback(self, room: Room) -> Outcome:
        state: BuzzerState = room.state  # type: ignore[assignment]
        if room.status != "feedback" or room.feedback is None:
            return reject(room, "close_feedback", "no_feedback")

        room.feedback = None
        state.clear_question()
        self.clear_selection(room)
        self.advance(room)
        return accept()

    def advance(self, room: Room) -> None:
        if room.status == "game_over":
            return
        room.current_player_index = next_turn_index(room, self.team_mode)
        room.timer = 0
        if self.is_exhausted(room):
            finish_game(room, self.exhausted_winner(room))
            return
        room.status = self.selecting_status

    def on_timer_expired(self, room: Room) -> None:
        if room.status == "question":
            self.answer_question(room, is_correct=False, kind="timeout")

    def on_player_removed(self, room: Room, player: Player, held_turn: bool) -> None:
        state: BuzzerState = room.state  # type: ignore[assignment]
        state.attempts.discard(player.id)
        if state.buzzed_player_id == player.id:
            state.buzzed_player_id = None

        if held_turn and room.status in ("question", "selecting_value", self.selecting_status):
            state.clear_question()
            self.clear_selection(room)
            room.feedback = None
            room.timer = 0
            room.status = self.selecting_status
            return

        if room.status == "question" and room.players and len(state.attempts) >= len(room.players):
            self._resolve_all_wrong(room)

    def rebind_player(self, room: Room, old_id: str, new_id: str) -> None:
        state: BuzzerState = room.state  # type: ignore[assignment]
        if state.buzzed_player_id == old_id:
            state.buzzed_player_id = new_id
        if old_id in state.attempts:
            state.attempts.discard(old_id)
            state.attempts.add(new_id)

    def buzzer_public_state(self, room: Room) -> dict:
        state: BuzzerState = room.state  # type: ignore[assignment]
        return {
            "activeQuestion": state.active_question.public() if state.active_question else None,
            "buzzedPlayerId": state.buzzed_player_id,
            "attempts": sorted(state.attempts),
        }
