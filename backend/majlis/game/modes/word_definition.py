from __future__ import annotations

import random

from ..models import Feedback, Player, Room, RoundResult, WordDefinitionState
from ..normalize import answers_match
from ..outcome import Outcome, accept, reject
from ..questions import QuestionPool
from .base import result_dict
from .rounds import RoundMode


class WordDefinitionMode(RoundMode):
    """Everyone picks the meaning of the round's word from four options."""

    game_type = "word_definition"

    def build_state(self, pool: QuestionPool, question_count: int, rng: random.Random) -> WordDefinitionState:
        questions = pool.meaning_questions(question_count, rng)
        return WordDefinitionState(questions=questions, round_count=len(questions))

    def begin_round(self, room: Room) -> None:
        state: WordDefinitionState = room.state  # type: ignore[assignment]
        question = state.questions[state.current_round - 1]
        state.active_question = question.redacted()
        state.correct_answer = question.answer
        state.answers[state.current_round] = {}
        room.status = "round_active"
        room.timer = room.rules.meaning_duration_sec

    def _answers(self, room: Room) -> dict[str, str]:
        state: WordDefinitionState = room.state  # type: ignore[assignment]
        return state.answers.setdefault(state.current_round, {})

    def _all_answered(self, room: Room) -> bool:
        answers = self._answers(room)
        return bool(room.players) and all(p.id in answers for p in room.players)

    def submit_meaning(self, room: Room, player: Player, answer: str) -> Outcome:
        state: WordDefinitionState = room.state  # type: ignore[assignment]
        if room.status != "round_active" or state.active_question is None:
            return reject(room, "submit_meaning", "wrong_phase")
        answers = self._answers(room)
        if player.id in answers:
            return reject(room, "submit_meaning", "already_answered")
        if state.active_question.options and answer not in state.active_question.options:
            return reject(room, "submit_meaning", "invalid_option")

        answers[player.id] = answer
        if self._all_answered(room):
            self.score_round(room)
        return accept(player)

    def on_round_expired(self, room: Room) -> None:
        self.score_round(room)

    def score_round(self, room: Room) -> None:
        state: WordDefinitionState = room.state  # type: ignore[assignment]
        answers = self._answers(room)
        points = room.rules.meaning_points
        scores: dict[str, int] = {}
        for p in room.players:
            earned = points if answers_match(answers.get(p.id), state.correct_answer) else 0
            scores[p.id] = earned
            p.score += earned

        state.questions[state.current_round - 1].is_answered = True
        state.round_results.append(
            RoundResult(
                round=state.current_round,
                answer=state.correct_answer,
                submissions={pid: {"answer": a} for pid, a in answers.items()},
                scores=scores,
            )
        )
        room.feedback = Feedback(
            kind="reveal",
            message="The correct meaning",
            answer=state.correct_answer,
        )
        self.enter_scoring(room, room.rules.meaning_reveal_sec)

    def after_scoring(self, room: Room) -> None:
        state: WordDefinitionState = room.state  # type: ignore[assignment]
        state.active_question = None
        state.correct_answer = None
        super().after_scoring(room)

    def on_player_removed(self, room: Room, player: Player, held_turn: bool) -> None:
        if room.status == "round_active" and self._all_answered(room):
            self.score_round(room)

    def rebind_player(self, room: Room, old_id: str, new_id: str) -> None:
        state: WordDefinitionState = room.state  # type: ignore[assignment]
        for answers in state.answers.values():
            if old_id in answers:
                answers[new_id] = answers.pop(old_id)
        for result in state.round_results:
            if old_id in result.submissions:
                result.submissions[new_id] = result.submissions.pop(old_id)
            if old_id in result.scores:
                result.scores[new_id] = result.scores.pop(old_id)

    def is_exhausted(self, room: Room) -> bool:
        state: WordDefinitionState = room.state  # type: ignore[assignment]
        return not state.questions

    def public_state(self, room: Room) -> dict:
        state: WordDefinitionState = room.state  # type: ignore[assignment]
        return {
            "currentRound": state.current_round,
            "roundCount": state.round_count,
            "activeQuestion": state.active_question.public() if state.active_question else None,
            "answeredPlayerIds": sorted(state.answers.get(state.current_round, {})),
            "roundResults": [result_dict(r) for r in state.round_results],
        }
