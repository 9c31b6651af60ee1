from __future__ import annotations

import logging
import random

from ..grid import TEAM_DIRECTIONS, build_grid, find_cell, has_connected_path, is_full
from ..models import LetterClaimState, Player, Question, Room
from ..normalize import normalize_arabic, starts_with_letter
from ..outcome import Outcome, accept, reject
from ..questions import QuestionPool
from .base import finish_game, winner_payload
from .buzzer import BuzzerMode


logger = logging.getLogger(__name__)


def _starts_with(q: Question, letter: str) -> bool:
    return starts_with_letter(q.answer, letter) or starts_with_letter(q.question, letter)


def build_options(question: Question, pool: list[Question], letter: str, rng: random.Random) -> list[str]:
    """Correct answer plus three same-letter distractors, or the item's own options."""
    correct = normalize_arabic(question.answer)
    distractors: list[str] = []
    seen = {correct}
    for q in pool:
        n = normalize_arabic(q.answer)
        if n and n not in seen and starts_with_letter(q.answer, letter):
            seen.add(n)
            distractors.append(q.answer)

    if len(distractors) >= 3:
        options = rng.sample(distractors, 3) + [question.answer]
        rng.shuffle(options)
        return options
    return list(question.options)


class LetterClaimMode(BuzzerMode):
    """Two teams claim letters on a 5x5 board; first connected edge-to-edge path wins."""

    game_type = "letter_claim"
    team_mode = True
    selecting_status = "selecting_letter"
    first_status = "selecting_letter"
    arabic_answers = True

    def build_state(self, pool: QuestionPool, question_count: int, rng: random.Random) -> LetterClaimState:
        return LetterClaimState(grid=build_grid(rng), pool=pool.letter_questions())

    def points_for(self, room: Room, question: Question) -> int:
        return question.value or room.rules.letter_points

    def choose_question(self, room: Room, letter: str) -> Question | None:
        state: LetterClaimState = room.state  # type: ignore[assignment]
        fresh = [q for q in state.pool if q.id not in state.used_question_ids]
        candidates = [q for q in fresh if _starts_with(q, letter)]
        if not candidates:
            candidates = fresh or list(state.pool)
        if not candidates:
            return None
        return room.rng.choice(candidates)

    def pick_letter(self, room: Room, player: Player, cell_id=None, letter: str | None = None) -> Outcome:
        state: LetterClaimState = room.state  # type: ignore[assignment]
        if room.status != "selecting_letter":
            return reject(room, "pick_letter", "wrong_phase")
        if room.current_player is not player:
            return reject(room, "pick_letter", "not_your_turn")

        cell = find_cell(state.grid, cell_id=cell_id, letter=letter)
        if cell is None:
            return reject(room, "pick_letter", "cell_not_found")
        if cell.owner_id is not None:
            return reject(room, "pick_letter", "cell_claimed")

        question = self.choose_question(room, cell.letter)
        if question is None:
            return reject(room, "pick_letter", "no_questions")

        posed = Question(
            id=question.id,
            category=question.category,
            value=question.value,
            question=question.question,
            answer=question.answer,
            options=build_options(question, state.pool, cell.letter, room.rng),
        )
        state.active_cell_id = cell.id
        self.pose_question(room, posed)
        return accept(player)

    def mark_resolved(self, room: Room) -> None:
        state: LetterClaimState = room.state  # type: ignore[assignment]
        if state.active_question is not None:
            state.used_question_ids.add(state.active_question.id)

    def after_correct(self, room: Room, player: Player) -> None:
        state: LetterClaimState = room.state  # type: ignore[assignment]
        cell = find_cell(state.grid, cell_id=state.active_cell_id)
        if cell is None or cell.owner_id is not None:
            return
        cell.owner_id = player.id
        cell.owner_team = player.team
        logger.info("[claim] room=%s cell=%d team=%s player=%s", room.id, cell.id, player.team, player.name)

        team = player.team
        if team and has_connected_path(state.grid, team, TEAM_DIRECTIONS[team]):
            finish_game(room, winner_payload(team=team))

    def clear_selection(self, room: Room) -> None:
        room.state.active_cell_id = None  # type: ignore[union-attr]

    def is_exhausted(self, room: Room) -> bool:
        return is_full(room.state.grid)  # type: ignore[union-attr]

    def exhausted_winner(self, room: Room) -> dict | None:
        state: LetterClaimState = room.state  # type: ignore[assignment]
        counts = {team: 0 for team in TEAM_DIRECTIONS}
        for c in state.grid:
            if c.owner_team in counts:
                counts[c.owner_team] += 1
        red, blue = counts["red"], counts["blue"]
        if red == blue:
            return None
        return winner_payload(team="red" if red > blue else "blue")

    def rebind_player(self, room: Room, old_id: str, new_id: str) -> None:
        super().rebind_player(room, old_id, new_id)
        for c in room.state.grid:  # type: ignore[union-attr]
            if c.owner_id == old_id:
                c.owner_id = new_id

    def public_state(self, room: Room) -> dict:
        state: LetterClaimState = room.state  # type: ignore[assignment]
        payload = {
            "grid": [
                {"id": c.id, "letter": c.letter, "ownerId": c.owner_id, "ownerTeam": c.owner_team}
                for c in state.grid
            ],
            "activeCellId": state.active_cell_id,
            "teamDirections": dict(TEAM_DIRECTIONS),
        }
        payload.update(self.buzzer_public_state(room))
        return payload
