from __future__ import annotations

import random
from collections import Counter

from ..grid import ALPHABET
from ..models import Player, Room, RoundResult, WordBuilderState
from ..normalize import normalize_arabic, starts_with_letter
from ..outcome import Outcome, accept, reject
from ..questions import QuestionPool
from .base import result_dict
from .rounds import RoundMode


CATEGORIES: tuple[str, ...] = ("girl", "boy", "thing", "food", "animal", "location")

UNIQUE_POINTS = 10
SHARED_POINTS = 5
MIN_ANSWER_LEN = 2
MAX_ANSWER_LEN = 64

# No everyday words open with a bare hamza.
ROUND_LETTERS = tuple(ch for ch in ALPHABET if ch != "ء")


def valid_answer(answer: str | None, letter: str | None) -> str | None:
    """Normalized answer when it counts for `letter`, else None."""
    n = normalize_arabic(answer)
    if len(n) < MIN_ANSWER_LEN or not starts_with_letter(n, letter):
        return None
    return n


def score_submissions(submissions: dict[str, dict[str, str]], letter: str | None, player_ids: list[str]) -> dict[str, int]:
    """10 points for a unique answer, 5 for a shared one, 0 for missing or invalid."""
    scores = {pid: 0 for pid in player_ids}
    for pid in submissions:
        scores.setdefault(pid, 0)

    for category in CATEGORIES:
        normalized = {
            pid: valid_answer(answers.get(category), letter) for pid, answers in submissions.items()
        }
        counts = Counter(n for n in normalized.values() if n)
        for pid, n in normalized.items():
            if not n:
                continue
            scores[pid] += UNIQUE_POINTS if counts[n] == 1 else SHARED_POINTS
    return scores


class WordBuilderMode(RoundMode):
    """Free-text categories that must start with the round's letter."""

    game_type = "word_builder"

    def build_state(self, pool: QuestionPool, question_count: int, rng: random.Random) -> WordBuilderState:
        return WordBuilderState(round_count=question_count)

    def begin_round(self, room: Room) -> None:
        state: WordBuilderState = room.state  # type: ignore[assignment]
        remaining = [ch for ch in ROUND_LETTERS if ch not in state.used_letters]
        if not remaining:
            remaining = list(ROUND_LETTERS)
        state.current_letter = room.rng.choice(remaining)
        state.used_letters.append(state.current_letter)
        state.round_submissions[state.current_round] = {}
        state.closing = False
        room.status = "round_active"
        room.timer = room.rules.word_round_duration_sec

    def _submissions(self, room: Room) -> dict[str, dict[str, str]]:
        state: WordBuilderState = room.state  # type: ignore[assignment]
        return state.round_submissions.setdefault(state.current_round, {})

    def _all_submitted(self, room: Room) -> bool:
        subs = self._submissions(room)
        return bool(room.players) and all(p.id in subs for p in room.players)

    def submit_round(self, room: Room, player: Player, answers: dict, finished: bool = True) -> Outcome:
        state: WordBuilderState = room.state  # type: ignore[assignment]
        if room.status != "round_active":
            return reject(room, "submit_round", "wrong_phase")
        subs = self._submissions(room)
        if player.id in subs:
            return reject(room, "submit_round", "already_submitted")

        subs[player.id] = {
            cat: str(answers.get(cat) or "").strip()[:MAX_ANSWER_LEN] for cat in CATEGORIES
        }

        if self._all_submitted(room):
            self.score_round(room)
            return accept(player)

        if finished and not state.closing:
            # First finisher cuts the clock down to the grace period.
            state.closing = True
            room.timer = min(room.timer, room.rules.word_round_grace_sec)
        return accept(player)

    def on_round_expired(self, room: Room) -> None:
        state: WordBuilderState = room.state  # type: ignore[assignment]
        if not state.closing and room.rules.word_round_grace_sec > 0:
            state.closing = True
            room.timer = room.rules.word_round_grace_sec
            return
        self.score_round(room)

    def score_round(self, room: Room) -> None:
        state: WordBuilderState = room.state  # type: ignore[assignment]
        subs = self._submissions(room)
        scores = score_submissions(subs, state.current_letter, [p.id for p in room.players])
        for p in room.players:
            p.score += scores.get(p.id, 0)

        state.round_results.append(
            RoundResult(
                round=state.current_round,
                letter=state.current_letter,
                submissions={pid: dict(a) for pid, a in subs.items()},
                scores=scores,
            )
        )
        state.closing = False
        self.enter_scoring(room, room.rules.scoring_duration_sec)

    def on_player_removed(self, room: Room, player: Player, held_turn: bool) -> None:
        if room.status == "round_active" and self._all_submitted(room):
            self.score_round(room)

    def rebind_player(self, room: Room, old_id: str, new_id: str) -> None:
        state: WordBuilderState = room.state  # type: ignore[assignment]
        for subs in state.round_submissions.values():
            if old_id in subs:
                subs[new_id] = subs.pop(old_id)
        for result in state.round_results:
            if old_id in result.submissions:
                result.submissions[new_id] = result.submissions.pop(old_id)
            if old_id in result.scores:
                result.scores[new_id] = result.scores.pop(old_id)

    def public_state(self, room: Room) -> dict:
        state: WordBuilderState = room.state  # type: ignore[assignment]
        return {
            "categories": list(CATEGORIES),
            "currentRound": state.current_round,
            "roundCount": state.round_count,
            "currentLetter": state.current_letter,
            "usedLetters": list(state.used_letters),
            "submittedPlayerIds": sorted(state.round_submissions.get(state.current_round, {})),
            "closing": state.closing,
            "roundResults": [result_dict(r) for r in state.round_results],
        }
