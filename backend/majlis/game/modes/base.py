from __future__ import annotations

import logging
import random
from dataclasses import asdict

from ..models import ModeState, Player, Room
from ..questions import QuestionPool


logger = logging.getLogger(__name__)


def top_scorer(players: list[Player]) -> Player | None:
    best: Player | None = None
    for p in players:
        if best is None or p.score > best.score:
            best = p
    return best


def winner_payload(player: Player | None = None, team: str | None = None) -> dict | None:
    if player is None and team is None:
        return None
    payload: dict = {"team": team if team is not None else (player.team if player else None)}
    if player is not None:
        payload.update({"playerId": player.id, "name": player.name, "score": player.score})
    return payload


def finish_game(room: Room, winner: dict | None = None) -> None:
    room.status = "game_over"
    room.timer = 0
    room.winner = winner if winner is not None else winner_payload(top_scorer(room.players))
    logger.info("[game-over] room=%s winner=%s", room.id, room.winner)


def next_turn_index(room: Room, team_mode: bool) -> int:
    """One step forward; in team modes skip to the next player of the other team when one exists."""
    n = len(room.players)
    if n == 0:
        return 0
    current = room.current_player_index % n
    step = (current + 1) % n
    if not team_mode:
        return step

    team = room.players[current].team
    for offset in range(1, n + 1):
        idx = (current + offset) % n
        if room.players[idx].team != team:
            return idx
    return step


class GameMode:
    """Rule set plugged into the room state machine."""

    game_type = ""
    team_mode = False
    # Status entered by `start`.
    first_status = "lobby"

    def build_state(self, pool: QuestionPool, question_count: int, rng: random.Random) -> ModeState:
        raise NotImplementedError

    def default_question_count(self, room_rules) -> int:
        return room_rules.default_question_count

    def start(self, room: Room) -> None:
        room.status = self.first_status

    def on_timer_expired(self, room: Room) -> None:
        pass

    def on_player_removed(self, room: Room, player: Player, held_turn: bool) -> None:
        pass

    def rebind_player(self, room: Room, old_id: str, new_id: str) -> None:
        pass

    def is_exhausted(self, room: Room) -> bool:
        return False

    def public_state(self, room: Room) -> dict:
        return {}


def result_dict(result) -> dict:
    return asdict(result)
