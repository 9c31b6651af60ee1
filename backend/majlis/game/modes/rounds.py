from __future__ import annotations

import logging

from ..models import Room
from .base import GameMode, finish_game


logger = logging.getLogger(__name__)


class RoundMode(GameMode):
    """countdown -> round_active -> round_scoring, looping until the last round."""

    first_status = "countdown"

    def default_question_count(self, room_rules) -> int:
        return room_rules.default_round_count

    def start(self, room: Room) -> None:
        room.state.current_round = 1  # type: ignore[union-attr]
        self.start_countdown(room)

    def start_countdown(self, room: Room) -> None:
        room.status = "countdown"
        room.feedback = None
        room.timer = room.rules.countdown_sec
        if room.timer <= 0:
            self.begin_round(room)

    def begin_round(self, room: Room) -> None:
        raise NotImplementedError

    def on_round_expired(self, room: Room) -> None:
        raise NotImplementedError

    def after_scoring(self, room: Room) -> None:
        state = room.state
        room.feedback = None
        if state.current_round < state.round_count:  # type: ignore[union-attr]
            state.current_round += 1  # type: ignore[union-attr]
            self.start_countdown(room)
            return
        finish_game(room)

    def on_timer_expired(self, room: Room) -> None:
        if room.status == "countdown":
            self.begin_round(room)
        elif room.status == "round_active":
            self.on_round_expired(room)
        elif room.status == "round_scoring":
            self.after_scoring(room)

    def enter_scoring(self, room: Room, delay: int) -> None:
        room.status = "round_scoring"
        room.timer = delay
        logger.info("[round-scored] room=%s round=%s", room.id, room.state.current_round)  # type: ignore[union-attr]
