from __future__ import annotations

import logging
import random
import secrets
import uuid
from dataclasses import asdict
from threading import RLock

from .models import GAME_TYPES, TEAMS, TIMED_STATUSES, Feedback, GameRules, Player, Room
from .modes import GameMode, get_mode
from .modes.base import finish_game, top_scorer, winner_payload
from .outcome import Outcome, accept, reject
from .questions import QuestionPool


logger = logging.getLogger(__name__)

MIN_QUESTION_COUNT = 1
MAX_QUESTION_COUNT = 20


class RoomStore:
    """Owns every live room. One instance per app (or per test)."""

    def __init__(
        self,
        pool: QuestionPool,
        rules: GameRules | None = None,
        rng: random.Random | None = None,
    ) -> None:
        self.lock = RLock()
        self.pool = pool
        self.rules = rules or GameRules()
        self._rng = rng or random.Random()
        self._rooms: dict[str, Room] = {}

    def create_room(self, game_type: str = "quiz_board", room_id: str | None = None) -> Room:
        with self.lock:
            code = (room_id or "").strip()
            if not code:
                code = uuid.uuid4().hex
                while code in self._rooms:
                    code = uuid.uuid4().hex
            elif code in self._rooms:
                return self._rooms[code]

            if game_type not in GAME_TYPES:
                game_type = "quiz_board"
            mode = get_mode(game_type)
            rng = random.Random(self._rng.getrandbits(64))
            count = mode.default_question_count(self.rules)
            room = Room(
                id=code,
                game_type=game_type,  # type: ignore[arg-type]
                state=mode.build_state(self.pool, count, rng),
                rules=self.rules,
                rng=rng,
                question_count=count,
            )
            self._rooms[code] = room
            logger.info("[room-create] room=%s type=%s", code, game_type)
            return room

    def get_room(self, code: str) -> Room | None:
        with self.lock:
            return self._rooms.get(code)

    def delete_room(self, code: str) -> bool:
        with self.lock:
            if code in self._rooms:
                del self._rooms[code]
                logger.info("[room-delete] room=%s", code)
                return True
            return False

    def discard_if_empty(self, room: Room) -> bool:
        with self.lock:
            if room.players:
                return False
            return self.delete_room(room.id)

    def list_rooms(self) -> list[Room]:
        with self.lock:
            return list(self._rooms.values())

    def rooms_with_player(self, socket_id: str) -> list[Room]:
        with self.lock:
            return [r for r in self._rooms.values() if r.find_player(socket_id)]


def mode_of(room: Room) -> GameMode:
    return get_mode(room.game_type)


def is_timed(room: Room) -> bool:
    return room.status in TIMED_STATUSES


# --- membership ---


def _rebind(room: Room, player: Player, socket_id: str) -> None:
    old_sid = player.id
    if old_sid == socket_id:
        return
    player.id = socket_id
    if room.creator_id == old_sid:
        room.creator_id = socket_id
    mode_of(room).rebind_player(room, old_sid, socket_id)
    logger.info("[rebind] room=%s player=%s old=%s new=%s", room.id, player.name, old_sid, socket_id)


def upsert_player(room: Room, socket_id: str, name: str, player_key: str = "") -> Outcome:
    """Join, or re-bind an existing player matched by key first and name second."""
    pk = (player_key or "").strip()
    name = (name or "").strip()

    player = room.find_player(socket_id)
    if player is not None:
        player.connected = True
        return accept(player)

    existing = None
    if pk:
        existing = next((p for p in room.players if p.player_key == pk), None)
    if existing is None:
        by_name = room.find_player_by_name(name)
        if by_name is not None:
            if pk and by_name.player_key and by_name.player_key != pk:
                return reject(room, "join", "name_taken")
            existing = by_name

    if existing is not None:
        _rebind(room, existing, socket_id)
        existing.connected = True
        return accept(existing)

    mode = mode_of(room)
    player = Player(
        id=socket_id,
        name=name,
        number=len(room.players) + 1,
        team=TEAMS[len(room.players) % 2] if mode.team_mode else None,  # type: ignore[arg-type]
        player_key=secrets.token_urlsafe(12),
    )
    room.players.append(player)
    if room.creator_id is None:
        room.creator_id = socket_id
    logger.info("[join] room=%s player=%s number=%d team=%s", room.id, name, player.number, player.team)
    return accept(player)


def mark_disconnected(room: Room, socket_id: str) -> Player | None:
    player = room.find_player(socket_id)
    if player is not None:
        player.connected = False
    return player


def remove_player(room: Room, socket_id: str) -> Outcome:
    """Disconnect cleanup: drop the player and keep the turn pointing at the same person."""
    idx = next((i for i, p in enumerate(room.players) if p.id == socket_id), None)
    if idx is None:
        return reject(room, "leave", "not_in_room")

    n = len(room.players)
    current = room.current_player_index % n
    held_turn = idx == current
    player = room.players.pop(idx)

    if room.players:
        if current > idx:
            room.current_player_index = current - 1
        elif held_turn:
            room.current_player_index = 0
        for number, p in enumerate(room.players, start=1):
            p.number = number
        if room.creator_id == socket_id:
            room.creator_id = room.players[0].id
        mode_of(room).on_player_removed(room, player, held_turn)
    else:
        room.current_player_index = 0

    logger.info("[leave] room=%s player=%s remaining=%d", room.id, player.name, len(room.players))
    return accept(player)


# --- lobby ---


def update_settings(room: Room, socket_id: str, question_count, pool: QuestionPool) -> Outcome:
    if room.status != "lobby":
        return reject(room, "update_settings", "wrong_phase")
    if socket_id != room.host_id:
        return reject(room, "update_settings", "only_owner")
    try:
        count = int(question_count)
    except (TypeError, ValueError):
        return reject(room, "update_settings", "invalid_count")
    if count < MIN_QUESTION_COUNT or count > MAX_QUESTION_COUNT:
        return reject(room, "update_settings", "invalid_count")

    room.question_count = count
    room.state = mode_of(room).build_state(pool, count, room.rng)
    return accept()


def start_game(room: Room, socket_id: str) -> Outcome:
    if room.status != "lobby":
        return reject(room, "start", "wrong_phase")
    if socket_id != room.host_id:
        return reject(room, "start", "only_owner")
    if len(room.players) < room.rules.min_players:
        return reject(room, "start", "not_enough_players")

    mode = mode_of(room)
    if mode.is_exhausted(room):
        return reject(room, "start", "no_questions")

    room.current_player_index = 0
    room.winner = None
    room.feedback = None
    mode.start(room)
    logger.info("[start] room=%s type=%s status=%s", room.id, room.game_type, room.status)
    return accept()


# --- in-game intents ---


def _dispatch(room: Room, socket_id: str, intent: str, method: str, *args, **kwargs) -> Outcome:
    player = room.find_player(socket_id)
    if player is None:
        return reject(room, intent, "not_in_room")
    handler = getattr(mode_of(room), method, None)
    if handler is None:
        return reject(room, intent, "unsupported_intent")
    return handler(room, player, *args, **kwargs)


def pick_category(room: Room, socket_id: str, category: str) -> Outcome:
    return _dispatch(room, socket_id, "pick_category", "pick_category", category)


def pick_letter(room: Room, socket_id: str, cell_id=None, letter: str | None = None) -> Outcome:
    return _dispatch(room, socket_id, "pick_letter", "pick_letter", cell_id=cell_id, letter=letter)


def pick_value(room: Room, socket_id: str, value: int) -> Outcome:
    return _dispatch(room, socket_id, "pick_value", "pick_value", value)


def buzz(room: Room, socket_id: str) -> Outcome:
    return _dispatch(room, socket_id, "buzz", "buzz")


def submit_answer(room: Room, socket_id: str, answer: str) -> Outcome:
    return _dispatch(room, socket_id, "submit_answer", "submit_answer", answer)


def submit_round(room: Room, socket_id: str, answers: dict, finished: bool = True) -> Outcome:
    return _dispatch(room, socket_id, "submit_round", "submit_round", answers, finished=finished)


def submit_meaning(room: Room, socket_id: str, answer: str) -> Outcome:
    return _dispatch(room, socket_id, "submit_meaning", "submit_meaning", answer)


def answer_question(room: Room, socket_id: str, is_correct: bool) -> Outcome:
    if socket_id != room.host_id:
        return reject(room, "answer_question", "only_owner")
    mode = mode_of(room)
    if not hasattr(mode, "answer_question"):
        return reject(room, "answer_question", "unsupported_intent")
    return mode.answer_question(room, bool(is_correct), kind="override")  # type: ignore[attr-defined]


def close_feedback(room: Room, socket_id: str) -> Outcome:
    if room.find_player(socket_id) is None:
        return reject(room, "close_feedback", "not_in_room")
    mode = mode_of(room)
    if not hasattr(mode, "close_feedback"):
        return reject(room, "close_feedback", "unsupported_intent")
    return mode.close_feedback(room)  # type: ignore[attr-defined]


def forfeit(room: Room, socket_id: str) -> Outcome:
    """End early; the best of the remaining players wins, else the best overall."""
    player = room.find_player(socket_id)
    if player is None:
        return reject(room, "forfeit", "not_in_room")
    if room.status in ("lobby", "game_over"):
        return reject(room, "forfeit", "wrong_phase")

    others = [p for p in room.players if p.id != socket_id]
    best = top_scorer(others) or top_scorer(room.players)
    room.feedback = Feedback(kind="forfeit", message=f"{player.name} forfeited.", player_id=player.id)
    finish_game(room, winner_payload(best))
    return accept(player)


def tick(room: Room) -> bool:
    """One scheduler second. Returns False when the room is in an untimed phase."""
    if not is_timed(room):
        return False
    if room.timer > 0:
        room.timer -= 1
        if room.timer > 0:
            return True
    mode_of(room).on_timer_expired(room)
    return True


# --- snapshot ---


def room_public_state(room: Room) -> dict:
    """Full room view for every member. Answers of open questions and player keys stay server-side."""
    players = []
    for p in room.players:
        d = asdict(p)
        d.pop("player_key", None)
        players.append(d)

    payload = {
        "id": room.id,
        "gameType": room.game_type,
        "status": room.status,
        "creatorId": room.host_id,
        "players": players,
        "currentPlayerIndex": room.current_player_index,
        "questionCount": room.question_count,
        "timer": room.timer,
        "feedback": asdict(room.feedback) if room.feedback else None,
        "winner": room.winner,
    }
    payload.update(mode_of(room).public_state(room))
    return payload
