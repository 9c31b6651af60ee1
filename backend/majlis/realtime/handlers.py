from __future__ import annotations

import logging
from typing import Any, Callable

from flask import request
from flask_socketio import SocketIO, emit, join_room, leave_room

from ..game import service
from ..game.models import Room
from ..game.outcome import Outcome
from ..game.service import RoomStore
from . import events
from .scheduler import TimerScheduler


logger = logging.getLogger(__name__)


def _validate_name(name: str) -> bool:
    n = (name or "").strip()
    if not n:
        return False
    if len(n) > 24:
        return False
    # Avoid obvious HTML/script injection.
    if "<" in n or ">" in n:
        return False
    # No control characters.
    for ch in n:
        if ord(ch) < 32:
            return False
    return True


def _payload(data: Any) -> dict:
    # Older clients send the bare room id for payload-less intents.
    if isinstance(data, str):
        return {"roomId": data}
    if isinstance(data, dict):
        return data
    return {}


def _room_id(payload: dict) -> str:
    return str(payload.get("roomId", "")).strip()


def _as_int(raw: Any) -> int | None:
    if isinstance(raw, bool):
        return None
    try:
        return int(raw)
    except (TypeError, ValueError):
        return None


def register_socketio_handlers(
    socketio: SocketIO,
    store: RoomStore,
    scheduler: TimerScheduler,
    reconnect_grace_sec: int = 30,
) -> None:
    def _broadcast_room_state(room: Room) -> None:
        socketio.emit(events.ROOM_STATE, service.room_public_state(room), to=room.id)

    def _on_tick(room_id: str) -> bool:
        with store.lock:
            room = store.get_room(room_id)
            if room is None:
                return False
            if not service.tick(room):
                return False
            public_state = service.room_public_state(room)
            keep_going = service.is_timed(room)
        socketio.emit(events.ROOM_STATE, public_state, to=room_id)
        return keep_going

    def _sync_timer(room: Room) -> None:
        if service.is_timed(room):
            scheduler.ensure_ticker(room.id, _on_tick)
        else:
            scheduler.cancel(room.id)

    def _after_leave(room: Room) -> None:
        if store.discard_if_empty(room):
            # Nobody left to receive a game_over.
            scheduler.cancel(room.id)
            return
        _sync_timer(room)
        _broadcast_room_state(room)

    def _fail(event: str, error: str) -> dict:
        emit(event, {"error": error}, to=request.sid)
        return {"ok": False, "error": error}

    def _room_intent(data: Any, intent: str, op: Callable[[Room, dict], Outcome]) -> dict:
        payload = _payload(data)
        room_id = _room_id(payload)
        if not room_id:
            return _fail(events.GAME_ERROR, "invalid_payload")

        with store.lock:
            room = store.get_room(room_id)
            if not room:
                return _fail(events.ROOM_ERROR, "room_not_found")

            outcome = op(room, payload)
            if not outcome.ok:
                emit(events.GAME_ERROR, {"error": outcome.error, "intent": intent}, to=request.sid)
                return {"ok": False, "error": outcome.error}

            _sync_timer(room)
            _broadcast_room_state(room)
        return {"ok": True}

    def _expire_disconnected(room_id: str, player_key: str) -> None:
        with store.lock:
            room = store.get_room(room_id)
            if room is None:
                return
            player = next((p for p in room.players if p.player_key == player_key), None)
            if player is None or player.connected:
                return
            service.remove_player(room, player.id)
            _after_leave(room)

    def _join(payload: dict, create: bool) -> dict:
        room_id = _room_id(payload)
        name = str(payload.get("name", "")).strip()
        player_key = str(payload.get("playerKey", "")).strip()
        game_type = str(payload.get("gameType", "quiz_board")).strip()

        if not room_id or not _validate_name(name):
            return _fail(events.ROOM_ERROR, "invalid_payload")

        with store.lock:
            room = store.get_room(room_id)
            if room is None:
                if not create:
                    return _fail(events.ROOM_ERROR, "room_not_found")
                room = store.create_room(game_type, room_id=room_id)

            outcome = service.upsert_player(room, request.sid, name=name, player_key=player_key)
            if not outcome.ok or outcome.player is None:
                store.discard_if_empty(room)
                return _fail(events.ROOM_ERROR, outcome.error or "join_failed")

            player = outcome.player
            scheduler.cancel(("reconnect", room.id, player.player_key))
            join_room(room.id)
            emit(
                events.ROOM_JOINED,
                {"roomId": room.id, "playerId": player.id, "playerKey": player.player_key},
                to=request.sid,
            )
            _sync_timer(room)
            _broadcast_room_state(room)
        return {"ok": True, "playerId": player.id, "playerKey": player.player_key}

    @socketio.on(events.ROOM_CREATE)
    def room_create(data):
        payload = _payload(data)
        game_type = str(payload.get("gameType", "quiz_board")).strip()
        with store.lock:
            room = store.create_room(game_type, room_id=_room_id(payload) or None)
            if room.creator_id is None:
                room.creator_id = request.sid
        emit(events.ROOM_CREATED, {"roomId": room.id, "gameType": room.game_type}, to=request.sid)
        return {"ok": True, "roomId": room.id}

    @socketio.on(events.ROOM_JOIN)
    def room_join(data):
        return _join(_payload(data), create=True)

    @socketio.on(events.ROOM_REJOIN)
    def room_rejoin(data):
        return _join(_payload(data), create=False)

    @socketio.on(events.ROOM_LEAVE)
    def room_leave(data):
        payload = _payload(data)
        room_id = _room_id(payload)
        if not room_id:
            return {"ok": False, "error": "invalid_payload"}

        with store.lock:
            room = store.get_room(room_id)
            if not room:
                return {"ok": False, "error": "room_not_found"}

            leave_room(room_id)
            outcome = service.remove_player(room, request.sid)
            if not outcome.ok:
                return {"ok": False, "error": outcome.error}
            _after_leave(room)
        return {"ok": True}

    @socketio.on(events.ROOM_SETTINGS)
    def room_settings(data):
        return _room_intent(
            data,
            "update_settings",
            lambda room, p: service.update_settings(room, request.sid, p.get("questionCount"), store.pool),
        )

    @socketio.on(events.ROOM_STATUS)
    def room_status(data):
        payload = _payload(data)
        room_id = _room_id(payload)
        with store.lock:
            room = store.get_room(room_id) if room_id else None
            if not room:
                return {"ok": False, "error": "room_not_found"}
            public_state = service.room_public_state(room)
        emit(events.ROOM_STATE, public_state, to=request.sid)
        return {"ok": True}

    @socketio.on(events.GAME_START)
    def game_start(data):
        return _room_intent(data, "start", lambda room, p: service.start_game(room, request.sid))

    @socketio.on(events.GAME_PICK_CATEGORY)
    def game_pick_category(data):
        return _room_intent(
            data,
            "pick_category",
            lambda room, p: service.pick_category(room, request.sid, str(p.get("category", "")).strip()),
        )

    @socketio.on(events.GAME_PICK_LETTER)
    def game_pick_letter(data):
        return _room_intent(
            data,
            "pick_letter",
            lambda room, p: service.pick_letter(
                room,
                request.sid,
                cell_id=_as_int(p.get("cellId")),
                letter=str(p.get("letter", "")).strip() or None,
            ),
        )

    @socketio.on(events.GAME_PICK_VALUE)
    def game_pick_value(data):
        return _room_intent(
            data,
            "pick_value",
            lambda room, p: service.pick_value(room, request.sid, _as_int(p.get("value"))),
        )

    @socketio.on(events.GAME_BUZZ)
    def game_buzz(data):
        return _room_intent(data, "buzz", lambda room, p: service.buzz(room, request.sid))

    @socketio.on(events.GAME_SUBMIT_ANSWER)
    def game_submit_answer(data):
        return _room_intent(
            data,
            "submit_answer",
            lambda room, p: service.submit_answer(room, request.sid, str(p.get("answer", ""))),
        )

    @socketio.on(events.GAME_ANSWER_QUESTION)
    def game_answer_question(data):
        return _room_intent(
            data,
            "answer_question",
            lambda room, p: service.answer_question(room, request.sid, bool(p.get("isCorrect"))),
        )

    @socketio.on(events.GAME_CLOSE_FEEDBACK)
    def game_close_feedback(data):
        return _room_intent(data, "close_feedback", lambda room, p: service.close_feedback(room, request.sid))

    @socketio.on(events.GAME_FORFEIT)
    def game_forfeit(data):
        return _room_intent(data, "forfeit", lambda room, p: service.forfeit(room, request.sid))

    @socketio.on(events.ROUND_SUBMIT)
    def round_submit(data):
        def _op(room: Room, p: dict) -> Outcome:
            answers = p.get("answers")
            return service.submit_round(
                room,
                request.sid,
                answers if isinstance(answers, dict) else {},
                finished=bool(p.get("finished", True)),
            )

        return _room_intent(data, "submit_round", _op)

    @socketio.on(events.MEANING_SUBMIT)
    def meaning_submit(data):
        return _room_intent(
            data,
            "submit_meaning",
            lambda room, p: service.submit_meaning(room, request.sid, str(p.get("answer", ""))),
        )

    @socketio.on("disconnect")
    def on_disconnect(*args):
        sid = request.sid
        rooms = store.rooms_with_player(sid)
        logger.info("[disconnect] sid=%s rooms=%d grace=%s", sid, len(rooms), reconnect_grace_sec)
        for room in rooms:
            with store.lock:
                if reconnect_grace_sec <= 0:
                    service.remove_player(room, sid)
                    _after_leave(room)
                    continue

                player = service.mark_disconnected(room, sid)
                if player is None:
                    continue
                scheduler.call_later(
                    ("reconnect", room.id, player.player_key),
                    reconnect_grace_sec,
                    lambda rid=room.id, key=player.player_key: _expire_disconnected(rid, key),
                )
                _broadcast_room_state(room)
