from __future__ import annotations

from flask import Blueprint, current_app, jsonify, request

from ..game import service

bp = Blueprint("rooms", __name__)


def _store() -> service.RoomStore:
    return current_app.extensions["majlis"]["store"]


@bp.post("/rooms")
def create_room():
    # Created without an owner; the first socket to join becomes the host.
    data = request.get_json(silent=True) or {}
    game_type = str(data.get("gameType", "quiz_board")).strip()
    room = _store().create_room(game_type)
    return jsonify({"roomId": room.id, "gameType": room.game_type})


@bp.get("/rooms/<room_id>")
def get_room(room_id: str):
    store = _store()
    with store.lock:
        room = store.get_room(room_id)
        if not room:
            return jsonify({"error": "room_not_found"}), 404
        return jsonify(service.room_public_state(room))
