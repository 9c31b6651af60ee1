"""Question bank administration.

A single shared account. Login trades the configured credentials for the
process-wide bearer token; every other route requires that token.
"""

from __future__ import annotations

import hmac
import logging

from flask import Blueprint, current_app, jsonify, request

from ..game import service

bp = Blueprint("admin", __name__)

logger = logging.getLogger(__name__)


def _pool():
    return current_app.extensions["majlis"]["pool"]


def _authorized() -> bool:
    token = current_app.config.get("ADMIN_TOKEN", "")
    if not token:
        return False
    header = request.headers.get("Authorization", "")
    if not header.startswith("Bearer "):
        return False
    return hmac.compare_digest(header[len("Bearer "):].strip(), token)


@bp.post("/admin/login")
def admin_login():
    password = current_app.config.get("ADMIN_PASSWORD", "")
    if not password:
        return jsonify({"error": "login_disabled"}), 401

    data = request.get_json(silent=True) or {}
    username = str(data.get("username", ""))
    given = str(data.get("password", ""))
    if username != current_app.config.get("ADMIN_USERNAME", "admin") or not hmac.compare_digest(given, password):
        logger.warning("[admin-login] rejected user=%s", username)
        return jsonify({"error": "invalid_credentials"}), 401

    return jsonify({"token": current_app.config["ADMIN_TOKEN"]})


@bp.get("/admin/questions")
def admin_list_questions():
    if not _authorized():
        return jsonify({"error": "unauthorized"}), 401
    return jsonify({"questions": _pool().list_entries()})


@bp.post("/admin/questions")
def admin_add_question():
    if not _authorized():
        return jsonify({"error": "unauthorized"}), 401

    data = request.get_json(silent=True) or {}
    if not str(data.get("question", "")).strip():
        return jsonify({"error": "question_required"}), 400

    entry = _pool().add_entry(data)
    logger.info("[admin-add] id=%s category=%s", entry["id"], entry.get("category"))
    return jsonify(entry), 201


@bp.put("/admin/questions/<entry_id>")
def admin_update_question(entry_id: str):
    if not _authorized():
        return jsonify({"error": "unauthorized"}), 401

    data = request.get_json(silent=True) or {}
    entry = _pool().update_entry(entry_id, data)
    if entry is None:
        return jsonify({"error": "question_not_found"}), 404
    return jsonify(entry)


@bp.delete("/admin/questions/<entry_id>")
def admin_delete_question(entry_id: str):
    if not _authorized():
        return jsonify({"error": "unauthorized"}), 401

    if not _pool().delete_entry(entry_id):
        return jsonify({"error": "question_not_found"}), 404
    logger.info("[admin-delete] id=%s", entry_id)
    return jsonify({"ok": True})


@bp.get("/admin/rooms")
def admin_rooms():
    if not _authorized():
        return jsonify({"error": "unauthorized"}), 401

    store = current_app.extensions["majlis"]["store"]
    with store.lock:
        payload = [service.room_public_state(r) for r in store.list_rooms()]
    return jsonify({"rooms": payload})
