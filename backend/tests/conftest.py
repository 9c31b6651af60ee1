import json
import os
import random
import sys

import pytest

# Ensure the backend root (containing the `majlis` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from majlis.config import Config
from majlis.game import service
from majlis.game.models import GameRules
from majlis.game.questions import QuestionPool
from majlis.game.service import RoomStore
from majlis.server import create_app


ENTRIES = [
    {"id": "h200", "category": "History", "value": 200, "question": "When did WWII end?", "answer": "1945"},
    {"id": "h400", "category": "History", "value": 400, "question": "Who built Machu Picchu?", "answer": "Inca"},
    {"id": "s200", "category": "Science", "value": 200, "question": "Symbol for gold?", "answer": "Au"},
    {"id": "s400", "category": "Science", "value": 400, "question": "The red planet?", "answer": "Mars"},
    {"id": "l1", "category": "حروف", "value": 100, "question": "عاصمة مصر", "answer": "القاهرة", "options": ["القاهرة", "القدس", "القصيم", "القطيف"]},
    {"id": "l2", "category": "حروف", "value": 100, "question": "سفينة الصحراء", "answer": "جمل", "options": ["جمل", "جدي", "جرو", "جاموس"]},
    {"id": "l3", "category": "حروف", "value": 100, "question": "ملك الغابة", "answer": "أسد", "options": ["أسد", "أرنب", "إوز", "أفعى"]},
    {"id": "m1", "category": "معاني", "value": 50, "question": "الغضنفر", "answer": "الأسد", "options": ["الذئب", "النسر", "الفهد"]},
    {"id": "m2", "category": "معاني", "value": 50, "question": "اليراع", "answer": "القلم", "options": ["السيف", "الكتاب", "الرمح"]},
    {"id": "m3", "category": "معاني", "value": 50, "question": "الدجى", "answer": "الظلام", "options": ["الفجر", "المطر", "الضباب"]},
]


class TestConfig(Config):
    TESTING = True
    SECRET_KEY = 'test-secret'
    SOCKETIO_ASYNC_MODE = 'threading'
    TRUST_PROXY_HEADERS = False
    ADMIN_USERNAME = 'admin'
    ADMIN_PASSWORD = 'secret'
    ADMIN_TOKEN = ''
    LUCK_PROBABILITY = 0.0
    MIN_PLAYERS = 1


@pytest.fixture()
def rules():
    return GameRules(luck_probability=0.0, countdown_sec=3, scoring_duration_sec=8, meaning_reveal_sec=4)


@pytest.fixture()
def rng():
    return random.Random(1234)


@pytest.fixture()
def questions_file(tmp_path):
    path = tmp_path / "questions.json"
    path.write_text(json.dumps(ENTRIES, ensure_ascii=False), encoding="utf-8")
    return path


@pytest.fixture()
def pool(questions_file):
    return QuestionPool.from_file(questions_file)


@pytest.fixture()
def store(pool, rules, rng):
    return RoomStore(pool, rules=rules, rng=rng)


@pytest.fixture()
def seat(store):
    """Create a room and sit players s1..sN in it."""

    def _seat(game_type, *names, room_id="R1"):
        room = store.create_room(game_type, room_id=room_id)
        for idx, name in enumerate(names, start=1):
            outcome = service.upsert_player(room, f"s{idx}", name)
            assert outcome.ok
        return room

    return _seat


@pytest.fixture()
def flask_app(questions_file):
    config = type("BoundTestConfig", (TestConfig,), {"QUESTIONS_PATH": str(questions_file)})
    application, socketio = create_app(config)
    application.extensions["test_socketio"] = socketio
    yield application


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def sio_client(flask_app):
    socketio = flask_app.extensions["test_socketio"]
    clients = []

    def _connect():
        test_client = socketio.test_client(flask_app, flask_test_client=flask_app.test_client())
        clients.append(test_client)
        return test_client

    yield _connect
    for test_client in clients:
        try:
            if test_client.is_connected():
                test_client.disconnect()
        except Exception:
            pass
