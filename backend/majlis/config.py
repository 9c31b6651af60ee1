import os
from pathlib import Path


class Config:
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev")

    # CORS
    CORS_ORIGINS = os.environ.get("CORS_ORIGINS", "*")

    # Reverse proxy / IP headers
    TRUST_PROXY_HEADERS = os.environ.get("TRUST_PROXY_HEADERS", "1") == "1"

    SOCKETIO_ASYNC_MODE = os.environ.get("SOCKETIO_ASYNC_MODE", "").strip()

    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")

    # Admin (shared secret; an empty password disables login)
    ADMIN_USERNAME = os.environ.get("ADMIN_USERNAME", "admin")
    ADMIN_PASSWORD = os.environ.get("ADMIN_PASSWORD", "")
    ADMIN_TOKEN = os.environ.get("ADMIN_TOKEN", "")

    # Question pool
    QUESTIONS_PATH = os.environ.get(
        "QUESTIONS_PATH",
        str(Path(__file__).resolve().parent / "data" / "questions.json"),
    )
    LETTER_CATEGORY = os.environ.get("LETTER_CATEGORY", "حروف")
    MEANING_CATEGORY = os.environ.get("MEANING_CATEGORY", "معاني")

    # Game
    MIN_PLAYERS = int(os.environ.get("MIN_PLAYERS", "1"))
    DEFAULT_QUESTION_COUNT = int(os.environ.get("DEFAULT_QUESTION_COUNT", "5"))
    DEFAULT_ROUND_COUNT = int(os.environ.get("DEFAULT_ROUND_COUNT", "5"))
    QUESTION_DURATION_SEC = int(os.environ.get("QUESTION_DURATION_SEC", "15"))
    RETRY_DURATION_SEC = int(os.environ.get("RETRY_DURATION_SEC", "10"))
    COUNTDOWN_SEC = int(os.environ.get("COUNTDOWN_SEC", "3"))
    WORD_ROUND_DURATION_SEC = int(os.environ.get("WORD_ROUND_DURATION_SEC", "60"))
    WORD_ROUND_GRACE_SEC = int(os.environ.get("WORD_ROUND_GRACE_SEC", "2"))
    MEANING_DURATION_SEC = int(os.environ.get("MEANING_DURATION_SEC", "15"))
    SCORING_DURATION_SEC = int(os.environ.get("SCORING_DURATION_SEC", "8"))
    MEANING_REVEAL_SEC = int(os.environ.get("MEANING_REVEAL_SEC", "4"))
    MEANING_POINTS = int(os.environ.get("MEANING_POINTS", "50"))
    LETTER_POINTS = int(os.environ.get("LETTER_POINTS", "100"))
    LUCK_PROBABILITY = float(os.environ.get("LUCK_PROBABILITY", "0.1"))
    RECONNECT_GRACE_SEC = int(os.environ.get("RECONNECT_GRACE_SEC", "30"))
