from __future__ import annotations

import logging
import secrets
from pathlib import Path

from flask import Flask, send_from_directory
from flask_cors import CORS
from flask_socketio import SocketIO
from werkzeug.middleware.proxy_fix import ProxyFix

from .config import Config
from .game.models import GameRules
from .game.questions import QuestionPool
from .game.service import RoomStore
from .realtime.handlers import register_socketio_handlers
from .realtime.scheduler import TimerScheduler
from .routes.admin import bp as admin_bp
from .routes.health import bp as health_bp
from .routes.rooms import bp as rooms_bp
from .runtime import pick_async_mode


logger = logging.getLogger(__name__)


def create_app(config_class=Config) -> tuple[Flask, SocketIO]:
    dist_dir = Path(__file__).resolve().parents[2] / "frontend" / "dist"

    static_folder = str(dist_dir) if dist_dir.exists() else None
    static_url_path = "/" if dist_dir.exists() else None

    app = Flask(
        __name__,
        static_folder=static_folder,
        static_url_path=static_url_path,
    )
    app.config.from_object(config_class)

    if app.config.get("TRUST_PROXY_HEADERS", False):
        app.wsgi_app = ProxyFix(app.wsgi_app, x_for=1, x_proto=1, x_host=1, x_port=1)

    cors_origins = app.config.get("CORS_ORIGINS", "*")
    CORS(app, resources={r"/api/*": {"origins": cors_origins}})

    socketio = SocketIO(
        app,
        cors_allowed_origins=cors_origins,
        async_mode=pick_async_mode(app.config.get("SOCKETIO_ASYNC_MODE", "")),
    )

    if not app.config.get("ADMIN_TOKEN"):
        app.config["ADMIN_TOKEN"] = secrets.token_urlsafe(24)

    pool = QuestionPool.from_file(
        app.config["QUESTIONS_PATH"],
        letter_category=app.config["LETTER_CATEGORY"],
        meaning_category=app.config["MEANING_CATEGORY"],
    )
    store = RoomStore(pool, rules=GameRules.from_config(config_class))
    scheduler = TimerScheduler(
        socketio.start_background_task,
        socketio.sleep,
        enabled=not app.config.get("TESTING", False),
    )
    app.extensions["majlis"] = {"store": store, "pool": pool, "scheduler": scheduler}

    app.register_blueprint(health_bp, url_prefix="/api")
    app.register_blueprint(rooms_bp, url_prefix="/api")
    app.register_blueprint(admin_bp, url_prefix="/api")

    register_socketio_handlers(
        socketio,
        store,
        scheduler,
        reconnect_grace_sec=app.config.get("RECONNECT_GRACE_SEC", 30),
    )
    logger.info("[startup] async_mode=%s questions=%d", socketio.async_mode, len(pool.list_entries()))

    if dist_dir.exists():
        @app.get("/")
        def index():
            return send_from_directory(dist_dir, "index.html")

        @app.get("/<path:path>")
        def static_proxy(path: str):
            file_path = dist_dir / path
            if file_path.exists() and file_path.is_file():
                return send_from_directory(dist_dir, path)
            return send_from_directory(dist_dir, "index.html")

    return app, socketio
