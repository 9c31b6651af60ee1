"""Process-level startup helpers shared by the dev server and the WSGI entry.

Nothing here imports Flask, so `app.py` can decide on eventlet patching
before the web stack is loaded.
"""

from __future__ import annotations

import logging
import os
import sys
from typing import Mapping


LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"


def pick_async_mode(configured: str = "", platform: str | None = None, version: tuple | None = None) -> str:
    mode = (configured or "").strip()
    if mode:
        return mode
    platform = platform or sys.platform
    version = version or sys.version_info[:2]
    # eventlet is unreliable on Windows and on Python >= 3.13.
    if platform.startswith("win") or tuple(version) >= (3, 13):
        return "threading"
    return "eventlet"


def configure_logging(level: str | None = None) -> None:
    name = (level or os.environ.get("LOG_LEVEL") or "INFO").upper()
    logging.basicConfig(level=getattr(logging, name, logging.INFO), format=LOG_FORMAT)


def _flag(environ: Mapping[str, str], key: str, default: str) -> bool:
    return environ.get(key, default) == "1"


def run_options(environ: Mapping[str, str]) -> dict:
    """Keyword arguments for `socketio.run` in the dev server."""
    return {
        "host": environ.get("HOST", "0.0.0.0"),
        "port": int(environ.get("PORT", "5000")),
        "debug": _flag(environ, "FLASK_DEBUG", "1"),
        "allow_unsafe_werkzeug": _flag(environ, "ALLOW_UNSAFE_WERKZEUG", "1"),
        "use_reloader": _flag(environ, "FLASK_USE_RELOADER", "0"),
    }
