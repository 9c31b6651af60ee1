import os

from pathlib import Path

from dotenv import load_dotenv

try:
    from backend.majlis import runtime
except ImportError:  # pragma: no cover
    from majlis import runtime


def main() -> None:
    load_dotenv(Path(__file__).resolve().parents[1] / ".env")
    runtime.configure_logging()

    if runtime.pick_async_mode(os.environ.get("SOCKETIO_ASYNC_MODE", "")) == "eventlet":
        import eventlet

        eventlet.monkey_patch()

    try:
        from backend.majlis.server import create_app
    except ImportError:  # pragma: no cover
        from majlis.server import create_app

    app, socketio = create_app()
    socketio.run(app, **runtime.run_options(os.environ))


if __name__ == "__main__":
    main()
