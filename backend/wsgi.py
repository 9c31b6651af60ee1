try:
    from backend.majlis import runtime
    from backend.majlis.server import create_app
except ImportError:  # pragma: no cover
    from majlis import runtime
    from majlis.server import create_app

runtime.configure_logging()

app, socketio = create_app()
