import os
import sys
import pytest

# Ensure the backend root (containing the `puzzle_room` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from puzzle_room import create_app, socketio
from puzzle_room.models import Piece


class TestConfig:
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    ENVIRONMENT = 'test'
    APP_VERSION = '1.0.0'
    CORS_ORIGINS = '*'
    SOCKETIO_NAMESPACE = '/'
    ROOM_CLEANUP_DELAY_SEC = 60
    DEFAULT_DIFFICULTY = 'medium'


class ManualTasks:
    """Collects background tasks so tests decide when a timer fires."""

    def __init__(self):
        self.calls = []

    def start(self, fn, *args, **kwargs):
        self.calls.append((fn, args, kwargs))

    def run_all(self):
        calls, self.calls = self.calls, []
        for fn, args, kwargs in calls:
            fn(*args, **kwargs)
        return len(calls)


def solved_pieces(total):
    return [Piece(id=f"piece{i}", position=i, correct_position=i, content=str(i)) for i in range(total)]


@pytest.fixture()
def tasks():
    return ManualTasks()


@pytest.fixture()
def flask_app(tasks):
    application = create_app(TestConfig)
    cleanup = application.extensions['puzzle_cleanup']
    cleanup.start_task = tasks.start
    cleanup.sleep = lambda seconds: None
    with application.app_context():
        yield application
    application.extensions['puzzle_rooms'].clear()


@pytest.fixture()
def registry(flask_app):
    return flask_app.extensions['puzzle_rooms']


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def sio_client(flask_app):
    test_client = socketio.test_client(flask_app, flask_test_client=flask_app.test_client())
    yield test_client
    try:
        if test_client.is_connected():
            test_client.disconnect()
    except Exception:
        pass


@pytest.fixture()
def make_client(flask_app):
    """Factory for extra Socket.IO clients; all are disconnected at teardown."""
    created = []

    def _make():
        c = socketio.test_client(flask_app)
        c.get_received()
        created.append(c)
        return c

    yield _make
    for c in created:
        try:
            if c.is_connected():
                c.disconnect()
        except Exception:
            pass
