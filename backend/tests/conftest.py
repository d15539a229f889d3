import os
import sys
import pytest

# Ensure the backend root (containing the `poker` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from poker import create_app, socketio
from poker.services.sessions import ReconnectionSupervisor, SessionCoordinator, SessionRegistry


class TestConfig:
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    CORS_ALLOWED_ORIGINS = ['http://localhost:3000']
    SOCKETIO_NAMESPACE = '/ws'
    DISCONNECT_GRACE_SEC = 0.2
    SESSION_ID_LENGTH = 8
    VOTE_VALUES = [1, 2, 3, 5, 8, 13, 20, 40, 100]
    STRICT_VOTE_VALUES = False


class RecordingBroadcaster:
    """Collects what would have gone out over Socket.IO."""

    def __init__(self):
        self.published = []
        self.sent = []
        self.rooms = {}
        self.closed = []

    def attach(self, handle, session_id):
        self.rooms.setdefault(session_id, set()).add(handle)

    def detach(self, handle, session_id):
        self.rooms.get(session_id, set()).discard(handle)

    def publish(self, session_id, snapshot):
        self.published.append((session_id, snapshot))

    def send(self, handle, event, payload):
        self.sent.append((handle, event, payload))

    def close(self, session_id):
        self.closed.append(session_id)
        self.rooms.pop(session_id, None)

    @property
    def last(self):
        return self.published[-1][1] if self.published else None


class ManualScheduler:
    """Holds background tasks until a test runs them; sleeping is a no-op."""

    def __init__(self):
        self.tasks = []

    def start_task(self, target, *args):
        self.tasks.append((target, args))

    def sleep(self, seconds):
        pass

    def run_all(self):
        tasks, self.tasks = self.tasks, []
        for target, args in tasks:
            target(*args)
        return len(tasks)


@pytest.fixture()
def flask_app():
    application = create_app(TestConfig)
    with application.app_context():
        yield application


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def sio_client(flask_app):
    test_client = socketio.test_client(
        flask_app,
        flask_test_client=flask_app.test_client(),
        namespace='/ws'
    )
    yield test_client
    try:
        test_client.disconnect(namespace='/ws')
    except Exception:
        pass


@pytest.fixture()
def scheduler():
    return ManualScheduler()


@pytest.fixture()
def broadcaster():
    return RecordingBroadcaster()


@pytest.fixture()
def coordinator(broadcaster, scheduler):
    supervisor = ReconnectionSupervisor(
        grace_period=30,
        start_task=scheduler.start_task,
        sleep=scheduler.sleep,
    )
    return SessionCoordinator(SessionRegistry(), broadcaster, supervisor)
