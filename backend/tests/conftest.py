import os
import random
import sys
import pytest

# Ensure the backend root (containing the `arena` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from config import Config
from arena import create_app, socketio
from arena.services.games import Room


class TestConfig(Config):
    TESTING = True
    SECRET_KEY = 'test-secret'
    # Tests drive ticks by hand
    START_TICK_LOOP = False
    ROOM_IDLE_TIMEOUT_SEC = 0
    STATIC_FOLDER = os.path.join(CURRENT_DIR, 'static')


class FakeClock:
    def __init__(self, now=1000.0):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


class Recorder:
    """Collects (event, payload) pairs handed to a room's broadcast."""

    def __init__(self):
        self.events = []

    def __call__(self, event, payload):
        self.events.append((event, payload))

    def named(self, name):
        return [payload for event, payload in self.events if event == name]

    def clear(self):
        self.events.clear()


@pytest.fixture()
def clock():
    return FakeClock()


@pytest.fixture()
def recorder():
    return Recorder()


@pytest.fixture()
def room(clock, recorder):
    return Room('test-room', recorder, clock=clock, rng=random.Random(7))


@pytest.fixture()
def flask_app():
    application = create_app(TestConfig)
    with application.app_context():
        yield application
    application.extensions['arena'].registry.shutdown()


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def sio_client(flask_app):
    test_client = socketio.test_client(
        flask_app,
        flask_test_client=flask_app.test_client(),
    )
    yield test_client
    try:
        test_client.disconnect()
    except Exception:
        pass
