import os
import sys
import pytest

# Ensure the backend root (containing the `app` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from app import create_app, socketio
from app.services.puck import Match


class TestConfig:
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    CORS_ALLOWED_ORIGINS = ['http://localhost:3000']
    TICK_RATE_HZ = 60
    WIN_SCORE = 10
    JOLT_COOLDOWN_SEC = 1.0
    SPEED_PENALTY_SEC = 1.5
    # Tests call Match.tick() themselves
    TICK_LOOP_ENABLED = False


class RecordingBroadcaster:
    """Collects emits as (audience, sid, event, payload) tuples."""

    def __init__(self):
        self.events = []

    def emit_all(self, event, payload):
        self.events.append(('all', None, event, payload))

    def emit_to(self, sid, event, payload):
        self.events.append(('to', sid, event, payload))

    def emit_others(self, sid, event, payload):
        self.events.append(('others', sid, event, payload))

    def named(self, event):
        return [e for e in self.events if e[2] == event]

    def clear(self):
        self.events = []


class ManualScheduler:
    """Holds delayed callbacks until the test fires them."""

    def __init__(self):
        self.pending = []

    def call_later(self, delay, callback, *args):
        self.pending.append((delay, callback, args))

    def run_every(self, interval, callback, logger):
        raise AssertionError('tick loop must not start in tests')

    def fire(self, count=None):
        if count is None:
            count = len(self.pending)
        batch, self.pending = self.pending[:count], self.pending[count:]
        for _delay, callback, args in batch:
            callback(*args)


class FakeClock:
    def __init__(self, now=1000.0):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


@pytest.fixture()
def broadcaster():
    return RecordingBroadcaster()


@pytest.fixture()
def scheduler():
    return ManualScheduler()


@pytest.fixture()
def clock():
    return FakeClock()


@pytest.fixture()
def match(broadcaster, scheduler, clock):
    return Match(broadcaster, scheduler, clock=clock)


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
    )
    yield test_client
    try:
        test_client.disconnect()
    except Exception:
        pass
