"""
Shared pytest fixtures.

MongoDB is replaced by mongomock, the clock is a controllable fake and
timers never fire on their own, so every test is deterministic.
"""
import os

os.environ.setdefault('JWT_SECRET', 'test-secret')
os.environ.setdefault('FLASK_ENV', 'development')
os.environ.setdefault('LOG_LEVEL', 'WARNING')

import gridfs
import mongomock
import pytest

from rehab_server.realtime.subscriptions import get_subscription_hub, reset_subscription_hub
from rehab_server.repository.mongo_helper import MongoRepositorySingleton
from rehab_server.security.authentication import AuthSecurity
from rehab_server.security.session import Session
from rehab_server.services import reset_services

BASE_TIME_MS = 1_700_000_000_000


class FakeClock:
    def __init__(self, now_ms=BASE_TIME_MS):
        self.now_ms = now_ms

    def __call__(self):
        return self.now_ms

    def advance(self, ms=1):
        self.now_ms += ms
        return self.now_ms


class FakeTimer:
    """threading.Timer stand-in that only fires when told to."""

    created = []

    def __init__(self, interval, function, args=None, kwargs=None):
        self.interval = interval
        self.function = function
        self.args = args or ()
        self.kwargs = kwargs or {}
        self.started = False
        self.cancelled = False
        self.daemon = False
        FakeTimer.created.append(self)

    def start(self):
        self.started = True

    def cancel(self):
        self.cancelled = True

    def fire(self):
        self.function(*self.args, **self.kwargs)


class FakeGridOut:
    def __init__(self, data, content_type):
        self._data = data
        self.content_type = content_type

    def read(self):
        return self._data


class FakeFS:
    """Minimal GridFS double: put / get_last_version by filename."""

    def __init__(self):
        self.files = {}

    def put(self, data, filename=None, content_type=None):
        self.files[filename] = FakeGridOut(data, content_type)
        return filename

    def get_last_version(self, filename=None):
        if filename not in self.files:
            raise gridfs.errors.NoFile(filename)
        return self.files[filename]


@pytest.fixture
def db():
    database = mongomock.MongoClient().rehab_test
    MongoRepositorySingleton.set_db(database)
    reset_services()
    reset_subscription_hub()
    yield database
    MongoRepositorySingleton.reset()
    reset_services()
    reset_subscription_hub()


@pytest.fixture
def repos(db):
    return MongoRepositorySingleton.get_instance()


@pytest.fixture
def hub(db):
    return get_subscription_hub()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def fake_timer():
    FakeTimer.created = []
    return FakeTimer


@pytest.fixture
def alice():
    return Session('alice', 'Alice')


@pytest.fixture
def bob():
    return Session('bob', 'Bob')


@pytest.fixture
def carol():
    return Session('carol', 'Carol')


@pytest.fixture
def make_token():
    AuthSecurity.configure(os.environ['JWT_SECRET'])

    def _make(user_key, name=None):
        payload = {'user_key': user_key}
        if name:
            payload['name'] = name
        return AuthSecurity.encode_token(payload)
    return _make


@pytest.fixture
def auth_headers(make_token):
    def _headers(user_key, name=None):
        return {'Authorization': f'Bearer {make_token(user_key, name)}'}
    return _headers


@pytest.fixture
def app(db, fake_timer):
    from server import create_app
    application = create_app(timer_factory=fake_timer)
    application.config['TESTING'] = True
    return application


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def socketio(app):
    return app.extensions['socketio']
