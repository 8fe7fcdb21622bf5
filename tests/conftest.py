import itertools
import time
from queue import Queue

import mock
import pytest

from watchdir.backend.shared import NotificationBackend, check_directory
from watchdir.exceptions import BackendClosedError
from watchdir.listener import ChangeListener


MAX_TIMEOUT = 5.0

_CLOSED = object()

# Shared so tokens from different backends never compare equal.
_token_counter = itertools.count()


class FakeBackend(NotificationBackend):
    """In memory backend, events are queued by hand with ``emit``.

    Every call to ``register`` hands out a new token, even for a path that
    is already registered.
    """
    def __init__(self):
        self.registered = {}
        self.register_calls = []
        self.canceled = []
        self.closed = False
        self._queue = Queue()

    def register(self, path):
        if self.closed:
            raise BackendClosedError()
        check_directory(path)
        token = ('token', next(_token_counter), path)
        self.registered[token] = path
        self.register_calls.append(path)
        return token

    def cancel(self, token):
        self.registered.pop(token, None)
        self.canceled.append(token)

    def token_for(self, path):
        tokens = [t for t, p in self.registered.items() if p == path]
        assert tokens, 'No registration for %s' % path
        return max(tokens, key=lambda t: t[1])

    def emit(self, path, *raw_events):
        self.emit_token(self.token_for(path), *raw_events)

    def emit_token(self, token, *raw_events):
        self._queue.put((token, list(raw_events)))

    def fail_next_take(self, error):
        self._queue.put(error)

    def take_next_batch(self):
        item = self._queue.get()
        if item is _CLOSED:
            self._queue.put(_CLOSED)
            raise BackendClosedError()
        if isinstance(item, Exception):
            raise item
        return item

    def close(self):
        self.closed = True
        self._queue.put(_CLOSED)


class FakeBackendFactory(object):
    def __init__(self):
        self.backends = []

    def __call__(self):
        backend = FakeBackend()
        self.backends.append(backend)
        return backend

    @property
    def current(self):
        return self.backends[-1]


def wait_for(condition, timeout=MAX_TIMEOUT, interval=0.01):
    deadline = time.time() + timeout
    while time.time() < deadline:
        if condition():
            return True
        time.sleep(interval)
    return condition()


def calls_for(method):
    return [tuple(c[0]) for c in method.call_args_list]


@pytest.fixture
def listener():
    return mock.Mock(spec=ChangeListener)


@pytest.fixture
def backend_factory():
    return FakeBackendFactory()


@pytest.fixture
def fake_backend():
    return FakeBackend()
