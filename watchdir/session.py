import logging
import threading
from enum import Enum

from typing import Any, Callable, List, Optional  # noqa

from watchdir.backend import create_backend
from watchdir.backend.shared import NotificationBackend  # noqa
from watchdir.exceptions import RegistrationsClosedError
from watchdir.listener import ChangeListener  # noqa
from watchdir.monitor import MonitorLoop
from watchdir.registry import PathRegistry, RegistrationTable
from watchdir.walker import TreeWalker, WalkFailure  # noqa


logger = logging.getLogger(__name__)


class SessionState(Enum):
    STOPPED = 'stopped'
    RUNNING = 'running'


class WatchSession(object):
    """Watches a set of root paths and reports changes to a listener.

    Paths can be added at any time.  While the session is stopped they are
    only remembered, ``start`` registers all of them and starts the monitor
    thread, ``stop`` cancels every registration and waits for the monitor
    thread to finish.  Nothing is delivered to the listener while the
    session is stopped, and a stopped session can be started again.
    """
    def __init__(self, listener, recursive=True, backend_factory=None):
        # type: (ChangeListener, bool, Optional[Callable[[], NotificationBackend]]) -> None
        if backend_factory is None:
            backend_factory = create_backend
        self._listener = listener
        self._recursive = recursive
        self._backend_factory = backend_factory
        self._lock = threading.Lock()
        self._state = SessionState.STOPPED
        self._paths = PathRegistry()
        self._registrations = RegistrationTable()
        self._walker = TreeWalker(self._registrations)
        self._backend = None  # type: Optional[NotificationBackend]
        self._monitor = None  # type: Optional[MonitorLoop]
        self._failures = []  # type: List[WalkFailure]

    @property
    def state(self):
        # type: () -> SessionState
        return self._state

    @property
    def is_running(self):
        # type: () -> bool
        return self._state is SessionState.RUNNING

    @property
    def recursive(self):
        # type: () -> bool
        return self._recursive

    @property
    def paths(self):
        # type: () -> List[str]
        return self._paths.all()

    @property
    def registrations(self):
        # type: () -> List[str]
        return self._registrations.paths()

    @property
    def failures(self):
        # type: () -> List[WalkFailure]
        failures = list(self._failures)
        if self._monitor is not None:
            failures.extend(self._monitor.failures)
        return failures

    def add_path(self, path):
        # type: (Any) -> str
        with self._lock:
            path = self._paths.add(path)
            if self._state is SessionState.RUNNING:
                self._walk(path)
        return path

    def start(self):
        # type: () -> None
        with self._lock:
            if self._state is SessionState.RUNNING:
                return
            backend = self._backend_factory()
            self._registrations.trace = True
            self._registrations.open(backend)
            self._backend = backend
            self._failures = []
            errors = []  # type: List[OSError]
            for path in self._paths.all():
                try:
                    self._walk(path)
                except OSError as e:
                    logger.error("Unable to watch %s: %s", path, e)
                    errors.append(e)
            self._monitor = MonitorLoop(
                backend, self._registrations, self._listener,
                self._recursive)
            self._monitor.start()
            self._state = SessionState.RUNNING
            logger.info("Watching %s paths (%s directories registered)",
                        len(self._paths), len(self._registrations))
        # The other roots are watched regardless.
        if errors:
            raise errors[0]

    def stop(self):
        # type: () -> None
        with self._lock:
            if self._state is SessionState.STOPPED:
                return
            self._state = SessionState.STOPPED
            monitor = self._monitor
            backend = self._backend
            self._backend = None
            self._registrations.close()
            if backend is not None:
                backend.close()
        # Never joined while holding the lock.
        if monitor is not None and not monitor.in_monitor_thread():
            monitor.join()
        logger.info("Stopped watching")

    def _walk(self, path):
        # type: (str) -> None
        try:
            result = self._walker.walk(path, self._recursive)
        except RegistrationsClosedError:
            return
        self._failures.extend(result.failures)


def new_session(listener, recursive=True, backend_factory=None):
    # type: (ChangeListener, bool, Optional[Callable[[], NotificationBackend]]) -> WatchSession
    return WatchSession(listener, recursive=recursive,
                        backend_factory=backend_factory)
