import logging
import os
import threading
from collections import namedtuple

from typing import Any, Dict, List, Optional  # noqa

from watchdir.backend.shared import NotificationBackend  # noqa
from watchdir.exceptions import RegistrationsClosedError


logger = logging.getLogger(__name__)

Registration = namedtuple('Registration', ['token', 'path'])


def normalize_path(path):
    # type: (Any) -> str
    return os.path.abspath(os.fspath(path))


class PathRegistry(object):
    """Ordered list of the root paths a caller asked to watch."""
    def __init__(self):
        # type: () -> None
        self._lock = threading.Lock()
        self._paths = []  # type: List[str]

    def add(self, path):
        # type: (Any) -> str
        path = normalize_path(path)
        with self._lock:
            self._paths.append(path)
        return path

    def all(self):
        # type: () -> List[str]
        with self._lock:
            return list(self._paths)

    def __len__(self):
        # type: () -> int
        with self._lock:
            return len(self._paths)


class RegistrationTable(object):
    """The directories currently registered with a backend.

    The table is closed until ``open`` attaches a backend.  Every change
    goes through one lock, and the backend is called while holding it, so
    once ``close`` has started no registration can be added behind its
    back.
    """
    def __init__(self):
        # type: () -> None
        self._lock = threading.Lock()
        self._backend = None  # type: Optional[NotificationBackend]
        self._paths = {}  # type: Dict[Any, str]
        self._tokens = {}  # type: Dict[str, Any]
        self.trace = False

    @property
    def is_open(self):
        # type: () -> bool
        return self._backend is not None

    def open(self, backend):
        # type: (NotificationBackend) -> None
        with self._lock:
            self._backend = backend
            self._paths.clear()
            self._tokens.clear()

    def close(self):
        # type: () -> None
        with self._lock:
            backend = self._backend
            self._backend = None
            if backend is None:
                return
            for token in list(self._paths):
                backend.cancel(token)
            self._paths.clear()
            self._tokens.clear()

    def add(self, path):
        # type: (str) -> Registration
        with self._lock:
            if self._backend is None:
                raise RegistrationsClosedError(path)
            token = self._backend.register(path)
            previous = self._tokens.get(path)
            if previous is not None and previous != token:
                self._paths.pop(previous, None)
                self._backend.cancel(previous)
                if self.trace:
                    logger.debug("Updated registration for %s", path)
            elif previous is None and self.trace:
                logger.debug("Registered directory for monitoring: %s", path)
            self._paths[token] = path
            self._tokens[path] = token
            return Registration(token, path)

    def discard_tree(self, path):
        # type: (str) -> List[str]
        """Drop the registrations of ``path`` and every directory below it.

        Returns the dropped paths in sorted order.
        """
        prefix = path.rstrip(os.sep) + os.sep
        with self._lock:
            dropped = sorted(p for p in self._tokens
                             if p == path or p.startswith(prefix))
            for dropped_path in dropped:
                token = self._tokens.pop(dropped_path)
                self._paths.pop(token, None)
                if self._backend is not None:
                    self._backend.cancel(token)
                if self.trace:
                    logger.debug("Dropped registration for %s", dropped_path)
            return dropped

    def directory_for(self, token):
        # type: (Any) -> Optional[str]
        with self._lock:
            return self._paths.get(token)

    def is_registered(self, path):
        # type: (str) -> bool
        with self._lock:
            return path in self._tokens

    def paths(self):
        # type: () -> List[str]
        with self._lock:
            return sorted(self._tokens)

    def __len__(self):
        # type: () -> int
        with self._lock:
            return len(self._tokens)
