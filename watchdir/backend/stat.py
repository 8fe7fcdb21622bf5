import logging
import os
import stat
import threading
from queue import Queue

from typing import Dict, List, Tuple  # noqa

from watchdir.backend.shared import NotificationBackend
from watchdir.backend.shared import RegistrationToken
from watchdir.backend.shared import check_directory
from watchdir.events import EventKind, RawEvent
from watchdir.exceptions import BackendClosedError


logger = logging.getLogger(__name__)

_CLOSED = object()

Snapshot = Dict[str, Tuple[bool, int, int]]


class StatDirectoryObserver(object):
    """Diffs the direct children of one directory between checks."""
    def __init__(self, path):
        # type: (str) -> None
        self._path = path
        self._entries = self._scan()  # type: Snapshot

    def check(self):
        # type: () -> List[RawEvent]
        current = self._scan()
        events = []  # type: List[RawEvent]
        for name in sorted(set(self._entries) | set(current)):
            old = self._entries.get(name)
            new = current.get(name)
            if old is None:
                events.append(RawEvent(EventKind.CREATED, name))
            elif new is None:
                events.append(RawEvent(EventKind.DELETED, name))
            elif old != new:
                events.append(RawEvent(EventKind.MODIFIED, name))
        self._entries = current
        return events

    def _scan(self):
        # type: () -> Snapshot
        entries = {}  # type: Snapshot
        try:
            with os.scandir(self._path) as it:
                for entry in it:
                    try:
                        st = entry.stat(follow_symlinks=False)
                    except FileNotFoundError:
                        continue
                    entries[entry.name] = (
                        stat.S_ISDIR(st.st_mode), st.st_mtime_ns, st.st_size)
        except (FileNotFoundError, NotADirectoryError):
            # A vanished directory reports all of its children as deleted.
            return {}
        except OSError as e:
            logger.debug("Unable to scan %s: %s", self._path, e)
            return self._entries
        return entries


class StatBackend(NotificationBackend):
    """Polls registered directories with stat calls.

    Every ``poll_interval`` seconds each registered directory is rescanned
    and the differences are queued as one batch per directory.
    """
    def __init__(self, poll_interval=1.0):
        # type: (float) -> None
        self._poll_interval = poll_interval
        self._lock = threading.Lock()
        self._queue = Queue()  # type: Queue
        self._tokens = {}  # type: Dict[str, RegistrationToken]
        self._observers = {}  # type: Dict[RegistrationToken, StatDirectoryObserver]
        self._stop_event = threading.Event()
        t = threading.Thread(target=self._run, name='watchdir-stat-poller')
        t.daemon = True
        t.start()
        self._thread = t

    def register(self, path):
        # type: (str) -> RegistrationToken
        path = os.path.normpath(path)
        with self._lock:
            if self._stop_event.is_set():
                raise BackendClosedError()
            token = self._tokens.get(path)
            if token is not None:
                return token
            check_directory(path)
            token = RegistrationToken(path)
            self._observers[token] = StatDirectoryObserver(path)
            self._tokens[path] = token
            return token

    def cancel(self, token):
        # type: (RegistrationToken) -> None
        with self._lock:
            if self._observers.pop(token, None) is None:
                return
            if self._tokens.get(token.path) is token:
                del self._tokens[token.path]

    def poll(self):
        # type: () -> None
        with self._lock:
            observers = list(self._observers.items())
        for token, observer in observers:
            events = observer.check()
            if events:
                self._queue.put((token, events))

    def take_next_batch(self):
        # type: () -> Tuple[RegistrationToken, List[RawEvent]]
        if self._stop_event.is_set():
            raise BackendClosedError()
        item = self._queue.get()
        if item is _CLOSED or self._stop_event.is_set():
            self._queue.put(_CLOSED)
            raise BackendClosedError()
        return item

    def close(self):
        # type: () -> None
        with self._lock:
            if self._stop_event.is_set():
                return
            self._stop_event.set()
            self._tokens.clear()
            self._observers.clear()
            self._queue.put(_CLOSED)
        if threading.current_thread() is not self._thread:
            self._thread.join()

    def _run(self):
        # type: () -> None
        while not self._stop_event.wait(self._poll_interval):
            self.poll()
