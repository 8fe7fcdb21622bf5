import logging
import os
import threading
from queue import Queue

from watchdog.observers import Observer
from watchdog.events import FileSystemEventHandler
from watchdog.events import FileSystemEvent  # noqa
from watchdog.events import (
    EVENT_TYPE_CREATED,
    EVENT_TYPE_DELETED,
    EVENT_TYPE_MODIFIED,
    EVENT_TYPE_MOVED,
)

from watchdir.backend.shared import NotificationBackend
from watchdir.backend.shared import RegistrationToken
from watchdir.backend.shared import check_directory
from watchdir.events import EventKind, RawEvent
from watchdir.exceptions import BackendClosedError, PathNotFoundError

from typing import Any, Callable, Dict, List, Optional, Tuple  # noqa


logger = logging.getLogger(__name__)

_CLOSED = object()

_KINDS = {
    EVENT_TYPE_CREATED: EventKind.CREATED,
    EVENT_TYPE_MODIFIED: EventKind.MODIFIED,
    EVENT_TYPE_DELETED: EventKind.DELETED,
}


class DirectoryEventAdapter(FileSystemEventHandler):
    """Turns watchdog events for one directory into raw event batches.

    Only events about direct children of the directory are kept.  Events
    about the directory itself are reported by its parent's registration,
    and opened/closed notifications have no counterpart.
    """
    def __init__(self, token, directory, emit):
        # type: (RegistrationToken, str, Callable) -> None
        self._token = token
        self._directory = directory
        self._emit = emit

    def on_any_event(self, event):
        # type: (FileSystemEvent) -> None
        raw_events = self.translate(event)
        if raw_events:
            self._emit((self._token, raw_events))

    def translate(self, event):
        # type: (FileSystemEvent) -> List[RawEvent]
        if event.event_type == EVENT_TYPE_MOVED:
            raw_events = []
            name = self._child_name(event.src_path)
            if name is not None:
                raw_events.append(RawEvent(EventKind.DELETED, name))
            name = self._child_name(event.dest_path)
            if name is not None:
                raw_events.append(RawEvent(EventKind.CREATED, name))
            return raw_events
        kind = _KINDS.get(event.event_type)
        if kind is None:
            return []
        name = self._child_name(event.src_path)
        if name is None:
            return []
        return [RawEvent(kind, name)]

    def _child_name(self, path):
        # type: (Any) -> Optional[str]
        if not path:
            return None
        path = os.path.normpath(os.fsdecode(path))
        if os.path.dirname(path) != self._directory:
            return None
        return os.path.basename(path)


class WatchdogBackend(NotificationBackend):
    """Uses a watchdog observer, one non-recursive watch per directory."""
    def __init__(self):
        # type: () -> None
        self._lock = threading.Lock()
        self._queue = Queue()  # type: Queue
        self._tokens = {}  # type: Dict[str, RegistrationToken]
        self._watches = {}  # type: Dict[RegistrationToken, Any]
        self._closed = False
        self._observer = Observer()
        self._observer.daemon = True
        self._observer.start()

    def register(self, path):
        # type: (str) -> RegistrationToken
        path = os.path.normpath(path)
        with self._lock:
            if self._closed:
                raise BackendClosedError()
            token = self._tokens.get(path)
            if token is not None:
                return token
            check_directory(path)
            token = RegistrationToken(path)
            handler = DirectoryEventAdapter(token, path, self._queue.put)
            try:
                watch = self._observer.schedule(
                    handler, path, recursive=False)
            except FileNotFoundError:
                raise PathNotFoundError(path)
            self._tokens[path] = token
            self._watches[token] = watch
            return token

    def cancel(self, token):
        # type: (RegistrationToken) -> None
        with self._lock:
            watch = self._watches.pop(token, None)
            if watch is None:
                return
            if self._tokens.get(token.path) is token:
                del self._tokens[token.path]
            try:
                self._observer.unschedule(watch)
            except (KeyError, OSError) as e:
                # The emitter goes away on its own when the directory
                # is removed.
                logger.debug("Watch for %s already gone: %s", token.path, e)

    def take_next_batch(self):
        # type: () -> Tuple[RegistrationToken, List[RawEvent]]
        if self._closed:
            raise BackendClosedError()
        item = self._queue.get()
        if item is _CLOSED or self._closed:
            self._queue.put(_CLOSED)
            raise BackendClosedError()
        return item

    def close(self):
        # type: () -> None
        with self._lock:
            if self._closed:
                return
            self._closed = True
            self._tokens.clear()
            self._watches.clear()
            self._observer.stop()
            self._queue.put(_CLOSED)
        self._observer.join()
