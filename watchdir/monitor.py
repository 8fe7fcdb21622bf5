import logging
import os
import stat
import threading
import time

from typing import Any, List, Optional  # noqa

from watchdir.backend.shared import NotificationBackend  # noqa
from watchdir.events import EventKind, NormalizedEvent, RawEvent  # noqa
from watchdir.exceptions import BackendClosedError, RegistrationsClosedError
from watchdir.listener import ChangeListener  # noqa
from watchdir.registry import RegistrationTable  # noqa
from watchdir.walker import TreeWalker, WalkFailure  # noqa


logger = logging.getLogger(__name__)


class MonitorLoop(object):
    """The single worker that turns backend batches into listener calls.

    The loop is the only consumer of the backend and the only caller of the
    listener, so events reach the listener one at a time and in the order
    the backend reported them.  A slow listener holds up everything behind
    it.

    A batch is only dispatched while its token is still in the
    registration table.  Closing the table (``WatchSession.stop``) is
    therefore enough to drop whatever the backend had already queued.
    """
    def __init__(self, backend, registrations, listener, recursive,
                 retry_delay=0.1):
        # type: (NotificationBackend, RegistrationTable, ChangeListener, bool, float) -> None
        self._backend = backend
        self._registrations = registrations
        self._walker = TreeWalker(registrations)
        self._listener = listener
        self._recursive = recursive
        self._retry_delay = retry_delay
        self._thread = None  # type: Optional[threading.Thread]
        self.failures = []  # type: List[WalkFailure]

    def start(self):
        # type: () -> None
        t = threading.Thread(target=self.run, name='watchdir-monitor')
        t.daemon = True
        t.start()
        self._thread = t

    def join(self, timeout=None):
        # type: (Optional[float]) -> None
        if self._thread is not None:
            self._thread.join(timeout)

    def in_monitor_thread(self):
        # type: () -> bool
        return threading.current_thread() is self._thread

    def run(self):
        # type: () -> None
        logger.debug("Monitoring started")
        while True:
            try:
                token, raw_events = self._backend.take_next_batch()
            except BackendClosedError:
                break
            except Exception:
                logger.exception("Error receiving change events, retrying")
                time.sleep(self._retry_delay)
                continue
            self.dispatch_batch(token, raw_events)
        logger.debug("Monitoring stopped")

    def dispatch_batch(self, token, raw_events):
        # type: (Any, List[RawEvent]) -> None
        directory = self._registrations.directory_for(token)
        if directory is None:
            logger.debug("Discarding %s events for canceled registration %r",
                         len(raw_events), token)
            return
        for raw_event in raw_events:
            if self._registrations.directory_for(token) is None:
                logger.debug("Registration for %s canceled, discarding "
                             "remaining events", directory)
                return
            event = self._normalize(directory, raw_event)
            logger.debug("Change: %s %s (directory: %s)",
                         event.kind.value, event.path, event.is_directory)
            self._deliver(event)
            if not event.is_directory:
                continue
            if event.kind is EventKind.DELETED:
                # A renamed directory takes its subdirectories along.
                self._registrations.discard_tree(event.path)
            elif event.kind is EventKind.CREATED and self._recursive:
                self._register_tree(event.path)

    def _normalize(self, directory, raw_event):
        # type: (str, RawEvent) -> NormalizedEvent
        path = os.path.normpath(os.path.join(directory, raw_event.name))
        return NormalizedEvent(raw_event.kind, path, self._is_directory(path))

    def _is_directory(self, path):
        # type: (str) -> bool
        try:
            return stat.S_ISDIR(os.lstat(path).st_mode)
        except OSError:
            # Gone already, a registered path was a directory.
            return self._registrations.is_registered(path)

    def _deliver(self, event):
        # type: (NormalizedEvent) -> None
        callback = getattr(self._listener, event.kind.value)
        try:
            callback(event.path, event.is_directory)
        except Exception:
            logger.exception("Listener failed to handle %s event for %s",
                             event.kind.value, event.path)

    def _register_tree(self, path):
        # type: (str) -> None
        try:
            result = self._walker.walk(path, recursive=True)
        except RegistrationsClosedError:
            return
        except OSError as e:
            logger.warning("Unable to watch new directory %s: %s", path, e)
            return
        self.failures.extend(result.failures)
        # Entries created before the walk reached their directory have
        # not been reported by the backend.
        for directory in result.paths:
            self._announce_existing(directory)

    def _announce_existing(self, directory):
        # type: (str) -> None
        try:
            with os.scandir(directory) as it:
                entries = sorted(
                    (entry.path, entry.is_dir(follow_symlinks=False))
                    for entry in it)
        except OSError as e:
            logger.debug("Unable to list %s: %s", directory, e)
            return
        for path, is_directory in entries:
            if not self._registrations.is_registered(directory):
                return
            self._deliver(
                NormalizedEvent(EventKind.CREATED, path, is_directory))
