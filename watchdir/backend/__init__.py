"""Notification backends used by watch sessions.

A backend is the low level source of change notifications.  It registers
single directories (never whole trees), hands out an opaque token for each
registration and produces batches of raw events, each batch tagged with the
token of the directory it belongs to.  ``take_next_batch`` blocks until a
batch is available and raises ``BackendClosedError`` once the backend is
closed, which is how a monitor loop is told to exit.

Two implementations are provided.  One uses the watchdog observer with one
non-recursive watch per directory.  The other simply rescans the registered
directories with stat calls on an interval, which works everywhere
(network shares, containers without inotify) at the cost of latency.
"""
from watchdir.backend.shared import NotificationBackend  # noqa


BACKEND_NAMES = ('watchdog', 'stat')


def create_backend(name='watchdog', poll_interval=1.0):
    # type: (str, float) -> NotificationBackend
    if name == 'watchdog':
        from watchdir.backend.eventbased import WatchdogBackend
        return WatchdogBackend()
    elif name == 'stat':
        from watchdir.backend.stat import StatBackend
        return StatBackend(poll_interval=poll_interval)
    raise ValueError("Unknown backend %r, expected one of: %s" % (
        name, ', '.join(BACKEND_NAMES)))
