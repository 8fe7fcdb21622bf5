"""Change notifications for directory trees.

A ``WatchSession`` watches any number of root paths, optionally with all of
their subdirectories, and reports what happens under them to a
``ChangeListener`` as three kinds of events: created, modified and deleted.
Each callback gets the absolute path and whether it is a directory::

    from watchdir import ListenerAdapter, new_session

    class Printer(ListenerAdapter):
        def created(self, path, is_directory):
            print('created', path)

    session = new_session(Printer(), recursive=True)
    session.add_path('/srv/incoming')
    session.start()
    ...
    session.stop()

Directories created while a recursive session is running are picked up
without restarting it.  A session can be stopped and started again; the
paths added to it are kept and nothing that happens while it is stopped is
reported.
"""
from watchdir.exceptions import (  # noqa
    BackendClosedError,
    PathNotFoundError,
    WatchDirError,
)
from watchdir.listener import ChangeListener, ListenerAdapter  # noqa
from watchdir.session import SessionState, WatchSession, new_session  # noqa


__version__ = '0.1.0'
