import os

from typing import Any, List, Tuple  # noqa

from watchdir.events import RawEvent  # noqa
from watchdir.exceptions import PathNotFoundError


class RegistrationToken(object):
    """Opaque handle for one directory registered with a backend."""
    __slots__ = ('path',)

    def __init__(self, path):
        # type: (str) -> None
        self.path = path

    def __repr__(self):
        # type: () -> str
        return 'RegistrationToken(%r)' % self.path


class NotificationBackend(object):
    def register(self, path):
        # type: (str) -> Any
        raise NotImplementedError('register')

    def cancel(self, token):
        # type: (Any) -> None
        raise NotImplementedError('cancel')

    def take_next_batch(self):
        # type: () -> Tuple[Any, List[RawEvent]]
        raise NotImplementedError('take_next_batch')

    def close(self):
        # type: () -> None
        raise NotImplementedError('close')


def check_directory(path):
    # type: (str) -> None
    """Make sure ``path`` is a directory that can be listed.

    Raises ``PathNotFoundError`` when it does not exist and lets
    ``NotADirectoryError`` and ``PermissionError`` through.
    """
    try:
        with os.scandir(path):
            pass
    except FileNotFoundError:
        raise PathNotFoundError(path)
