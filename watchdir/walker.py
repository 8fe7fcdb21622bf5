"""Establishes registrations for a directory tree.

The backend registers single directories, so watching a tree means
registering every directory in it.  The walk is depth first and registers a
directory before listing it.  Symbolic links below the root are never
followed.

Errors on the root itself are raised to the caller since nothing can be
watched without it.  Errors below the root only cost that part of the tree:
they are recorded as ``WalkFailure`` entries and the walk moves on to the
next sibling.
"""
import logging
import os
from collections import namedtuple

from typing import List  # noqa

from watchdir.registry import Registration, RegistrationTable  # noqa


logger = logging.getLogger(__name__)

WalkFailure = namedtuple('WalkFailure', ['path', 'error'])


class WalkResult(object):
    def __init__(self):
        # type: () -> None
        self.registrations = []  # type: List[Registration]
        self.failures = []  # type: List[WalkFailure]

    @property
    def paths(self):
        # type: () -> List[str]
        return [registration.path for registration in self.registrations]


class TreeWalker(object):
    def __init__(self, registrations):
        # type: (RegistrationTable) -> None
        self._registrations = registrations

    def walk(self, root, recursive):
        # type: (str, bool) -> WalkResult
        result = WalkResult()
        result.registrations.append(self._registrations.add(root))
        if not recursive:
            return result
        logger.debug("Scanning %s ...", root)
        stack = []  # type: List[str]
        self._push_children(root, stack, result)
        while stack:
            path = stack.pop()
            try:
                result.registrations.append(self._registrations.add(path))
            except OSError as e:
                self._record_failure(result, path, e)
                continue
            self._push_children(path, stack, result)
        logger.debug("Scan of %s finished, %s directories registered",
                     root, len(result.registrations))
        return result

    def _push_children(self, path, stack, result):
        # type: (str, List[str], WalkResult) -> None
        try:
            subdirs = _list_subdirectories(path)
        except OSError as e:
            self._record_failure(result, path, e)
            return
        # Reversed so they are popped in name order.
        stack.extend(reversed(subdirs))

    def _record_failure(self, result, path, error):
        # type: (WalkResult, str, OSError) -> None
        logger.warning("Skipping %s: %s", path, error)
        result.failures.append(WalkFailure(path, error))


def _list_subdirectories(path):
    # type: (str) -> List[str]
    subdirs = []
    with os.scandir(path) as it:
        for entry in it:
            try:
                if entry.is_dir(follow_symlinks=False):
                    subdirs.append(entry.path)
            except OSError:
                continue
    return sorted(subdirs)
