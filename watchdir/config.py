"""Loading of watch configuration files.

A configuration file is a YAML mapping::

    paths:
      - /srv/incoming
      - ./relative/to/this/file
    recursive: true
    backend: watchdog      # or "stat"
    poll_interval: 1.0     # seconds, stat backend only

Only ``paths`` is required.
"""
import functools
import logging
import os

from typing import Any, List, Optional  # noqa

import yaml

from watchdir.backend import BACKEND_NAMES, create_backend
from watchdir.exceptions import ConfigError
from watchdir.listener import ChangeListener  # noqa
from watchdir.session import WatchSession


logger = logging.getLogger(__name__)


class WatchConfig(object):
    def __init__(self, paths=None, recursive=True, backend='watchdog',
                 poll_interval=1.0):
        # type: (Optional[List[str]], bool, str, float) -> None
        if paths is None:
            paths = []
        self.paths = paths
        self.recursive = recursive
        self.backend = backend
        self.poll_interval = poll_interval

    def create_session(self, listener):
        # type: (ChangeListener) -> WatchSession
        factory = functools.partial(
            create_backend, self.backend, poll_interval=self.poll_interval)
        session = WatchSession(listener, recursive=self.recursive,
                               backend_factory=factory)
        for path in self.paths:
            session.add_path(path)
        return session


def load_config(path):
    # type: (str) -> WatchConfig
    if not os.path.isfile(path):
        raise ConfigError("Configuration file not found: %s" % path)
    try:
        with open(path) as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError("Unable to parse %s: %s" % (path, e))
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigError("Configuration root must be a mapping")
    base_dir = os.path.dirname(os.path.abspath(path))
    config = WatchConfig(
        paths=[os.path.join(base_dir, p)
               for p in _parse_paths(data.get('paths'))],
        recursive=_parse_recursive(data.get('recursive', True)),
        backend=_parse_backend(data.get('backend', 'watchdog')),
        poll_interval=_parse_poll_interval(data.get('poll_interval', 1.0)),
    )
    logger.debug("Loaded configuration from %s: %s paths, backend=%s",
                 path, len(config.paths), config.backend)
    return config


def _parse_paths(value):
    # type: (Any) -> List[str]
    if value is None:
        raise ConfigError("'paths' is required")
    if isinstance(value, str):
        return [value]
    if not isinstance(value, list) or not all(
            isinstance(p, str) for p in value):
        raise ConfigError("'paths' must be a string or a list of strings")
    return value


def _parse_recursive(value):
    # type: (Any) -> bool
    if not isinstance(value, bool):
        raise ConfigError("'recursive' must be a boolean")
    return value


def _parse_backend(value):
    # type: (Any) -> str
    if value not in BACKEND_NAMES:
        raise ConfigError("'backend' must be one of: %s" % (
            ', '.join(BACKEND_NAMES)))
    return value


def _parse_poll_interval(value):
    # type: (Any) -> float
    if isinstance(value, bool):
        raise ConfigError("'poll_interval' must be numeric")
    try:
        interval = float(value)
    except (TypeError, ValueError):
        raise ConfigError("'poll_interval' must be numeric")
    if interval <= 0:
        raise ConfigError("'poll_interval' must be positive")
    return interval
