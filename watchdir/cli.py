"""Command line entry point that logs changes under the given paths."""
import argparse
import logging
import time

from typing import List, Optional  # noqa

from watchdir.backend import BACKEND_NAMES
from watchdir.config import WatchConfig, load_config
from watchdir.exceptions import ConfigError
from watchdir.listener import ChangeListener


logger = logging.getLogger(__name__)


class LoggingListener(ChangeListener):
    def created(self, path, is_directory):
        # type: (str, bool) -> None
        self._log('created', path, is_directory)

    def modified(self, path, is_directory):
        # type: (str, bool) -> None
        self._log('modified', path, is_directory)

    def deleted(self, path, is_directory):
        # type: (str, bool) -> None
        self._log('deleted', path, is_directory)

    def _log(self, kind, path, is_directory):
        # type: (str, str, bool) -> None
        logger.info("%s %s: %s", kind,
                    'directory' if is_directory else 'file', path)


def create_parser():
    # type: () -> argparse.ArgumentParser
    parser = argparse.ArgumentParser(
        prog='watchdir',
        description="Log file changes under one or more directories")
    parser.add_argument('paths', nargs='*', metavar='PATH',
                        help="Directory to watch, may be repeated")
    parser.add_argument('--config',
                        help="Path to a YAML configuration file")
    parser.add_argument('--no-recursive', dest='recursive',
                        action='store_false', default=None,
                        help="Only watch the given directories themselves")
    parser.add_argument('--backend', choices=BACKEND_NAMES,
                        help="Notification backend (default: watchdog)")
    parser.add_argument('--poll-interval', type=float,
                        help="Seconds between scans for the stat backend")
    parser.add_argument('--log-level', default='INFO',
                        help="Logging level (DEBUG, INFO, WARNING, ERROR)")
    return parser


def build_config(args):
    # type: (argparse.Namespace) -> WatchConfig
    if args.config:
        config = load_config(args.config)
    else:
        config = WatchConfig()
    config.paths = config.paths + list(args.paths)
    if args.recursive is not None:
        config.recursive = args.recursive
    if args.backend is not None:
        config.backend = args.backend
    if args.poll_interval is not None:
        if args.poll_interval <= 0:
            raise ConfigError("--poll-interval must be positive")
        config.poll_interval = args.poll_interval
    if not config.paths:
        raise ConfigError("No paths to watch")
    return config


def main(argv=None):
    # type: (Optional[List[str]]) -> int
    args = create_parser().parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s - %(message)s",
    )
    try:
        config = build_config(args)
    except ConfigError as e:
        logger.error("%s", e)
        return 2
    session = config.create_session(LoggingListener())
    try:
        session.start()
    except OSError as e:
        logger.error("%s", e)
    try:
        while True:
            time.sleep(1)
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
    finally:
        session.stop()
    return 0
