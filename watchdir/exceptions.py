class WatchDirError(Exception):
    pass


class PathNotFoundError(WatchDirError, FileNotFoundError):
    """Raised when a path to watch does not exist at registration time."""
    def __init__(self, path):
        # type: (str) -> None
        super(PathNotFoundError, self).__init__(
            "Path does not exist: %s" % path)
        self.path = path


class BackendClosedError(WatchDirError):
    """Raised by a notification backend once it has been closed."""
    pass


class RegistrationsClosedError(WatchDirError):
    """A directory registration was attempted after shutdown began."""
    pass


class ConfigError(WatchDirError):
    pass
