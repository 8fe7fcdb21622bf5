class ChangeListener(object):
    """Receives normalized change notifications from a watch session.

    All callbacks are invoked one at a time, in backend order, from the
    session's monitor thread.  ``path`` is always an absolute, normalized
    path.
    """
    def created(self, path, is_directory):
        # type: (str, bool) -> None
        raise NotImplementedError('created')

    def modified(self, path, is_directory):
        # type: (str, bool) -> None
        raise NotImplementedError('modified')

    def deleted(self, path, is_directory):
        # type: (str, bool) -> None
        raise NotImplementedError('deleted')


class ListenerAdapter(ChangeListener):
    """No-op listener, subclass it and override only what you need."""
    def created(self, path, is_directory):
        # type: (str, bool) -> None
        pass

    def modified(self, path, is_directory):
        # type: (str, bool) -> None
        pass

    def deleted(self, path, is_directory):
        # type: (str, bool) -> None
        pass
