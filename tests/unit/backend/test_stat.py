import threading
import time

import pytest

from watchdir.backend.stat import StatBackend, StatDirectoryObserver
from watchdir.events import EventKind, RawEvent
from watchdir.exceptions import BackendClosedError, PathNotFoundError


def touch(path):
    path.setmtime(time.time() + 1)


@pytest.fixture
def backend():
    # Polled by hand, the interval keeps the poller thread out of the way.
    backend = StatBackend(poll_interval=3600)
    yield backend
    backend.close()


def test_does_return_new_file(tmpdir):
    stater = StatDirectoryObserver(tmpdir.strpath)
    tmpdir.join('foo.txt').write('foobarbaz')

    assert stater.check() == [RawEvent(EventKind.CREATED, 'foo.txt')]


def test_existing_entries_not_reported(tmpdir):
    tmpdir.join('foo.txt').write('foo')
    tmpdir.mkdir('sub')
    stater = StatDirectoryObserver(tmpdir.strpath)

    assert stater.check() == []


def test_does_not_look_into_subdirectories(tmpdir):
    sub = tmpdir.mkdir('sub')
    stater = StatDirectoryObserver(tmpdir.strpath)
    sub.join('bar.txt').write('bar')
    touch(sub)

    changes = stater.check()

    assert changes == [RawEvent(EventKind.MODIFIED, 'sub')]


def test_does_return_updated_file(tmpdir):
    foo = tmpdir.join('foo.txt')
    foo.write('foo')
    stater = StatDirectoryObserver(tmpdir.strpath)

    touch(foo)

    assert stater.check() == [RawEvent(EventKind.MODIFIED, 'foo.txt')]


def test_does_return_deleted_file(tmpdir):
    foo = tmpdir.join('foo.txt')
    foo.write('foo')
    stater = StatDirectoryObserver(tmpdir.strpath)

    foo.remove()

    assert stater.check() == [RawEvent(EventKind.DELETED, 'foo.txt')]


def test_changes_in_name_order(tmpdir):
    tmpdir.join('b.txt').write('b')
    stater = StatDirectoryObserver(tmpdir.strpath)
    tmpdir.join('c.txt').write('c')
    tmpdir.join('a.txt').write('a')
    tmpdir.join('b.txt').remove()

    assert stater.check() == [
        RawEvent(EventKind.CREATED, 'a.txt'),
        RawEvent(EventKind.DELETED, 'b.txt'),
        RawEvent(EventKind.CREATED, 'c.txt'),
    ]


def test_vanished_directory_reports_children_deleted(tmpdir):
    sub = tmpdir.mkdir('sub')
    sub.join('bar.txt').write('bar')
    stater = StatDirectoryObserver(sub.strpath)

    sub.remove()

    assert stater.check() == [RawEvent(EventKind.DELETED, 'bar.txt')]


def test_does_return_empty_list_when_no_updates(tmpdir):
    tmpdir.join('foo.txt').write('foo')
    stater = StatDirectoryObserver(tmpdir.strpath)

    stater.check()

    assert stater.check() == []


class TestStatBackend(object):
    def test_poll_queues_batch_per_directory(self, tmpdir, backend):
        token = backend.register(tmpdir.strpath)
        tmpdir.join('foo.txt').write('foo')

        backend.poll()

        assert backend.take_next_batch() == (
            token, [RawEvent(EventKind.CREATED, 'foo.txt')])

    def test_register_is_idempotent(self, tmpdir, backend):
        assert backend.register(tmpdir.strpath) is backend.register(
            tmpdir.strpath + '/.')

    def test_register_missing_path(self, tmpdir, backend):
        with pytest.raises(PathNotFoundError):
            backend.register(tmpdir.join('missing').strpath)

    def test_canceled_directory_no_longer_polled(self, tmpdir, backend):
        token = backend.register(tmpdir.strpath)
        backend.cancel(token)
        backend.cancel(token)
        tmpdir.join('foo.txt').write('foo')

        backend.poll()

        assert backend._queue.empty()

    def test_close_interrupts_blocked_take(self, tmpdir, backend):
        errors = []

        def take():
            try:
                backend.take_next_batch()
            except BackendClosedError as e:
                errors.append(e)

        t = threading.Thread(target=take)
        t.start()
        backend.close()
        t.join(5)

        assert not t.is_alive()
        assert len(errors) == 1

    def test_poller_thread_picks_up_changes(self, tmpdir):
        backend = StatBackend(poll_interval=0.05)
        try:
            token = backend.register(tmpdir.strpath)
            tmpdir.join('foo.txt').write('foo')
            received, raw_events = backend.take_next_batch()
            assert received is token
            assert raw_events == [RawEvent(EventKind.CREATED, 'foo.txt')]
        finally:
            backend.close()

    def test_close_joins_poller_thread(self, tmpdir):
        backend = StatBackend(poll_interval=0.05)
        backend.register(tmpdir.strpath)

        backend.close()

        assert not backend._thread.is_alive()
