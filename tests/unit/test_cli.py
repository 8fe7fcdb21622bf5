import logging

import mock
import pytest

from watchdir import cli
from watchdir.exceptions import ConfigError


def parse(*argv):
    return cli.create_parser().parse_args(list(argv))


def test_build_config_from_arguments(tmpdir):
    config = cli.build_config(parse(
        tmpdir.strpath, '--no-recursive', '--backend', 'stat',
        '--poll-interval', '0.2'))

    assert config.paths == [tmpdir.strpath]
    assert config.recursive is False
    assert config.backend == 'stat'
    assert config.poll_interval == 0.2


def test_arguments_extend_config_file(tmpdir):
    config_file = tmpdir.join('watchdir.yaml')
    config_file.write("paths: [/srv/data]\nbackend: stat\n")

    config = cli.build_config(parse('--config', config_file.strpath, '/extra'))

    assert config.paths == ['/srv/data', '/extra']
    assert config.backend == 'stat'
    assert config.recursive is True


def test_no_paths_is_an_error():
    with pytest.raises(ConfigError):
        cli.build_config(parse())


def test_invalid_poll_interval(tmpdir):
    with pytest.raises(ConfigError):
        cli.build_config(parse(tmpdir.strpath, '--poll-interval', '-1'))


def test_main_returns_2_without_paths():
    assert cli.main([]) == 2


def test_main_stops_session_on_interrupt(tmpdir):
    session = mock.Mock()
    with mock.patch('watchdir.config.WatchConfig.create_session',
                    return_value=session), \
            mock.patch('watchdir.cli.time') as time_module:
        time_module.sleep.side_effect = KeyboardInterrupt
        rc = cli.main([tmpdir.strpath])

    assert rc == 0
    session.start.assert_called_once_with()
    session.stop.assert_called_once_with()


def test_logging_listener(caplog):
    listener = cli.LoggingListener()
    with caplog.at_level(logging.INFO, logger='watchdir.cli'):
        listener.created('/srv/data/a.txt', False)
        listener.deleted('/srv/data/sub', True)

    assert 'created file: /srv/data/a.txt' in caplog.text
    assert 'deleted directory: /srv/data/sub' in caplog.text
