import os
import pytest
import tlmbus


def test_defaults():

    config = tlmbus.Config()

    assert config.master == tlmbus.config.default_master
    assert config.path == tlmbus.config.default_path()
    assert str(os.getpid()) in config.path
    assert config.buffer_size == tlmbus.transport.unix.default_buffer_size

    repr(config)


def test_environment(monkeypatch):

    monkeypatch.setenv('TLMBUS_MASTER_SOCKET', '/tmp/elsewhere/master.sock')
    monkeypatch.setenv('TLMBUS_CLIENT_SOCKET', '/tmp/elsewhere/client.sock')
    monkeypatch.setenv('TLMBUS_BUFFER_SIZE', '65536')

    config = tlmbus.config.from_environment()

    assert config.master == '/tmp/elsewhere/master.sock'
    assert config.path == '/tmp/elsewhere/client.sock'
    assert config.buffer_size == 65536

    client = tlmbus.Client(config)
    assert client.master == config.master
    assert client.path == config.path


def test_environment_unset(monkeypatch):

    monkeypatch.delenv('TLMBUS_MASTER_SOCKET', raising=False)
    monkeypatch.delenv('TLMBUS_CLIENT_SOCKET', raising=False)
    monkeypatch.delenv('TLMBUS_BUFFER_SIZE', raising=False)

    config = tlmbus.config.from_environment()

    assert config.master == tlmbus.config.default_master
    assert config.buffer_size == tlmbus.transport.unix.default_buffer_size


def test_bad_buffer_size():

    with pytest.raises(ValueError):
        tlmbus.Config(buffer_size=0)

    with pytest.raises(ValueError):
        tlmbus.Config(buffer_size='lots')


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
