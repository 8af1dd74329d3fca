import pytest

import mcjsonapi

import fakeserver
from fakeserver import USERNAME, PASSWORD, SALT


@pytest.fixture
def server():

    server = fakeserver.FakeServer(fakeserver.echo)

    yield server

    server.close()


@pytest.fixture
def client(server):

    client = mcjsonapi.Client('127.0.0.1', server.port, USERNAME, PASSWORD, SALT, timeout=5)
    client.connect()

    yield client

    client.disconnect()


@pytest.fixture
def config_home(tmp_path, monkeypatch):
    """ Point the configuration directory at a scratch location, and make
        sure no cached profiles or environment overrides leak in.
    """

    monkeypatch.setenv('MCJSONAPI_HOME', str(tmp_path))

    for variable in mcjsonapi.config.environment.values():
        monkeypatch.delenv(variable, raising=False)

    mcjsonapi.config.clear()

    yield tmp_path

    mcjsonapi.config.clear()


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
