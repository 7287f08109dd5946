import pytest

from starscope import AppHost, StarScopeConfig, set_config


@pytest.fixture(autouse=True)
def reset_global_config():
    set_config(StarScopeConfig())
    yield
    set_config(None)


@pytest.fixture
def config():
    return StarScopeConfig()


@pytest.fixture
def host(config):
    app_host = AppHost(config)
    yield app_host
    app_host.dispose()
