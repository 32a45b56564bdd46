import importlib

import pytest

import mpris_config


@pytest.fixture
def reload_config(monkeypatch):
    yield lambda: importlib.reload(mpris_config)
    monkeypatch.undo()
    importlib.reload(mpris_config)


def test_defaults(monkeypatch, reload_config):
    for name in ('MPRIS_BUS', 'MPRIS_CALL_TIMEOUT', 'MPRIS_LOG_LEVEL'):
        monkeypatch.delenv(name, raising=False)
    config = reload_config()
    assert config.MPRIS_BUS == 'session'
    assert config.MPRIS_CALL_TIMEOUT == -1.0
    assert config.MPRIS_LOG_LEVEL == 'WARNING'


def test_call_timeout_from_environment(monkeypatch, reload_config):
    monkeypatch.setenv('MPRIS_CALL_TIMEOUT', '2.5')
    assert reload_config().MPRIS_CALL_TIMEOUT == 2.5


def test_bad_call_timeout_names_the_variable(monkeypatch, reload_config):
    monkeypatch.setenv('MPRIS_CALL_TIMEOUT', 'soon')
    with pytest.raises(ValueError, match="MPRIS_CALL_TIMEOUT must be a number of seconds, got 'soon'"):
        reload_config()
