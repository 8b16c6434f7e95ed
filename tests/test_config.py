"""Unit tests for ConnectionSettings and ExecutorFactory."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

import stitchql
from stitchql.config import ConnectionSettings, get_settings
from stitchql.errors import ConfigurationError
from stitchql.execute.registry import ExecutorFactory
from stitchql.execute.sqlite import SQLiteExecutor
from tests.fixtures import RecordingExecutor


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for name in ("BACKEND", "DATABASE", "HOST", "PORT", "USER", "PASSWORD"):
        monkeypatch.delenv(f"STITCHQL_{name}", raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


def test_defaults():
    settings = ConnectionSettings()
    assert settings.backend == "sqlite"
    assert settings.database == ":memory:"
    assert settings.port == 3306
    assert settings.charset == "utf8mb4"
    assert settings.connect_timeout == 10


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("STITCHQL_BACKEND", "mysql")
    monkeypatch.setenv("STITCHQL_PORT", "3307")
    monkeypatch.setenv("STITCHQL_PASSWORD", "hunter2")
    settings = ConnectionSettings()
    assert settings.backend == "mysql"
    assert settings.port == 3307
    assert settings.password.get_secret_value() == "hunter2"
    assert "hunter2" not in repr(settings)


def test_keyword_arguments_win_over_environment(monkeypatch):
    monkeypatch.setenv("STITCHQL_DATABASE", "from_env.db")
    assert ConnectionSettings(database="explicit.db").database == "explicit.db"


@pytest.mark.parametrize(
    "kwargs",
    [{"backend": ""}, {"connect_timeout": 0}, {"port": "not-a-port"}],
)
def test_invalid_settings(kwargs):
    with pytest.raises(ValidationError):
        ConnectionSettings(**kwargs)


def test_get_settings_is_cached():
    assert get_settings() is get_settings()


def test_builtin_backends_registered():
    assert {"mysql", "sqlite"} <= set(ExecutorFactory.registered_backends())


def test_factory_creates_sqlite_executor():
    executor = ExecutorFactory.create(ConnectionSettings(backend="sqlite"))
    try:
        assert isinstance(executor, SQLiteExecutor)
        assert executor.backend_name == "sqlite"
    finally:
        executor.close()


def test_factory_unknown_backend():
    settings = ConnectionSettings(backend="duckdb")
    with pytest.raises(ConfigurationError) as exc_info:
        ExecutorFactory.create(settings)
    assert exc_info.value.code == "CONFIGURATION"
    assert exc_info.value.details == {"backend": "duckdb"}


def test_factory_register_decorator():
    ExecutorFactory.register("recording")(RecordingExecutor)
    try:
        settings = ConnectionSettings(backend="recording")
        session = stitchql.connect(settings)
        assert isinstance(session.executor, RecordingExecutor)
    finally:
        ExecutorFactory._executors.pop("recording", None)


def test_connect_uses_environment(monkeypatch):
    monkeypatch.setenv("STITCHQL_BACKEND", "sqlite")
    with stitchql.connect() as session:
        assert session.executor.backend_name == "sqlite"
