"""Connection configuration.

Settings come from keyword arguments, ``STITCHQL_*`` environment variables
or a ``.env`` file, in that order of precedence::

    STITCHQL_BACKEND=mysql
    STITCHQL_HOST=db.internal
    STITCHQL_USER=app
    STITCHQL_PASSWORD=secret
    STITCHQL_DATABASE=shop

    session = stitchql.connect()          # uses get_settings()
    session = stitchql.connect(ConnectionSettings(backend="sqlite", database="app.db"))
"""
from __future__ import annotations

from functools import lru_cache

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class ConnectionSettings(BaseSettings):
    """Where and how to connect.

    Attributes:
        backend: Registered executor name (built in: ``sqlite``, ``mysql``);
            see :class:`~stitchql.execute.registry.ExecutorFactory`.
        database: Database name (MySQL) or file path / ``:memory:`` (SQLite).
        host: MySQL server host.
        port: MySQL server port.
        user: MySQL user.
        password: MySQL password.
        charset: MySQL connection character set.
        connect_timeout: Seconds to wait for the connection (SQLite: lock
            wait timeout).
    """

    model_config = SettingsConfigDict(
        env_prefix="STITCHQL_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    backend: str = Field(default="sqlite", min_length=1, description="Registered executor name")
    database: str = Field(default=":memory:", description="Database name or SQLite path")
    host: str = Field(default="localhost", description="MySQL server host")
    port: int = Field(default=3306, description="MySQL server port")
    user: str = Field(default="", description="MySQL user")
    password: SecretStr = Field(default=SecretStr(""), description="MySQL password")
    charset: str = Field(default="utf8mb4", description="MySQL connection charset")
    connect_timeout: int = Field(default=10, ge=1, description="Connection timeout in seconds")


@lru_cache()
def get_settings() -> ConnectionSettings:
    """Get the cached settings instance built from the environment."""
    return ConnectionSettings()
