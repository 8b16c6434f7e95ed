"""stitchQL – compose SQL from fragments and typed arguments.

Public API
----------
``connect``
    Open a :class:`Session` from :class:`ConnectionSettings` (or the
    environment).

``compose``
    Expand a fragment list into SQL text without a connection.

Re-exported types
-----------------
``Session``, ``QueryBuilder``, ``ResultCursor``, ``RawSQL``, ``Upsert``,
``ConnectionSettings``, the executors, and all error classes.

Extensibility
-------------
New modifiers can be registered via::

    from stitchql.compile.registry import ModifierRegistry

    @ModifierRegistry.register("d")
    def date_modifier(letters, value, escape, escaper):
        return escaper.escape_value(value.isoformat(), escape)

New backends via::

    from stitchql.execute.registry import ExecutorFactory

    @ExecutorFactory.register("duckdb")
    class DuckDBExecutor(Executor):
        ...

After registration, ``connect`` picks it up for any ``ConnectionSettings``
with ``backend="duckdb"``.
"""

from __future__ import annotations

from stitchql.compile.clauses import QueryBuilder
from stitchql.compile.compiler import ModifierCompiler, compose
from stitchql.compile.escaper import Escaper
from stitchql.compile.registry import ModifierRegistry
from stitchql.config import ConnectionSettings, get_settings
from stitchql.errors import (
    CompilationError,
    ConfigurationError,
    EndOfResults,
    ExecutionFailedError,
    InvalidArgumentOrderError,
    MalformedArgumentsError,
    ModifierArgumentError,
    ResultError,
    ResultNotBufferedError,
    StitchQLError,
    UnknownColumnError,
    UnknownModifierError,
)
from stitchql.execute.base import ExecutionOutcome, Executor
from stitchql.execute.mysql import PyMySQLExecutor
from stitchql.execute.registry import ExecutorFactory
from stitchql.execute.sqlite import SQLiteExecutor
from stitchql.observe import LoggingObserver, QueryObserver
from stitchql.result.cursor import ResultCursor
from stitchql.result.tables import BufferedResult, StreamingResult, TabularResult
from stitchql.schema.values import RawSQL, Upsert, raw
from stitchql.session import Session

# ---------------------------------------------------------------------------
# Register built-in executors with ExecutorFactory
# ---------------------------------------------------------------------------

ExecutorFactory.register_class("sqlite", SQLiteExecutor)
ExecutorFactory.register_class("mysql", PyMySQLExecutor)

__all__ = [
    # Entry points
    "connect",
    "compose",
    # Session
    "Session",
    "LoggingObserver",
    "QueryObserver",
    # Composition
    "Escaper",
    "ModifierCompiler",
    "ModifierRegistry",
    "QueryBuilder",
    "RawSQL",
    "Upsert",
    "raw",
    # Results
    "ResultCursor",
    "TabularResult",
    "BufferedResult",
    "StreamingResult",
    # Execution
    "ConnectionSettings",
    "get_settings",
    "Executor",
    "ExecutionOutcome",
    "ExecutorFactory",
    "PyMySQLExecutor",
    "SQLiteExecutor",
    # Errors
    "StitchQLError",
    "CompilationError",
    "MalformedArgumentsError",
    "InvalidArgumentOrderError",
    "UnknownModifierError",
    "ModifierArgumentError",
    "ResultError",
    "UnknownColumnError",
    "EndOfResults",
    "ResultNotBufferedError",
    "ExecutionFailedError",
    "ConfigurationError",
]


def connect(
    settings: ConnectionSettings | None = None,
    observer: QueryObserver | None = None,
) -> Session:
    """Open a :class:`Session` for the configured backend.

    Example::

        with stitchql.connect(ConnectionSettings(backend="sqlite")) as db:
            db.query("CREATE TABLE t (id INTEGER)")

    Args:
        settings: Connection settings; defaults to :func:`get_settings`.
        observer: Optional statement observer, e.g. :class:`LoggingObserver`.

    Returns:
        A new :class:`Session` owning the opened executor.

    Raises:
        ConfigurationError: If no executor is registered for the backend.
        ExecutionFailedError: If the connection cannot be opened.
    """
    executor = ExecutorFactory.create(settings or get_settings())
    return Session(executor, observer=observer)
