"""SQLite executor."""
from __future__ import annotations

import logging
import sqlite3
from collections.abc import Iterator, Sequence
from typing import Any

from stitchql.config import ConnectionSettings
from stitchql.errors import ExecutionFailedError
from stitchql.execute.base import ExecutionOutcome, Executor
from stitchql.result.tables import BufferedResult, StreamingResult

logger = logging.getLogger(__name__)


class SQLiteExecutor(Executor):
    """Runs statements on a Python ``sqlite3`` connection.

    The connection is opened in autocommit mode (``isolation_level=None``)
    so transactions are driven only by explicit ``BEGIN`` / ``COMMIT``.

    SQLite accepts MySQL-style back-tick identifiers, so everything except
    ``%va`` (``ON DUPLICATE KEY UPDATE``) runs unchanged.  The escaping
    primitive doubles single quotes; SQLite does not treat backslashes
    specially.

    Args:
        database: File path, or ``":memory:"``.
        timeout: Seconds to wait on a locked database.
        connection: An already open connection to wrap instead.
    """

    begin_statements = ("BEGIN",)

    def __init__(
        self,
        database: str = ":memory:",
        timeout: float = 5.0,
        connection: sqlite3.Connection | None = None,
    ) -> None:
        if connection is None:
            connection = sqlite3.connect(database, timeout=timeout, isolation_level=None)
            logger.info("Opened SQLite database %s", database)
        self._conn = connection

    @classmethod
    def from_settings(cls, settings: ConnectionSettings) -> SQLiteExecutor:
        return cls(settings.database, timeout=float(settings.connect_timeout))

    @property
    def backend_name(self) -> str:
        return "sqlite"

    @property
    def connection(self) -> sqlite3.Connection:
        return self._conn

    def escape_string(self, raw: str) -> str:
        return raw.replace("'", "''")

    def execute(self, sql: str, buffered: bool = True) -> ExecutionOutcome:
        try:
            cursor = self._conn.execute(sql)
        except (sqlite3.Error, sqlite3.Warning) as exc:
            raise ExecutionFailedError(
                str(exc), sql=sql, driver_code=getattr(exc, "sqlite_errorcode", None)
            ) from exc

        if cursor.description is None:
            outcome = ExecutionOutcome(
                affected_rows=cursor.rowcount,
                last_insert_id=cursor.lastrowid,
            )
            cursor.close()
            return outcome

        columns = [column[0] for column in cursor.description]
        if not buffered:
            return ExecutionOutcome(
                result=StreamingResult(
                    _stream(cursor, columns, sql), columns, on_close=cursor.close
                )
            )

        try:
            rows = cursor.fetchall()
        except sqlite3.Error as exc:
            raise ExecutionFailedError(str(exc), sql=sql) from exc
        finally:
            cursor.close()
        return ExecutionOutcome(
            result=BufferedResult((dict(zip(columns, row)) for row in rows), columns),
            affected_rows=len(rows),
        )

    def close(self) -> None:
        self._conn.close()
        logger.info("Closed SQLite connection")


def _stream(
    cursor: sqlite3.Cursor, columns: Sequence[str], sql: str
) -> Iterator[dict[str, Any]]:
    try:
        for row in cursor:
            yield dict(zip(columns, row))
    except sqlite3.Error as exc:
        raise ExecutionFailedError(
            str(exc), sql=sql, driver_code=getattr(exc, "sqlite_errorcode", None)
        ) from exc
