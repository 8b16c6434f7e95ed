"""MySQL executor backed by PyMySQL."""
from __future__ import annotations

import logging
from collections.abc import Iterator
from typing import Any

import pymysql
from pymysql.cursors import DictCursor, SSDictCursor

from stitchql.config import ConnectionSettings
from stitchql.errors import ExecutionFailedError
from stitchql.execute.base import ExecutionOutcome, Executor
from stitchql.result.tables import BufferedResult, StreamingResult

logger = logging.getLogger(__name__)


def _driver_error(exc: pymysql.MySQLError) -> tuple[str, int | None]:
    """Split a PyMySQL error into ``(message, errno)``."""
    if len(exc.args) >= 2 and isinstance(exc.args[0], int):
        return str(exc.args[1]), exc.args[0]
    return str(exc), None


class PyMySQLExecutor(Executor):
    """Runs statements on a PyMySQL connection.

    Buffered statements use ``DictCursor``; unbuffered ones use the
    server-side ``SSDictCursor``, whose rows must be consumed (or the cursor
    closed) before the connection runs another statement.

    Args:
        host: Server host.
        user: Login.
        password: Password.
        database: Default schema; empty to select none.
        port: Server port.
        charset: Connection character set.
        connect_timeout: Seconds to wait for the connection.
        connection: An already open PyMySQL connection to wrap instead.

    Raises:
        ExecutionFailedError: If the server cannot be reached.
    """

    begin_statements = ("SET AUTOCOMMIT=0", "START TRANSACTION")
    commit_statements = ("COMMIT", "SET AUTOCOMMIT=1")
    rollback_statements = ("ROLLBACK", "SET AUTOCOMMIT=1")

    def __init__(
        self,
        host: str = "localhost",
        user: str = "",
        password: str = "",
        database: str = "",
        port: int = 3306,
        charset: str = "utf8mb4",
        connect_timeout: int = 10,
        connection: Any = None,
    ) -> None:
        if connection is None:
            try:
                connection = pymysql.connect(
                    host=host,
                    port=port,
                    user=user,
                    password=password,
                    database=database or None,
                    charset=charset,
                    connect_timeout=connect_timeout,
                    autocommit=True,
                    cursorclass=DictCursor,
                )
            except pymysql.MySQLError as exc:
                message, errno = _driver_error(exc)
                logger.error("MySQL connection to %s:%s failed: %s", host, port, message)
                raise ExecutionFailedError(
                    f"Can't connect to database server: {message}", driver_code=errno
                ) from exc
            logger.info("Connected to MySQL %s:%s database=%s", host, port, database)
        self._conn = connection

    @classmethod
    def from_settings(cls, settings: ConnectionSettings) -> PyMySQLExecutor:
        return cls(
            host=settings.host,
            user=settings.user,
            password=settings.password.get_secret_value(),
            database="" if settings.database == ":memory:" else settings.database,
            port=settings.port,
            charset=settings.charset,
            connect_timeout=settings.connect_timeout,
        )

    @property
    def backend_name(self) -> str:
        return "mysql"

    @property
    def connection(self) -> Any:
        return self._conn

    def escape_string(self, raw: str) -> str:
        return self._conn.escape_string(raw)

    def execute(self, sql: str, buffered: bool = True) -> ExecutionOutcome:
        cursor = self._conn.cursor(DictCursor if buffered else SSDictCursor)
        try:
            cursor.execute(sql)
        except pymysql.MySQLError as exc:
            cursor.close()
            message, errno = _driver_error(exc)
            raise ExecutionFailedError(message, sql=sql, driver_code=errno) from exc

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
                result=StreamingResult(_stream(cursor, sql), columns, on_close=cursor.close)
            )

        rows = cursor.fetchall()
        cursor.close()
        return ExecutionOutcome(
            result=BufferedResult(rows, columns),
            affected_rows=len(rows),
        )

    def close(self) -> None:
        self._conn.close()
        logger.info("Closed MySQL connection")


def _stream(cursor: Any, sql: str) -> Iterator[dict[str, Any]]:
    try:
        yield from iter(cursor.fetchone, None)
    except pymysql.MySQLError as exc:
        message, errno = _driver_error(exc)
        raise ExecutionFailedError(message, sql=sql, driver_code=errno) from exc
