"""Test fixtures: sample DDL, sample rows and a recording executor."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Any

from stitchql.config import ConnectionSettings
from stitchql.errors import ExecutionFailedError
from stitchql.execute.base import ExecutionOutcome, Executor
from stitchql.result.tables import BufferedResult, StreamingResult

_FIXTURES_DIR = Path(__file__).parent

#: Four rows whose ``value`` column is ``[1, 1, 1, 2]``.
SAMPLE_ROWS: list[dict[str, Any]] = [
    {"id": 1, "name": "Ada", "team": "core", "value": 1},
    {"id": 2, "name": "Grace", "team": "core", "value": 1},
    {"id": 3, "name": "Linus", "team": "infra", "value": 1},
    {"id": 4, "name": "Barbara", "team": "infra", "value": 2},
]


def load_ddl() -> str:
    """Return the sample SQLite DDL script."""
    return (_FIXTURES_DIR / "ddl_sqlite.sql").read_text()


class RecordingExecutor(Executor):
    """In-memory executor that records every statement it is asked to run.

    Statements registered with :meth:`respond` return rows; statements
    registered with :meth:`fail` raise ``ExecutionFailedError``; anything
    else succeeds without a result.
    """

    def __init__(self) -> None:
        self.statements: list[tuple[str, bool]] = []
        self.closed = False
        self._responses: dict[str, tuple[list[dict[str, Any]] | None, int, int | None]] = {}
        self._failures: dict[str, str] = {}

    @classmethod
    def from_settings(cls, settings: ConnectionSettings) -> RecordingExecutor:
        return cls()

    @property
    def backend_name(self) -> str:
        return "recording"

    @property
    def sql(self) -> list[str]:
        """Executed SQL text, in order."""
        return [sql for sql, _ in self.statements]

    def respond(
        self,
        sql: str,
        rows: Sequence[Mapping[str, Any]] | None = None,
        affected_rows: int = 0,
        last_insert_id: int | None = None,
    ) -> None:
        self._responses[sql] = (
            None if rows is None else [dict(row) for row in rows],
            affected_rows,
            last_insert_id,
        )

    def fail(self, sql: str, message: str = "syntax error") -> None:
        self._failures[sql] = message

    def escape_string(self, raw: str) -> str:
        return raw.replace("'", "''")

    def execute(self, sql: str, buffered: bool = True) -> ExecutionOutcome:
        self.statements.append((sql, buffered))
        if sql in self._failures:
            raise ExecutionFailedError(self._failures[sql], sql=sql, driver_code=1064)

        rows, affected_rows, last_insert_id = self._responses.get(sql, (None, 0, None))
        if rows is None:
            return ExecutionOutcome(affected_rows=affected_rows, last_insert_id=last_insert_id)
        result = BufferedResult(rows) if buffered else StreamingResult(rows)
        return ExecutionOutcome(result=result, affected_rows=len(rows))

    def close(self) -> None:
        self.closed = True
