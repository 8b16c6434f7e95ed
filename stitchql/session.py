"""Compose-and-execute facade over one executor.

``Session`` wires the :class:`~stitchql.compile.compiler.ModifierCompiler`
(with the executor's own escaping primitive) to an
:class:`~stitchql.execute.base.Executor`, wraps row-returning statements in
a :class:`~stitchql.result.cursor.ResultCursor`, and reports every executed
statement to an optional observer::

    with stitchql.connect(ConnectionSettings(backend="sqlite")) as db:
        db.query("CREATE TABLE users (id INTEGER PRIMARY KEY, name TEXT)")
        new_id = db.query("INSERT INTO users %v", {"name": "Ada"}).last_insert_id()
        name = db.query("SELECT name FROM users WHERE id = %i", new_id).fetch_one()

Result lifetime
---------------
A cursor over an unbuffered result holds the connection until it is drained
or closed.  Serialising those lifetimes per session is the caller's job.
"""
from __future__ import annotations

import io
import logging
import sys
import time
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any, TextIO

from stitchql.compile.clauses import QueryBuilder
from stitchql.compile.compiler import ModifierCompiler
from stitchql.compile.escaper import Escaper
from stitchql.errors import ExecutionFailedError
from stitchql.execute.base import ExecutionOutcome, Executor
from stitchql.observe import QueryObserver
from stitchql.result.cursor import ResultCursor
from stitchql.schema.values import RawSQL

logger = logging.getLogger(__name__)


class Session:
    """Composes, executes and shapes statements on one connection.

    Args:
        executor: The driver-specific executor; the session owns it and
            closes it in :meth:`close`.
        observer: Optional callable ``(succeeded, sql, elapsed_seconds)``
            invoked after every executed statement.
    """

    def __init__(self, executor: Executor, observer: QueryObserver | None = None) -> None:
        self._executor = executor
        self._observer = observer
        self._compiler = ModifierCompiler(Escaper(executor.escape_string))
        self._last: ExecutionOutcome | None = None

    # ------------------------------------------------------------------
    # Configuration
    # ------------------------------------------------------------------

    @property
    def executor(self) -> Executor:
        return self._executor

    @property
    def escaper(self) -> Escaper:
        """Quoting bound to this connection's escaping primitive."""
        return self._compiler.escaper

    @property
    def observer(self) -> QueryObserver | None:
        return self._observer

    def set_observer(self, observer: QueryObserver | None) -> Session:
        """Replace the statement observer (``None`` disables it)."""
        self._observer = observer
        return self

    # ------------------------------------------------------------------
    # Composition
    # ------------------------------------------------------------------

    def compose(self, *fragments: Any) -> str:
        """Return the SQL that :meth:`query` would execute, without executing it."""
        return self._compiler.compile(fragments)

    def builder(self) -> QueryBuilder:
        return QueryBuilder()

    def statement(self, sql: str) -> RawSQL:
        """Wrap ``sql`` so modifiers emit it verbatim (e.g. ``NOW()``)."""
        return RawSQL(sql=sql)

    # ------------------------------------------------------------------
    # Execution
    # ------------------------------------------------------------------

    def query(self, *fragments: Any) -> ResultCursor | Session:
        """Compose and run a statement with a buffered result.

        Returns:
            A :class:`ResultCursor` for row-returning statements, otherwise
            the session itself so ``affected_rows()`` / ``last_insert_id()``
            can be chained.

        Raises:
            CompilationError: (or subclass) if the fragments do not compose.
            ExecutionFailedError: If the backend rejects the statement.
        """
        return self._execute(self.compose(*fragments), buffered=True)

    def unbuffered_query(self, *fragments: Any) -> ResultCursor | Session:
        """Like :meth:`query`, but rows stream from the server.

        The returned cursor cannot rewind or count rows.
        """
        return self._execute(self.compose(*fragments), buffered=False)

    def debug_query(self, *fragments: Any, file: TextIO | None = None) -> ResultCursor | Session:
        """Write the composed SQL to ``file`` (default: stdout), then run it."""
        sql = self.compose(*fragments)
        print(sql, end="", file=file or sys.stdout)
        return self._execute(sql, buffered=True)

    def run_script(self, source: str | TextIO) -> int:
        """Run every statement of a SQL script; return how many ran.

        A statement ends at a line whose last non-blank character is ``;``.
        A final statement without ``;`` still runs.  Statements are sent
        verbatim, without modifier expansion.  Two statements on one line are
        sent together, which most backends reject.
        """
        lines = io.StringIO(source) if isinstance(source, str) else source
        count = 0
        pending: list[str] = []
        for line in lines:
            pending.append(line)
            if line.rstrip().endswith(";"):
                self.query("%X", "".join(pending))
                pending = []
                count += 1

        rest = "".join(pending)
        if rest.strip():
            self.query("%X", rest)
            count += 1
        logger.debug("Ran %d statement(s) from script", count)
        return count

    # ------------------------------------------------------------------
    # Last statement info
    # ------------------------------------------------------------------

    def affected_rows(self) -> int:
        """Rows affected by the last statement (``-1`` if unknown)."""
        return self._last.affected_rows if self._last is not None else -1

    def last_insert_id(self) -> int | None:
        """Auto-increment value generated by the last statement."""
        return self._last.last_insert_id if self._last is not None else None

    # ------------------------------------------------------------------
    # Transactions
    # ------------------------------------------------------------------

    def begin_transaction(self) -> Session:
        for sql in self._executor.begin_statements:
            self._execute(sql, buffered=True)
        logger.info("Transaction started")
        return self

    def commit(self) -> Session:
        for sql in self._executor.commit_statements:
            self._execute(sql, buffered=True)
        logger.info("Transaction committed")
        return self

    def rollback(self) -> Session:
        for sql in self._executor.rollback_statements:
            self._execute(sql, buffered=True)
        logger.info("Transaction rolled back")
        return self

    @contextmanager
    def transaction(self) -> Iterator[Session]:
        """Run the block in a transaction; commit on success, roll back on error."""
        self.begin_transaction()
        try:
            yield self
        except Exception:
            self.rollback()
            raise
        self.commit()

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def close(self) -> None:
        self._executor.close()

    def __enter__(self) -> Session:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _execute(self, sql: str, buffered: bool) -> ResultCursor | Session:
        started = time.perf_counter()
        try:
            outcome = self._executor.execute(sql, buffered=buffered)
        except ExecutionFailedError as exc:
            logger.warning("Statement failed (%s): %s", exc.error, sql)
            try:
                self._notify(False, sql, time.perf_counter() - started)
            except Exception:
                # The driver error is the one the caller must see.
                logger.exception("Query observer raised while reporting a failed statement")
            raise
        self._notify(True, sql, time.perf_counter() - started)

        self._last = outcome
        if outcome.result is not None:
            return ResultCursor(outcome.result)
        return self

    def _notify(self, succeeded: bool, sql: str, elapsed: float) -> None:
        if self._observer is not None:
            self._observer(succeeded, sql, elapsed)
