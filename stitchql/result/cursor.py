"""Result shaping over a tabular result.

``ResultCursor`` turns the rows of a
:class:`~stitchql.result.tables.TabularResult` into scalars, rows, columns,
nested groupings or key/value maps::

    users = session.query("SELECT id, name, team FROM users")
    users.fetch_pairs("id", "name")   # {1: "Ada", 2: "Grace"}
    users.fetch_assoc("team")         # {"core": [row, row], "infra": [row]}

Auto-rewind
-----------
The first bulk fetch (``fetch_all``, ``fetch_col``, ``fetch_assoc``,
``fetch_pairs``) continues from the current position, so a header row read
with ``fetch_row`` is not repeated.  Every later bulk fetch rewinds first, so
calling the same bulk fetch twice returns the same rows.

Streaming results cannot rewind.  On them the rewind is a silent no-op and a
second bulk fetch, or a second ``for`` loop, sees no rows.
"""
from __future__ import annotations

from collections.abc import Iterator, Sequence
from typing import Any

from stitchql.errors import EndOfResults, UnknownColumnError
from stitchql.result.tables import Row, TabularResult

#: A column selector: a name, or a zero-based position.
ColumnKey = str | int


class ResultCursor:
    """Fetch and iteration API over one tabular result.

    The cursor owns ``result`` and releases it on :meth:`close` (also
    called when used as a context manager).

    Args:
        result: The tabular result produced by an executor.
    """

    def __init__(self, result: TabularResult) -> None:
        self._result = result
        self._auto_rewind = False
        self._index = 0
        self._row: Row | None = None

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def result(self) -> TabularResult:
        return self._result

    @property
    def buffered(self) -> bool:
        return self._result.buffered

    @property
    def columns(self) -> list[str]:
        return self._result.columns

    # ------------------------------------------------------------------
    # Single-row fetches
    # ------------------------------------------------------------------

    def fetch_one(self, column: ColumnKey | None = None) -> Any:
        """Return the named (default: first) column of the next row.

        Raises:
            EndOfResults: If no rows are left.
            UnknownColumnError: If ``column`` is not in the row.
        """
        row = self._fetch_or_end()
        return self._value(row, 0 if column is None else column)

    def fetch_row(self, *columns: str | Sequence[str]) -> Row:
        """Return the next row, projected to ``columns`` when given.

        Columns may be passed as separate arguments or as one list.

        Raises:
            EndOfResults: If no rows are left.
            UnknownColumnError: If a requested column is not in the row.
        """
        row = self._fetch_or_end()
        return self._project(row, self._column_list(columns))

    # ------------------------------------------------------------------
    # Bulk fetches
    # ------------------------------------------------------------------

    def fetch_col(self, column: ColumnKey | None = None) -> list[Any]:
        """Return the named (default: first) column of every remaining row."""
        self._check_auto_rewind()
        key = 0 if column is None else column
        return [self._value(row, key) for row in self._drain()]

    def fetch_all(self, *columns: str | Sequence[str]) -> list[Row]:
        """Return every remaining row, projected to ``columns`` when given."""
        self._check_auto_rewind()
        wanted = self._column_list(columns)
        return [self._project(row, wanted) for row in self._drain()]

    def fetch_assoc(self, *columns: str) -> dict[Any, Any] | list[Row]:
        """Group rows into nested dicts keyed by successive column values.

        ``fetch_assoc("team", "role")`` returns
        ``{team: {role: [row, ...]}}``.  The innermost level is always a
        list of full rows; with no columns the result is that list itself.
        """
        self._check_auto_rewind()
        rows = list(self._drain())
        if not columns:
            return rows

        grouped: dict[Any, Any] = {}
        for row in rows:
            level = grouped
            for column in columns[:-1]:
                level = level.setdefault(self._value(row, column), {})
            level.setdefault(self._value(row, columns[-1]), []).append(row)
        return grouped

    def fetch_pairs(self, key: ColumnKey = 0, value: ColumnKey = 1) -> dict[Any, Any]:
        """Map one column to another across all remaining rows.

        Later rows overwrite earlier ones that share a key.
        """
        self._check_auto_rewind()
        return {self._value(row, key): self._value(row, value) for row in self._drain()}

    # ------------------------------------------------------------------
    # Counting
    # ------------------------------------------------------------------

    def num_rows(self) -> int:
        """Row count of a buffered result.

        Raises:
            ResultNotBufferedError: On a streaming result.
        """
        return self._result.num_rows()

    def count(self) -> int:
        return self.num_rows()

    def __len__(self) -> int:
        return self.num_rows()

    def __bool__(self) -> bool:
        return True

    # ------------------------------------------------------------------
    # Iteration facade
    # ------------------------------------------------------------------

    def rewind(self) -> None:
        """Return to the first row (no-op for streaming results)."""
        self._result.seek(0)
        self._index = 0

    def current(self) -> Row | None:
        """The row loaded by the last :meth:`valid` call."""
        return self._row

    def key(self) -> int:
        return self._index

    def next(self) -> None:
        self._index += 1

    def valid(self) -> bool:
        """Fetch the next row into :meth:`current`; ``False`` at the end."""
        self._row = self._result.fetch()
        return self._row is not None

    def __iter__(self) -> Iterator[Row]:
        self.rewind()
        while self.valid():
            yield self._row  # type: ignore[misc]
            self.next()

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def close(self) -> None:
        self._result.close()

    def __enter__(self) -> ResultCursor:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _check_auto_rewind(self) -> None:
        if self._auto_rewind:
            self.rewind()
        self._auto_rewind = True

    def _fetch_or_end(self) -> Row:
        row = self._result.fetch()
        if row is None:
            raise EndOfResults()
        return row

    def _drain(self) -> Iterator[Row]:
        while True:
            row = self._result.fetch()
            if row is None:
                return
            yield row

    @staticmethod
    def _column_list(columns: tuple[Any, ...]) -> list[str]:
        if len(columns) == 1 and isinstance(columns[0], (list, tuple)):
            return list(columns[0])
        return list(columns)

    @staticmethod
    def _project(row: Row, columns: list[str]) -> Row:
        if not columns:
            return row
        missing = [column for column in columns if column not in row]
        if missing:
            raise UnknownColumnError(missing[0], list(row))
        return {column: row[column] for column in columns}

    @staticmethod
    def _value(row: Row, column: ColumnKey) -> Any:
        if isinstance(column, int) and not isinstance(column, bool):
            values = list(row.values())
            if not 0 <= column < len(values):
                raise UnknownColumnError(column, list(row))
            return values[column]
        if column not in row:
            raise UnknownColumnError(column, list(row))
        return row[column]
