"""Tabular results returned by an executor.

A tabular result is an ordered sequence of rows, each a ``dict`` mapping
column name to value in result-column order.  Executors produce one of two
kinds:

``BufferedResult``
    Every row held client-side.  Seekable and countable.
``StreamingResult``
    Rows pulled from the driver one at a time.  Forward-only: ``seek`` is a
    silent no-op and ``num_rows`` is unsupported.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable, Iterable, Iterator, Mapping, Sequence
from typing import Any

from stitchql.errors import ResultNotBufferedError

Row = dict[str, Any]


class TabularResult(ABC):
    """Row source consumed by :class:`~stitchql.result.cursor.ResultCursor`."""

    #: ``True`` when rows are held client-side and the result can seek.
    buffered: bool = False

    @abstractmethod
    def fetch(self) -> Row | None:
        """Return the next row, or ``None`` once the result is exhausted."""

    @abstractmethod
    def seek(self, index: int) -> None:
        """Move the read position to row ``index`` (no-op when unbuffered)."""

    @abstractmethod
    def num_rows(self) -> int:
        """Return the total row count."""

    @property
    @abstractmethod
    def columns(self) -> list[str]:
        """Column names in result order (empty when unknown)."""

    def close(self) -> None:
        """Release the underlying driver resources."""


class BufferedResult(TabularResult):
    """A fully materialised result.

    Args:
        rows: Row mappings in result order.
        columns: Column names; taken from the first row when omitted.
    """

    buffered = True

    def __init__(
        self,
        rows: Iterable[Mapping[str, Any]],
        columns: Sequence[str] | None = None,
    ) -> None:
        self._rows: list[Row] = [dict(row) for row in rows]
        if columns is None:
            columns = list(self._rows[0]) if self._rows else []
        self._columns = list(columns)
        self._position = 0

    def fetch(self) -> Row | None:
        if self._position >= len(self._rows):
            return None
        row = self._rows[self._position]
        self._position += 1
        return dict(row)

    def seek(self, index: int) -> None:
        self._position = max(0, min(index, len(self._rows)))

    def num_rows(self) -> int:
        return len(self._rows)

    @property
    def columns(self) -> list[str]:
        return list(self._columns)

    def close(self) -> None:
        self._rows = []
        self._position = 0


class StreamingResult(TabularResult):
    """A forward-only result read lazily from the driver.

    Args:
        rows: Iterator yielding row mappings.
        columns: Column names, when the driver reports them up front.
        on_close: Called once when the result is released (e.g. to close
            a server-side cursor).
    """

    buffered = False

    def __init__(
        self,
        rows: Iterable[Mapping[str, Any]],
        columns: Sequence[str] | None = None,
        on_close: Callable[[], None] | None = None,
    ) -> None:
        self._rows: Iterator[Mapping[str, Any]] = iter(rows)
        self._columns = list(columns or [])
        self._on_close = on_close
        self._closed = False

    def fetch(self) -> Row | None:
        if self._closed:
            return None
        row = next(self._rows, None)
        return None if row is None else dict(row)

    def seek(self, index: int) -> None:
        # Forward-only: a rewind silently leaves the position where it is.
        return None

    def num_rows(self) -> int:
        raise ResultNotBufferedError("num_rows")

    @property
    def columns(self) -> list[str]:
        return list(self._columns)

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        close_rows = getattr(self._rows, "close", None)
        if callable(close_rows):
            close_rows()
        if self._on_close is not None:
            self._on_close()
