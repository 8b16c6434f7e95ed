"""Statement observers.

A :class:`~stitchql.session.Session` calls its observer synchronously right
after every statement it executes, before any failure is raised, with
``(succeeded, sql, elapsed_seconds)``.  Any callable with that signature
works::

    slow = []

    def track_slow(succeeded: bool, sql: str, elapsed: float) -> None:
        if elapsed > 0.5:
            slow.append(sql)

    session = Session(executor, observer=track_slow)
"""
from __future__ import annotations

import logging
from typing import Protocol, runtime_checkable


@runtime_checkable
class QueryObserver(Protocol):
    """Callable invoked after each executed statement."""

    def __call__(self, succeeded: bool, sql: str, elapsed: float) -> None: ...


class LoggingObserver:
    """Forwards every executed statement to a :mod:`logging` logger.

    Successful statements are logged at ``level``; failures at ``WARNING``.
    Statements slower than ``slow_threshold`` seconds are logged at
    ``WARNING`` too.

    Args:
        logger: Target logger; defaults to ``stitchql.queries``.
        level: Level for successful statements.
        slow_threshold: Seconds above which a statement counts as slow.
    """

    def __init__(
        self,
        logger: logging.Logger | None = None,
        level: int = logging.DEBUG,
        slow_threshold: float | None = None,
    ) -> None:
        self._logger = logger or logging.getLogger("stitchql.queries")
        self._level = level
        self._slow_threshold = slow_threshold

    def __call__(self, succeeded: bool, sql: str, elapsed: float) -> None:
        if not succeeded:
            self._logger.warning("Query failed after %.4fs: %s", elapsed, sql)
        elif self._slow_threshold is not None and elapsed > self._slow_threshold:
            self._logger.warning("Slow query (%.4fs): %s", elapsed, sql)
        else:
            self._logger.log(self._level, "Query ok (%.4fs): %s", elapsed, sql)
