"""Executor abstractions: ExecutionOutcome and the Executor ABC.

An executor is the only part of stitchQL that talks to a database driver.
It supplies the driver's escaping primitive to the compiler and runs
finished SQL text, returning an :class:`ExecutionOutcome`.  Subclasses
implement the driver-specific steps; :class:`~stitchql.session.Session`
uses this interface via the Strategy pattern.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING, ClassVar

from stitchql.result.tables import TabularResult

if TYPE_CHECKING:
    from stitchql.config import ConnectionSettings


@dataclass
class ExecutionOutcome:
    """What a single statement execution produced.

    Attributes:
        result: The tabular result for row-returning statements, else ``None``.
        affected_rows: Rows changed by a data-modifying statement
            (``-1`` when the driver cannot tell).
        last_insert_id: Auto-increment value generated by the statement,
            when the driver reports one.
    """

    result: TabularResult | None = None
    affected_rows: int = -1
    last_insert_id: int | None = None

    @property
    def returns_rows(self) -> bool:
        return self.result is not None


class Executor(ABC):
    """Abstract base for driver-specific statement executors.

    Errors raised by the driver must be re-raised as
    :class:`~stitchql.errors.ExecutionFailedError` carrying the SQL text.
    """

    #: Statements that open a transaction.
    begin_statements: ClassVar[tuple[str, ...]] = ("START TRANSACTION",)
    #: Statements that commit the open transaction.
    commit_statements: ClassVar[tuple[str, ...]] = ("COMMIT",)
    #: Statements that roll back the open transaction.
    rollback_statements: ClassVar[tuple[str, ...]] = ("ROLLBACK",)

    @classmethod
    @abstractmethod
    def from_settings(cls, settings: ConnectionSettings) -> Executor:
        """Open an executor from :class:`~stitchql.config.ConnectionSettings`."""

    @abstractmethod
    def escape_string(self, raw: str) -> str:
        """Return ``raw`` made safe for use inside single quotes.

        Args:
            raw: Unescaped text.

        Returns:
            Escaped text, without the enclosing quotes.
        """

    @abstractmethod
    def execute(self, sql: str, buffered: bool = True) -> ExecutionOutcome:
        """Run one SQL statement.

        Args:
            sql: Final SQL text.
            buffered: Fetch all rows client-side (``True``) or stream them
                from the server (``False``).

        Returns:
            The :class:`ExecutionOutcome` of the statement.

        Raises:
            ExecutionFailedError: If the driver rejects the statement.
        """

    @abstractmethod
    def close(self) -> None:
        """Close the underlying connection."""

    @property
    @abstractmethod
    def backend_name(self) -> str:
        """Return the canonical backend name (``'sqlite'`` or ``'mysql'``)."""
