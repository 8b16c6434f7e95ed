"""Custom exception hierarchy for stitchQL.

All public errors inherit from StitchQLError so callers can catch the base
class for any stitchQL-specific failure.
"""
from __future__ import annotations

from typing import Any


class StitchQLError(Exception):
    """Base exception for all stitchQL errors.

    Args:
        message: Human-readable description.
        code: Machine-readable error code (e.g. UNKNOWN_MODIFIER).
        details: Extra context useful for diagnostics.
    """

    default_code = "STITCHQL_ERROR"

    def __init__(
        self,
        message: str,
        code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code or self.default_code
        self.details: dict[str, Any] = details or {}

    def to_error_response(self) -> dict[str, Any]:
        """Returns a structured error response."""
        return {
            "error": self.code,
            "message": str(self),
            "details": self.details,
        }


class CompilationError(StitchQLError):
    """Raised when a fragment list cannot be composed into SQL.

    Args:
        message: Human-readable description.
        fragment: The fragment being compiled when the error occurred.
    """

    default_code = "COMPILATION_ERROR"

    def __init__(
        self,
        message: str,
        fragment: Any = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, details=details)
        self.fragment = fragment


class MalformedArgumentsError(CompilationError):
    """Raised when the fragment list is not a list or tuple."""

    default_code = "MALFORMED_ARGUMENTS"

    def __init__(self, received: Any) -> None:
        super().__init__(
            f"Fragments must be a list or tuple, got {type(received).__name__}.",
            fragment=received,
            details={"type": type(received).__name__},
        )


class InvalidArgumentOrderError(CompilationError):
    """Raised when a literal position holds a non-string or an argument is missing."""

    default_code = "INVALID_ARGUMENT_ORDER"

    def __init__(self, message: str, position: int, fragment: Any = None) -> None:
        super().__init__(message, fragment=fragment, details={"position": position})
        self.position = position


class UnknownModifierError(CompilationError):
    """Raised when a ``%`` token names no registered modifier."""

    default_code = "UNKNOWN_MODIFIER"

    def __init__(self, modifier: str, fragment: str | None = None) -> None:
        super().__init__(
            f"Unknown modifier '%{modifier}'.",
            fragment=fragment,
            details={"modifier": modifier},
        )
        self.modifier = modifier


class ModifierArgumentError(CompilationError):
    """Raised when a modifier's argument has a shape or value it cannot expand."""

    default_code = "MODIFIER_ARGUMENT"

    def __init__(self, modifier: str, message: str, value: Any = None) -> None:
        super().__init__(
            f"%{modifier}: {message}",
            fragment=value,
            details={"modifier": modifier},
        )
        self.modifier = modifier


class ResultError(StitchQLError):
    """Base class for result-shaping failures."""

    default_code = "RESULT_ERROR"


class UnknownColumnError(ResultError):
    """Raised when a projection references a column absent from the row."""

    default_code = "UNKNOWN_COLUMN"

    def __init__(self, column: str | int, available: list[str]) -> None:
        super().__init__(
            f"Column {column!r} is not in the result.",
            details={"column": column, "available_columns": available},
        )
        self.column = column


class EndOfResults(ResultError):
    """Signals that a single-row fetch ran past the last row."""

    default_code = "END_OF_RESULTS"

    def __init__(self) -> None:
        super().__init__("No more rows in the result.")


class ResultNotBufferedError(ResultError, TypeError):
    """Raised when a row count is requested from a streaming result.

    Also a ``TypeError`` so ``len()``-probing builtins such as ``list()`` fall
    back to plain iteration.
    """

    default_code = "RESULT_NOT_BUFFERED"

    def __init__(self, operation: str) -> None:
        super().__init__(
            f"{operation}() is not supported on a streaming result.",
            details={"operation": operation},
        )


class ExecutionFailedError(StitchQLError):
    """Raised when the execution backend rejects a statement.

    Args:
        message: The driver's error message.
        sql: The SQL text that failed.
        driver_code: The driver's numeric error code, when it has one.
    """

    default_code = "EXECUTION_FAILED"

    def __init__(
        self,
        message: str,
        sql: str = "",
        driver_code: int | None = None,
    ) -> None:
        full = f"{message}: {sql}" if sql else message
        super().__init__(full, details={"sql": sql, "driver_code": driver_code})
        self.error = message
        self.sql = sql
        self.driver_code = driver_code


class ConfigurationError(StitchQLError):
    """Raised when connection settings name an unknown or unusable backend."""

    default_code = "CONFIGURATION"
