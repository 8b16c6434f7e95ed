"""Tagged argument values understood by the modifier compiler.

A fragment list is a plain Python list, but two of its element kinds carry
intent that a bare ``str`` or ``dict`` cannot express:

``RawSQL``
    A driver-side expression (``NOW()``, ``col + 1``) that must be emitted
    verbatim inside an otherwise escaped context such as ``%v`` or ``%a``.

``Upsert``
    The *complex* form of the ``%va`` modifier.  A plain mapping passed to
    ``%va`` is always the simple form; complex mode is chosen only by
    wrapping the payload in ``Upsert``, so a mistyped ``data`` fails
    validation here instead of silently changing meaning.

Usage::

    from stitchql import Upsert, raw

    session.query("INSERT INTO visits %v", {"path": "/", "seen_at": raw("NOW()")})
    session.query(
        "INSERT INTO users %va",
        Upsert(data={"id": 7, "name": "Ada"}, update=["name"], auto_increment="id"),
    )
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import TYPE_CHECKING, Any, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

if TYPE_CHECKING:
    from stitchql.compile.clauses import QueryBuilder

_FROZEN = ConfigDict(extra="forbid", frozen=True)


class RawSQL(BaseModel):
    """SQL text emitted as-is, never quoted or escaped."""

    model_config = _FROZEN

    sql: str

    def __str__(self) -> str:
        return self.sql


class Upsert(BaseModel):
    """Complex ``%va`` argument: insert payload plus conflict handling.

    Attributes:
        data: One row mapping or a non-empty list of row mappings to insert.
        update: Columns refreshed on a duplicate key.  ``None`` means every
            column of ``data``.
        auto_increment: Column whose existing value is re-surfaced through
            ``LAST_INSERT_ID()`` so the caller recovers the row ID on the
            update path too.
    """

    model_config = _FROZEN

    data: Union[dict[str, Any], list[dict[str, Any]]]
    update: list[str] | None = Field(default=None)
    auto_increment: str | None = None

    @field_validator("data")
    @classmethod
    def _rows_not_empty(cls, value: Any) -> Any:
        if isinstance(value, list) and not value:
            raise ValueError("data must contain at least one row")
        return value

    @property
    def rows(self) -> list[dict[str, Any]]:
        """The insert payload normalised to a list of rows."""
        return self.data if isinstance(self.data, list) else [self.data]

    @property
    def update_columns(self) -> list[str]:
        """Columns listed in the ``ON DUPLICATE KEY UPDATE`` clause."""
        if self.update is not None:
            return list(self.update)
        return list(self.rows[0])


def raw(sql: str) -> RawSQL:
    """Wrap ``sql`` so the compiler emits it verbatim."""
    return RawSQL(sql=sql)


#: A row payload for the ``%a`` / ``%v`` / ``%va`` modifiers.
Row = Mapping[str, Any]

#: Anything that may appear in a fragment list.
Fragment = Union[str, int, float, None, RawSQL, Upsert, Row, Sequence[Any], "QueryBuilder"]
