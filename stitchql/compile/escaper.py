"""Type-directed conversion of Python values to MySQL literals.

The ``Escaper`` owns no state besides the driver's escaping primitive, a
``Callable[[str], str]`` that makes raw text safe inside single quotes.
Standalone composition uses PyMySQL's pure-Python
``pymysql.converters.escape_string``; a :class:`~stitchql.session.Session`
swaps in its executor's primitive so SQLite gets ``''`` doubling instead of
backslash escapes.
"""
from __future__ import annotations

import datetime
from collections.abc import Callable
from typing import Any

from pymysql.converters import escape_string as mysql_escape_string

from stitchql.schema.values import RawSQL

#: Signature of a driver escaping primitive.
EscapeFunc = Callable[[str], str]


def to_text(value: Any) -> str:
    """Return the SQL text form of a non-NULL scalar."""
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "1" if value else "0"
    if isinstance(value, (bytes, bytearray)):
        return bytes(value).decode("utf-8")
    if isinstance(value, datetime.datetime):
        return value.isoformat(sep=" ")
    if isinstance(value, (datetime.date, datetime.time)):
        return value.isoformat()
    return str(value)


class Escaper:
    """Quotes values and identifiers for a single driver.

    Args:
        escape_string: The driver escaping primitive.  Defaults to
            PyMySQL's ``escape_string``.
    """

    def __init__(self, escape_string: EscapeFunc | None = None) -> None:
        self._escape_string = escape_string or mysql_escape_string

    def escape(self, raw: str) -> str:
        """Apply the driver primitive to ``raw``."""
        return self._escape_string(raw)

    def escape_value(self, value: Any, escape: bool) -> str:
        """Return ``value`` as a SQL literal.

        ``None`` becomes ``NULL`` and :class:`RawSQL` is emitted verbatim.
        Everything else is single-quoted, and escaped only when ``escape``.
        """
        if value is None:
            return "NULL"
        if isinstance(value, RawSQL):
            return value.sql
        text = to_text(value)
        return f"'{self.escape(text) if escape else text}'"

    def escape_identifier(self, name: str, escape_backticks: bool) -> str:
        """Back-tick quote a possibly schema-qualified name.

        ``db.table`` becomes ```db`.`table```.  Literal back-ticks are doubled
        only when ``escape_backticks``; the unescaped form lets callers pass
        pre-quoted compound expressions.
        """
        if escape_backticks:
            name = name.replace("`", "``")
        return ".".join(f"`{segment}`" for segment in name.split("."))

    def quote_column(self, name: str) -> str:
        """Back-tick quote a single column name (mapping keys)."""
        escaped = to_text(name).replace("`", "``")
        return f"`{escaped}`"
