"""Built-in ``%`` modifier handlers.

Importing this module registers every built-in modifier with
:class:`~stitchql.compile.registry.ModifierRegistry`:

====== ==========================================================
``i``  integer cast, unquoted
``f``  float cast, unquoted
``s``  quoted string (``S``: not escaped)
``t``  back-tick quoted, dot-qualified identifier (``T``: back-ticks kept)
``x``  verbatim SQL (``X``: not escaped)
``in`` ``IN (...)`` set membership; ``nin`` for ``NOT IN (...)``
``a``  ``UPDATE ... SET`` assignment list from a mapping
``v``  ``INSERT`` column list and ``VALUES`` rows
``va`` ``INSERT ... ON DUPLICATE KEY UPDATE``
====== ==========================================================

Upper-case letters disable escaping for the modifiers where that matters.

``%i`` and ``%f`` accept numbers and strings that parse completely as a
number.  A string with trailing junk (``"12abc"``) or no digits at all is
rejected rather than truncated to its numeric prefix or to ``0`` the way a
loose C-style cast would.
"""
from __future__ import annotations

import math
import numbers
from collections.abc import Iterable, Mapping, Sequence
from decimal import Decimal
from typing import Any

from stitchql.compile.escaper import Escaper, to_text
from stitchql.compile.registry import ModifierRegistry
from stitchql.errors import ModifierArgumentError
from stitchql.schema.values import RawSQL, Upsert

#: Expression that re-surfaces an existing auto-increment value on update.
LAST_INSERT_ID = "LAST_INSERT_ID"


# ---------------------------------------------------------------------------
# Numeric casts
# ---------------------------------------------------------------------------


def _parse_number(letters: str, value: Any) -> float | int:
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, (numbers.Real, Decimal)):
        return value  # type: ignore[return-value]
    if isinstance(value, (str, bytes, bytearray)):
        text = to_text(value).strip()
        try:
            return int(text)
        except ValueError:
            pass
        try:
            return float(text)
        except ValueError:
            pass
    raise ModifierArgumentError(letters, f"cannot cast {value!r} to a number.", value)


def _require_finite(letters: str, number: Any, value: Any) -> None:
    if isinstance(number, (float, Decimal)) and not math.isfinite(number):
        raise ModifierArgumentError(letters, f"{value!r} is not a finite number.", value)


@ModifierRegistry.register("i")
def _integer_handler(letters: str, value: Any, escape: bool, escaper: Escaper) -> str:
    number = _parse_number(letters, value)
    _require_finite(letters, number, value)
    return str(int(number))


@ModifierRegistry.register("f")
def _float_handler(letters: str, value: Any, escape: bool, escaper: Escaper) -> str:
    number = float(_parse_number(letters, value))
    _require_finite(letters, number, value)
    return repr(number)


# ---------------------------------------------------------------------------
# Scalars and identifiers
# ---------------------------------------------------------------------------


@ModifierRegistry.register("s")
def _string_handler(letters: str, value: Any, escape: bool, escaper: Escaper) -> str:
    return escaper.escape_value(value, escape)


@ModifierRegistry.register("t")
def _identifier_handler(letters: str, value: Any, escape: bool, escaper: Escaper) -> str:
    return escaper.escape_identifier(to_text(value), escape)


@ModifierRegistry.register("x")
def _verbatim_handler(letters: str, value: Any, escape: bool, escaper: Escaper) -> str:
    text = to_text(value)
    return escaper.escape(text) if escape else text


# ---------------------------------------------------------------------------
# Set membership
# ---------------------------------------------------------------------------


def _as_items(letters: str, value: Any) -> list[Any]:
    if isinstance(value, (str, bytes, bytearray, Mapping, RawSQL)) or not isinstance(
        value, Iterable
    ):
        raise ModifierArgumentError(
            letters, f"expected a list, tuple or set, got {type(value).__name__}.", value
        )
    return list(value)


def _set_handler(letters: str, value: Any, escape: bool, escaper: Escaper) -> str:
    negate = letters.lower() == "nin"
    items = _as_items(letters, value)
    if not items:
        # Keeps "WHERE col %in" valid: matches nothing / everything non-NULL.
        return "IS NOT NULL" if negate else "AND FALSE"
    body = ", ".join(escaper.escape_value(item, escape) for item in items)
    return f"{'NOT ' if negate else ''}IN ({body})"


ModifierRegistry.register_handler("in", _set_handler)
ModifierRegistry.register_handler("nin", _set_handler)


# ---------------------------------------------------------------------------
# Mapping-driven UPDATE / INSERT clauses
# ---------------------------------------------------------------------------


def _as_rows(letters: str, value: Any) -> list[Mapping[str, Any]]:
    if isinstance(value, Mapping):
        return [value]
    if isinstance(value, Sequence) and not isinstance(value, (str, bytes, bytearray)):
        rows = list(value)
        if not rows:
            raise ModifierArgumentError(letters, "no rows to insert.", value)
        for row in rows:
            if not isinstance(row, Mapping):
                raise ModifierArgumentError(
                    letters, f"every row must be a mapping, got {type(row).__name__}.", value
                )
        return rows
    raise ModifierArgumentError(
        letters, f"expected a mapping or a list of mappings, got {type(value).__name__}.", value
    )


def render_insert(
    letters: str,
    rows: list[Mapping[str, Any]],
    escape: bool,
    escaper: Escaper,
) -> str:
    """Render ``(cols) VALUES (row), (row), ...`` with columns from the first row."""
    columns = list(rows[0])
    expected = set(columns)
    tuples: list[str] = []
    for index, row in enumerate(rows):
        if set(row) != expected:
            raise ModifierArgumentError(
                letters,
                f"row {index} has columns {sorted(map(str, row))}, "
                f"expected {sorted(map(str, columns))}.",
                row,
            )
        values = ", ".join(escaper.escape_value(row[col], escape) for col in columns)
        tuples.append(f"({values})")
    names = ", ".join(escaper.quote_column(col) for col in columns)
    return f"({names}) VALUES {', '.join(tuples)}"


@ModifierRegistry.register("a")
def _assignment_handler(letters: str, value: Any, escape: bool, escaper: Escaper) -> str:
    if not isinstance(value, Mapping):
        raise ModifierArgumentError(
            letters, f"expected a mapping, got {type(value).__name__}.", value
        )
    return ", ".join(
        f"{escaper.quote_column(key)} = {escaper.escape_value(item, escape)}"
        for key, item in value.items()
    )


@ModifierRegistry.register("v")
def _insert_handler(letters: str, value: Any, escape: bool, escaper: Escaper) -> str:
    return render_insert(letters, _as_rows(letters, value), escape, escaper)


@ModifierRegistry.register("va")
def _upsert_handler(letters: str, value: Any, escape: bool, escaper: Escaper) -> str:
    if isinstance(value, Upsert):
        rows: list[Mapping[str, Any]] = value.rows
        update = value.update_columns
        auto_increment = value.auto_increment
    else:
        rows = _as_rows(letters, value)
        update = list(rows[0])
        auto_increment = None

    assignments = [
        f"{escaper.quote_column(col)} = VALUES({escaper.quote_column(col)})" for col in update
    ]
    if auto_increment:
        quoted = escaper.quote_column(auto_increment)
        assignments.append(f"{quoted} = {LAST_INSERT_ID}({quoted})")
    if not assignments:
        raise ModifierArgumentError(letters, "no columns to update on duplicate key.", value)

    insert_sql = render_insert(letters, rows, escape, escaper)
    return f"{insert_sql} ON DUPLICATE KEY UPDATE {', '.join(assignments)}"
