"""Programmatic clause builder.

``QueryBuilder`` accumulates ``SELECT / FROM / WHERE / GROUP BY / HAVING /
ORDER BY / LIMIT`` content as fragment lists and merges them, in that fixed
order, into one fragment list the
:class:`~stitchql.compile.compiler.ModifierCompiler` can consume.  Items may
carry modifiers and their arguments exactly as in a direct ``compose`` call::

    qb = (
        QueryBuilder()
        .select("id")
        .select("name")
        .from_("users")
        .where_and("age > %i", 18)
        .where_and(QueryBuilder().where_or("role = %s", "admin").where_or("role = %s", "owner"))
        .order_by("name")
        .limit(0, 20)
    )
    session.query(qb)
    # SELECT id , name FROM users WHERE ( age > 18 AND ( role = 'admin' OR role = 'owner' ) )
    # ORDER BY name LIMIT 0, 20

Each clause slot is a list of segments ``(separator, items)``.  A segment's
separator is emitted only between segments, so the first one is positional
filler.  A builder passed to ``where_*`` / ``having_*`` is spliced in at call
time as ``( ...its own WHERE / HAVING content... )``, which is how boolean
groups nest to any depth; later changes to that nested builder are not seen.
"""
from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any

# (slot name, SQL keyword, parenthesized) in merge order.
_SLOTS: tuple[tuple[str, str, bool], ...] = (
    ("select", "SELECT", False),
    ("from", "FROM", False),
    ("where", "WHERE", True),
    ("group_by", "GROUP BY", False),
    ("having", "HAVING", True),
    ("order_by", "ORDER BY", False),
)


@dataclass
class _Segment:
    separator: str | None
    items: list[Any]


@dataclass
class ClauseSlot:
    """Ordered fragment content of one clause."""

    segments: list[_Segment] = field(default_factory=list)

    def append(self, separator: str | None, items: Iterable[Any]) -> None:
        items = list(items)
        if items:
            self.segments.append(_Segment(separator, items))

    def clear(self) -> None:
        self.segments.clear()

    def fragments(self) -> list[Any]:
        """Flat fragment list; the leading separator is dropped."""
        out: list[Any] = []
        for index, segment in enumerate(self.segments):
            if index and segment.separator:
                out.append(segment.separator)
            out.extend(segment.items)
        return out

    def __bool__(self) -> bool:
        return bool(self.segments)


class QueryBuilder:
    """Accumulates clause content for later merge into a fragment list.

    The items of one call are consecutive fragments (SQL text followed by
    its modifier arguments); separate calls are joined by the clause's
    separator.  Every mutator returns the builder itself for chaining.
    """

    def __init__(self) -> None:
        self._slots: dict[str, ClauseSlot] = {name: ClauseSlot() for name, _, _ in _SLOTS}
        self._limit: tuple[int, int | None] | None = None

    # ------------------------------------------------------------------
    # Comma-separated clauses
    # ------------------------------------------------------------------

    def select(self, *items: Any) -> QueryBuilder:
        self._slots["select"].append(",", items)
        return self

    def from_(self, *items: Any) -> QueryBuilder:
        self._slots["from"].append(",", items)
        return self

    def join(self, *items: Any) -> QueryBuilder:
        """Continue the FROM clause without a comma (``JOIN ... ON ...``)."""
        self._slots["from"].append(None, items)
        return self

    def group_by(self, *items: Any) -> QueryBuilder:
        self._slots["group_by"].append(",", items)
        return self

    def order_by(self, *items: Any) -> QueryBuilder:
        self._slots["order_by"].append(",", items)
        return self

    # ------------------------------------------------------------------
    # Boolean clauses
    # ------------------------------------------------------------------

    def where_and(self, *items: Any) -> QueryBuilder:
        return self._append_condition("where", "AND", items)

    def where_or(self, *items: Any) -> QueryBuilder:
        return self._append_condition("where", "OR", items)

    def having_and(self, *items: Any) -> QueryBuilder:
        return self._append_condition("having", "AND", items)

    def having_or(self, *items: Any) -> QueryBuilder:
        return self._append_condition("having", "OR", items)

    def limit(self, offset: int, count: int | None = None) -> QueryBuilder:
        """Set ``LIMIT offset`` or, with ``count``, ``LIMIT offset, count``.

        ``count=-1`` is accepted as "no count".
        """
        if count is not None and int(count) == -1:
            count = None
        self._limit = (int(offset), None if count is None else int(count))
        return self

    # ------------------------------------------------------------------
    # Reset
    # ------------------------------------------------------------------

    def clear_select(self) -> QueryBuilder:
        self._slots["select"].clear()
        return self

    def clear_from(self) -> QueryBuilder:
        self._slots["from"].clear()
        return self

    def clear_where(self) -> QueryBuilder:
        self._slots["where"].clear()
        return self

    def clear_group_by(self) -> QueryBuilder:
        self._slots["group_by"].clear()
        return self

    def clear_having(self) -> QueryBuilder:
        self._slots["having"].clear()
        return self

    def clear_order_by(self) -> QueryBuilder:
        self._slots["order_by"].clear()
        return self

    def clear_limit(self) -> QueryBuilder:
        self._limit = None
        return self

    # ------------------------------------------------------------------
    # Merge
    # ------------------------------------------------------------------

    def merge_query(self) -> list[Any]:
        """Return the keyword-prefixed fragment list for every non-empty clause."""
        args: list[Any] = []
        for name, keyword, parenthesized in _SLOTS:
            fragments = self._slots[name].fragments()
            if not fragments:
                continue
            if parenthesized:
                args.extend([keyword, "(", *fragments, ")"])
            else:
                args.extend([keyword, *fragments])
        if self._limit is not None:
            offset, count = self._limit
            args.extend(["LIMIT", f"{offset}" if count is None else f"{offset}, {count}"])
        return args

    def is_empty(self) -> bool:
        """Return ``True`` when no clause holds content."""
        return self._limit is None and not any(self._slots.values())

    def __repr__(self) -> str:
        return f"QueryBuilder({self.merge_query()!r})"

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _append_condition(self, slot: str, separator: str, items: tuple[Any, ...]) -> QueryBuilder:
        spliced: list[Any] = []
        for item in items:
            if isinstance(item, QueryBuilder):
                nested = item._slots[slot].fragments()
                if nested:
                    spliced.extend(["(", *nested, ")"])
            else:
                spliced.append(item)
        self._slots[slot].append(separator, spliced)
        return self
