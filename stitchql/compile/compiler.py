"""Fragment list → SQL string compilation.

``ModifierCompiler`` is the top-level orchestrator.  It flattens nested
:class:`~stitchql.compile.clauses.QueryBuilder` instances into the
surrounding fragment list, scans every literal fragment for ``%`` modifiers,
and expands each modifier with the handler registered in
:class:`~stitchql.compile.registry.ModifierRegistry`.  All quoting is
delegated to the injected :class:`~stitchql.compile.escaper.Escaper`.

Argument consumption
--------------------
A fragment list alternates literal SQL text with modifier arguments::

    ["SELECT * FROM %t", "users", "WHERE id = %i AND state %in", 7, ["a", "b"]]

Each modifier consumes the *next* list element, in order, across the whole
flattened list.  The element after the last consumed argument must again be
a ``str``; anything else is an argument-order error.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any

# Imported for its side effect: registers the built-in modifiers.
import stitchql.compile.modifiers  # noqa: F401
from stitchql.compile.clauses import QueryBuilder
from stitchql.compile.escaper import EscapeFunc, Escaper
from stitchql.compile.registry import ModifierRegistry
from stitchql.compile.scanner import Token, has_modifiers, scan
from stitchql.errors import (
    InvalidArgumentOrderError,
    MalformedArgumentsError,
    ModifierArgumentError,
    UnknownModifierError,
)

logger = logging.getLogger(__name__)


class ModifierCompiler:
    """Compiles fragment lists to a single SQL string.

    Args:
        escaper: Value and identifier quoting.  Defaults to an
            :class:`Escaper` over PyMySQL's ``escape_string``.
        registry: Modifier handler registry.  Defaults to the global
            :class:`ModifierRegistry`.
    """

    def __init__(
        self,
        escaper: Escaper | None = None,
        registry: type[ModifierRegistry] = ModifierRegistry,
    ) -> None:
        self._escaper = escaper or Escaper()
        self._registry = registry

    @property
    def escaper(self) -> Escaper:
        return self._escaper

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def compile(self, fragments: Sequence[Any]) -> str:
        """Compile ``fragments`` to SQL.

        Args:
            fragments: A list or tuple of literal SQL strings, modifier
                arguments and ``QueryBuilder`` instances.

        Returns:
            The final SQL text, stripped of surrounding whitespace.

        Raises:
            MalformedArgumentsError: If ``fragments`` is not a list or tuple.
            InvalidArgumentOrderError: If a literal position holds a
                non-string, or a modifier has no argument left to consume.
            UnknownModifierError: If a modifier's letters are not registered.
            ModifierArgumentError: If an argument cannot be expanded by its
                modifier.
        """
        if not isinstance(fragments, (list, tuple)):
            raise MalformedArgumentsError(fragments)

        args = self.flatten(fragments)
        parts: list[str] = []
        position = 0
        while position < len(args):
            chunk = args[position]
            if not isinstance(chunk, str):
                raise InvalidArgumentOrderError(
                    f"Expected SQL text at position {position}, got "
                    f"{type(chunk).__name__} {chunk!r}. Check the argument/modifier order.",
                    position=position,
                    fragment=chunk,
                )
            if has_modifiers(chunk):
                chunk, position = self._substitute(chunk, args, position)
            parts.append(chunk)
            position += 1

        sql = " ".join(parts).strip()
        logger.debug("Composed SQL: %s", sql)
        return sql

    @staticmethod
    def flatten(fragments: Sequence[Any]) -> list[Any]:
        """Splice every ``QueryBuilder`` (recursively) into a flat fragment list."""
        flat: list[Any] = []
        for fragment in fragments:
            if isinstance(fragment, QueryBuilder):
                flat.extend(ModifierCompiler.flatten(fragment.merge_query()))
            else:
                flat.append(fragment)
        return flat

    # ------------------------------------------------------------------
    # Modifier expansion
    # ------------------------------------------------------------------

    def _substitute(self, chunk: str, args: list[Any], position: int) -> tuple[str, int]:
        """Expand every token in ``chunk``; return it and the last consumed position."""
        out: list[str] = []
        for token in scan(chunk):
            if token.kind == "text":
                out.append(token.value)
            elif token.kind == "percent":
                out.append("%")
            else:
                position += 1
                out.append(self._expand(token, chunk, args, position))
        return "".join(out), position

    def _expand(self, token: Token, chunk: str, args: list[Any], position: int) -> str:
        letters = token.value
        handler = self._registry.get(letters)
        if handler is None:
            raise UnknownModifierError(letters, fragment=chunk)
        if position >= len(args):
            raise InvalidArgumentOrderError(
                f"Modifier '{token.source}' in {chunk!r} has no argument.",
                position=position,
                fragment=chunk,
            )

        value = args[position]
        if value is None:
            return "NULL"
        try:
            return handler(letters, value, letters.islower(), self._escaper)
        except UnicodeDecodeError as exc:
            raise ModifierArgumentError(
                letters, f"binary value is not valid UTF-8 ({exc.reason}).", value
            ) from exc


def compose(*fragments: Any, escape_string: EscapeFunc | None = None) -> str:
    """Compile ``fragments`` without a connection.

    Example::

        >>> compose("SELECT * FROM %t WHERE id = %i", "users", 5)
        'SELECT * FROM `users` WHERE id = 5'

    Args:
        *fragments: Literal SQL, modifier arguments and ``QueryBuilder`` items.
        escape_string: Optional driver escaping primitive; defaults to
            PyMySQL's ``escape_string``.
    """
    return ModifierCompiler(Escaper(escape_string)).compile(fragments)
