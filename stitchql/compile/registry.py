"""Modifier registry (Open/Closed Principle).

Each ``%`` modifier is rendered by a handler looked up by its case-folded
letters, so new modifiers can be added without touching
:class:`~stitchql.compile.compiler.ModifierCompiler`.

Usage::

    from stitchql.compile.registry import ModifierRegistry

    @ModifierRegistry.register("b")
    def _binary_handler(letters, value, escape, escaper):
        return "0x" + bytes(value).hex()

After registration ``compose("SELECT %b", b"\\x01")`` yields ``SELECT 0x01``.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any, ClassVar

from stitchql.compile.escaper import Escaper

#: Type alias for a modifier rendering handler.
#: ``(letters_as_written, value, escape, escaper) -> sql_string``
ModifierHandler = Callable[[str, Any, bool, Escaper], str]


class ModifierRegistry:
    """Registry mapping lower-case modifier letters to SQL rendering handlers.

    Handlers never see ``None``; the compiler substitutes ``NULL`` for a
    ``None`` argument before dispatch.
    """

    _modifiers: ClassVar[dict[str, ModifierHandler]] = {}

    @classmethod
    def register(cls, letters: str) -> Callable[[ModifierHandler], ModifierHandler]:
        """Decorator that registers a handler under ``letters``.

        Args:
            letters: The modifier letters, matched case-insensitively.

        Returns:
            A decorator that registers and returns the handler.
        """

        def decorator(handler: ModifierHandler) -> ModifierHandler:
            cls._modifiers[letters.lower()] = handler
            return handler

        return decorator

    @classmethod
    def register_handler(cls, letters: str, handler: ModifierHandler) -> None:
        """Register a handler without using the decorator form."""
        cls._modifiers[letters.lower()] = handler

    @classmethod
    def unregister(cls, letters: str) -> None:
        """Remove the handler for ``letters`` if one is registered."""
        cls._modifiers.pop(letters.lower(), None)

    @classmethod
    def get(cls, letters: str) -> ModifierHandler | None:
        """Return the handler for ``letters``, or ``None`` if not registered."""
        if not letters:
            return None
        return cls._modifiers.get(letters.lower())

    @classmethod
    def registered_modifiers(cls) -> list[str]:
        """Return the sorted list of registered modifier letters."""
        return sorted(cls._modifiers)
