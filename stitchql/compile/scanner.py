"""Single-pass tokenizer for ``%`` modifiers inside a SQL fragment.

The scanner walks a fragment once with three states:

``TEXT``
    Copying literal characters.
``PERCENT``
    Just read a ``%``.  A second ``%`` yields a literal percent token;
    anything else starts a letter run.
``LETTERS``
    Collecting ASCII letters.  The run ends at the first non-letter (or the
    end of the fragment) and yields a modifier token, possibly with empty
    letters (``LIKE 'a%'``), which the compiler rejects.  A ``%`` that ends
    the run starts the next token, so ``%i%s`` is two modifiers.

Tokens come out strictly left to right, so each modifier is resolved exactly
once and in order, independently of how the substituted text looks.
"""
from __future__ import annotations

import string
from dataclasses import dataclass
from enum import Enum
from typing import Literal

TokenKind = Literal["text", "percent", "modifier"]

_LETTERS = frozenset(string.ascii_letters)


class _State(Enum):
    TEXT = "text"
    PERCENT = "percent"
    LETTERS = "letters"


@dataclass(frozen=True)
class Token:
    """One piece of a scanned fragment.

    Attributes:
        kind: ``text`` (literal SQL), ``percent`` (an escaped ``%%``), or
            ``modifier``.
        value: The literal text, or the modifier letters without ``%``.
    """

    kind: TokenKind
    value: str

    @property
    def source(self) -> str:
        """The token as it appeared in the fragment."""
        if self.kind == "percent":
            return "%%"
        if self.kind == "modifier":
            return f"%{self.value}"
        return self.value


def scan(fragment: str) -> list[Token]:
    """Split ``fragment`` into text, percent and modifier tokens."""
    tokens: list[Token] = []
    state = _State.TEXT
    buffer: list[str] = []

    def flush_text() -> None:
        if buffer:
            tokens.append(Token("text", "".join(buffer)))
            buffer.clear()

    for char in fragment:
        if state is _State.TEXT:
            if char == "%":
                flush_text()
                state = _State.PERCENT
            else:
                buffer.append(char)
        elif state is _State.PERCENT:
            if char == "%":
                tokens.append(Token("percent", "%"))
                state = _State.TEXT
            elif char in _LETTERS:
                buffer.append(char)
                state = _State.LETTERS
            else:
                tokens.append(Token("modifier", ""))
                state = _State.TEXT
                buffer.append(char)
        else:
            if char in _LETTERS:
                buffer.append(char)
            else:
                tokens.append(Token("modifier", "".join(buffer)))
                buffer.clear()
                if char == "%":
                    state = _State.PERCENT
                else:
                    state = _State.TEXT
                    buffer.append(char)

    if state is _State.PERCENT:
        tokens.append(Token("modifier", ""))
    elif state is _State.LETTERS:
        tokens.append(Token("modifier", "".join(buffer)))
    else:
        flush_text()
    return tokens


def has_modifiers(fragment: str) -> bool:
    """Return ``True`` if ``fragment`` contains anything but literal text."""
    return "%" in fragment
