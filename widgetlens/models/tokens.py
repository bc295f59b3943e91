"""
Token Models — Lexical units produced by the lexer.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class TokenKind(str, Enum):
    IDENTIFIER = "identifier"
    KEYWORD = "keyword"
    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    NULL = "null"
    UNDEFINED = "undefined"
    PUNCTUATION = "punctuation"
    OPERATOR = "operator"
    EOF = "eof"


@dataclass(frozen=True)
class Token:
    """A single token. Line is 1-based, column is 0-based."""

    kind: TokenKind
    text: str
    line: int
    column: int

    def is_(self, kind: TokenKind, text: str | None = None) -> bool:
        return self.kind == kind and (text is None or self.text == text)

    def __repr__(self) -> str:
        return f"Token({self.kind.value}, {self.text!r}, {self.line}:{self.column})"


@dataclass(frozen=True)
class LexerWarning:
    """A recoverable lexical problem (unknown character, unterminated string)."""

    message: str
    line: int
    column: int
