"""
Lexer — Turns subject-language source text into a token stream.

Total: never raises. Unknown characters become best-effort operator tokens
and a LexerWarning is recorded. Whitespace and comments are consumed without
emitting tokens. The stream always ends with a single EOF token.
"""

from __future__ import annotations

import logging

from widgetlens.models.tokens import LexerWarning, Token, TokenKind

logger = logging.getLogger("widgetlens.lexer")

KEYWORDS = frozenset({
    "class", "extends", "constructor", "new", "const", "let", "var",
    "function", "return", "if", "else", "for", "while", "this", "static",
    "async", "await", "import", "export", "from", "as", "default",
    "typeof", "instanceof", "void", "delete",
})

# Literal keywords get their own token kinds
LITERAL_WORDS: dict[str, TokenKind] = {
    "true": TokenKind.BOOLEAN,
    "false": TokenKind.BOOLEAN,
    "null": TokenKind.NULL,
    "undefined": TokenKind.UNDEFINED,
}

# Longest first so "===" wins over "==" and "..." over ".."
OPERATORS: tuple[str, ...] = (
    "===", "!==", "...", "**=", "..",
    "=>", "==", "!=", "<=", ">=", "++", "--", "&&", "||",
    "+=", "-=", "*=", "/=", "%=", "??", "?.", "**",
    "+", "-", "*", "/", "%", "=", "<", ">", "!", "&", "|", "^", "~", "?", ":",
)

PUNCTUATION = frozenset("{}()[];,.@#")
DIGITS = frozenset("0123456789")

ESCAPES: dict[str, str] = {
    "n": "\n", "t": "\t", "r": "\r", "\\": "\\",
    '"': '"', "'": "'", "`": "`", "0": "\0",
}


class Lexer:
    """Single-pass scanner with incremental line/column tracking."""

    def __init__(self, source: str) -> None:
        self.source = source
        self.pos = 0
        self.line = 1
        self.column = 0
        self.tokens: list[Token] = []
        self.warnings: list[LexerWarning] = []

    def tokenize(self) -> tuple[list[Token], list[LexerWarning]]:
        while self.pos < len(self.source):
            self._skip_trivia()
            if self.pos >= len(self.source):
                break
            self._scan_token()

        self.tokens.append(Token(TokenKind.EOF, "", self.line, self.column))
        if self.warnings:
            logger.debug(f"Lexed {len(self.tokens)} tokens, {len(self.warnings)} warnings")
        return self.tokens, self.warnings

    # ── Character helpers ──

    def _peek(self, offset: int = 0) -> str:
        i = self.pos + offset
        return self.source[i] if i < len(self.source) else ""

    def _advance(self) -> str:
        ch = self.source[self.pos]
        self.pos += 1
        if ch == "\n":
            self.line += 1
            self.column = 0
        else:
            self.column += 1
        return ch

    def _warn(self, message: str, line: int, column: int) -> None:
        self.warnings.append(LexerWarning(message=message, line=line, column=column))

    # ── Trivia ──

    def _skip_trivia(self) -> None:
        while self.pos < len(self.source):
            ch = self._peek()
            if ch.isspace():
                self._advance()
            elif ch == "/" and self._peek(1) == "/":
                while self.pos < len(self.source) and self._peek() != "\n":
                    self._advance()
            elif ch == "/" and self._peek(1) == "*":
                line, column = self.line, self.column
                self._advance()
                self._advance()
                while self.pos < len(self.source) and not (
                    self._peek() == "*" and self._peek(1) == "/"
                ):
                    self._advance()
                if self.pos >= len(self.source):
                    self._warn("Unterminated block comment", line, column)
                else:
                    self._advance()
                    self._advance()
            else:
                return

    # ── Tokens ──

    def _scan_token(self) -> None:
        ch = self._peek()
        line, column = self.line, self.column

        if ch.isalpha() or ch in "_$":
            self._scan_word(line, column)
        elif ch in DIGITS or (ch == "." and self._peek(1) in DIGITS):
            self._scan_number(line, column)
        elif ch in "'\"`":
            self._scan_string(ch, line, column)
        else:
            for op in OPERATORS:
                if self.source.startswith(op, self.pos):
                    for _ in op:
                        self._advance()
                    self.tokens.append(Token(TokenKind.OPERATOR, op, line, column))
                    return
            self._advance()
            if ch in PUNCTUATION:
                self.tokens.append(Token(TokenKind.PUNCTUATION, ch, line, column))
            else:
                self._warn(f"Unexpected character {ch!r}", line, column)
                self.tokens.append(Token(TokenKind.OPERATOR, ch, line, column))

    def _scan_word(self, line: int, column: int) -> None:
        start = self.pos
        while self.pos < len(self.source) and (
            self._peek().isalnum() or self._peek() in "_$"
        ):
            self._advance()
        word = self.source[start:self.pos]

        if word in LITERAL_WORDS:
            kind = LITERAL_WORDS[word]
        elif word in KEYWORDS:
            kind = TokenKind.KEYWORD
        else:
            kind = TokenKind.IDENTIFIER
        self.tokens.append(Token(kind, word, line, column))

    def _scan_number(self, line: int, column: int) -> None:
        start = self.pos
        while self._peek() in DIGITS:
            self._advance()
        if self._peek() == "." and self._peek(1) in DIGITS:
            self._advance()
            while self._peek() in DIGITS:
                self._advance()
        if self._peek() in ("e", "E"):
            sign = 1 if self._peek(1) in ("+", "-") else 0
            if self._peek(1 + sign) in DIGITS:
                for _ in range(1 + sign):
                    self._advance()
                while self._peek() in DIGITS:
                    self._advance()
        self.tokens.append(Token(TokenKind.NUMBER, self.source[start:self.pos], line, column))

    def _scan_string(self, quote: str, line: int, column: int) -> None:
        self._advance()
        chars: list[str] = []
        while self.pos < len(self.source) and self._peek() != quote:
            ch = self._advance()
            if ch == "\\" and self.pos < len(self.source):
                escaped = self._advance()
                chars.append(ESCAPES.get(escaped, escaped))
            elif ch == "\n" and quote != "`":
                self._warn("Line break inside string literal", line, column)
                chars.append(ch)
            else:
                chars.append(ch)

        if self.pos >= len(self.source):
            self._warn("Unterminated string literal", line, column)
        else:
            self._advance()
        self.tokens.append(Token(TokenKind.STRING, "".join(chars), line, column))


def tokenize(source: str) -> tuple[list[Token], list[LexerWarning]]:
    """
    Tokenize subject-language source.

    Args:
        source: Source text.

    Returns:
        (tokens ending with an EOF token, recorded warnings)
    """
    return Lexer(source).tokenize()
