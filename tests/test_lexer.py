"""
Tests for the Lexer — token kinds, positions and best-effort recovery.
"""

from widgetlens.core.lexer import tokenize
from widgetlens.models.tokens import TokenKind


def _kinds(source):
    tokens, _ = tokenize(source)
    return [(t.kind, t.text) for t in tokens]


def test_literal_kinds_are_distinct():
    kinds = _kinds("42 'hi' true null undefined count")
    assert kinds == [
        (TokenKind.NUMBER, "42"),
        (TokenKind.STRING, "hi"),
        (TokenKind.BOOLEAN, "true"),
        (TokenKind.NULL, "null"),
        (TokenKind.UNDEFINED, "undefined"),
        (TokenKind.IDENTIFIER, "count"),
        (TokenKind.EOF, ""),
    ]


def test_keywords_and_operators():
    kinds = _kinds("class A extends B { x === y => z }")
    assert (TokenKind.KEYWORD, "class") in kinds
    assert (TokenKind.KEYWORD, "extends") in kinds
    assert (TokenKind.OPERATOR, "===") in kinds
    assert (TokenKind.OPERATOR, "=>") in kinds
    assert (TokenKind.PUNCTUATION, "{") in kinds


def test_comments_and_whitespace_are_not_emitted():
    tokens, warnings = tokenize("// line\n/* block\n comment */ a")
    assert [t.text for t in tokens] == ["a", ""]
    assert warnings == []


def test_line_and_column_tracking():
    tokens, _ = tokenize("a\n  bb\n    ccc")
    positions = [(t.text, t.line, t.column) for t in tokens[:-1]]
    assert positions == [("a", 1, 0), ("bb", 2, 2), ("ccc", 3, 4)]


def test_string_escapes():
    tokens, _ = tokenize(r"'a\nb\'c'")
    assert tokens[0].kind == TokenKind.STRING
    assert tokens[0].text == "a\nb'c"


def test_unknown_character_becomes_token_with_warning():
    tokens, warnings = tokenize("a ¤ b")
    assert [t.text for t in tokens] == ["a", "¤", "b", ""]
    assert len(warnings) == 1
    assert warnings[0].line == 1
    assert warnings[0].column == 2


def test_unterminated_string_and_comment_warn():
    _, warnings = tokenize("'open")
    assert any("Unterminated string" in w.message for w in warnings)
    _, warnings = tokenize("/* never closed")
    assert any("Unterminated block comment" in w.message for w in warnings)


def test_non_ascii_digits_are_not_numbers():
    tokens, _ = tokenize("x²")
    assert tokens[0].kind == TokenKind.IDENTIFIER
    assert tokens[0].text == "x²"


def test_empty_source_yields_only_eof():
    tokens, warnings = tokenize("")
    assert len(tokens) == 1
    assert tokens[0].kind == TokenKind.EOF
    assert warnings == []


def test_cascade_and_spread_operators():
    kinds = _kinds("a..b ...c d.e")
    assert kinds == [
        (TokenKind.IDENTIFIER, "a"),
        (TokenKind.OPERATOR, ".."),
        (TokenKind.IDENTIFIER, "b"),
        (TokenKind.OPERATOR, "..."),
        (TokenKind.IDENTIFIER, "c"),
        (TokenKind.IDENTIFIER, "d"),
        (TokenKind.PUNCTUATION, "."),
        (TokenKind.IDENTIFIER, "e"),
        (TokenKind.EOF, ""),
    ]
