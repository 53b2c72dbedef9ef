"""Tests for the declaration tokenizer."""

import pytest

from helpgen.errors import LexError
from helpgen.lexer import tokenize
from helpgen.tokens import TokenCursor, TokenKind, logical_name


def _kinds(source):
    return [token.kind for token in tokenize(source)]


def test_field_declaration_tokens():
    tokens = tokenize('/// Doc.\n@"font-family": ?bool = null,\n')

    assert [token.kind for token in tokens] == [
        TokenKind.DOC_COMMENT,
        TokenKind.IDENTIFIER,
        TokenKind.COLON,
        TokenKind.QUESTION_MARK,
        TokenKind.IDENTIFIER,
        TokenKind.EQUAL,
        TokenKind.IDENTIFIER,
        TokenKind.COMMA,
    ]
    assert tokens[0].text == "/// Doc."
    assert tokens[1].text == '@"font-family"'
    assert tokens[1].line == 2


def test_comment_flavours():
    source = "//! container\n/// doc\n//// not doc\n// plain\nx"
    tokens = tokenize(source)

    assert [token.kind for token in tokens] == [
        TokenKind.CONTAINER_DOC_COMMENT,
        TokenKind.DOC_COMMENT,
        TokenKind.IDENTIFIER,
    ]


def test_keywords_and_operators():
    kinds = _kinds("pub const x = a == b => .{} ** 2;")

    assert kinds[:2] == [TokenKind.KEYWORD, TokenKind.KEYWORD]
    assert kinds.count(TokenKind.EQUAL) == 1
    assert kinds.count(TokenKind.OPERATOR) == 3
    assert TokenKind.PERIOD in kinds


def test_literals():
    tokens = tokenize("a = \"x\\\"y\"; b = 'c'; c = 10_000; d = 1.5e+3;\n    \\\\multi\n")
    kinds = [token.kind for token in tokens]

    assert TokenKind.STRING in kinds
    assert TokenKind.CHAR in kinds
    assert [token.text for token in tokens if token.kind is TokenKind.NUMBER] == ["10_000", "1.5e+3"]
    assert tokens[-1].kind is TokenKind.MULTILINE_STRING


def test_builtin_is_identifier():
    tokens = tokenize('const std = @import("std");')

    assert tokens[3].kind is TokenKind.IDENTIFIER
    assert tokens[3].text == "@import"


@pytest.mark.parametrize(
    "source",
    ['x = "unterminated\n', '@"open', "x = $"],
)
def test_lex_errors(source):
    with pytest.raises(LexError) as info:
        tokenize(source)

    assert info.value.line == 1


def test_logical_name():
    assert logical_name('@"cursor-style"') == "cursor-style"
    assert logical_name("palette") == "palette"


def test_cursor_bounds():
    cursor = TokenCursor(tokenize("a { b ( c ) } d"))

    assert cursor.lookback(0) is None
    assert cursor.lookahead(len(cursor) - 1) is None
    assert cursor.matching_close(1) == 6
    assert cursor.text(0, 2, " ") == "a {"
    assert cursor.slice(-5, 1)[0].text == "a"
