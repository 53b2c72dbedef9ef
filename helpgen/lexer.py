"""Tokenizer for Zig-flavoured declaration sources.

Only the structure helpgen needs is recognized: identifiers (including the
``@"..."`` escaped form), ``///`` doc comments, ``//!`` container doc
comments, keywords, literals and punctuation. Ordinary ``//`` comments and
whitespace produce no tokens, so a doc comment followed by a plain comment is
still adjacent to the declaration that follows.
"""

from __future__ import annotations

import logging
import re
from typing import Iterator

from .errors import LexError
from .tokens import Token, TokenKind

__all__ = ["KEYWORDS", "tokenize", "iter_tokens"]

LOGGER = logging.getLogger(__name__)

KEYWORDS = frozenset(
    {
        "addrspace", "align", "allowzero", "and", "anyframe", "anytype", "asm",
        "async", "await", "break", "callconv", "catch", "comptime", "const",
        "continue", "defer", "else", "enum", "errdefer", "error", "export",
        "extern", "fn", "for", "if", "inline", "linksection", "noalias",
        "noinline", "nosuspend", "opaque", "or", "orelse", "packed", "pub",
        "resume", "return", "struct", "suspend", "switch", "test",
        "threadlocal", "try", "union", "unreachable", "usingnamespace", "var",
        "volatile", "while",
    }
)

IDENT_PATTERN = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")
BUILTIN_PATTERN = re.compile(r"@[A-Za-z_][A-Za-z0-9_]*")
NUMBER_PATTERN = re.compile(
    r"0[xX][0-9A-Fa-f_]+|0[oO][0-7_]+|0[bB][01_]+|[0-9][0-9_]*(?:\.[0-9][0-9_]*)?(?:[eE][+-]?[0-9_]+)?"
)

PUNCTUATION = {
    ":": TokenKind.COLON,
    ",": TokenKind.COMMA,
    ";": TokenKind.SEMICOLON,
    "?": TokenKind.QUESTION_MARK,
    "{": TokenKind.L_BRACE,
    "}": TokenKind.R_BRACE,
    "(": TokenKind.L_PAREN,
    ")": TokenKind.R_PAREN,
    "[": TokenKind.L_BRACKET,
    "]": TokenKind.R_BRACKET,
}
OPERATOR_CHARS = "+-*/%&|^~!<>"


def tokenize(source: str) -> list[Token]:
    """Return the token stream of ``source`` in source order."""

    tokens = list(iter_tokens(source))
    LOGGER.debug("Tokenized %d characters into %d tokens", len(source), len(tokens))
    return tokens


def iter_tokens(source: str) -> Iterator[Token]:
    pos = 0
    line = 1
    line_start = 0
    length = len(source)

    def _error(message: str) -> LexError:
        return LexError(message, line, pos - line_start + 1)

    while pos < length:
        char = source[pos]

        if char == "\n":
            pos += 1
            line += 1
            line_start = pos
            continue
        if char in " \t\r":
            pos += 1
            continue

        if source.startswith("//", pos):
            end = source.find("\n", pos)
            if end == -1:
                end = length
            text = source[pos:end].rstrip("\r")
            # "////" is an ordinary comment, not documentation.
            if text.startswith("///") and not text.startswith("////"):
                yield Token(TokenKind.DOC_COMMENT, text, line)
            elif text.startswith("//!"):
                yield Token(TokenKind.CONTAINER_DOC_COMMENT, text, line)
            pos = end
            continue

        if source.startswith("\\\\", pos):
            end = source.find("\n", pos)
            if end == -1:
                end = length
            yield Token(TokenKind.MULTILINE_STRING, source[pos:end].rstrip("\r"), line)
            pos = end
            continue

        if source.startswith('@"', pos):
            end = _scan_quoted(source, pos + 1, '"')
            if end is None:
                raise _error("unterminated escaped identifier")
            yield Token(TokenKind.IDENTIFIER, source[pos:end], line)
            pos = end
            continue

        if char == "@":
            match = BUILTIN_PATTERN.match(source, pos)
            if match is None:
                raise _error("unexpected '@'")
            yield Token(TokenKind.IDENTIFIER, match.group(), line)
            pos = match.end()
            continue

        match = IDENT_PATTERN.match(source, pos)
        if match is not None:
            word = match.group()
            kind = TokenKind.KEYWORD if word in KEYWORDS else TokenKind.IDENTIFIER
            yield Token(kind, word, line)
            pos = match.end()
            continue

        match = NUMBER_PATTERN.match(source, pos)
        if match is not None:
            yield Token(TokenKind.NUMBER, match.group(), line)
            pos = match.end()
            continue

        if char == '"':
            end = _scan_quoted(source, pos, '"')
            if end is None:
                raise _error("unterminated string literal")
            yield Token(TokenKind.STRING, source[pos:end], line)
            pos = end
            continue

        if char == "'":
            end = _scan_quoted(source, pos, "'")
            if end is None:
                raise _error("unterminated character literal")
            yield Token(TokenKind.CHAR, source[pos:end], line)
            pos = end
            continue

        if char in PUNCTUATION:
            yield Token(PUNCTUATION[char], char, line)
            pos += 1
            continue

        if char == "=":
            if source.startswith(("==", "=>"), pos):
                yield Token(TokenKind.OPERATOR, source[pos : pos + 2], line)
                pos += 2
            else:
                yield Token(TokenKind.EQUAL, char, line)
                pos += 1
            continue

        if char == ".":
            if source.startswith("...", pos):
                yield Token(TokenKind.OPERATOR, "...", line)
                pos += 3
            elif source.startswith(("..", ".*", ".?"), pos):
                yield Token(TokenKind.OPERATOR, source[pos : pos + 2], line)
                pos += 2
            else:
                yield Token(TokenKind.PERIOD, char, line)
                pos += 1
            continue

        if char in OPERATOR_CHARS:
            end = pos + 1
            if end < length and (source[end] == "=" or source[end] == char):
                end += 1
            yield Token(TokenKind.OPERATOR, source[pos:end], line)
            pos = end
            continue

        raise _error(f"unexpected character {char!r}")


def _scan_quoted(source: str, start: int, quote: str) -> int | None:
    """Return the index just past the closing quote, or ``None``."""

    pos = start + 1
    while pos < len(source):
        char = source[pos]
        if char == "\\":
            pos += 2
            continue
        if char == "\n":
            return None
        if char == quote:
            return pos + 1
        pos += 1
    return None
