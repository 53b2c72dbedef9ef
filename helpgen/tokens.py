"""Token representation and cursor over a token stream."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterator, Sequence

__all__ = ["Token", "TokenKind", "TokenCursor", "logical_name"]


class TokenKind(str, Enum):
    IDENTIFIER = "identifier"
    DOC_COMMENT = "doc_comment"
    CONTAINER_DOC_COMMENT = "container_doc_comment"
    KEYWORD = "keyword"
    STRING = "string"
    MULTILINE_STRING = "multiline_string"
    CHAR = "char"
    NUMBER = "number"
    COLON = "colon"
    EQUAL = "equal"
    COMMA = "comma"
    SEMICOLON = "semicolon"
    QUESTION_MARK = "question_mark"
    PERIOD = "period"
    L_BRACE = "l_brace"
    R_BRACE = "r_brace"
    L_PAREN = "l_paren"
    R_PAREN = "r_paren"
    L_BRACKET = "l_bracket"
    R_BRACKET = "r_bracket"
    OPERATOR = "operator"


OPENERS = {TokenKind.L_BRACE, TokenKind.L_PAREN, TokenKind.L_BRACKET}
CLOSERS = {TokenKind.R_BRACE, TokenKind.R_PAREN, TokenKind.R_BRACKET}


@dataclass(frozen=True, slots=True)
class Token:
    """A ``(kind, source-slice)`` pair in source order."""

    kind: TokenKind
    text: str
    line: int = 0

    def is_keyword(self, word: str) -> bool:
        return self.kind is TokenKind.KEYWORD and self.text == word


def logical_name(text: str) -> str:
    """Return the logical name of an identifier slice.

    ``@"font-family"`` becomes ``font-family``; bare identifiers are
    returned unchanged.
    """

    if text.startswith('@"') and text.endswith('"') and len(text) >= 3:
        return text[2:-1]
    return text


class TokenCursor:
    """Indexed, read-only view over a token stream.

    Every accessor is bounds-checked: looking before the first token or past
    the last one yields ``None`` rather than wrapping around.
    """

    def __init__(self, tokens: Sequence[Token]):
        self._tokens = tuple(tokens)

    def __len__(self) -> int:
        return len(self._tokens)

    def __iter__(self) -> Iterator[Token]:
        return iter(self._tokens)

    def __getitem__(self, index: int) -> Token:
        if index < 0:
            raise IndexError("negative token index")
        return self._tokens[index]

    def get(self, index: int) -> Token | None:
        if 0 <= index < len(self._tokens):
            return self._tokens[index]
        return None

    def kind(self, index: int) -> TokenKind | None:
        token = self.get(index)
        return token.kind if token is not None else None

    def lookback(self, index: int, distance: int = 1) -> Token | None:
        return self.get(index - distance)

    def lookahead(self, index: int, distance: int = 1) -> Token | None:
        return self.get(index + distance)

    def slice(self, start: int, stop: int) -> tuple[Token, ...]:
        start = max(start, 0)
        stop = min(stop, len(self._tokens))
        return self._tokens[start:stop]

    def text(self, start: int, stop: int, sep: str = "") -> str:
        return sep.join(token.text for token in self.slice(start, stop))

    def matching_close(self, open_index: int) -> int:
        """Return the index of the bracket closing the one at ``open_index``.

        Returns ``len(self)`` when the bracket is unbalanced.
        """

        depth = 0
        for index in range(open_index, len(self._tokens)):
            kind = self._tokens[index].kind
            if kind in OPENERS:
                depth += 1
            elif kind in CLOSERS:
                depth -= 1
                if depth == 0:
                    return index
        return len(self._tokens)
