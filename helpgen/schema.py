"""Structural recognition of schema and catalog declarations.

This is deliberately not a parser for the whole language. It recognizes
container declarations (``const Name = struct/enum/union {...}``), the
members declared directly inside them, the type expression of each struct
field, and top-level ``fn run`` declarations. That is enough to attach doc
comments and classify fields; default-value expressions are skipped, never
evaluated.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable, Iterator, Mapping

from .models import FieldType
from .tokens import CLOSERS, OPENERS, Token, TokenCursor, TokenKind, logical_name

__all__ = [
    "Container",
    "Member",
    "TypeExpr",
    "EnumTable",
    "find_container",
    "file_container",
    "iter_members",
    "struct_fields",
    "enum_members",
    "union_variants",
    "collect_enums",
    "unwrap_optional",
    "classify",
    "collect_options",
    "find_run_function",
    "FN_MODIFIERS",
]

LOGGER = logging.getLogger(__name__)

CONTAINER_KEYWORDS = ("struct", "enum", "union", "opaque")
LAYOUT_KEYWORDS = ("extern", "packed")
FN_MODIFIERS = ("pub", "export", "extern", "inline", "noinline")
NON_EXHAUSTIVE_MARKER = "_"

# Tokens that may directly precede a member name inside a container body.
MEMBER_LEADERS = {TokenKind.L_BRACE, TokenKind.COMMA, TokenKind.SEMICOLON, TokenKind.R_BRACE}


@dataclass(frozen=True, slots=True)
class Container:
    """Token span of a container body, exclusive of its braces."""

    name: str
    kind: str
    body_start: int
    body_end: int


@dataclass(frozen=True, slots=True)
class TypeExpr:
    """Declared type of a field: a half-open token span in ``cursor``."""

    cursor: TokenCursor
    start: int
    stop: int

    @property
    def tokens(self) -> tuple[Token, ...]:
        return self.cursor.slice(self.start, self.stop)

    @property
    def text(self) -> str:
        return self.cursor.text(self.start, self.stop, " ")

    def dotted_path(self) -> str | None:
        """Return ``a.b.C`` when the expression is a plain dotted name."""

        tokens = self.tokens
        if not tokens or len(tokens) % 2 == 0:
            return None
        for position, token in enumerate(tokens):
            expected = TokenKind.IDENTIFIER if position % 2 == 0 else TokenKind.PERIOD
            if token.kind is not expected:
                return None
        return ".".join(logical_name(token.text) for token in tokens[::2])

    def inline_enum_brace(self) -> int | None:
        """Return the ``{`` index of an inline ``enum {...}`` expression."""

        index = self.start
        while index < self.stop and self.cursor[index].text in LAYOUT_KEYWORDS:
            index += 1
        if index >= self.stop or not self.cursor[index].is_keyword("enum"):
            return None
        index += 1
        if self.cursor.kind(index) is TokenKind.L_PAREN:
            index = self.cursor.matching_close(index) + 1
        if self.cursor.kind(index) is TokenKind.L_BRACE and index < self.stop:
            return index
        return None


@dataclass(frozen=True, slots=True)
class Member:
    """A member declared directly inside a container."""

    name: str
    index: int
    type_expr: TypeExpr | None = None


@dataclass(slots=True)
class EnumTable:
    """Enum declarations visible to the classifier, keyed by name.

    Each enum is registered under its qualified path (``Outer.Inner``) and,
    when not already taken, under its bare name. Registration order is
    source order, so the first declaration of a bare name wins.
    """

    members: dict[str, tuple[str, ...]] = field(default_factory=dict)

    def add(self, path: str, names: Iterable[str]) -> None:
        values = tuple(names)
        self.members.setdefault(path, values)
        bare = path.rsplit(".", 1)[-1]
        if bare not in self.members:
            self.members[bare] = values
        elif self.members[bare] != values and bare != path:
            LOGGER.debug("Enum name %s is ambiguous; keeping first declaration", bare)

    def update(self, other: "EnumTable") -> None:
        for path, names in other.members.items():
            self.members.setdefault(path, names)

    def resolve(self, path: str) -> tuple[str, ...] | None:
        if path in self.members:
            return self.members[path]
        bare = path.rsplit(".", 1)[-1]
        return self.members.get(bare)

    def __contains__(self, path: object) -> bool:
        return isinstance(path, str) and self.resolve(path) is not None

    def __len__(self) -> int:
        return len(self.members)


# ----------------------------------------------------------------- containers
def file_container(cursor: TokenCursor) -> Container:
    """Treat the whole file as a struct body (a file-level container)."""

    return Container(name="", kind="struct", body_start=0, body_end=len(cursor))


def find_container(cursor: TokenCursor, name: str) -> Container | None:
    """Locate ``const <name> = [extern|packed] struct|enum|union [(...)] {``."""

    for container in _iter_containers(cursor):
        if container.name == name or container.name.rsplit(".", 1)[-1] == name:
            return container
    return None


def _iter_containers(cursor: TokenCursor) -> Iterator[Container]:
    """Yield every container declaration with its qualified name."""

    stack: list[tuple[str, int]] = []
    for index, token in enumerate(cursor):
        while stack and index > stack[-1][1]:
            stack.pop()
        if not token.is_keyword("const"):
            continue
        name_token = cursor.lookahead(index)
        if name_token is None or name_token.kind is not TokenKind.IDENTIFIER:
            continue
        if cursor.kind(index + 2) is not TokenKind.EQUAL:
            continue
        position = index + 3
        while (candidate := cursor.get(position)) is not None and candidate.text in LAYOUT_KEYWORDS:
            position += 1
        keyword = cursor.get(position)
        if keyword is None or keyword.kind is not TokenKind.KEYWORD or keyword.text not in CONTAINER_KEYWORDS:
            continue
        position += 1
        if cursor.kind(position) is TokenKind.L_PAREN:
            position = cursor.matching_close(position) + 1
        if cursor.kind(position) is not TokenKind.L_BRACE:
            continue
        close = cursor.matching_close(position)
        qualified = ".".join([entry[0] for entry in stack] + [logical_name(name_token.text)])
        yield Container(name=qualified, kind=keyword.text, body_start=position + 1, body_end=close)
        stack.append((qualified, close))


# -------------------------------------------------------------------- members
def iter_members(
    cursor: TokenCursor,
    container: Container,
    followers: frozenset[TokenKind],
) -> Iterator[int]:
    """Yield indices of member names at the top level of ``container``.

    A member name is an identifier whose previous non-doc-comment token opens
    the body or ends a previous member/declaration, and whose next token is in
    ``followers``.
    """

    depth = 0
    previous: TokenKind | None = TokenKind.L_BRACE
    for index in range(container.body_start, container.body_end):
        token = cursor[index]
        if token.kind in OPENERS:
            depth += 1
        elif token.kind in CLOSERS:
            depth -= 1
        elif (
            depth == 0
            and token.kind is TokenKind.IDENTIFIER
            and previous in MEMBER_LEADERS
            and _follower(cursor, index + 1, container) in followers
        ):
            yield index
        if depth == 0 and token.kind not in (TokenKind.DOC_COMMENT, TokenKind.CONTAINER_DOC_COMMENT):
            previous = token.kind
        elif depth > 0:
            previous = None


def _follower(cursor: TokenCursor, index: int, container: Container) -> TokenKind:
    if index >= container.body_end:
        return TokenKind.R_BRACE
    return cursor[index].kind


def struct_fields(cursor: TokenCursor, container: Container) -> list[Member]:
    """Return the fields of a struct container with their type spans."""

    members = []
    for index in iter_members(cursor, container, frozenset({TokenKind.COLON})):
        type_start = index + 2
        type_stop = _type_end(cursor, type_start, container.body_end)
        members.append(
            Member(
                name=logical_name(cursor[index].text),
                index=index,
                type_expr=TypeExpr(cursor, type_start, type_stop),
            )
        )
    return members


def enum_members(cursor: TokenCursor, container: Container) -> list[Member]:
    """Return enum members; the ``_`` of a non-exhaustive enum is not one."""

    followers = frozenset({TokenKind.COMMA, TokenKind.EQUAL, TokenKind.R_BRACE})
    members = []
    for index in iter_members(cursor, container, followers):
        if cursor[index].text == NON_EXHAUSTIVE_MARKER:
            continue
        members.append(Member(name=logical_name(cursor[index].text), index=index))
    return members


def union_variants(cursor: TokenCursor, container: Container) -> list[Member]:
    followers = frozenset({TokenKind.COMMA, TokenKind.COLON, TokenKind.R_BRACE})
    members = []
    for index in iter_members(cursor, container, followers):
        type_expr = None
        if cursor.kind(index + 1) is TokenKind.COLON:
            type_expr = TypeExpr(cursor, index + 2, _type_end(cursor, index + 2, container.body_end))
        members.append(Member(name=logical_name(cursor[index].text), index=index, type_expr=type_expr))
    return members


def _type_end(cursor: TokenCursor, start: int, limit: int) -> int:
    """Return the end of a type expression: the first top-level ``=`` or ``,``."""

    depth = 0
    for index in range(start, limit):
        kind = cursor[index].kind
        if kind in OPENERS:
            depth += 1
        elif kind in CLOSERS:
            depth -= 1
        elif depth == 0 and kind in (TokenKind.EQUAL, TokenKind.COMMA):
            return index
        elif depth == 0 and cursor[index].is_keyword("align"):
            return index
    return limit


def collect_enums(cursor: TokenCursor) -> EnumTable:
    """Collect every enum declaration in a token stream."""

    table = EnumTable()
    for container in _iter_containers(cursor):
        if container.kind != "enum":
            continue
        table.add(container.name, (member.name for member in enum_members(cursor, container)))
    LOGGER.debug("Collected %d enum names", len(table))
    return table


# -------------------------------------------------------------- classification
def unwrap_optional(type_expr: TypeExpr) -> TypeExpr:
    """Remove exactly one leading ``?`` from a type expression."""

    if type_expr.start < type_expr.stop and type_expr.cursor.kind(type_expr.start) is TokenKind.QUESTION_MARK:
        return TypeExpr(type_expr.cursor, type_expr.start + 1, type_expr.stop)
    return type_expr


def classify(type_expr: TypeExpr | None, enums: EnumTable | Mapping[str, tuple[str, ...]]) -> FieldType:
    """Map a declared type onto its presentation kind.

    Total over every expression: anything that is neither ``bool`` nor an
    enumeration is presented as free text.
    """

    if type_expr is None:
        return FieldType.string
    base = unwrap_optional(type_expr)
    tokens = base.tokens
    if len(tokens) == 1 and tokens[0].kind is TokenKind.IDENTIFIER and tokens[0].text == "bool":
        return FieldType.boolean
    if base.inline_enum_brace() is not None:
        return FieldType.option
    path = base.dotted_path()
    if path is not None and _resolve(enums, path) is not None:
        return FieldType.option
    return FieldType.string


def collect_options(type_expr: TypeExpr | None, enums: EnumTable | Mapping[str, tuple[str, ...]]) -> list[str]:
    """Return enum member names of an option-typed field in declaration order."""

    if type_expr is None:
        return []
    base = unwrap_optional(type_expr)
    brace = base.inline_enum_brace()
    if brace is not None:
        close = base.cursor.matching_close(brace)
        body = Container(name="", kind="enum", body_start=brace + 1, body_end=close)
        return [member.name for member in enum_members(base.cursor, body)]
    path = base.dotted_path()
    if path is None:
        return []
    return list(_resolve(enums, path) or ())


def _resolve(enums: EnumTable | Mapping[str, tuple[str, ...]], path: str) -> tuple[str, ...] | None:
    if isinstance(enums, EnumTable):
        return enums.resolve(path)
    if path in enums:
        return tuple(enums[path])
    bare = path.rsplit(".", 1)[-1]
    return tuple(enums[bare]) if bare in enums else None


# ------------------------------------------------------------------- commands
def find_run_function(cursor: TokenCursor) -> int | None:
    """Return the index of the first token of a top-level ``fn run`` declaration.

    Modifiers such as ``pub`` are part of the declaration, so the returned
    index is where its doc comment must end.
    """

    depth = 0
    for index, token in enumerate(cursor):
        if token.kind in OPENERS:
            depth += 1
        elif token.kind in CLOSERS:
            depth -= 1
        elif depth == 0 and token.is_keyword("fn"):
            name = cursor.lookahead(index)
            if name is None or logical_name(name.text) != "run":
                continue
            start = index
            while (previous := cursor.lookback(start)) is not None and previous.kind is TokenKind.KEYWORD and previous.text in FN_MODIFIERS:
                start -= 1
            return start
    return None
