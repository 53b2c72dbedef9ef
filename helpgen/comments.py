"""Doc-comment extraction, directive parsing and indentation normalization."""

from __future__ import annotations

import logging
from typing import Callable, Mapping, Sequence

from .models import ParsedDescription
from .tokens import TokenCursor, TokenKind

__all__ = [
    "CATEGORY_MARKER",
    "DIRECTIVES",
    "COMMENT_MARKER_WIDTH",
    "extract_comment_block",
    "parse_directives",
    "common_margin",
    "normalize_indentation",
    "describe",
]

LOGGER = logging.getLogger(__name__)

# Width of the "///" marker carried by every doc-comment token.
COMMENT_MARKER_WIDTH = 3

CATEGORY_MARKER = "@category"

DirectiveHandler = Callable[[dict[str, str], str, str], None]


def _set_category(found: dict[str, str], argument: str, context: str) -> None:
    if "category" in found:
        LOGGER.warning(
            "Ignoring extra @category %r on %s; keeping %r",
            argument,
            context or "<unnamed>",
            found["category"],
        )
        return
    found["category"] = argument


DIRECTIVES: Mapping[str, DirectiveHandler] = {
    CATEGORY_MARKER: _set_category,
}


def extract_comment_block(cursor: TokenCursor, index: int) -> tuple[str, ...]:
    """Return the doc-comment lines immediately preceding token ``index``.

    The scan walks backward until the first token that is not a doc comment,
    so only a contiguous run directly above the declaration is attached. The
    lines come back in source order with the ``///`` marker stripped. An
    undocumented declaration yields an empty tuple.
    """

    start = index
    while start > 0 and cursor.kind(start - 1) is TokenKind.DOC_COMMENT:
        start -= 1
    return tuple(token.text[COMMENT_MARKER_WIDTH:] for token in cursor.slice(start, index))


def parse_directives(lines: Sequence[str], context: str = "") -> ParsedDescription:
    """Split directive lines out of a comment block.

    A directive line starts (after leading spaces) with a registered marker
    and one space; the rest of the line is the argument. When a block holds
    more than one ``@category`` line the first one wins.
    """

    found: dict[str, str] = {}
    remaining: list[str] = []
    for line in lines:
        content = line.lstrip(" ")
        for marker, handler in DIRECTIVES.items():
            prefix = marker + " "
            if content.startswith(prefix):
                handler(found, content[len(prefix) :], context)
                break
        else:
            remaining.append(line)
    return ParsedDescription(category=found.get("category", ""), description_lines=remaining)


def common_margin(lines: Sequence[str]) -> int:
    margins = [len(line) - len(line.lstrip(" ")) for line in lines if line.strip(" ")]
    return min(margins) if margins else 0


def normalize_indentation(lines: Sequence[str]) -> list[str]:
    """Strip the common left margin while keeping relative indentation."""

    margin = common_margin(lines)
    return [line[min(margin, len(line)) :] for line in lines]


def describe(cursor: TokenCursor, index: int, context: str = "") -> tuple[bool, ParsedDescription]:
    """Run the extract, parse and normalize pipeline for one declaration.

    Returns ``(documented, parsed)`` where ``documented`` tells an absent
    comment block apart from one whose text is empty.
    """

    block = extract_comment_block(cursor, index)
    parsed = parse_directives(block, context)
    parsed.description_lines = normalize_indentation(parsed.description_lines)
    return bool(block), parsed
