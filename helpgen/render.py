"""Artifact writers for a :class:`~helpgen.models.HelpDocument`.

Every writer reads the same document, so field order, name spelling and
type classification agree across the Zig help-strings artifact, the JSON
dump and the Markdown reference.
"""

from __future__ import annotations

import json
import logging
import os
import re
import tempfile
from pathlib import Path
from typing import Callable, Iterable

from .errors import OptionNameCollisionError
from .lexer import KEYWORDS
from .models import FieldMetadata, FieldType, HelpDocument

__all__ = [
    "GENERATED_HEADER",
    "RENDERERS",
    "render",
    "render_zig",
    "render_json",
    "render_markdown",
    "option_array_name",
    "option_array_names",
    "zig_identifier",
    "zig_string",
    "description_constant",
    "write_output",
]

LOGGER = logging.getLogger(__name__)

GENERATED_HEADER = "// THIS FILE IS AUTO GENERATED"
MULTILINE_PREFIX = "    \\\\"
OPTION_SUFFIX = "_options"

BARE_IDENTIFIER = re.compile(r"[A-Za-z_][A-Za-z0-9_]*\Z")
SIZED_INTEGER = re.compile(r"[iu][0-9]+\Z")
NON_IDENTIFIER_CHAR = re.compile(r"[^A-Za-z0-9_]")
PRIMITIVES = frozenset(
    {
        "anyerror", "anyopaque", "bool", "c_char", "c_int", "c_long", "c_longdouble",
        "c_longlong", "c_short", "c_uint", "c_ulong", "c_ulonglong", "c_ushort",
        "comptime_float", "comptime_int", "f16", "f32", "f64", "f80", "f128",
        "false", "isize", "noreturn", "null", "true", "type", "undefined", "usize",
        "void",
    }
)

FIELD_TYPE_DECL = """\
pub const FieldType = enum(c_int) {
    string,
    boolean,
    option,
};
"""

METADATA_ENTRY_DECL = """\
/// Configuration Metadata for rendering GUI Settings pages.
pub const ConfigMetadataEntry = extern struct {
    name: [*:0]const u8,
    field_type: FieldType,
    description: [*:0]const u8,
    category: [*:0]const u8,
    options: [*]const [*:0]const u8,
    options_count: usize,
};
"""


# ------------------------------------------------------------------ helpers
def zig_identifier(name: str) -> str:
    """Spell ``name`` as a Zig identifier, escaping it as ``@"..."`` if needed."""

    if BARE_IDENTIFIER.match(name) and name not in KEYWORDS and name not in PRIMITIVES and not SIZED_INTEGER.match(name):
        return name
    return f"@{zig_string(name)}"


def zig_string(value: str) -> str:
    """Return ``value`` as a double-quoted Zig string literal."""

    escaped = []
    for char in value:
        if char == "\\":
            escaped.append("\\\\")
        elif char == '"':
            escaped.append('\\"')
        elif char == "\n":
            escaped.append("\\n")
        elif char == "\t":
            escaped.append("\\t")
        elif char == "\r":
            escaped.append("\\r")
        elif ord(char) < 0x20 or ord(char) == 0x7F:
            escaped.append(f"\\x{ord(char):02x}")
        else:
            escaped.append(char)
    return '"' + "".join(escaped) + '"'


def option_array_name(field_name: str) -> str:
    name = NON_IDENTIFIER_CHAR.sub("_", field_name) + OPTION_SUFFIX
    # Zig identifiers cannot start with a digit.
    return "_" + name if name[0].isdigit() else name


def option_array_names(entries: Iterable[FieldMetadata]) -> dict[str, str]:
    """Map each option-typed field to its array name, rejecting collisions."""

    names: dict[str, str] = {}
    owners: dict[str, str] = {}
    for entry in entries:
        if entry.field_type is not FieldType.option:
            continue
        array_name = option_array_name(entry.name)
        if array_name in owners:
            raise OptionNameCollisionError(array_name, owners[array_name], entry.name)
        owners[array_name] = entry.name
        names[entry.name] = array_name
    return names


def description_constant(name: str, description: str) -> list[str]:
    """Lines declaring one description constant.

    A non-empty description becomes a multi-line literal closed by a single
    ``;`` line; an empty one is the explicit value ``""``.
    """

    header = f"pub const {zig_identifier(name)}: [:0]const u8 ="
    if not description:
        return [f'{header} "";', ""]
    lines = [header]
    lines.extend(MULTILINE_PREFIX + line for line in description.split("\n"))
    lines.append(";")
    lines.append("")
    return lines


# --------------------------------------------------------------------- zig
def render_zig(document: HelpDocument) -> str:
    arrays = option_array_names(document.config)
    lines = [GENERATED_HEADER, ""]

    lines.extend(["/// Configuration help", "pub const Config = struct {", ""])
    for entry in document.config:
        if entry.documented:
            lines.extend(description_constant(entry.name, entry.description))
    lines.extend(["};", ""])

    lines.extend(["/// keybind actions help", "pub const KeybindAction = struct {", ""])
    for keybind in document.keybind_actions:
        if keybind.documented:
            lines.extend(description_constant(keybind.name, keybind.description))
    lines.extend(["};", ""])

    lines.extend(["/// Actions help", "pub const Action = struct {", ""])
    for action in document.actions:
        lines.extend(description_constant(action.name, action.description))
    lines.extend(["};", ""])

    lines.append(FIELD_TYPE_DECL)
    lines.append(METADATA_ENTRY_DECL)

    lines.append("/// Option strings for configuration fields that are enums.")
    for entry in document.config:
        if entry.name not in arrays:
            continue
        values = "".join(f"{zig_string(option)}, " for option in entry.options)
        lines.append(f"pub const {arrays[entry.name]} = [_][*:0]const u8{{ {values}}};")
    lines.append("")

    lines.append("/// Runtime array of all config metadata entries")
    lines.append("pub const config_metadata_entries = [_]ConfigMetadataEntry{")
    for entry in document.config:
        lines.append(_metadata_row(entry, arrays.get(entry.name)))
    lines.append("};")
    return "\n".join(lines) + "\n"


def _metadata_row(entry: FieldMetadata, array_name: str | None) -> str:
    description = f"Config.{zig_identifier(entry.name)}" if entry.documented else '""'
    options = f"&{array_name}" if array_name is not None else "&.{}"
    return (
        f"    .{{ .name = {zig_string(entry.name)}, "
        f".field_type = .{entry.field_type.value}, "
        f".description = {description}, "
        f".category = {zig_string(entry.category)}, "
        f".options = {options}, "
        f".options_count = {entry.options_count} }},"
    )


# -------------------------------------------------------------------- json
def render_json(document: HelpDocument) -> str:
    payload = document.model_dump(mode="json")
    return json.dumps(payload, indent=2) + "\n"


# ---------------------------------------------------------------- markdown
def render_markdown(document: HelpDocument) -> str:
    """Configuration reference grouped by category, then keybinds and commands."""

    groups: dict[str, list[FieldMetadata]] = {}
    for entry in document.config:
        groups.setdefault(entry.category or "General", []).append(entry)

    lines = ["# Configuration reference", ""]
    for category, entries in groups.items():
        lines.extend([f"## {category}", ""])
        for entry in entries:
            lines.extend([f"### `{entry.name}`", ""])
            kind = f"*Type:* {entry.field_type.value}"
            if entry.options:
                kind += " (" + ", ".join(f"`{option}`" for option in entry.options) + ")"
            lines.extend([kind, ""])
            if entry.description:
                lines.extend([entry.description, ""])

    if document.keybind_actions:
        lines.extend(["# Keybind actions", ""])
        for keybind in document.keybind_actions:
            lines.extend([f"## `{keybind.name}`", ""])
            if keybind.description:
                lines.extend([keybind.description, ""])

    if document.actions:
        lines.extend(["# Commands", ""])
        for action in document.actions:
            lines.extend([f"## `{action.name}`", ""])
            if action.description:
                lines.extend([action.description, ""])

    return "\n".join(lines).rstrip("\n") + "\n"


RENDERERS: dict[str, Callable[[HelpDocument], str]] = {
    "zig": render_zig,
    "json": render_json,
    "markdown": render_markdown,
}


def render(document: HelpDocument, fmt: str = "zig") -> str:
    try:
        renderer = RENDERERS[fmt]
    except KeyError:
        raise ValueError(f"Unknown output format: {fmt}") from None
    return renderer(document)


def write_output(text: str, path: Path) -> None:
    """Write ``text`` to ``path`` atomically.

    The artifact is a single compilation unit downstream, so it is written to
    a sibling temporary file and moved into place in one step.
    """

    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", dir=path.parent)
    try:
        with os.fdopen(fd, "w", encoding="utf-8", newline="\n") as handle:
            handle.write(text)
        os.replace(tmp_name, path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise
    LOGGER.info("Wrote %d bytes to %s", len(text.encode("utf-8")), path)
