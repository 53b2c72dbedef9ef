"""Metadata assembly: one generic extraction pass per catalog."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Callable, Mapping, Sequence

from .comments import describe, extract_comment_block
from .config import GeneratorConfig
from .errors import CatalogSourceError, MissingDocCommentError
from .lexer import tokenize
from .models import ActionHelp, FieldMetadata, FieldType, HelpDocument, KeybindHelp
from .schema import (
    Container,
    EnumTable,
    Member,
    collect_enums,
    collect_options,
    classify,
    enum_members,
    file_container,
    find_container,
    find_run_function,
    struct_fields,
    union_variants,
)
from .tokens import TokenCursor

__all__ = [
    "CatalogKind",
    "CatalogSpec",
    "EmitOptions",
    "extract_and_emit",
    "command_file_name",
    "build_document",
    "generate",
]

LOGGER = logging.getLogger(__name__)

Record = FieldMetadata | KeybindHelp | ActionHelp


class CatalogKind(str, Enum):
    config = "config"
    keybind = "keybind"
    action = "action"


@dataclass(frozen=True, slots=True)
class CatalogSpec:
    """What to scan in one pass.

    ``command_sources`` maps a command's logical name to its source text and
    takes precedence over reading ``<directory>/<file>`` from disk.
    """

    kind: CatalogKind
    source: str
    container: str | None = None
    path: Path | None = None
    command_sources: Mapping[str, str] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class EmitOptions:
    """Which metadata a pass carries beyond name and description."""

    track_categories: bool = False
    track_types: bool = False
    enums: EnumTable = field(default_factory=EnumTable)

    @classmethod
    def for_kind(cls, kind: CatalogKind, enums: EnumTable | None = None) -> "EmitOptions":
        if kind is CatalogKind.config:
            return cls(track_categories=True, track_types=True, enums=enums or EnumTable())
        return cls()


def command_file_name(name: str) -> str:
    return name.replace("-", "_") + ".zig"


def extract_and_emit(spec: CatalogSpec, options: EmitOptions) -> list[Record]:
    """Run extraction over every public member of one catalog.

    Members whose name begins with ``_`` are internal and skipped. Records
    come back in declaration order.
    """

    cursor = TokenCursor(tokenize(spec.source))
    container = _locate(cursor, spec)
    targets = _TARGETS[spec.kind](cursor, container)

    records: list[Record] = []
    for member in targets:
        if member.name.startswith("_"):
            LOGGER.debug("Skipping internal %s member %s", spec.kind.value, member.name)
            continue
        if spec.kind is CatalogKind.action:
            action = _action_record(spec, member.name)
            if action is not None:
                records.append(action)
        else:
            records.append(_member_record(spec.kind, cursor, member, options))

    LOGGER.info("Extracted %d %s entries", len(records), spec.kind.value)
    return records


def _locate(cursor: TokenCursor, spec: CatalogSpec) -> Container:
    if spec.container is None:
        return file_container(cursor)
    container = find_container(cursor, spec.container)
    if container is None:
        raise CatalogSourceError(
            f"container {spec.container!r} not found in {spec.kind.value} source",
            spec.path,
        )
    return container


def _member_record(kind: CatalogKind, cursor: TokenCursor, member: Member, options: EmitOptions) -> Record:
    documented, parsed = describe(cursor, member.index, member.name)
    if not documented:
        LOGGER.debug("%s member %s has no doc comment", kind.value, member.name)

    if kind is CatalogKind.keybind:
        return KeybindHelp(name=member.name, description=parsed.text, documented=documented)

    field_type = FieldType.string
    choices: list[str] = []
    if options.track_types:
        field_type = classify(member.type_expr, options.enums)
        if field_type is FieldType.option:
            choices = collect_options(member.type_expr, options.enums)
    return FieldMetadata(
        name=member.name,
        field_type=field_type,
        description=parsed.text,
        category=parsed.category if options.track_categories else "",
        options=choices,
        documented=documented,
    )


def _action_record(spec: CatalogSpec, name: str) -> ActionHelp | None:
    source = _command_source(spec, name)
    cursor = TokenCursor(tokenize(source))
    run_index = find_run_function(cursor)
    if run_index is None:
        LOGGER.warning("Command %s has no run function; skipping", name)
        return None
    if not extract_comment_block(cursor, run_index):
        raise MissingDocCommentError(name)
    _, parsed = describe(cursor, run_index, name)
    return ActionHelp(name=name, description=parsed.text)


def _command_source(spec: CatalogSpec, name: str) -> str:
    if name in spec.command_sources:
        return spec.command_sources[name]
    if spec.path is None:
        raise CatalogSourceError(f"no source available for command {name!r}")
    path = spec.path.parent / command_file_name(name)
    try:
        return path.read_text(encoding="utf-8")
    except FileNotFoundError as exc:
        raise CatalogSourceError(f"source for command {name!r} not found", path) from exc


_TARGETS: dict[CatalogKind, Callable[[TokenCursor, Container], Sequence[Member]]] = {
    CatalogKind.config: struct_fields,
    CatalogKind.keybind: union_variants,
    CatalogKind.action: enum_members,
}


# ---------------------------------------------------------------- whole runs
def build_document(
    schema: str,
    *,
    schema_container: str | None = None,
    keybinds: str | None = None,
    keybind_container: str = "Action",
    commands: str | None = None,
    commands_container: str = "Action",
    command_sources: Mapping[str, str] | None = None,
    commands_path: Path | None = None,
    type_sources: Sequence[str] = (),
    schema_path: Path | None = None,
    keybind_path: Path | None = None,
) -> HelpDocument:
    """Extract all three catalogs from in-memory sources."""

    enums = collect_enums(TokenCursor(tokenize(schema)))
    for text in type_sources:
        enums.update(collect_enums(TokenCursor(tokenize(text))))

    config_spec = CatalogSpec(CatalogKind.config, schema, schema_container, schema_path)
    document = HelpDocument(
        config=extract_and_emit(config_spec, EmitOptions.for_kind(CatalogKind.config, enums))
    )

    if keybinds is not None:
        spec = CatalogSpec(CatalogKind.keybind, keybinds, keybind_container, keybind_path)
        document.keybind_actions = extract_and_emit(spec, EmitOptions.for_kind(CatalogKind.keybind))

    if commands is not None:
        spec = CatalogSpec(
            CatalogKind.action,
            commands,
            commands_container,
            commands_path,
            dict(command_sources or {}),
        )
        document.actions = extract_and_emit(spec, EmitOptions.for_kind(CatalogKind.action))

    return document


def generate(config: GeneratorConfig) -> HelpDocument:
    """Read every source named by ``config`` and extract the help document."""

    return build_document(
        _read(config.schema_path, "schema"),
        schema_container=config.schema_container,
        keybinds=_read(config.keybind_path, "keybind") if config.keybind_path else None,
        keybind_container=config.keybind_container,
        commands=_read(config.commands_path, "command catalog") if config.commands_path else None,
        commands_container=config.commands_container,
        commands_path=config.commands_path,
        type_sources=[_read(path, "type") for path in config.type_sources],
        schema_path=config.schema_path,
        keybind_path=config.keybind_path,
    )


def _read(path: Path, label: str) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except FileNotFoundError as exc:
        raise CatalogSourceError(f"{label} source not found", path) from exc
