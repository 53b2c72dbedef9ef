"""Tests for the metadata assembler and whole-run generation."""

from __future__ import annotations

from pathlib import Path

import pytest

from helpgen.assembler import (
    CatalogKind,
    CatalogSpec,
    EmitOptions,
    build_document,
    command_file_name,
    extract_and_emit,
    generate,
)
from helpgen.config import GeneratorConfig
from helpgen.errors import CatalogSourceError, MissingDocCommentError
from helpgen.models import FieldType

DATA_DIR = Path(__file__).parent / "data"


def _read(name: str) -> str:
    return (DATA_DIR / name).read_text(encoding="utf-8")


@pytest.fixture(scope="module")
def config() -> GeneratorConfig:
    return GeneratorConfig(
        schema_path=DATA_DIR / "Config.zig",
        keybind_path=DATA_DIR / "Binding.zig",
        commands_path=DATA_DIR / "cli" / "ghostty.zig",
        type_sources=[DATA_DIR / "terminal.zig"],
    )


@pytest.fixture(scope="module")
def document(config):
    return generate(config)


def test_one_row_per_public_field_in_order(document):
    names = [entry.name for entry in document.config]

    assert len(names) == 12 - 1
    assert "_diagnostics" not in names
    assert names[0] == "font-family"
    assert names[-1] == "scrollback-limit"


def test_rows_carry_type_category_and_options(document):
    rows = {entry.name: entry for entry in document.config}

    assert rows["font-family"].category == "Font"
    assert rows["font-family"].description.startswith("The font families to use.\n\n")
    assert "\n    ghostty +list-fonts\n" in rows["font-family"].description
    assert rows["font-feature"].category == "Font"
    assert rows["font-feature"].description == "Apply a font feature."
    assert rows["scrollback-limit"].category == "Window"

    assert rows["cursor-style"].field_type is FieldType.option
    assert rows["cursor-style"].options == ["block", "bar", "underline", "block-hollow"]
    assert rows["cursor-style"].options_count == 4
    assert rows["cursor-style"].description.endswith("  * `underline`")
    assert rows["shell-integration"].options_count == 5
    assert rows["cursor-style-blink"].field_type is FieldType.boolean


def test_non_option_rows_have_no_options(document):
    for entry in document.config:
        if entry.field_type is not FieldType.option:
            assert entry.options == []
            assert entry.options_count == 0


def test_undocumented_field_still_gets_row(document):
    row = next(entry for entry in document.config if entry.name == "font-size")

    assert not row.documented
    assert row.description == ""
    assert row.field_type is FieldType.string


def test_directive_only_field_is_documented(document):
    row = next(entry for entry in document.config if entry.name == "font-thicken")

    assert row.documented
    assert row.description == ""
    assert row.category == "Font"


def test_keybind_actions(document):
    names = [(entry.name, entry.documented) for entry in document.keybind_actions]

    assert names == [
        ("ignore", True),
        ("unbind", True),
        ("csi", True),
        ("reset", False),
        ("copy-to-clipboard", True),
    ]
    assert document.keybind_actions[2].description == "Send a CSI sequence.\n\n    csi:0m"


def test_actions_read_from_command_files(document):
    actions = {action.name: action.description for action in document.actions}

    assert list(actions) == ["version", "help", "list-fonts"]
    assert actions["version"] == "The `version` command is used to display information about Ghostty."
    assert actions["help"].endswith("  * `--help`\n  * `-h`")
    assert actions["list-fonts"].startswith("The `list-fonts` command lists all the available fonts.")


def test_type_source_is_optional(config):
    without = generate(config.model_copy(update={"type_sources": []}))
    row = next(entry for entry in without.config if entry.name == "shell-integration")

    assert row.field_type is FieldType.string


def test_command_file_name():
    assert command_file_name("list-fonts") == "list_fonts.zig"


def test_missing_run_doc_comment_is_fatal():
    with pytest.raises(MissingDocCommentError) as info:
        build_document(
            "x: u8 = 0,",
            commands="pub const Action = enum { version, broken };",
            command_sources={
                "version": "/// Version.\npub fn run() !u8 {}",
                "broken": "const std = @import(\"std\");\npub fn run() !u8 {}",
            },
        )

    assert info.value.command == "broken"
    assert "broken" in str(info.value)


def test_command_without_run_is_skipped(caplog):
    document = build_document(
        "x: u8 = 0,",
        commands="pub const Action = enum { helper };",
        command_sources={"helper": "pub fn other() void {}"},
    )

    assert document.actions == []
    assert "helper" in caplog.text


def test_missing_command_file(tmp_path):
    catalog = tmp_path / "main.zig"
    catalog.write_text("pub const Action = enum { ghost };", encoding="utf-8")
    config = GeneratorConfig(schema_path=DATA_DIR / "Config.zig", commands_path=catalog)

    with pytest.raises(CatalogSourceError):
        generate(config)


def test_missing_container_is_reported():
    spec = CatalogSpec(CatalogKind.keybind, "const x = 1;", "Action")

    with pytest.raises(CatalogSourceError, match="Action"):
        extract_and_emit(spec, EmitOptions.for_kind(CatalogKind.keybind))


def test_options_control_tracking():
    source = "/// @category A\n/// Doc.\nflag: bool = true,\n"
    plain = extract_and_emit(CatalogSpec(CatalogKind.config, source), EmitOptions())
    rich = extract_and_emit(
        CatalogSpec(CatalogKind.config, source),
        EmitOptions.for_kind(CatalogKind.config),
    )

    assert plain[0].field_type is FieldType.string
    assert plain[0].category == ""
    assert rich[0].field_type is FieldType.boolean
    assert rich[0].category == "A"
    assert plain[0].description == rich[0].description == "Doc."


def test_named_schema_container():
    document = build_document(
        "pub const Settings = struct {\n    /// Doc.\n    a: bool = false,\n    _b: u8 = 0,\n};\n",
        schema_container="Settings",
    )

    assert [entry.name for entry in document.config] == ["a"]


def test_runs_are_deterministic(config):
    first = generate(config)
    second = generate(config)

    assert first.model_dump_json() == second.model_dump_json()
