"""Tests for generator configuration loading."""

import json
from pathlib import Path

import pytest

from helpgen.config import GeneratorConfig, load_config, merge_overrides
from helpgen.errors import ConfigError, HelpgenError


def test_load_config_resolves_relative_paths(tmp_path):
    path = tmp_path / "helpgen.json"
    path.write_text(
        json.dumps(
            {
                "schema_path": "src/Config.zig",
                "commands_path": "/abs/cli/main.zig",
                "type_sources": ["src/terminal.zig"],
                "format": "json",
            }
        ),
        encoding="utf-8",
    )

    config = merge_overrides(load_config(path), {})

    assert config.schema_path == tmp_path.resolve() / "src" / "Config.zig"
    assert config.commands_path == Path("/abs/cli/main.zig")
    assert config.type_sources == [tmp_path.resolve() / "src" / "terminal.zig"]
    assert config.format == "json"


def test_overrides_win_and_none_is_ignored(tmp_path):
    base = {"schema_path": str(tmp_path / "a.zig"), "format": "markdown"}

    config = merge_overrides(base, {"schema_path": tmp_path / "b.zig", "format": None, "type_sources": []})

    assert config.schema_path == tmp_path / "b.zig"
    assert config.format == "markdown"


def test_blank_container_means_file_level():
    config = GeneratorConfig(schema_path=Path("Config.zig"), schema_container="  ")

    assert config.schema_container is None


@pytest.mark.parametrize(
    "payload",
    [
        {},
        {"schema_path": "x.zig", "format": "yaml"},
        {"schema_path": "x.zig", "unknown": 1},
    ],
)
def test_invalid_config(payload):
    with pytest.raises(ConfigError):
        merge_overrides(payload, {})


def test_load_config_errors(tmp_path):
    with pytest.raises(ConfigError):
        load_config(tmp_path / "missing.json")

    broken = tmp_path / "broken.json"
    broken.write_text("{", encoding="utf-8")
    with pytest.raises(HelpgenError):
        load_config(broken)

    listing = tmp_path / "list.json"
    listing.write_text("[]", encoding="utf-8")
    with pytest.raises(ConfigError):
        load_config(listing)
