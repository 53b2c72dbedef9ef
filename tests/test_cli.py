"""CLI smoke tests for the help generator."""

from __future__ import annotations

import json
import subprocess
import sys
from pathlib import Path

DATA_DIR = Path(__file__).parent / "data"


def _source_args() -> list[str]:
    return [
        "--schema",
        str(DATA_DIR / "Config.zig"),
        "--keybinds",
        str(DATA_DIR / "Binding.zig"),
        "--commands",
        str(DATA_DIR / "cli" / "ghostty.zig"),
        "--type-source",
        str(DATA_DIR / "terminal.zig"),
    ]


def _run(*args: str, check: bool = True) -> subprocess.CompletedProcess:
    return subprocess.run(
        [sys.executable, "-m", "helpgen", "--log-level", "warning", *args],
        check=check,
        capture_output=True,
        text=True,
    )


def test_cli_generate_to_file(tmp_path):
    out = tmp_path / "help_strings.zig"

    _run("generate", *_source_args(), "--output", str(out))

    text = out.read_text(encoding="utf-8")
    assert text.startswith("// THIS FILE IS AUTO GENERATED")
    assert "pub const config_metadata_entries" in text


def test_cli_generate_is_deterministic():
    first = _run("generate", *_source_args())
    second = _run("generate", *_source_args())

    assert first.stdout == second.stdout
    assert first.stdout


def test_cli_dump_json():
    result = _run("dump", *_source_args())

    payload = json.loads(result.stdout)
    assert len(payload["config"]) == 11
    assert len(payload["keybind_actions"]) == 5


def test_cli_config_file(tmp_path):
    config = tmp_path / "helpgen.json"
    config.write_text(
        json.dumps(
            {
                "schema_path": str(DATA_DIR / "Config.zig"),
                "format": "markdown",
                "output": "docs/config.md",
            }
        ),
        encoding="utf-8",
    )

    _run("generate", "--config", str(config))

    assert (tmp_path / "docs" / "config.md").read_text(encoding="utf-8").startswith("# Configuration reference")


def test_cli_check_reports_undocumented():
    result = _run("check", *_source_args())

    assert "font-size" in result.stdout
    assert "reset" in result.stdout


def test_cli_missing_run_doc_comment_aborts_without_output(tmp_path):
    commands = tmp_path / "cli"
    commands.mkdir()
    (commands / "main.zig").write_text("pub const Action = enum { version, undocumented };\n", encoding="utf-8")
    (commands / "version.zig").write_text("/// Print the version.\npub fn run() !u8 {}\n", encoding="utf-8")
    (commands / "undocumented.zig").write_text("pub fn run() !u8 {}\n", encoding="utf-8")
    out = tmp_path / "help_strings.zig"

    result = _run(
        "generate",
        "--schema",
        str(DATA_DIR / "Config.zig"),
        "--commands",
        str(commands / "main.zig"),
        "--output",
        str(out),
        check=False,
    )

    assert result.returncode == 1
    assert "doc comment must be present on run function of the undocumented action!" in result.stderr
    assert not out.exists()
    assert list(tmp_path.glob(".help_strings.zig.*")) == []
