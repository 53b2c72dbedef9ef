"""Command-line interface entry points for helpgen."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Sequence

from .assembler import generate
from .config import GeneratorConfig, load_config, merge_overrides
from .errors import HelpgenError
from .models import HelpDocument
from .render import RENDERERS, render, render_json, write_output

__all__ = ["main"]

LOGGER = logging.getLogger(__name__)


def main(argv: Sequence[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    log_level = logging.DEBUG if args.verbose else getattr(logging, args.log_level.upper(), logging.INFO)
    logging.basicConfig(level=log_level, format="%(levelname)s:%(name)s:%(message)s")

    try:
        config = _resolve_config(args)
        LOGGER.debug("Resolved configuration: %s", config.model_dump(mode="json"))
        if args.command == "generate":
            return _cmd_generate(config)
        if args.command == "dump":
            return _cmd_dump(config)
        if args.command == "check":
            return _cmd_check(config)
    except HelpgenError as exc:
        raise SystemExit(str(exc)) from exc
    parser.error("Unknown command")
    return 2


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="helpgen",
        description="Generate help strings and settings metadata from documented declarations.",
    )
    parser.add_argument(
        "--log-level",
        default="info",
        help="Set logging level (debug, info, warning, error, critical).",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable verbose (DEBUG) logging.",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    generate_cmd = subparsers.add_parser(
        "generate",
        help="Write the help-strings artifact",
    )
    _add_source_arguments(generate_cmd)
    generate_cmd.add_argument(
        "--format",
        choices=tuple(RENDERERS),
        help="Artifact format (default: zig)",
    )
    generate_cmd.add_argument("--output", type=Path, help="Write the artifact here instead of stdout")

    dump = subparsers.add_parser(
        "dump",
        help="Print the extracted metadata as JSON",
    )
    _add_source_arguments(dump)

    check = subparsers.add_parser(
        "check",
        help="Run extraction without writing and report undocumented entries",
    )
    _add_source_arguments(check)

    return parser


def _add_source_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--config", type=Path, help="JSON file with generator settings")
    parser.add_argument("--schema", type=Path, help="Configuration schema source")
    parser.add_argument(
        "--schema-container",
        help="Struct holding the configuration fields (default: the file itself)",
    )
    parser.add_argument("--keybinds", type=Path, help="Keybinding action catalog source")
    parser.add_argument("--keybind-container", help="Union listing keybinding actions")
    parser.add_argument("--commands", type=Path, help="Command catalog source")
    parser.add_argument("--commands-container", help="Enum listing commands")
    parser.add_argument(
        "--type-source",
        type=Path,
        action="append",
        default=[],
        help="Extra source declaring enums used by the schema (repeatable)",
    )


def _resolve_config(args: argparse.Namespace) -> GeneratorConfig:
    base: dict[str, Any] = load_config(args.config) if args.config else {}
    overrides = {
        "schema_path": args.schema,
        "schema_container": args.schema_container,
        "keybind_path": args.keybinds,
        "keybind_container": args.keybind_container,
        "commands_path": args.commands,
        "commands_container": args.commands_container,
        "type_sources": args.type_source,
        "output": getattr(args, "output", None),
        "format": getattr(args, "format", None),
    }
    return merge_overrides(base, overrides)


def _cmd_generate(config: GeneratorConfig) -> int:
    document = generate(config)
    text = render(document, config.format)
    if config.output is None:
        sys.stdout.write(text)
    else:
        write_output(text, config.output)
    return 0


def _cmd_dump(config: GeneratorConfig) -> int:
    sys.stdout.write(render_json(generate(config)))
    return 0


def _cmd_check(config: GeneratorConfig) -> int:
    document = generate(config)
    print(_format_report(document))
    return 0


def _format_report(document: HelpDocument) -> str:
    header = f"{'Catalog':<20}{'Entries':>10}{'Undocumented':>14}"
    divider = "-" * len(header)
    missing = document.undocumented()
    lines = [header, divider]
    lines.append(f"{'config':<20}{len(document.config):>10}{len(missing['config']):>14}")
    lines.append(
        f"{'keybind_actions':<20}{len(document.keybind_actions):>10}{len(missing['keybind_actions']):>14}"
    )
    lines.append(f"{'actions':<20}{len(document.actions):>10}{0:>14}")
    lines.append(divider)
    lines.append(f"Option fields: {len(document.option_fields())}")
    for catalog, names in missing.items():
        if names:
            lines.append(f"Undocumented {catalog}: {json.dumps(names)}")
    return "\n".join(lines)
