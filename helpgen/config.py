"""Generator configuration."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Literal, Mapping

from pydantic import BaseModel, Field, ValidationError, field_validator

from .errors import ConfigError

__all__ = ["GeneratorConfig", "OutputFormat", "load_config", "merge_overrides"]

LOGGER = logging.getLogger(__name__)

OutputFormat = Literal["zig", "json", "markdown"]

PATH_FIELDS = ("schema_path", "keybind_path", "commands_path", "output")

class GeneratorConfig(BaseModel):
    """Input sources and output target for one generation run.

    ``schema_container`` of ``None`` means the schema file is itself the
    struct (a file-level container). The command catalog directory is the
    directory holding ``commands_path``; each command's implementation lives
    there as ``<name>.zig`` with hyphens replaced by underscores.
    """

    schema_path: Path
    schema_container: str | None = None
    keybind_path: Path | None = None
    keybind_container: str = "Action"
    commands_path: Path | None = None
    commands_container: str = "Action"
    type_sources: list[Path] = Field(default_factory=list)
    output: Path | None = None
    format: OutputFormat = "zig"

    model_config = dict(extra="forbid")

    @field_validator("schema_container", mode="before")
    @classmethod
    def _blank_container_is_file(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value


def load_config(path: str | Path) -> dict[str, Any]:
    """Read a JSON config file, resolving relative paths against its directory."""

    path = Path(path)
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError as exc:
        raise ConfigError(f"config file not found: {path}") from exc
    except json.JSONDecodeError as exc:
        raise ConfigError(f"config file {path} is not valid JSON: {exc}") from exc
    if not isinstance(raw, dict):
        raise ConfigError(f"config file {path} must contain a JSON object")

    base = path.resolve().parent
    for key in PATH_FIELDS:
        if raw.get(key):
            raw[key] = str(_resolve(base, raw[key]))
    if raw.get("type_sources"):
        raw["type_sources"] = [str(_resolve(base, item)) for item in raw["type_sources"]]
    LOGGER.debug("Loaded config %s keys=%s", path, sorted(raw))
    return raw

def merge_overrides(base: Mapping[str, Any], overrides: Mapping[str, Any]) -> GeneratorConfig:
    """Apply non-``None`` overrides on top of ``base`` and validate."""

    merged = dict(base)
    for key, value in overrides.items():
        if value is None or value == []:
            continue
        merged[key] = value
    try:
        return GeneratorConfig(**merged)
    except ValidationError as exc:
        raise ConfigError(f"invalid generator configuration: {exc}") from exc

def _resolve(base: Path, value: str) -> Path:
    candidate = Path(value)
    return candidate if candidate.is_absolute() else base / candidate
