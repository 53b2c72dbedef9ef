"""Exception hierarchy for helpgen."""

from __future__ import annotations

from pathlib import Path

__all__ = [
    "HelpgenError",
    "LexError",
    "CatalogSourceError",
    "MissingDocCommentError",
    "OptionNameCollisionError",
    "ConfigError",
]


class HelpgenError(Exception):
    """Base exception for generation failures that abort the run."""


class LexError(HelpgenError):
    """Source text could not be tokenized."""

    def __init__(self, message: str, line: int, column: int):
        super().__init__(f"{message} at line {line}, column {column}")
        self.line = line
        self.column = column


class CatalogSourceError(HelpgenError):
    """A declaration source is missing or lacks the expected container."""

    def __init__(self, message: str, path: Path | str | None = None):
        if path is not None:
            message = f"{message}: {path}"
        super().__init__(message)
        self.path = path


class MissingDocCommentError(HelpgenError):
    """A command's ``run`` function has no preceding doc comment."""

    def __init__(self, command: str):
        super().__init__(f"doc comment must be present on run function of the {command} action!")
        self.command = command


class OptionNameCollisionError(HelpgenError):
    """Two enum-typed fields sanitize to the same option array name."""

    def __init__(self, array_name: str, first: str, second: str):
        super().__init__(
            f"option array name {array_name!r} is shared by fields {first!r} and {second!r}"
        )
        self.array_name = array_name


class ConfigError(ValueError, HelpgenError):
    """Generator configuration is invalid."""
