"""Metadata records produced by a generation run."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field, computed_field, model_validator

__all__ = [
    "FieldType",
    "ParsedDescription",
    "FieldMetadata",
    "ActionHelp",
    "KeybindHelp",
    "HelpDocument",
]


class FieldType(str, Enum):
    """Presentation kind used by the settings UI to pick an input control."""

    string = "string"
    boolean = "boolean"
    option = "option"


class ParsedDescription(BaseModel):
    """Comment block with directive lines removed."""

    category: str = ""
    description_lines: list[str] = Field(default_factory=list)

    @property
    def text(self) -> str:
        return "\n".join(self.description_lines)


class FieldMetadata(BaseModel):
    """One row of the configuration metadata table."""

    name: str
    field_type: FieldType = FieldType.string
    description: str = ""
    category: str = ""
    options: list[str] = Field(default_factory=list)
    documented: bool = False

    @computed_field
    @property
    def options_count(self) -> int:
        return len(self.options)

    @model_validator(mode="after")
    def _options_only_for_option_kind(self) -> "FieldMetadata":
        if self.field_type is not FieldType.option and self.options:
            raise ValueError(f"field {self.name!r} of kind {self.field_type.value} cannot carry options")
        return self


class ActionHelp(BaseModel):
    """Help text for one CLI command."""

    name: str
    description: str = ""
    documented: bool = True


class KeybindHelp(BaseModel):
    """Help text for one keybinding action variant."""

    name: str
    description: str = ""
    documented: bool = False


class HelpDocument(BaseModel):
    """Everything one run extracts, in source declaration order."""

    config: list[FieldMetadata] = Field(default_factory=list)
    keybind_actions: list[KeybindHelp] = Field(default_factory=list)
    actions: list[ActionHelp] = Field(default_factory=list)

    def option_fields(self) -> list[FieldMetadata]:
        return [entry for entry in self.config if entry.field_type is FieldType.option]

    def undocumented(self) -> dict[str, list[str]]:
        return {
            "config": [entry.name for entry in self.config if not entry.documented],
            "keybind_actions": [entry.name for entry in self.keybind_actions if not entry.documented],
        }
