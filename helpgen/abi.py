"""ctypes mirror of the generated ``ConfigMetadataEntry`` layout.

The Zig artifact declares the metadata table as an ``extern struct`` so that
a settings UI or CLI written in another language can read it without running
the generator. This module builds the same C layout from a
:class:`~helpgen.models.HelpDocument` and reads it back, which pins the field
order and widths of that contract.
"""

from __future__ import annotations

import ctypes
from dataclasses import dataclass, field
from typing import Any, Protocol

from .models import FieldMetadata, FieldType, HelpDocument

__all__ = [
    "FIELD_TYPE_CODES",
    "ConfigMetadataEntry",
    "MetadataTable",
    "build_table",
    "read_table",
    "LiveConfig",
]

FIELD_TYPE_CODES: dict[FieldType, int] = {
    FieldType.string: 0,
    FieldType.boolean: 1,
    FieldType.option: 2,
}
_CODE_TYPES = {code: kind for kind, code in FIELD_TYPE_CODES.items()}


class ConfigMetadataEntry(ctypes.Structure):
    _fields_ = [
        ("name", ctypes.c_char_p),
        ("field_type", ctypes.c_int),
        ("description", ctypes.c_char_p),
        ("category", ctypes.c_char_p),
        ("options", ctypes.POINTER(ctypes.c_char_p)),
        ("options_count", ctypes.c_size_t),
    ]


@dataclass
class MetadataTable:
    """A C array of entries plus the buffers its pointers refer to."""

    entries: Any
    count: int
    _keepalive: list[Any] = field(default_factory=list, repr=False)


def build_table(document: HelpDocument) -> MetadataTable:
    entries = (ConfigMetadataEntry * len(document.config))()
    keepalive: list[Any] = [entries]
    for index, entry in enumerate(document.config):
        options = (ctypes.c_char_p * len(entry.options))(*(option.encode("utf-8") for option in entry.options))
        texts = [entry.name.encode("utf-8"), entry.description.encode("utf-8"), entry.category.encode("utf-8")]
        keepalive.extend([options, *texts])
        entries[index] = ConfigMetadataEntry(
            texts[0],
            FIELD_TYPE_CODES[entry.field_type],
            texts[1],
            texts[2],
            ctypes.cast(options, ctypes.POINTER(ctypes.c_char_p)),
            len(entry.options),
        )
    return MetadataTable(entries=entries, count=len(document.config), _keepalive=keepalive)


def read_table(table: MetadataTable) -> list[FieldMetadata]:
    """Decode a C metadata table the way an external consumer would."""

    records = []
    for index in range(table.count):
        raw = table.entries[index]
        field_type = _CODE_TYPES.get(raw.field_type, FieldType.string)
        options: list[str] = []
        if field_type is FieldType.option:
            options = [raw.options[j].decode("utf-8") for j in range(raw.options_count)]
        records.append(
            FieldMetadata(
                name=raw.name.decode("utf-8"),
                field_type=field_type,
                description=(raw.description or b"").decode("utf-8"),
                category=(raw.category or b"").decode("utf-8"),
                options=options,
                documented=bool(raw.description),
            )
        )
    return records


class LiveConfig(Protocol):
    """Interface of the live configuration object used by the settings UI.

    The generator never reads values; this only documents the boundary.
    """

    def read_effective_value(self, key: str) -> str:
        ...
