"""Public interface for the helpgen package."""

from .assembler import build_document, extract_and_emit, generate
from .models import FieldMetadata, FieldType, HelpDocument
from .render import render

__all__ = [
    "build_document",
    "extract_and_emit",
    "generate",
    "render",
    "FieldMetadata",
    "FieldType",
    "HelpDocument",
]
__version__ = "0.1.0"
