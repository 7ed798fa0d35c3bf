"""
propbin - reader for tagged binary property bins (PROP / PTCH files).
"""

from .diagnostics import DecodeError, Diagnostic, DiagnosticCollector
from .hashes import Hash32, Hash64, fnv1a
from .reader import BinReader, read_binary, read_file
from .types import Type, is_container, is_primitive
from .values import (
    Document,
    EmbedValue,
    List2Value,
    ListValue,
    MapValue,
    OptionValue,
    PointerValue,
    PrimitiveValue,
    Value,
    value_from_type,
)

__version__ = "0.1.0"

__all__ = [
    "BinReader",
    "DecodeError",
    "Diagnostic",
    "DiagnosticCollector",
    "Document",
    "EmbedValue",
    "Hash32",
    "Hash64",
    "List2Value",
    "ListValue",
    "MapValue",
    "OptionValue",
    "PointerValue",
    "PrimitiveValue",
    "Type",
    "Value",
    "fnv1a",
    "is_container",
    "is_primitive",
    "read_binary",
    "read_file",
    "value_from_type",
]
