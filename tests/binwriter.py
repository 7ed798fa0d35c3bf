"""
Test-side bin writer.

Produces byte streams for the reader tests. Mirrors the reader layout so a
Document built here can be written, read back and compared.
"""

import struct

from propbin.hashes import Hash32
from propbin.types import PRIMITIVE_FORMATS, Type
from propbin.values import (
    MAGIC_PROP,
    MAGIC_PTCH,
    Document,
    EmbedValue,
    List2Value,
    ListValue,
    MapValue,
    OptionValue,
    PointerValue,
    PrimitiveValue,
)

# Byte offset of the first field value in a document written by
# single_field_doc(): magic, version, linked count, entry count, class hash,
# entry length, key, field count, field name, field type
VALUE_OFFSET = 35


class BinaryWriter:
    """
    Binary data writer with little-endian support and sized block management.

    begin_sized_block() writes a 4-byte placeholder; end_sized_block() fills
    it with the number of bytes written after it. Blocks nest.
    """

    def __init__(self, string_field_names: bool = False, outer_delta: int = 0):
        self.data = bytearray()
        self.size_stack = []
        self.string_field_names = string_field_names
        # Added to the outermost block size, to corrupt it on purpose
        self.outer_delta = outer_delta

    def write_u8(self, val: int):
        self.data.append(val & 0xFF)

    def write_u16(self, val: int):
        self.data.extend(struct.pack('<H', val))

    def write_u32(self, val: int):
        self.data.extend(struct.pack('<I', val))

    def write_u64(self, val: int):
        self.data.extend(struct.pack('<Q', val))

    def write_bytes(self, data: bytes):
        self.data.extend(data)

    def write_string(self, data: bytes):
        self.write_u16(len(data))
        self.write_bytes(data)

    def begin_sized_block(self):
        pos = len(self.data)
        self.write_u32(0)
        self.size_stack.append(pos)

    def end_sized_block(self) -> int:
        start_pos = self.size_stack.pop()
        block_size = len(self.data) - (start_pos + 4)
        delta = 0 if self.size_stack else self.outer_delta
        struct.pack_into('<I', self.data, start_pos, block_size + delta)
        return block_size

    def get_bytes(self) -> bytes:
        return bytes(self.data)

    # -------------------------------------------------------------------------
    # Values
    # -------------------------------------------------------------------------

    def write_field_name(self, name):
        if self.string_field_names:
            self.write_string(name)
        else:
            self.write_u32(name.hash)

    def write_fields(self, items):
        self.write_u16(len(items))
        for name, value in items:
            self.write_field_name(name)
            self.write_u8(value.type)
            self.write_value(value)

    def write_value(self, value):
        if isinstance(value, PrimitiveValue):
            self._write_primitive(value)
        elif isinstance(value, OptionValue):
            self.write_u8(value.value_type)
            self.write_u8(len(value.items))
            for item in value.items:
                self.write_value(item)
        elif isinstance(value, (ListValue, List2Value)):
            self.write_u8(value.value_type)
            self.begin_sized_block()
            self.write_u32(len(value.items))
            for item in value.items:
                self.write_value(item)
            self.end_sized_block()
        elif isinstance(value, MapValue):
            self.write_u8(value.key_type)
            self.write_u8(value.value_type)
            self.begin_sized_block()
            self.write_u32(len(value.items))
            for key, item in value.items:
                self.write_value(key)
                self.write_value(item)
            self.end_sized_block()
        elif isinstance(value, (EmbedValue, PointerValue)):
            self.write_u32(value.name.hash)
            if isinstance(value, PointerValue) and value.is_null():
                return
            self.begin_sized_block()
            self.write_fields(value.items)
            self.end_sized_block()
        else:
            raise TypeError(f"Cannot write {value!r}")

    def _write_primitive(self, value: PrimitiveValue):
        if value.type == Type.STRING:
            self.write_string(value.value)
        elif value.type in (Type.HASH, Type.LINK):
            self.write_u32(value.value.hash)
        elif value.type == Type.FILE:
            self.write_u64(value.value.hash)
        else:
            fmt = PRIMITIVE_FORMATS[value.type]
            payload = value.value if isinstance(value.value, tuple) else (value.value,)
            self.write_bytes(fmt.pack(*payload))

    # -------------------------------------------------------------------------
    # Document
    # -------------------------------------------------------------------------

    def write_document(self, doc: Document) -> bytes:
        if doc.type == MAGIC_PTCH:
            self.write_bytes(MAGIC_PTCH)
            self.write_u64(0)
        self.write_bytes(MAGIC_PROP)
        self.write_u32(doc.version)
        if doc.version >= 2:
            self.write_u32(len(doc.linked))
            for path in doc.linked:
                self.write_string(path)
        entries = doc.entries.items
        self.write_u32(len(entries))
        for _, entry in entries:
            self.write_u32(entry.name.hash)
        for key, entry in entries:
            self.begin_sized_block()
            self.write_u32(key.value.hash)
            self.write_fields(entry.items)
            self.end_sized_block()
        return self.get_bytes()


def make_document(entries, version=3, linked=(), patch=False) -> Document:
    """
    Build a Document from (key, class name, fields) triples.

    Keys and class names may be strings (hashed) or Hash32.
    """
    def as_hash(name):
        return name if isinstance(name, Hash32) else Hash32.from_name(name)

    doc = Document()
    doc.sections['type'] = PrimitiveValue(Type.STRING, MAGIC_PTCH if patch else MAGIC_PROP)
    doc.sections['version'] = PrimitiveValue(Type.U32, version)
    doc.sections['linked'] = ListValue(
        Type.STRING, [PrimitiveValue(Type.STRING, path) for path in linked])
    doc.sections['entries'] = MapValue(Type.HASH, Type.EMBED, [
        (PrimitiveValue(Type.HASH, as_hash(key)), EmbedValue(as_hash(class_name), list(fields)))
        for key, class_name, fields in entries
    ])
    return doc


def write_document(doc: Document, string_field_names: bool = False) -> bytes:
    return BinaryWriter(string_field_names).write_document(doc)


def single_field_doc(type_byte: int, payload: bytes, name: int = 1,
                     entry_length_delta: int = 0) -> bytes:
    """
    Version 3 document with one entry holding one raw field.

    The field value starts at VALUE_OFFSET.
    """
    w = BinaryWriter(outer_delta=entry_length_delta)
    w.write_bytes(MAGIC_PROP)
    w.write_u32(3)
    w.write_u32(0)          # linked count
    w.write_u32(1)          # entry count
    w.write_u32(0xC1A55)    # class hash
    w.begin_sized_block()
    w.write_u32(0xE471)     # entry key
    w.write_u16(1)
    w.write_u32(name)
    w.write_u8(type_byte)
    w.write_bytes(payload)
    w.end_sized_block()
    return w.get_bytes()


def value_bytes(value, delta: int = 0) -> bytes:
    """Encode one value; delta corrupts its outermost declared length."""
    w = BinaryWriter(outer_delta=delta)
    w.write_value(value)
    return w.get_bytes()
