"""
Property Bin Reader
===================

Decodes a binary property bin (PROP / PTCH) into a Document value tree.

File Structure:
--------------
| Field        | Size          | Notes                                   |
|--------------|---------------|-----------------------------------------|
| "PTCH"       | 4 bytes       | optional patch prologue                 |
| reserved     | 8 bytes       | only after "PTCH", ignored              |
| "PROP"       | 4 bytes       | always present                          |
| version      | u32           |                                         |
| linkedCount  | u32           | version >= 2 only                       |
| linked       | linkedCount x | u16 length + raw bytes                  |
| entryCount   | u32           |                                         |
| entryHashes  | entryCount x  | u32 class hash per entry                |
| entries      | entryCount x  | entry bodies, see below                 |

Entry body: u32 length (covers everything after it), u32 key hash,
u16 field count, then per field: name, u8 type tag, value.

Container layouts:
-----------------
| Kind    | Header                                       | Items              |
|---------|----------------------------------------------|--------------------|
| OPTION  | type, u8 count (0 or 1)                      | value              |
| LIST    | type, u32 length, u32 count                  | value              |
| LIST2   | same as LIST                                 | value              |
| MAP     | key type, value type, u32 length, u32 count  | key, value         |
| EMBED   | u32 name, u32 length, u16 count              | name, type, value  |
| POINTER | u32 name (0 = null, nothing follows), then   | name, type, value  |
|         | u32 length, u16 count                        |                    |

Every `length` is checked against the bytes actually consumed, measured from
the end of the length field. The whole buffer must be consumed.

Failures never raise inside the reader. Each step returns False and records
what it was attempting (and the offset it started at) in a
DiagnosticCollector; the public helpers turn the trace into a DecodeError.
"""

import logging
from typing import Callable, List, Optional, Tuple, TypeVar

from .cursor import Buffer, Cursor
from .diagnostics import DecodeError, DiagnosticCollector
from .hashes import Hash32
from .types import PRIMITIVE_FORMATS, Type, is_container, is_primitive
from .values import (
    MAGIC_PROP,
    MAGIC_PTCH,
    Document,
    EmbedValue,
    FieldName,
    ListValue,
    MapValue,
    OptionValue,
    PointerValue,
    PrimitiveValue,
    Value,
    value_from_type,
)

logger = logging.getLogger(__name__)

T = TypeVar('T')

# Version that introduced the linked file list
LINKED_FILES_VERSION = 2


class BinReader:
    """
    Single-use decoder for one buffer.

    Usage:
        reader = BinReader(data)
        if reader.process():
            doc = reader.document
        else:
            print(reader.diagnostics.render())
    """

    def __init__(self, data: Buffer, string_field_names: bool = False):
        """
        Args:
            data: Complete bin file contents
            string_field_names: Read embed/pointer/entry field names as
                u16-prefixed strings instead of u32 hashes
        """
        self.cursor = Cursor(data)
        self.diagnostics = DiagnosticCollector()
        self.document = Document()
        self.string_field_names = string_field_names

        # Type tag -> decoder that fills an empty value of that kind
        self._decoders = {
            Type.NONE: self._read_none,
            Type.STRING: self._read_string,
            Type.HASH: self._read_hash32,
            Type.LINK: self._read_hash32,
            Type.FILE: self._read_hash64,
            Type.OPTION: self._read_option,
            Type.LIST: self._read_list,
            Type.LIST2: self._read_list,
            Type.MAP: self._read_map,
            Type.EMBED: self._read_embed,
            Type.POINTER: self._read_pointer,
        }
        for fixed_type in PRIMITIVE_FORMATS:
            self._decoders[fixed_type] = self._read_fixed

    def process(self) -> bool:
        """
        Decode the whole buffer into self.document.

        Returns:
            True on success; on failure self.diagnostics holds the trace
        """
        self.cursor = Cursor(self.cursor.data)
        self.document.sections.clear()
        self.diagnostics.clear()
        logger.debug("Decoding %d bytes", self.cursor.end)
        start = self.cursor.position
        try:
            ok = self._read_sections()
        except RecursionError:
            self._fail("nesting depth within interpreter limit", self.cursor.position)
            ok = False
        if not ok:
            self._fail("read_sections()", start)
            self.document.sections.clear()
            logger.debug("Decode failed after %d diagnostics", len(self.diagnostics))
            return False
        logger.debug("Decoded %s v%d: %d linked, %d entries",
                     self.document.type.decode('ascii'), self.document.version,
                     len(self.document.linked), len(self.document.entries.items))
        return True

    # -------------------------------------------------------------------------
    # Check helpers
    # -------------------------------------------------------------------------

    def _fail(self, condition: str, offset: int) -> bool:
        return self.diagnostics.fail(condition, offset)

    def _read(self, read: Callable[[], Optional[T]], condition: str) -> Optional[T]:
        """Run one cursor read; on failure record it at the pre-read offset."""
        start = self.cursor.position
        value = read()
        if value is None:
            self._fail(condition, start)
        return value

    def _read_type(self, what: str) -> Optional[Type]:
        """Read a type tag, telling truncation apart from an invalid byte."""
        start = self.cursor.position
        raw = self.cursor.peek_u8()
        type_ = self.cursor.read_type()
        if type_ is not None:
            return type_
        if raw is None:
            self._fail(f"read({what})", start)
        else:
            self._fail(f"{what} 0x{raw:02X} is a valid type tag", start)
        return None

    def _read_element_type(self, kind: str) -> Optional[Type]:
        """Read the declared value type of a container; nesting is rejected."""
        start = self.cursor.position
        type_ = self._read_type(f"{kind} value type")
        if type_ is None:
            return None
        if is_container(type_):
            self._fail(f"{kind} value type {type_.name} is not a container", start)
            return None
        return type_

    def _check_length(self, kind: str, start: int, size: int) -> bool:
        """Declared length must equal the bytes consumed since start."""
        consumed = self.cursor.position - start
        if consumed != size:
            return self._fail(
                f"{kind} length: position == {start} + {size} (read {consumed})",
                self.cursor.position)
        return True

    # -------------------------------------------------------------------------
    # Document assembly
    # -------------------------------------------------------------------------

    def _read_sections(self) -> bool:
        sections = self.document.sections

        magic_start = self.cursor.position
        magic = self._read(lambda: self.cursor.read_bytes(4), "read(magic)")
        if magic is None:
            return False
        if magic == MAGIC_PTCH:
            if self._read(self.cursor.read_u64, "read(patch header)") is None:
                return False
            magic_start = self.cursor.position
            magic = self._read(lambda: self.cursor.read_bytes(4), "read(magic)")
            if magic is None:
                return False
            sections['type'] = PrimitiveValue(Type.STRING, MAGIC_PTCH)
        else:
            sections['type'] = PrimitiveValue(Type.STRING, MAGIC_PROP)
        if magic != MAGIC_PROP:
            return self._fail(f"magic == {MAGIC_PROP!r} (got {magic!r})", magic_start)

        version = self._read(self.cursor.read_u32, "read(version)")
        if version is None:
            return False
        sections['version'] = PrimitiveValue(Type.U32, version)

        start = self.cursor.position
        if not self._read_linked(version >= LINKED_FILES_VERSION):
            return self._fail("read_linked()", start)

        start = self.cursor.position
        if not self._read_entries():
            return self._fail("read_entries()", start)

        if not self.cursor.at_end():
            return self._fail(
                f"cursor at end ({self.cursor.remaining()} trailing bytes)",
                self.cursor.position)
        return True

    def _read_linked(self, has_links: bool) -> bool:
        linked = ListValue(Type.STRING)
        if has_links:
            count = self._read(self.cursor.read_u32, "read(linked count)")
            if count is None:
                return False
            for i in range(count):
                path = self._read(self.cursor.read_string, f"read(linked[{i}])")
                if path is None:
                    return False
                linked.items.append(PrimitiveValue(Type.STRING, path))
        self.document.sections['linked'] = linked
        return True

    def _read_entries(self) -> bool:
        count = self._read(self.cursor.read_u32, "read(entry count)")
        if count is None:
            return False
        class_hashes = self._read(lambda: self.cursor.read_array('I', count),
                                  f"read(entry hashes[{count}])")
        if class_hashes is None:
            return False

        entries = MapValue(Type.HASH, Type.EMBED)
        for i, class_hash in enumerate(class_hashes):
            start = self.cursor.position
            entry = self._read_entry(class_hash)
            if entry is None:
                return self._fail(f"read_entry(#{i}, class 0x{class_hash:08X})", start)
            entries.items.append(entry)
        self.document.sections['entries'] = entries
        logger.debug("Read %d entries", count)
        return True

    def _read_entry(self, class_hash: int) -> Optional[Tuple[PrimitiveValue, EmbedValue]]:
        size = self._read(self.cursor.read_u32, "read(entry length)")
        if size is None:
            return None
        start = self.cursor.position
        key = self._read(self.cursor.read_hash32, "read(entry key)")
        if key is None:
            return None
        count = self._read(self.cursor.read_u16, "read(entry field count)")
        if count is None:
            return None

        entry = EmbedValue(Hash32(class_hash))
        if not self._read_fields(entry.items, count):
            return None
        if not self._check_length("entry", start, size):
            return None
        return PrimitiveValue(Type.HASH, key), entry

    # -------------------------------------------------------------------------
    # Values
    # -------------------------------------------------------------------------

    def _read_value_of(self, type_: Type) -> Optional[Value]:
        """Build an empty value for type_ and hand it to its decoder."""
        value = value_from_type(type_)
        if not self._decoders[type_](value):
            return None
        return value

    def _read_item(self, type_: Type, what: str, items: list) -> bool:
        start = self.cursor.position
        item = self._read_value_of(type_)
        if item is None:
            return self._fail(f"read_value_of({type_.name}) for {what}", start)
        items.append(item)
        return True

    def _read_field_name(self) -> Optional[FieldName]:
        if self.string_field_names:
            return self.cursor.read_string()
        return self.cursor.read_hash32()

    def _read_fields(self, items: List[Tuple[FieldName, Value]], count: int) -> bool:
        """Read count (name, type, value) triples of an entry, embed or pointer."""
        for i in range(count):
            name = self._read(self._read_field_name, f"read(field #{i} name)")
            if name is None:
                return False
            type_ = self._read_type(f"field #{i} type")
            if type_ is None:
                return False
            start = self.cursor.position
            value = self._read_value_of(type_)
            if value is None:
                return self._fail(f"read_value_of({type_.name}) for field {name!s}", start)
            items.append((name, value))
        return True

    def _read_none(self, value: PrimitiveValue) -> bool:
        return self._fail("value type is not NONE", self.cursor.position)

    def _read_fixed(self, value: PrimitiveValue) -> bool:
        fmt = PRIMITIVE_FORMATS[value.type]
        result = self._read(lambda: self.cursor.read_struct(fmt), f"read({value.type.name})")
        if result is None:
            return False
        value.value = result[0] if len(result) == 1 else result
        return True

    def _read_string(self, value: PrimitiveValue) -> bool:
        value.value = self._read(self.cursor.read_string, "read(STRING)")
        return value.value is not None

    def _read_hash32(self, value: PrimitiveValue) -> bool:
        value.value = self._read(self.cursor.read_hash32, f"read({value.type.name})")
        return value.value is not None

    def _read_hash64(self, value: PrimitiveValue) -> bool:
        value.value = self._read(self.cursor.read_hash64, "read(FILE)")
        return value.value is not None

    def _read_option(self, value: OptionValue) -> bool:
        value_type = self._read_element_type("option")
        if value_type is None:
            return False
        value.value_type = value_type
        start = self.cursor.position
        count = self._read(self.cursor.read_u8, "read(option count)")
        if count is None:
            return False
        if count > 1:
            return self._fail(f"option count {count} <= 1", start)
        if count and not self._read_item(value_type, "option item", value.items):
            return False
        return True

    def _read_list(self, value: ListValue) -> bool:
        # LIST and LIST2 share one layout
        kind = value.type.name.lower()
        value_type = self._read_element_type(kind)
        if value_type is None:
            return False
        value.value_type = value_type
        size = self._read(self.cursor.read_u32, f"read({kind} length)")
        if size is None:
            return False
        start = self.cursor.position
        count = self._read(self.cursor.read_u32, f"read({kind} count)")
        if count is None:
            return False
        for i in range(count):
            if not self._read_item(value_type, f"{kind} item #{i}", value.items):
                return False
        return self._check_length(kind, start, size)

    def _read_map(self, value: MapValue) -> bool:
        start = self.cursor.position
        key_type = self._read_type("map key type")
        if key_type is None:
            return False
        if not is_primitive(key_type):
            return self._fail(f"map key type {key_type.name} is primitive", start)
        value_type = self._read_element_type("map")
        if value_type is None:
            return False
        value.key_type = key_type
        value.value_type = value_type
        size = self._read(self.cursor.read_u32, "read(map length)")
        if size is None:
            return False
        start = self.cursor.position
        count = self._read(self.cursor.read_u32, "read(map count)")
        if count is None:
            return False
        for i in range(count):
            pair = []
            if not self._read_item(key_type, f"map key #{i}", pair):
                return False
            if not self._read_item(value_type, f"map value #{i}", pair):
                return False
            value.items.append((pair[0], pair[1]))
        return self._check_length("map", start, size)

    def _read_struct_body(self, value, kind: str) -> bool:
        """Length, count and fields shared by EMBED and non-null POINTER."""
        size = self._read(self.cursor.read_u32, f"read({kind} length)")
        if size is None:
            return False
        start = self.cursor.position
        count = self._read(self.cursor.read_u16, f"read({kind} field count)")
        if count is None:
            return False
        if not self._read_fields(value.items, count):
            return False
        return self._check_length(kind, start, size)

    def _read_embed(self, value: EmbedValue) -> bool:
        name = self._read(self.cursor.read_hash32, "read(embed name)")
        if name is None:
            return False
        value.name = name
        return self._read_struct_body(value, "embed")

    def _read_pointer(self, value: PointerValue) -> bool:
        name = self._read(self.cursor.read_hash32, "read(pointer name)")
        if name is None:
            return False
        value.name = name
        if name.is_null():
            return True
        return self._read_struct_body(value, "pointer")


# =============================================================================
# PUBLIC API FUNCTIONS
# =============================================================================

def read_binary(data: Buffer, **options) -> Document:
    """
    Decode a complete bin buffer.

    Args:
        data: File contents
        **options: Passed to BinReader (string_field_names)

    Returns:
        Decoded Document

    Raises:
        DecodeError: If the buffer is not a valid bin document
    """
    reader = BinReader(data, **options)
    if not reader.process():
        raise DecodeError(reader.diagnostics.outermost_first())
    return reader.document


def read_file(path: str, **options) -> Document:
    """Read and decode a bin file from disk."""
    with open(path, 'rb') as f:
        data = f.read()
    return read_binary(data, **options)
