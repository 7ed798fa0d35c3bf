"""
Type tags for the property bin format.

Every value in the stream is preceded (directly or through its container
header) by a one-byte type tag. Tags with the high bit clear are primitive
types; tags with the high bit set are complex types.

| Tag  | Name    | Payload                         |
|------|---------|---------------------------------|
| 0x00 | NONE    | never decodable                 |
| 0x01 | BOOL    | 1 byte                          |
| 0x02 | I8      | 1 byte signed                   |
| 0x03 | U8      | 1 byte unsigned                 |
| 0x04 | I16     | 2 bytes signed                  |
| 0x05 | U16     | 2 bytes unsigned                |
| 0x06 | I32     | 4 bytes signed                  |
| 0x07 | U32     | 4 bytes unsigned                |
| 0x08 | I64     | 8 bytes signed                  |
| 0x09 | U64     | 8 bytes unsigned                |
| 0x0A | F32     | 4 bytes IEEE 754                |
| 0x0B | VEC2    | 2 x F32                         |
| 0x0C | VEC3    | 3 x F32                         |
| 0x0D | VEC4    | 4 x F32                         |
| 0x0E | MTX44   | 16 x F32                        |
| 0x0F | RGBA    | 4 x U8                          |
| 0x10 | STRING  | u16 length + raw bytes          |
| 0x11 | HASH    | u32 FNV-1a hash                 |
| 0x12 | FILE    | u64 xxhash64 path hash          |
| 0x80 | LIST    | container                       |
| 0x81 | LIST2   | container (alternate tag)       |
| 0x82 | POINTER | nullable named struct           |
| 0x83 | EMBED   | inline named struct             |
| 0x84 | LINK    | u32 hash of another entry       |
| 0x85 | OPTION  | container (zero or one item)    |
| 0x86 | MAP     | container (key/value pairs)     |
| 0x87 | FLAG    | 1 byte                          |
"""

import struct
from enum import IntEnum


class Type(IntEnum):
    """Wire type tags"""
    NONE = 0x00
    BOOL = 0x01
    I8 = 0x02
    U8 = 0x03
    I16 = 0x04
    U16 = 0x05
    I32 = 0x06
    U32 = 0x07
    I64 = 0x08
    U64 = 0x09
    F32 = 0x0A
    VEC2 = 0x0B
    VEC3 = 0x0C
    VEC4 = 0x0D
    MTX44 = 0x0E
    RGBA = 0x0F
    STRING = 0x10
    HASH = 0x11
    FILE = 0x12
    LIST = 0x80
    LIST2 = 0x81
    POINTER = 0x82
    EMBED = 0x83
    LINK = 0x84
    OPTION = 0x85
    MAP = 0x86
    FLAG = 0x87


COMPLEX_FLAG = 0x80

MAX_PRIMITIVE = Type.FILE
MAX_COMPLEX = Type.FLAG

# Types that may not be declared as the element type of another container
CONTAINER_TYPES = frozenset({Type.LIST, Type.LIST2, Type.OPTION, Type.MAP})

# Fixed-width payloads, read straight off the cursor.
# Single-field formats decode to a scalar, multi-field ones to a tuple.
PRIMITIVE_FORMATS = {
    Type.BOOL: struct.Struct('<?'),
    Type.I8: struct.Struct('<b'),
    Type.U8: struct.Struct('<B'),
    Type.I16: struct.Struct('<h'),
    Type.U16: struct.Struct('<H'),
    Type.I32: struct.Struct('<i'),
    Type.U32: struct.Struct('<I'),
    Type.I64: struct.Struct('<q'),
    Type.U64: struct.Struct('<Q'),
    Type.F32: struct.Struct('<f'),
    Type.VEC2: struct.Struct('<2f'),
    Type.VEC3: struct.Struct('<3f'),
    Type.VEC4: struct.Struct('<4f'),
    Type.MTX44: struct.Struct('<16f'),
    Type.RGBA: struct.Struct('<4B'),
    Type.FLAG: struct.Struct('<?'),
}


def is_primitive(type_: int) -> bool:
    """True for tags in the primitive range (high bit clear)."""
    return not (type_ & COMPLEX_FLAG)


def is_container(type_: int) -> bool:
    """True for OPTION, LIST, LIST2 and MAP."""
    return type_ in CONTAINER_TYPES


def is_valid_tag(raw: int) -> bool:
    """Check a raw tag byte against the primitive/complex ranges."""
    if is_primitive(raw):
        return raw <= MAX_PRIMITIVE
    return raw <= MAX_COMPLEX


def type_name(type_: int) -> str:
    """Display name for a tag, falling back to hex for unknown bytes."""
    try:
        return Type(type_).name
    except ValueError:
        return f"0x{type_:02X}"
