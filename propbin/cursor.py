"""
Bounds-checked sequential reader over an immutable byte buffer.

Every read either consumes exactly the bytes it needs or, when they are not
all inside the buffer, returns None and leaves the position untouched.
Reads never raise on short data; callers decide how to report the failure.
"""

import struct
from typing import Optional, Tuple, Union

from .hashes import Hash32, Hash64
from .types import Type, is_valid_tag

_U8 = struct.Struct('<B')
_U16 = struct.Struct('<H')
_U32 = struct.Struct('<I')
_U64 = struct.Struct('<Q')

Buffer = Union[bytes, bytearray, memoryview]


class Cursor:
    """
    Sequential little-endian reader.

    One cursor is created per decode and shared by reference with every
    decoder that takes part in it.
    """

    def __init__(self, data: Buffer):
        self.data = data
        self.pos = 0
        self.end = len(data)

    @property
    def position(self) -> int:
        """Number of bytes consumed so far."""
        return self.pos

    def remaining(self) -> int:
        """Return number of bytes remaining from current position to end."""
        return self.end - self.pos

    def at_end(self) -> bool:
        return self.pos == self.end

    def _take(self, size: int) -> Optional[int]:
        """Reserve size bytes; returns their start offset or None."""
        if size < 0 or self.pos + size > self.end:
            return None
        start = self.pos
        self.pos += size
        return start

    def peek_u8(self) -> Optional[int]:
        """Return the next byte without consuming it."""
        if self.pos >= self.end:
            return None
        return self.data[self.pos]

    def read_struct(self, fmt: struct.Struct) -> Optional[tuple]:
        """Unpack one precompiled struct, or None if it does not fit."""
        start = self._take(fmt.size)
        if start is None:
            return None
        return fmt.unpack_from(self.data, start)

    def read_u8(self) -> Optional[int]:
        result = self.read_struct(_U8)
        return None if result is None else result[0]

    def read_u16(self) -> Optional[int]:
        result = self.read_struct(_U16)
        return None if result is None else result[0]

    def read_u32(self) -> Optional[int]:
        result = self.read_struct(_U32)
        return None if result is None else result[0]

    def read_u64(self) -> Optional[int]:
        result = self.read_struct(_U64)
        return None if result is None else result[0]

    def read_array(self, code: str, count: int) -> Optional[Tuple[int, ...]]:
        """Read count little-endian elements of one struct code ('I', 'f', ...)."""
        start = self._take(count * struct.calcsize(f'<{code}'))
        if start is None:
            return None
        return struct.unpack_from(f'<{count}{code}', self.data, start)

    def read_bytes(self, n: int) -> Optional[bytes]:
        """Read n raw bytes."""
        start = self._take(n)
        if start is None:
            return None
        return bytes(self.data[start:start + n])

    def read_string(self) -> Optional[bytes]:
        """
        Read a u16 length-prefixed byte run.

        The bytes are returned verbatim; no text decoding is attempted.
        Nothing is consumed if either the length or the body is short.
        """
        start = self.pos
        size = self.read_u16()
        if size is None:
            return None
        value = self.read_bytes(size)
        if value is None:
            self.pos = start
        return value

    def read_type(self) -> Optional[Type]:
        """Read a one-byte type tag, rejecting bytes outside the valid ranges."""
        start = self.pos
        raw = self.read_u8()
        if raw is None:
            return None
        if not is_valid_tag(raw):
            self.pos = start
            return None
        return Type(raw)

    def read_hash32(self) -> Optional[Hash32]:
        value = self.read_u32()
        return None if value is None else Hash32(value)

    def read_hash64(self) -> Optional[Hash64]:
        value = self.read_u64()
        return None if value is None else Hash64(value)
