"""
Hash wrappers used by the property bin format.

Entry keys, class names, field names and links are 32-bit FNV-1a hashes of
lower-cased names. File references are 64-bit xxhash64 path hashes. Both are
wrapped so they never compare equal to plain integer data.
"""

from dataclasses import dataclass
from typing import Union

FNV1A_OFFSET = 0x811C9DC5
FNV1A_PRIME = 0x01000193


def fnv1a(name: Union[str, bytes]) -> int:
    """
    Lower-cased 32-bit FNV-1a, as used for names in bin files.

    Args:
        name: Name as text or raw bytes

    Returns:
        32-bit hash value
    """
    if isinstance(name, str):
        name = name.encode('utf-8')
    h = FNV1A_OFFSET
    for byte in name.lower():
        h ^= byte
        h = (h * FNV1A_PRIME) & 0xFFFFFFFF
    return h


@dataclass(frozen=True)
class Hash32:
    """32-bit name hash (HASH and LINK values, entry/class/field names)"""
    hash: int = 0

    @classmethod
    def from_name(cls, name: Union[str, bytes]) -> 'Hash32':
        return cls(fnv1a(name))

    def is_null(self) -> bool:
        return self.hash == 0

    def __str__(self):
        return f"0x{self.hash:08X}"


@dataclass(frozen=True)
class Hash64:
    """64-bit path hash (FILE values)"""
    hash: int = 0

    def __str__(self):
        return f"0x{self.hash:016X}"


def as_hash32(key: Union['Hash32', int, str, bytes]) -> Hash32:
    """Coerce a lookup key (wrapper, raw int or name) into a Hash32."""
    if isinstance(key, Hash32):
        return key
    if isinstance(key, int):
        return Hash32(key)
    return Hash32.from_name(key)
