"""
Value tree produced by the bin reader.

Every value kind exposes its wire `type`. Containers keep their declared
element types alongside the items so an empty container still round-trips.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple, Union

from .hashes import Hash32, as_hash32
from .types import Type

# Field names are Hash32 by default, raw bytes when read as strings
FieldName = Union[Hash32, bytes]


def _find_field(items, name):
    # A text name matches either a raw string field name or its hash
    if isinstance(name, str):
        keys = (name.encode('utf-8'), as_hash32(name))
    elif isinstance(name, bytes):
        keys = (name,)
    else:
        keys = (as_hash32(name),)
    for field_name, value in items:
        if field_name in keys:
            return value
    return None


@dataclass
class PrimitiveValue:
    """Any fixed-width or string value, including LINK and FLAG"""
    type: Type
    value: Any = None


@dataclass
class OptionValue:
    """Zero or one value of value_type"""
    value_type: Type = Type.NONE
    items: List['Value'] = field(default_factory=list)

    @property
    def type(self) -> Type:
        return Type.OPTION


@dataclass
class ListValue:
    """Ordered values of value_type"""
    value_type: Type = Type.NONE
    items: List['Value'] = field(default_factory=list)

    @property
    def type(self) -> Type:
        return Type.LIST


@dataclass
class List2Value:
    """Same layout as ListValue, kept apart because the tag differs"""
    value_type: Type = Type.NONE
    items: List['Value'] = field(default_factory=list)

    @property
    def type(self) -> Type:
        return Type.LIST2


@dataclass
class MapValue:
    """Ordered (key, value) pairs; duplicate keys are kept as read"""
    key_type: Type = Type.NONE
    value_type: Type = Type.NONE
    items: List[Tuple['Value', 'Value']] = field(default_factory=list)

    @property
    def type(self) -> Type:
        return Type.MAP


@dataclass
class EmbedValue:
    """Inline struct: class name hash + ordered (field name, value) pairs"""
    name: Hash32 = field(default_factory=Hash32)
    items: List[Tuple[FieldName, 'Value']] = field(default_factory=list)

    @property
    def type(self) -> Type:
        return Type.EMBED

    def get(self, name: Union[FieldName, int, str]) -> Optional['Value']:
        """Return the first field with this name, or None."""
        return _find_field(self.items, name)


@dataclass
class PointerValue:
    """Like EmbedValue, but a zero name means null and carries no items"""
    name: Hash32 = field(default_factory=Hash32)
    items: List[Tuple[FieldName, 'Value']] = field(default_factory=list)

    @property
    def type(self) -> Type:
        return Type.POINTER

    def is_null(self) -> bool:
        return self.name.hash == 0

    def get(self, name: Union[FieldName, int, str]) -> Optional['Value']:
        return _find_field(self.items, name)


Value = Union[PrimitiveValue, OptionValue, ListValue, List2Value,
              MapValue, EmbedValue, PointerValue]

_COMPLEX_FACTORIES = {
    Type.OPTION: OptionValue,
    Type.LIST: ListValue,
    Type.LIST2: List2Value,
    Type.MAP: MapValue,
    Type.EMBED: EmbedValue,
    Type.POINTER: PointerValue,
}


def value_from_type(type_: Type) -> Value:
    """
    Construct an empty value of the kind named by a type tag.

    Primitive kinds (and the non-container LINK/FLAG tags) share
    PrimitiveValue; each complex kind gets its own empty container.
    """
    factory = _COMPLEX_FACTORIES.get(type_)
    if factory is not None:
        return factory()
    return PrimitiveValue(type_)


# =============================================================================
# Document
# =============================================================================

MAGIC_PROP = b'PROP'
MAGIC_PTCH = b'PTCH'


@dataclass
class Document:
    """
    Top-level bin container.

    A fully read document holds exactly four sections, in order:
    type, version, linked, entries.
    """
    sections: Dict[str, Value] = field(default_factory=dict)

    @property
    def type(self) -> bytes:
        return self.sections['type'].value

    @property
    def version(self) -> int:
        return self.sections['version'].value

    @property
    def linked(self) -> List[bytes]:
        return [item.value for item in self.sections['linked'].items]

    @property
    def entries(self) -> MapValue:
        return self.sections['entries']

    @property
    def is_patch(self) -> bool:
        return self.type == MAGIC_PTCH

    def get_entry(self, key: Union[Hash32, int, str]) -> Optional[EmbedValue]:
        """Look up an entry by its key hash (wrapper, raw int or path name)."""
        wanted = as_hash32(key)
        for entry_key, entry in self.entries.items:
            if entry_key.value == wanted:
                return entry
        return None
