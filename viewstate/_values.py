"""Decoded value model.

The decoder produces a closed set of shapes.  Plain payloads map onto
Python builtins; everything with structure gets a frozen dataclass:

    Absent        None
    Boolean       bool
    Integer       int
    Text          str
    BinaryBlob    bytes
    Sequence      list (holes are None)
    SparseArray   SparseList (a list that also carries its type tag)
    Mapping       DecodedMap
    EnumValue, ColorIndex, RGBAColor, TimeStub, UnitStub, Pair, Triplet,
    Reference, FormattedText, TypedSequence   (dataclasses below)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Tuple, Union


@dataclass(frozen=True)
class EnumValue:
    """Enum type identity (usually Text or Reference) plus its ordinal."""

    type: Any
    ordinal: int


@dataclass(frozen=True)
class ColorIndex:
    """Raw known-color palette index.  No lookup is applied."""

    index: int


@dataclass(frozen=True)
class RGBAColor:
    r: int
    g: int
    b: int
    a: int


@dataclass(frozen=True)
class TimeStub:
    """Undecoded 8-byte DateTime payload.

    The tick encoding is not interpreted yet, so no timestamp is produced.
    """

    raw: bytes
    resolved: bool = field(default=False, init=False)


@dataclass(frozen=True)
class UnitStub:
    """Undecoded 12-byte Unit payload (value + unit type)."""

    raw: bytes
    resolved: bool = field(default=False, init=False)


@dataclass(frozen=True)
class Pair:
    first: Any
    second: Any


@dataclass(frozen=True)
class Triplet:
    first: Any
    second: Any
    third: Any


@dataclass(frozen=True)
class Reference:
    """Index into a string table held by the server, never resolved here."""

    index: int


@dataclass(frozen=True)
class FormattedText:
    pattern: Any
    args: str


@dataclass(frozen=True)
class TypedSequence:
    type_tag: Any
    elements: List[Any]


class DecodedMap(dict):
    """Mapping keyed by the display string of each decoded key.

    Entries whose keys render identically overwrite each other, last one
    wins.  The decoded key objects survive in `original_keys`, and every
    replaced (key, value) entry is appended to `overwritten`, so callers can
    tell a collision happened.
    """

    def __init__(self) -> None:
        super().__init__()
        self.original_keys: Dict[str, Any] = {}
        self.overwritten: List[Tuple[Any, Any]] = []

    def put(self, display_key: str, key: Any, value: Any) -> None:
        if display_key in self:
            self.overwritten.append((self.original_keys[display_key], self[display_key]))
        self[display_key] = value
        self.original_keys[display_key] = key


class SparseList(list):
    """List decoded from a sparse array; unset slots hold None.

    The array's type tag is kept in `type_tag` but not interpreted.
    """

    def __init__(self, type_tag: Any, length: int) -> None:
        super().__init__([None] * length)
        self.type_tag = type_tag


DecodedValue = Union[
    None,
    bool,
    int,
    str,
    bytes,
    EnumValue,
    ColorIndex,
    RGBAColor,
    TimeStub,
    UnitStub,
    Pair,
    Triplet,
    Reference,
    FormattedText,
    TypedSequence,
    List[Any],
    SparseList,
    DecodedMap,
]
