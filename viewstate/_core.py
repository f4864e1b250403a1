"""Viewstate core: varint reader, marker dispatch and the value readers.

Every reader takes ``(buf, off, depth)`` and returns ``(value, new_off)``.
A reader consumes a contiguous run of bytes starting at ``off`` and never
looks behind it, so ``new_off - off`` is exactly what that value occupies
on the wire.

The wire format is marker-byte driven: one byte selects the shape, the rest
is shape-specific.  Composite shapes recurse through _parse_one() for each
nested value.  Lengths and counts are varints, with one exception: the
mapping entry count is a single raw byte.
"""

from __future__ import annotations

from typing import Any, Callable, List, Optional, Tuple

from ._constants import (
    COLOR_WIDTH,
    MARKER_BINARY,
    MARKER_COLOR,
    MARKER_EMPTY_NULL,
    MARKER_EMPTY_STRING,
    MARKER_ENUM,
    MARKER_FALSE,
    MARKER_FORMATTED,
    MARKER_INT,
    MARKER_INT_ENUM,
    MARKER_LIST,
    MARKER_MAP,
    MARKER_NULL,
    MARKER_PAIR,
    MARKER_REFERENCE,
    MARKER_RGBA,
    MARKER_SPARSE_ARRAY,
    MARKER_STRING,
    MARKER_STRING_FORMATTED,
    MARKER_STRING_INDEXED,
    MARKER_STRING_LIST,
    MARKER_STRING_TYPE,
    MARKER_TIME,
    MARKER_TRIPLET,
    MARKER_TRUE,
    MARKER_TYPED_LIST,
    MARKER_UNIT,
    MARKER_ZERO,
    MAX_DEPTH,
    MAX_SPARSE_LENGTH,
    RGBA_WIDTH,
    TEXT_ENCODING,
    TEXT_ERRORS,
    TIME_WIDTH,
    UNIT_WIDTH,
    VARINT_MAX_BITS,
)
from ._errors import (
    ERR_INPUT_TOO_SHORT,
    ERR_INVALID_INDEX,
    ERR_LIMIT_DEPTH,
    ERR_LIMIT_SIZE,
    ERR_TRUNCATED,
    ERR_UNKNOWN_MARKER,
    ViewstateError,
)
from ._render import render
from ._values import (
    ColorIndex,
    DecodedMap,
    EnumValue,
    FormattedText,
    Pair,
    Reference,
    RGBAColor,
    SparseList,
    TimeStub,
    Triplet,
    TypedSequence,
    UnitStub,
)

Reader = Callable[[bytes, int, int], Tuple[Any, int]]


# ── Varint (7 bits per byte, little-endian groups) ───────────
# Not a general-purpose varint: the loop gives up once the bit offset
# reaches 32, so a 5th byte is consumed even when its continuation bit is
# set, and nothing after it is read.

def read_varint(buf: bytes, off: int) -> Tuple[int, int]:
    """Decode one varint at ``off``.  Returns (value, new_off)."""
    n = 0
    bits = 0
    while bits < VARINT_MAX_BITS:
        if off >= len(buf):
            raise ViewstateError(ERR_TRUNCATED, "truncated varint", off)
        b = buf[off]
        off += 1
        n |= (b & 0x7F) << bits
        if not b & 0x80:
            break
        bits += 7
    return n, off


def _take(buf: bytes, off: int, n: int, what: str) -> Tuple[bytes, int]:
    """Slice exactly ``n`` bytes at ``off`` or fail with ERR_TRUNCATED."""
    if off + n > len(buf):
        raise ViewstateError(
            ERR_TRUNCATED,
            "truncated {}: need {} bytes, {} left".format(what, n, len(buf) - off),
            off,
        )
    return buf[off:off + n], off + n


def _check_count(buf: bytes, off: int, count: int, what: str) -> None:
    # Every element occupies at least one byte, so a count above the bytes
    # left can never be satisfied.  Checked before allocating anything.
    if count > len(buf) - off:
        raise ViewstateError(
            ERR_TRUNCATED,
            "{} count {} exceeds {} remaining bytes".format(what, count, len(buf) - off),
            off,
        )


# ── Primitive readers ────────────────────────────────────────

def _constant(value: Any) -> Reader:
    """Reader for markers that carry no payload."""
    def read(buf: bytes, off: int, depth: int) -> Tuple[Any, int]:
        return value, off
    return read


def _read_integer(buf: bytes, off: int, depth: int) -> Tuple[int, int]:
    return read_varint(buf, off)


def _read_text(buf: bytes, off: int, depth: int) -> Tuple[str, int]:
    n, off = read_varint(buf, off)
    raw, off = _take(buf, off, n, "string")
    return raw.decode(TEXT_ENCODING, TEXT_ERRORS), off


def _read_binary(buf: bytes, off: int, depth: int) -> Tuple[bytes, int]:
    n, off = read_varint(buf, off)
    return _take(buf, off, n, "binary")


def _read_color(buf: bytes, off: int, depth: int) -> Tuple[ColorIndex, int]:
    raw, off = _take(buf, off, COLOR_WIDTH, "color")
    return ColorIndex(raw[0]), off


def _read_rgba(buf: bytes, off: int, depth: int) -> Tuple[RGBAColor, int]:
    raw, off = _take(buf, off, RGBA_WIDTH, "rgba")
    return RGBAColor(raw[0], raw[1], raw[2], raw[3]), off


def _read_time(buf: bytes, off: int, depth: int) -> Tuple[TimeStub, int]:
    raw, off = _take(buf, off, TIME_WIDTH, "time")
    return TimeStub(raw), off


def _read_unit(buf: bytes, off: int, depth: int) -> Tuple[UnitStub, int]:
    raw, off = _take(buf, off, UNIT_WIDTH, "unit")
    return UnitStub(raw), off


def _read_reference(buf: bytes, off: int, depth: int) -> Tuple[Reference, int]:
    index, off = read_varint(buf, off)
    return Reference(index), off


# ── Composite readers ────────────────────────────────────────
# Nested values go one level deeper; the depth check lives in _parse_one.

def _read_enum(buf: bytes, off: int, depth: int) -> Tuple[EnumValue, int]:
    enum_type, off = _parse_one(buf, off, depth + 1)
    ordinal, off = read_varint(buf, off)
    return EnumValue(enum_type, ordinal), off


def _read_pair(buf: bytes, off: int, depth: int) -> Tuple[Pair, int]:
    first, off = _parse_one(buf, off, depth + 1)
    second, off = _parse_one(buf, off, depth + 1)
    return Pair(first, second), off


def _read_triplet(buf: bytes, off: int, depth: int) -> Tuple[Triplet, int]:
    first, off = _parse_one(buf, off, depth + 1)
    second, off = _parse_one(buf, off, depth + 1)
    third, off = _parse_one(buf, off, depth + 1)
    return Triplet(first, second, third), off


def _read_text_list(buf: bytes, off: int, depth: int) -> Tuple[List[str], int]:
    count, off = read_varint(buf, off)
    _check_count(buf, off, count, "string list")
    items: List[str] = []
    for _ in range(count):
        s, off = _read_text(buf, off, depth + 1)
        items.append(s)
    return items, off


def _read_items(buf: bytes, off: int, depth: int, what: str) -> Tuple[List[Any], int]:
    count, off = read_varint(buf, off)
    _check_count(buf, off, count, what)
    items: List[Any] = []
    for _ in range(count):
        item, off = _parse_one(buf, off, depth + 1)
        items.append(item)
    return items, off


def _read_list(buf: bytes, off: int, depth: int) -> Tuple[List[Any], int]:
    return _read_items(buf, off, depth, "list")


def _read_typed_list(buf: bytes, off: int, depth: int) -> Tuple[TypedSequence, int]:
    type_tag, off = _parse_one(buf, off, depth + 1)
    items, off = _read_items(buf, off, depth, "typed list")
    return TypedSequence(type_tag, items), off


def _read_sparse_array(buf: bytes, off: int, depth: int) -> Tuple[SparseList, int]:
    type_tag, off = _parse_one(buf, off, depth + 1)
    length, off = read_varint(buf, off)
    if length > MAX_SPARSE_LENGTH:
        raise ViewstateError(
            ERR_LIMIT_SIZE,
            "sparse array length {} exceeds {}".format(length, MAX_SPARSE_LENGTH),
            off,
        )
    count, off = read_varint(buf, off)
    _check_count(buf, off, count, "sparse array")

    items = SparseList(type_tag, length)
    for _ in range(count):
        index, off = read_varint(buf, off)
        if index >= length:
            raise ViewstateError(
                ERR_INVALID_INDEX,
                "sparse array index {} outside [0, {})".format(index, length),
                off,
            )
        item, off = _parse_one(buf, off, depth + 1)
        items[index] = item
    return items, off


def _read_map(buf: bytes, off: int, depth: int) -> Tuple[DecodedMap, int]:
    # Raw byte count, not a varint.  _parse_one already guaranteed it exists.
    count = buf[off]
    off += 1
    _check_count(buf, off, count, "map")

    m = DecodedMap()
    for _ in range(count):
        key, off = _parse_one(buf, off, depth + 1)
        val, off = _parse_one(buf, off, depth + 1)
        m.put(render(key), key, val)
    return m, off


def _read_formatted(buf: bytes, off: int, depth: int) -> Tuple[FormattedText, int]:
    pattern, off = _parse_one(buf, off, depth + 1)
    # The argument is a bare length-prefixed string with no marker byte.
    args, off = _read_text(buf, off, depth + 1)
    return FormattedText(pattern, args), off


# ── Dispatch table ───────────────────────────────────────────
# One slot per possible marker byte.  Empty slots are unknown markers.

_READERS = {
    MARKER_NULL: _constant(None),
    MARKER_EMPTY_NULL: _constant(None),
    MARKER_EMPTY_STRING: _constant(""),
    MARKER_ZERO: _constant(0),
    MARKER_TRUE: _constant(True),
    MARKER_FALSE: _constant(False),
    MARKER_INT: _read_integer,
    MARKER_INT_ENUM: _read_integer,
    MARKER_STRING: _read_text,
    MARKER_STRING_FORMATTED: _read_text,
    MARKER_STRING_INDEXED: _read_text,
    MARKER_STRING_TYPE: _read_text,
    MARKER_ENUM: _read_enum,
    MARKER_COLOR: _read_color,
    MARKER_PAIR: _read_pair,
    MARKER_TRIPLET: _read_triplet,
    MARKER_TIME: _read_time,
    MARKER_UNIT: _read_unit,
    MARKER_RGBA: _read_rgba,
    MARKER_STRING_LIST: _read_text_list,
    MARKER_LIST: _read_list,
    MARKER_REFERENCE: _read_reference,
    MARKER_FORMATTED: _read_formatted,
    MARKER_SPARSE_ARRAY: _read_sparse_array,
    MARKER_MAP: _read_map,
    MARKER_TYPED_LIST: _read_typed_list,
    MARKER_BINARY: _read_binary,
}

_DISPATCH: List[Optional[Reader]] = [_READERS.get(m) for m in range(256)]


def _parse_one(buf: bytes, off: int, depth: int) -> Tuple[Any, int]:
    """Decode one marker-prefixed value at ``off``."""
    # A value needs its marker plus at least one more byte, even for
    # payload-free markers; a lone trailing marker is rejected.
    if len(buf) - off < 2:
        raise ViewstateError(ERR_INPUT_TOO_SHORT, "input too short", off)
    if depth > MAX_DEPTH:
        raise ViewstateError(ERR_LIMIT_DEPTH, "nesting exceeds MAX_DEPTH", off)

    marker = buf[off]
    reader = _DISPATCH[marker]
    if reader is None:
        raise ViewstateError(ERR_UNKNOWN_MARKER, "unknown marker 0x{:02x}".format(marker), off)
    return reader(buf, off + 1, depth)


# ── Public helpers ────────────────────────────────────────────

def parse(body: bytes) -> Tuple[Any, bytes]:
    """Decode one value from the start of ``body``.

    Returns (value, remainder), where remainder is the undecoded suffix.
    ``len(body) - len(remainder)`` is the number of bytes the value used.
    """
    body = bytes(body)
    val, end = _parse_one(body, 0, depth=0)
    return val, body[end:]
