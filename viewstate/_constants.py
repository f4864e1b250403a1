"""Viewstate format constants: preamble, marker bytes, signature lengths, limits.

Marker values follow the ObjectStateFormatter wire format used by
ASP.NET ``__VIEWSTATE`` fields.  Several markers are aliases that decode to
the same shape (e.g. four different string markers).
"""

from __future__ import annotations

# 2-byte preamble in front of every serialized body.
PREAMBLE = b"\xff\x01"

# ── Marker bytes ─────────────────────────────────────────────
# Constant markers carry no payload beyond the marker byte itself.
MARKER_NULL: int = 0x01
MARKER_EMPTY_NULL: int = 0x64
MARKER_EMPTY_STRING: int = 0x65
MARKER_ZERO: int = 0x66
MARKER_TRUE: int = 0x67
MARKER_FALSE: int = 0x68

MARKER_INT: int = 0x02
MARKER_INT_ENUM: int = 0x2B

MARKER_STRING: int = 0x05
MARKER_STRING_FORMATTED: int = 0x1E
MARKER_STRING_TYPE: int = 0x29
MARKER_STRING_INDEXED: int = 0x2A

MARKER_TIME: int = 0x06
MARKER_RGBA: int = 0x09
MARKER_COLOR: int = 0x0A
MARKER_ENUM: int = 0x0B
MARKER_PAIR: int = 0x0F
MARKER_TRIPLET: int = 0x10
MARKER_TYPED_LIST: int = 0x14
MARKER_STRING_LIST: int = 0x15
MARKER_LIST: int = 0x16
MARKER_MAP: int = 0x18
MARKER_UNIT: int = 0x1B
MARKER_REFERENCE: int = 0x1F
MARKER_FORMATTED: int = 0x28
MARKER_BINARY: int = 0x32
MARKER_SPARSE_ARRAY: int = 0x3C

# ── Fixed-width payloads ─────────────────────────────────────
# Time and Unit are not decoded; their raw bytes are kept as-is.
TIME_WIDTH: int = 8
UNIT_WIDTH: int = 12
RGBA_WIDTH: int = 4
COLOR_WIDTH: int = 1

# Varint reading stops once the bit offset reaches this value, even if the
# last byte read still had its continuation bit set (5 bytes max).
VARINT_MAX_BITS: int = 32

# ── Signature classification ─────────────────────────────────
MAC_NONE: str = "none-detected"
MAC_HMAC_SHA1: str = "hmac_sha1"
MAC_HMAC_SHA256: str = "hmac_sha256"
MAC_UNKNOWN: str = "unknown"

SIGNATURE_LENGTHS = {
    20: MAC_HMAC_SHA1,
    32: MAC_HMAC_SHA256,
}

# ── Text handling ────────────────────────────────────────────
# surrogateescape keeps undecodable bytes, so str.encode() with the same
# settings reproduces the wire bytes exactly.
TEXT_ENCODING: str = "utf-8"
TEXT_ERRORS: str = "surrogateescape"

# ── Safety limits ────────────────────────────────────────────
# A nesting level costs three interpreter frames while decoding and while
# rendering, so MAX_DEPTH still fits the default recursion limit of 1000.
# MAX_SPARSE_LENGTH caps the list a sparse array pre-allocates (8 bytes per
# slot), since its logical length costs no payload bytes.
MAX_DEPTH: int = 256
MAX_SPARSE_LENGTH: int = 1 << 22
