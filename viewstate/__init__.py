"""viewstate: offline decoder for serialized ``__VIEWSTATE`` payloads.

Turns the base64 text of a captured viewstate into an inspectable value
tree and labels the trailing signature bytes.  Nothing is ever encoded and
signatures are never verified.

Quick start:
    >>> from viewstate import decode, render
    >>> result = decode("/wEeBWhlbGxvZA==")
    >>> result.value
    'hello'
    >>> result.mac
    'unknown'
    >>> render(result.value)
    'hello'

Lower-level entry point, for bodies that were already unwrapped:
    >>> from viewstate import parse
    >>> parse(b"\\x67\\x68")
    (True, b'h')
"""

from __future__ import annotations

from typing import Union

from ._constants import MAC_HMAC_SHA1, MAC_HMAC_SHA256, MAC_NONE, MAC_UNKNOWN, PREAMBLE
from ._container import DecodeResult, Viewstate, classify_signature, decode_raw
from ._core import parse, read_varint
from ._errors import (
    ERR_BAD_PREAMBLE,
    ERR_INPUT_TOO_SHORT,
    ERR_INVALID_BASE64,
    ERR_INVALID_INDEX,
    ERR_LIMIT_DEPTH,
    ERR_LIMIT_SIZE,
    ERR_TRUNCATED,
    ERR_UNKNOWN_MARKER,
    ViewstateError,
)
from ._render import render, to_builtin
from ._values import (
    ColorIndex,
    DecodedMap,
    DecodedValue,
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

__version__ = "0.3.0"

__all__ = [
    # Public API functions
    "decode",
    "decode_raw",
    "parse",
    "read_varint",
    "classify_signature",
    "render",
    "to_builtin",
    # Container
    "Viewstate",
    "DecodeResult",
    # Value model
    "DecodedValue",
    "DecodedMap",
    "SparseList",
    "EnumValue",
    "ColorIndex",
    "RGBAColor",
    "TimeStub",
    "UnitStub",
    "Pair",
    "Triplet",
    "Reference",
    "FormattedText",
    "TypedSequence",
    # Exception
    "ViewstateError",
    # Error codes
    "ERR_INVALID_BASE64",
    "ERR_INPUT_TOO_SHORT",
    "ERR_BAD_PREAMBLE",
    "ERR_UNKNOWN_MARKER",
    "ERR_TRUNCATED",
    "ERR_INVALID_INDEX",
    "ERR_LIMIT_DEPTH",
    "ERR_LIMIT_SIZE",
    # Signature tags
    "MAC_NONE",
    "MAC_HMAC_SHA1",
    "MAC_HMAC_SHA256",
    "MAC_UNKNOWN",
    "PREAMBLE",
]


def decode(text: Union[str, bytes]) -> DecodeResult:
    """Decode base64 viewstate text in one call.

    Equivalent to ``Viewstate(text).decode()``.  Raises ViewstateError with
    ERR_INVALID_BASE64 before any structural work if the text is not base64.
    """
    return Viewstate(text).decode()
