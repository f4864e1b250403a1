"""Viewstate container: base64 unwrapping, preamble check, signature labeling.

A serialized viewstate looks like this once base64-decoded:

    FF 01 | <one marker-encoded value> | <trailing signature bytes>

The trailing bytes are the MAC the server appended (if MAC validation is
on).  They are only labeled by length here, never verified: there is no
key material on this side.
"""

from __future__ import annotations

import base64
import binascii
from dataclasses import dataclass
from typing import Any, Optional, Union

from ._constants import MAC_NONE, MAC_UNKNOWN, PREAMBLE, SIGNATURE_LENGTHS
from ._core import parse
from ._errors import (
    ERR_BAD_PREAMBLE,
    ERR_INPUT_TOO_SHORT,
    ERR_INVALID_BASE64,
    ViewstateError,
)


@dataclass(frozen=True)
class DecodeResult:
    """Outcome of one successful decode."""

    value: Any
    mac: str
    signature: bytes


def b64_to_raw(text: Union[str, bytes]) -> bytes:
    """Standard base64 → bytes.  CR/LF line breaks are ignored, nothing else."""
    if isinstance(text, str):
        try:
            data = text.encode("ascii")
        except UnicodeEncodeError:
            raise ViewstateError(ERR_INVALID_BASE64, "non-ASCII character in base64 input")
    else:
        data = bytes(text)
    data = data.replace(b"\r", b"").replace(b"\n", b"")
    try:
        return base64.b64decode(data, validate=True)
    except binascii.Error as e:
        raise ViewstateError(ERR_INVALID_BASE64, "invalid base64: {}".format(e))


def classify_signature(trailing: bytes) -> str:
    """Guess the MAC algorithm from the trailing byte count alone."""
    return SIGNATURE_LENGTHS.get(len(trailing), MAC_UNKNOWN)


def decode_raw(raw: bytes) -> DecodeResult:
    """Decode already-unwrapped viewstate bytes (preamble included)."""
    if len(raw) < len(PREAMBLE):
        raise ViewstateError(ERR_INPUT_TOO_SHORT, "input too short")
    if raw[:len(PREAMBLE)] != PREAMBLE:
        raise ViewstateError(
            ERR_BAD_PREAMBLE,
            "bad preamble {}".format(raw[:len(PREAMBLE)].hex()),
        )

    value, remain = parse(raw[len(PREAMBLE):])
    return DecodeResult(value=value, mac=classify_signature(remain), signature=remain)


class Viewstate:
    """One captured viewstate payload.

    Construction only unwraps the base64 text (and fails right away if it
    is not base64).  decode() does the structural work once; its result is
    kept and also exposed through the read-only `value`, `mac` and
    `signature` properties.
    """

    def __init__(self, text: Union[str, bytes]) -> None:
        self._raw: bytes = b64_to_raw(text)
        self._result: Optional[DecodeResult] = None

    @property
    def raw(self) -> bytes:
        """The unwrapped payload bytes, preamble included."""
        return self._raw

    @property
    def decoded(self) -> bool:
        return self._result is not None

    @property
    def value(self) -> Any:
        """Decoded tree, or None before decode()."""
        return self._result.value if self._result is not None else None

    @property
    def mac(self) -> str:
        return self._result.mac if self._result is not None else MAC_NONE

    @property
    def signature(self) -> bytes:
        return self._result.signature if self._result is not None else b""

    def decode(self) -> DecodeResult:
        if self._result is None:
            self._result = decode_raw(self.raw)
        return self._result

    def __repr__(self) -> str:
        return "Viewstate(raw={} bytes, mac={!r})".format(len(self.raw), self.mac)
