"""Viewstate error codes and exception class.

Every failure is terminal for the decode in progress.  The format has no
resynchronization point, so nothing is salvaged after an error.
"""

from __future__ import annotations

# ── Error codes ──────────────────────────────────────────────
# Grep-friendly, stable strings.  Conformance vectors compare against these.

ERR_INVALID_BASE64: str = "ERR_INVALID_BASE64"    # input text is not base64
ERR_INPUT_TOO_SHORT: str = "ERR_INPUT_TOO_SHORT"  # < 2 bytes where a value starts
ERR_BAD_PREAMBLE: str = "ERR_BAD_PREAMBLE"        # body does not start FF 01
ERR_UNKNOWN_MARKER: str = "ERR_UNKNOWN_MARKER"    # marker byte not in the table
ERR_TRUNCATED: str = "ERR_TRUNCATED"              # length/count runs past the end
ERR_INVALID_INDEX: str = "ERR_INVALID_INDEX"      # sparse index outside [0, length)
ERR_LIMIT_DEPTH: str = "ERR_LIMIT_DEPTH"          # nesting exceeds MAX_DEPTH
ERR_LIMIT_SIZE: str = "ERR_LIMIT_SIZE"            # sparse length exceeds limit


class ViewstateError(Exception):
    """Exception for viewstate decoding errors.

    The `.code` attribute is one of the ERR_* strings above.  The optional
    `.offset` is the body offset where decoding stopped, when known.
    """

    def __init__(self, code: str, msg: str = "", offset: int = -1) -> None:
        super().__init__(msg or code)
        self.code = code
        self.offset = offset
