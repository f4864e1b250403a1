"""Tests for the Viewstate container: base64, preamble and signature labels."""

from __future__ import annotations

import base64
import os
import sys
import unittest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from viewstate import (
    DecodeResult,
    ERR_BAD_PREAMBLE,
    ERR_INPUT_TOO_SHORT,
    ERR_INVALID_BASE64,
    ERR_TRUNCATED,
    MAC_HMAC_SHA1,
    MAC_HMAC_SHA256,
    MAC_NONE,
    MAC_UNKNOWN,
    Pair,
    Viewstate,
    ViewstateError,
    classify_signature,
    decode,
    decode_raw,
)

# Body that decodes to "hi" and uses every byte it is given.
_HI = b"\x1e\x02hi"


def _b64(raw: bytes) -> str:
    return base64.b64encode(raw).decode("ascii")


# ── Construction ──────────────────────────────────────────────

class TestConstruction(unittest.TestCase):
    def test_raw_is_unwrapped(self):
        vs = Viewstate(_b64(b"\xff\x01" + _HI))
        self.assertEqual(vs.raw, b"\xff\x01" + _HI)

    def test_accepts_bytes(self):
        vs = Viewstate(_b64(b"\xff\x01" + _HI).encode("ascii"))
        self.assertEqual(vs.raw, b"\xff\x01" + _HI)

    def test_line_breaks_ignored(self):
        text = _b64(b"\xff\x01" + _HI + bytes(20))
        wrapped = text[:8] + "\r\n" + text[8:20] + "\n" + text[20:]
        self.assertEqual(Viewstate(wrapped).raw, Viewstate(text).raw)

    def test_invalid_base64_fails_immediately(self):
        for text in ("not*base64", "abc", "/wE eAmhp", "é"):
            with self.subTest(text=text):
                with self.assertRaises(ViewstateError) as ctx:
                    Viewstate(text)
                self.assertEqual(ctx.exception.code, ERR_INVALID_BASE64)

    def test_fields_before_decode(self):
        vs = Viewstate(_b64(b"\xff\x01" + _HI))
        self.assertFalse(vs.decoded)
        self.assertEqual(vs.mac, MAC_NONE)
        self.assertIsNone(vs.value)
        self.assertEqual(vs.signature, b"")


# ── Preamble ──────────────────────────────────────────────────

class TestPreamble(unittest.TestCase):
    def test_bad_preamble(self):
        for raw in (b"\xff\x02\x67\x00", b"\x00\x01\x67\x00", b"\x01\xff\x67\x00"):
            with self.subTest(raw=raw):
                with self.assertRaises(ViewstateError) as ctx:
                    decode_raw(raw)
                self.assertEqual(ctx.exception.code, ERR_BAD_PREAMBLE)

    def test_too_short(self):
        for raw in (b"", b"\xff"):
            with self.subTest(raw=raw):
                with self.assertRaises(ViewstateError) as ctx:
                    decode_raw(raw)
                self.assertEqual(ctx.exception.code, ERR_INPUT_TOO_SHORT)

    def test_empty_text(self):
        vs = Viewstate("")
        with self.assertRaises(ViewstateError) as ctx:
            vs.decode()
        self.assertEqual(ctx.exception.code, ERR_INPUT_TOO_SHORT)

    def test_preamble_only(self):
        with self.assertRaises(ViewstateError) as ctx:
            decode_raw(b"\xff\x01")
        self.assertEqual(ctx.exception.code, ERR_INPUT_TOO_SHORT)


# ── Signature classification ─────────────────────────────────

class TestSignature(unittest.TestCase):
    def test_classify_by_length(self):
        cases = {
            0: MAC_UNKNOWN,
            16: MAC_UNKNOWN,
            20: MAC_HMAC_SHA1,
            32: MAC_HMAC_SHA256,
            40: MAC_UNKNOWN,
        }
        for n, mac in cases.items():
            with self.subTest(n=n):
                self.assertEqual(classify_signature(bytes(n)), mac)

    def test_decoded_trailing_bytes(self):
        for n, mac in ((0, MAC_UNKNOWN), (16, MAC_UNKNOWN), (20, MAC_HMAC_SHA1),
                       (32, MAC_HMAC_SHA256), (40, MAC_UNKNOWN)):
            with self.subTest(n=n):
                sig = bytes(range(n))
                result = decode(_b64(b"\xff\x01" + _HI + sig))
                self.assertEqual(result.value, "hi")
                self.assertEqual(result.mac, mac)
                self.assertEqual(result.signature, sig)


# ── decode() lifecycle ────────────────────────────────────────

class TestDecode(unittest.TestCase):
    def test_fields_populated(self):
        sig = b"\xab" * 20
        vs = Viewstate(_b64(b"\xff\x01" + _HI + sig))
        result = vs.decode()
        self.assertIsInstance(result, DecodeResult)
        self.assertTrue(vs.decoded)
        self.assertEqual(vs.value, "hi")
        self.assertEqual(vs.mac, MAC_HMAC_SHA1)
        self.assertEqual(vs.signature, sig)

    def test_fields_are_read_only(self):
        vs = Viewstate(_b64(b"\xff\x01" + _HI + b"\xab" * 20))
        vs.decode()
        for name, replacement in (("value", "forged"), ("mac", MAC_UNKNOWN),
                                  ("signature", b""), ("raw", b"\xff\x01")):
            with self.assertRaises(AttributeError):
                setattr(vs, name, replacement)
        self.assertEqual(vs.value, "hi")
        self.assertEqual(vs.mac, MAC_HMAC_SHA1)

    def test_second_decode_returns_same_result(self):
        vs = Viewstate(_b64(b"\xff\x01" + _HI))
        self.assertIs(vs.decode(), vs.decode())

    def test_failed_decode_leaves_fields(self):
        vs = Viewstate(_b64(b"\xff\x01\x05\x0ahi"))
        with self.assertRaises(ViewstateError) as ctx:
            vs.decode()
        self.assertEqual(ctx.exception.code, ERR_TRUNCATED)
        self.assertFalse(vs.decoded)
        self.assertEqual(vs.mac, MAC_NONE)

    def test_typical_page_state(self):
        """Pair(Pair(hash, null), null) followed by a SHA-1 MAC."""
        body = b"\x0f\x0f\x1e\x0a1234567890\x64\x64"
        result = decode(_b64(b"\xff\x01" + body + b"\x5a" * 20))
        self.assertEqual(result.value, Pair(Pair("1234567890", None), None))
        self.assertEqual(result.mac, MAC_HMAC_SHA1)

    def test_independent_containers(self):
        a = Viewstate(_b64(b"\xff\x01" + _HI + bytes(20)))
        b = Viewstate(_b64(b"\xff\x01" + _HI + bytes(32)))
        self.assertEqual(b.decode().mac, MAC_HMAC_SHA256)
        self.assertEqual(a.decode().mac, MAC_HMAC_SHA1)

    def test_repr(self):
        vs = Viewstate(_b64(b"\xff\x01" + _HI))
        self.assertIn("6 bytes", repr(vs))


if __name__ == "__main__":
    unittest.main()
