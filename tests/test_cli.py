"""Tests for the viewstate command-line interface."""

from __future__ import annotations

import contextlib
import io
import json
import os
import sys
import tempfile
import unittest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from viewstate import __version__
from viewstate._cli import main

# ff01 | Pair(Pair("1234567890", null), null) | 20-byte MAC
_PAGE = "/wEPDx4KMTIzNDU2Nzg5MGRkq6urq6urq6urq6urq6urq6urq6s="


def _run(argv, stdin: str = ""):
    out, err = io.StringIO(), io.StringIO()
    code = 0
    old_stdin = sys.stdin
    sys.stdin = io.StringIO(stdin)
    try:
        with contextlib.redirect_stdout(out), contextlib.redirect_stderr(err):
            try:
                main(argv)
            except SystemExit as e:
                code = e.code
    finally:
        sys.stdin = old_stdin
    return code, out.getvalue(), err.getvalue()


class TestCli(unittest.TestCase):
    def test_version(self):
        code, out, _ = _run(["version"])
        self.assertEqual(code, 0)
        self.assertEqual(out.strip(), "viewstate {}".format(__version__))

    def test_no_command(self):
        code, _, _ = _run([])
        self.assertEqual(code, 1)

    def test_decode_json(self):
        code, out, _ = _run(["decode", _PAGE])
        self.assertEqual(code, 0)
        doc = json.loads(out)
        self.assertEqual(doc["mac"], "hmac_sha1")
        self.assertEqual(doc["signature"], "ab" * 20)
        self.assertEqual(doc["value"], {
            "$type": "pair",
            "items": [{"$type": "pair", "items": ["1234567890", None]}, None],
        })

    def test_decode_text(self):
        code, out, _ = _run(["decode", "--format", "text", _PAGE])
        self.assertEqual(code, 0)
        self.assertEqual(out.strip(), "[[1234567890 <nil>] <nil>]")

    def test_decode_text_undecodable_bytes(self):
        # ff01 | Text(b"\xff\xfe"), not valid UTF-8
        code, out, err = _run(["decode", "-f", "text", "/wEeAv/+"])
        self.assertEqual(code, 0, err)
        self.assertEqual(out.strip(), "\\xff\\xfe")

    def test_decode_stdin(self):
        code, out, _ = _run(["decode", "-f", "text"], stdin=_PAGE + "\n")
        self.assertEqual(code, 0)
        self.assertEqual(out.strip(), "[[1234567890 <nil>] <nil>]")

    def test_decode_file(self):
        with tempfile.NamedTemporaryFile("w", suffix=".txt", delete=False) as f:
            f.write(_PAGE + "\n")
            path = f.name
        try:
            code, out, _ = _run(["decode", "--input", path, "--format", "text"])
        finally:
            os.unlink(path)
        self.assertEqual(code, 0)
        self.assertEqual(out.strip(), "[[1234567890 <nil>] <nil>]")

    def test_missing_file(self):
        code, _, err = _run(["decode", "--input", "/nonexistent/viewstate.txt"])
        self.assertEqual(code, 2)
        self.assertIn("cannot read input", err)

    def test_error_code_reported(self):
        code, out, err = _run(["decode", "/wGZAA=="])
        self.assertEqual(code, 2)
        self.assertEqual(out, "")
        self.assertIn("[ERR_UNKNOWN_MARKER]", err)

    def test_invalid_base64(self):
        code, _, err = _run(["decode", "not*base64"])
        self.assertEqual(code, 2)
        self.assertIn("[ERR_INVALID_BASE64]", err)


if __name__ == "__main__":
    unittest.main()
