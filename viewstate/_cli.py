"""viewstate command-line interface.

Usage:
    python3 -m viewstate decode /wEeBWhlbGxvZA==
    python3 -m viewstate decode --input capture.txt [--format text]
    echo /wEeBWhlbGxvZA== | python3 -m viewstate decode
    python3 -m viewstate version
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from typing import List, Optional

from . import (
    ViewstateError,
    Viewstate,
    __version__,
    render,
    to_builtin,
)
from ._constants import TEXT_ENCODING, TEXT_ERRORS

LOG = logging.getLogger(__name__)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="viewstate",
        description="viewstate: decode captured __VIEWSTATE payloads for offline review",
    )
    parser.add_argument("-v", "--verbose", action="store_true",
                        help="Log decoding details to stderr")
    sub = parser.add_subparsers(dest="command")

    # ── decode ──
    dec_p = sub.add_parser("decode", help="Decode a base64 viewstate")
    dec_p.add_argument("text", nargs="?", metavar="BASE64",
                       help="Viewstate text (default: read --input or stdin)")
    dec_p.add_argument("--input", "-i", metavar="FILE",
                       help="Read viewstate text from FILE instead of stdin")
    dec_p.add_argument("--format", "-f", choices=("json", "text"), default="json",
                       help="json: full tree with signature info; text: display string")

    # ── version ──
    sub.add_parser("version", help="Print version and exit")

    return parser


def _read_input(text: Optional[str], filepath: Optional[str]) -> str:
    """Viewstate text from the argument, a file or stdin, stripped."""
    if text:
        return text.strip()
    if filepath:
        with open(filepath, "r", encoding="ascii", errors="replace") as f:
            return f.read().strip()
    if sys.stdin.isatty():
        print("viewstate: reading from stdin (Ctrl-D to end)...", file=sys.stderr)
    return sys.stdin.read().strip()


def _cmd_decode(args: argparse.Namespace) -> None:
    text = _read_input(args.text, args.input)
    vs = Viewstate(text)
    LOG.debug("unwrapped %d bytes", len(vs.raw))

    result = vs.decode()
    LOG.debug("signature: %s (%d trailing bytes)", result.mac, len(result.signature))

    if args.format == "text":
        # Undecodable text bytes come back as \xNN escapes.
        shown = render(result.value).encode(TEXT_ENCODING, TEXT_ERRORS)
        print(shown.decode(TEXT_ENCODING, "backslashreplace"))
        return

    out = {
        "mac": result.mac,
        "signature": result.signature.hex(),
        "value": to_builtin(result.value),
    }
    print(json.dumps(out, indent=2, ensure_ascii=True))


def main(argv: Optional[List[str]] = None) -> None:
    parser = _build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(name)s: %(levelname)s: %(message)s",
        stream=sys.stderr,
    )

    if args.command is None:
        parser.print_help()
        sys.exit(1)

    if args.command == "version":
        print(f"viewstate {__version__}")
        return

    try:
        if args.command == "decode":
            _cmd_decode(args)
    except ViewstateError as e:
        LOG.debug("decode failed at offset %d", e.offset)
        print(f"viewstate: error [{e.code}]: {e}", file=sys.stderr)
        sys.exit(2)
    except OSError as e:
        print(f"viewstate: cannot read input: {e}", file=sys.stderr)
        sys.exit(2)


if __name__ == "__main__":
    main()
