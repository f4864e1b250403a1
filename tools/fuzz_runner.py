#!/usr/bin/env python3
# tools/fuzz_runner.py
#
# Random-input fuzzing for the viewstate decoder.
#
# Generates two fuzz categories:
#   A) random marker-biased bodies -> parse()
#   B) mutated conformance payloads (byte flips, truncation, splices) -> decode_raw()
#
# Every input must either decode or raise ViewstateError.  Decoded trees must
# render and project to JSON, and the remainder must be an untouched suffix.
# Any violation prints a minimal repro payload and exits non-zero.

import os, sys, json, base64, random
from typing import Any, Dict, List

ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
sys.path.insert(0, ROOT)

from viewstate import ViewstateError, decode_raw, parse, render, to_builtin
from viewstate._core import _READERS

SEED = int(os.environ.get("VIEWSTATE_SEED", "4242"))
ROUNDS = int(os.environ.get("VIEWSTATE_FUZZ_ROUNDS", "5000"))
MAX_LEN = int(os.environ.get("VIEWSTATE_FUZZ_MAX_LEN", "64"))

random.seed(SEED)

KNOWN_MARKERS: List[int] = sorted(_READERS)

def b64(b: bytes) -> str:
    return base64.b64encode(b).decode("ascii")

def violation(label: str, payload: bytes, detail: str) -> None:
    print("VIOLATION:", label)
    print("PAYLOAD_B64:", b64(payload))
    print("DETAIL:", detail[:4000])
    raise SystemExit(1)

def check_tree(label: str, payload: bytes, val: Any) -> None:
    try:
        render(val)
        json.dumps(to_builtin(val))
    except Exception as e:  # any failure here is a decoder bug
        violation(label, payload, "tree not renderable: {!r}".format(e))

# --- generators ---

def gen_body() -> bytes:
    # Mostly known markers so inputs get past the first byte.
    out = bytearray()
    for _ in range(random.randint(0, MAX_LEN)):
        r = random.random()
        if r < 0.35:
            out.append(random.choice(KNOWN_MARKERS))
        elif r < 0.6:
            out.append(random.randint(0, 8))
        else:
            out.append(random.randint(0, 255))
    return bytes(out)

def load_seeds() -> List[bytes]:
    path = os.path.join(ROOT, "conformance", "conformance_vectors.json")
    with open(path, "r", encoding="utf-8") as f:
        vectors = json.load(f)["vectors"]
    seeds = []
    for vec in vectors:
        try:
            seeds.append(base64.b64decode(vec["input_b64"], validate=True))
        except ValueError:
            continue
    return seeds

def mutate(raw: bytes) -> bytes:
    buf = bytearray(raw)
    op = random.choice(("flip", "truncate", "splice", "insert"))
    if op == "flip" and buf:
        i = random.randrange(len(buf))
        buf[i] = random.randint(0, 255)
    elif op == "truncate" and buf:
        del buf[random.randrange(len(buf)):]
    elif op == "splice":
        i = random.randint(0, len(buf))
        buf[i:i] = gen_body()[:8]
    else:
        i = random.randint(0, len(buf))
        buf.insert(i, random.choice(KNOWN_MARKERS))
    return bytes(buf)

# --- runners ---

def run_body(body: bytes, stats: Dict[str, int]) -> None:
    try:
        val, rest = parse(body)
    except ViewstateError as e:
        stats[e.code] = stats.get(e.code, 0) + 1
        return
    except Exception as e:
        violation("A/parse", body, "non-ViewstateError escaped: {!r}".format(e))
        return
    if rest and body[len(body) - len(rest):] != rest:
        violation("A/parse", body, "remainder is not a suffix of the input")
    check_tree("A/parse", body, val)
    stats["ok"] = stats.get("ok", 0) + 1

def run_payload(raw: bytes, stats: Dict[str, int]) -> None:
    try:
        result = decode_raw(raw)
    except ViewstateError as e:
        stats[e.code] = stats.get(e.code, 0) + 1
        return
    except Exception as e:
        violation("B/decode_raw", raw, "non-ViewstateError escaped: {!r}".format(e))
        return
    if not raw.endswith(result.signature):
        violation("B/decode_raw", raw, "signature is not the payload tail")
    check_tree("B/decode_raw", raw, result.value)
    stats["ok"] = stats.get("ok", 0) + 1

def main() -> None:
    seeds = load_seeds()
    stats_a: Dict[str, int] = {}
    stats_b: Dict[str, int] = {}

    for _ in range(ROUNDS):
        run_body(gen_body(), stats_a)
        raw = random.choice(seeds) if seeds else b"\xff\x01"
        for _ in range(random.randint(1, 3)):
            raw = mutate(raw)
        run_payload(raw, stats_b)

    print("FUZZ seed={} rounds={}".format(SEED, ROUNDS))
    print("  A parse      :", json.dumps(stats_a, sort_keys=True))
    print("  B decode_raw :", json.dumps(stats_b, sort_keys=True))
    print("OK")

if __name__ == "__main__":
    main()
