"""Display rendering and JSON projection of decoded values.

render() produces the compact display strings viewstate dumps traditionally use
(``type:ordinal`` for enums, ``color:[n]``, ``ref:n``, ``<nil>`` and so on).
Mapping keys are produced with render() as well, which is why two different
key values can collide in a DecodedMap.

to_builtin() goes the other way: it turns a value tree into plain
JSON-compatible objects.  Structured variants become objects tagged with a
``"$type"`` member:

    EnumValue      {"$type": "enum", "type": ..., "ordinal": n}
    ColorIndex     {"$type": "color", "index": n}
    RGBAColor      {"$type": "rgba", "r": .., "g": .., "b": .., "a": ..}
    TimeStub       {"$type": "time", "raw": hex, "resolved": false}
    UnitStub       {"$type": "unit", "raw": hex, "resolved": false}
    Pair/Triplet   {"$type": "pair"|"triplet", "items": [...]}
    Reference      {"$type": "reference", "index": n}
    FormattedText  {"$type": "formatted", "pattern": ..., "args": str}
    TypedSequence  {"$type": "typed_list", "type": ..., "items": [...]}
    SparseList     {"$type": "sparse", "type": ..., "items": [...]}
    bytes          {"$type": "binary", "base64": str}

A DecodedMap projects to a plain object keyed by display string.  When two
keys collided it becomes {"$type": "map", "entries": {...}, "overwritten":
[{"key": ..., "value": ...}, ...]} instead, so the lost entries stay visible.
"""

from __future__ import annotations

import base64
from typing import Any, Dict, List

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

# Display form of a zero DateTime.
_ZERO_TIME = "0001-01-01 00:00:00 +0000 UTC"


def _join(items: List[Any]) -> str:
    return "[" + " ".join(render(item) for item in items) + "]"


def render(val: Any) -> str:
    """Render a decoded value to its display string."""
    if val is None:
        return "<nil>"

    # bool before int: True is an int too.
    if isinstance(val, bool):
        return "true" if val else "false"
    if isinstance(val, int):
        return str(val)
    if isinstance(val, str):
        return val
    if isinstance(val, bytes):
        return "[" + " ".join(str(b) for b in val) + "]"

    if isinstance(val, EnumValue):
        return "{}:{}".format(render(val.type), val.ordinal)
    if isinstance(val, ColorIndex):
        return "color:[{}]".format(val.index)
    if isinstance(val, RGBAColor):
        return "{{{} {} {} {}}}".format(val.r, val.g, val.b, val.a)
    if isinstance(val, TimeStub):
        return _ZERO_TIME
    if isinstance(val, UnitStub):
        return "unit"
    if isinstance(val, Pair):
        return _join([val.first, val.second])
    if isinstance(val, Triplet):
        return _join([val.first, val.second, val.third])
    if isinstance(val, Reference):
        return "ref:{}".format(val.index)
    if isinstance(val, FormattedText):
        return "{} {}".format(render(val.pattern), val.args)
    if isinstance(val, TypedSequence):
        # The type tag is not part of the display form.
        return _join(val.elements)

    if isinstance(val, dict):
        parts = ["{}:{}".format(k, render(val[k])) for k in sorted(val)]
        return "map[" + " ".join(parts) + "]"
    if isinstance(val, list):
        return _join(val)

    raise TypeError("cannot render {}".format(type(val).__name__))


def to_builtin(val: Any) -> Any:
    """Project a decoded value onto JSON-compatible builtins."""
    if val is None or isinstance(val, (bool, int, str)):
        return val

    if isinstance(val, bytes):
        return {"$type": "binary", "base64": base64.b64encode(val).decode("ascii")}

    if isinstance(val, EnumValue):
        return {"$type": "enum", "type": to_builtin(val.type), "ordinal": val.ordinal}
    if isinstance(val, ColorIndex):
        return {"$type": "color", "index": val.index}
    if isinstance(val, RGBAColor):
        return {"$type": "rgba", "r": val.r, "g": val.g, "b": val.b, "a": val.a}
    if isinstance(val, TimeStub):
        return {"$type": "time", "raw": val.raw.hex(), "resolved": val.resolved}
    if isinstance(val, UnitStub):
        return {"$type": "unit", "raw": val.raw.hex(), "resolved": val.resolved}
    if isinstance(val, Pair):
        return {"$type": "pair", "items": [to_builtin(val.first), to_builtin(val.second)]}
    if isinstance(val, Triplet):
        return {
            "$type": "triplet",
            "items": [to_builtin(val.first), to_builtin(val.second), to_builtin(val.third)],
        }
    if isinstance(val, Reference):
        return {"$type": "reference", "index": val.index}
    if isinstance(val, FormattedText):
        return {"$type": "formatted", "pattern": to_builtin(val.pattern), "args": val.args}
    if isinstance(val, TypedSequence):
        return {
            "$type": "typed_list",
            "type": to_builtin(val.type_tag),
            "items": [to_builtin(item) for item in val.elements],
        }

    if isinstance(val, SparseList):
        return {
            "$type": "sparse",
            "type": to_builtin(val.type_tag),
            "items": [to_builtin(item) for item in val],
        }

    if isinstance(val, dict):
        out: Dict[str, Any] = {}
        for k, v in val.items():
            out[k] = to_builtin(v)
        if isinstance(val, DecodedMap) and val.overwritten:
            lost = [{"key": to_builtin(k), "value": to_builtin(v)} for k, v in val.overwritten]
            return {"$type": "map", "entries": out, "overwritten": lost}
        return out
    if isinstance(val, list):
        return [to_builtin(item) for item in val]

    raise TypeError("cannot project {}".format(type(val).__name__))
