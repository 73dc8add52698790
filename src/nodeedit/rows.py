# rows.py
# Node row model: the flat, editable view of one node of a JSON document
#
# A row is {"key": str | None, "value": scalar | None, "type": RowType}.
# A node is {"path": path, "text": [row, ...]}.

import json
import math
import re
from enum import Enum

from .errors import CoercionError
from .paths import get_at_path


ROOT_FIELD = "__root"

_INDEX_KEY_RE = re.compile(r"[0-9]+")
_DECIMAL_RE = re.compile(r"[+-]?([0-9]+\.?[0-9]*|\.[0-9]+)([eE][+-]?[0-9]+)?")
_PREFIXED_RE = re.compile(r"0[xX][0-9a-fA-F]+|0[oO][0-7]+|0[bB][01]+")

# largest index a dense JSON array may be rebuilt with
MAX_INDEX = 2 ** 32 - 2


class RowType(str, Enum):
    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    NULL = "null"
    ARRAY = "array"
    OBJECT = "object"

    def __str__(self):
        return self.value


COMPOSITE_TYPES = (RowType.ARRAY, RowType.OBJECT)


# ----------------------------
# tiny helpers
# ----------------------------

def make_row(key, value, row_type):
    return {"key": key, "value": value, "type": RowType(row_type)}

def row_type(row):
    return RowType(row["type"])

def is_composite(row):
    return row_type(row) in COMPOSITE_TYPES

def primitive_rows(rows):
    return [r for r in rows or [] if not is_composite(r)]

def is_single_scalar(prims):
    return len(prims) == 1 and not prims[0].get("key")

def field_kind(t):
    """Which input a row of type t is edited with: text, number or boolean."""
    t = RowType(t)
    if t is RowType.NUMBER:
        return "number"
    if t is RowType.BOOLEAN:
        return "boolean"
    if t is RowType.STRING or t is RowType.NULL:
        return "text"
    raise ValueError(f"{t} rows are not edited as fields")

def infer_row_type(value):
    if value is None:
        return RowType.NULL
    if isinstance(value, bool):
        return RowType.BOOLEAN
    if isinstance(value, (int, float)):
        return RowType.NUMBER
    if isinstance(value, list):
        return RowType.ARRAY
    if isinstance(value, dict):
        return RowType.OBJECT
    return RowType.STRING

def scalar_text(value):
    if isinstance(value, str):
        return value
    return json.dumps(value, ensure_ascii=False)


# ----------------------------
# derive
# ----------------------------

def derive_display(rows, indent=2):
    """Read-only text for a node: a bare scalar, or an object of its leaves."""
    if not rows:
        return "{}"
    if len(rows) == 1 and not rows[0].get("key"):
        return scalar_text(rows[0].get("value"))

    obj = {}
    for row in rows:
        if is_composite(row):
            continue
        if row.get("key"):
            obj[row["key"]] = row.get("value")
    return json.dumps(obj, indent=indent, ensure_ascii=False)

def derive_editable(rows, root_field=ROOT_FIELD):
    """Seed field map for editing: one entry per keyed leaf row."""
    prims = primitive_rows(rows)
    fields = {}
    if is_single_scalar(prims):
        v = prims[0].get("value")
        fields[root_field] = "" if v is None else v
        return fields
    for row in prims:
        k = row.get("key")
        if k:
            v = row.get("value")
            fields[k] = "" if v is None else v
    return fields


# ----------------------------
# coerce / reconstruct
# ----------------------------

def _finite_number(n):
    if isinstance(n, float):
        if not math.isfinite(n):
            return None
        if n.is_integer() and abs(n) < 2 ** 53:
            return int(n)
    return n

def parse_number(raw):
    """Number for raw input, None if blank; raises ValueError if unparsable."""
    if raw is None:
        return None
    if isinstance(raw, bool):
        return int(raw)
    if isinstance(raw, (int, float)):
        n = _finite_number(raw)
        if n is None:
            raise ValueError(f"{raw!r} is not a finite number")
        return n
    s = str(raw).strip()
    if s == "":
        return None
    if _PREFIXED_RE.fullmatch(s):
        return int(s, 0)
    m = _DECIMAL_RE.fullmatch(s)
    if m is None:
        raise ValueError(f"{raw!r} is not a number")
    if m.group(2) is None and "." not in s:
        return int(s)
    n = _finite_number(float(s))
    if n is None:
        raise ValueError(f"{raw!r} is out of range")
    return n

def coerce(t, raw, key=None, invalid_number="error"):
    t = RowType(t)
    if t is RowType.NUMBER:
        try:
            return parse_number(raw)
        except ValueError as e:
            if invalid_number == "null":
                return None
            raise CoercionError(f"{key or 'value'}: {e}", key, t) from e
    if t is RowType.BOOLEAN:
        return bool(raw)
    if t is RowType.NULL:
        return None
    if t is RowType.STRING:
        return raw
    raise CoercionError(f"{key or 'value'}: {t} rows cannot be edited", key, t)

def reconstruct(rows, fields, root_field=ROOT_FIELD, invalid_number="error"):
    """Typed JSON value for the leaf rows of a node and the edited fields.

    An unkeyed single leaf becomes a scalar.  Keyed leaves become a list when
    every key is all digits, else an object.
    """
    prims = primitive_rows(rows)
    if is_single_scalar(prims):
        row = prims[0]
        return coerce(row["type"], fields.get(root_field), None, invalid_number)

    keys = [r["key"] for r in prims if r.get("key")]
    if keys and all(_INDEX_KEY_RE.fullmatch(k) for k in keys):
        top = max(keys, key=lambda k: (len(k.lstrip("0")), k.lstrip("0")))
        try:
            digits = top.lstrip("0") or "0"
            if len(digits) > len(str(MAX_INDEX)) or int(digits) > MAX_INDEX:
                raise OverflowError(top)
            arr = [None] * (int(top) + 1)
        except (ValueError, OverflowError, MemoryError) as e:
            raise CoercionError(f"{top}: index out of range", top, RowType.ARRAY) from e
        for row in prims:
            k = row.get("key")
            if not k:
                continue
            arr[int(k)] = coerce(row["type"], fields.get(k), k, invalid_number)
        return arr

    obj = {}
    for row in prims:
        k = row.get("key")
        if not k:
            continue
        obj[k] = coerce(row["type"], fields.get(k), k, invalid_number)
    return obj


# ----------------------------
# nodes
# ----------------------------

def rows_from_value(value):
    """Rows for a value: one per element or entry, or one unkeyed scalar row."""
    def row_for(k, v):
        t = infer_row_type(v)
        return make_row(k, None if t in COMPOSITE_TYPES else v, t)

    if isinstance(value, list):
        return [row_for(str(i), v) for i, v in enumerate(value)]
    if isinstance(value, dict):
        return [row_for(k, v) for k, v in value.items()]
    return [row_for(None, value)]

def node_at_path(doc, p):
    return {"path": tuple(p or ()), "text": rows_from_value(get_at_path(doc, p))}
