# paths.py
# Path helpers and the path-addressed mutator
#
# A path is a sequence of segments: int for an array index, str for an
# object key.  The empty path is the document root.

import copy

from .errors import PathError


# ----------------------------
# tiny helpers
# ----------------------------

def is_plain_object(x):
    return isinstance(x, dict)

def is_index(seg):
    return isinstance(seg, int) and not isinstance(seg, bool)

def last_key(p):
    if p is None or len(p) == 0:
        return None
    return p[-1]

def path_to_str(p):
    """Render a path as $["customer"][2]; the root is $."""
    if not p:
        return "$"
    segments = [str(seg) if is_index(seg) else f'"{seg}"' for seg in p]
    return "$[" + "][".join(segments) + "]"

def empty_container_for(seg):
    return [] if is_index(seg) else {}


# ----------------------------
# child access
# ----------------------------

def _list_index(seg):
    if is_index(seg):
        return seg
    if isinstance(seg, str) and seg.isascii() and seg.isdigit():
        return int(seg)
    return None

def _child(obj, seg):
    # missing children read as None, the way an absent member does in JSON
    if isinstance(obj, dict):
        return obj.get(str(seg) if is_index(seg) else seg)
    if isinstance(obj, list):
        i = _list_index(seg)
        if i is None or i < 0 or i >= len(obj):
            return None
        return obj[i]
    return None

def _put(obj, seg, value):
    if isinstance(obj, dict):
        obj[str(seg) if is_index(seg) else seg] = value
        return
    if isinstance(obj, list):
        i = _list_index(seg)
        if i is None or i < 0:
            raise PathError(f"Cannot use {seg!r} as an array index")
        if i >= len(obj):
            obj.extend([None] * (i + 1 - len(obj)))
        obj[i] = value
        return
    raise PathError(f"Cannot set {seg!r} on a {type(obj).__name__} value")


# ----------------------------
# mutator
# ----------------------------

def get_at_path(root, p):
    """Value at path p, or None as soon as the walk falls off the document."""
    if not p:
        return root
    cur = root
    for seg in p:
        if cur is None:
            return None
        cur = _child(cur, seg)
    return cur

def set_at_path(root, p, value):
    """Return a new root with value installed at p.

    Where the existing value and the new value are both objects, they are
    shallow merged (existing keys survive unless value overrides them);
    anything else is replaced outright.  root itself is never modified when
    p is non-empty.
    """
    if not p:
        if is_plain_object(root) and is_plain_object(value):
            return {**root, **value}
        return value

    if root is None:
        new_root = empty_container_for(p[0])
    else:
        new_root = copy.deepcopy(root)

    cur = new_root
    last = len(p) - 1
    for i, seg in enumerate(p):
        if i == last:
            existing = _child(cur, seg)
            if is_plain_object(existing) and is_plain_object(value):
                _put(cur, seg, {**existing, **value})
            else:
                _put(cur, seg, value)
        else:
            nxt = _child(cur, seg)
            if nxt is None:
                nxt = empty_container_for(p[i + 1])
                _put(cur, seg, nxt)
            cur = nxt
    return new_root
