# document.py
# JSON text helpers and the document repositories a session reads and writes

import json
import logging
import os
import tempfile
from pathlib import Path

from .errors import ParseError


log = logging.getLogger(__name__)


# ----------------------------
# json text
# ----------------------------

def pretty(obj, indent=2):
    return json.dumps(obj, indent=indent, ensure_ascii=False, sort_keys=False)

def parse_json_text(s):
    try:
        obj = json.loads(s)
        return obj, None
    except json.JSONDecodeError as e:
        msg = f"{e.msg} (line {e.lineno}, col {e.colno})"
        return None, msg

def load_document(s):
    """Parse stored document text; empty text means no document yet."""
    if not s:
        return None
    try:
        return json.loads(s)
    except json.JSONDecodeError as e:
        raise ParseError(e.msg, e.lineno, e.colno) from e

def atomic_write_text(path, text):
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp = tempfile.mkstemp(prefix=path.name + ".", suffix=".tmp", dir=str(path.parent))
    try:
        with os.fdopen(fd, "w", encoding="utf-8", newline="\n") as f:
            f.write(text)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp, str(path))
    finally:
        if os.path.exists(tmp):
            os.remove(tmp)


# ----------------------------
# repositories
# ----------------------------

class MemoryDocument:
    """Holds the current document text in memory."""

    def __init__(self, text=""):
        self.text = text

    def read(self):
        return self.text

    def write(self, text):
        self.text = text


class FileDocument:
    """Document text stored in a file on disk, written atomically."""

    def __init__(self, path):
        self.path = Path(path)

    def read(self):
        try:
            return self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return ""

    def write(self, text):
        if not text.endswith("\n"):
            text += "\n"
        atomic_write_text(self.path, text)
        log.debug("wrote %d chars to %s", len(text), self.path)


# ----------------------------
# editor mirror
# ----------------------------

class NullMirror:
    """Mirror that shows nothing; used when no text editor is attached."""

    def set_contents(self, contents, has_changes=False, skip_update=False):
        pass


def sync_mirror(mirror, text):
    """Best-effort push of text into the editor mirror.

    Returns True on success.  A failing mirror is logged and reported as
    False; it never aborts the caller.
    """
    if mirror is None:
        return False
    try:
        mirror.set_contents(contents=text, has_changes=False, skip_update=True)
    except Exception:
        log.warning("editor mirror update failed", exc_info=True)
        return False
    return True
