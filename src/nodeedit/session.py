# session.py
# Editing session for one selected node: view, edit, cancel, save
#
# The session reads the document from a repository at save time, installs
# the rebuilt node value at the node's path, and publishes the new text to
# the repository and (best effort) to the editor mirror.

import logging

from .config import load_config
from .document import load_document, pretty, sync_mirror
from .errors import NodeEditError
from .paths import get_at_path, is_plain_object, path_to_str, set_at_path
from .rows import derive_display, derive_editable, reconstruct, rows_from_value


log = logging.getLogger(__name__)

VIEWING = "viewing"
EDITING = "editing"


def initial_state():
    return {
        "node":   None,
        "mode":   VIEWING,
        "fields": {},
        "error":  "",
    }


# ----------------------------
# reducer
# ----------------------------

def reducer(state, action):
    t = action["type"]
    if t in ("SELECT_NODE", "CANCEL_EDIT", "SAVE_DONE"):
        return {**state,
            "node": action["node"], "mode": VIEWING,
            "fields": action["fields"], "error": "",
        }
    if t == "BEGIN_EDIT":
        return {**state, "mode": EDITING, "error": ""}
    if t == "SET_FIELD":
        return {**state, "fields": {**state["fields"], action["key"]: action["value"]}}
    if t == "SAVE_FAIL":
        return {**state, "error": action["error"]}
    return state


# ----------------------------
# session
# ----------------------------

class NodeEditSession:
    """Viewing/editing state machine for the selected node.

    repository  -- read() -> text, write(text); the whole document
    mirror      -- set_contents(contents, has_changes, skip_update); best effort
    on_select   -- called with the rebuilt node after a save
    notify      -- called with a message when a save is refused
    """

    def __init__(self, repository, mirror=None, on_select=None, notify=None, config=None):
        self.repository = repository
        self.mirror = mirror
        self.on_select = on_select
        self.notify = notify
        self.config = config or load_config()
        self.state = initial_state()

    def dispatch(self, action):
        self.state = reducer(self.state, action)

    # --- state views

    @property
    def node(self):
        return self.state["node"]

    @property
    def mode(self):
        return self.state["mode"]

    @property
    def editing(self):
        return self.state["mode"] == EDITING

    @property
    def fields(self):
        return self.state["fields"]

    @property
    def rows(self):
        node = self.state["node"]
        return (node or {}).get("text") or []

    @property
    def path(self):
        node = self.state["node"]
        return tuple((node or {}).get("path") or ())

    def display_text(self):
        return derive_display(self.rows, indent=self.config["indent"])

    def path_text(self):
        return path_to_str(self.path)

    def _seed_fields(self, node):
        rows = (node or {}).get("text") or []
        return derive_editable(rows, root_field=self.config["root_field"])

    # --- transitions

    def select(self, node):
        self.dispatch({"type": "SELECT_NODE", "node": node, "fields": self._seed_fields(node)})

    def begin_edit(self):
        if self.node is None:
            return
        self.dispatch({"type": "BEGIN_EDIT"})

    def set_field(self, key, value):
        if not self.editing:
            return
        if key not in self.state["fields"]:
            raise KeyError(key)
        self.dispatch({"type": "SET_FIELD", "key": key, "value": value})

    def cancel(self):
        node = self.node
        self.dispatch({"type": "CANCEL_EDIT", "node": node, "fields": self._seed_fields(node)})

    def save(self):
        """Commit the edited fields into the document.

        Returns the new document text, or None when nothing was written.
        """
        if not self.editing:
            return None
        cfg = self.config
        p = self.path
        try:
            parsed = reconstruct(self.rows, self.fields,
                                 root_field=cfg["root_field"],
                                 invalid_number=cfg["invalid_number"])
            root = load_document(self.repository.read())
            existing = get_at_path(root, p)
            if is_plain_object(existing) and is_plain_object(parsed):
                value = {**existing, **parsed}
            else:
                value = parsed
            new_root = set_at_path(root, p, value)
        except Exception as e:
            msg = str(e) or type(e).__name__
            log.warning("save of %s refused: %s", path_to_str(p), msg,
                        exc_info=not isinstance(e, NodeEditError))
            self.dispatch({"type": "SAVE_FAIL", "error": msg})
            if self.notify is not None:
                self.notify(msg)
            return None

        text = pretty(new_root, indent=cfg["indent"])
        self.repository.write(text)
        sync_mirror(self.mirror, text)
        log.info("saved node at %s", path_to_str(p))

        node = {**(self.node or {}), "path": p, "text": rows_from_value(parsed)}
        self.dispatch({"type": "SAVE_DONE", "node": node, "fields": self._seed_fields(node)})
        if self.on_select is not None:
            self.on_select(node)
        return text
