# nodeedit.py
# JSON Node Editor
# v0.1-draft
#
# Host window for the node session: a tree of the document, a text pane
# mirroring the whole document, and a dialog that edits the selected node.

import logging
import sys
import tkinter as tk
from tkinter import ttk
from tkinter import filedialog, messagebox
from pathlib import Path

from .config import extract_embedded_editor_config, load_config, setup_logging
from .document import FileDocument, MemoryDocument, load_document, pretty
from .errors import ParseError
from .paths import get_at_path, last_key, path_to_str
from .rows import field_kind, is_single_scalar, node_at_path, primitive_rows
from .session import NodeEditSession


log = logging.getLogger(__name__)


# ----------------------------
# globals
# ----------------------------

g_state = {
    "doc":       None,
    "file_path": None,
    "selected":  None,
}

g_config = {}

widgets = {}

g_paths = {}


# ----------------------------
# session collaborators
# ----------------------------

class AppDocument(MemoryDocument):
    """The open document; writing it refreshes the tree."""

    def write(self, text):
        super().write(text)
        dispatch({"type": "DOC_WRITTEN", "doc": load_document(text)})


class TextMirror:
    """Shows the whole document in the right-hand text pane."""

    def set_contents(self, contents, has_changes=False, skip_update=False):
        t = widgets["text"]
        t.configure(state="normal")
        t.delete("1.0", "end")
        t.insert("1.0", contents)
        t.configure(state="disabled")


g_document = AppDocument()
g_mirror = TextMirror()


# ----------------------------
# state
# ----------------------------

def reducer(state, action):
    t = action["type"]
    if t == "OPENED":
        return {**state, "doc": action["doc"], "file_path": action["file_path"], "selected": ()}
    if t == "DOC_WRITTEN":
        return {**state, "doc": action["doc"]}
    if t == "SELECTED":
        return {**state, "selected": tuple(action["path"])}
    if t == "SAVED_AS":
        return {**state, "file_path": action["file_path"]}
    return state

def dispatch(action):
    global g_state
    old, g_state = g_state, reducer(g_state, action)
    if g_state["doc"] is not old["doc"]:
        fill_tree(g_state["doc"])
    if g_state["doc"] is not old["doc"] or g_state["file_path"] != old["file_path"]:
        show_title()
    if g_state["selected"] != old["selected"]:
        show_selection(g_state["selected"])


# ----------------------------
# tree
# ----------------------------

def tree_label(p, value):
    shape = "{}" if isinstance(value, dict) else "[]" if isinstance(value, list) else repr(value)
    if not p:
        return f"$ {shape}"
    k = last_key(p)
    name = f"[{k}]" if isinstance(k, int) else k
    return f"{name}: {shape}"

def fill_tree(doc):
    tree = widgets["tree"]
    tree.delete(*tree.get_children(""))
    g_paths.clear()
    if doc is None:
        return

    def add(parent_iid, p, value):
        iid = tree.insert(parent_iid, "end", text=tree_label(p, value), open=not p)
        g_paths[iid] = p
        if isinstance(value, dict):
            children = value.items()
        elif isinstance(value, list):
            children = enumerate(value)
        else:
            return
        for k, v in children:
            add(iid, p + (k,), v)

    add("", (), doc)

def show_selection(p):
    widgets["path"].configure(text=path_to_str(p))
    for iid, ip in g_paths.items():
        if ip == p:
            widgets["tree"].see(iid)
            break

def show_title():
    cfg = extract_embedded_editor_config(g_state["doc"]) or {}
    title = "JSON Node Editor"
    if isinstance(cfg.get("window-title"), str) and cfg["window-title"].strip():
        title += ": " + cfg["window-title"].strip()
    elif g_state["file_path"]:
        title += ": " + g_state["file_path"].name
    widgets["root"].title(title)

def handle_tree_select(event=None):
    sel = widgets["tree"].selection()
    if sel and sel[0] in g_paths:
        dispatch({"type": "SELECTED", "path": g_paths[sel[0]]})

def handle_edit_node(event=None):
    if g_state["doc"] is not None and g_state["selected"] is not None:
        NodeDialog(node_at_path(g_state["doc"], g_state["selected"]))
    return "break"


# ----------------------------
# files
# ----------------------------

def open_file(p):
    try:
        doc = load_document(FileDocument(p).read())
    except (OSError, ParseError) as e:
        messagebox.showerror("Open", f"Could not open {p}:\n{e}")
        return
    text = pretty(doc, indent=g_config["indent"])
    MemoryDocument.write(g_document, text)
    g_mirror.set_contents(contents=text)
    log.info("opened %s", p)
    dispatch({"type": "OPENED", "doc": doc, "file_path": Path(p)})

def handle_open():
    p = filedialog.askopenfilename(title="Open JSON", filetypes=[("JSON files", "*.json"), ("All files", "*.*")])
    if p:
        open_file(p)

def handle_save():
    if g_state["doc"] is None:
        return
    p = g_state["file_path"] or filedialog.asksaveasfilename(title="Save JSON", defaultextension=".json")
    if not p:
        return
    try:
        FileDocument(p).write(g_document.read())
    except OSError as e:
        messagebox.showerror("Save", f"Could not write {p}:\n{e}")
        return
    dispatch({"type": "SAVED_AS", "file_path": Path(p)})


# ----------------------------
# node dialog
# ----------------------------

class NodeDialog:
    """Viewing/editing dialog for one node, driven by a NodeEditSession."""

    def __init__(self, node):
        self.win = tk.Toplevel(widgets["root"])
        self.win.title("Node")
        self.win.transient(widgets["root"])
        self.win.columnconfigure(0, weight=1)
        self.vars = {}
        self.session = NodeEditSession(
            g_document, mirror=g_mirror,
            on_select=lambda n: dispatch({"type": "SELECTED", "path": n["path"]}),
            notify=self.notice, config=g_config,
        )
        self.session.select(node)
        self.render()

    def notice(self, msg):
        messagebox.showerror("Save", f"Invalid input. Please fix the values before saving.\n\n{msg}",
                             parent=self.win)

    def render(self):
        for c in self.win.winfo_children():
            c.destroy()
        self.vars.clear()
        s = self.session

        bar = ttk.Frame(self.win)
        bar.grid(row=0, column=0, sticky="ew", padx=8, pady=8)
        ttk.Label(bar, text="Content").pack(side="left")
        if s.editing:
            actions = [("Save", self.on_save), ("Cancel", self.on_cancel)]
        else:
            actions = [("Edit", self.on_edit), ("Close", self.win.destroy)]
        for label, command in reversed(actions):
            ttk.Button(bar, text=label, command=command).pack(side="right", padx=2)

        body = ttk.Frame(self.win)
        body.grid(row=1, column=0, sticky="nsew", padx=8)
        body.columnconfigure(1, weight=1)
        if s.editing:
            self.fill_inputs(body)
        else:
            view = tk.Text(body, width=60, height=12, wrap="none")
            view.insert("1.0", s.display_text())
            view.configure(state="disabled")
            view.grid(row=0, column=0, columnspan=2, sticky="nsew")

        ttk.Label(self.win, text="JSON Path").grid(row=2, column=0, sticky="w", padx=8)
        ttk.Label(self.win, text=s.path_text()).grid(row=3, column=0, sticky="w", padx=8, pady=(0, 8))

    def fill_inputs(self, body):
        prims = primitive_rows(self.session.rows)
        single = is_single_scalar(prims)
        for r, row in enumerate(prims):
            key = g_config["root_field"] if single else row.get("key")
            if not key:
                continue
            value = self.session.fields.get(key, "")
            if not single:
                ttk.Label(body, text=key).grid(row=r, column=0, sticky="w", padx=(0, 8))
            if field_kind(row["type"]) == "boolean":
                var = tk.BooleanVar(value=bool(value))
                ttk.Checkbutton(body, variable=var).grid(row=r, column=1, sticky="w")
            else:
                var = tk.StringVar(value=str(value))
                ttk.Entry(body, textvariable=var, width=50).grid(row=r, column=1, sticky="ew")
            self.vars[key] = var

    def on_edit(self):
        self.session.begin_edit()
        self.render()

    def on_cancel(self):
        self.session.cancel()
        self.render()

    def on_save(self):
        for key, var in self.vars.items():
            self.session.set_field(key, var.get())
        if self.session.save() is not None:
            self.win.destroy()


# ----------------------------
# main
# ----------------------------

def build_window(root):
    root.option_add("*tearOff", 0)
    menubar = tk.Menu(root)
    file_menu = tk.Menu(menubar)
    file_menu.add_command(label="Open", accelerator="Ctrl+O", command=handle_open)
    file_menu.add_command(label="Save", accelerator="Ctrl+S", command=handle_save)
    file_menu.add_separator()
    file_menu.add_command(label="Exit", command=root.destroy)
    menubar.add_cascade(label="File", menu=file_menu)
    menubar.add_command(label="Edit Node", command=handle_edit_node)
    root.config(menu=menubar)

    panes = ttk.PanedWindow(root, orient="horizontal")
    panes.pack(fill="both", expand=True)
    tree = ttk.Treeview(panes, show="tree")
    text = tk.Text(panes, wrap="none", state="disabled")
    panes.add(tree, weight=1)
    panes.add(text, weight=3)
    path = ttk.Label(root, text="", anchor="e")
    path.pack(fill="x", padx=6, pady=4)
    widgets.update(root=root, tree=tree, text=text, path=path)

    tree.bind("<<TreeviewSelect>>", handle_tree_select)
    tree.bind("<Double-1>", handle_edit_node)
    tree.bind("<Return>", handle_edit_node)
    root.bind_all("<Control-o>", lambda e: handle_open())
    root.bind_all("<Control-s>", lambda e: handle_save())

def main():
    g_config.update(load_config())
    setup_logging(g_config["log_level"])

    root = tk.Tk()
    build_window(root)
    show_title()
    if len(sys.argv) > 1:
        open_file(sys.argv[-1])
    root.mainloop()


if __name__ == "__main__":
    main()
