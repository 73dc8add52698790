import json

import pytest

from nodeedit.document import MemoryDocument, pretty
from nodeedit.rows import node_at_path
from nodeedit.session import EDITING, VIEWING, NodeEditSession, reducer, initial_state


DOC = {
    "customer": [
        {"name": "Ada", "age": 36, "vip": False, "tags": ["a"], "address": {"city": "Oslo"}},
        {"name": "Bob", "age": 40},
    ],
    "count": 2,
}


def make_session(doc=DOC, path=(), mirror=None, config=None):
    repo = MemoryDocument(pretty(doc))
    selected = []
    notices = []
    session = NodeEditSession(repo, mirror=mirror, on_select=selected.append,
                              notify=notices.append, config=config)
    session.select(node_at_path(doc, path))
    return session, repo, selected, notices


def test_select_starts_viewing_with_seeded_fields():
    session, _, _, _ = make_session(path=("customer", 0))
    assert session.mode == VIEWING
    assert session.fields == {"name": "Ada", "age": 36, "vip": False}
    assert session.path_text() == '$["customer"][0]'
    assert json.loads(session.display_text()) == {"name": "Ada", "age": 36, "vip": False}


def test_set_field_only_while_editing():
    session, _, _, _ = make_session(path=("customer", 0))
    session.set_field("name", "Zed")
    assert session.fields["name"] == "Ada"
    session.begin_edit()
    assert session.mode == EDITING
    session.set_field("name", "Zed")
    assert session.fields["name"] == "Zed"
    with pytest.raises(KeyError):
        session.set_field("tags", "x")


def test_cancel_restores_fields():
    session, repo, _, _ = make_session(path=("customer", 0))
    before = repo.read()
    session.begin_edit()
    session.set_field("age", "99")
    session.cancel()
    assert session.mode == VIEWING
    assert session.fields["age"] == 36
    assert repo.read() == before


def test_save_outside_editing_does_nothing():
    session, repo, selected, _ = make_session(path=("customer", 0))
    before = repo.read()
    assert session.save() is None
    assert repo.read() == before
    assert selected == []


def test_save_object_node_keeps_nested_children(mirror):
    session, repo, selected, notices = make_session(path=("customer", 0), mirror=mirror)
    session.begin_edit()
    session.set_field("name", "Ada L.")
    session.set_field("age", "37")
    session.set_field("vip", True)
    text = session.save()

    doc = json.loads(repo.read())
    assert text == repo.read()
    assert doc["customer"][0] == {
        "name": "Ada L.", "age": 37, "vip": True,
        "tags": ["a"], "address": {"city": "Oslo"},
    }
    assert doc["customer"][1] == DOC["customer"][1]
    assert doc["count"] == 2
    assert session.mode == VIEWING
    assert notices == []

    assert mirror.calls == [{"contents": text, "has_changes": False, "skip_update": True}]

    assert len(selected) == 1
    node = selected[0]
    assert node["path"] == ("customer", 0)
    assert node["text"] == [
        {"key": "name", "value": "Ada L.", "type": "string"},
        {"key": "age", "value": 37, "type": "number"},
        {"key": "vip", "value": True, "type": "boolean"},
    ]
    assert session.node is node


def test_save_scalar_node():
    session, repo, selected, _ = make_session(path=("customer", 1, "age"))
    assert session.display_text() == "40"
    session.begin_edit()
    session.set_field("__root", "41")
    session.save()
    assert json.loads(repo.read())["customer"][1]["age"] == 41
    assert selected[0]["text"] == [{"key": None, "value": 41, "type": "number"}]


def test_save_array_node():
    doc = {"items": ["a", "b"]}
    session, repo, _, _ = make_session(doc=doc, path=("items",))
    session.begin_edit()
    session.set_field("1", "B")
    session.save()
    assert json.loads(repo.read()) == {"items": ["a", "B"]}


def test_save_root_object_merges():
    session, repo, _, _ = make_session(path=())
    session.begin_edit()
    session.set_field("count", "3")
    session.save()
    doc = json.loads(repo.read())
    assert doc["count"] == 3
    assert doc["customer"] == DOC["customer"]


def test_save_reads_latest_document():
    session, repo, _, _ = make_session(path=("customer", 1))
    changed = json.loads(repo.read())
    changed["count"] = 5
    repo.write(pretty(changed))
    session.begin_edit()
    session.set_field("name", "Bobby")
    session.save()
    doc = json.loads(repo.read())
    assert doc["count"] == 5
    assert doc["customer"][1]["name"] == "Bobby"


def test_save_into_empty_repository():
    repo = MemoryDocument("")
    session = NodeEditSession(repo)
    session.select({"path": ("a", 0), "text": [{"key": "x", "value": "", "type": "string"}]})
    session.begin_edit()
    session.set_field("x", "y")
    session.save()
    assert json.loads(repo.read()) == {"a": [{"x": "y"}]}


def test_save_with_invalid_document_is_refused(mirror):
    session, repo, selected, notices = make_session(path=("customer", 0), mirror=mirror)
    repo.write("{not json")
    session.begin_edit()
    session.set_field("name", "X")
    assert session.save() is None
    assert repo.read() == "{not json"
    assert session.mode == EDITING
    assert session.fields["name"] == "X"
    assert len(notices) == 1
    assert "line 1" in notices[0]
    assert session.state["error"] == notices[0]
    assert mirror.calls == []
    assert selected == []


def test_save_with_bad_number_is_refused():
    session, repo, _, notices = make_session(path=("customer", 0))
    before = repo.read()
    session.begin_edit()
    session.set_field("age", "old")
    assert session.save() is None
    assert repo.read() == before
    assert session.mode == EDITING
    assert len(notices) == 1
    assert "age" in notices[0]


def test_save_with_lenient_numbers(config):
    config["invalid_number"] = "null"
    session, repo, _, notices = make_session(path=("customer", 0), config=config)
    session.begin_edit()
    session.set_field("age", "old")
    session.save()
    assert json.loads(repo.read())["customer"][0]["age"] is None
    assert notices == []


def test_broken_mirror_does_not_abort_save(broken_mirror, caplog):
    session, repo, selected, notices = make_session(path=("customer", 1), mirror=broken_mirror)
    session.begin_edit()
    session.set_field("name", "Robert")
    with caplog.at_level("WARNING", logger="nodeedit"):
        text = session.save()
    assert text is not None
    assert json.loads(repo.read())["customer"][1]["name"] == "Robert"
    assert session.mode == VIEWING
    assert notices == []
    assert len(selected) == 1
    assert "mirror" in caplog.text


def test_reducer_ignores_unknown_actions():
    state = initial_state()
    assert reducer(state, {"type": "NOPE"}) is state


class UnreadableDocument(MemoryDocument):
    def read(self):
        raise OSError("disk gone")


def test_save_with_unreadable_repository_is_refused(mirror):
    session = NodeEditSession(UnreadableDocument(), mirror=mirror)
    notices = []
    session.notify = notices.append
    session.select(node_at_path(DOC, ("customer", 1)))
    session.begin_edit()
    session.set_field("name", "Robert")
    assert session.save() is None
    assert session.mode == EDITING
    assert notices == ["disk gone"]
    assert mirror.calls == []


def test_save_with_out_of_range_index_key_is_refused():
    doc = {"m": {"0": "a", "99999999999999999999": "b"}}
    session, repo, selected, notices = make_session(doc=doc, path=("m",))
    before = repo.read()
    session.begin_edit()
    assert session.save() is None
    assert repo.read() == before
    assert session.mode == EDITING
    assert len(notices) == 1
    assert "99999999999999999999" in notices[0]
    assert selected == []


def test_save_node_with_only_composite_rows_replaces_array_with_object():
    doc = {"grid": [[1], [2]], "keep": 1}
    session, repo, selected, notices = make_session(doc=doc, path=("grid",))
    assert session.fields == {}
    session.begin_edit()
    session.save()
    assert json.loads(repo.read()) == {"grid": {}, "keep": 1}
    assert notices == []
    assert selected[0]["text"] == []


def test_save_node_with_only_composite_rows_keeps_object_children():
    doc = {"o": {"a": [1], "b": {"c": 2}}}
    session, repo, _, _ = make_session(doc=doc, path=("o",))
    session.begin_edit()
    session.save()
    assert json.loads(repo.read()) == doc
