import pytest

from nodeedit.document import (
    FileDocument, MemoryDocument, NullMirror, load_document,
    parse_json_text, pretty, sync_mirror,
)
from nodeedit.errors import ParseError


def test_pretty_keeps_unicode():
    assert pretty({"a": "ø"}) == '{\n  "a": "ø"\n}'


def test_parse_json_text():
    assert parse_json_text("[1]") == ([1], None)
    obj, err = parse_json_text("{")
    assert obj is None
    assert "line 1" in err


def test_load_document():
    assert load_document("") is None
    assert load_document('{"a": 1}') == {"a": 1}
    with pytest.raises(ParseError) as ei:
        load_document('{"a": }')
    assert ei.value.lineno == 1


def test_memory_document():
    repo = MemoryDocument("{}")
    assert repo.read() == "{}"
    repo.write("[]")
    assert repo.read() == "[]"


def test_file_document(tmp_path):
    path = tmp_path / "sub" / "doc.json"
    repo = FileDocument(path)
    assert repo.read() == ""
    repo.write('{"a": 1}')
    assert path.read_text(encoding="utf-8") == '{"a": 1}\n'
    assert repo.read() == '{"a": 1}\n'
    assert list(path.parent.iterdir()) == [path]


def test_sync_mirror(mirror, broken_mirror):
    assert sync_mirror(mirror, "{}") is True
    assert mirror.calls == [{"contents": "{}", "has_changes": False, "skip_update": True}]
    assert sync_mirror(broken_mirror, "{}") is False
    assert sync_mirror(None, "{}") is False
    assert sync_mirror(NullMirror(), "{}") is True
