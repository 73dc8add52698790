import pytest

from nodeedit.config import load_config
from nodeedit.document import MemoryDocument


class RecordingMirror:
    def __init__(self):
        self.calls = []

    def set_contents(self, contents, has_changes=False, skip_update=False):
        self.calls.append({"contents": contents, "has_changes": has_changes, "skip_update": skip_update})


class BrokenMirror:
    def set_contents(self, contents, has_changes=False, skip_update=False):
        raise RuntimeError("editor went away")


@pytest.fixture
def config():
    return load_config(environ={})


@pytest.fixture
def mirror():
    return RecordingMirror()


@pytest.fixture
def broken_mirror():
    return BrokenMirror()


@pytest.fixture
def repository():
    return MemoryDocument()
