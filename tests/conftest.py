"""Shared fixtures for specbook tests."""

import pytest

from helpers import make_detail
from specbook.store.object_store import ObjectStore
from specbook.workspace import Workspace


@pytest.fixture
def workspace(tmp_path):
    """An empty workspace rooted in a temp directory."""
    return Workspace(tmp_path)


@pytest.fixture
def store(workspace):
    """ObjectStore over the empty workspace."""
    return ObjectStore(workspace)


@pytest.fixture
def populated_store(store):
    """
    Store holding:

        root
          ├── a
          │   └── a1
          └── b
        other
    """
    store.add_node(make_detail("root", "Root", content="# Root body"))
    store.add_node(make_detail("a", "Feature A", parent_id="root", content="A body"))
    store.add_node(make_detail("a1", "Feature A1", parent_id="a"))
    store.add_node(make_detail("b", "Feature B", parent_id="root", completed=True))
    store.add_node(make_detail("other", "Other", is_state=True))
    return store
