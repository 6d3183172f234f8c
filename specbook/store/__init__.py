"""Store Layer - hierarchical object store with content-hash change detection."""

from .annotation_store import AnnotationKind, AnnotationStore
from .content_store import ContentStore
from .index_store import IndexStore
from .models import (
    ObjectDetail,
    ObjectIndex,
    ObjectIndexEntry,
    ObjectSummary,
    TreeNode,
    new_object_id,
)
from .object_store import ObjectStore
from .tree import assemble_tree, flatten_tree, walk_tree

__all__ = [
    "AnnotationKind",
    "AnnotationStore",
    "ContentStore",
    "IndexStore",
    "ObjectDetail",
    "ObjectIndex",
    "ObjectIndexEntry",
    "ObjectStore",
    "ObjectSummary",
    "TreeNode",
    "assemble_tree",
    "flatten_tree",
    "new_object_id",
    "walk_tree",
]
