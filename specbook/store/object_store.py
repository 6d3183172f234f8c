"""
ObjectStore - the system of record for the spec tree.

Composes ContentStore, AnnotationStore and IndexStore into the operations
the host calls: load the tree, add/update/patch/delete/move an object and
read one object's detail.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from ..errors import InvalidOperationError, ObjectNotFoundError
from ..workspace import Workspace
from .annotation_store import AnnotationKind, AnnotationStore
from .content_store import ContentStore
from .index_store import IndexStore
from .models import ObjectDetail, ObjectIndex, ObjectIndexEntry, ObjectSummary, TreeNode, utc_now_iso
from .tree import assemble_tree

logger = logging.getLogger(__name__)


def _ancestor_chain_contains(index: ObjectIndex, start_id: str, target_id: str) -> bool:
    """True if target_id is start_id or one of its ancestors."""
    seen: set[str] = set()
    current: str | None = start_id
    while current is not None and current not in seen:
        if current == target_id:
            return True
        seen.add(current)
        entry = index.find(current)
        current = entry.parent_id if entry else None
    return False


def _collect_subtree(index: ObjectIndex, root_id: str) -> list[str]:
    """Ids of root_id and all its descendants, depth-first."""
    children: dict[str, list[str]] = {}
    for entry in index.nodes:
        if entry.parent_id is not None:
            children.setdefault(entry.parent_id, []).append(entry.id)

    collected: list[str] = []
    seen: set[str] = set()
    stack = [root_id]
    while stack:
        object_id = stack.pop()
        if object_id in seen:
            continue
        seen.add(object_id)
        collected.append(object_id)
        stack.extend(reversed(children.get(object_id, [])))
    return collected


class ObjectStore:
    """
    Object storage with a JSON index plus one Markdown file per object.

    Every read-modify-write of the index runs under the workspace lock, so
    two writers on the same workspace cannot lose each other's updates.
    Reads degrade to empty values on missing or corrupt storage.
    """

    def __init__(self, workspace: Workspace | Path | str):
        if not isinstance(workspace, Workspace):
            workspace = Workspace(Path(workspace))
        self.workspace = workspace
        self.content = ContentStore(workspace)
        self.index = IndexStore(workspace)
        self.annotations = {kind: AnnotationStore(workspace, kind) for kind in AnnotationKind}

    @property
    def lock(self):
        return self.workspace.lock

    # ─── Reads ──────────────────────────────────────────

    def _summarize(self, entry: ObjectIndexEntry) -> ObjectSummary:
        return ObjectSummary(
            id=entry.id,
            parent_id=entry.parent_id,
            title=entry.title,
            completed=entry.completed,
            is_state=entry.is_state,
            has_content=self.content.fingerprint(entry.id) is not None,
            has_actions=self.annotations[AnnotationKind.ACTIONS].exists(entry.id),
            has_impls=self.annotations[AnnotationKind.IMPLS].exists(entry.id),
            has_tests=self.annotations[AnnotationKind.TESTS].exists(entry.id),
            created_at=entry.created_at,
            updated_at=entry.updated_at,
        )

    def list_nodes(self) -> list[ObjectSummary]:
        """All objects as flat summaries, in index order."""
        return [self._summarize(entry) for entry in self.index.read_all().nodes]

    def load_tree(self) -> list[TreeNode]:
        """Read the index, refresh derived flags and assemble the tree."""
        return assemble_tree(self.list_nodes())

    def read_detail(self, object_id: str) -> ObjectDetail | None:
        """Join one index entry with its body and annotation flags."""
        entry = self.index.read_all().find(object_id)
        if entry is None:
            return None

        content = self.content.read(object_id)
        summary = self._summarize(entry)
        return ObjectDetail(
            **summary.model_dump(exclude={"has_content"}),
            content=content,
            has_content=bool(content.strip()),
        )

    # ─── Writes ─────────────────────────────────────────

    def _build_index_entry(self, detail: ObjectDetail) -> ObjectIndexEntry:
        return ObjectIndexEntry(
            id=detail.id,
            parent_id=detail.parent_id,
            title=detail.title,
            completed=detail.completed,
            is_state=detail.is_state,
            content_hash=self.content.fingerprint(detail.id),
            created_at=detail.created_at,
            updated_at=detail.updated_at,
        )

    def _check_parent(self, index: ObjectIndex, object_id: str, parent_id: str | None) -> None:
        """Reject a parent that is missing, the object itself, or one of its descendants."""
        if parent_id is None:
            return
        if parent_id == object_id:
            raise InvalidOperationError("Cannot move an object into its own descendant.")
        if index.find(parent_id) is None:
            raise ObjectNotFoundError(parent_id)
        if _ancestor_chain_contains(index, parent_id, object_id):
            raise InvalidOperationError("Cannot move an object into its own descendant.")

    def add_node(self, detail: ObjectDetail) -> None:
        """
        Add a new object.

        The id is supplied by the caller and must not exist yet. The body is
        written first, then the index entry is appended with the fingerprint
        of what was just written.

        Raises:
            InvalidOperationError: blank title, duplicate id or self-parent
            ObjectNotFoundError: parent_id names no object
        """
        if not detail.title.strip():
            raise InvalidOperationError("Object title must not be empty.")

        with self.lock:
            index = self.index.read_all()
            if index.find(detail.id) is not None:
                raise InvalidOperationError(f"Object {detail.id} already exists.")
            self._check_parent(index, detail.id, detail.parent_id)

            self.content.write(detail.id, detail.content)
            index.nodes.append(self._build_index_entry(detail))
            self.index.write_all(index)

        logger.debug(f"Added object {detail.id}")

    def update_node(self, detail: ObjectDetail) -> None:
        """
        Replace an object's metadata and body with `detail`.

        Full-replace semantics: callers wanting a partial edit read the
        detail first (see patch_node). An unknown id leaves the index as is.

        Raises:
            InvalidOperationError: blank title, or a parent change that
                would create a cycle
            ObjectNotFoundError: new parent_id names no object
        """
        if not detail.title.strip():
            raise InvalidOperationError("Object title must not be empty.")

        with self.lock:
            index = self.index.read_all()
            pos = index.position(detail.id)
            if pos >= 0 and index.nodes[pos].parent_id != detail.parent_id:
                self._check_parent(index, detail.id, detail.parent_id)

            self.content.write(detail.id, detail.content)

            if pos >= 0:
                index.nodes[pos] = self._build_index_entry(detail)
            else:
                logger.warning(f"update_node: object {detail.id} is not in the index")
            self.index.write_all(index)

    def patch_node(self, object_id: str, **changes: Any) -> ObjectDetail:
        """
        Merge `changes` into an existing object and save it.

        Keys are ObjectDetail field names (title, content, completed,
        is_state, parent_id). updated_at is refreshed unless given.

        Returns:
            The saved detail, re-read so derived flags reflect disk

        Raises:
            ObjectNotFoundError: object_id is not in the index
            InvalidOperationError: unknown or immutable field
        """
        allowed = set(ObjectDetail.model_fields) - {"id", "created_at"}
        unknown = set(changes) - allowed
        if unknown:
            raise InvalidOperationError(f"Cannot patch field(s): {', '.join(sorted(unknown))}")

        with self.lock:
            detail = self.read_detail(object_id)
            if detail is None:
                raise ObjectNotFoundError(object_id)

            changes.setdefault("updated_at", utc_now_iso())
            merged = ObjectDetail.model_validate({**detail.model_dump(), **changes})
            self.update_node(merged)
            return self.read_detail(object_id)

    def delete_node(self, object_id: str) -> list[str]:
        """
        Delete an object and all of its descendants.

        The index write is the commit point: the whole subtree leaves the
        index in one write. Body and annotation files are removed after.

        Returns:
            Ids removed (empty if object_id was unknown)
        """
        with self.lock:
            index = self.index.read_all()
            if index.find(object_id) is None:
                logger.debug(f"delete_node: object {object_id} not found, nothing to do")
                return []

            removed = _collect_subtree(index, object_id)
            removed_set = set(removed)
            index.nodes = [entry for entry in index.nodes if entry.id not in removed_set]
            self.index.write_all(index)

            for removed_id in removed:
                self._delete_files(removed_id)

        logger.debug(f"Deleted {len(removed)} object(s) under {object_id}")
        return removed

    def _delete_files(self, object_id: str) -> None:
        try:
            self.content.delete(object_id)
            for store in self.annotations.values():
                store.delete(object_id)
        except OSError as e:
            logger.warning(f"Could not remove files of deleted object {object_id}: {e}")

    def move_node(self, object_id: str, new_parent_id: str | None) -> None:
        """
        Re-parent an object (new_parent_id=None moves it to the root level).

        Raises:
            ObjectNotFoundError: object or new parent missing
            InvalidOperationError: new parent is the object or a descendant
        """
        with self.lock:
            index = self.index.read_all()
            entry = index.find(object_id)
            if entry is None:
                raise ObjectNotFoundError(object_id)
            self._check_parent(index, object_id, new_parent_id)

            entry.parent_id = new_parent_id
            entry.updated_at = utc_now_iso()
            # content unchanged; recomputed to keep the index consistent with disk
            entry.content_hash = self.content.fingerprint(object_id)
            self.index.write_all(index)

    # ─── Annotations ────────────────────────────────────

    def read_annotations(self, kind: AnnotationKind, object_id: str) -> list[dict[str, Any]]:
        return self.annotations[kind].read(object_id)

    def write_annotations(self, kind: AnnotationKind, object_id: str, items: list[dict[str, Any]]) -> None:
        """Replace one annotation list of an existing object."""
        with self.lock:
            if self.index.read_all().find(object_id) is None:
                raise ObjectNotFoundError(object_id)
            self.annotations[kind].write(object_id, items)


__all__ = ["ObjectStore"]
