"""
Persisted object models for the spec tree.

Pydantic models; documents on disk use camelCase keys via aliases.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

INDEX_VERSION = "1.0"


def utc_now_iso() -> str:
    """Current UTC time as an ISO-8601 string with millisecond precision."""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def new_object_id() -> str:
    """Generate a fresh object id."""
    return str(uuid.uuid4())


class _CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True)


class ObjectIndexEntry(_CamelModel):
    """One node's metadata as stored in the index document."""

    id: str
    parent_id: str | None = Field(default=None, alias="parentId")
    title: str
    completed: bool = False
    is_state: bool = Field(default=False, alias="isState")
    content_hash: str | None = Field(
        default=None,
        validation_alias=AliasChoices("contentFingerprint", "contentHash", "content_hash"),
        serialization_alias="contentFingerprint",
    )
    created_at: str = Field(default_factory=utc_now_iso, alias="createdAt")
    updated_at: str = Field(default_factory=utc_now_iso, alias="updatedAt")


class ObjectIndex(_CamelModel):
    """The whole index document: every node in insertion order."""

    version: str = INDEX_VERSION
    nodes: list[ObjectIndexEntry] = Field(
        default_factory=list,
        validation_alias=AliasChoices("nodes", "specs"),
        serialization_alias="nodes",
    )

    def find(self, object_id: str) -> ObjectIndexEntry | None:
        for entry in self.nodes:
            if entry.id == object_id:
                return entry
        return None

    def position(self, object_id: str) -> int:
        """Index of the entry in `nodes`, or -1."""
        for i, entry in enumerate(self.nodes):
            if entry.id == object_id:
                return i
        return -1


class ObjectSummary(_CamelModel):
    """Node metadata plus derived presence flags, as shown in the tree."""

    id: str
    parent_id: str | None = Field(default=None, alias="parentId")
    title: str
    completed: bool = False
    is_state: bool = Field(default=False, alias="isState")
    has_content: bool = Field(default=False, alias="hasContent")
    has_actions: bool = Field(default=False, alias="hasActions")
    has_impls: bool = Field(default=False, alias="hasImpls")
    has_tests: bool = Field(default=False, alias="hasTests")
    created_at: str = Field(default_factory=utc_now_iso, alias="createdAt")
    updated_at: str = Field(default_factory=utc_now_iso, alias="updatedAt")


class TreeNode(ObjectSummary):
    """
    A summary decorated with its children.

    `children` is None for leaves and is left out of `to_dict()` entirely,
    so consumers can tell a leaf from a node whose list happens to be empty.
    """

    children: list["TreeNode"] | None = None

    def to_dict(self) -> dict[str, Any]:
        data = self.model_dump(by_alias=True, exclude={"children"})
        if self.children is not None:
            data["children"] = [child.to_dict() for child in self.children]
        return data

    def summary(self) -> ObjectSummary:
        """Strip the children, returning the plain summary."""
        return ObjectSummary.model_validate(self.model_dump(exclude={"children"}))


class ObjectDetail(_CamelModel):
    """
    Full-replace payload for add/update and result of read_detail.

    Joins one index entry with its body text and annotation flags.
    """

    id: str
    parent_id: str | None = Field(default=None, alias="parentId")
    title: str
    completed: bool = False
    is_state: bool = Field(default=False, alias="isState")
    content: str = ""
    has_content: bool = Field(default=False, alias="hasContent")
    has_actions: bool = Field(default=False, alias="hasActions")
    has_impls: bool = Field(default=False, alias="hasImpls")
    has_tests: bool = Field(default=False, alias="hasTests")
    created_at: str = Field(default_factory=utc_now_iso, alias="createdAt")
    updated_at: str = Field(default_factory=utc_now_iso, alias="updatedAt")


__all__ = [
    "INDEX_VERSION",
    "ObjectDetail",
    "ObjectIndex",
    "ObjectIndexEntry",
    "ObjectSummary",
    "TreeNode",
    "new_object_id",
    "utc_now_iso",
]
