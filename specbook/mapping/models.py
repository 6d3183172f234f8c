"""Mapping snapshot and changelog models."""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from ..analysis.models import AnalysisResult, AnalysisStatus, RelatedFile, TokenUsage
from ..store.models import utc_now_iso

MAPPING_VERSION = "1.0"

# A snapshot entry is an analysis result as it was persisted
MappingEntry = AnalysisResult


class ChangeType(str, Enum):
    """Classification of one object between two snapshots."""

    ADDED = "added"
    CHANGED = "changed"
    REMOVED = "removed"
    UNCHANGED = "unchanged"


class _CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, use_enum_values=True)

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True)


class MappingChangeEntry(_CamelModel):
    """How one object's analysis changed since the previous snapshot."""

    object_id: str = Field(alias="objectId")
    object_title: str = Field(default="", alias="objectTitle")
    change_type: ChangeType = Field(alias="changeType")
    previous_status: AnalysisStatus | None = Field(default=None, alias="previousStatus")
    current_status: AnalysisStatus | None = Field(default=None, alias="currentStatus")
    change_summary: str = Field(default="", alias="changeSummary")
    added_files: list[RelatedFile] = Field(default_factory=list, alias="addedFiles")
    removed_files: list[RelatedFile] = Field(default_factory=list, alias="removedFiles")


class MappingSnapshot(_CamelModel):
    """
    The persisted result of one analysis-and-reconciliation cycle.

    Replaced wholesale on every successful scan.
    """

    version: str = MAPPING_VERSION
    scanned_at: str = Field(default_factory=utc_now_iso, alias="scannedAt")
    directory_tree: str = Field(default="", alias="directoryTree")
    token_usage: TokenUsage = Field(default_factory=TokenUsage, alias="tokenUsage")
    entries: list[MappingEntry] = Field(default_factory=list)
    changelog: list[MappingChangeEntry] = Field(default_factory=list)

    def changes(self) -> list[MappingChangeEntry]:
        """Changelog entries other than unchanged."""
        return [c for c in self.changelog if c.change_type != ChangeType.UNCHANGED]


__all__ = [
    "ChangeType",
    "MAPPING_VERSION",
    "MappingChangeEntry",
    "MappingEntry",
    "MappingSnapshot",
]
