"""Reconcile a fresh analysis against the previous mapping snapshot."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any

from ..analysis.models import AnalysisResult, RelatedFile
from .models import ChangeType, MappingChangeEntry, MappingSnapshot

logger = logging.getLogger(__name__)

ADDED_SUMMARY = "New implementation"
FILES_CHANGED_SUMMARY = "Implementation files changed"
REMOVED_SUMMARY = "Requirement removed"


def _status_text(status: Any) -> str:
    return getattr(status, "value", status)


def _file_diff(
    current: Sequence[RelatedFile],
    previous: Sequence[RelatedFile],
) -> tuple[list[RelatedFile], list[RelatedFile]]:
    """Files only in current, files only in previous; compared by path alone."""
    current_paths = {f.file_path for f in current}
    previous_paths = {f.file_path for f in previous}
    added = [f for f in current if f.file_path not in previous_paths]
    removed = [f for f in previous if f.file_path not in current_paths]
    return added, removed


def _compare(entry: AnalysisResult, old: AnalysisResult) -> MappingChangeEntry:
    status_changed = entry.status != old.status
    added_files, removed_files = _file_diff(entry.all_files(), old.all_files())
    files_changed = bool(added_files or removed_files)

    if not status_changed and not files_changed:
        return MappingChangeEntry(
            object_id=entry.object_id,
            object_title=entry.object_title,
            change_type=ChangeType.UNCHANGED,
            previous_status=old.status,
            current_status=entry.status,
        )

    parts = []
    if status_changed:
        parts.append(f"{_status_text(old.status)} → {_status_text(entry.status)}")
    if files_changed:
        parts.append(FILES_CHANGED_SUMMARY)

    return MappingChangeEntry(
        object_id=entry.object_id,
        object_title=entry.object_title,
        change_type=ChangeType.CHANGED,
        previous_status=old.status,
        current_status=entry.status,
        change_summary="; ".join(parts),
        added_files=added_files,
        removed_files=removed_files,
    )


def compute_changelog(
    new_entries: Sequence[AnalysisResult],
    previous: MappingSnapshot | None,
) -> list[MappingChangeEntry]:
    """
    Classify every object seen in either snapshot.

    1. New entry with no previous counterpart -> added (all files added)
    2. Status or file-path set differs        -> changed
    3. Otherwise                              -> unchanged
    4. Previous entry absent from the new run -> removed (all files removed)

    File sets pool implementation and test files and compare paths only.
    Output: new entries in order, then removed entries in previous order.

    Args:
        new_entries: Results of the current analysis
        previous: Last persisted snapshot, or None on the first scan

    Returns:
        One MappingChangeEntry per object id
    """
    old_map: dict[str, AnalysisResult] = {}
    if previous is not None:
        for old in previous.entries:
            old_map.setdefault(old.object_id, old)

    changelog: list[MappingChangeEntry] = []
    processed: set[str] = set()

    for entry in new_entries:
        if entry.object_id in processed:
            logger.warning(f"Duplicate analysis entry for {entry.object_id!r}; keeping the first")
            continue
        processed.add(entry.object_id)

        old = old_map.get(entry.object_id)
        if old is None:
            changelog.append(
                MappingChangeEntry(
                    object_id=entry.object_id,
                    object_title=entry.object_title,
                    change_type=ChangeType.ADDED,
                    current_status=entry.status,
                    change_summary=ADDED_SUMMARY,
                    added_files=entry.all_files(),
                )
            )
            continue

        changelog.append(_compare(entry, old))

    for object_id, old in old_map.items():
        if object_id in processed:
            continue
        changelog.append(
            MappingChangeEntry(
                object_id=object_id,
                object_title=old.object_title,
                change_type=ChangeType.REMOVED,
                previous_status=old.status,
                change_summary=REMOVED_SUMMARY,
                removed_files=old.all_files(),
            )
        )

    return changelog


__all__ = ["compute_changelog"]
