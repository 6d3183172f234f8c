"""AnnotationStore - per-object side annotations stored as JSON lists."""

from __future__ import annotations

import json
import logging
from enum import Enum
from pathlib import Path
from typing import Any

from ..workspace import SPEC_ACTION_FILE_EXT, Workspace

logger = logging.getLogger(__name__)


class AnnotationKind(Enum):
    """Kinds of side annotation an object may carry."""

    ACTIONS = "actions"  # .spec/specs/{id}.actions.json
    IMPLS = "impls"      # .spec/impls/{id}.json
    TESTS = "tests"      # .spec/tests/{id}.json


class AnnotationStore:
    """
    One JSON list per object for a single annotation kind.

    Empty lists are never written: writing [] removes the file, so the
    file's existence is the object's has_<kind> flag.
    """

    def __init__(self, workspace: Workspace, kind: AnnotationKind):
        self.workspace = workspace
        self.kind = kind

    @property
    def directory(self) -> Path:
        if self.kind is AnnotationKind.ACTIONS:
            return self.workspace.specs_dir
        if self.kind is AnnotationKind.IMPLS:
            return self.workspace.impls_dir
        return self.workspace.tests_dir

    def path_for(self, object_id: str) -> Path:
        if self.kind is AnnotationKind.ACTIONS:
            return self.directory / f"{object_id}{SPEC_ACTION_FILE_EXT}"
        return self.directory / f"{object_id}.json"

    def read(self, object_id: str) -> list[dict[str, Any]]:
        """Read the annotation list; [] when missing or unparsable."""
        path = self.path_for(object_id)
        if not path.exists():
            return []
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, OSError) as e:
            logger.warning(f"Ignoring corrupt {self.kind.value} annotation {path}: {e}")
            return []
        if not isinstance(data, list):
            logger.warning(f"Ignoring {self.kind.value} annotation {path}: not a list")
            return []
        return data

    def write(self, object_id: str, items: list[dict[str, Any]]) -> None:
        """Write the annotation list, or remove the file when it is empty."""
        if not items:
            self.delete(object_id)
            return
        self.directory.mkdir(parents=True, exist_ok=True)
        self.path_for(object_id).write_text(
            json.dumps(items, indent=2, ensure_ascii=False) + "\n", encoding="utf-8"
        )

    def delete(self, object_id: str) -> None:
        path = self.path_for(object_id)
        if path.exists():
            path.unlink()

    def exists(self, object_id: str) -> bool:
        return len(self.read(object_id)) > 0


__all__ = ["AnnotationKind", "AnnotationStore"]
