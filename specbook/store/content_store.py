"""ContentStore - per-object Markdown bodies with SHA-1 change detection."""

from __future__ import annotations

import hashlib
import logging
from pathlib import Path

from ..workspace import SPEC_FILE_EXT, Workspace

logger = logging.getLogger(__name__)


class ContentStore:
    """
    Body text of each object, one file per object: .spec/specs/{id}.md

    A file exists iff the object has non-blank content. The fingerprint is
    a change-detection token only, not an integrity check.
    """

    def __init__(self, workspace: Workspace):
        self.workspace = workspace

    def path_for(self, object_id: str) -> Path:
        return self.workspace.specs_dir / f"{object_id}{SPEC_FILE_EXT}"

    def read(self, object_id: str) -> str:
        """Read an object's body. Returns "" if it has none."""
        path = self.path_for(object_id)
        if not path.exists():
            return ""
        try:
            return path.read_text(encoding="utf-8")
        except OSError as e:
            logger.warning(f"Could not read body {path}: {e}")
            return ""

    def write(self, object_id: str, content: str) -> None:
        """
        Persist an object's body verbatim.

        Blank content (whitespace only) removes the file instead of writing
        an empty one.
        """
        if not content.strip():
            self.delete(object_id)
            return

        self.workspace.specs_dir.mkdir(parents=True, exist_ok=True)
        # newline="" keeps the caller's line endings byte-for-byte
        with open(self.path_for(object_id), "w", encoding="utf-8", newline="") as f:
            f.write(content)

    def delete(self, object_id: str) -> None:
        """Remove an object's body file if present."""
        path = self.path_for(object_id)
        if path.exists():
            path.unlink()
            logger.debug(f"Removed body {path}")

    def fingerprint(self, object_id: str) -> str | None:
        """SHA-1 hex digest of the body file's raw bytes, or None if absent."""
        path = self.path_for(object_id)
        if not path.exists():
            return None
        return hashlib.sha1(path.read_bytes()).hexdigest()

    def has_content(self, object_id: str) -> bool:
        return self.fingerprint(object_id) is not None


__all__ = ["ContentStore"]
