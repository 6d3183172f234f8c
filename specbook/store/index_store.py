"""IndexStore - the single versioned document holding every object's metadata."""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path

from pydantic import ValidationError

from ..workspace import Workspace
from .models import ObjectIndex

logger = logging.getLogger(__name__)


def write_json_atomic(target_path: Path, text: str) -> None:
    """
    Atomically replace target_path with text.

    Uses write-to-temp-then-rename in the target's directory, creating the
    directory on demand.
    """
    target_path.parent.mkdir(parents=True, exist_ok=True)

    fd, temp_path = tempfile.mkstemp(
        suffix=".tmp",
        prefix=f"{target_path.stem}_",
        dir=target_path.parent,
    )
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(text)
        os.replace(temp_path, target_path)
    except Exception:
        # Clean up temp file on error
        try:
            os.unlink(temp_path)
        except OSError:
            pass
        raise


class IndexStore:
    """
    Flat list of object metadata: .spec/specs.json

    Reads never fail. A missing document and a corrupt one both come back
    as an empty version-tagged index; only the corrupt case is logged.
    """

    def __init__(self, workspace: Workspace):
        self.workspace = workspace

    @property
    def path(self) -> Path:
        return self.workspace.index_path

    def read_all(self) -> ObjectIndex:
        """Read the index document, or an empty default."""
        path = self.path
        if not path.exists():
            return ObjectIndex()

        try:
            raw = path.read_text(encoding="utf-8")
            return ObjectIndex.model_validate(json.loads(raw))
        except (OSError, json.JSONDecodeError, ValidationError) as e:
            logger.warning(f"Object index {path} is corrupt, treating as empty: {e}")
            return ObjectIndex()

    def write_all(self, index: ObjectIndex) -> None:
        """Overwrite the whole index document."""
        text = json.dumps(index.to_dict(), indent=2, ensure_ascii=False) + "\n"
        write_json_atomic(self.path, text)
        logger.debug(f"Wrote {len(index.nodes)} objects to {self.path}")


__all__ = ["IndexStore", "write_json_atomic"]
