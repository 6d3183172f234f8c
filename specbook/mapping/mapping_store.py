"""MappingStore - the persisted mapping snapshot: .spec/mapping.json"""

from __future__ import annotations

import json
import logging
from pathlib import Path

from pydantic import ValidationError

from ..store.index_store import write_json_atomic
from ..workspace import Workspace
from .models import MappingSnapshot

logger = logging.getLogger(__name__)


class MappingStore:
    """Read and replace the workspace's current mapping snapshot."""

    def __init__(self, workspace: Workspace):
        self.workspace = workspace

    @property
    def path(self) -> Path:
        return self.workspace.mapping_path

    def read(self) -> MappingSnapshot | None:
        """
        Load the last snapshot.

        Returns:
            The snapshot, or None when there is none yet or it is corrupt
        """
        path = self.path
        if not path.exists():
            return None
        try:
            return MappingSnapshot.model_validate(json.loads(path.read_text(encoding="utf-8")))
        except (OSError, json.JSONDecodeError, ValidationError) as e:
            logger.warning(f"Mapping snapshot {path} is corrupt, ignoring it: {e}")
            return None

    def write(self, snapshot: MappingSnapshot) -> None:
        """Replace the snapshot on disk."""
        text = json.dumps(snapshot.to_dict(), indent=2, ensure_ascii=False) + "\n"
        write_json_atomic(self.path, text)
        logger.info(f"Saved {self.path} ({len(snapshot.entries)} entries)")


__all__ = ["MappingStore"]
