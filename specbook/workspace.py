"""Workspace - explicit session context passed to every store operation.

Layout under the workspace root:

    .spec/specs.json              object index
    .spec/specs/{id}.md           object body (present iff non-empty)
    .spec/specs/{id}.actions.json actions annotation
    .spec/impls/{id}.json         implementation files annotation
    .spec/tests/{id}.json         test files annotation
    .spec/mapping.json            last mapping snapshot
"""

from __future__ import annotations

import asyncio
import threading
import weakref
from dataclasses import dataclass
from pathlib import Path

SPEC_DIR = ".spec"
SPEC_INDEX_FILE = "specs.json"
SPECS_SUBDIR = "specs"
SPEC_FILE_EXT = ".md"
SPEC_ACTION_FILE_EXT = ".actions.json"
IMPLS_SUBDIR = "impls"
TESTS_SUBDIR = "tests"
MAPPING_FILE = "mapping.json"

_locks: dict[Path, threading.RLock] = {}
_locks_guard = threading.Lock()

_scan_locks: weakref.WeakKeyDictionary[asyncio.AbstractEventLoop, dict[Path, asyncio.Lock]] = (
    weakref.WeakKeyDictionary()
)


def workspace_lock(root: Path) -> threading.RLock:
    """Return the process-wide lock serializing writers of one workspace."""
    key = Path(root).resolve()
    with _locks_guard:
        lock = _locks.get(key)
        if lock is None:
            lock = threading.RLock()
            _locks[key] = lock
        return lock


def workspace_scan_lock(root: Path) -> asyncio.Lock:
    """
    Return the asyncio lock serializing scans of one workspace.

    Locks are per running event loop, keyed by the resolved root.
    """
    loop = asyncio.get_running_loop()
    key = Path(root).resolve()
    with _locks_guard:
        locks = _scan_locks.setdefault(loop, {})
        lock = locks.get(key)
        if lock is None:
            lock = asyncio.Lock()
            locks[key] = lock
        return lock


@dataclass(frozen=True)
class Workspace:
    """
    Identity of one spec workspace.

    Every store takes a Workspace explicitly; nothing keeps a "current
    workspace" in module state.
    """

    root: Path

    def __post_init__(self):
        object.__setattr__(self, "root", Path(self.root))

    @property
    def spec_dir(self) -> Path:
        return self.root / SPEC_DIR

    @property
    def index_path(self) -> Path:
        return self.spec_dir / SPEC_INDEX_FILE

    @property
    def specs_dir(self) -> Path:
        return self.spec_dir / SPECS_SUBDIR

    @property
    def impls_dir(self) -> Path:
        return self.spec_dir / IMPLS_SUBDIR

    @property
    def tests_dir(self) -> Path:
        return self.spec_dir / TESTS_SUBDIR

    @property
    def mapping_path(self) -> Path:
        return self.spec_dir / MAPPING_FILE

    @property
    def lock(self) -> threading.RLock:
        return workspace_lock(self.root)

    @property
    def scan_lock(self) -> asyncio.Lock:
        return workspace_scan_lock(self.root)


__all__ = [
    "Workspace",
    "workspace_lock",
    "workspace_scan_lock",
    "SPEC_DIR",
    "SPEC_INDEX_FILE",
    "SPECS_SUBDIR",
    "SPEC_FILE_EXT",
    "SPEC_ACTION_FILE_EXT",
    "IMPLS_SUBDIR",
    "TESTS_SUBDIR",
    "MAPPING_FILE",
]
