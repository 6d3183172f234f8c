"""
Project directory scanner.

Builds an ASCII tree of the project's source files so the analysis model
matches objects against files that actually exist.
"""

from __future__ import annotations

import logging
from pathlib import Path

logger = logging.getLogger(__name__)

# Directories that are never scanned
IGNORE_DIRS = frozenset({
    "node_modules", ".git", ".next", "dist", "out", "build",
    ".cache", ".turbo", ".vscode", ".idea", "__pycache__",
    "coverage", ".nyc_output", ".spec", ".specbook",
    ".venv", "venv", ".mypy_cache", ".pytest_cache", ".tox",
})

# Source and config extensions worth showing
INCLUDE_EXTS = frozenset({
    ".ts", ".tsx", ".js", ".jsx", ".mjs", ".cjs",
    ".vue", ".svelte",
    ".json", ".yaml", ".yml", ".toml",
    ".css", ".scss", ".less",
    ".html", ".md",
    ".py", ".rs", ".go", ".java", ".kt",
    ".sh", ".sql",
})


def _visible_entries(directory: Path) -> list[Path]:
    """Directories first, then files, each alphabetically; filtered."""
    try:
        entries = list(directory.iterdir())
    except OSError:
        return []

    dirs = sorted(
        (e for e in entries if e.is_dir() and not e.name.startswith(".") and e.name not in IGNORE_DIRS),
        key=lambda p: p.name.lower(),
    )
    files = sorted(
        (e for e in entries if e.is_file() and e.suffix.lower() in INCLUDE_EXTS),
        key=lambda p: p.name.lower(),
    )
    return dirs + files


def scan_project_tree(root: Path | str, max_depth: int = 6, max_files: int = 500) -> str:
    """
    Scan a project directory and return an ASCII directory tree.

    Args:
        root: Project root directory
        max_depth: Deepest directory level to descend into
        max_files: Stop listing after this many files

    Returns:
        Tree text, first line "<root name>/"
    """
    root = Path(root)
    file_count = 0
    truncated = False

    def walk(directory: Path, prefix: str, depth: int) -> list[str]:
        nonlocal file_count, truncated
        if depth > max_depth or truncated:
            return []

        entries = _visible_entries(directory)
        lines: list[str] = []
        for i, entry in enumerate(entries):
            if truncated:
                break
            is_last = i == len(entries) - 1
            connector = "└── " if is_last else "├── "
            child_prefix = "    " if is_last else "│   "

            if entry.is_dir():
                lines.append(f"{prefix}{connector}{entry.name}/")
                lines.extend(walk(entry, prefix + child_prefix, depth + 1))
            else:
                file_count += 1
                if file_count > max_files:
                    truncated = True
                    lines.append(f"{prefix}{connector}... (truncated, {max_files}+ files)")
                    break
                lines.append(f"{prefix}{connector}{entry.name}")
        return lines

    tree_lines = [f"{root.name}/", *walk(root, "", 0)]
    if truncated:
        tree_lines.append(f"\n(Showing first {max_files} source files, more exist)")

    logger.info(f"Scanned {min(file_count, max_files)} files in {root}")
    return "\n".join(tree_lines)


__all__ = ["scan_project_tree", "IGNORE_DIRS", "INCLUDE_EXTS"]
