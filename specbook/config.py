"""
Configuration management for specbook.

Settings live in ~/.specbook/config.json; token usage of every analysis
run is appended to ~/.specbook/token-usage.json.
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import asdict, dataclass, field, fields
from pathlib import Path
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from .analysis.models import TokenUsage

logger = logging.getLogger(__name__)

CONFIG_DIR = Path.home() / ".specbook"
CONFIG_PATH = CONFIG_DIR / "config.json"
TOKEN_USAGE_PATH = CONFIG_DIR / "token-usage.json"

DEFAULT_MODEL = "claude-sonnet-4-20250514"


def _filter_dataclass_fields(data: dict[str, Any], cls: type) -> dict[str, Any]:
    """Filter dict to only include fields that exist in the dataclass."""
    valid_fields = {f.name for f in fields(cls)}
    return {k: v for k, v in data.items() if k in valid_fields}


@dataclass
class AnalysisConfig:
    """Settings for the external analysis call."""

    model: str = DEFAULT_MODEL
    max_tokens: int = 8192
    timeout_seconds: float = 300.0
    temperature: float = 0.0


@dataclass
class ScannerConfig:
    """Limits for the project directory-tree context."""

    max_depth: int = 6
    max_files: int = 500


@dataclass
class SpecbookConfig:
    """Complete specbook configuration."""

    analysis: AnalysisConfig = field(default_factory=AnalysisConfig)
    scanner: ScannerConfig = field(default_factory=ScannerConfig)

    @classmethod
    def load(cls, path: Path | None = None) -> "SpecbookConfig":
        """
        Load configuration from file with defaults.

        A missing or unreadable file yields the defaults. The SPECBOOK_MODEL
        environment variable overrides the configured model.

        Args:
            path: Optional config file path. Defaults to ~/.specbook/config.json

        Returns:
            SpecbookConfig instance
        """
        if path is None:
            path = CONFIG_PATH

        data: dict[str, Any] = {}
        if path.exists():
            try:
                data = json.loads(path.read_text(encoding="utf-8"))
            except (json.JSONDecodeError, OSError) as e:
                logger.warning(f"Ignoring unreadable config {path}: {e}")
                data = {}

        config = cls(
            analysis=AnalysisConfig(**_filter_dataclass_fields(data.get("analysis", {}), AnalysisConfig)),
            scanner=ScannerConfig(**_filter_dataclass_fields(data.get("scanner", {}), ScannerConfig)),
        )

        env_model = os.environ.get("SPECBOOK_MODEL")
        if env_model:
            config.analysis.model = env_model

        return config

    def save(self, path: Path | None = None) -> None:
        """Save configuration to file."""
        if path is None:
            path = CONFIG_PATH

        path.parent.mkdir(parents=True, exist_ok=True)

        with open(path, "w", encoding="utf-8") as f:
            json.dump(
                {
                    "analysis": asdict(self.analysis),
                    "scanner": asdict(self.scanner),
                },
                f,
                indent=2,
            )


# -----------------------------------------------------------------------------
# Token usage ledger
# -----------------------------------------------------------------------------


def read_token_usage(path: Path | None = None) -> list[dict[str, Any]]:
    """Read all recorded token usage records ([] if missing or corrupt)."""
    if path is None:
        path = TOKEN_USAGE_PATH

    if not path.exists():
        return []

    try:
        records = json.loads(path.read_text(encoding="utf-8"))
    except (json.JSONDecodeError, OSError) as e:
        logger.warning(f"Token usage ledger {path} is unreadable, starting over: {e}")
        return []

    return records if isinstance(records, list) else []


def append_token_usage(usage: "TokenUsage", path: Path | None = None) -> None:
    """Append one analysis run's token usage to the ledger."""
    if path is None:
        path = TOKEN_USAGE_PATH

    records = read_token_usage(path)
    records.append(usage.model_dump(by_alias=True))

    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(records, indent=2, ensure_ascii=False) + "\n", encoding="utf-8")


# Default configuration instance
default_config = SpecbookConfig()


__all__ = [
    "AnalysisConfig",
    "ScannerConfig",
    "SpecbookConfig",
    "CONFIG_PATH",
    "TOKEN_USAGE_PATH",
    "DEFAULT_MODEL",
    "append_token_usage",
    "read_token_usage",
    "default_config",
]
