"""
MappingService - one scan cycle: analyse the tree, diff, persist.

The previous snapshot stays the persisted "current" state until a scan
fully succeeds; a failed or cancelled analysis writes nothing.
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path

from ..analysis.llm_client import AnalysisService, AnthropicAnalysisService
from ..analysis.orchestrator import AnalysisOrchestrator
from ..analysis.scanner import scan_project_tree
from ..config import TOKEN_USAGE_PATH, SpecbookConfig, append_token_usage
from ..errors import InvalidOperationError
from ..store.object_store import ObjectStore
from ..workspace import Workspace
from .mapping_store import MappingStore
from .models import MappingSnapshot
from .reconcile import compute_changelog

logger = logging.getLogger(__name__)


class MappingService:
    """
    Runs scans for one workspace.

    Scans of one workspace are serialized across every MappingService in
    the event loop; object store reads and writes are never blocked by an
    outstanding scan. Filesystem work runs in worker threads.
    """

    def __init__(
        self,
        workspace: Workspace | Path | str,
        service: AnalysisService | None = None,
        config: SpecbookConfig | None = None,
        usage_ledger: Path | None = TOKEN_USAGE_PATH,
    ):
        """
        Args:
            workspace: Workspace to scan
            service: Analysis service (default: Anthropic)
            config: Settings (default: loaded from ~/.specbook/config.json)
            usage_ledger: Token-usage ledger file, None to skip recording
        """
        if not isinstance(workspace, Workspace):
            workspace = Workspace(Path(workspace))
        self.workspace = workspace
        self.config = config or SpecbookConfig.load()
        self.objects = ObjectStore(workspace)
        self.mappings = MappingStore(workspace)
        if service is None:
            service = AnthropicAnalysisService(timeout_seconds=self.config.analysis.timeout_seconds)
        self.orchestrator = AnalysisOrchestrator(service, self.config.analysis)
        self.usage_ledger = usage_ledger

    def load_mapping(self) -> MappingSnapshot | None:
        """The last persisted snapshot, or None."""
        return self.mappings.read()

    async def scan(self) -> MappingSnapshot:
        """
        Analyse the current tree and replace the mapping snapshot.

        Returns:
            The new snapshot, changelog included

        Raises:
            InvalidOperationError: the tree is empty
            AnalysisServiceError: the analysis call failed or timed out
        """
        async with self.workspace.scan_lock:
            tree = await asyncio.to_thread(self.objects.load_tree)
            if not tree:
                raise InvalidOperationError("No objects in the feature tree. Add objects first.")

            previous = await asyncio.to_thread(self.mappings.read)
            scanner = self.config.scanner
            directory_tree = await asyncio.to_thread(
                scan_project_tree,
                self.workspace.root,
                max_depth=scanner.max_depth,
                max_files=scanner.max_files,
            )

            logger.info("Starting AI analysis...")
            outcome = await self.orchestrator.analyze(
                tree,
                workspace_path=str(self.workspace.root),
                directory_tree=directory_tree,
            )

            changelog = compute_changelog(outcome.results, previous)
            snapshot = MappingSnapshot(
                directory_tree=outcome.directory_tree,
                token_usage=outcome.token_usage,
                entries=outcome.results,
                changelog=changelog,
            )
            await asyncio.to_thread(self.mappings.write, snapshot)

            if self.usage_ledger is not None:
                try:
                    await asyncio.to_thread(append_token_usage, outcome.token_usage, self.usage_ledger)
                except OSError as e:
                    logger.warning(f"Could not record token usage in {self.usage_ledger}: {e}")

            logger.info(
                f"Scan complete: {len(snapshot.entries)} entries, {len(snapshot.changes())} changes"
            )
            return snapshot

    def run_scan(self) -> MappingSnapshot:
        """Blocking wrapper around scan() for synchronous callers."""
        return asyncio.run(self.scan())


__all__ = ["MappingService"]
