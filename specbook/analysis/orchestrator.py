"""
AnalysisOrchestrator - one analysis cycle over the object tree.

IDLE -> REQUESTING -> PARSING -> RESOLVING -> DONE
Any phase may end in FAILED when the service call raises.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from enum import Enum

from ..config import AnalysisConfig
from ..errors import AnalysisTimeoutError, InvalidOperationError
from ..store.models import TreeNode
from ..store.tree import walk_tree
from .llm_client import AnalysisService
from .models import AnalysisRequest, AnalysisResult, TokenUsage
from .prompts import PromptContext, build_request
from .response_parser import parse_analysis_response

logger = logging.getLogger(__name__)


class AnalysisPhase(Enum):
    """Lifecycle states of one analysis cycle."""

    IDLE = "idle"
    REQUESTING = "requesting"  # waiting on the external service
    PARSING = "parsing"
    RESOLVING = "resolving"    # mapping titles back to object ids
    DONE = "done"
    FAILED = "failed"


VALID_TRANSITIONS: dict[AnalysisPhase, set[AnalysisPhase]] = {
    AnalysisPhase.IDLE: {AnalysisPhase.REQUESTING},
    AnalysisPhase.REQUESTING: {AnalysisPhase.PARSING, AnalysisPhase.FAILED},
    AnalysisPhase.PARSING: {AnalysisPhase.RESOLVING, AnalysisPhase.FAILED},
    AnalysisPhase.RESOLVING: {AnalysisPhase.DONE, AnalysisPhase.FAILED},
    AnalysisPhase.DONE: {AnalysisPhase.IDLE},
    AnalysisPhase.FAILED: {AnalysisPhase.IDLE},
}


@dataclass
class AnalysisOutcome:
    """Everything one successful analysis cycle produced."""

    results: list[AnalysisResult]
    token_usage: TokenUsage
    directory_tree: str = ""
    raw_text: str = ""
    unresolved: list[str] = field(default_factory=list)


def resolve_object_id(
    tree: Sequence[TreeNode],
    title: str,
    echoed_id: str | None = None,
) -> str | None:
    """
    Map an echoed title back to an object id.

    The first node in pre-order whose title matches exactly wins. When
    several nodes share the title the match is logged as ambiguous. If no
    title matches, an echoed id that names a real node is accepted.

    Returns:
        The object id, or None when nothing in the tree matches
    """
    matches = [node.id for node in walk_tree(tree) if node.title == title]
    if len(matches) > 1:
        logger.warning(
            f"Title {title!r} matches {len(matches)} objects; attributing to first match {matches[0]}"
        )
    if matches:
        return matches[0]

    if echoed_id and any(node.id == echoed_id for node in walk_tree(tree)):
        return echoed_id

    return None


class AnalysisOrchestrator:
    """
    Drives analysis cycles over a tree supplied by the caller.

    The orchestrator never writes to the object store. A service failure
    (including cancellation) marks the cycle FAILED and propagates.
    """

    def __init__(self, service: AnalysisService, config: AnalysisConfig | None = None):
        self.service = service
        self.config = config or AnalysisConfig()
        self._phase = AnalysisPhase.IDLE

    @property
    def phase(self) -> AnalysisPhase:
        return self._phase

    def _transition(self, to_phase: AnalysisPhase) -> None:
        if to_phase not in VALID_TRANSITIONS[self._phase]:
            raise InvalidOperationError(
                f"Invalid analysis transition {self._phase.value} -> {to_phase.value}"
            )
        self._phase = to_phase

    def _resolve(self, tree: Sequence[TreeNode], result: AnalysisResult) -> AnalysisResult:
        if not result.resolved:
            # synthetic results (e.g. parse errors) keep their own id
            return result

        object_id = resolve_object_id(tree, result.object_title, result.object_id or None)
        if object_id is not None:
            return result.model_copy(update={"object_id": object_id})

        fallback = result.object_title or result.object_id
        logger.warning(f"Could not resolve {fallback!r} to an object id; using it as-is")
        return result.model_copy(update={"object_id": fallback, "resolved": False})

    async def analyze(
        self,
        tree: Sequence[TreeNode],
        workspace_path: str | None = None,
        directory_tree: str | None = None,
    ) -> AnalysisOutcome:
        """
        Run one cycle: build prompt, call the service, parse, resolve ids.

        Args:
            tree: Assembled object tree to analyse
            workspace_path: Optional project root shown to the model
            directory_tree: Optional ASCII tree of the project's files

        Returns:
            AnalysisOutcome with resolved results and token usage

        Raises:
            InvalidOperationError: a cycle is already in flight
            AnalysisTimeoutError: no response within config.timeout_seconds
            AnalysisServiceError: the service call failed
        """
        if self._phase not in (AnalysisPhase.IDLE, AnalysisPhase.DONE, AnalysisPhase.FAILED):
            raise InvalidOperationError("An analysis is already running.")
        if self._phase is not AnalysisPhase.IDLE:
            self._transition(AnalysisPhase.IDLE)

        prompt = build_request(tree, PromptContext(workspace_path, directory_tree))
        request = AnalysisRequest(
            system_prompt=prompt.system_prompt,
            user_prompt=prompt.user_prompt,
            model=self.config.model,
            max_tokens=self.config.max_tokens,
            temperature=self.config.temperature,
        )

        self._transition(AnalysisPhase.REQUESTING)
        timeout = self.config.timeout_seconds
        try:
            response = await asyncio.wait_for(self.service.complete(request), timeout=timeout)
        except asyncio.TimeoutError as e:
            self._transition(AnalysisPhase.FAILED)
            raise AnalysisTimeoutError(f"Analysis request timed out after {timeout}s") from e
        except BaseException:
            self._transition(AnalysisPhase.FAILED)
            raise

        self._transition(AnalysisPhase.PARSING)
        parsed = parse_analysis_response(response.raw_text)

        self._transition(AnalysisPhase.RESOLVING)
        results = [self._resolve(tree, result) for result in parsed]

        self._transition(AnalysisPhase.DONE)
        unresolved = [r.object_id for r in results if not r.resolved]
        logger.info(f"Analysis complete: {len(results)} results, {len(unresolved)} unresolved")

        return AnalysisOutcome(
            results=results,
            token_usage=TokenUsage(
                input_tokens=response.input_tokens,
                output_tokens=response.output_tokens,
                model=response.model or request.model,
            ),
            directory_tree=directory_tree or "",
            raw_text=response.raw_text,
            unresolved=unresolved,
        )


__all__ = [
    "AnalysisOrchestrator",
    "AnalysisOutcome",
    "AnalysisPhase",
    "VALID_TRANSITIONS",
    "resolve_object_id",
]
