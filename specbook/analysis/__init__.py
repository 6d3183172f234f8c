"""Analysis Layer - prompt building, service call, parsing and id resolution."""

from .llm_client import AnalysisService, AnthropicAnalysisService
from .models import (
    AnalysisPrompt,
    AnalysisRequest,
    AnalysisResult,
    AnalysisStatus,
    LineRange,
    RelatedFile,
    ServiceResponse,
    TokenUsage,
)
from .orchestrator import AnalysisOrchestrator, AnalysisOutcome, AnalysisPhase, resolve_object_id
from .prompts import PromptContext, build_request, build_system_prompt, build_user_prompt, render_outline
from .response_parser import parse_analysis_response
from .scanner import scan_project_tree

__all__ = [
    "AnalysisOrchestrator",
    "AnalysisOutcome",
    "AnalysisPhase",
    "AnalysisPrompt",
    "AnalysisRequest",
    "AnalysisResult",
    "AnalysisService",
    "AnalysisStatus",
    "AnthropicAnalysisService",
    "LineRange",
    "PromptContext",
    "RelatedFile",
    "ServiceResponse",
    "TokenUsage",
    "build_request",
    "build_system_prompt",
    "build_user_prompt",
    "parse_analysis_response",
    "render_outline",
    "resolve_object_id",
    "scan_project_tree",
]
