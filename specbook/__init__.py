"""specbook: a versioned spec object tree reconciled against AI analysis.

- Store: hierarchical objects under .spec/ with SHA-1 change detection
- Analysis: outline prompt, external analysis call, tolerant parsing
- Mapping: snapshot of the last scan plus a classified changelog
"""

__version__ = "0.1.0"

# Store Layer
from .store import (
    AnnotationKind,
    ObjectDetail,
    ObjectStore,
    ObjectSummary,
    TreeNode,
    assemble_tree,
    flatten_tree,
    new_object_id,
)

# Analysis Layer
from .analysis import (
    AnalysisOrchestrator,
    AnalysisOutcome,
    AnalysisPhase,
    AnalysisResult,
    AnalysisService,
    AnalysisStatus,
    AnthropicAnalysisService,
    RelatedFile,
    TokenUsage,
    parse_analysis_response,
    render_outline,
)

# Mapping Layer
from .mapping import ChangeType, MappingChangeEntry, MappingService, MappingSnapshot, compute_changelog

# Errors, Workspace & Config
from .config import SpecbookConfig, default_config
from .errors import (
    AnalysisServiceError,
    AnalysisTimeoutError,
    InvalidOperationError,
    ObjectNotFoundError,
    SpecbookError,
)
from .workspace import Workspace

__all__ = [
    # Store
    "AnnotationKind",
    "ObjectDetail",
    "ObjectStore",
    "ObjectSummary",
    "TreeNode",
    "assemble_tree",
    "flatten_tree",
    "new_object_id",
    # Analysis
    "AnalysisOrchestrator",
    "AnalysisOutcome",
    "AnalysisPhase",
    "AnalysisResult",
    "AnalysisService",
    "AnalysisStatus",
    "AnthropicAnalysisService",
    "RelatedFile",
    "TokenUsage",
    "parse_analysis_response",
    "render_outline",
    # Mapping
    "ChangeType",
    "MappingChangeEntry",
    "MappingService",
    "MappingSnapshot",
    "compute_changelog",
    # Errors, Workspace & Config
    "AnalysisServiceError",
    "AnalysisTimeoutError",
    "InvalidOperationError",
    "ObjectNotFoundError",
    "SpecbookError",
    "SpecbookConfig",
    "Workspace",
    "default_config",
]
