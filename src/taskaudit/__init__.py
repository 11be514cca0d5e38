"""Completion-confidence analysis for TODO markers and checklist items."""

from taskaudit.analysis import (
    AnalysisEngine,
    analyze,
    analyze_async,
    filter_by_completion,
    group_by_file,
    summarize,
    top_cleanup_candidates,
    validate_markers,
)
from taskaudit.models import (
    AnalysisConfig,
    BatchSummary,
    ConfidenceResult,
    Evidence,
    EvidenceKind,
    FileContext,
    MarkerKind,
    Recommendation,
    TaskMarker,
    Tier,
)

__version__ = "0.1.0"

__all__ = [
    "analyze",
    "analyze_async",
    "validate_markers",
    "summarize",
    "filter_by_completion",
    "group_by_file",
    "top_cleanup_candidates",
    "AnalysisEngine",
    "AnalysisConfig",
    "BatchSummary",
    "ConfidenceResult",
    "Evidence",
    "EvidenceKind",
    "FileContext",
    "MarkerKind",
    "Recommendation",
    "TaskMarker",
    "Tier",
]
