"""Running analyses and summarising their results."""

from taskaudit.analysis.engine import AnalysisEngine, analyze, analyze_async, validate_markers
from taskaudit.analysis.summary import (
    filter_by_completion,
    group_by_file,
    summarize,
    top_cleanup_candidates,
)

__all__ = [
    "AnalysisEngine",
    "analyze",
    "analyze_async",
    "validate_markers",
    "summarize",
    "filter_by_completion",
    "group_by_file",
    "top_cleanup_candidates",
]
