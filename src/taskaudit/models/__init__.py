"""Data models for completion-confidence analysis."""

from taskaudit.models.config import (
    AnalysisConfig,
    EvidenceWeights,
    RepositoryConfig,
    Settings,
    TierThresholds,
)
from taskaudit.models.marker import FileContext, MarkerKind, TaskMarker
from taskaudit.models.result import (
    TIER_ORDER,
    BatchSummary,
    ConfidenceResult,
    Evidence,
    EvidenceKind,
    FileAggregate,
    MarkerRejection,
    Recommendation,
    Tier,
)

__all__ = [
    "TaskMarker",
    "MarkerKind",
    "FileContext",
    "Evidence",
    "EvidenceKind",
    "ConfidenceResult",
    "Tier",
    "TIER_ORDER",
    "Recommendation",
    "BatchSummary",
    "FileAggregate",
    "MarkerRejection",
    "AnalysisConfig",
    "EvidenceWeights",
    "TierThresholds",
    "RepositoryConfig",
    "Settings",
]
