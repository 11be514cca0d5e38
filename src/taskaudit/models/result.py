"""Data models for evidence, per-marker results and batch summaries."""

import math
from enum import Enum
from typing import Any, Dict, List, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator

from taskaudit.models.marker import TaskMarker


class EvidenceKind(str, Enum):
    """Signal families produced by the extractors."""

    EXPLICIT_MARKER = "explicit-marker"
    ARCHIVE_PATH = "archive-path"
    CONTEXT_KEYWORD = "context-keyword"
    DOCUMENT_HEADER = "document-header"
    STALE_FILE = "stale-file"


class Tier(str, Enum):
    """Confidence bands, highest first."""

    VERY_HIGH = "very-high"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"
    ACTIVE = "active"

    @property
    def rank(self) -> int:
        """Higher rank means more likely completed (active = 0)."""
        return len(TIER_ORDER) - 1 - TIER_ORDER.index(self)

    def at_least(self, other: "Tier") -> bool:
        return self.rank >= other.rank


TIER_ORDER: Tuple[Tier, ...] = (Tier.VERY_HIGH, Tier.HIGH, Tier.MEDIUM, Tier.LOW, Tier.ACTIVE)


class Recommendation(str, Enum):
    """Action suggested for a marker in a given tier."""

    SAFE_TO_CLOSE = "safe-to-close"
    NEEDS_REVIEW = "needs-review"
    VERIFY_STATUS = "verify-status"
    KEEP_FLAGGED = "keep-flagged"
    KEEP_ACTIVE = "keep-active"


class Evidence(BaseModel):
    """One weighted fact supporting the hypothesis that a marker is done."""

    model_config = ConfigDict(frozen=True)

    kind: EvidenceKind = Field(..., description="Signal family")
    weight: float = Field(..., ge=0.0, le=1.0, description="Intrinsic strength of the signal")
    description: str = Field(..., min_length=1, description="Human readable justification")

    @field_validator("weight")
    @classmethod
    def _finite_weight(cls, value: float) -> float:
        if math.isnan(value) or math.isinf(value):
            raise ValueError("weight must be a finite number")
        return value


class ConfidenceResult(BaseModel):
    """Outcome of analysing one marker. Never mutated after creation."""

    model_config = ConfigDict(frozen=True)

    marker: TaskMarker
    score: float = Field(..., ge=0.0, le=100.0, description="Confidence the marker is done (0-100)")
    tier: Tier
    recommendation: Recommendation
    reasons: Tuple[str, ...] = Field(default_factory=tuple, description="Evidence descriptions, in order")
    suggestions: Tuple[str, ...] = Field(default_factory=tuple, description="Guidance for the reviewer")

    @property
    def is_likely_completed(self) -> bool:
        return self.tier.at_least(Tier.HIGH)


class FileAggregate(BaseModel):
    """Per-file statistics over markers at tier medium or above."""

    model_config = ConfigDict(frozen=True)

    file_path: str
    average_score: float
    marker_count: int
    likely_completed: int = Field(0, description="Markers at tier high or above")


class BatchSummary(BaseModel):
    """Aggregate statistics derived from a list of results."""

    model_config = ConfigDict(frozen=True)

    total: int = 0
    tier_counts: Dict[Tier, int] = Field(default_factory=lambda: {tier: 0 for tier in TIER_ORDER})
    recommendation_counts: Dict[Recommendation, int] = Field(
        default_factory=lambda: {rec: 0 for rec in Recommendation}
    )
    file_aggregates: List[FileAggregate] = Field(default_factory=list)
    reduction_potential: float = Field(0.0, description="Percentage of markers at tier high or above")

    @property
    def likely_completed(self) -> int:
        return self.tier_counts[Tier.VERY_HIGH] + self.tier_counts[Tier.HIGH]

    def top_files(self, limit: int = 10) -> List[FileAggregate]:
        return self.file_aggregates[:limit]


class MarkerRejection(BaseModel):
    """A raw marker record that failed validation."""

    record: Dict[str, Any] = Field(default_factory=dict)
    error: str
