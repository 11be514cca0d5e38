"""Configuration models."""

from datetime import datetime
from pathlib import Path
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class TierThresholds(BaseModel):
    """Inclusive lower bounds of each confidence tier."""

    model_config = ConfigDict(frozen=True)

    very_high: float = Field(90.0, description="Lower bound of the very-high tier")
    high: float = Field(70.0, description="Lower bound of the high tier")
    medium: float = Field(50.0, description="Lower bound of the medium tier")
    low: float = Field(30.0, description="Lower bound of the low tier")

    @model_validator(mode="after")
    def _strictly_descending(self) -> "TierThresholds":
        bounds = [self.very_high, self.high, self.medium, self.low]
        if not all(0.0 < b <= 100.0 for b in bounds):
            raise ValueError("tier thresholds must be within (0, 100]")
        if any(upper <= lower for upper, lower in zip(bounds, bounds[1:])):
            raise ValueError("tier thresholds must be strictly descending")
        return self


class EvidenceWeights(BaseModel):
    """Default weights per signal. Treat as tunable defaults, not truths."""

    model_config = ConfigDict(frozen=True)

    explicit_marker: float = Field(0.9, ge=0.0, le=1.0)
    archive_directory: float = Field(0.85, ge=0.0, le=1.0)
    phase_mismatch: float = Field(0.5, ge=0.0, le=1.0)
    context_keyword: float = Field(0.4, ge=0.0, le=1.0)
    document_header: float = Field(0.3, ge=0.0, le=1.0)
    stale_file: float = Field(0.25, ge=0.0, le=1.0)


class AnalysisConfig(BaseModel):
    """Explicit configuration passed into every analysis run."""

    model_config = ConfigDict(
        frozen=True,
        json_schema_extra={
            "example": {
                "archive_patterns": ["archive", "_archive", "legacy"],
                "current_phase": 3,
                "context_window": 5,
                "stale_after_days": 180,
            }
        },
    )

    archive_patterns: List[str] = Field(
        default_factory=lambda: ["archive", "_archive", "legacy", "deprecated", "old"],
        description=(
            "Directory names denoting historical content. Each matching pattern is a separate "
            "fact, so 'archive' and '_archive' both match an _archive directory; removing "
            "either lowers archived checked items from very-high to high"
        ),
    )
    current_phase: Optional[int] = Field(
        None, ge=0, description="Current project phase; phase check is skipped when unset"
    )
    context_window: int = Field(5, ge=0, description="Lines scanned before/after a marker")
    max_context_categories: int = Field(2, ge=0, description="Distinct keyword categories counted")
    header_lines: int = Field(20, ge=0, description="Lines treated as the document header")
    document_stale_after_days: int = Field(365, gt=0, description="Age of a header date considered stale")
    stale_after_days: int = Field(180, gt=0, description="Days without modification before a file is stale")
    enricher_timeout_seconds: float = Field(2.0, gt=0, description="Per-call version-history timeout")
    max_workers: int = Field(8, gt=0, description="Markers analysed concurrently")
    reference_time: Optional[datetime] = Field(
        None, description="Clock used for age checks; defaults to now, resolved once per run"
    )
    root_path: Optional[Path] = Field(None, description="Root that relative marker paths resolve against")
    weights: EvidenceWeights = Field(default_factory=EvidenceWeights)
    thresholds: TierThresholds = Field(default_factory=TierThresholds)


class RepositoryConfig(BaseModel):
    """Configuration for scanning a repository for task markers."""

    repo_path: Path = Field(..., description="Path to the repository root")
    included_extensions: List[str] = Field(
        default_factory=lambda: [
            ".py", ".js", ".ts", ".jsx", ".tsx", ".java", ".go", ".rs", ".rb",
            ".sh", ".md", ".mdx", ".markdown", ".txt", ".rst", ".yaml", ".yml",
        ],
        description="File extensions to include",
    )
    excluded_paths: List[str] = Field(
        default_factory=lambda: ["node_modules/", ".git/", "__pycache__/", "venv/", ".venv/", "dist/", "build/"],
        description="Paths to exclude",
    )
    max_file_size_bytes: int = Field(
        default=1_000_000,  # 1MB
        description="Maximum file size to scan",
    )


class Settings(BaseSettings):
    """Process-wide defaults loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="TASKAUDIT_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    log_level: str = "INFO"
    max_workers: int = 8
    enricher_timeout_seconds: float = 2.0
    stale_after_days: int = 180
    context_window: int = 5

    # Tier thresholds
    threshold_very_high: float = 90.0
    threshold_high: float = 70.0
    threshold_medium: float = 50.0
    threshold_low: float = 30.0

    def to_analysis_config(self, **overrides) -> AnalysisConfig:
        """Build an AnalysisConfig from these settings plus per-run overrides."""
        values = {
            "max_workers": self.max_workers,
            "enricher_timeout_seconds": self.enricher_timeout_seconds,
            "stale_after_days": self.stale_after_days,
            "context_window": self.context_window,
            "thresholds": TierThresholds(
                very_high=self.threshold_very_high,
                high=self.threshold_high,
                medium=self.threshold_medium,
                low=self.threshold_low,
            ),
        }
        values.update({key: value for key, value in overrides.items() if value is not None})
        return AnalysisConfig(**values)
