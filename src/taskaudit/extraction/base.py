"""Base class and registry for evidence extractors."""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Dict, Iterable, List, Optional

import structlog

from taskaudit.models import AnalysisConfig, Evidence, FileContext, TaskMarker

logger = structlog.get_logger(__name__)


class EvidenceExtractor(ABC):
    """Strategy mapping one marker and its file context to evidence.

    Implementations must be pure: no shared state, no I/O beyond the
    supplied context.
    """

    name: str = "extractor"

    @abstractmethod
    def extract(
        self,
        marker: TaskMarker,
        context: FileContext,
        config: AnalysisConfig,
        now: datetime,
    ) -> List[Evidence]:
        """Return zero or more evidence facts for the marker.

        Args:
            marker: Marker under analysis
            context: Surrounding file content (may be unavailable)
            config: Analysis configuration for this run
            now: Reference time for age checks, fixed for the whole run

        Returns:
            List of Evidence objects
        """
        pass

    def safe_extract(
        self,
        marker: TaskMarker,
        context: FileContext,
        config: AnalysisConfig,
        now: datetime,
    ) -> List[Evidence]:
        """Run ``extract`` and turn any failure into an empty evidence list."""
        try:
            return list(self.extract(marker, context, config, now))
        except Exception as e:
            logger.warning(
                "extractor_failed",
                extractor=self.name,
                location=marker.location,
                error=str(e),
            )
            return []


class ExtractorRegistry:
    """Ordered collection of named extractors.

    Order matters only for the order of reasons in a result; the aggregate
    score does not depend on it.
    """

    def __init__(self, extractors: Optional[Iterable[EvidenceExtractor]] = None) -> None:
        self._extractors: Dict[str, EvidenceExtractor] = {}
        for extractor in extractors or []:
            self.register(extractor)

    def register(self, extractor: EvidenceExtractor) -> None:
        if extractor.name in self._extractors:
            raise ValueError(f"Extractor already registered: {extractor.name}")
        self._extractors[extractor.name] = extractor

    def unregister(self, name: str) -> None:
        if name not in self._extractors:
            raise ValueError(f"Unknown extractor: {name}")
        del self._extractors[name]

    @property
    def names(self) -> List[str]:
        return list(self._extractors)

    def __len__(self) -> int:
        return len(self._extractors)

    def __iter__(self):
        return iter(self._extractors.values())

    def extract_all(
        self,
        marker: TaskMarker,
        context: FileContext,
        config: AnalysisConfig,
        now: datetime,
    ) -> List[Evidence]:
        evidence: List[Evidence] = []
        for extractor in self._extractors.values():
            evidence.extend(extractor.safe_extract(marker, context, config, now))
        return evidence
