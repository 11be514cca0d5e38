"""Per-marker completion analysis with bounded parallelism."""

import asyncio
from collections.abc import Mapping
from datetime import datetime
from typing import Callable, Iterable, List, Optional, Tuple, Union

import structlog
from pydantic import ValidationError

from taskaudit.clock import resolve_now
from taskaudit.extraction.base import EvidenceExtractor, ExtractorRegistry
from taskaudit.extraction.context import FileContextLoader
from taskaudit.extraction.detectors import default_extractors
from taskaudit.history.staleness import LastModifiedProvider, StalenessEnricher
from taskaudit.models import (
    AnalysisConfig,
    ConfidenceResult,
    Evidence,
    FileContext,
    MarkerRejection,
    TaskMarker,
)
from taskaudit.scoring import Classifier, aggregate_score

logger = structlog.get_logger(__name__)

ContextLoader = Callable[[TaskMarker], FileContext]
MarkerRecord = Union[TaskMarker, Mapping]
Enricher = Union[StalenessEnricher, LastModifiedProvider]


def validate_markers(records: Iterable[MarkerRecord]) -> Tuple[List[TaskMarker], List[MarkerRejection]]:
    """Split raw records into valid markers and rejections.

    Args:
        records: TaskMarker instances or mappings with marker fields

    Returns:
        Tuple of (valid markers in input order, rejections)
    """
    markers: List[TaskMarker] = []
    rejections: List[MarkerRejection] = []

    for record in records:
        if isinstance(record, TaskMarker):
            markers.append(record)
            continue

        if not isinstance(record, Mapping):
            error = f"Unsupported marker record type: {type(record).__name__}"
            raw = {"value": repr(record)}
        else:
            # Rejections are keyed by field name, whatever the record used
            raw = {str(key): value for key, value in record.items()}
            try:
                markers.append(TaskMarker.model_validate(raw))
                continue
            except ValidationError as e:
                error = "; ".join(
                    f"{'.'.join(str(part) for part in err['loc']) or 'record'}: {err['msg']}"
                    for err in e.errors()
                )

        logger.warning("marker_rejected", file_path=raw.get("file_path"), error=error)
        rejections.append(MarkerRejection(record=raw, error=error))

    return markers, rejections


class AnalysisEngine:
    """Runs extractors, the optional enricher, scoring and classification.

    The engine holds configuration only; every run creates fresh per-run
    state (reference time, context cache, enricher memo).
    """

    def __init__(
        self,
        config: Optional[AnalysisConfig] = None,
        extractors: Optional[Iterable[EvidenceExtractor]] = None,
        enricher: Optional[Enricher] = None,
        context_loader: Optional[ContextLoader] = None,
    ) -> None:
        """Initialize the engine.

        Args:
            config: Analysis configuration (defaults to AnalysisConfig())
            extractors: Evidence extractors, in reason order (defaults to the built-in set)
            enricher: Optional staleness enricher, or a bare version-history
                provider that is wrapped in one. Settings the enricher leaves
                unset follow this config.
            context_loader: Callable returning a marker's file context
                (defaults to a FileContextLoader rooted at config.root_path)
        """
        self.config = config or AnalysisConfig()
        self.registry = ExtractorRegistry(extractors if extractors is not None else default_extractors())
        if enricher is not None and not isinstance(enricher, StalenessEnricher):
            enricher = StalenessEnricher(enricher)
        self.enricher = enricher
        self.context_loader = context_loader
        self.classifier = Classifier(self.config.thresholds)

    async def run(self, records: Iterable[MarkerRecord]) -> List[ConfidenceResult]:
        """Analyze markers concurrently, returning results in input order.

        Invalid records are logged and skipped.

        Args:
            records: TaskMarker instances or raw mappings

        Returns:
            One ConfidenceResult per valid marker
        """
        markers, rejections = validate_markers(records)
        now = resolve_now(self.config.reference_time)
        loader = self.context_loader or FileContextLoader(self.config.root_path)
        if self.enricher is not None:
            self.enricher.begin_run(self.config)

        semaphore = asyncio.Semaphore(self.config.max_workers)

        async def bounded(marker: TaskMarker) -> ConfidenceResult:
            async with semaphore:
                return await self.analyze_marker(marker, now, loader)

        results = await asyncio.gather(*(bounded(marker) for marker in markers))

        logger.info(
            "analysis_completed",
            markers=len(markers),
            rejected=len(rejections),
            likely_completed=sum(1 for result in results if result.is_likely_completed),
        )
        return list(results)

    async def analyze_marker(
        self,
        marker: TaskMarker,
        now: datetime,
        loader: ContextLoader,
    ) -> ConfidenceResult:
        """Score a single marker.

        Args:
            marker: Marker to analyze
            now: Reference time shared by the whole run
            loader: Context loader for this run

        Returns:
            ConfidenceResult for the marker
        """
        context = await self._load_context(marker, loader)
        evidence = self.registry.extract_all(marker, context, self.config, now)
        evidence.extend(await self._enrich(marker, now))

        score = aggregate_score(evidence)
        tier, recommendation = self.classifier.classify(score)

        return ConfidenceResult(
            marker=marker,
            score=score,
            tier=tier,
            recommendation=recommendation,
            reasons=tuple(item.description for item in evidence),
            suggestions=self.classifier.suggestions(tier),
        )

    @staticmethod
    async def _load_context(marker: TaskMarker, loader: ContextLoader) -> FileContext:
        # Loaders do blocking file I/O, so they run off the event loop
        try:
            return await asyncio.to_thread(loader, marker)
        except Exception as e:
            logger.warning("context_loader_failed", location=marker.location, error=str(e))
            return FileContext.unavailable(marker.file_path)

    async def _enrich(self, marker: TaskMarker, now: datetime) -> List[Evidence]:
        if self.enricher is None:
            return []
        try:
            return await self.enricher.enrich(marker, now)
        except Exception as e:
            logger.warning("enricher_failed", location=marker.location, error=str(e))
            return []


async def analyze_async(
    markers: Iterable[MarkerRecord],
    config: Optional[AnalysisConfig] = None,
    enricher: Optional[Enricher] = None,
    context_loader: Optional[ContextLoader] = None,
) -> List[ConfidenceResult]:
    engine = AnalysisEngine(config=config, enricher=enricher, context_loader=context_loader)
    return await engine.run(markers)


def analyze(
    markers: Iterable[MarkerRecord],
    config: Optional[AnalysisConfig] = None,
    enricher: Optional[Enricher] = None,
    context_loader: Optional[ContextLoader] = None,
) -> List[ConfidenceResult]:
    """Analyze markers and return one result per valid marker, in input order.

    Synchronous wrapper around ``analyze_async``; must not be called from a
    running event loop.

    Args:
        markers: TaskMarker instances or raw mappings
        config: Analysis configuration
        enricher: Optional staleness enricher or version-history provider
        context_loader: Optional callable returning a marker's file context

    Returns:
        List of ConfidenceResult
    """
    return asyncio.run(
        analyze_async(markers, config=config, enricher=enricher, context_loader=context_loader)
    )
