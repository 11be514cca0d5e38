"""Batch statistics and helpers over analysis results."""

from collections import defaultdict
from typing import Dict, Iterable, List, Sequence

from taskaudit.models import (
    TIER_ORDER,
    BatchSummary,
    ConfidenceResult,
    FileAggregate,
    Recommendation,
    Tier,
)


def _aggregate_files(results: Iterable[ConfidenceResult], min_tier: Tier) -> List[FileAggregate]:
    """Per-file statistics over results at ``min_tier`` or above.

    Sorted by likely-completed count, then marker count, then average
    score (all descending), then path.
    """
    grouped = group_by_file(results, min_tier=min_tier)
    aggregates = [
        FileAggregate(
            file_path=file_path,
            average_score=round(sum(r.score for r in file_results) / len(file_results), 1),
            marker_count=len(file_results),
            likely_completed=sum(1 for r in file_results if r.is_likely_completed),
        )
        for file_path, file_results in grouped.items()
    ]
    aggregates.sort(key=lambda a: (-a.likely_completed, -a.marker_count, -a.average_score, a.file_path))
    return aggregates


def summarize(results: Sequence[ConfidenceResult]) -> BatchSummary:
    """Compute aggregate statistics for a batch of results.

    Args:
        results: All results of a run

    Returns:
        BatchSummary; all counts are zero for empty input
    """
    tier_counts: Dict[Tier, int] = {tier: 0 for tier in TIER_ORDER}
    recommendation_counts: Dict[Recommendation, int] = {rec: 0 for rec in Recommendation}
    for result in results:
        tier_counts[result.tier] += 1
        recommendation_counts[result.recommendation] += 1

    total = len(results)
    likely_completed = tier_counts[Tier.VERY_HIGH] + tier_counts[Tier.HIGH]
    reduction_potential = round(100.0 * likely_completed / total, 1) if total else 0.0

    return BatchSummary(
        total=total,
        tier_counts=tier_counts,
        recommendation_counts=recommendation_counts,
        file_aggregates=_aggregate_files(results, Tier.MEDIUM),
        reduction_potential=reduction_potential,
    )


def filter_by_completion(
    results: Iterable[ConfidenceResult],
    include_completed: bool = False,
    min_score: float = 0.0,
) -> List[ConfidenceResult]:
    """Select results for an active backlog.

    Args:
        results: Analysis results
        include_completed: Keep results at tier high or above
        min_score: Drop results scoring below this value

    Returns:
        Matching results in input order
    """
    return [
        result
        for result in results
        if (include_completed or not result.is_likely_completed) and result.score >= min_score
    ]


def group_by_file(
    results: Iterable[ConfidenceResult],
    min_tier: Tier = Tier.HIGH,
) -> Dict[str, List[ConfidenceResult]]:
    """Group results at ``min_tier`` or above by file, keeping input order."""
    grouped: Dict[str, List[ConfidenceResult]] = defaultdict(list)
    for result in results:
        if result.tier.at_least(min_tier):
            grouped[result.marker.file_path].append(result)
    return dict(grouped)


def top_cleanup_candidates(results: Iterable[ConfidenceResult], limit: int = 10) -> List[FileAggregate]:
    """Files with the most markers that are likely completed.

    Args:
        results: Analysis results
        limit: Maximum number of files returned

    Returns:
        FileAggregate entries over markers at tier high or above
    """
    if limit <= 0:
        return []
    return _aggregate_files(results, Tier.HIGH)[:limit]
