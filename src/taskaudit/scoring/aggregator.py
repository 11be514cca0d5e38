"""Combining evidence into a single completion-confidence score."""

import math
from typing import Dict, Iterable, List

from taskaudit.models import Evidence, EvidenceKind

# Weight given to every same-kind fact after the strongest one
SECONDARY_FACTOR = 0.3
# Cap on a kind's contribution, relative to its strongest fact
KIND_CAP_FACTOR = 1.3


def clamp(value: float, low: float = 0.0, high: float = 100.0) -> float:
    return max(low, min(high, value))


def kind_contribution(weights: Iterable[float]) -> float:
    """Diminishing-returns sum of the weights of one evidence kind.

    The strongest fact counts fully, the rest at 30%, and the total never
    exceeds 1.3 times the strongest fact.

    Args:
        weights: Weights of all evidence of a single kind

    Returns:
        Contribution of the kind, 0.0 for no weights
    """
    ordered = sorted(weights, reverse=True)
    if not ordered:
        return 0.0
    strongest = ordered[0]
    combined = strongest + SECONDARY_FACTOR * math.fsum(ordered[1:])
    return min(combined, KIND_CAP_FACTOR * strongest)


def group_by_kind(evidence: Iterable[Evidence]) -> Dict[EvidenceKind, List[float]]:
    grouped: Dict[EvidenceKind, List[float]] = {kind: [] for kind in EvidenceKind}
    for item in evidence:
        grouped[item.kind].append(item.weight)
    return grouped


def aggregate_score(evidence: Iterable[Evidence]) -> float:
    """Turn a list of evidence into a score between 0 and 100.

    Contributions of each kind are summed and mapped through
    ``1 - exp(-total)`` so that independent signals reinforce each other
    without ever reaching certainty. Adding evidence never lowers the score.

    Args:
        evidence: Evidence facts for one marker, in any order

    Returns:
        Score rounded to one decimal place
    """
    grouped = group_by_kind(evidence)
    total = math.fsum(kind_contribution(weights) for weights in grouped.values())
    if total <= 0.0:
        return 0.0
    return clamp(round(100.0 * (1.0 - math.exp(-total)), 1))
