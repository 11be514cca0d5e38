"""Scoring and classification of evidence."""

from taskaudit.scoring.aggregator import aggregate_score, kind_contribution
from taskaudit.scoring.classifier import RECOMMENDATIONS, Classifier

__all__ = [
    "aggregate_score",
    "kind_contribution",
    "Classifier",
    "RECOMMENDATIONS",
]
