"""Mapping scores to confidence tiers and recommended actions."""

from typing import Dict, List, Optional, Tuple

from taskaudit.models import Recommendation, Tier, TierThresholds

RECOMMENDATIONS: Dict[Tier, Recommendation] = {
    Tier.VERY_HIGH: Recommendation.SAFE_TO_CLOSE,
    Tier.HIGH: Recommendation.NEEDS_REVIEW,
    Tier.MEDIUM: Recommendation.VERIFY_STATUS,
    Tier.LOW: Recommendation.KEEP_FLAGGED,
    Tier.ACTIVE: Recommendation.KEEP_ACTIVE,
}

SUGGESTIONS: Dict[Tier, Tuple[str, ...]] = {
    Tier.VERY_HIGH: (
        "Very likely completed - safe to close",
        "Consider marking as [x] or removing from active tasks",
    ),
    Tier.HIGH: (
        "Probably completed - recommend manual review",
        "Check git history or ask team to confirm",
    ),
    Tier.MEDIUM: (
        "Possibly completed - needs verification",
        "Review recent commits or deployment history",
    ),
    Tier.LOW: (
        "May be completed - low confidence",
        "Keep in TODO list but flag for review",
    ),
    Tier.ACTIVE: ("Appears active - no completion indicators",),
}


class Classifier:
    """Bins a score using inclusive lower bounds, highest tier first."""

    def __init__(self, thresholds: Optional[TierThresholds] = None) -> None:
        self.thresholds = thresholds or TierThresholds()
        self._bins: List[Tuple[Tier, float]] = [
            (Tier.VERY_HIGH, self.thresholds.very_high),
            (Tier.HIGH, self.thresholds.high),
            (Tier.MEDIUM, self.thresholds.medium),
            (Tier.LOW, self.thresholds.low),
        ]

    def tier(self, score: float) -> Tier:
        for tier, lower_bound in self._bins:
            if score >= lower_bound:
                return tier
        return Tier.ACTIVE

    def classify(self, score: float) -> Tuple[Tier, Recommendation]:
        """Classify a score.

        Args:
            score: Completion confidence between 0 and 100

        Returns:
            Tuple of (tier, recommendation)
        """
        tier = self.tier(score)
        return tier, RECOMMENDATIONS[tier]

    @staticmethod
    def suggestions(tier: Tier) -> Tuple[str, ...]:
        return SUGGESTIONS[tier]
