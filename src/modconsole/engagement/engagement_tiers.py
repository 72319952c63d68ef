"""
Engagement tiering shared by the statistics and analytics views.

A participant's message count ``c`` within a window places them in:

- ``high`` when ``c >= 20``
- ``medium`` when ``5 <= c < 20``
- ``low`` when ``0 < c < 5``
- silent when ``c == 0`` (kept out of the tier percentages)
"""

from __future__ import annotations

from typing import Iterable, Optional

from modconsole.datatypes.participant_datatypes import EngagementDistribution, EngagementTier, TierBucket

HIGH_ENGAGEMENT_THRESHOLD = 20
MEDIUM_ENGAGEMENT_THRESHOLD = 5


def classify_engagement(message_count: int) -> Optional[EngagementTier]:
    """Return the tier for a message count, None for silent participants."""
    if message_count >= HIGH_ENGAGEMENT_THRESHOLD:
        return EngagementTier.HIGH
    if message_count >= MEDIUM_ENGAGEMENT_THRESHOLD:
        return EngagementTier.MEDIUM
    if message_count > 0:
        return EngagementTier.LOW
    return None


def engagement_distribution(message_counts: Iterable[int]) -> EngagementDistribution:
    """Bucket message counts into tiers.

    Percentages are taken over the participants with at least one message;
    when there are none every tier reports 0 and 0%.
    """
    counts = {EngagementTier.HIGH: 0, EngagementTier.MEDIUM: 0, EngagementTier.LOW: 0}
    silent = 0
    for count in message_counts:
        tier = classify_engagement(count)
        if tier is None:
            silent += 1
        else:
            counts[tier] += 1

    active = sum(counts.values())

    def bucket(tier: EngagementTier) -> TierBucket:
        percentage = (counts[tier] / active) * 100 if active else 0.0
        return TierBucket(tier=tier, count=counts[tier], percentage=percentage)

    return EngagementDistribution(
        high=bucket(EngagementTier.HIGH),
        medium=bucket(EngagementTier.MEDIUM),
        low=bucket(EngagementTier.LOW),
        silent_count=silent,
    )
