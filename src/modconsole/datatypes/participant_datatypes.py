"""
Participant records and the engagement statistics derived from them.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional, Tuple


class EngagementTier(Enum):
    """Engagement bucket for participants with at least one message."""

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

    def __str__(self) -> str:
        return self.value

    @property
    def label(self) -> str:
        return self.value.capitalize()


@dataclass(frozen=True, slots=True)
class Participant:
    """A community member as kept in the registry.

    Attributes:
        participant_id: Unique identifier.
        community_id: Community the participant belongs to.
        display_name: Name shown in the console, may be empty.
        public_channel_id: Platform-assigned contact handle.
        verified_channel_id: Operator-entered contact handle enabling private
            responses. None when not set.
        joined_at: When the participant was registered.
    """

    participant_id: str
    community_id: str
    display_name: Optional[str]
    public_channel_id: Optional[str]
    joined_at: datetime
    verified_channel_id: Optional[str] = None

    @property
    def has_verified_channel(self) -> bool:
        return bool(self.verified_channel_id and self.verified_channel_id.strip())

    @property
    def label(self) -> str:
        """Display name, falling back to the public handle, then "Anonymous"."""
        return self.display_name or self.public_channel_id or "Anonymous"


@dataclass(frozen=True, slots=True)
class ParticipantStats:
    """Per-participant counters over original messages."""

    participant: Participant
    message_count: int = 0
    assisted_count: int = 0

    @property
    def participant_id(self) -> str:
        return self.participant.participant_id

    @property
    def has_verified_channel(self) -> bool:
        return self.participant.has_verified_channel


@dataclass(frozen=True, slots=True)
class TierBucket:
    """Head count and share of one engagement tier."""

    tier: EngagementTier
    count: int = 0
    percentage: float = 0.0


@dataclass(frozen=True, slots=True)
class EngagementDistribution:
    """High/medium/low tiers over active participants plus the silent count.

    Percentages are computed over active participants only, so
    ``high.count + medium.count + low.count == active_count``.
    """

    high: TierBucket
    medium: TierBucket
    low: TierBucket
    silent_count: int = 0

    @property
    def active_count(self) -> int:
        return self.high.count + self.medium.count + self.low.count

    @property
    def tiers(self) -> Tuple[TierBucket, TierBucket, TierBucket]:
        return (self.high, self.medium, self.low)


@dataclass(frozen=True, slots=True)
class TopContributor:
    """One row of the top contributors board."""

    participant_id: str
    name: str
    message_count: int
    engagement: EngagementTier


@dataclass(frozen=True, slots=True)
class CommunityStats:
    """Roster-wide statistics for one community."""

    participants: Tuple[ParticipantStats, ...]
    engagement: EngagementDistribution
    top_contributors: Tuple[TopContributor, ...]

    @property
    def active_count(self) -> int:
        return self.engagement.active_count

    @property
    def silent_count(self) -> int:
        return self.engagement.silent_count
