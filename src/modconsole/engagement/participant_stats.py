"""
Per-participant counters and community engagement statistics.

Only original messages count: responses are bot output and messages without a
participant come from automated senders. Messages from people missing from
the roster are ignored, so every counter stays tied to a known participant.
"""

from __future__ import annotations

from collections import Counter
from datetime import datetime
from typing import Iterable, List, Optional, Sequence, Tuple

from modconsole.datatypes.message_datatypes import Message
from modconsole.datatypes.participant_datatypes import (
    CommunityStats,
    Participant,
    ParticipantStats,
    TopContributor,
)
from modconsole.engagement.engagement_tiers import classify_engagement, engagement_distribution
from modconsole.interventions.message_graph import partition_messages
from modconsole.util.logger import get_logger

logger = get_logger("participant_stats")

TOP_CONTRIBUTORS_LIMIT = 5


def _in_window(message: Message, since: Optional[datetime], until: Optional[datetime]) -> bool:
    if since is not None and message.created_at < since:
        return False
    if until is not None and message.created_at >= until:
        return False
    return True


def aggregate_participant_stats(
    participants: Sequence[Participant],
    messages: Iterable[Message],
    since: Optional[datetime] = None,
    until: Optional[datetime] = None,
) -> Tuple[ParticipantStats, ...]:
    """Count originals and assisted originals per roster participant.

    Args:
        participants: Full roster, returned in the same order.
        messages: Messages across the community's groups. Responses are
            skipped.
        since: Inclusive lower bound on ``created_at``; unbounded when None.
        until: Exclusive upper bound on ``created_at``; unbounded when None.
    """
    originals = partition_messages(messages).originals
    roster_ids = {p.participant_id for p in participants}

    message_counts: Counter = Counter()
    assisted_counts: Counter = Counter()
    for message in originals:
        if message.participant_id not in roster_ids or not _in_window(message, since, until):
            continue
        message_counts[message.participant_id] += 1
        if message.intervened:
            assisted_counts[message.participant_id] += 1

    return tuple(
        ParticipantStats(
            participant=participant,
            message_count=message_counts[participant.participant_id],
            assisted_count=assisted_counts[participant.participant_id],
        )
        for participant in participants
    )


def top_contributors(
    stats: Iterable[ParticipantStats],
    limit: int = TOP_CONTRIBUTORS_LIMIT,
) -> Tuple[TopContributor, ...]:
    """Highest message counts first, earliest joiner first on ties.

    Participants without messages are not contributors.
    """
    ranked: List[ParticipantStats] = sorted(
        (s for s in stats if s.message_count > 0),
        key=lambda s: (-s.message_count, s.participant.joined_at, s.participant_id),
    )
    return tuple(
        TopContributor(
            participant_id=s.participant_id,
            name=s.participant.label,
            message_count=s.message_count,
            engagement=classify_engagement(s.message_count),
        )
        for s in ranked[:limit]
    )


def build_community_stats(
    participants: Sequence[Participant],
    messages: Iterable[Message],
    since: Optional[datetime] = None,
    until: Optional[datetime] = None,
) -> CommunityStats:
    """Per-participant stats plus tiers, silent count and top contributors."""
    stats = aggregate_participant_stats(participants, messages, since=since, until=until)
    distribution = engagement_distribution(s.message_count for s in stats)

    logger.debug(
        "[STATS] %d participants: %d active, %d silent",
        len(stats),
        distribution.active_count,
        distribution.silent_count,
    )
    return CommunityStats(
        participants=stats,
        engagement=distribution,
        top_contributors=top_contributors(stats),
    )


def search_participants(stats: Iterable[ParticipantStats], term: Optional[str]) -> Tuple[ParticipantStats, ...]:
    """Filter by display name, public handle or verified handle (case-insensitive)."""
    rows = tuple(stats)
    if not term:
        return rows
    needle = term.lower()
    return tuple(
        s for s in rows
        if needle in (s.participant.display_name or "").lower()
        or needle in (s.participant.public_channel_id or "").lower()
        or needle in (s.participant.verified_channel_id or "").lower()
    )
