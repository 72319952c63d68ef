"""
Time-windowed community analytics.

The engine takes two already-fetched message snapshots, the current window
and the equally long window right before it, plus the participant roster.
It never fetches anything itself and returns a frozen ``CommunityAnalytics``.
Only member-channel originals are counted: bot traffic would inflate every
activity figure.

Growth rates use ``growth_rate``, which reports 0 when the previous period is
empty. A 0% growth therefore does not mean "no activity"; it may mean there
was nothing to compare against.
"""

from __future__ import annotations

from collections import Counter
from datetime import date, timedelta
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from modconsole.analytics.activity_histograms import daily_histogram, hourly_histogram, peak_day, peak_hour
from modconsole.analytics.content_signals import average_length, contains_emoji, contains_link, is_question
from modconsole.datatypes.analytics_datatypes import AnalyticsWindow, CommunityAnalytics, WeeklyMemberActivity
from modconsole.datatypes.message_datatypes import Message, SenderChannel
from modconsole.datatypes.participant_datatypes import Participant, TopContributor
from modconsole.engagement.engagement_tiers import classify_engagement, engagement_distribution
from modconsole.engagement.participant_stats import TOP_CONTRIBUTORS_LIMIT
from modconsole.util.logger import get_logger

logger = get_logger("analytics_engine")

NEW_MEMBER_WEEKS = 4


def growth_rate(current: float, previous: float) -> float:
    """Percentage change from ``previous`` to ``current``; 0 when ``previous`` is 0."""
    if previous == 0:
        return 0.0
    return ((current - previous) / previous) * 100


def member_messages(messages: Iterable[Message]) -> Tuple[Message, ...]:
    """Originals sent by members through the member channel."""
    return tuple(
        m for m in messages
        if not m.is_response and m.sender_channel is SenderChannel.MEMBER
    )


def _joined_between(participants: Iterable[Participant], start, end) -> List[Participant]:
    return [p for p in participants if start <= p.joined_at < end]


def _top_contributors(
    counts: Mapping[str, int],
    known: Mapping[str, Participant],
) -> Tuple[TopContributor, ...]:
    def rank(item):
        participant_id, count = item
        participant = known.get(participant_id)
        if participant is None:
            return (-count, 1, participant_id)
        return (-count, 0, participant.joined_at, participant_id)

    rows = []
    for participant_id, count in sorted(counts.items(), key=rank)[:TOP_CONTRIBUTORS_LIMIT]:
        participant = known.get(participant_id)
        rows.append(
            TopContributor(
                participant_id=participant_id,
                name=participant.label if participant else "Anonymous",
                message_count=count,
                engagement=classify_engagement(count),
            )
        )
    return tuple(rows)


def _new_member_activity(
    participants: Sequence[Participant],
    active_ids: set,
    end,
) -> Tuple[WeeklyMemberActivity, ...]:
    weeks = []
    for index in range(NEW_MEMBER_WEEKS):
        weeks_back = NEW_MEMBER_WEEKS - index
        week_start = end - timedelta(days=7 * weeks_back)
        week_end = week_start + timedelta(days=7)
        joined = _joined_between(participants, week_start, week_end)
        weeks.append(
            WeeklyMemberActivity(
                week=f"Week {index + 1}",
                joined=len(joined),
                active=sum(1 for p in joined if p.participant_id in active_ids),
            )
        )
    return tuple(weeks)


def compute_community_analytics(
    current: Iterable[Message],
    previous: Iterable[Message],
    participants: Sequence[Participant],
    window: AnalyticsWindow,
    known_participants: Optional[Iterable[Participant]] = None,
    today: Optional[date] = None,
) -> CommunityAnalytics:
    """Compute every analytics figure for one window.

    Args:
        current: Messages created in ``[window.start, window.end)``.
        previous: Messages created in ``[window.previous_start, window.start)``.
        participants: Roster the new-member figures are drawn from,
            typically participants joined since ``window.previous_start``.
            Silent members are the ones among them who joined in the
            current window and posted nothing.
        window: Bounds of both periods.
        known_participants: Extra participants used only to name and rank top
            contributors who are not in ``participants``.
        today: Last day of the seven-day histogram; defaults to the window end.

    Returns:
        The analytics record. An empty current window gives all-zero metrics.
    """
    current_messages = member_messages(current)
    previous_messages = member_messages(previous)

    total = len(current_messages)
    previous_total = len(previous_messages)

    counts: Counter = Counter(m.participant_id for m in current_messages if m.participant_id is not None)
    active_ids = set(counts)

    new_members = _joined_between(participants, window.start, window.end)
    previous_new_members = _joined_between(participants, window.previous_start, window.start)

    # Silent members come from the current-window roster only.
    roster_counts: Dict[str, int] = {p.participant_id: counts.get(p.participant_id, 0) for p in new_members}
    roster_counts.update(counts)
    distribution = engagement_distribution(roster_counts.values())

    known: Dict[str, Participant] = {p.participant_id: p for p in (known_participants or ())}
    known.update({p.participant_id: p for p in participants})

    hourly = hourly_histogram(current_messages)
    daily = daily_histogram(current_messages, today or window.end.date())
    bodies = [m.body for m in current_messages]
    question_count = sum(1 for body in bodies if is_question(body))

    analytics = CommunityAnalytics(
        total_messages=total,
        previous_total_messages=previous_total,
        message_growth_rate=growth_rate(total, previous_total),
        active_members=len(active_ids),
        new_members=len(new_members),
        previous_new_members=len(previous_new_members),
        member_growth_rate=growth_rate(len(new_members), len(previous_new_members)),
        avg_messages_per_member=total / len(active_ids) if active_ids else 0.0,
        hourly_activity=hourly,
        peak_hour=peak_hour(hourly),
        daily_activity=daily,
        peak_day=peak_day(daily),
        avg_message_length=average_length(bodies),
        question_count=question_count,
        question_rate=(question_count / total) * 100 if total else 0.0,
        link_share_count=sum(1 for body in bodies if contains_link(body)),
        emoji_usage=sum(1 for body in bodies if contains_emoji(body)),
        engagement=distribution,
        silent_members=distribution.silent_count,
        top_contributors=_top_contributors(counts, known),
        new_member_activity=_new_member_activity(participants, active_ids, window.end),
    )
    logger.debug(
        "[ANALYTICS] Window %s..%s: %d messages (%d previous), %d active members",
        window.start.isoformat(),
        window.end.isoformat(),
        total,
        previous_total,
        analytics.active_members,
    )
    return analytics
