"""
Result types of the time-windowed analytics and intervention summaries.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Dict, Optional, Tuple

from modconsole.datatypes.message_datatypes import Message
from modconsole.datatypes.participant_datatypes import EngagementDistribution, TopContributor


@dataclass(frozen=True, slots=True)
class AnalyticsWindow:
    """Current window ``[start, end)`` and the preceding ``[previous_start, start)``."""

    start: datetime
    end: datetime
    previous_start: datetime

    @property
    def length(self):
        return self.end - self.start


@dataclass(frozen=True, slots=True)
class HourBucket:
    hour: int
    count: int = 0


@dataclass(frozen=True, slots=True)
class DayBucket:
    """Message count of one calendar day; ``day`` is the short weekday name."""

    date: date
    day: str
    count: int = 0


@dataclass(frozen=True, slots=True)
class WeeklyMemberActivity:
    """Members who joined in a week and how many of them posted in the window."""

    week: str
    joined: int = 0
    active: int = 0


@dataclass(frozen=True, slots=True)
class CommunityAnalytics:
    """Everything the analytics view shows for one window.

    Growth rates are percentages; a previous period with nothing in it reports
    0 rather than an infinite spike.
    """

    total_messages: int
    previous_total_messages: int
    message_growth_rate: float
    active_members: int
    new_members: int
    previous_new_members: int
    member_growth_rate: float
    avg_messages_per_member: float
    hourly_activity: Tuple[HourBucket, ...]
    peak_hour: HourBucket
    daily_activity: Tuple[DayBucket, ...]
    peak_day: Optional[DayBucket]
    avg_message_length: float
    question_count: int
    question_rate: float
    link_share_count: int
    emoji_usage: int
    engagement: EngagementDistribution
    silent_members: int
    top_contributors: Tuple[TopContributor, ...]
    new_member_activity: Tuple[WeeklyMemberActivity, ...] = ()


@dataclass(frozen=True, slots=True)
class InterventionSummary:
    """Counters over flagged messages."""

    total: int = 0
    categories: Dict[str, int] = field(default_factory=dict)
    today_count: int = 0
    week_count: int = 0
    success_rate: int = 0


@dataclass(frozen=True, slots=True)
class MessagePage:
    """One page of a filtered message listing, newest first."""

    items: Tuple[Message, ...]
    total: int
    page: int
    per_page: int

    @property
    def page_count(self) -> int:
        if self.total == 0:
            return 1
        return (self.total + self.per_page - 1) // self.per_page
