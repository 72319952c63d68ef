"""
Hourly and daily activity histograms with their peaks.
"""

from __future__ import annotations

from collections import Counter
from datetime import date, timedelta
from typing import Iterable, Optional, Sequence, Tuple

from modconsole.datatypes.analytics_datatypes import DayBucket, HourBucket
from modconsole.datatypes.message_datatypes import Message

DAILY_WINDOW_DAYS = 7
WEEKDAY_NAMES = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")


def hourly_histogram(messages: Iterable[Message]) -> Tuple[HourBucket, ...]:
    """24 buckets counting messages by the hour of their own timestamp."""
    counts = Counter(message.created_at.hour for message in messages)
    return tuple(HourBucket(hour=hour, count=counts[hour]) for hour in range(24))


def peak_hour(buckets: Sequence[HourBucket]) -> HourBucket:
    """Busiest hour; the lowest hour wins a tie."""
    if not buckets:
        return HourBucket(hour=0, count=0)
    return min(buckets, key=lambda bucket: (-bucket.count, bucket.hour))


def daily_histogram(messages: Iterable[Message], today: date) -> Tuple[DayBucket, ...]:
    """One bucket per calendar day for the seven days ending ``today``.

    The window is fixed whatever range the rest of the analytics covers.
    Messages outside it are not counted.
    """
    counts = Counter(message.created_at.date() for message in messages)
    days = [today - timedelta(days=offset) for offset in range(DAILY_WINDOW_DAYS - 1, -1, -1)]
    return tuple(DayBucket(date=day, day=WEEKDAY_NAMES[day.weekday()], count=counts[day]) for day in days)


def peak_day(buckets: Sequence[DayBucket]) -> Optional[DayBucket]:
    """Busiest day; the most recent date wins a tie."""
    if not buckets:
        return None
    return max(buckets, key=lambda bucket: (bucket.count, bucket.date))
