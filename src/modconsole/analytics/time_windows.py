"""
Range presets of the analytics and interventions views.
"""

from __future__ import annotations

import calendar
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Optional

from modconsole.datatypes.analytics_datatypes import AnalyticsWindow

# "All time" starts here; nothing is recorded before it.
ALL_TIME_START = datetime(2000, 1, 1)


class AnalyticsRange(Enum):
    LAST_7_DAYS = "7days"
    LAST_30_DAYS = "30days"
    LAST_90_DAYS = "90days"
    ALL = "all"

    def __str__(self) -> str:
        return self.value

    @property
    def days(self) -> Optional[int]:
        return {
            AnalyticsRange.LAST_7_DAYS: 7,
            AnalyticsRange.LAST_30_DAYS: 30,
            AnalyticsRange.LAST_90_DAYS: 90,
        }.get(self)


class InterventionPeriod(Enum):
    TODAY = "today"
    WEEK = "week"
    MONTH = "month"
    ALL = "all"

    def __str__(self) -> str:
        return self.value


def as_aware(now: datetime) -> datetime:
    """Read a naive datetime as UTC, the same rule the store applies."""
    return now if now.tzinfo is not None else now.replace(tzinfo=timezone.utc)


def _all_time_start(now: datetime) -> datetime:
    return ALL_TIME_START.replace(tzinfo=now.tzinfo)


def resolve_window(range_key: AnalyticsRange | str, now: datetime) -> AnalyticsWindow:
    """Return the current window ending at ``now`` and the equally long one before it.

    For ``all`` both windows start at the all-time origin, which leaves the
    previous window empty and every growth rate at 0.

    Raises:
        ValueError: If ``range_key`` is not a known preset.
    """
    now = as_aware(now)
    preset = AnalyticsRange(range_key)
    if preset.days is None:
        start = _all_time_start(now)
        return AnalyticsWindow(start=start, end=now, previous_start=start)

    length = timedelta(days=preset.days)
    return AnalyticsWindow(start=now - length, end=now, previous_start=now - 2 * length)


def _one_month_before(now: datetime) -> datetime:
    year, month = (now.year, now.month - 1) if now.month > 1 else (now.year - 1, 12)
    day = min(now.day, calendar.monthrange(year, month)[1])
    return now.replace(year=year, month=month, day=day)


def period_start(period: InterventionPeriod | str, now: datetime) -> datetime:
    """Return the lower bound of an interventions period.

    ``today`` starts at midnight, ``week`` seven days back, ``month`` one
    calendar month back (clamped to the month's last day).
    """
    now = as_aware(now)
    preset = InterventionPeriod(period)
    if preset is InterventionPeriod.TODAY:
        return now.replace(hour=0, minute=0, second=0, microsecond=0)
    if preset is InterventionPeriod.WEEK:
        return now - timedelta(days=7)
    if preset is InterventionPeriod.MONTH:
        return _one_month_before(now)
    return _all_time_start(now)
