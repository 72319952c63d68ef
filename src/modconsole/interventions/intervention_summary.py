"""
Counters and filters over flagged messages for the interventions view.
"""

from __future__ import annotations

from collections import Counter
from datetime import datetime
from typing import Iterable, Mapping, Optional, Tuple

from modconsole.analytics.time_windows import InterventionPeriod, period_start
from modconsole.datatypes.analytics_datatypes import InterventionSummary
from modconsole.datatypes.message_datatypes import Message
from modconsole.interventions.message_filters import matches_search

# Display names of the categories the moderation pipeline emits.
INTERVENTION_CATEGORIES = {
    "medical_verification": "Medical Verification",
    "profanity": "Profanity",
    "self_promotion": "Self Promotion",
    "harassment": "Harassment",
    "spam": "Spam",
    "threats": "Threats",
    "hate_speech": "Hate Speech",
    "inappropriate_content": "Inappropriate Content",
    "dangerous_advice": "Dangerous Advice",
    "helpful_response": "Helpful Response",
}

UNKNOWN_CATEGORY = "unknown"


def category_label(category: Optional[str]) -> str:
    """Return the display name of a category tag.

    Unknown tags are title-cased with underscores turned into spaces;
    a missing tag reads as a helpful response.
    """
    if not category:
        return INTERVENTION_CATEGORIES["helpful_response"]
    if category in INTERVENTION_CATEGORIES:
        return INTERVENTION_CATEGORIES[category]
    return category.replace("_", " ").title()


def flagged_messages(messages: Iterable[Message]) -> Tuple[Message, ...]:
    """Originals carrying an intervention category."""
    return tuple(m for m in messages if not m.is_response and m.intervention_category is not None)


def summarize_interventions(messages: Iterable[Message], now: datetime) -> InterventionSummary:
    """Count flagged messages per category and over the last day and week.

    ``today_count`` starts at midnight of ``now``'s own date and
    ``week_count`` covers the last seven days. ``success_rate`` is the share
    of flagged messages that had an intervention, rounded to a whole percent.
    A naive ``now`` is read as UTC.
    """
    flagged = flagged_messages(messages)
    if not flagged:
        return InterventionSummary()

    midnight = period_start(InterventionPeriod.TODAY, now)
    week_ago = period_start(InterventionPeriod.WEEK, now)

    categories = Counter(m.intervention_category or UNKNOWN_CATEGORY for m in flagged)
    today_count = sum(1 for m in flagged if m.created_at >= midnight)
    week_count = sum(1 for m in flagged if m.created_at >= week_ago)
    intervened = sum(1 for m in flagged if m.intervened)

    return InterventionSummary(
        total=len(flagged),
        categories=dict(sorted(categories.items())),
        today_count=today_count,
        week_count=week_count,
        success_rate=round(intervened / len(flagged) * 100),
    )


def filter_interventions(
    messages: Iterable[Message],
    category: Optional[str] = None,
    search: Optional[str] = None,
    participant_names: Optional[Mapping[str, str]] = None,
    group_names: Optional[Mapping[str, str]] = None,
) -> Tuple[Message, ...]:
    """Flagged messages of one category (or all) matching a search term, newest first."""
    selected = [
        m
        for m in flagged_messages(messages)
        if (category in (None, "all") or m.intervention_category == category)
        and matches_search(m, search, participant_names, group_names)
    ]
    selected.sort(key=lambda m: (m.created_at, m.message_id), reverse=True)
    return tuple(selected)
