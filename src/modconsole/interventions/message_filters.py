"""
Listing helpers for the messages view: sender filter, search and paging.
"""

from __future__ import annotations

from enum import Enum
from typing import Iterable, Mapping, Optional, Tuple

from modconsole.datatypes.analytics_datatypes import MessagePage
from modconsole.datatypes.message_datatypes import Message, SenderChannel


class SenderFilter(Enum):
    ALL = "all"
    MEMBERS = "members"
    BOTS = "bots"

    def __str__(self) -> str:
        return self.value

    def accepts(self, channel: SenderChannel) -> bool:
        if self is SenderFilter.MEMBERS:
            return channel is SenderChannel.MEMBER
        if self is SenderFilter.BOTS:
            return channel.is_bot
        return True


def matches_search(
    message: Message,
    search: Optional[str],
    participant_names: Optional[Mapping[str, str]] = None,
    group_names: Optional[Mapping[str, str]] = None,
) -> bool:
    """Case-insensitive match against the body, sender name and group name."""
    if not search:
        return True
    needle = search.lower()
    if needle in message.body.lower():
        return True
    if participant_names and message.participant_id is not None:
        if needle in (participant_names.get(message.participant_id) or "").lower():
            return True
    if group_names:
        if needle in (group_names.get(message.group_id) or "").lower():
            return True
    return False


def filter_messages(
    messages: Iterable[Message],
    sender_filter: SenderFilter = SenderFilter.ALL,
    search: Optional[str] = None,
    participant_names: Optional[Mapping[str, str]] = None,
    group_names: Optional[Mapping[str, str]] = None,
) -> Tuple[Message, ...]:
    """Apply the sender filter and search term, newest first."""
    selected = [
        m
        for m in messages
        if sender_filter.accepts(m.sender_channel)
        and matches_search(m, search, participant_names, group_names)
    ]
    selected.sort(key=lambda m: (m.created_at, m.message_id), reverse=True)
    return tuple(selected)


def paginate_messages(messages: Iterable[Message], page: int = 1, per_page: int = 50) -> MessagePage:
    """Slice a newest-first listing into 1-based pages.

    Pages below 1 are read as page 1; a page past the end is empty but keeps
    the total count.
    """
    if per_page <= 0:
        raise ValueError(f"per_page must be positive, got {per_page}")
    ordered = sorted(messages, key=lambda m: (m.created_at, m.message_id), reverse=True)
    page = max(page, 1)
    offset = (page - 1) * per_page
    return MessagePage(
        items=tuple(ordered[offset:offset + per_page]),
        total=len(ordered),
        page=page,
        per_page=per_page,
    )
