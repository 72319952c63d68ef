"""
Conversions between stored rows and record types.

Datetimes are written as (unix seconds, UTC offset in minutes). Naive
datetimes are taken to be UTC.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Iterable, Optional, Sequence, Tuple

import aiosqlite

from modconsole.datatypes.group_datatypes import Group
from modconsole.datatypes.message_datatypes import Message, SenderChannel
from modconsole.datatypes.participant_datatypes import Participant


def encode_datetime(value: datetime) -> Tuple[int, int]:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    offset = value.utcoffset() or timedelta(0)
    return int(value.timestamp()), int(offset.total_seconds() // 60)


def decode_datetime(seconds: int, offset_minutes: int) -> datetime:
    tz = timezone(timedelta(minutes=offset_minutes))
    return datetime.fromtimestamp(seconds, tz=tz)


def epoch(value: Optional[datetime]) -> Optional[int]:
    return None if value is None else encode_datetime(value)[0]


def placeholders(values: Sequence) -> str:
    return ", ".join("?" for _ in values)


def row_to_message(row: aiosqlite.Row) -> Message:
    return Message(
        message_id=row["id"],
        community_id=row["community_id"],
        group_id=row["group_id"],
        participant_id=row["participant_id"],
        sender_channel=SenderChannel(row["sender_channel"]),
        body=row["body"],
        created_at=decode_datetime(row["created_at"], row["created_offset"]),
        intervention_category=row["intervention_category"],
        intervened=bool(row["intervened"]),
        responds_to_message_id=row["responds_to_message_id"],
    )


def row_to_participant(row: aiosqlite.Row) -> Participant:
    return Participant(
        participant_id=row["id"],
        community_id=row["community_id"],
        display_name=row["display_name"],
        public_channel_id=row["public_channel_id"],
        verified_channel_id=row["verified_channel_id"],
        joined_at=decode_datetime(row["joined_at"], row["joined_offset"]),
    )


def row_to_group(row: aiosqlite.Row) -> Group:
    return Group(
        group_id=row["id"],
        name=row["name"],
        external_group_id=row["external_group_id"],
        master_group_id=row["master_group_id"],
    )


def rows_to_messages(rows: Iterable[aiosqlite.Row]):
    return [row_to_message(row) for row in rows]
