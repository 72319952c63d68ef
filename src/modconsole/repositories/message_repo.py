"""
Message store: append-only reads and writes over the ``messages`` table.
"""

from __future__ import annotations

from datetime import datetime
from typing import Iterable, List, Optional, Sequence

import aiosqlite

from modconsole.datatypes.message_datatypes import Message, SenderChannel
from modconsole.repositories.row_codecs import encode_datetime, epoch, placeholders, rows_to_messages
from modconsole.util.logger import get_logger

logger = get_logger("message_repo")

_COLUMNS = (
    "id, community_id, group_id, participant_id, sender_channel, body, "
    "created_at, created_offset, intervention_category, intervened, responds_to_message_id"
)


class MessageRepository:
    """Low-level access to the ``messages`` table."""

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    @staticmethod
    async def insert(conn: aiosqlite.Connection, message: Message) -> None:
        """Append a message. Messages are immutable, so an existing id is an error."""
        created_at, created_offset = encode_datetime(message.created_at)
        await conn.execute(
            f"INSERT INTO messages ({_COLUMNS}) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)",
            (
                message.message_id,
                message.community_id,
                message.group_id,
                message.participant_id,
                message.sender_channel.value,
                message.body,
                created_at,
                created_offset,
                message.intervention_category,
                int(message.intervened),
                message.responds_to_message_id,
            ),
        )

    @staticmethod
    async def insert_many(conn: aiosqlite.Connection, messages: Iterable[Message]) -> None:
        for message in messages:
            await MessageRepository.insert(conn, message)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    @staticmethod
    async def fetch(
        conn: aiosqlite.Connection,
        community_id: str,
        group_ids: Optional[Sequence[str]] = None,
        since: Optional[datetime] = None,
        until: Optional[datetime] = None,
        sender_channels: Optional[Sequence[SenderChannel]] = None,
        originals_only: bool = False,
    ) -> List[Message]:
        """
        Return messages of a community created in ``[since, until)``, oldest first.

        Args:
            group_ids: Restrict to these groups. An empty sequence matches nothing.
            sender_channels: Restrict to these channels.
            originals_only: Skip responses.
        """
        if group_ids is not None and not group_ids:
            return []

        clauses = ["community_id = ?"]
        params: list = [community_id]
        if group_ids is not None:
            clauses.append(f"group_id IN ({placeholders(group_ids)})")
            params.extend(group_ids)
        if since is not None:
            clauses.append("created_at >= ?")
            params.append(epoch(since))
        if until is not None:
            clauses.append("created_at < ?")
            params.append(epoch(until))
        if sender_channels:
            clauses.append(f"sender_channel IN ({placeholders(sender_channels)})")
            params.extend(channel.value for channel in sender_channels)
        if originals_only:
            clauses.append("responds_to_message_id IS NULL")

        cursor = await conn.execute(
            f"SELECT {_COLUMNS} FROM messages WHERE {' AND '.join(clauses)} ORDER BY created_at, id",
            params,
        )
        rows = await cursor.fetchall()
        logger.debug("[MESSAGE REPO] Fetched %d messages for community %s", len(rows), community_id)
        return rows_to_messages(rows)

    @staticmethod
    async def fetch_responses(conn: aiosqlite.Connection, original_ids: Sequence[str]) -> List[Message]:
        """Return every bot response pointing at one of ``original_ids``, oldest first."""
        if not original_ids:
            return []
        cursor = await conn.execute(
            f"SELECT {_COLUMNS} FROM messages "
            f"WHERE responds_to_message_id IN ({placeholders(original_ids)}) "
            "AND sender_channel IN (?, ?) ORDER BY created_at, id",
            (*original_ids, SenderChannel.COMMUNITY_BOT.value, SenderChannel.PRIVATE_BOT.value),
        )
        return rows_to_messages(await cursor.fetchall())

    @staticmethod
    async def fetch_flagged(
        conn: aiosqlite.Connection,
        community_id: str,
        group_ids: Optional[Sequence[str]] = None,
        since: Optional[datetime] = None,
    ) -> List[Message]:
        """Return originals carrying an intervention category.

        ``group_ids=None`` covers every group; an empty sequence matches nothing.
        """
        if group_ids is not None and not group_ids:
            return []
        params: list = [community_id]
        query = (
            f"SELECT {_COLUMNS} FROM messages WHERE community_id = ? "
            "AND intervention_category IS NOT NULL AND responds_to_message_id IS NULL"
        )
        if group_ids is not None:
            query += f" AND group_id IN ({placeholders(group_ids)})"
            params.extend(group_ids)
        if since is not None:
            query += " AND created_at >= ?"
            params.append(epoch(since))
        cursor = await conn.execute(query + " ORDER BY created_at, id", params)
        return rows_to_messages(await cursor.fetchall())


# Module-level singleton
message_repo = MessageRepository()
