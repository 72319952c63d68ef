"""
Group/participant registry: ``participants``, ``community_groups`` and ``master_groups``.
"""

from __future__ import annotations

from collections import defaultdict
from datetime import datetime
from typing import Dict, List, Optional

import aiosqlite

from modconsole.datatypes.group_datatypes import Group, MasterGroup
from modconsole.datatypes.participant_datatypes import Participant
from modconsole.repositories.row_codecs import encode_datetime, epoch, row_to_group, row_to_participant
from modconsole.util.logger import get_logger

logger = get_logger("registry_repo")


class RegistryRepository:
    """Low-level CRUD for registry records, scoped by community."""

    # ------------------------------------------------------------------
    # Participants
    # ------------------------------------------------------------------

    @staticmethod
    async def upsert_participant(conn: aiosqlite.Connection, participant: Participant) -> None:
        joined_at, joined_offset = encode_datetime(participant.joined_at)
        await conn.execute(
            """
            INSERT INTO participants (id, community_id, display_name, public_channel_id,
                                      verified_channel_id, joined_at, joined_offset)
            VALUES (?, ?, ?, ?, ?, ?, ?)
            ON CONFLICT(id) DO UPDATE SET
                display_name        = excluded.display_name,
                public_channel_id   = excluded.public_channel_id,
                verified_channel_id = excluded.verified_channel_id
            """,
            (
                participant.participant_id,
                participant.community_id,
                participant.display_name,
                participant.public_channel_id,
                participant.verified_channel_id,
                joined_at,
                joined_offset,
            ),
        )

    @staticmethod
    async def update_verified_channel(
        conn: aiosqlite.Connection,
        participant_id: str,
        verified_channel_id: Optional[str],
    ) -> bool:
        """Set or clear a participant's verified handle. Blank values clear it.

        Returns True if a participant row was updated.
        """
        value = (verified_channel_id or "").strip() or None
        cursor = await conn.execute(
            "UPDATE participants SET verified_channel_id = ? WHERE id = ?",
            (value, participant_id),
        )
        logger.debug("[REGISTRY REPO] Verified channel of %s %s", participant_id, "set" if value else "cleared")
        return cursor.rowcount > 0

    @staticmethod
    async def fetch_participants(
        conn: aiosqlite.Connection,
        community_id: str,
        joined_since: Optional[datetime] = None,
    ) -> List[Participant]:
        """Return the community roster, optionally only members joined since a date."""
        query = "SELECT * FROM participants WHERE community_id = ?"
        params: list = [community_id]
        if joined_since is not None:
            query += " AND joined_at >= ?"
            params.append(epoch(joined_since))
        cursor = await conn.execute(query + " ORDER BY joined_at, id", params)
        return [row_to_participant(row) for row in await cursor.fetchall()]

    # ------------------------------------------------------------------
    # Groups and master groups
    # ------------------------------------------------------------------

    @staticmethod
    async def insert_master_group(
        conn: aiosqlite.Connection,
        community_id: str,
        master_group_id: str,
        name: str,
        description: Optional[str] = None,
    ) -> None:
        await conn.execute(
            "INSERT INTO master_groups (id, community_id, name, description) VALUES (?, ?, ?, ?)",
            (master_group_id, community_id, name.strip(), (description or "").strip() or None),
        )

    @staticmethod
    async def insert_group(conn: aiosqlite.Connection, community_id: str, group: Group) -> None:
        await conn.execute(
            "INSERT INTO community_groups (id, community_id, name, external_group_id, master_group_id) "
            "VALUES (?, ?, ?, ?, ?)",
            (group.group_id, community_id, group.name, group.external_group_id, group.master_group_id),
        )

    @staticmethod
    async def assign_group(conn: aiosqlite.Connection, group_id: str, master_group_id: str) -> bool:
        """Move a group under a master group. Returns True if the group exists."""
        cursor = await conn.execute(
            "UPDATE community_groups SET master_group_id = ? WHERE id = ?",
            (master_group_id, group_id),
        )
        return cursor.rowcount > 0

    @staticmethod
    async def fetch_groups(conn: aiosqlite.Connection, community_id: str) -> List[Group]:
        cursor = await conn.execute(
            "SELECT id, name, external_group_id, master_group_id FROM community_groups "
            "WHERE community_id = ? ORDER BY id",
            (community_id,),
        )
        return [row_to_group(row) for row in await cursor.fetchall()]

    @staticmethod
    async def fetch_master_groups(conn: aiosqlite.Connection, community_id: str) -> List[MasterGroup]:
        """Return master groups with their member groups (two queries, merged here)."""
        cursor = await conn.execute(
            "SELECT id, name, description FROM master_groups WHERE community_id = ? ORDER BY id",
            (community_id,),
        )
        master_rows = await cursor.fetchall()
        if not master_rows:
            return []

        members: Dict[str, List[Group]] = defaultdict(list)
        cursor = await conn.execute(
            "SELECT id, name, external_group_id, master_group_id FROM community_groups "
            "WHERE community_id = ? AND master_group_id IS NOT NULL ORDER BY id",
            (community_id,),
        )
        for row in await cursor.fetchall():
            members[row["master_group_id"]].append(row_to_group(row))

        return [
            MasterGroup(
                master_group_id=row["id"],
                name=row["name"],
                description=row["description"],
                groups=tuple(members.get(row["id"], ())),
            )
            for row in master_rows
        ]


# Module-level singleton
registry_repo = RegistryRepository()
