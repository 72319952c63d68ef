"""
Schema of the message store and the group/participant registry.

Timestamps are stored as INTEGER unix seconds next to the UTC offset (in
minutes) they were recorded with, so range filters stay numeric and each
message keeps its own local hour.
"""

import aiosqlite
from modconsole.util.logger import get_logger

logger = get_logger("database_schema")

SCHEMA_VERSION = 1


class SchemaManager:
    """Creates tables and indexes and records the schema version."""

    @staticmethod
    async def initialize_schema(db: aiosqlite.Connection) -> None:
        """
        Create all tables and indexes that do not exist yet.

        Args:
            db: Open database connection
        """
        await SchemaManager._create_tables(db)
        await SchemaManager._create_indexes(db)
        await SchemaManager._update_schema_version(db)
        await db.commit()
        logger.info("[SCHEMA] Database schema initialized")

    @staticmethod
    async def _create_tables(db: aiosqlite.Connection) -> None:
        await db.execute("""
            CREATE TABLE IF NOT EXISTS participants (
                id TEXT PRIMARY KEY,
                community_id TEXT NOT NULL,
                display_name TEXT,
                public_channel_id TEXT,
                verified_channel_id TEXT,
                joined_at INTEGER NOT NULL,
                joined_offset INTEGER NOT NULL DEFAULT 0
            )
        """)

        await db.execute("""
            CREATE TABLE IF NOT EXISTS master_groups (
                id TEXT PRIMARY KEY,
                community_id TEXT NOT NULL,
                name TEXT NOT NULL,
                description TEXT
            )
        """)

        await db.execute("""
            CREATE TABLE IF NOT EXISTS community_groups (
                id TEXT PRIMARY KEY,
                community_id TEXT NOT NULL,
                name TEXT,
                external_group_id TEXT,
                master_group_id TEXT,
                FOREIGN KEY (master_group_id) REFERENCES master_groups(id) ON DELETE SET NULL
            )
        """)

        await db.execute("""
            CREATE TABLE IF NOT EXISTS messages (
                id TEXT PRIMARY KEY,
                community_id TEXT NOT NULL,
                group_id TEXT NOT NULL,
                participant_id TEXT,
                sender_channel TEXT NOT NULL,
                body TEXT NOT NULL DEFAULT '',
                created_at INTEGER NOT NULL,
                created_offset INTEGER NOT NULL DEFAULT 0,
                intervention_category TEXT,
                intervened INTEGER NOT NULL DEFAULT 0,
                responds_to_message_id TEXT
            )
        """)

        await db.execute("""
            CREATE TABLE IF NOT EXISTS schema_version (
                version INTEGER PRIMARY KEY,
                applied_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            )
        """)

    @staticmethod
    async def _create_indexes(db: aiosqlite.Connection) -> None:
        await db.execute(
            "CREATE INDEX IF NOT EXISTS idx_messages_group_created ON messages(group_id, created_at)"
        )
        await db.execute(
            "CREATE INDEX IF NOT EXISTS idx_messages_responds_to ON messages(responds_to_message_id)"
        )
        await db.execute(
            "CREATE INDEX IF NOT EXISTS idx_participants_community ON participants(community_id, joined_at)"
        )
        await db.execute(
            "CREATE INDEX IF NOT EXISTS idx_groups_community ON community_groups(community_id)"
        )

    @staticmethod
    async def _update_schema_version(db: aiosqlite.Connection) -> None:
        await db.execute(
            "INSERT OR IGNORE INTO schema_version (version) VALUES (?)",
            (SCHEMA_VERSION,),
        )
