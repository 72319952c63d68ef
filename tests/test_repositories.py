"""Tests for the SQLite message store and registry repositories."""

from contextlib import asynccontextmanager
from datetime import datetime, timedelta, timezone

import pytest

from modconsole.database.db_connection import ConnectionManager
from modconsole.datatypes.group_datatypes import Group
from modconsole.datatypes.message_datatypes import Message, SenderChannel
from modconsole.datatypes.participant_datatypes import Participant
from modconsole.repositories.message_repo import message_repo
from modconsole.repositories.registry_repo import registry_repo

BASE = datetime(2024, 6, 1, 9, 0, tzinfo=timezone(timedelta(hours=2)))


@asynccontextmanager
async def open_database(tmp_path):
    manager = ConnectionManager()
    await manager.open(tmp_path / "data" / "test.db")
    try:
        yield manager
    finally:
        await manager.close()


def make_message(mid, minutes, group="g1", channel=SenderChannel.MEMBER, responds_to=None, community="c1", **kwargs):
    return Message(
        message_id=mid,
        community_id=community,
        group_id=group,
        participant_id=None if channel.is_bot else "p1",
        sender_channel=channel,
        body=f"body {mid}",
        created_at=BASE + timedelta(minutes=minutes),
        responds_to_message_id=responds_to,
        **kwargs,
    )


@pytest.mark.asyncio
async def test_open_creates_schema_and_close_resets(tmp_path):
    manager = ConnectionManager()
    await manager.open(tmp_path / "nested" / "console.db")
    assert manager.is_open

    async with manager.read() as conn:
        cursor = await conn.execute("SELECT name FROM sqlite_master WHERE type='table'")
        tables = {row[0] for row in await cursor.fetchall()}

    await manager.close()

    assert {"participants", "community_groups", "master_groups", "messages", "schema_version"} <= tables
    assert not manager.is_open
    with pytest.raises(RuntimeError):
        _ = manager.connection


@pytest.mark.asyncio
async def test_transaction_rolls_back_on_error(tmp_path):
    async with open_database(tmp_path) as db:
        with pytest.raises(ValueError):
            async with db.transaction() as conn:
                await message_repo.insert(conn, make_message("1", 0))
                raise ValueError("abort")

        async with db.read() as conn:
            assert await message_repo.fetch(conn, "c1") == []


@pytest.mark.asyncio
async def test_message_round_trip_keeps_offset(tmp_path):
    original = make_message("1", 0, intervention_category="spam", intervened=True)

    async with open_database(tmp_path) as db:
        async with db.transaction() as conn:
            await message_repo.insert(conn, original)
        async with db.read() as conn:
            (stored,) = await message_repo.fetch(conn, "c1")

    assert stored == original
    assert stored.created_at.utcoffset() == timedelta(hours=2)
    assert stored.created_at.hour == 9


@pytest.mark.asyncio
async def test_fetch_filters(tmp_path):
    messages = [
        make_message("1", 0),
        make_message("2", 10, group="g2"),
        make_message("3", 20),
        make_message("r1", 21, channel=SenderChannel.COMMUNITY_BOT, responds_to="1"),
        make_message("x", 5, community="c2"),
    ]

    async with open_database(tmp_path) as db:
        async with db.transaction() as conn:
            await message_repo.insert_many(conn, messages)

        async with db.read() as conn:
            everything = await message_repo.fetch(conn, "c1")
            windowed = await message_repo.fetch(
                conn, "c1", since=BASE + timedelta(minutes=10), until=BASE + timedelta(minutes=21)
            )
            scoped = await message_repo.fetch(conn, "c1", group_ids=["g2"])
            nothing = await message_repo.fetch(conn, "c1", group_ids=[])
            bots = await message_repo.fetch(conn, "c1", sender_channels=[SenderChannel.COMMUNITY_BOT])
            originals = await message_repo.fetch(conn, "c1", originals_only=True)
            responses = await message_repo.fetch_responses(conn, ["1", "3"])

    assert [m.message_id for m in everything] == ["1", "2", "3", "r1"]
    assert [m.message_id for m in windowed] == ["2", "3"]
    assert [m.message_id for m in scoped] == ["2"]
    assert nothing == []
    assert [m.message_id for m in bots] == ["r1"]
    assert [m.message_id for m in originals] == ["1", "2", "3"]
    assert [m.message_id for m in responses] == ["r1"]


@pytest.mark.asyncio
async def test_fetch_flagged(tmp_path):
    async with open_database(tmp_path) as db:
        async with db.transaction() as conn:
            await message_repo.insert_many(
                conn,
                [
                    make_message("1", 0, intervention_category="spam"),
                    make_message("2", 30, intervention_category="profanity"),
                    make_message("3", 40),
                ],
            )
        async with db.read() as conn:
            recent = await message_repo.fetch_flagged(conn, "c1", ["g1"], since=BASE + timedelta(minutes=15))

    assert [m.message_id for m in recent] == ["2"]


@pytest.mark.asyncio
async def test_participants_and_verified_channel(tmp_path):
    roster = [
        Participant("p1", "c1", "Ann", "+100", BASE - timedelta(days=40)),
        Participant("p2", "c1", None, "+200", BASE - timedelta(days=2)),
        Participant("p3", "c2", "Other", None, BASE),
    ]

    async with open_database(tmp_path) as db:
        async with db.transaction() as conn:
            for participant in roster:
                await registry_repo.upsert_participant(conn, participant)
            assert await registry_repo.update_verified_channel(conn, "p1", "  +999  ")
            assert await registry_repo.update_verified_channel(conn, "p2", "   ")
            assert not await registry_repo.update_verified_channel(conn, "missing", "+1")

        async with db.read() as conn:
            community = await registry_repo.fetch_participants(conn, "c1")
            recent = await registry_repo.fetch_participants(conn, "c1", joined_since=BASE - timedelta(days=7))

    assert [p.participant_id for p in community] == ["p1", "p2"]
    assert community[0].verified_channel_id == "+999"
    assert community[1].verified_channel_id is None
    assert [p.participant_id for p in recent] == ["p2"]


@pytest.mark.asyncio
async def test_groups_and_master_groups(tmp_path):
    async with open_database(tmp_path) as db:
        async with db.transaction() as conn:
            await registry_repo.insert_master_group(conn, "c1", "M1", " Region North ", "")
            await registry_repo.insert_master_group(conn, "c1", "M2", "Empty")
            await registry_repo.insert_group(conn, "c1", Group("L1", "Book Club", "g1"))
            await registry_repo.insert_group(conn, "c1", Group("L2", "Walkers"))
            assert await registry_repo.assign_group(conn, "L1", "M1")
            assert not await registry_repo.assign_group(conn, "missing", "M1")

        async with db.read() as conn:
            groups = await registry_repo.fetch_groups(conn, "c1")
            masters = await registry_repo.fetch_master_groups(conn, "c1")
            other = await registry_repo.fetch_master_groups(conn, "c2")

    assert [(g.group_id, g.master_group_id) for g in groups] == [("L1", "M1"), ("L2", None)]
    assert [(m.master_group_id, m.name, m.description) for m in masters] == [
        ("M1", "Region North", None),
        ("M2", "Empty", None),
    ]
    assert [g.group_id for g in masters[0].groups] == ["L1"]
    assert masters[1].groups == ()
    assert other == []
