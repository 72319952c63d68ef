"""Tests for original/response threading."""

from datetime import datetime, timedelta, timezone

from modconsole.datatypes.message_datatypes import (
    Message,
    ResponseClassification,
    SenderChannel,
    Thread,
    classify_responses,
)
from modconsole.interventions.message_graph import (
    build_response_index,
    build_threads,
    partition_messages,
    threads_for_participant,
)

BASE = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


def msg(message_id, minutes=0, channel=SenderChannel.MEMBER, responds_to=None, participant="p1", body=None, **kwargs):
    return Message(
        message_id=message_id,
        community_id="c1",
        group_id="g1",
        participant_id=None if channel.is_bot else participant,
        sender_channel=channel,
        body=f"message {message_id}" if body is None else body,
        created_at=BASE + timedelta(minutes=minutes),
        responds_to_message_id=responds_to,
        **kwargs,
    )


def test_dual_thread_from_both_bots():
    messages = [
        msg("1", intervened=True, intervention_category="spam"),
        msg("2", 1, SenderChannel.COMMUNITY_BOT, responds_to="1"),
        msg("3", 2, SenderChannel.PRIVATE_BOT, responds_to="1"),
    ]

    threads = build_threads(messages)

    assert len(threads) == 1
    assert threads[0].original.message_id == "1"
    assert [r.message_id for r in threads[0].responses] == ["2", "3"]
    assert threads[0].classification is ResponseClassification.DUAL


def test_classification_single_channel_and_empty():
    private = msg("r1", channel=SenderChannel.PRIVATE_BOT, responds_to="1")
    community = msg("r2", channel=SenderChannel.COMMUNITY_BOT, responds_to="1")

    assert classify_responses([private]) is ResponseClassification.PRIVATE_ONLY
    assert classify_responses([community, community]) is ResponseClassification.COMMUNITY_ONLY
    assert classify_responses([]) is ResponseClassification.NONE
    assert Thread(original=msg("1")).classification is ResponseClassification.NONE


def test_every_response_lands_in_its_original_thread():
    messages = [
        msg("a", 0),
        msg("b", 5),
        msg("ra1", 1, SenderChannel.COMMUNITY_BOT, responds_to="a"),
        msg("rb1", 6, SenderChannel.PRIVATE_BOT, responds_to="b"),
        msg("ra2", 7, SenderChannel.PRIVATE_BOT, responds_to="a"),
    ]

    threads = {t.original.message_id: t for t in build_threads(messages)}
    responses = [m for m in messages if m.is_response]

    for thread in threads.values():
        for response in responses:
            attached = response in thread.responses
            assert attached == (response.responds_to_message_id == thread.original.message_id)


def test_responses_sorted_by_time_regardless_of_input_order():
    messages = [
        msg("r-late", 10, SenderChannel.COMMUNITY_BOT, responds_to="1"),
        msg("1", 0),
        msg("r-early", 3, SenderChannel.PRIVATE_BOT, responds_to="1"),
    ]

    (thread,) = build_threads(messages)

    assert [r.message_id for r in thread.responses] == ["r-early", "r-late"]


def test_dangling_and_self_references_are_dropped():
    messages = [
        msg("1", 0),
        msg("orphan", 1, SenderChannel.COMMUNITY_BOT, responds_to="missing"),
        msg("loop", 2, SenderChannel.COMMUNITY_BOT, responds_to="loop"),
    ]

    index = build_response_index(messages)
    threads = build_threads(messages)

    assert index == {}
    assert len(threads) == 1
    assert threads[0].responses == ()


def test_flagged_only_keeps_intervened_originals_without_responses():
    messages = [
        msg("1", 0, intervened=True),
        msg("2", 1),
        msg("r2", 2, SenderChannel.COMMUNITY_BOT, responds_to="2"),
    ]

    threads = build_threads(messages, flagged_only=True)

    assert [t.original.message_id for t in threads] == ["1"]
    assert threads[0].responses == ()
    assert not threads[0].has_responses


def test_threads_are_ordered_by_original_time():
    messages = [msg("late", 30), msg("early", 0), msg("mid", 10)]

    assert [t.original.message_id for t in build_threads(messages)] == ["early", "mid", "late"]


def test_partition_splits_originals_and_responses():
    partition = partition_messages([msg("1"), msg("r", 1, SenderChannel.PRIVATE_BOT, responds_to="1")])

    assert [m.message_id for m in partition.originals] == ["1"]
    assert [m.message_id for m in partition.responses] == ["r"]


def test_build_threads_is_idempotent():
    messages = [
        msg("1", 0, intervened=True),
        msg("r", 1, SenderChannel.PRIVATE_BOT, responds_to="1"),
    ]

    assert build_threads(messages) == build_threads(list(reversed(messages)))


def test_participant_history_newest_first_with_responses():
    messages = [
        msg("old", 0, participant="p1"),
        msg("new", 60, participant="p1"),
        msg("other", 30, participant="p2"),
        msg("blank", 90, participant="p1", body=""),
        msg("r", 61, SenderChannel.PRIVATE_BOT, responds_to="new"),
    ]

    history = threads_for_participant(messages, "p1")

    assert [t.original.message_id for t in history] == ["new", "old"]
    assert [r.message_id for r in history[0].responses] == ["r"]
