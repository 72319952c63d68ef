"""
Threaded view of the message stream.

Messages reference the message that triggered them through
``responds_to_message_id``. Instead of linking objects to each other, every
call groups responses into an index keyed on the original's id and pairs each
original with its slice of that index. The result is a tuple of frozen
``Thread`` records that can be shared and compared freely.
"""

from __future__ import annotations

from collections import defaultdict
from typing import Dict, Iterable, List, Tuple

from modconsole.datatypes.message_datatypes import (
    Message,
    MessagePartition,
    ResponseClassification,
    SenderChannel,
    Thread,
    classify_responses,
)
from modconsole.util.logger import get_logger

logger = get_logger("message_graph")

__all__ = [
    "partition_messages",
    "build_response_index",
    "build_threads",
    "threads_for_participant",
    "classify_responses",
    "ResponseClassification",
]


def _chronological(message: Message):
    return (message.created_at, message.message_id)


def partition_messages(messages: Iterable[Message]) -> MessagePartition:
    """Split a snapshot into originals and responses.

    A message with a back-reference is always a response, whatever else it
    carries, so it can never be picked up as an original.
    """
    originals: List[Message] = []
    responses: List[Message] = []
    for message in messages:
        if message.is_response:
            responses.append(message)
        else:
            originals.append(message)
    return MessagePartition(originals=tuple(originals), responses=tuple(responses))


def build_response_index(messages: Iterable[Message]) -> Dict[str, Tuple[Message, ...]]:
    """Map each original id present in the snapshot to its responses, oldest first.

    Responses whose target is not an original of this snapshot (outside the
    query window, or pointing at themselves) are left out.
    """
    partition = partition_messages(messages)
    original_ids = {original.message_id for original in partition.originals}

    grouped: Dict[str, List[Message]] = defaultdict(list)
    dropped = 0
    for response in partition.responses:
        target = response.responds_to_message_id
        if target not in original_ids or target == response.message_id:
            dropped += 1
            continue
        grouped[target].append(response)

    if dropped:
        logger.debug("[THREADS] Dropped %d responses without an original in the snapshot", dropped)

    return {
        original_id: tuple(sorted(responses, key=_chronological))
        for original_id, responses in grouped.items()
    }


def build_threads(messages: Iterable[Message], flagged_only: bool = False) -> Tuple[Thread, ...]:
    """Pair every original with its responses.

    Args:
        messages: Unordered snapshot of originals and responses.
        flagged_only: Keep only originals marked ``intervened``. A flagged
            original without any response still yields a thread, with an
            empty response tuple.

    Returns:
        Threads ordered by the original's ``created_at``.
    """
    snapshot = tuple(messages)
    partition = partition_messages(snapshot)
    index = build_response_index(snapshot)

    threads = [
        Thread(original=original, responses=index.get(original.message_id, ()))
        for original in sorted(partition.originals, key=_chronological)
        if original.intervened or not flagged_only
    ]
    logger.debug(
        "[THREADS] Built %d threads from %d originals and %d responses",
        len(threads),
        len(partition.originals),
        len(partition.responses),
    )
    return tuple(threads)


def threads_for_participant(messages: Iterable[Message], participant_id: str) -> Tuple[Thread, ...]:
    """Return a participant's history: their member messages with responses attached, newest first."""
    snapshot = tuple(messages)
    index = build_response_index(snapshot)
    originals = [
        message
        for message in snapshot
        if not message.is_response
        and message.participant_id == participant_id
        and message.sender_channel is SenderChannel.MEMBER
        and message.body
    ]
    originals.sort(key=_chronological, reverse=True)
    return tuple(Thread(original=original, responses=index.get(original.message_id, ())) for original in originals)
