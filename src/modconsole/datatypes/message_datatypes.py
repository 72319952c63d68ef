"""
Message and thread types for the intervention view.

- `SenderChannel`: who produced a message (a member, the community bot or
  the private bot).
- `Message`: one immutable row of the append-only message stream.
- `Thread`: an original message paired with its ordered responses.
- `ResponseClassification`: how a thread's responses reached the group.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Iterable, Optional, Tuple


class SenderChannel(Enum):
    """Channel a message was sent through."""

    MEMBER = "member"
    COMMUNITY_BOT = "community-bot"
    PRIVATE_BOT = "private-bot"

    def __str__(self) -> str:
        return self.value

    @property
    def is_bot(self) -> bool:
        return self is not SenderChannel.MEMBER


class ResponseClassification(Enum):
    """Delivery mix of a thread's responses."""

    DUAL = "dual"
    PRIVATE_ONLY = "private-only"
    COMMUNITY_ONLY = "community-only"
    NONE = "none"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True, slots=True)
class Message:
    """A single chat message.

    Attributes:
        message_id: Unique identifier of the message.
        community_id: Community (organization) the message belongs to.
        group_id: Group chat the message was posted in.
        participant_id: Sending participant, None for automated senders.
        sender_channel: Channel the message was sent through.
        body: Message text.
        created_at: Creation time, keeping the offset it was recorded with.
        intervention_category: Moderation tag such as ``profanity`` or ``spam``.
        intervened: Whether a moderation action was associated with the message.
        responds_to_message_id: Original message this one responds to. Set only
            on responses, which are always bot messages.
    """

    message_id: str
    community_id: str
    group_id: str
    participant_id: Optional[str]
    sender_channel: SenderChannel
    body: str
    created_at: datetime
    intervention_category: Optional[str] = None
    intervened: bool = False
    responds_to_message_id: Optional[str] = None

    @property
    def is_response(self) -> bool:
        return self.responds_to_message_id is not None


@dataclass(frozen=True, slots=True)
class MessagePartition:
    """Originals and responses split out of one snapshot."""

    originals: Tuple[Message, ...] = ()
    responses: Tuple[Message, ...] = ()


@dataclass(frozen=True, slots=True)
class Thread:
    """An original message and every response linked to it, oldest first."""

    original: Message
    responses: Tuple[Message, ...] = field(default_factory=tuple)

    @property
    def classification(self) -> ResponseClassification:
        return classify_responses(self.responses)

    @property
    def has_responses(self) -> bool:
        return bool(self.responses)


def classify_responses(responses: Iterable[Message]) -> ResponseClassification:
    """Classify a response list by the bot channels it reached.

    ``dual`` when both the community bot and the private bot answered,
    ``private-only`` or ``community-only`` when only one did, and ``none`` for
    an empty list. Member-channel rows never count toward a channel.
    """
    channels = {response.sender_channel for response in responses}
    has_community = SenderChannel.COMMUNITY_BOT in channels
    has_private = SenderChannel.PRIVATE_BOT in channels

    if has_community and has_private:
        return ResponseClassification.DUAL
    if has_private:
        return ResponseClassification.PRIVATE_ONLY
    if has_community:
        return ResponseClassification.COMMUNITY_ONLY
    return ResponseClassification.NONE
