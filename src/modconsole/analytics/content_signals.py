"""Text signals extracted from message bodies."""

from __future__ import annotations

import re
from typing import Iterable

INTERROGATIVE_WORDS = (
    "what", "how", "why", "when", "where", "who",
    "can", "could", "would", "should",
    "is", "are", "do", "does", "did",
)

_INTERROGATIVE_RE = re.compile(r"^(?:%s)\b" % "|".join(INTERROGATIVE_WORDS))
_LINK_RE = re.compile(r"https?://|www\.", re.IGNORECASE)
# Pictographic blocks: misc symbols and dingbats, emoticons, transport, flags,
# supplemental symbols and pictographs.
_EMOJI_RE = re.compile(
    "["
    "\u2600-\u27BF"
    "\U0001F1E6-\U0001F1FF"
    "\U0001F300-\U0001F5FF"
    "\U0001F600-\U0001F64F"
    "\U0001F680-\U0001F6FF"
    "\U0001F900-\U0001F9FF"
    "\U0001FA70-\U0001FAFF"
    "]"
)


def is_question(text: str) -> bool:
    """True when the text contains ``?`` or opens with an interrogative word."""
    if "?" in text:
        return True
    return bool(_INTERROGATIVE_RE.match(text.lstrip().lower()))


def contains_link(text: str) -> bool:
    return bool(_LINK_RE.search(text))


def contains_emoji(text: str) -> bool:
    return bool(_EMOJI_RE.search(text))


def average_length(texts: Iterable[str]) -> float:
    """Mean character length, 0 for no texts."""
    lengths = [len(text) for text in texts]
    return sum(lengths) / len(lengths) if lengths else 0.0
