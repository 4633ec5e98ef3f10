"""Per-chat statistics."""

from __future__ import annotations

import re
from collections import Counter
from dataclasses import dataclass, field

from .parsing import ChatMessage

DEFAULT_TITLE = "Chat"
SOLO_TITLE = "My Private Chat"

_PHONE_RE = re.compile(r"^[\d\s\-+()]+$")


@dataclass
class ChatStats:
    total_messages: int = 0
    participants: Counter = field(default_factory=Counter)  # sender -> message count
    media_count: int = 0


def compute_stats(messages: list[ChatMessage]) -> ChatStats:
    stats = ChatStats(total_messages=len(messages))
    for message in messages:
        stats.participants[message.sender] += 1
        if message.media_url:
            stats.media_count += 1
    return stats


def detect_me_sender(messages: list[ChatMessage], window: int = 300) -> str | None:
    """Guess the exporting user: the most frequent sender early in the chat.

    Ties go to whoever appears first.
    """
    counts = Counter(m.sender for m in messages[:window])
    if not counts:
        return None
    return counts.most_common(1)[0][0]


def chat_title(stats: ChatStats | None, me: str | None = None) -> str:
    if stats is None:
        return DEFAULT_TITLE
    others = [name for name in stats.participants if name != me]
    if not others:
        return SOLO_TITLE
    return others[0]


def display_sender(name: str, me: str | None = None) -> str:
    """Show phone-number senders as ``+<digits>``; other names pass through."""
    if name == me or not _PHONE_RE.match(name):
        return name
    cleaned = re.sub(r"[^\d+]", "", name)
    return "+" + re.sub(r"^\+", "", cleaned)
