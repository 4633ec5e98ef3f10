"""Narrow a message list by text query and date range."""

from __future__ import annotations

from datetime import date

from .parsing import ChatMessage
from .parsing.dates import message_date


def filter_messages(
    messages: list[ChatMessage],
    query: str = "",
    date_from: date | None = None,
    date_to: date | None = None,
) -> list[ChatMessage]:
    """Return the messages matching every given criterion, in order.

    *query* matches case-insensitively against text or sender. Date bounds are
    inclusive. When a bound is set, messages whose date cannot be read are
    left out.
    """
    result = messages
    q = query.strip().lower()
    if q:
        result = [m for m in result if q in m.text.lower() or q in m.sender.lower()]

    if date_from is not None or date_to is not None:
        kept = []
        for message in result:
            day = message_date(message)
            if day is None:
                continue
            if date_from is not None and day < date_from:
                continue
            if date_to is not None and day > date_to:
                continue
            kept.append(message)
        result = kept

    return list(result)


def media_messages(messages: list[ChatMessage]) -> list[ChatMessage]:
    """Messages with a resolved attachment, for a gallery view."""
    return [m for m in messages if m.media_url]
