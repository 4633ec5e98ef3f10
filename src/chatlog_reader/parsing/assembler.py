"""Build message records from classified transcript lines."""

from __future__ import annotations

import logging

from . import ChatMessage, MediaTable, ParseCursor
from .attachments import find_attachment, resolve_attachment, strip_attachment
from .lines import HeaderLine, classify_line

_LOGGER = logging.getLogger(__name__)


def assemble_line(line: str, media: MediaTable, cursor: ParseCursor) -> ChatMessage | None:
    """Feed one trimmed, non-empty line into *cursor*.

    Returns the new message when *line* is a header. Continuation lines extend
    ``cursor.current`` in place and return None; with no open message they
    are dropped.
    """
    header = classify_line(line)
    if header is not None:
        message = _start_message(header, line, media)
        cursor.current = message
        return message

    if cursor.current is None:
        _LOGGER.debug("Dropping line before first message header: %.80s", line)
        return None

    _continue_message(cursor.current, line, media)
    return None


def _start_message(header: HeaderLine, line: str, media: MediaTable) -> ChatMessage:
    body = header.body.strip()
    media_url = None

    file_name = find_attachment(line)
    if file_name:
        media_url = resolve_attachment(file_name, media)
        body = strip_attachment(body, file_name)

    return ChatMessage(
        timestamp=header.timestamp,
        sender=header.sender,
        text=body,
        media_url=media_url,
        is_view_once="view once" in header.body.lower(),
    )


def _continue_message(message: ChatMessage, line: str, media: MediaTable) -> None:
    file_name = find_attachment(line)
    if not file_name:
        message.text += "\n" + line
        return

    if message.media_url is None:
        message.media_url = resolve_attachment(file_name, media)

    remainder = strip_attachment(line, file_name)
    if remainder:
        message.text += ("\n" if message.text else "") + remainder
