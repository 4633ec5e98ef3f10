"""Classify transcript lines as message headers or continuations.

A header line starts a new message::

    [1/2/23, 10:00:00 AM] Alice: Hello
    26.05.23, 21:14 - Bob: Hi
    2023-05-26 9:05 pm - Carol: Hey

The timestamp may be bracketed or not, the date groups may be separated by
``/``, ``.`` or ``-``, seconds and an AM/PM suffix are optional, and a hyphen
or colon may separate the timestamp from the sender. The sender runs up to
the first colon; the body is everything after ``": "``. Any line that does
not match is a continuation of the previous message.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

HEADER_RE = re.compile(
    r"^\[?"
    r"(\d{1,4}[/.\-]\d{1,4}[/.\-]\d{1,4},?\s\d{1,2}:\d{2}(?::\d{2})?\s?(?:AM|PM)?)"
    r"(?!:?\d)"
    r"\]?[\s\-:]*"
    r"([^:]+):\s(.*)$",
    re.IGNORECASE,
)


@dataclass(frozen=True)
class HeaderLine:
    timestamp: str
    sender: str
    body: str  # raw, untrimmed


def classify_line(line: str) -> HeaderLine | None:
    """Return the parsed header for *line*, or None for a continuation line.

    *line* is expected to be already trimmed and non-empty.
    """
    match = HEADER_RE.match(line)
    if match is None:
        return None
    timestamp, sender, body = match.groups()
    sender = sender.strip()
    if not sender:
        return None
    return HeaderLine(timestamp=timestamp.strip(), sender=sender, body=body)
