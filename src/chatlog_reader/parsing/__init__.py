"""Line-oriented parsing of exported chat transcripts into message records."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import asdict, dataclass

# Attachment basename (verbatim and lowercased) -> session-valid locator.
MediaTable = Mapping[str, str]


@dataclass
class ChatMessage:
    """One message parsed from a transcript header line and its continuations."""

    timestamp: str  # raw header timestamp, e.g. "1/2/23, 10:00:00 AM"
    sender: str
    text: str
    media_url: str | None = None
    is_view_once: bool = False

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> ChatMessage:
        return cls(
            timestamp=data["timestamp"],
            sender=data["sender"],
            text=data.get("text", ""),
            media_url=data.get("media_url"),
            is_view_once=bool(data.get("is_view_once", False)),
        )


@dataclass
class ParseCursor:
    """State carried between slices of one transcript.

    ``current`` is the open message: the last one emitted, still eligible to
    receive continuation lines. A cursor belongs to exactly one parse run.
    """

    offset: int = 0
    current: ChatMessage | None = None

    def reset(self) -> None:
        self.offset = 0
        self.current = None
