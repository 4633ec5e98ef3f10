"""Recognize media filenames in transcript lines and strip export markers."""

from __future__ import annotations

import re

from . import MediaTable

# Longer extensions first so "report.docx" is not cut short at ".doc".
MEDIA_EXTENSIONS = (
    "jpeg", "jpg", "png", "webp", "gif", "heic",
    "mp4", "opus", "m4a", "wav",
    "pdf", "docx", "doc", "xlsx", "xls",
    "sticker", "txt",
)

_EXT_GROUP = "|".join(MEDIA_EXTENSIONS)

ATTACHMENT_RE = re.compile(
    rf"[a-zA-Z0-9._\-]+\.(?:{_EXT_GROUP})(?![a-zA-Z0-9])",
    re.IGNORECASE,
)

# Whole-name test used when scanning archive entries.
MEDIA_NAME_RE = re.compile(rf"\.(?:{_EXT_GROUP})$", re.IGNORECASE)

SYSTEM_MARKERS = (
    re.compile(r"\(file attached\)", re.IGNORECASE),
    re.compile(r"<attached:?\s*.*?>", re.IGNORECASE),
    re.compile(r"media omitted", re.IGNORECASE),
    re.compile(r"\[.*?\]"),
)

_EDGE_PUNCTUATION_RE = re.compile(r"^[:\s\-]+|[:\s\-]+$")


def find_attachment(line: str) -> str | None:
    """Return the first media filename in *line*, with its original casing."""
    match = ATTACHMENT_RE.search(line)
    return match.group(0) if match else None


def is_media_name(name: str) -> bool:
    return MEDIA_NAME_RE.search(name) is not None


def resolve_attachment(file_name: str, media: MediaTable) -> str | None:
    """Look up *file_name* verbatim, then lowercased."""
    return media.get(file_name) or media.get(file_name.lower())


def strip_attachment(text: str, file_name: str) -> str:
    """Remove system markers and the filename, then trim edge punctuation."""
    for marker in SYSTEM_MARKERS:
        text = marker.sub("", text)
    text = text.replace(file_name, "", 1).strip()
    return _EDGE_PUNCTUATION_RE.sub("", text)
