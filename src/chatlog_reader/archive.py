"""Read exported chat archives: the transcript plus its media files."""

from __future__ import annotations

import logging
import shutil
import tempfile
import zipfile
import zlib
from dataclasses import dataclass, field
from pathlib import Path, PurePosixPath

from .parsing.attachments import is_media_name

_LOGGER = logging.getLogger(__name__)

# Name the iOS app gives the transcript inside an exported archive.
IOS_TRANSCRIPT_NAME = "_chat.txt"

_EXTRACTION_ERRORS = (
    zipfile.BadZipFile,
    zlib.error,
    OSError,
    EOFError,
    RuntimeError,  # encrypted entries
    NotImplementedError,  # unsupported compression methods
)


class NoTranscriptFound(Exception):
    """The archive holds no text entry that could be the transcript."""


@dataclass
class AssetExtractionFailure:
    entry_name: str
    reason: str


@dataclass
class ArchiveContents:
    transcript_name: str
    text: str
    media: dict[str, str] = field(default_factory=dict)
    failures: list[AssetExtractionFailure] = field(default_factory=list)


class MediaStore:
    """Materializes media bytes as files and hands out ``file://`` locators.

    Locators stay valid until :meth:`close`. With no *root*, files go to a
    private temporary directory that ``close`` removes.
    """

    def __init__(self, root: Path | None = None) -> None:
        self._owns_root = root is None
        self.root = Path(tempfile.mkdtemp(prefix="chatlog-media-")) if root is None else root
        self._count = 0

    def put(self, basename: str, data: bytes) -> str:
        # One directory per entry keeps same-named files from different folders apart.
        target_dir = self.root / f"{self._count:05d}"
        self._count += 1
        target_dir.mkdir(parents=True, exist_ok=True)
        target = target_dir / basename
        target.write_bytes(data)
        return target.resolve().as_uri()

    def close(self) -> None:
        if self._owns_root:
            shutil.rmtree(self.root, ignore_errors=True)

    def __enter__(self) -> MediaStore:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()


def basename(entry_name: str) -> str:
    """Final path segment of an archive entry name (either slash style)."""
    return PurePosixPath(entry_name.replace("\\", "/")).name or entry_name


def select_transcript_entry(names: list[str]) -> str:
    """Pick the transcript among archive entry names.

    Preference: the iOS name ``_chat.txt``, then the first ``.txt`` entry whose
    name contains "chat", then the ``.txt`` entry with the longest name.

    Raises:
        NoTranscriptFound: No ``.txt`` entry exists.
    """
    text_entries = [n for n in names if n.endswith(".txt") and not n.endswith("/")]
    if IOS_TRANSCRIPT_NAME in names:
        return IOS_TRANSCRIPT_NAME
    for name in text_entries:
        if "chat" in name.lower():
            return name
    if not text_entries:
        raise NoTranscriptFound("No chat logs found in archive.")
    return max(text_entries, key=len)


def resolve_archive(path: Path, store: MediaStore) -> ArchiveContents:
    """Extract the transcript text and register every media entry in *store*.

    Each media file is registered under its basename and its lowercased
    basename. Entries that fail to extract are logged, recorded on
    ``failures`` and skipped.

    Raises:
        NoTranscriptFound: The archive holds no text entry.
        zipfile.BadZipFile: *path* is not a zip archive.
    """
    with zipfile.ZipFile(path) as zf:
        infos = zf.infolist()
        transcript_name = select_transcript_entry([info.filename for info in infos])
        text = zf.read(transcript_name).decode("utf-8-sig", errors="replace")
        contents = ArchiveContents(transcript_name=transcript_name, text=text)

        for info in infos:
            if info.is_dir() or not is_media_name(info.filename):
                continue
            try:
                data = zf.read(info)
                name = basename(info.filename)
                locator = store.put(name, data)
            except _EXTRACTION_ERRORS as exc:
                _LOGGER.warning("Asset extraction failed: %s: %s", info.filename, exc)
                contents.failures.append(AssetExtractionFailure(info.filename, str(exc)))
                continue
            contents.media[name] = locator
            contents.media[name.lower()] = locator

    _LOGGER.info(
        "Resolved %s: transcript %s, %d media file(s), %d failure(s)",
        path.name,
        transcript_name,
        len(set(contents.media.values())),
        len(contents.failures),
    )
    return contents
