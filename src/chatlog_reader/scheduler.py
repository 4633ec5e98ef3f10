"""Slice transcript parsing into bounded steps.

:func:`advance` parses at most ``limit`` non-empty lines and returns where it
stopped. The open message lives on the :class:`ParseCursor`, so parsing a
transcript in any number of slices gives the same records as one pass.

:class:`ParseRun` drives ``advance`` over a whole transcript, calling a yield
point between slices so a host loop can stay responsive, delivering progress
in batches, and stopping early when its :class:`CancelToken` is set.
"""

from __future__ import annotations

import asyncio
import logging
import threading
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field

from .parsing import ChatMessage, MediaTable, ParseCursor
from .parsing.assembler import assemble_line

_LOGGER = logging.getLogger(__name__)

ProgressCallback = Callable[[list[ChatMessage]], None]


@dataclass
class ChunkResult:
    next_offset: int
    messages: list[ChatMessage] = field(default_factory=list)


def advance(
    content: str,
    offset: int,
    limit: int,
    media: MediaTable,
    cursor: ParseCursor,
) -> ChunkResult:
    """Parse up to *limit* non-empty lines of *content* starting at *offset*.

    Blank lines are skipped and do not count toward *limit*. ``cursor`` is
    updated in place: its ``offset`` becomes the returned ``next_offset`` and
    its ``current`` message stays open for the next call.
    """
    messages: list[ChatMessage] = []
    total = len(content)
    position = offset
    processed = 0

    while position < total and processed < limit:
        line_end = content.find("\n", position)
        if line_end == -1:
            line_end = total
        line = content[position:line_end].strip()
        position = line_end + 1

        if not line:
            continue
        processed += 1

        message = assemble_line(line, media, cursor)
        if message is not None:
            messages.append(message)

    next_offset = min(position, total)
    cursor.offset = next_offset
    return ChunkResult(next_offset=next_offset, messages=messages)


class CancelToken:
    """Set once to stop a parse run before its next slice."""

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()


class ParseRun:
    """One cooperative parse of one transcript.

    Args:
        content: Full transcript text.
        media: Attachment lookup table; read-only while the run is active.
        first_slice_lines: Line budget of the first slice.
        slice_lines: Line budget of every later slice.
        flush_every: Deliver progress after at least this many new messages.
        on_progress: Called with the messages accumulated so far.
        token: Cancellation token; a fresh one if omitted.
    """

    def __init__(
        self,
        content: str,
        media: MediaTable | None = None,
        *,
        first_slice_lines: int = 1000,
        slice_lines: int = 15000,
        flush_every: int = 10000,
        on_progress: ProgressCallback | None = None,
        token: CancelToken | None = None,
    ) -> None:
        self.content = content
        self.media: MediaTable = media if media is not None else {}
        self.cursor = ParseCursor()
        self.messages: list[ChatMessage] = []
        self.token = token or CancelToken()
        self._first_slice_lines = first_slice_lines
        self._slice_lines = slice_lines
        self._flush_every = flush_every
        self._on_progress = on_progress
        self._slices = 0
        self._delivered = 0
        self._finished = False

    @property
    def finished(self) -> bool:
        """True once the end of the transcript was reached."""
        return self._finished

    @property
    def cancelled(self) -> bool:
        return self.token.cancelled and not self._finished

    def step(self) -> bool:
        """Parse one slice. Returns True while more slices remain."""
        if self._finished or self.token.cancelled:
            return False

        budget = self._first_slice_lines if self._slices == 0 else self._slice_lines
        result = advance(self.content, self.cursor.offset, budget, self.media, self.cursor)
        self._slices += 1
        self.messages.extend(result.messages)

        if result.next_offset >= len(self.content):
            self._finished = True
            _LOGGER.debug(
                "Parsed %d message(s) in %d slice(s)", len(self.messages), self._slices
            )

        if (
            self._finished
            or self._slices == 1
            or len(self.messages) - self._delivered >= self._flush_every
        ):
            self._deliver()

        return not self._finished

    def run(self, yield_point: Callable[[], None] | None = None) -> list[ChatMessage] | None:
        """Parse to the end, calling *yield_point* between slices.

        Returns the messages, or None if the run was cancelled first.
        """
        while self.step():
            if yield_point is not None:
                yield_point()
        return self.messages if self._finished else None

    async def run_async(
        self, yield_point: Callable[[], Awaitable[None]] | None = None
    ) -> list[ChatMessage] | None:
        """Like :meth:`run`, awaiting the event loop between slices."""
        while self.step():
            if yield_point is None:
                await asyncio.sleep(0)
            else:
                await yield_point()
        return self.messages if self._finished else None

    def _deliver(self) -> None:
        self._delivered = len(self.messages)
        if self._on_progress is not None:
            self._on_progress(list(self.messages))
