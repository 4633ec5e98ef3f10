"""Load a transcript or export archive into messages, using the cache."""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from pathlib import Path

from .archive import AssetExtractionFailure, MediaStore, resolve_archive
from .cache import MessageCache, cache_key
from .config import Config
from .parsing import ChatMessage
from .scheduler import CancelToken, ParseRun, ProgressCallback

_LOGGER = logging.getLogger(__name__)


@dataclass
class LoadedChat:
    key: str
    messages: list[ChatMessage]
    media: dict[str, str] = field(default_factory=dict)
    from_cache: bool = False
    cancelled: bool = False
    failures: list[AssetExtractionFailure] = field(default_factory=list)


@dataclass
class _PendingLoad:
    key: str
    run: ParseRun
    media: dict[str, str]
    failures: list[AssetExtractionFailure]


class ChatLoader:
    """Loads one chat at a time; starting a new load cancels the previous run.

    Media locators handed out by an archive load stay valid until a later load
    reads a new source or :meth:`close` is called. A cache hit keeps them.
    """

    def __init__(
        self,
        config: Config | None = None,
        cache: MessageCache | None = None,
        *,
        on_progress: ProgressCallback | None = None,
        yield_point: Callable[[], None] | None = None,
    ) -> None:
        self.config = config or Config()
        if cache is None and self.config.use_cache:
            cache = MessageCache(self.config.cache_dir)
        self.cache = cache
        self._on_progress = on_progress
        self._yield_point = yield_point
        self._token: CancelToken | None = None
        self._stores: list[MediaStore] = []

    def load(self, path: Path) -> LoadedChat:
        """Parse *path* to completion (or cancellation) on the calling thread.

        Raises:
            NoTranscriptFound: *path* is an archive without a text entry.
        """
        pending = self._prepare(path)
        if isinstance(pending, LoadedChat):
            return pending
        return self._finish(pending, pending.run.run(self._yield_point))

    async def load_async(
        self,
        path: Path,
        yield_point: Callable[[], Awaitable[None]] | None = None,
    ) -> LoadedChat:
        """Like :meth:`load`, yielding to the event loop between slices."""
        pending = self._prepare(path)
        if isinstance(pending, LoadedChat):
            return pending
        return self._finish(pending, await pending.run.run_async(yield_point))

    def cancel(self) -> None:
        """Stop the in-flight run before its next slice."""
        if self._token is not None:
            self._token.cancel()

    def close(self) -> None:
        self.cancel()
        self._release_media()

    def _release_media(self) -> None:
        for store in self._stores:
            store.close()
        self._stores.clear()

    def __enter__(self) -> ChatLoader:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def _prepare(self, path: Path) -> _PendingLoad | LoadedChat:
        self.cancel()
        token = CancelToken()
        self._token = token

        key = cache_key(path.name, path.stat().st_size)
        if self.cache is not None:
            cached = self.cache.get(key)
            if cached is not None:
                _LOGGER.info("Loaded %d message(s) for %s from cache", len(cached), path.name)
                if self._on_progress is not None:
                    self._on_progress(list(cached))
                return LoadedChat(key=key, messages=cached, from_cache=True)

        media: dict[str, str] = {}
        failures: list[AssetExtractionFailure] = []
        if path.suffix.lower() == ".zip":
            store = MediaStore()
            try:
                contents = resolve_archive(path, store)
            except Exception:
                store.close()
                raise
            self._release_media()
            self._stores.append(store)
            text, media, failures = contents.text, contents.media, contents.failures
        else:
            text = path.read_text(encoding="utf-8-sig", errors="replace")
            self._release_media()

        run = ParseRun(
            text,
            media,
            first_slice_lines=self.config.first_slice_lines,
            slice_lines=self.config.slice_lines,
            flush_every=self.config.flush_every,
            on_progress=self._on_progress,
            token=token,
        )
        return _PendingLoad(key=key, run=run, media=media, failures=failures)

    def _finish(self, pending: _PendingLoad, messages: list[ChatMessage] | None) -> LoadedChat:
        if messages is None:
            _LOGGER.info("Parse of %s cancelled", pending.key)
            return LoadedChat(
                key=pending.key,
                messages=list(pending.run.messages),
                media=pending.media,
                cancelled=True,
                failures=pending.failures,
            )

        if self.cache is not None:
            self.cache.put(pending.key, messages)
        return LoadedChat(
            key=pending.key,
            messages=messages,
            media=pending.media,
            failures=pending.failures,
        )
