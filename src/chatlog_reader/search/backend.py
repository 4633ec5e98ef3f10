"""Search backend protocol."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from ..parsing import ChatMessage
from . import SearchResult


@runtime_checkable
class SearchBackend(Protocol):
    """Protocol for search backends."""

    def index(self, messages: list[ChatMessage]) -> None:
        """Index a list of messages, replacing any previous index."""
        ...

    def search(self, query: str, limit: int = 10) -> list[SearchResult]:
        """Search indexed messages. Returns results sorted by relevance."""
        ...

    def is_ready(self) -> bool:
        """Return True if the backend has an index and is ready to search."""
        ...
