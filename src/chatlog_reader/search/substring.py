"""Plain case-insensitive substring search."""

from __future__ import annotations

from ..parsing import ChatMessage
from . import SearchResult


class SubstringBackend:
    """Matches the query inside text or sender; hits keep transcript order."""

    def __init__(self) -> None:
        self._messages: list[ChatMessage] | None = None

    def index(self, messages: list[ChatMessage]) -> None:
        self._messages = list(messages)

    def search(self, query: str, limit: int = 10) -> list[SearchResult]:
        q = query.strip().lower()
        if not self.is_ready() or not q:
            return []
        results = []
        for index, message in enumerate(self._messages):
            if q in message.text.lower() or q in message.sender.lower():
                results.append(SearchResult(message=message, index=index, score=1.0, rank=len(results) + 1))
                if len(results) >= limit:
                    break
        return results

    def is_ready(self) -> bool:
        return self._messages is not None
