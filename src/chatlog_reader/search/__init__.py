"""Pluggable ranked search over parsed chat messages."""

from __future__ import annotations

from dataclasses import dataclass

from ..parsing import ChatMessage


@dataclass
class SearchResult:
    """A single search hit."""

    message: ChatMessage
    index: int  # position in the indexed message list
    score: float
    rank: int


def get_backend(backend_name: str) -> "backend.SearchBackend":
    """Resolve a backend name to an instance."""
    if backend_name == "bm25":
        from .bm25 import BM25Backend

        return BM25Backend()
    elif backend_name == "substring":
        from .substring import SubstringBackend

        return SubstringBackend()
    else:
        raise ValueError(
            f"Unknown search backend: {backend_name!r}. Use 'bm25' or 'substring'."
        )


def search_messages(
    messages: list[ChatMessage], query: str, backend_name: str = "bm25", limit: int = 10
) -> list[SearchResult]:
    """Index *messages* with the named backend and run *query*."""
    backend = get_backend(backend_name)
    backend.index(messages)
    return backend.search(query, limit=limit)
