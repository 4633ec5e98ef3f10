"""BM25 search backend using rank-bm25."""

from __future__ import annotations

import re

from ..parsing import ChatMessage
from . import SearchResult

_STOPWORDS = frozenset({
    "the", "a", "an", "is", "are", "was", "were", "in", "on", "at",
    "to", "for", "of", "and", "or", "but", "not", "with", "by", "from",
})


def _tokenize(text: str) -> list[str]:
    """Lowercase, strip punctuation/emoji, remove stopwords."""
    text = text.lower()
    text = re.sub(r"[^\w\s]", " ", text)
    return [w for w in text.split() if w and w not in _STOPWORDS]


def _document(message: ChatMessage) -> str:
    return f"{message.sender} {message.text}"


class BM25Backend:
    """Ranks messages by BM25 over sender and text."""

    def __init__(self) -> None:
        self._bm25 = None
        self._messages: list[ChatMessage] = []

    def index(self, messages: list[ChatMessage]) -> None:
        from rank_bm25 import BM25Okapi

        self._messages = list(messages)
        corpus = [_tokenize(_document(m)) for m in self._messages]
        if corpus:
            self._bm25 = BM25Okapi(corpus)
        else:
            self._bm25 = None

    def search(self, query: str, limit: int = 10) -> list[SearchResult]:
        if not self.is_ready():
            return []

        tokenized_query = _tokenize(query)
        if not tokenized_query:
            return []

        scores = self._bm25.get_scores(tokenized_query)

        # sorted() is stable, so equal scores keep transcript order.
        scored = sorted(
            enumerate(scores),
            key=lambda x: x[1],
            reverse=True,
        )

        results = []
        for rank, (index, score) in enumerate(scored[:limit], start=1):
            if score <= 0:
                break
            results.append(
                SearchResult(message=self._messages[index], index=index, score=float(score), rank=rank)
            )
        return results

    def is_ready(self) -> bool:
        return self._bm25 is not None and len(self._messages) > 0
