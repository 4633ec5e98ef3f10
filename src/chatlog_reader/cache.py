"""Persist parsed message lists for fast reload."""

from __future__ import annotations

import hashlib
import json
import logging
import re
from pathlib import Path

from .parsing import ChatMessage

_LOGGER = logging.getLogger(__name__)

CACHE_VERSION = "v1"


def cache_key(name: str, size: int) -> str:
    """Key for a source file, stable across sessions."""
    return f"chat-{CACHE_VERSION}-{name}-{size}"


def _file_name(key: str) -> str:
    # The digest keeps keys that sanitize to the same stem apart.
    stem = re.sub(r"[^A-Za-z0-9._\-]+", "_", key)
    digest = hashlib.sha256(key.encode("utf-8")).hexdigest()[:12]
    return f"{stem}-{digest}.json"


class MessageCache:
    """One JSON file per cached transcript under *cache_dir*."""

    def __init__(self, cache_dir: Path) -> None:
        self._cache_dir = cache_dir

    def path_for(self, key: str) -> Path:
        return self._cache_dir / _file_name(key)

    def put(self, key: str, messages: list[ChatMessage]) -> None:
        self._cache_dir.mkdir(parents=True, exist_ok=True)
        payload = {"key": key, "messages": [m.to_dict() for m in messages]}
        path = self.path_for(key)
        tmp = path.with_suffix(".tmp")
        tmp.write_text(json.dumps(payload, ensure_ascii=False), encoding="utf-8")
        tmp.replace(path)

    def get(self, key: str) -> list[ChatMessage] | None:
        path = self.path_for(key)
        if not path.exists():
            return None
        try:
            payload = json.loads(path.read_text(encoding="utf-8"))
            if payload["key"] != key:
                _LOGGER.warning("Cache entry %s belongs to %r, not %r", path, payload["key"], key)
                return None
            return [ChatMessage.from_dict(item) for item in payload["messages"]]
        except (OSError, json.JSONDecodeError, KeyError, TypeError) as exc:
            _LOGGER.warning("Ignoring unreadable cache entry %s: %s", path, exc)
            return None

    def keys(self) -> list[str]:
        if not self._cache_dir.exists():
            return []
        keys = []
        for path in sorted(self._cache_dir.glob("*.json")):
            try:
                keys.append(json.loads(path.read_text(encoding="utf-8"))["key"])
            except (OSError, json.JSONDecodeError, KeyError, TypeError):
                continue
        return keys

    def clear(self) -> int:
        """Delete every cached transcript. Returns how many were removed."""
        if not self._cache_dir.exists():
            return 0
        removed = 0
        for path in self._cache_dir.glob("*.json"):
            path.unlink()
            removed += 1
        return removed
