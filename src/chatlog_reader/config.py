"""Paths, defaults, and environment detection."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

_LOGGER = logging.getLogger(__name__)


def _xdg_cache_home() -> Path:
    return Path(os.environ.get("XDG_CACHE_HOME", Path.home() / ".cache"))


def _xdg_config_home() -> Path:
    return Path(os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config"))


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if raw is None:
        return default
    try:
        value = int(raw)
    except ValueError:
        _LOGGER.warning("Invalid %s=%r; using default %d", name, raw, default)
        return default
    if value <= 0:
        _LOGGER.warning("%s must be >0; using default %d", name, default)
        return default
    return value


ENV_FILE_TEMPLATE = """\
# chatlog-reader settings
# This file is read by the chatlog command before each run.
# Values already set in the environment take precedence.

# Where parsed transcripts are cached:
# CHATLOG_CACHE_DIR=~/.cache/chatlog-reader

# Lines parsed in the first slice and in each later slice:
# CHATLOG_FIRST_SLICE_LINES=1000
# CHATLOG_SLICE_LINES=15000

# Report progress after this many new messages:
# CHATLOG_FLUSH_EVERY=10000

# Search backend: bm25 (default), substring
# CHATLOG_SEARCH_BACKEND=bm25
"""


@dataclass
class Config:
    """Runtime configuration, resolved from env vars and defaults."""

    cache_dir: Path = field(
        default_factory=lambda: Path(
            os.environ.get("CHATLOG_CACHE_DIR", _xdg_cache_home() / "chatlog-reader")
        ).expanduser()
    )

    env_file: Path = field(default_factory=lambda: _xdg_config_home() / "chatlog-reader" / "env")

    # Parse scheduling
    first_slice_lines: int = field(default_factory=lambda: _env_int("CHATLOG_FIRST_SLICE_LINES", 1000))
    slice_lines: int = field(default_factory=lambda: _env_int("CHATLOG_SLICE_LINES", 15000))
    flush_every: int = field(default_factory=lambda: _env_int("CHATLOG_FLUSH_EVERY", 10000))

    use_cache: bool = True

    search_backend: str = field(
        default_factory=lambda: os.environ.get("CHATLOG_SEARCH_BACKEND", "bm25")
    )  # "bm25" | "substring"

    def load_env_file(self) -> None:
        """Load settings from the env file into os.environ (if not already set)."""
        if not self.env_file.exists():
            return
        for line in self.env_file.read_text().splitlines():
            line = line.strip()
            if not line or line.startswith("#"):
                continue
            if "=" not in line:
                continue
            key, _, value = line.partition("=")
            key = key.strip()
            value = value.strip().strip("'\"")
            if key and key not in os.environ:
                os.environ[key] = value

    def ensure_env_file(self) -> bool:
        """Create the env file from template if it doesn't exist. Returns True if created."""
        if self.env_file.exists():
            return False
        self.env_file.parent.mkdir(parents=True, exist_ok=True)
        self.env_file.write_text(ENV_FILE_TEMPLATE)
        self.env_file.chmod(0o600)
        return True
