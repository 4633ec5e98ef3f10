"""Incremental parser for exported chat transcripts."""

__version__ = "0.1.0"
