"""Concurrent case-insensitive text search across PDF collections."""

__version__ = "0.1.0"
