"""Local persistence for journal entries."""

from .local_store import EntryStore

__all__ = ["EntryStore"]
