"""journalsync - journal entries kept in a local store and mirrored to a remote JSON store."""

from .errors import (
    DecodingError,
    EncodingError,
    JournalSyncError,
    MissingIdentifierError,
    NoDataError,
    PersistenceError,
    TransportError,
)
from .models import Entry, EntryRepresentation, Mood

__version__ = "0.1.0"

__all__ = [
    "DecodingError",
    "EncodingError",
    "Entry",
    "EntryRepresentation",
    "JournalSyncError",
    "MissingIdentifierError",
    "Mood",
    "NoDataError",
    "PersistenceError",
    "TransportError",
]
