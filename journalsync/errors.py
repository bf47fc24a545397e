"""Error types raised by the journal store and remote sync client."""


class JournalSyncError(Exception):
    """Base class for all journalsync errors."""


class MissingIdentifierError(JournalSyncError):
    """An entry without an identifier was pushed to or removed from the remote."""


class EncodingError(JournalSyncError):
    """An entry could not be serialized to its wire representation."""


class DecodingError(JournalSyncError):
    """The remote payload was malformed or did not match the entry schema."""


class TransportError(JournalSyncError):
    """The request failed at the network layer or returned an error status."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code

    @property
    def is_connection_error(self) -> bool:
        """True when the remote could not be reached at all."""
        return self.status_code is None


class NoDataError(JournalSyncError):
    """The remote returned an empty body where data was expected."""


class PersistenceError(JournalSyncError):
    """A local read or write against the entry store failed."""
