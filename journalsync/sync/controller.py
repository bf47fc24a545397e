"""Coordinator keeping the local entry store and the remote store in step.

Local mutations are committed first and then mirrored to the remote; a
remote failure is reported but never undoes the local change. Pulls merge
the remote collection into the local store, remote side winning.
"""

import logging
import uuid
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Iterable

from ..errors import JournalSyncError, TransportError
from ..models import Entry, EntryRepresentation, Mood
from ..store import EntryStore
from .remote_client import RemoteSyncClient

logger = logging.getLogger(__name__)


def _log_fields(
    operation: str, identifier: str | None, error: JournalSyncError
) -> dict[str, Any]:
    """Structured fields attached to sync log records."""
    return {
        "operation": operation,
        "entry_identifier": identifier,
        "error_type": type(error).__name__,
    }


class SyncStatus(Enum):
    """Status of a sync operation."""

    SUCCESS = "success"
    FAILED = "failed"
    OFFLINE = "offline"  # Remote unreachable


@dataclass
class SyncResult:
    """Result of a coordinator operation."""

    status: SyncStatus
    entry: Entry | None = None
    entries_pulled: int = 0
    error: JournalSyncError | None = None
    timestamp: datetime | None = None

    @property
    def ok(self) -> bool:
        return self.status == SyncStatus.SUCCESS

    @classmethod
    def failure(
        cls, error: JournalSyncError, entry: Entry | None = None
    ) -> "SyncResult":
        """Build a failed result, marking unreachable remotes as offline."""
        offline = isinstance(error, TransportError) and error.is_connection_error
        return cls(
            status=SyncStatus.OFFLINE if offline else SyncStatus.FAILED,
            entry=entry,
            error=error,
            timestamp=datetime.now(),
        )


class EntryController:
    """Create, update and delete journal entries, mirroring them remotely.

    Use as an async context manager; entering pulls the remote collection
    once when ``pull_on_start`` is set:

        async with EntryController(store, remote) as controller:
            result = await controller.create("Title", "Body", Mood.HAPPY)
    """

    def __init__(
        self,
        store: EntryStore,
        remote: RemoteSyncClient,
        pull_on_start: bool = True,
        assign_identifiers: bool = True,
    ):
        """Initialize the controller.

        Args:
            store: Local entry store.
            remote: Client for the remote JSON store.
            pull_on_start: Pull from the remote when the controller is opened.
            assign_identifiers: Give newly created entries a UUID identifier.
        """
        self.store = store
        self.remote = remote
        self.pull_on_start = pull_on_start
        self.assign_identifiers = assign_identifiers
        self.initial_pull: SyncResult | None = None
        self._last_sync: datetime | None = None

    async def __aenter__(self) -> "EntryController":
        self.store.connect()
        if self.pull_on_start:
            self.initial_pull = await self.pull_from_remote()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.remote.close()
        self.store.close()

    # ==================== Local Mutations ====================

    async def create(
        self, title: str, body_text: str, mood: Mood | str = Mood.NEUTRAL
    ) -> SyncResult:
        """Save a new entry locally, then push it to the remote."""
        identifier = str(uuid.uuid4()) if self.assign_identifiers else None

        try:
            entry = self.store.create(title, body_text, mood, identifier=identifier)
        except JournalSyncError as e:
            logger.error(
                f"Could not save new entry: {e}",
                extra=_log_fields("create", None, e),
            )
            return SyncResult.failure(e)

        return await self.push(entry)

    async def update(
        self,
        entry: Entry,
        title: str,
        body_text: str,
        timestamp: datetime | None = None,
        mood: Mood | str = Mood.NEUTRAL,
    ) -> SyncResult:
        """Overwrite an entry locally, then push the updated record."""
        try:
            updated = self.store.update(entry, title, body_text, timestamp, mood)
        except JournalSyncError as e:
            logger.error(
                f"Could not save entry update: {e}",
                extra=_log_fields("update", entry.identifier, e),
            )
            return SyncResult.failure(e, entry)

        return await self.push(updated)

    async def delete(self, entry: Entry) -> SyncResult:
        """Delete an entry remotely and locally.

        The local entry is removed whatever the remote outcome; a remote
        failure is reported in the result.
        """
        remote_result = await self.remove_from_remote(entry)

        try:
            self.store.delete(entry)
        except JournalSyncError as e:
            logger.error(
                f"Could not delete local entry: {e}",
                extra=_log_fields("delete", entry.identifier, e),
            )
            return SyncResult.failure(e, entry)

        return remote_result

    # ==================== Remote Operations ====================

    async def push(self, entry: Entry) -> SyncResult:
        """Push a single entry to the remote store."""
        try:
            await self.remote.push(entry)
        except JournalSyncError as e:
            logger.warning(
                f"Error PUTing entry to server: {e}",
                extra=_log_fields("push", entry.identifier, e),
            )
            return SyncResult.failure(e, entry)

        return SyncResult(status=SyncStatus.SUCCESS, entry=entry, timestamp=datetime.now())

    async def remove_from_remote(self, entry: Entry) -> SyncResult:
        """Delete a single entry from the remote store."""
        try:
            await self.remote.remove(entry)
        except JournalSyncError as e:
            logger.warning(
                f"Error DELETEing entry from server: {e}",
                extra=_log_fields("remove", entry.identifier, e),
            )
            return SyncResult.failure(e, entry)

        return SyncResult(status=SyncStatus.SUCCESS, entry=entry, timestamp=datetime.now())

    def merge_representations(
        self, representations: Iterable[EntryRepresentation]
    ) -> int:
        """Merge remote representations into the local store.

        Entries matched by identifier are overwritten field by field with
        no timestamp comparison; unmatched ones are created. Representations
        without an identifier are skipped. All writes share one transaction.

        Returns:
            Number of representations applied.

        Raises:
            PersistenceError: If the transaction fails; nothing is written.
        """
        applied = 0
        created = 0

        with self.store.transaction() as conn:
            for rep in representations:
                if not rep.identifier:
                    continue

                entry = self.store.fetch_by_identifier(rep.identifier, conn=conn)
                if entry is not None:
                    entry.apply_representation(rep)
                else:
                    entry = Entry.from_representation(rep)
                    created += 1

                self.store.save(entry, conn)
                applied += 1

        logger.info(
            f"Merged {applied} entries from remote ({created} new)",
            extra={"operation": "merge"},
        )
        return applied

    async def pull_from_remote(self) -> SyncResult:
        """Fetch the remote collection and merge it into the local store."""
        try:
            representations = await self.remote.fetch_all()
            pulled = self.merge_representations(representations.values())
        except JournalSyncError as e:
            logger.error(
                f"Error fetching entries from server: {e}",
                extra=_log_fields("pull", None, e),
            )
            return SyncResult.failure(e)

        self._last_sync = datetime.now()
        return SyncResult(
            status=SyncStatus.SUCCESS,
            entries_pulled=pulled,
            timestamp=self._last_sync,
        )

    @property
    def last_sync(self) -> datetime | None:
        """Get timestamp of last successful pull."""
        return self._last_sync

    def get_sync_status(self) -> dict[str, Any]:
        """Get current sync status.

        Returns:
            Dictionary with sync statistics.
        """
        return {
            "remote_url": self.remote.base_url,
            "last_sync": self._last_sync.isoformat() if self._last_sync else None,
            "local_entries": self.store.count(),
            "pull_on_start": self.pull_on_start,
        }
