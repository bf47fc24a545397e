"""Synchronization between the local entry store and a remote JSON store.

Entries are mirrored to the remote on every local mutation and the remote
collection is merged back in on pull, remote side winning.
"""

from .controller import EntryController, SyncResult, SyncStatus
from .remote_client import RemoteSyncClient

__all__ = ["EntryController", "RemoteSyncClient", "SyncResult", "SyncStatus"]
