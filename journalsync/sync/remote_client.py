"""HTTP client for the remote JSON entry store.

The remote is a Firebase-style realtime database: the whole collection is
read from ``<base_url>.json`` and each entry lives at
``<base_url>/<identifier>.json``.
"""

import json
import logging
from typing import Any
from urllib.parse import quote, urlsplit

import httpx

from ..errors import (
    DecodingError,
    EncodingError,
    MissingIdentifierError,
    NoDataError,
    TransportError,
)
from ..models import Entry, EntryRepresentation

logger = logging.getLogger(__name__)


class RemoteSyncClient:
    """Client mirroring local entries to a remote JSON store.

    Supports:
    - push: Replace a single entry resource (HTTP PUT)
    - remove: Delete a single entry resource (HTTP DELETE)
    - fetch_all: Read the whole collection (HTTP GET)

    Requests are issued once; failures are raised, never retried.
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """Initialize the remote client.

        Args:
            base_url: Base URL of the entry collection
                (e.g., "https://journal-core-data.firebaseio.com/").
            timeout: Request timeout in seconds.
            transport: Optional httpx transport, used to substitute the network.
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=self.timeout,
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None

    @property
    def collection_url(self) -> str:
        """URL of the whole entry collection."""
        if not urlsplit(self.base_url).path:
            return f"{self.base_url}/.json"
        return f"{self.base_url}.json"

    def entry_url(self, identifier: str) -> str:
        """URL of a single entry resource."""
        return f"{self.base_url}/{quote(identifier, safe='')}.json"

    async def _request(
        self, method: str, url: str, content: bytes | None = None
    ) -> httpx.Response:
        """Send one request and map failures to TransportError."""
        client = await self._get_client()
        headers = {"Content-Type": "application/json"} if content is not None else None

        try:
            response = await client.request(method, url, content=content, headers=headers)
        except httpx.HTTPError as e:
            logger.error(f"Error {method}ing {url}: {e}")
            raise TransportError(f"{method} {url} failed: {e}") from e

        if response.is_error:
            logger.error(f"{method} {url} returned HTTP {response.status_code}")
            raise TransportError(
                f"HTTP {response.status_code}: {response.text}",
                status_code=response.status_code,
            )

        return response

    def _require_identifier(self, entry: Entry) -> str:
        if not entry.is_synchronizable:
            raise MissingIdentifierError(
                f"Entry '{entry.title}' has no identifier and cannot be synced"
            )
        return entry.identifier

    async def push(self, entry: Entry) -> None:
        """Upsert an entry at its identifier-addressed resource.

        Raises:
            MissingIdentifierError: If the entry has no identifier.
            EncodingError: If the entry cannot be serialized.
            TransportError: On network failure or an error status.
        """
        identifier = self._require_identifier(entry)

        try:
            body = json.dumps(entry.to_representation().to_dict()).encode("utf-8")
        except (TypeError, ValueError, AttributeError) as e:
            logger.error(f"Error encoding entry: {e}")
            raise EncodingError(f"Could not encode entry {identifier}: {e}") from e

        await self._request("PUT", self.entry_url(identifier), content=body)
        logger.debug(f"Pushed entry {identifier}")

    async def remove(self, entry: Entry) -> None:
        """Delete an entry's identifier-addressed resource.

        Raises:
            MissingIdentifierError: If the entry has no identifier.
            TransportError: On network failure or an error status.
        """
        identifier = self._require_identifier(entry)
        await self._request("DELETE", self.entry_url(identifier))
        logger.debug(f"Deleted remote entry {identifier}")

    async def fetch_all(self) -> dict[str, EntryRepresentation]:
        """Read every entry representation from the remote collection.

        Returns:
            Mapping of remote key to representation. Null values are skipped.

        Raises:
            TransportError: On network failure or an error status.
            NoDataError: If the response body is empty.
            DecodingError: If the body is not a valid entry collection.
        """
        response = await self._request("GET", self.collection_url)

        if not response.content:
            logger.error("No data returned from entry collection")
            raise NoDataError(f"GET {self.collection_url} returned no data")

        try:
            payload: Any = json.loads(response.content)
        except ValueError as e:
            logger.error(f"Error decoding JSON: {e}")
            raise DecodingError(f"Malformed JSON from {self.collection_url}: {e}") from e

        # An empty collection is stored as null
        if payload is None:
            return {}

        if not isinstance(payload, dict):
            raise DecodingError(
                f"Expected object keyed by identifier, got {type(payload).__name__}"
            )

        representations = {}
        for key, value in payload.items():
            if value is None:
                continue
            representations[key] = EntryRepresentation.from_dict(value)

        logger.debug(f"Fetched {len(representations)} entries from remote")
        return representations
