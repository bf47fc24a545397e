"""Shared fixtures: an in-memory entry store and a fake remote JSON store."""

import json
from urllib.parse import unquote

import httpx
import pytest

from journalsync.store import EntryStore
from journalsync.sync import EntryController, RemoteSyncClient

BASE_URL = "https://journal.example.com/"


class FakeRemote:
    """In-memory stand-in for a Firebase-style JSON store."""

    def __init__(self):
        self.entries: dict[str, dict] = {}
        self.requests: list[httpx.Request] = []
        self.reachable = True
        self.collection_body: bytes | None = None  # Overrides the GET body
        self.status_code = 200

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)

        if not self.reachable:
            raise httpx.ConnectError("Network is unreachable", request=request)

        if self.status_code >= 400:
            return httpx.Response(self.status_code, text="Internal error")

        path = request.url.path
        if path == "/.json":
            if self.collection_body is not None:
                return httpx.Response(200, content=self.collection_body)
            body = self.entries if self.entries else None
            return httpx.Response(200, content=json.dumps(body).encode())

        key = unquote(path[1 : -len(".json")])
        if request.method == "PUT":
            self.entries[key] = json.loads(request.content)
            return httpx.Response(200, content=request.content)
        if request.method == "DELETE":
            self.entries.pop(key, None)
            return httpx.Response(200, content=b"null")

        return httpx.Response(405)


@pytest.fixture
def store():
    """Create an in-memory EntryStore for testing."""
    store = EntryStore(":memory:")
    store.connect()
    yield store
    store.close()


@pytest.fixture
def fake_remote():
    return FakeRemote()


@pytest.fixture
def remote_client(fake_remote):
    """Remote client wired to the fake remote store."""
    return RemoteSyncClient(BASE_URL, transport=httpx.MockTransport(fake_remote.handler))


@pytest.fixture
def controller(store, remote_client):
    """Controller that does not pull on start."""
    return EntryController(store, remote_client, pull_on_start=False)
