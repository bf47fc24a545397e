"""Tests for the RemoteSyncClient against a fake remote store."""

import json
import pytest
from datetime import datetime, timezone

from journalsync import (
    DecodingError,
    EncodingError,
    Entry,
    MissingIdentifierError,
    NoDataError,
    TransportError,
)
from journalsync.sync import RemoteSyncClient


@pytest.fixture
def entry():
    return Entry(
        title="Hi",
        body_text="there",
        timestamp=datetime(2026, 10, 19, 8, 30),
        mood="happy",
        identifier="id1",
    )


class TestUrls:
    """Tests for resource addressing."""

    def test_root_base_url(self):
        """Test URLs for a database root."""
        client = RemoteSyncClient("https://journal.example.com/")

        assert client.base_url == "https://journal.example.com"
        assert client.collection_url == "https://journal.example.com/.json"
        assert client.entry_url("id1") == "https://journal.example.com/id1.json"

    def test_nested_base_url(self):
        """Test URLs for a nested collection."""
        client = RemoteSyncClient("https://journal.example.com/users/ann/entries")

        assert client.collection_url == "https://journal.example.com/users/ann/entries.json"
        assert (
            client.entry_url("id1")
            == "https://journal.example.com/users/ann/entries/id1.json"
        )

    def test_identifier_is_one_path_segment(self):
        """Test identifiers are escaped into one path segment."""
        client = RemoteSyncClient("https://journal.example.com")

        assert client.entry_url("a/b c") == "https://journal.example.com/a%2Fb%20c.json"


class TestPush:
    """Tests for push."""

    @pytest.mark.asyncio
    async def test_push_puts_representation(self, remote_client, fake_remote, entry):
        """Test push sends a PUT with the representation."""
        await remote_client.push(entry)

        request = fake_remote.requests[-1]
        assert request.method == "PUT"
        assert str(request.url) == "https://journal.example.com/id1.json"
        assert json.loads(request.content) == entry.to_representation().to_dict()

    @pytest.mark.asyncio
    async def test_push_then_fetch_all_roundtrip(self, remote_client, entry):
        """Test a pushed entry comes back from fetch_all."""
        await remote_client.push(entry)

        fetched = await remote_client.fetch_all()

        assert fetched == {"id1": entry.to_representation()}

    @pytest.mark.asyncio
    async def test_push_is_idempotent(self, remote_client, fake_remote, entry):
        """Test pushing twice leaves the same remote state."""
        await remote_client.push(entry)
        once = json.loads(json.dumps(fake_remote.entries))

        await remote_client.push(entry)

        assert fake_remote.entries == once

    @pytest.mark.asyncio
    async def test_push_missing_identifier(self, remote_client, fake_remote):
        """Test push without identifier sends nothing."""
        entry = Entry(title="A", body_text="x")

        with pytest.raises(MissingIdentifierError):
            await remote_client.push(entry)

        assert fake_remote.requests == []
        assert fake_remote.entries == {}

    @pytest.mark.asyncio
    async def test_push_encoding_error(self, remote_client, fake_remote, entry):
        """Test an unserializable entry is an encoding error."""
        entry.timestamp = object()

        with pytest.raises(EncodingError):
            await remote_client.push(entry)

        assert fake_remote.requests == []

    @pytest.mark.asyncio
    async def test_push_unreachable(self, remote_client, fake_remote, entry):
        """Test push to an unreachable remote."""
        fake_remote.reachable = False

        with pytest.raises(TransportError) as exc_info:
            await remote_client.push(entry)

        assert exc_info.value.is_connection_error

    @pytest.mark.asyncio
    async def test_push_server_error(self, remote_client, fake_remote, entry):
        """Test an error status is a transport error."""
        fake_remote.status_code = 500

        with pytest.raises(TransportError) as exc_info:
            await remote_client.push(entry)

        assert exc_info.value.status_code == 500
        assert not exc_info.value.is_connection_error
        assert len(fake_remote.requests) == 1  # Not retried


class TestRemove:
    """Tests for remove."""

    @pytest.mark.asyncio
    async def test_remove(self, remote_client, fake_remote, entry):
        """Test remove sends a DELETE."""
        await remote_client.push(entry)

        await remote_client.remove(entry)

        assert fake_remote.requests[-1].method == "DELETE"
        assert fake_remote.entries == {}

    @pytest.mark.asyncio
    async def test_remove_missing_identifier(self, remote_client, fake_remote):
        """Test remove without identifier sends nothing."""
        with pytest.raises(MissingIdentifierError):
            await remote_client.remove(Entry(title="A", body_text="x"))

        assert fake_remote.requests == []

    @pytest.mark.asyncio
    async def test_remove_unreachable(self, remote_client, fake_remote, entry):
        """Test remove from an unreachable remote."""
        fake_remote.reachable = False

        with pytest.raises(TransportError):
            await remote_client.remove(entry)


class TestFetchAll:
    """Tests for fetch_all."""

    @pytest.mark.asyncio
    async def test_fetch_all(self, remote_client, fake_remote):
        """Test fetching the whole collection."""
        fake_remote.entries = {
            "id1": {
                "title": "Hi",
                "bodyText": "there",
                "identifier": "id1",
                "mood": "happy",
                "timestamp": "2026-10-19T08:30:00",
            },
            "id2": {
                "title": "Later",
                "bodyText": "",
                "identifier": "id2",
                "mood": "sad",
                "timestamp": 556459200,
            },
        }

        fetched = await remote_client.fetch_all()

        assert set(fetched) == {"id1", "id2"}
        assert fetched["id1"].title == "Hi"
        assert fetched["id2"].mood == "sad"
        assert fetched["id2"].timestamp == datetime(2018, 8, 20, 12, 0, tzinfo=timezone.utc)
        assert fake_remote.requests[-1].method == "GET"

    @pytest.mark.asyncio
    async def test_fetch_all_empty_collection(self, remote_client):
        """Test a null collection is empty."""
        assert await remote_client.fetch_all() == {}

    @pytest.mark.asyncio
    async def test_fetch_all_skips_null_values(self, remote_client, fake_remote):
        """Test null values in the collection are skipped."""
        fake_remote.collection_body = json.dumps(
            {
                "gone": None,
                "id1": {
                    "title": "Hi",
                    "bodyText": "there",
                    "identifier": "id1",
                    "mood": "happy",
                    "timestamp": "2026-10-19T08:30:00",
                },
            }
        ).encode()

        fetched = await remote_client.fetch_all()

        assert list(fetched) == ["id1"]

    @pytest.mark.asyncio
    async def test_fetch_all_no_data(self, remote_client, fake_remote):
        """Test an empty body is a no-data error."""
        fake_remote.collection_body = b""

        with pytest.raises(NoDataError):
            await remote_client.fetch_all()

    @pytest.mark.asyncio
    async def test_fetch_all_malformed_json(self, remote_client, fake_remote):
        """Test malformed JSON is a decoding error."""
        fake_remote.collection_body = b"{not json"

        with pytest.raises(DecodingError):
            await remote_client.fetch_all()

    @pytest.mark.asyncio
    async def test_fetch_all_not_an_object(self, remote_client, fake_remote):
        """Test a non-object collection is a decoding error."""
        fake_remote.collection_body = b"[1, 2, 3]"

        with pytest.raises(DecodingError):
            await remote_client.fetch_all()

    @pytest.mark.asyncio
    async def test_fetch_all_schema_mismatch(self, remote_client, fake_remote):
        """Test an entry missing fields is a decoding error."""
        fake_remote.collection_body = b'{"id1": {"title": "Hi"}}'

        with pytest.raises(DecodingError):
            await remote_client.fetch_all()

    @pytest.mark.asyncio
    async def test_fetch_all_unreachable(self, remote_client, fake_remote):
        """Test fetch_all from an unreachable remote."""
        fake_remote.reachable = False

        with pytest.raises(TransportError):
            await remote_client.fetch_all()

    @pytest.mark.asyncio
    async def test_close(self, remote_client):
        """Test closing the HTTP client."""
        await remote_client.fetch_all()
        assert remote_client._client is not None

        await remote_client.close()

        assert remote_client._client is None
