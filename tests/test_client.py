"""Tests for the remote service client."""

import pytest
import requests

from conftest import FakeResponse, FakeSession
from ytrss.api.client import YtrssClient
from ytrss.errors import DecodeFailure, HTTPFailure, TransportFailure, Unauthenticated, YtrssError
from ytrss.models import ItemStatus, Podcast, Usage


def make_client(credentials, *responses) -> YtrssClient:
    return YtrssClient(credentials=credentials, base_url="https://api.test/v1/", session=FakeSession(*responses))


class TestRequests:
    def test_list_podcasts_sends_bearer_key(self, credentials):
        client = make_client(credentials, FakeResponse(payload=[{"id": "p1", "title": "Tech Talks"}]))

        assert client.list_podcasts() == [Podcast(id="p1", title="Tech Talks")]

        call = client.session.calls[0]
        assert call["method"] == "GET"
        assert call["url"] == "https://api.test/v1/list-podcasts"
        assert call["headers"]["Authorization"] == "Bearer abc123"
        assert client.session.headers["Content-Type"] == "application/json"

    def test_add_url_posts_json_body(self, credentials):
        client = make_client(credentials, FakeResponse(payload={"status": "CREATED", "created": "2024-01-01 00:00:00Z"}))

        item = client.add_url("p1", "https://youtu.be/abc")

        assert item.status is ItemStatus.CREATED
        call = client.session.calls[0]
        assert call["method"] == "POST"
        assert call["url"].endswith("/podcasts/add-url")
        assert call["json"] == {"podcast_id": "p1", "url": "https://youtu.be/abc"}

    def test_get_items_decodes_statuses(self, credentials):
        payload = [
            {"status": "SUCCESS", "title": "Ep 1", "created": "2024-01-01T00:00:00Z"},
            {"status": "ERROR", "error": "video unavailable"},
            {"status": "WEIRD"},
        ]
        client = make_client(credentials, FakeResponse(payload=payload))

        items = client.get_items("p1")

        assert client.session.calls[0]["url"].endswith("/get-items/p1")
        assert [i.status for i in items] == [ItemStatus.SUCCESS, ItemStatus.ERROR, ItemStatus.UNKNOWN]
        assert items[1].error == "video unavailable"
        assert items[2].raw_status == "WEIRD"

    def test_get_usage(self, credentials):
        client = make_client(credentials, FakeResponse(payload={"usage": 1536, "limit": 1073741824}))
        assert client.get_usage() == Usage(used=1536, limit=1073741824)

    def test_key_is_read_on_every_call(self, credentials):
        client = make_client(credentials, FakeResponse(payload=[]), FakeResponse(payload=[]))
        client.list_podcasts()
        credentials.secret = "rotated"
        client.list_podcasts()
        assert client.session.calls[1]["headers"]["Authorization"] == "Bearer rotated"


class TestErrors:
    def test_missing_key_makes_no_request(self, no_credentials):
        client = make_client(no_credentials)
        with pytest.raises(Unauthenticated, match="API key not set"):
            client.get_usage()
        assert client.session.calls == []

    def test_http_error_carries_status_and_body(self, credentials):
        client = make_client(credentials, FakeResponse(401, {"message": "bad key"}, reason="Unauthorized", text='{"message":"bad key"}'))
        with pytest.raises(HTTPFailure) as excinfo:
            client.list_podcasts()
        assert excinfo.value.status_code == 401
        assert str(excinfo.value) == 'API request failed: 401 Unauthorized - {"message":"bad key"}'

    def test_transport_error(self, credentials, connection_error):
        client = make_client(credentials, connection_error)
        with pytest.raises(TransportFailure, match="could not connect to the API"):
            client.get_items("p1")

    def test_timeout_is_transport_error(self, credentials):
        client = make_client(credentials, requests.Timeout("read timed out"))
        with pytest.raises(TransportFailure):
            client.get_usage()

    def test_malformed_json(self, credentials, not_json):
        client = make_client(credentials, FakeResponse(200, not_json))
        with pytest.raises(DecodeFailure) as excinfo:
            client.list_podcasts()
        assert excinfo.value.status_code == 200
        assert "<html>oops</html>" in str(excinfo.value)

    def test_wrong_shape_is_decode_error(self, credentials):
        client = make_client(credentials, FakeResponse(payload={"podcasts": []}))
        with pytest.raises(DecodeFailure):
            client.list_podcasts()

    def test_all_failures_share_a_base(self):
        for cls in (Unauthenticated, TransportFailure, HTTPFailure, DecodeFailure):
            assert issubclass(cls, YtrssError)
