"""Tests for the HTTP entry store adapter."""

from unittest.mock import MagicMock

import pytest
import requests

from tagdiary.adapters.http_store import HttpEntryStore
from tagdiary.errors import NotAuthenticated, StoreUnavailable


def make_response(status_code: int = 200, json_data=None) -> MagicMock:
    resp = MagicMock()
    resp.status_code = status_code
    resp.json.return_value = json_data
    if status_code >= 400:
        resp.raise_for_status.side_effect = requests.HTTPError(f"{status_code} Error")
    else:
        resp.raise_for_status.return_value = None
    return resp


@pytest.fixture
def store():
    store = HttpEntryStore("https://diary.example.com/api/", token="secret", timeout=5)
    store._session = MagicMock()
    return store


class TestHttpEntryStore:
    def test_base_url_trailing_slash_stripped(self, store):
        assert store.base_url == "https://diary.example.com/api"

    @pytest.mark.asyncio
    async def test_get_existing(self, store):
        store._session.request.return_value = make_response(200, {"content": "#work\nfixed bug"})

        assert await store.get("alice", "2024-1-5") == "#work\nfixed bug"

        store._session.request.assert_called_once_with(
            "GET",
            "https://diary.example.com/api/owners/alice/entries/2024-01-05",
            headers={"Authorization": "Bearer secret"},
            timeout=5,
        )

    @pytest.mark.asyncio
    async def test_get_missing(self, store):
        store._session.request.return_value = make_response(404)
        assert await store.get("alice", "2024-01-05") is None

    @pytest.mark.asyncio
    async def test_put(self, store):
        store._session.request.return_value = make_response(204)

        await store.put("alice", "2024-01-05", "hello")

        method, url = store._session.request.call_args[0]
        assert method == "PUT"
        assert url.endswith("/owners/alice/entries/2024-01-05")
        assert store._session.request.call_args[1]["json"] == {"content": "hello"}

    @pytest.mark.asyncio
    async def test_put_404_is_an_error(self, store):
        store._session.request.return_value = make_response(404)
        with pytest.raises(StoreUnavailable):
            await store.put("alice", "2024-01-05", "hello")

    @pytest.mark.asyncio
    async def test_list_dates(self, store):
        store._session.request.return_value = make_response(200, ["2024-10-1", "2024-09-30"])
        assert await store.list_dates("alice") == ["2024-09-30", "2024-10-01"]

    @pytest.mark.asyncio
    async def test_owner_is_url_quoted(self, store):
        store._session.request.return_value = make_response(404)
        await store.get("a/b", "2024-01-05")
        url = store._session.request.call_args[0][1]
        assert "/owners/a%2Fb/entries/" in url

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status", [401, 403])
    async def test_rejected_credentials(self, store, status):
        store._session.request.return_value = make_response(status)
        with pytest.raises(NotAuthenticated):
            await store.get("alice", "2024-01-05")

    @pytest.mark.asyncio
    async def test_missing_owner(self, store):
        with pytest.raises(NotAuthenticated):
            await store.get("", "2024-01-05")
        store._session.request.assert_not_called()

    @pytest.mark.asyncio
    async def test_server_error(self, store):
        store._session.request.return_value = make_response(503)
        with pytest.raises(StoreUnavailable, match="503"):
            await store.put("alice", "2024-01-05", "hello")

    @pytest.mark.asyncio
    async def test_connection_error_is_not_retried(self, store):
        store._session.request.side_effect = requests.ConnectionError("connection refused")
        with pytest.raises(StoreUnavailable, match="connection refused"):
            await store.put("alice", "2024-01-05", "hello")
        assert store._session.request.call_count == 1

    @pytest.mark.asyncio
    async def test_malformed_body(self, store):
        store._session.request.return_value = make_response(200, {"unexpected": True})
        with pytest.raises(StoreUnavailable, match="Unexpected response"):
            await store.get("alice", "2024-01-05")

    def test_no_token_no_auth_header(self):
        assert HttpEntryStore("https://diary.example.com")._headers() == {}
