"""HTTP entry store adapter - key-value client for a remote diary service."""

import asyncio
import logging
from urllib.parse import quote

import requests

from tagdiary.core.dates import normalize_date_key, sort_date_keys
from tagdiary.errors import NotAuthenticated, StoreUnavailable

logger = logging.getLogger(__name__)


class HttpEntryStore:
    """
    Remote entry storage over HTTP.

    Implements EntryStore protocol. Entries live at
    ``{base_url}/owners/{owner}/entries/{date_key}`` as ``{"content": ...}``.
    No retries - failures are surfaced as StoreUnavailable and the caller
    decides what to do.
    """

    def __init__(self, base_url: str, token: str = "", timeout: float = 10.0):
        self.base_url = base_url.rstrip("/")
        self.token = token
        self.timeout = timeout
        self._session = requests.Session()

    def _headers(self) -> dict:
        if not self.token:
            return {}
        return {"Authorization": f"Bearer {self.token}"}

    def _entries_url(self, owner: str) -> str:
        if not owner:
            raise NotAuthenticated("No owner bound to the entry store.")
        return f"{self.base_url}/owners/{quote(owner, safe='')}/entries"

    def _request(self, method: str, url: str, **kwargs) -> requests.Response:
        """Make an authenticated request, mapping failures to diary errors."""
        try:
            resp = self._session.request(method, url, headers=self._headers(), timeout=self.timeout, **kwargs)
        except requests.RequestException as e:
            raise StoreUnavailable(f"{method} {url} failed: {e}") from e

        if resp.status_code in (401, 403):
            raise NotAuthenticated(f"Store rejected credentials ({resp.status_code})")
        if resp.status_code == 404 and method == "GET":
            return resp
        try:
            resp.raise_for_status()
        except requests.HTTPError as e:
            raise StoreUnavailable(f"{method} {url} failed: {e}") from e
        return resp

    def _get(self, owner: str, date_key: str) -> str | None:
        url = f"{self._entries_url(owner)}/{normalize_date_key(date_key)}"
        resp = self._request("GET", url)
        if resp.status_code == 404:
            return None
        try:
            return resp.json()["content"]
        except (ValueError, KeyError, TypeError) as e:
            raise StoreUnavailable(f"Unexpected response from {url}: {e}") from e

    def _put(self, owner: str, date_key: str, content: str) -> None:
        url = f"{self._entries_url(owner)}/{normalize_date_key(date_key)}"
        self._request("PUT", url, json={"content": content})
        logger.debug(f"PUT {url} ({len(content)} chars)")

    def _list_dates(self, owner: str) -> list[str]:
        url = self._entries_url(owner)
        resp = self._request("GET", url)
        if resp.status_code == 404:
            return []
        try:
            keys = resp.json()
            return sort_date_keys(normalize_date_key(k) for k in keys)
        except (ValueError, TypeError) as e:
            raise StoreUnavailable(f"Unexpected response from {url}: {e}") from e

    async def get(self, owner: str, date_key: str) -> str | None:
        return await asyncio.to_thread(self._get, owner, date_key)

    async def put(self, owner: str, date_key: str, content: str) -> None:
        await asyncio.to_thread(self._put, owner, date_key, content)

    async def list_dates(self, owner: str) -> list[str]:
        return await asyncio.to_thread(self._list_dates, owner)
