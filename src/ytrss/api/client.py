from __future__ import annotations

import logging
from typing import Any, List, Optional, Protocol

import requests

import ytrss
from ytrss.errors import (
    CredentialNotFoundError,
    DecodeFailure,
    HTTPFailure,
    TransportFailure,
    Unauthenticated,
)
from ytrss.models import Item, Podcast, Usage

logger = logging.getLogger(__name__)


class SecretSource(Protocol):
    def get(self) -> str: ...


class YtrssClient:
    BASE_URL = "http://ytrss.xyz/api/v1"

    def __init__(
        self,
        *,
        credentials: SecretSource,
        base_url: Optional[str] = None,
        session: Optional[requests.Session] = None,
        timeout: float = 20.0,
    ) -> None:
        self.base_url = (base_url or self.BASE_URL).rstrip("/")
        self.credentials = credentials
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update(
            {
                "User-Agent": f"ytrss-cli/{ytrss.__version__}",
                "Accept": "application/json",
                "Content-Type": "application/json",
            }
        )

        self.last_status: Optional[int] = None

    def _request(self, method: str, path: str, **kwargs) -> Any:
        # The key is read on every call so a key set mid-session is picked up.
        try:
            api_key = self.credentials.get()
        except CredentialNotFoundError as exc:
            raise Unauthenticated() from exc

        url = f"{self.base_url}{path}"
        headers = {"Authorization": f"Bearer {api_key}"}
        try:
            r = self.session.request(method, url, headers=headers, timeout=self.timeout, **kwargs)
        except requests.RequestException as exc:
            logger.warning("%s %s failed: %s", method, path, exc)
            raise TransportFailure(f"could not connect to the API: {exc}") from exc

        self.last_status = r.status_code
        if not 200 <= r.status_code < 300:
            logger.warning("%s %s returned %s", method, path, r.status_code)
            raise HTTPFailure(r.status_code, r.reason or "", r.text)

        try:
            return r.json()
        except ValueError as exc:
            raise DecodeFailure(str(exc), status_code=r.status_code, body=r.text) from exc

    def _expect(self, data: Any, kind: type, what: str) -> Any:
        if not isinstance(data, kind):
            raise DecodeFailure(
                f"expected {what}, got {type(data).__name__}",
                status_code=self.last_status,
                body=repr(data),
            )
        return data

    def list_podcasts(self) -> List[Podcast]:
        data = self._expect(self._request("GET", "/list-podcasts"), list, "a list of podcasts")
        return [Podcast.from_dict(p) for p in data if isinstance(p, dict)]

    def add_url(self, podcast_id: str, url: str) -> Item:
        payload = {"podcast_id": podcast_id, "url": url}
        data = self._expect(self._request("POST", "/podcasts/add-url", json=payload), dict, "an item")
        return Item.from_dict(data)

    def get_items(self, podcast_id: str) -> List[Item]:
        data = self._expect(self._request("GET", f"/get-items/{podcast_id}"), list, "a list of items")
        return [Item.from_dict(i) for i in data if isinstance(i, dict)]

    def get_usage(self) -> Usage:
        data = self._expect(self._request("GET", "/get-usage"), dict, "a usage object")
        try:
            return Usage.from_dict(data)
        except (TypeError, ValueError) as exc:
            raise DecodeFailure(str(exc), status_code=self.last_status, body=repr(data)) from exc
