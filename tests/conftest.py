"""Shared fixtures and test doubles."""

from typing import Any, List, Optional

import pytest
import requests

from ytrss.errors import CredentialNotFoundError, CredentialStoreError, ValidationFailure
from ytrss.models import Item, ItemStatus, Podcast


class MemoryCredentials:
    """In-memory stand-in for CredentialStore."""

    def __init__(self, secret: Optional[str] = None, *, fail_writes: bool = False) -> None:
        self.secret = secret
        self.fail_writes = fail_writes

    def get(self) -> str:
        if not self.secret:
            raise CredentialNotFoundError("API key not found")
        return self.secret

    def set(self, secret: str) -> None:
        if not (secret or "").strip():
            raise ValidationFailure("API key cannot be empty")
        if self.fail_writes:
            raise CredentialStoreError("keychain locked")
        self.secret = secret.strip()

    def clear(self) -> None:
        if self.fail_writes:
            raise CredentialStoreError("keychain locked")
        self.secret = None


_NOT_JSON = object()


class FakeResponse:
    def __init__(self, status_code: int = 200, payload: Any = None, *, reason: str = "OK", text: Optional[str] = None):
        self.status_code = status_code
        self.reason = reason
        self._payload = payload
        if text is not None:
            self.text = text
        elif payload is _NOT_JSON:
            self.text = "<html>oops</html>"
        else:
            self.text = repr(payload)

    def json(self) -> Any:
        if self._payload is _NOT_JSON:
            raise ValueError("Expecting value: line 1 column 1 (char 0)")
        return self._payload


class FakeSession:
    """Records requests and replays queued responses or exceptions."""

    def __init__(self, *responses: Any) -> None:
        self.headers: dict = {}
        self.responses: List[Any] = list(responses)
        self.calls: List[dict] = []

    def request(self, method: str, url: str, **kwargs: Any) -> FakeResponse:
        self.calls.append({"method": method, "url": url, **kwargs})
        result = self.responses.pop(0)
        if isinstance(result, Exception):
            raise result
        return result


@pytest.fixture
def not_json() -> object:
    return _NOT_JSON


@pytest.fixture
def credentials() -> MemoryCredentials:
    return MemoryCredentials("abc123")


@pytest.fixture
def no_credentials() -> MemoryCredentials:
    return MemoryCredentials()


@pytest.fixture
def podcast() -> Podcast:
    return Podcast(id="pod-1", title="Tech Talks")


@pytest.fixture
def podcasts(podcast: Podcast) -> tuple:
    return (podcast, Podcast(id="pod-2", title="History Hour"))


@pytest.fixture
def pending_item() -> Item:
    return Item(status=ItemStatus.CREATED, created="2024-03-01 10:00:00.000Z", raw_status="CREATED")


@pytest.fixture
def done_item() -> Item:
    return Item(
        status=ItemStatus.SUCCESS,
        title="Episode 1",
        created="2024-02-01T00:00:00Z",
        raw_status="SUCCESS",
    )


@pytest.fixture
def failed_item() -> Item:
    return Item(status=ItemStatus.ERROR, error="unavailable", raw_status="ERROR")


@pytest.fixture
def connection_error() -> requests.ConnectionError:
    return requests.ConnectionError("Name or service not known")
