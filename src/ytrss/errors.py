"""Exceptions raised by the ytrss client.

Every failure that can surface on screen derives from ``YtrssError`` so the
UI can treat it uniformly as "operation failed, show message".
"""

from __future__ import annotations

from typing import Optional


class YtrssError(RuntimeError):
    pass


class ValidationFailure(YtrssError):
    """Required input was empty; raised before anything is dispatched."""


class Unauthenticated(YtrssError):
    def __init__(self, message: str = "API key not set. Please set an API key") -> None:
        super().__init__(message)


class TransportFailure(YtrssError):
    """Connection, DNS or timeout failure talking to the API."""


class HTTPFailure(YtrssError):
    def __init__(self, status_code: int, reason: str = "", body: str = "") -> None:
        self.status_code = status_code
        self.reason = reason
        self.body = body
        status = f"{status_code} {reason}".strip()
        super().__init__(f"API request failed: {status} - {body}")


class DecodeFailure(YtrssError):
    def __init__(self, detail: str, *, status_code: Optional[int] = None, body: str = "") -> None:
        self.status_code = status_code
        self.body = body
        super().__init__(
            f"failed to decode JSON response (status {status_code}): {detail}\nResponse body: {body}"
        )


class CredentialNotFoundError(YtrssError):
    pass


class CredentialStoreError(YtrssError):
    pass
