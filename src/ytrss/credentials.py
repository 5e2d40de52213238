"""API key storage.

The key lives in a small JSON file in the user config directory, keyed by a
fixed service identifier so other accounts can share the file later.
"""

import json
import logging
import os
from pathlib import Path
from typing import Optional

from ytrss.config import APP_NAME, config_dir
from ytrss.errors import CredentialNotFoundError, CredentialStoreError, ValidationFailure

SERVICE_NAME = APP_NAME
ACCOUNT = "api_key"

logger = logging.getLogger(__name__)


def credentials_path() -> Path:
    return config_dir() / "credentials.json"


class CredentialStore:
    def __init__(self, path: Optional[Path] = None, *, service: str = SERVICE_NAME) -> None:
        self._path = path
        self.service = service

    @property
    def path(self) -> Path:
        if self._path is None:
            self._path = credentials_path()
        return self._path

    def _read(self) -> dict:
        if not self.path.exists():
            return {}
        try:
            raw = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            raise CredentialStoreError(f"could not read credential store: {exc}") from exc
        if not isinstance(raw, dict):
            raise CredentialStoreError("credential store is corrupt")
        return raw

    def _write(self, data: dict) -> None:
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp.write_text(json.dumps(data, indent=2) + "\n", encoding="utf-8")
            os.chmod(tmp, 0o600)
            tmp.replace(self.path)
        except OSError as exc:
            raise CredentialStoreError(f"could not write credential store: {exc}") from exc

    def get(self) -> str:
        entry = self._read().get(self.service) or {}
        secret = entry.get(ACCOUNT) if isinstance(entry, dict) else None
        if not isinstance(secret, str) or not secret:
            raise CredentialNotFoundError("API key not found")
        return secret

    def has_credential(self) -> bool:
        try:
            self.get()
        except CredentialNotFoundError:
            return False
        return True

    def set(self, secret: str) -> None:
        secret = (secret or "").strip()
        if not secret:
            raise ValidationFailure("API key cannot be empty")
        data = self._read()
        entry = data.get(self.service)
        if not isinstance(entry, dict):
            entry = {}
        entry[ACCOUNT] = secret
        data[self.service] = entry
        self._write(data)
        logger.info("Stored API key for %s", self.service)

    def clear(self) -> None:
        data = self._read()
        entry = data.get(self.service)
        if not isinstance(entry, dict) or ACCOUNT not in entry:
            return
        entry.pop(ACCOUNT, None)
        if entry:
            data[self.service] = entry
        else:
            data.pop(self.service, None)
        self._write(data)
        logger.info("Cleared API key for %s", self.service)
