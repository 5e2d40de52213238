from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict


class ItemStatus(str, Enum):
    CREATED = "CREATED"
    SUCCESS = "SUCCESS"
    ERROR = "ERROR"
    UNKNOWN = "UNKNOWN"

    @classmethod
    def parse(cls, raw: object) -> "ItemStatus":
        s = str(raw or "").strip().upper()
        try:
            return cls(s)
        except ValueError:
            return cls.UNKNOWN


@dataclass(frozen=True)
class Podcast:
    id: str
    title: str

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "Podcast":
        return cls(id=str(raw.get("id") or ""), title=str(raw.get("title") or ""))


@dataclass(frozen=True)
class Item:
    status: ItemStatus
    title: str = ""
    created: str = ""
    error: str = ""
    # Original status string when the server sent something we don't model.
    raw_status: str = ""

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "Item":
        raw_status = str(raw.get("status") or "")
        return cls(
            status=ItemStatus.parse(raw_status),
            title=str(raw.get("title") or ""),
            created=str(raw.get("created") or ""),
            error=str(raw.get("error") or ""),
            raw_status=raw_status,
        )

    @property
    def is_pending(self) -> bool:
        return self.status is ItemStatus.CREATED


@dataclass(frozen=True)
class Usage:
    used: int
    limit: int

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "Usage":
        return cls(used=int(raw.get("usage") or 0), limit=int(raw.get("limit") or 0))

    def ratio(self) -> float:
        if self.limit <= 0:
            return 0.0
        return min(1.0, max(0.0, self.used / self.limit))
