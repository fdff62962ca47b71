"""
RESPONSIBILITIES
- Provide typed view objects returned by listings (content, images, documents).
- Offer to_dict() helpers producing the client-facing camelCase payload.
PROCESS OVERVIEW
1. Stores scan directories and build entries from FilenameRecord + stat data.
2. Entries are sorted by modification time, then serialized via to_dict().
3. Nothing here is persisted; entries are recomputed on every listing.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import MutableMapping


class EntryStatus(str, Enum):
    USED = "used"
    UNUSED = "unused"


def iso_mtime(mtime: float) -> str:
    """Format an mtime as UTC ISO-8601 with milliseconds and a ``Z`` suffix."""

    stamp = datetime.fromtimestamp(mtime, tz=timezone.utc)
    return stamp.isoformat(timespec="milliseconds").replace("+00:00", "Z")


@dataclass(slots=True)
class MediaEntry:
    id: str
    name: str
    path: str
    upload_time: str

    def to_dict(self) -> MutableMapping[str, object]:
        return {
            "id": self.id,
            "name": self.name,
            "path": self.path,
            "uploadTime": self.upload_time,
        }


@dataclass(slots=True)
class ContentEntry:
    id: str
    name: str
    path: str
    upload_time: str
    status: EntryStatus
    module: str

    @property
    def active(self) -> bool:
        return self.status is EntryStatus.USED

    def to_dict(self) -> MutableMapping[str, object]:
        return {
            "id": self.id,
            "name": self.name,
            "path": self.path,
            "uploadTime": self.upload_time,
            "status": self.status.value,
            "module": self.module,
        }
