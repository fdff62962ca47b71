"""
RESPONSIBILITIES
- Read-only listings for images and Markdown documents (no activation, no file cap).
- Share deletion and directory handling with the content store via BaseStore.
PROCESS OVERVIEW
1. ensure_directories() creates images/ or markdown/ under the data root.
2. list() scans the directory and returns entries newest first.
3. Images keep the raw filename as name; documents decode "<timestamp>_<name>".
"""

from __future__ import annotations

import logging
from pathlib import Path

from contentflow_io.naming import FilenameRecord
from contentflow_persist.schemas.entries import MediaEntry, iso_mtime
from contentflow_persist.stores.base_store import BaseStore, PersistHealth, ScannedFile, is_writable
from contentflow_persist.utils.log import get_logger
from contentflow_persist.utils.paths import IMAGES_DIR, MARKDOWN_DIR


class MediaStore(BaseStore):
    """Flat directory listing shared by image and document stores."""

    subdir: str
    decode_names: bool = False

    def __init__(self, root: Path | str | None = None, *, logger: logging.Logger | None = None) -> None:
        super().__init__(root, logger=logger or get_logger(f"{self.subdir}_store", Path(root) if root else None))

    @property
    def directory(self) -> Path:
        return self.root / self.subdir

    def ensure_directories(self) -> None:
        self._ensure([self.directory])

    def list(self) -> list[MediaEntry]:
        scanned = self._scan(self.directory)
        scanned.sort(key=lambda item: item.mtime, reverse=True)
        return [self._to_entry(item) for item in scanned]

    def _to_entry(self, item: ScannedFile) -> MediaEntry:
        name = item.name
        if self.decode_names:
            name = FilenameRecord.from_filename(item.name).display_name
        return MediaEntry(
            id=item.name,
            name=name,
            path=self.relative(item.path),
            upload_time=iso_mtime(item.mtime),
        )

    def healthcheck(self) -> PersistHealth:
        writable = {str(self.directory): is_writable(self.directory)}
        issues = [] if writable[str(self.directory)] else [f"{self.directory} missing or read-only"]
        return PersistHealth(
            dependencies={},
            writable_paths=writable,
            locked_paths=[],
            issues=issues,
        )


class ImageStore(MediaStore):
    subdir = IMAGES_DIR


class DocumentStore(MediaStore):
    """Markdown documents stored as ``<timestamp>_<name>.md``."""

    subdir = MARKDOWN_DIR
    decode_names = True
