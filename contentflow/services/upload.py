"""Upload adapter: stores incoming files under the data root using the naming codec.

Content uploads are staged in ``tmp/`` first, then the module's file cap is
checked under the module lock; a rejected upload is removed before the error is
raised, an accepted one is moved into ``uploads/<module>/``.
"""

from __future__ import annotations

import os
import shutil
import time
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO, Callable, MutableMapping, Union

from contentflow.core.errors import UploadError, UploadRejectedError
from contentflow.core.logger import get_logger
from contentflow.core.settings import StoreSettings
from contentflow_io.naming import encode_image, encode_new, split_extension
from contentflow_persist.schemas.entries import iso_mtime
from contentflow_persist.utils.locks import module_lock
from contentflow_persist.utils.paths import TMP_DIR

from .stores import Stores, build_stores

LOGGER = get_logger()

Source = Union[Path, str, BinaryIO]


def _now_ms() -> int:
    return int(time.time() * 1000)


@dataclass(slots=True)
class UploadReceipt:
    path: str
    name: str
    upload_time: str

    def to_dict(self) -> MutableMapping[str, object]:
        return {"path": self.path, "name": self.name, "uploadTime": self.upload_time}


class UploadService:
    """Persist uploaded content, images and Markdown documents."""

    def __init__(
        self,
        settings: StoreSettings,
        *,
        stores: Stores | None = None,
        clock: Callable[[], int] | None = None,
    ) -> None:
        self.settings = settings
        self.stores = stores or build_stores(settings)
        self._clock = clock or _now_ms

    @property
    def root(self) -> Path:
        return self.stores.content.root

    def upload_content(self, source: Source, module: str, *, original_name: str | None = None) -> UploadReceipt:
        """Store a content file as ``uploads/<module>/<timestamp>_<name><ext>``.

        Raises:
            UnknownModuleError: When ``module`` is not configured.
            UploadRejectedError: When the module already holds ``file_limit`` files.
            UploadError: When the source cannot be read.
        """

        content = self.stores.content
        destination_dir = content.module_dir(module)
        name = self._original_name(source, original_name)
        timestamp = self._clock()
        stem, ext = split_extension(name)
        filename = encode_new(timestamp, stem, ext)

        staged = self._stage(source, self.root / TMP_DIR / filename)
        try:
            with module_lock(self.root, module):
                if not content.check_file_limit(module):
                    raise UploadRejectedError(
                        f"Module {module} already holds {content.file_limit} files; delete one before uploading"
                    )
                destination_dir.mkdir(parents=True, exist_ok=True)
                destination = destination_dir / filename
                os.replace(staged, destination)
        finally:
            if staged.exists():
                staged.unlink()

        LOGGER.info("Stored content upload %s in module %s", filename, module)
        return UploadReceipt(
            path=content.relative(destination),
            name=name,
            upload_time=iso_mtime(timestamp / 1000),
        )

    def upload_image(self, source: Source, *, original_name: str | None = None) -> UploadReceipt:
        """Store an image as ``images/<timestamp><ext>``."""

        images = self.stores.images
        name = self._original_name(source, original_name)
        timestamp = self._clock()
        _, ext = split_extension(name)
        images.ensure_directories()
        destination = self._stage(source, images.directory / encode_image(timestamp, ext))
        LOGGER.info("Stored image upload %s", destination.name)
        return UploadReceipt(
            path=images.relative(destination),
            name=name,
            upload_time=iso_mtime(timestamp / 1000),
        )

    def upload_markdown(self, source: Source, *, original_name: str | None = None) -> UploadReceipt:
        """Store a Markdown document as ``markdown/<timestamp>_<name><ext>``."""

        documents = self.stores.documents
        name = self._original_name(source, original_name)
        timestamp = self._clock()
        stem, ext = split_extension(name)
        documents.ensure_directories()
        destination = self._stage(source, documents.directory / encode_new(timestamp, stem, ext))
        LOGGER.info("Stored document upload %s", destination.name)
        return UploadReceipt(
            path=documents.relative(destination),
            name=name,
            upload_time=iso_mtime(timestamp / 1000),
        )

    @staticmethod
    def _original_name(source: Source, original_name: str | None) -> str:
        if original_name:
            return Path(original_name).name
        if isinstance(source, (str, Path)):
            return Path(source).name
        raise UploadError("original_name is required when uploading from a stream")

    @staticmethod
    def _stage(source: Source, target: Path) -> Path:
        target.parent.mkdir(parents=True, exist_ok=True)
        try:
            if isinstance(source, (str, Path)):
                shutil.copyfile(source, target)
            else:
                with target.open("wb") as handle:
                    shutil.copyfileobj(source, handle)
        except OSError as exc:
            if target.exists():
                target.unlink()
            raise UploadError(f"Cannot store upload {target.name}: {exc}") from exc
        return target
