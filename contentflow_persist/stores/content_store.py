"""
RESPONSIBILITIES
- Manage per-module upload directories: listing, file-count cap, deletion.
- Enforce "at most one active file per module" through the rename-based activation protocol.
- Convert an activated spreadsheet into the module's JSON dataset.
PROCESS OVERVIEW
1. ensure_directories() creates uploads/<module> and json/<module> for every configured module.
2. check_file_limit() gates uploads: fewer than file_limit files means there is room.
3. list() decodes each filename once into a FilenameRecord and returns entries newest first.
4. activate() takes the module lock, unmarks every active file, marks the target,
   and runs the dataset conversion when the target is a spreadsheet.
5. healthcheck() reports dependencies, writable directories, lock files, and invariant breaches.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Iterable

from contentflow_io.dataset import ConversionError, ConvertedDataset, convert_workbook, dataset_path
from contentflow_io.naming import FilenameRecord, is_active, mark_active, unmark_active
from contentflow_persist.schemas.entries import ContentEntry, EntryStatus, iso_mtime
from contentflow_persist.stores.base_store import (
    BaseStore,
    PersistHealth,
    ScannedFile,
    StoreLockedError,
    UnknownModuleError,
    check_dependencies,
    is_writable,
)
from contentflow_persist.utils.locks import held_locks, module_lock
from contentflow_persist.utils.log import get_logger
from contentflow_persist.utils.paths import (
    DEFAULT_MODULES,
    JSON_DIR,
    TMP_DIR,
    module_json_dir,
    module_upload_dir,
)

DEFAULT_FILE_LIMIT = 8
DEFAULT_SPREADSHEET_EXTENSIONS: tuple[str, ...] = (".xlsx", ".xls")

Converter = Callable[[Path, str, Path], ConvertedDataset]


@dataclass(slots=True)
class ActivationResult:
    """Outcome of an activation request."""

    success: bool
    active_path: str | None = None
    converted: bool = False
    error: str | None = None

    def to_dict(self) -> dict[str, object]:
        return {"success": self.success}


class ContentStore(BaseStore):
    """Directory-backed store for per-module content files."""

    def __init__(
        self,
        root: Path | str | None = None,
        *,
        modules: Iterable[str] = DEFAULT_MODULES,
        file_limit: int = DEFAULT_FILE_LIMIT,
        spreadsheet_extensions: Iterable[str] = DEFAULT_SPREADSHEET_EXTENSIONS,
        converter: Converter | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        super().__init__(root, logger=logger or get_logger("content_store", Path(root) if root else None))
        self.modules: tuple[str, ...] = tuple(modules)
        self.file_limit = file_limit
        self.spreadsheet_extensions = frozenset(ext.lower() for ext in spreadsheet_extensions)
        self._converter: Converter = converter or convert_workbook

    @property
    def json_root(self) -> Path:
        return self.root / JSON_DIR

    def module_dir(self, module: str) -> Path:
        self._require_module(module)
        return module_upload_dir(self.root, module)

    def dataset_path(self, module: str) -> Path:
        self._require_module(module)
        return dataset_path(self.json_root, module)

    # Directory lifecycle -------------------------------------------------------------

    def ensure_directories(self) -> None:
        targets: list[Path] = [self.root / TMP_DIR]
        for module in self.modules:
            targets.append(module_upload_dir(self.root, module))
            targets.append(module_json_dir(self.root, module))
        self._ensure(targets)

    def check_file_limit(self, module: str) -> bool:
        """Return True while the module holds fewer than ``file_limit`` files."""

        count = len(self._scan(self.module_dir(module)))
        allowed = count < self.file_limit
        if not allowed:
            self.logger.warning("Module %s is full (%s/%s files)", module, count, self.file_limit)
        return allowed

    # Listing -------------------------------------------------------------------------

    def list(self, module: str) -> list[ContentEntry]:
        scanned = self._scan(self.module_dir(module))
        scanned.sort(key=lambda item: item.mtime, reverse=True)
        return [self._to_entry(item, module) for item in scanned]

    def active_entry(self, module: str) -> ContentEntry | None:
        for entry in self.list(module):
            if entry.active:
                return entry
        return None

    def _to_entry(self, item: ScannedFile, module: str) -> ContentEntry:
        record = FilenameRecord.from_filename(item.name)
        return ContentEntry(
            id=record.filename,
            name=record.display_name,
            path=self.relative(item.path),
            upload_time=iso_mtime(item.mtime),
            status=EntryStatus.USED if record.active else EntryStatus.UNUSED,
            module=module,
        )

    # Activation ----------------------------------------------------------------------

    def activate(self, path: str | os.PathLike[str], module: str) -> ActivationResult:
        """Make the file at ``path`` the single active entry of its directory.

        Every active sibling (the target included) is unmarked first, then the
        target is marked. Spreadsheets are converted into the module dataset and
        the conversion outcome decides ``success``; renames are not rolled back.
        """

        self._require_module(module)
        target = self.resolve(path)
        # Only direct children of uploads/<module> take part in the module's activation.
        if target is None or target.parent != self.module_dir(module) or not target.is_file():
            self.logger.warning("Activation target not found in module %s: %s", module, path)
            return ActivationResult(success=False, error="not found")

        try:
            with module_lock(self.root, module):
                return self._activate_locked(target, module)
        except StoreLockedError as exc:
            self.logger.error("Activation of %s skipped: %s", path, exc)
            return ActivationResult(success=False, error=str(exc))

    def _activate_locked(self, target: Path, module: str) -> ActivationResult:
        directory = target.parent
        target_name = target.name

        for item in self._scan(directory):
            if not is_active(item.name):
                continue
            unmarked = unmark_active(item.name)
            item.path.rename(directory / unmarked)
            self.logger.info("Deactivated %s -> %s", item.name, unmarked)
            if item.name == target_name:
                target_name = unmarked

        activated_name = mark_active(target_name)
        activated = directory / activated_name
        if activated_name != target_name:
            (directory / target_name).rename(activated)
        self.logger.info("Activated %s in module %s", activated_name, module)

        result = ActivationResult(success=True, active_path=self.relative(activated))
        record = FilenameRecord.from_filename(activated_name)
        if record.extension.lower() not in self.spreadsheet_extensions:
            return result

        try:
            dataset = self._converter(activated, module, self.json_root)
        except ConversionError as exc:
            self.logger.error("Dataset conversion failed for %s: %s", activated_name, exc)
            result.success = False
            result.error = str(exc)
            return result
        self.logger.info("Dataset for %s refreshed with %s rows", module, dataset.rows)
        result.converted = True
        return result

    # Diagnostics ---------------------------------------------------------------------

    def healthcheck(self) -> PersistHealth:
        issues: list[str] = []
        writable: dict[str, bool] = {}
        for module in self.modules:
            for directory in (module_upload_dir(self.root, module), module_json_dir(self.root, module)):
                writable[str(directory)] = is_writable(directory)
            active = [item.name for item in self._scan(module_upload_dir(self.root, module)) if is_active(item.name)]
            if len(active) > 1:
                issues.append(f"module {module} has {len(active)} active files: {', '.join(sorted(active))}")
        missing = [path for path, ok in writable.items() if not ok]
        if missing:
            issues.append(f"{len(missing)} content directories missing or read-only")
        return PersistHealth(
            dependencies=check_dependencies(("pandas", "openpyxl")),
            writable_paths=writable,
            locked_paths=[str(p) for p in held_locks(self.root)],
            issues=issues,
        )

    def _require_module(self, module: str) -> None:
        if module not in self.modules:
            raise UnknownModuleError(f"Unknown module: {module!r} (expected one of {', '.join(self.modules)})")


# Convenience facade ---------------------------------------------------------------


def init_content_store(root: Path | None = None) -> Path:
    store = ContentStore(root)
    store.ensure_directories()
    return store.root
