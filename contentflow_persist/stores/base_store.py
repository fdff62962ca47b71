"""
RESPONSIBILITIES
- Define shared interfaces and exceptions for directory-backed stores.
- Provide path resolution, directory scanning and deletion shared by concrete stores.
PROCESS OVERVIEW
1. ensure_directories -> create the directories a store owns under the data root.
2. list -> scan a directory, build view entries, sort newest first.
3. delete -> resolve a root-relative path and unlink the file when present.
4. healthcheck -> verify dependencies, directory write access, and lock files.
"""

from __future__ import annotations

import importlib.util
import logging
import os
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable

from contentflow_persist.utils.paths import relative_path, resolve_managed_path, resolve_root


class StoreError(RuntimeError):
    """Base exception type for persistence-layer failures."""


class StoreInitializationError(StoreError):
    """Raised when store directories cannot be created."""


class StoreValidationError(StoreError):
    """Raised when input data fails validation rules."""


class UnknownModuleError(StoreValidationError):
    """Raised when a module name is not part of the configured enumeration."""


class StoreLockedError(StoreError):
    """Raised when a module is locked by another writer."""


@dataclass(slots=True)
class PersistHealth:
    """Structured report produced by health checks."""

    dependencies: dict[str, bool]
    writable_paths: dict[str, bool]
    locked_paths: list[str]
    issues: list[str] = field(default_factory=list)

    def is_healthy(self) -> bool:
        """Return True when no issues are observed."""

        return not self.issues and all(self.dependencies.values()) and all(
            self.writable_paths.values()
        )


@dataclass(slots=True)
class ScannedFile:
    """A regular file found while scanning a store directory."""

    path: Path
    mtime: float

    @property
    def name(self) -> str:
        return self.path.name


def check_dependencies(names: Iterable[str]) -> dict[str, bool]:
    return {name: importlib.util.find_spec(name) is not None for name in names}


def is_writable(path: Path) -> bool:
    return path.is_dir() and os.access(path, os.W_OK)


class BaseStore(ABC):
    """Abstract class shared by concrete directory-backed stores."""

    def __init__(self, root: Path | str | None = None, *, logger: logging.Logger | None = None) -> None:
        self.root = resolve_root(root)
        self.logger = logger or logging.getLogger(self.__class__.__name__)

    @abstractmethod
    def ensure_directories(self) -> None:
        """Create the directories owned by the store if absent."""

    @abstractmethod
    def healthcheck(self) -> PersistHealth:
        """Run diagnostics for the store and return a structured report."""

    def resolve(self, path: str | os.PathLike[str]) -> Path | None:
        """Map a root-relative client path to an absolute path inside the data root."""

        return resolve_managed_path(self.root, path)

    def relative(self, path: Path) -> str:
        return relative_path(self.root, path)

    def delete(self, path: str | os.PathLike[str]) -> bool:
        """Delete the file at a root-relative path; return whether a file was removed."""

        target = self.resolve(path)
        if target is None or not target.is_file():
            self.logger.info("Delete skipped, no file at %s", path)
            return False
        target.unlink()
        self.logger.info("Deleted %s", self.relative(target))
        return True

    def _scan(self, directory: Path) -> list[ScannedFile]:
        """Return regular files in ``directory``; a missing directory yields []."""

        if not directory.is_dir():
            return []
        scanned: list[ScannedFile] = []
        with os.scandir(directory) as entries:
            for entry in entries:
                if not entry.is_file():
                    continue
                scanned.append(ScannedFile(path=Path(entry.path), mtime=entry.stat().st_mtime))
        return scanned

    def _ensure(self, directories: Iterable[Path]) -> None:
        try:
            for directory in directories:
                directory.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise StoreInitializationError(str(exc)) from exc
