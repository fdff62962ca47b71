"""
RESPONSIBILITIES
- Resolve and create the data-root scaffold used by the content stores.
- Map modules to their upload/json directories and translate client paths safely.
PROCESS OVERVIEW
1. resolve_root() expands user input, CONTENTFLOW_DATA_ROOT, or falls back to ~/ContentFlow/data.
2. ensure_structure() materializes images/uploads/json/markdown/tmp/logs directories.
3. resolve_managed_path() maps a root-relative client path to an absolute path inside the root.
4. relative_path() produces the POSIX path handed back to clients.
"""

from __future__ import annotations

import os
from pathlib import Path, PurePosixPath
from typing import Iterable

DATA_ROOT_ENV = "CONTENTFLOW_DATA_ROOT"

DEFAULT_MODULES: tuple[str, ...] = ("banner", "tech", "jobs", "news")

IMAGES_DIR = "images"
UPLOADS_DIR = "uploads"
JSON_DIR = "json"
MARKDOWN_DIR = "markdown"
TMP_DIR = "tmp"
LOGS_DIR = "logs"

_DEFAULT_SUBDIRS: tuple[str, ...] = (IMAGES_DIR, UPLOADS_DIR, JSON_DIR, MARKDOWN_DIR, TMP_DIR, LOGS_DIR)


def resolve_root(root: str | os.PathLike[str] | None = None) -> Path:
    """Return the data root, defaulting to $CONTENTFLOW_DATA_ROOT or ~/ContentFlow/data."""

    if root is None:
        env = os.getenv(DATA_ROOT_ENV)
        base = Path(env) if env else Path.home() / "ContentFlow" / "data"
    else:
        base = Path(root)
    return base.expanduser().resolve()


def ensure_structure(root: str | os.PathLike[str] | None = None, *, subdirs: Iterable[str] | None = None) -> dict[str, Path]:
    """Ensure data directories exist and return a mapping."""

    base = resolve_root(root)
    resolved: dict[str, Path] = {}
    requested = tuple(subdirs) if subdirs is not None else _DEFAULT_SUBDIRS
    base.mkdir(parents=True, exist_ok=True)
    for name in requested:
        target = base / name
        target.mkdir(parents=True, exist_ok=True)
        resolved[name] = target
    return resolved


def module_upload_dir(root: Path, module: str) -> Path:
    return root / UPLOADS_DIR / module


def module_json_dir(root: Path, module: str) -> Path:
    return root / JSON_DIR / module


def lock_dir(root: Path) -> Path:
    return root / TMP_DIR / "locks"


def resolve_managed_path(root: Path, relative: str | os.PathLike[str]) -> Path | None:
    """Return the absolute path for a root-relative client path.

    Returns None when the path is empty or resolves outside of ``root``.
    """

    text = str(relative).strip().replace("\\", "/").lstrip("/")
    if not text:
        return None
    candidate = (root / PurePosixPath(text)).resolve()
    try:
        candidate.relative_to(root)
    except ValueError:
        return None
    if candidate == root:
        return None
    return candidate


def relative_path(root: Path, path: Path) -> str:
    """Return ``path`` relative to ``root`` using forward slashes."""

    return path.relative_to(root).as_posix()
