"""
RESPONSIBILITIES
- Serialize state transitions per module so at most one file stays active.
- Combine an in-process re-entrant lock with an exclusive lock file for other processes.
- Reclaim lock files whose owning process no longer exists.
PROCESS OVERVIEW
1. module_lock() resolves <root>/tmp/locks/<scope>-<module>.lock.
2. The in-process RLock for that path is acquired (10 s timeout).
3. The lock file is created with O_EXCL and stamped with the owner's PID.
4. An existing file whose PID is gone is removed and creation retried once;
   otherwise another process holds the module.
5. On exit the lock file is removed and the in-process lock released.
"""

from __future__ import annotations

import os
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

import psutil

from contentflow_persist.stores.base_store import StoreLockedError
from contentflow_persist.utils.paths import lock_dir

_IN_PROCESS_LOCKS: dict[Path, threading.RLock] = {}
_LOCK_REGISTRY_GUARD = threading.Lock()


def _acquire_inprocess_lock(path: Path) -> threading.RLock:
    with _LOCK_REGISTRY_GUARD:
        lock = _IN_PROCESS_LOCKS.get(path)
        if lock is None:
            lock = threading.RLock()
            _IN_PROCESS_LOCKS[path] = lock
        return lock


def lock_path_for(root: Path, module: str, scope: str = "content") -> Path:
    return lock_dir(root) / f"{scope}-{module}.lock"


def held_locks(root: Path) -> list[Path]:
    """Return lock files currently present under the data root."""

    directory = lock_dir(root)
    if not directory.is_dir():
        return []
    return sorted(p for p in directory.iterdir() if p.suffix == ".lock")


def lock_owner(path: Path) -> int | None:
    """Return the PID recorded in a lock file, or None when unreadable."""

    try:
        text = path.read_text(encoding="ascii").strip()
    except (OSError, UnicodeDecodeError):
        return None
    return int(text) if text.isdigit() else None


def is_stale(path: Path) -> bool:
    """True when the lock file names a PID that is no longer running."""

    owner = lock_owner(path)
    if owner is None:
        return False
    return not psutil.pid_exists(owner)


def _create_lock_file(path: Path) -> int:
    try:
        return os.open(path, os.O_CREAT | os.O_EXCL | os.O_WRONLY)
    except FileExistsError as exc:
        if not is_stale(path):
            raise StoreLockedError(f"Module appears locked: {path}") from exc
    # Owner is gone; another reclaimer may win the race, which surfaces as locked.
    path.unlink(missing_ok=True)
    try:
        return os.open(path, os.O_CREAT | os.O_EXCL | os.O_WRONLY)
    except FileExistsError as exc:
        raise StoreLockedError(f"Module appears locked: {path}") from exc


@contextmanager
def module_lock(root: Path, module: str, scope: str = "content") -> Iterator[None]:
    """Acquire the cooperative lock guarding ``module`` under ``root``."""

    path = lock_path_for(root, module, scope).resolve()
    inproc = _acquire_inprocess_lock(path)
    acquired = inproc.acquire(timeout=10)
    if not acquired:
        raise StoreLockedError(f"Timeout acquiring in-process lock for {path}")
    fd: int | None = None
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        fd = _create_lock_file(path)
        os.write(fd, str(os.getpid()).encode("ascii"))
        yield
    finally:
        if fd is not None:
            os.close(fd)
            if path.exists():
                os.unlink(path)
        inproc.release()
