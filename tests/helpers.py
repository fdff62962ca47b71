"""Shared helpers for building fixtures on disk."""

from __future__ import annotations

import os
import zipfile
from datetime import datetime
from pathlib import Path
from typing import Iterable, Sequence

from openpyxl import Workbook


def write_workbook(path: Path, header: Sequence[str], rows: Iterable[Sequence[object]], *, title: str = "Sheet1") -> Path:
    """Write a single-sheet workbook with ``header`` followed by ``rows``."""

    wb = Workbook()
    ws = wb.active
    ws.title = title
    ws.append(list(header))
    for row in rows:
        ws.append(list(row))
    path.parent.mkdir(parents=True, exist_ok=True)
    wb.save(path)
    return path


def corrupt_sheet_xml(path: Path, payload: bytes = b"<worksheet><sheetData><row") -> Path:
    """Rewrite ``xl/worksheets/sheet1.xml`` inside a valid workbook with truncated XML."""

    with zipfile.ZipFile(path) as source:
        members = {info.filename: source.read(info.filename) for info in source.infolist()}
    members["xl/worksheets/sheet1.xml"] = payload
    with zipfile.ZipFile(path, "w", zipfile.ZIP_DEFLATED) as target:
        for name, data in members.items():
            target.writestr(name, data)
    return path


def touch(path: Path, *, mtime: float | None = None, payload: bytes = b"x") -> Path:
    """Create ``path`` and optionally pin its modification time."""

    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(payload)
    if mtime is not None:
        os.utime(path, (mtime, mtime))
    return path


def ts(year: int = 2025, month: int = 1, day: int = 1) -> float:
    return datetime(year, month, day).timestamp()
