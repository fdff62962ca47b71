"""Spreadsheet to JSON dataset conversion."""

# Module responsibilities:
# - Flatten worksheet rows into JSON-ready records (nulls become empty strings).
# - Persist one dataset document per module at a deterministic path.

from __future__ import annotations

import json
import zipfile
from dataclasses import dataclass
from datetime import date, datetime, time
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping

import pandas as pd
from openpyxl.utils.exceptions import InvalidFileException

from .excel_reader import read_first_sheet
from .utils.log import get_logger

logger = get_logger("dataset")


class ConversionError(RuntimeError):
    """Raised when a workbook cannot be converted into a dataset."""


class WorkbookUnreadableError(ConversionError):
    """Raised when a workbook cannot be parsed or contains no sheets."""


@dataclass(slots=True)
class ConvertedDataset:
    module: str
    output_path: Path
    rows: int


def _is_missing(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, (list, tuple, dict, set)):
        return False
    try:
        return bool(pd.isna(value))
    except (TypeError, ValueError):
        return False


def _json_default(value: Any) -> Any:
    if isinstance(value, (datetime, date, time)):
        return value.isoformat()
    if hasattr(value, "item"):
        return value.item()
    return str(value)


def flatten_rows(rows: Iterable[Mapping[Any, Any]]) -> List[Dict[str, Any]]:
    """Return one flat record per input row with null values replaced by ``""``.

    Keys and row order are preserved; non-null values are passed through as is.
    """

    flattened: List[Dict[str, Any]] = []
    for row in rows:
        flattened.append({str(key): ("" if _is_missing(value) else value) for key, value in row.items()})
    return flattened


def dataset_path(json_root: Path, module: str) -> Path:
    return Path(json_root) / module / f"{module}.json"


def convert_workbook(workbook_path: Path, module: str, json_root: Path) -> ConvertedDataset:
    """Convert the first sheet of ``workbook_path`` into ``<json_root>/<module>/<module>.json``.

    Any existing dataset for the module is removed before the new document is
    written, so a failed write leaves no document behind.

    Raises:
        WorkbookUnreadableError: When the workbook cannot be read.
        ConversionError: When the dataset cannot be written.
    """

    try:
        frame = read_first_sheet(Path(workbook_path))
    except (OSError, ValueError, KeyError, ImportError, zipfile.BadZipFile, InvalidFileException) as exc:
        raise WorkbookUnreadableError(f"Cannot read workbook {workbook_path}: {exc}") from exc
    except Exception as exc:  # noqa: BLE001 - parser internals raise XML and type errors too
        logger.error("Unexpected workbook parse failure", extra={"path": str(workbook_path), "error": repr(exc)})
        raise WorkbookUnreadableError(f"Cannot parse workbook {workbook_path}: {exc}") from exc

    records = flatten_rows(frame.to_dict(orient="records"))
    output_path = dataset_path(json_root, module)
    try:
        output_path.parent.mkdir(parents=True, exist_ok=True)
        if output_path.exists():
            output_path.unlink()
        with output_path.open("w", encoding="utf-8") as handle:
            json.dump(records, handle, ensure_ascii=False, indent=2, default=_json_default)
    except (OSError, TypeError, ValueError) as exc:
        raise ConversionError(f"Cannot write dataset {output_path}: {exc}") from exc

    logger.info(
        "Dataset written",
        extra={"dataset_module": module, "output": str(output_path), "rows": len(records)},
    )
    return ConvertedDataset(module=module, output_path=output_path, rows=len(records))
