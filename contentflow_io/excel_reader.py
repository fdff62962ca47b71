"""Excel input helpers."""

# Module responsibilities:
# - Provide a thin wrapper around pandas.read_excel that loads the first sheet without coercion.
# - Name header columns the way browser-side sheet readers do ("__EMPTY", "a_1").
# - Emit structured logs for traceability and future auditing.

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Iterable, List

import pandas as pd

from .utils.log import get_logger

logger = get_logger("excel_reader")

EMPTY_HEADER = "__EMPTY"


def header_names(cells: Iterable[Any]) -> List[str]:
    """Return unique column names for a header row.

    Blank cells become ``__EMPTY``; repeated names get ``_1``, ``_2`` ...
    appended, skipping suffixes already taken by another header.
    """

    counters: Dict[str, int] = {}
    names: List[str] = []
    for cell in cells:
        base = EMPTY_HEADER if cell is None or pd.isna(cell) else str(cell)
        name = base
        counter = counters.get(base, 0)
        if not counter:
            counters[base] = 1
        else:
            while True:
                name = f"{base}_{counter}"
                counter += 1
                if name not in counters:
                    break
            counters[base] = counter
            counters[name] = 1
        names.append(name)
    return names


def read_first_sheet(path: Path) -> pd.DataFrame:
    """Load the first worksheet of an Excel workbook.

    Cells are read with ``dtype=object`` so integers stay integers and empty
    cells become NaN; rows where every cell is empty are dropped. The first
    remaining row is the header.

    Args:
        path: Path to the workbook.

    Returns:
        DataFrame with the header row as columns.

    Raises:
        FileNotFoundError: When the Excel file does not exist.
        ValueError: When pandas cannot parse the workbook or it has no sheets.
    """

    if not path.exists():
        raise FileNotFoundError(f"Source workbook not found: {path}")

    logger.info("Reading Excel workbook", extra={"path": str(path)})

    try:
        with pd.ExcelFile(path) as workbook:
            if not workbook.sheet_names:
                raise ValueError(f"Workbook has no sheets: {path}")
            sheet = workbook.sheet_names[0]
            raw = workbook.parse(sheet_name=sheet, header=None, dtype=object)
    except ValueError as exc:
        logger.error("Failed to read Excel workbook", extra={"error": str(exc)})
        raise

    raw = raw.dropna(how="all")
    if raw.empty:
        logger.info("Excel workbook has an empty first sheet", extra={"sheet": sheet})
        return pd.DataFrame()

    df = raw.iloc[1:].reset_index(drop=True)
    df.columns = header_names(raw.iloc[0].tolist())
    logger.info(
        "Excel workbook loaded",
        extra={"sheet": sheet, "rows": len(df.index), "columns": list(df.columns)},
    )
    return df
