"""`contentflow_io` top-level package exports the naming codec and spreadsheet conversion helpers."""

# Module responsibilities:
# - Re-export the filename codec and workbook-to-dataset conversion so stores have a stable API surface.
# - Provide package version placeholder for future packaging.

from __future__ import annotations

from .dataset import (
    ConversionError,
    ConvertedDataset,
    WorkbookUnreadableError,
    convert_workbook,
    dataset_path,
    flatten_rows,
)
from .excel_reader import read_first_sheet
from .naming import (
    ACTIVE_TOKEN,
    DecodeResult,
    FilenameRecord,
    decode_original_name,
    encode_image,
    encode_new,
    is_active,
    mark_active,
    split_extension,
    try_decode_original_name,
    unmark_active,
)

__all__ = [
    "ACTIVE_TOKEN",
    "ConversionError",
    "ConvertedDataset",
    "DecodeResult",
    "FilenameRecord",
    "WorkbookUnreadableError",
    "convert_workbook",
    "dataset_path",
    "decode_original_name",
    "encode_image",
    "encode_new",
    "flatten_rows",
    "is_active",
    "mark_active",
    "read_first_sheet",
    "split_extension",
    "try_decode_original_name",
    "unmark_active",
]

__version__ = "0.1.0"
