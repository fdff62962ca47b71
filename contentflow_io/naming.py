"""Filename codec for uploaded content."""

# Module responsibilities:
# - Encode/decode the "<timestamp>_<name>[_active]<ext>" naming scheme used on disk.
# - Expose FilenameRecord so callers decode once at scan time and work with typed values.

from __future__ import annotations

from dataclasses import dataclass
from typing import NamedTuple, Optional, Tuple

from .utils.log import get_logger

logger = get_logger("naming")

ACTIVE_TOKEN = "_active"
SEPARATOR = "_"
_ACTIVE_SEGMENT = ACTIVE_TOKEN.lstrip(SEPARATOR)


class DecodeResult(NamedTuple):
    """Outcome of a fallible original-name decode."""

    value: str
    ok: bool
    reason: Optional[str] = None


def split_extension(filename: str) -> Tuple[str, str]:
    """Split ``filename`` into ``(stem, ext)`` using the last dot.

    A leading dot (``.gitignore``) is part of the stem, not an extension.
    """

    idx = filename.rfind(".")
    if idx <= 0:
        return filename, ""
    return filename[:idx], filename[idx:]


def _normalize_ext(ext: str) -> str:
    if not ext:
        return ""
    return ext if ext.startswith(".") else f".{ext}"


def encode_new(timestamp: int, original_name: str, ext: str) -> str:
    """Return the on-disk name for a freshly uploaded content file."""

    return f"{int(timestamp)}{SEPARATOR}{original_name}{_normalize_ext(ext)}"


def encode_image(timestamp: int, ext: str) -> str:
    """Return the on-disk name for an uploaded image (no original name kept)."""

    return f"{int(timestamp)}{_normalize_ext(ext)}"


def is_active(filename: str) -> bool:
    # Substring match, so an original name containing the token also counts.
    return ACTIVE_TOKEN in filename


def mark_active(filename: str) -> str:
    """Insert the active token right before the extension unless already present."""

    if is_active(filename):
        return filename
    stem, ext = split_extension(filename)
    return f"{stem}{ACTIVE_TOKEN}{ext}"


def unmark_active(filename: str) -> str:
    """Remove the active token; prefers the occurrence right before the extension."""

    if not is_active(filename):
        return filename
    stem, ext = split_extension(filename)
    if stem.endswith(ACTIVE_TOKEN):
        return f"{stem[: -len(ACTIVE_TOKEN)]}{ext}"
    return filename.replace(ACTIVE_TOKEN, "", 1)


def try_decode_original_name(filename: str) -> DecodeResult:
    """Decode the user supplied name (without extension) from an encoded filename.

    Returns the input unchanged with ``ok=False`` when the name does not follow
    the ``<timestamp>_<name>`` layout.
    """

    stem, _ = split_extension(filename)
    parts = stem.split(SEPARATOR)
    if len(parts) < 2:
        return DecodeResult(filename, False, "missing timestamp separator")
    if parts[-1] == _ACTIVE_SEGMENT:
        parts.pop()
    timestamp = parts.pop(0)
    if not timestamp.isdigit():
        return DecodeResult(filename, False, f"timestamp segment is not numeric: {timestamp!r}")
    if not parts:
        return DecodeResult(filename, False, "no original name after timestamp")
    return DecodeResult(SEPARATOR.join(parts), True)


def decode_original_name(filename: str) -> str:
    result = try_decode_original_name(filename)
    if not result.ok:
        logger.warning(
            "Could not decode original name; using filename as is",
            extra={"stored_name": filename, "reason": result.reason},
        )
    return result.value


@dataclass(frozen=True, slots=True)
class FilenameRecord:
    """Typed view of an encoded content filename."""

    filename: str
    timestamp: Optional[int]
    original_name: str
    active: bool
    extension: str
    decoded: bool = True

    @classmethod
    def from_filename(cls, filename: str) -> "FilenameRecord":
        _, ext = split_extension(filename)
        result = try_decode_original_name(filename)
        timestamp: Optional[int] = None
        if result.ok:
            timestamp = int(filename.split(SEPARATOR, 1)[0])
        else:
            logger.warning(
                "Malformed content filename",
                extra={"stored_name": filename, "reason": result.reason},
            )
        return cls(
            filename=filename,
            timestamp=timestamp,
            original_name=result.value,
            active=is_active(filename),
            extension=ext,
            decoded=result.ok,
        )

    @property
    def display_name(self) -> str:
        """Name shown to clients: original name plus extension."""

        if not self.decoded:
            return self.filename
        return f"{self.original_name}{self.extension}"

    def encode(self) -> str:
        if self.timestamp is None:
            return self.filename
        name = encode_new(self.timestamp, self.original_name, self.extension)
        return mark_active(name) if self.active else name
