"""Service layer wiring settings to the persistence stores."""

from __future__ import annotations

from .stores import Stores, build_stores
from .upload import UploadReceipt, UploadService

__all__ = ["Stores", "build_stores", "UploadReceipt", "UploadService"]
