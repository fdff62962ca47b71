"""
Persistence facade exposing directory-backed content stores.
"""

from .schemas.entries import ContentEntry, EntryStatus, MediaEntry
from .stores.base_store import (
    PersistHealth,
    StoreError,
    StoreInitializationError,
    StoreLockedError,
    StoreValidationError,
    UnknownModuleError,
)
from .stores.content_store import ActivationResult, ContentStore, init_content_store
from .stores.media_store import DocumentStore, ImageStore, MediaStore

__all__ = [
    "ActivationResult",
    "ContentEntry",
    "ContentStore",
    "DocumentStore",
    "EntryStatus",
    "ImageStore",
    "MediaEntry",
    "MediaStore",
    "PersistHealth",
    "StoreError",
    "StoreInitializationError",
    "StoreLockedError",
    "StoreValidationError",
    "UnknownModuleError",
    "init_content_store",
]
