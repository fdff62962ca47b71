"""Wiring from settings to the persistence stores."""

from __future__ import annotations

from dataclasses import dataclass

from contentflow.core.settings import StoreSettings
from contentflow_persist import ContentStore, DocumentStore, ImageStore


@dataclass(slots=True)
class Stores:
    content: ContentStore
    images: ImageStore
    documents: DocumentStore

    def ensure_directories(self) -> None:
        self.content.ensure_directories()
        self.images.ensure_directories()
        self.documents.ensure_directories()


def build_stores(settings: StoreSettings) -> Stores:
    """Instantiate every store against the configured data root."""

    root = settings.data_root
    return Stores(
        content=ContentStore(
            root,
            modules=settings.modules,
            file_limit=settings.file_limit,
            spreadsheet_extensions=settings.spreadsheet_extensions,
        ),
        images=ImageStore(root),
        documents=DocumentStore(root),
    )
