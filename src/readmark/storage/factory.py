"""Document store factory.

Builds the configured store from settings.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from readmark.config import get_settings
from readmark.storage.filesystem import FileDocumentStore

if TYPE_CHECKING:
    from readmark.config import Settings
    from readmark.storage.protocol import DocumentStore


def get_document_store(settings: Settings | None = None) -> DocumentStore:
    """Return a FileDocumentStore rooted at ``STORAGE__ROOT``.

    Args:
        settings: Settings to use; defaults to ``get_settings()``.

    Returns:
        A store implementing DocumentStore.
    """
    settings = settings or get_settings()
    return FileDocumentStore(
        root=settings.storage.root,
        encoding=settings.storage.encoding,
    )
