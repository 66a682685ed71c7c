"""Document storage for readmark.

Usage:
    from readmark.storage import get_document_store

    store = get_document_store()
    raw = await store.read("notes/reading.md")
"""

from readmark.storage.factory import get_document_store
from readmark.storage.filesystem import FileDocumentStore
from readmark.storage.memory import MemoryDocumentStore
from readmark.storage.protocol import DocumentStore

__all__ = [
    "DocumentStore",
    "FileDocumentStore",
    "MemoryDocumentStore",
    "get_document_store",
]
