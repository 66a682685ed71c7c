"""Protocol defining the document store interface.

Both FileDocumentStore and MemoryDocumentStore implement this protocol,
allowing them to be used interchangeably.
"""

from __future__ import annotations

from typing import Protocol


class DocumentStore(Protocol):
    """Protocol for markdown document storage.

    Paths are POSIX-style and relative to the store.  Writes replace the
    whole document.
    """

    async def read(self, path: str) -> str:
        """Return the full text of the document at *path*.

        Raises:
            DocumentNotFoundError: If there is no document at *path*.
        """
        ...

    async def write(self, path: str, content: str) -> None:
        """Replace (or create) the document at *path* with *content*."""
        ...

    async def exists(self, path: str) -> bool:
        """Return whether a document exists at *path*."""
        ...

    async def list_paths(self) -> list[str]:
        """Return the paths of every markdown document, sorted."""
        ...
