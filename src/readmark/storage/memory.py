"""In-memory document store for tests and demos."""

from __future__ import annotations

from readmark.errors import DocumentNotFoundError


class MemoryDocumentStore:
    """Keeps documents in a dict keyed by path.

    Each ``write`` is recorded in ``writes`` so tests can assert how many
    times, and with what content, a document was replaced.
    """

    def __init__(self, documents: dict[str, str] | None = None) -> None:
        self._documents: dict[str, str] = dict(documents or {})
        self.writes: list[tuple[str, str]] = []

    async def read(self, path: str) -> str:
        try:
            return self._documents[path]
        except KeyError:
            msg = f"no document at {path!r}"
            raise DocumentNotFoundError(msg) from None

    async def write(self, path: str, content: str) -> None:
        self._documents[path] = content
        self.writes.append((path, content))

    async def exists(self, path: str) -> bool:
        return path in self._documents

    async def list_paths(self) -> list[str]:
        return sorted(path for path in self._documents if path.endswith(".md"))
