"""Document store backed by markdown files under a root directory."""

from __future__ import annotations

import asyncio
import logging
import os
import tempfile
from pathlib import Path

from readmark.errors import DocumentNotFoundError, ReadmarkError

logger = logging.getLogger(__name__)


class FileDocumentStore:
    """Reads and writes documents as files below ``root``.

    Writes are atomic: content goes to a temporary file in the target
    directory which then replaces the document with ``os.replace``.
    Blocking file I/O runs in a worker thread.
    """

    def __init__(self, root: Path, encoding: str = "utf-8") -> None:
        self.root = root.resolve()
        self.encoding = encoding

    def _resolve(self, path: str) -> Path:
        target = (self.root / path).resolve()
        if not target.is_relative_to(self.root):
            msg = f"path {path!r} escapes the document root {self.root}"
            raise ReadmarkError(msg)
        return target

    def _read_sync(self, target: Path) -> str:
        try:
            with target.open(encoding=self.encoding, newline="") as fh:
                return fh.read()
        except FileNotFoundError:
            msg = f"no document at {target}"
            raise DocumentNotFoundError(msg) from None

    def _write_sync(self, target: Path, content: str) -> None:
        target.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            dir=target.parent, prefix=f".{target.name}.", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "w", encoding=self.encoding, newline="") as tmp:
                tmp.write(content)
            os.replace(tmp_name, target)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    async def read(self, path: str) -> str:
        target = self._resolve(path)
        return await asyncio.to_thread(self._read_sync, target)

    async def write(self, path: str, content: str) -> None:
        target = self._resolve(path)
        await asyncio.to_thread(self._write_sync, target, content)
        logger.info("Wrote %s (%d chars)", path, len(content))

    async def exists(self, path: str) -> bool:
        target = self._resolve(path)
        return await asyncio.to_thread(target.is_file)

    async def list_paths(self) -> list[str]:
        def _scan() -> list[str]:
            return sorted(
                p.relative_to(self.root).as_posix()
                for p in self.root.rglob("*.md")
                if p.is_file()
            )

        return await asyncio.to_thread(_scan)
