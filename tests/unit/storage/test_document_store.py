"""Tests for the document stores and the store factory."""

from __future__ import annotations

from pathlib import Path

import pytest

from readmark.config import Settings, StorageConfig
from readmark.errors import DocumentNotFoundError, ReadmarkError
from readmark.storage import (
    FileDocumentStore,
    MemoryDocumentStore,
    get_document_store,
)


class TestMemoryDocumentStore:
    @pytest.mark.asyncio
    async def test_read_missing(self) -> None:
        """Reading an unknown path raises DocumentNotFoundError."""
        store = MemoryDocumentStore()
        with pytest.raises(DocumentNotFoundError):
            await store.read("nope.md")

    @pytest.mark.asyncio
    async def test_write_then_read(self) -> None:
        """Writes replace the document and are recorded."""
        store = MemoryDocumentStore({"a.md": "old"})
        await store.write("a.md", "new")
        assert await store.read("a.md") == "new"
        assert store.writes == [("a.md", "new")]

    @pytest.mark.asyncio
    async def test_list_paths_markdown_only(self) -> None:
        """Only markdown documents are listed, sorted."""
        store = MemoryDocumentStore({"b.md": "", "a.md": "", "c.txt": ""})
        assert await store.list_paths() == ["a.md", "b.md"]
        assert await store.exists("c.txt")
        assert not await store.exists("d.md")


class TestFileDocumentStore:
    @pytest.mark.asyncio
    async def test_round_trip(self, tmp_path: Path) -> None:
        """Written documents read back exactly, folders created as needed."""
        store = FileDocumentStore(tmp_path)
        content = "# Title\r\nline two\n"
        await store.write("sub/dir/note.md", content)
        assert await store.read("sub/dir/note.md") == content
        assert await store.exists("sub/dir/note.md")

    @pytest.mark.asyncio
    async def test_write_replaces_atomically(self, tmp_path: Path) -> None:
        """Replacing a document leaves no temporary files behind."""
        store = FileDocumentStore(tmp_path)
        await store.write("note.md", "first")
        await store.write("note.md", "second")
        assert (tmp_path / "note.md").read_text(encoding="utf-8") == "second"
        assert [p.name for p in tmp_path.iterdir()] == ["note.md"]

    @pytest.mark.asyncio
    async def test_read_missing(self, tmp_path: Path) -> None:
        """A missing file raises DocumentNotFoundError."""
        store = FileDocumentStore(tmp_path)
        with pytest.raises(DocumentNotFoundError):
            await store.read("missing.md")

    @pytest.mark.asyncio
    async def test_path_escape_rejected(self, tmp_path: Path) -> None:
        """Paths leaving the root are refused."""
        store = FileDocumentStore(tmp_path / "root")
        with pytest.raises(ReadmarkError, match="escapes the document root"):
            await store.write("../outside.md", "x")
        assert not (tmp_path / "outside.md").exists()

    @pytest.mark.asyncio
    async def test_list_paths(self, tmp_path: Path) -> None:
        """Markdown files are listed relative to the root with POSIX separators."""
        store = FileDocumentStore(tmp_path)
        await store.write("b/two.md", "")
        await store.write("one.md", "")
        (tmp_path / "notes.txt").write_text("", encoding="utf-8")
        assert await store.list_paths() == ["b/two.md", "one.md"]


class TestGetDocumentStore:
    def test_uses_storage_settings(self, tmp_path: Path, clean_env: None) -> None:
        """The factory builds a file store from STORAGE settings."""
        settings = Settings(  # type: ignore[call-arg]
            _env_file=None,
            storage=StorageConfig(root=tmp_path, encoding="latin-1"),
        )
        store = get_document_store(settings)
        assert isinstance(store, FileDocumentStore)
        assert store.root == tmp_path.resolve()
        assert store.encoding == "latin-1"
