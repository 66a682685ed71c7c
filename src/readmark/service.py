"""Highlight service: locate a selection in a stored document and edit it.

Each edit is one read-locate-rewrite-write cycle against the document
store.  Cycles on the same path are serialised within the process; edits
made by other processes between the read and the write are not detected.
"""

from __future__ import annotations

import asyncio
import logging
import weakref
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime
from pathlib import PurePosixPath
from typing import TYPE_CHECKING

from readmark.anchoring import SelectionContext, Span, locate
from readmark.config import HighlightConfig, TagConfig
from readmark.errors import EmptySelectionError, NoHighlightsError, PaletteIndexError
from readmark.export import export_path_for, render_highlight_export
from readmark.markup import EditRequest, apply_modification, extract_highlights
from readmark.tags import (
    TagMatches,
    collect_document_tags,
    folder_tag,
    frontmatter_tags,
    match_tags,
    suggest_tags,
)

if TYPE_CHECKING:
    from readmark.markup import HighlightEntry
    from readmark.storage import DocumentStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class EditOutcome:
    """Result of an edit request.

    Attributes:
        located: Whether the selection was found in the source.
        span: The located raw span (before expansion over delimiters).
        content: The document as written, or ``None`` if nothing was written.
    """

    located: bool
    span: Span | None = None
    content: str | None = None


class HighlightService:
    """Applies highlight edits to documents held in a DocumentStore."""

    def __init__(
        self,
        store: DocumentStore,
        config: HighlightConfig,
        tag_config: TagConfig | None = None,
    ) -> None:
        self.store = store
        self.config = config
        self.tag_config = tag_config or TagConfig()
        # Entries vanish once no edit of the path holds or awaits its lock
        self._locks: weakref.WeakValueDictionary[str, asyncio.Lock] = (
            weakref.WeakValueDictionary()
        )

    def _lock_for(self, path: str) -> asyncio.Lock:
        lock = self._locks.get(path)
        if lock is None:
            lock = self._locks[path] = asyncio.Lock()
        return lock

    # ------------------------------------------------------------------
    # Locating and editing
    # ------------------------------------------------------------------

    async def locate(self, path: str, selection: SelectionContext) -> Span | None:
        """Return the raw span of *selection* in the document at *path*."""
        raw = await self.store.read(path)
        return locate(
            raw,
            selection.snippet,
            selection.context_text,
            selection.occurrence_index,
        )

    async def _edit(
        self, path: str, selection: SelectionContext, request: EditRequest
    ) -> EditOutcome:
        if not selection.snippet.strip():
            msg = "no text selected"
            raise EmptySelectionError(msg)

        lock = self._lock_for(path)
        async with lock:
            raw = await self.store.read(path)
            span = locate(
                raw,
                selection.snippet,
                selection.context_text,
                selection.occurrence_index,
            )
            if span is None:
                logger.info("Could not locate selection in %s", path)
                return EditOutcome(located=False)

            content = apply_modification(
                raw, span.start, span.end, request, self.config
            )
            await self.store.write(path, content)

        logger.info(
            "%s applied to %s at [%d, %d)", request.mode, path, span.start, span.end
        )
        return EditOutcome(located=True, span=span, content=content)

    async def highlight(
        self, path: str, selection: SelectionContext
    ) -> EditOutcome:
        """Highlight the selection."""
        return await self._edit(path, selection, EditRequest(mode="highlight"))

    async def tag(
        self, path: str, selection: SelectionContext, tags: Iterable[str]
    ) -> EditOutcome:
        """Highlight the selection and write *tags* before it."""
        tag_names = tuple(tags)
        if not tag_names:
            msg = "tag requires at least one tag"
            raise ValueError(msg)
        request = EditRequest(mode="tag", tags=tag_names)
        return await self._edit(path, selection, request)

    async def color(
        self, path: str, selection: SelectionContext, index: int
    ) -> EditOutcome:
        """Highlight the selection with palette colour number *index*."""
        palette = self.config.palette
        if not 0 <= index < len(palette):
            msg = f"colour index {index} outside palette of {len(palette)}"
            raise PaletteIndexError(msg)
        request = EditRequest(mode="color", color=palette[index].color)
        return await self._edit(path, selection, request)

    async def annotate(
        self, path: str, selection: SelectionContext, comment: str
    ) -> EditOutcome:
        """Highlight the selection and attach *comment* as a footnote."""
        request = EditRequest(mode="annotate", comment=comment)
        return await self._edit(path, selection, request)

    async def remove(self, path: str, selection: SelectionContext) -> EditOutcome:
        """Remove highlight markup from the selection's lines."""
        return await self._edit(path, selection, EditRequest(mode="remove"))

    # ------------------------------------------------------------------
    # Highlights and export
    # ------------------------------------------------------------------

    async def list_highlights(self, path: str) -> list[HighlightEntry]:
        """Return the highlights of the document at *path* in order."""
        return extract_highlights(await self.store.read(path))

    async def export_highlights(self, path: str, now: datetime | None = None) -> str:
        """Write a highlights summary next to *path* and return its path.

        Raises:
            NoHighlightsError: If the document has no highlights.
        """
        now = now or datetime.now()
        entries = await self.list_highlights(path)
        if not entries:
            msg = f"no highlights found in {path}"
            raise NoHighlightsError(msg)

        existing = set(await self.store.list_paths())
        target = export_path_for(path, existing, now)
        source = PurePosixPath(path)
        content = render_highlight_export(
            entries,
            title=source.stem,
            source=str(source),
            exported_at=now,
        )
        await self.store.write(target, content)
        logger.info(
            "Exported %d highlight(s) from %s to %s", len(entries), path, target
        )
        return target

    # ------------------------------------------------------------------
    # Tags
    # ------------------------------------------------------------------

    async def known_tags(self) -> list[str]:
        """Return every tag used across the store, in first-seen order."""
        tags: dict[str, None] = {}
        for doc_path in await self.store.list_paths():
            for tag in collect_document_tags(await self.store.read(doc_path)):
                tags.setdefault(tag, None)
        return list(tags)

    async def suggest_tags(self, path: str) -> list[str]:
        """Suggest tags for a selection in *path*.

        Without smart suggestions only the recent tags are offered.
        """
        settings = self.tag_config
        if not settings.smart_suggestions:
            return settings.recent_tags[: settings.max_suggestions]
        raw = await self.store.read(path)
        return suggest_tags(
            settings.recent_tags,
            folder_tag(path),
            frontmatter_tags(raw),
            limit=settings.max_suggestions,
        )

    async def match_tags(self, query: str) -> TagMatches:
        """Filter the store's tags by *query*."""
        return match_tags(
            await self.known_tags(), query, limit=self.tag_config.max_matches
        )
