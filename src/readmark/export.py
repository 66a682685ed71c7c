"""Summarise a document's highlights as a standalone markdown note."""

from __future__ import annotations

from collections.abc import Container, Sequence
from datetime import datetime
from pathlib import PurePosixPath

from readmark.markup.highlights import HighlightEntry

EXPORT_SUFFIX = " - Highlights"


def preview(text: str, limit: int = 80) -> str:
    """Shorten *text* to one line of at most *limit* characters."""
    flat = " ".join(text.split())
    if len(flat) <= limit:
        return flat
    return flat[: limit - 3].rstrip() + "..."


def render_highlight_export(
    entries: Sequence[HighlightEntry],
    title: str,
    source: str,
    exported_at: datetime,
) -> str:
    """Render the export note for *entries*.

    Args:
        entries: Highlights in document order.
        title: Name of the source note (linked from the heading).
        source: Path of the source note.
        exported_at: Timestamp written into the header.

    Returns:
        Markdown text: a header block, the numbered highlights and a footer.
    """
    items = "\n\n".join(
        f"{number}. {entry.text}" for number, entry in enumerate(entries, start=1)
    )
    return (
        f"# Highlights from [[{title}]]\n"
        "\n"
        f"> Exported: {exported_at:%Y-%m-%d %H:%M}\n"
        f"> Source: [[{source}]]\n"
        f"> Total highlights: {len(entries)}\n"
        "\n"
        "---\n"
        "\n"
        f"{items}\n"
        "\n"
        "---\n"
        "\n"
        "*Exported by readmark*\n"
    )


def export_path_for(
    source_path: str, existing: Container[str], now: datetime
) -> str:
    """Choose where to write the export of *source_path*.

    ``<folder>/<stem> - Highlights.md`` is used unless it is already in
    *existing*, in which case a ``YYYYMMDD-HHMMSS`` timestamp is appended.
    """
    source = PurePosixPath(source_path)
    candidate = source.with_name(f"{source.stem}{EXPORT_SUFFIX}.md")
    if str(candidate) in existing:
        candidate = source.with_name(
            f"{source.stem}{EXPORT_SUFFIX} {now:%Y%m%d-%H%M%S}.md"
        )
    return str(candidate)
