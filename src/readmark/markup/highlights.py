"""Find existing highlights in markdown source.

Two forms are recognised: markdown ``==text==`` and HTML
``<mark ...>text</mark>`` (the latter carries palette colours).
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Literal

HighlightKind = Literal["markdown", "html"]

# Single-line and non-empty; setext underlines (``=====``) are not highlights.
MARKDOWN_HIGHLIGHT = re.compile(r"==(?!=)([^\n]+?)(?<!=)==")
HTML_HIGHLIGHT = re.compile(r"<mark\b[^>]*>(.*?)</mark>", re.DOTALL | re.IGNORECASE)
_BACKGROUND = re.compile(r"background(?:-color)?:\s*([^;>\"']+)", re.IGNORECASE)


@dataclass(frozen=True, slots=True)
class HighlightEntry:
    """One highlight found in the source.

    ``start``/``end`` cover the whole construct, delimiters included.
    """

    text: str
    kind: HighlightKind
    start: int
    end: int
    context: str
    color: str | None = None


def _line_context(raw: str, start: int, end: int) -> str:
    line_start = raw.rfind("\n", 0, start) + 1
    line_end = raw.find("\n", end)
    if line_end == -1:
        line_end = len(raw)
    return raw[line_start:line_end].strip()


def extract_highlights(raw: str) -> list[HighlightEntry]:
    """Return every highlight in *raw*, ordered by position."""
    entries: list[HighlightEntry] = []

    for match in MARKDOWN_HIGHLIGHT.finditer(raw):
        entries.append(
            HighlightEntry(
                text=match.group(1).strip(),
                kind="markdown",
                start=match.start(),
                end=match.end(),
                context=_line_context(raw, match.start(), match.end()),
            )
        )

    for match in HTML_HIGHLIGHT.finditer(raw):
        opening_tag = match.group(0)[: match.start(1) - match.start()]
        color_match = _BACKGROUND.search(opening_tag)
        entries.append(
            HighlightEntry(
                text=match.group(1).strip(),
                kind="html",
                start=match.start(),
                end=match.end(),
                context=_line_context(raw, match.start(), match.end()),
                color=color_match.group(1).strip() if color_match else None,
            )
        )

    entries.sort(key=lambda entry: entry.start)
    return entries
