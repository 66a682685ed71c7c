"""Rewrite located source text with highlight, tag or annotation markup.

The located span is expanded until it splits no inline construct, split into
paragraphs and lines, and each non-blank line is re-wrapped on its own so
markup never crosses a line break.  Structural prefixes (headings, bullets,
numbers, blockquotes, checkboxes) stay outside the wrap; tag tokens go
between the prefix and the wrapped content.
"""

# Pattern: Functional Core (text in, text out; configuration passed explicitly)

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import TYPE_CHECKING, Literal

from readmark.markup.expansion import (
    EMPHASIS_CONSTRUCTS,
    expand_span,
    find_constructs,
    widen_to_highlights,
)
from readmark.tags import format_tags

if TYPE_CHECKING:
    from readmark.config import HighlightConfig

logger = logging.getLogger(__name__)

EDIT_MODES = ("highlight", "tag", "color", "annotate", "remove")
EditMode = Literal["highlight", "tag", "color", "annotate", "remove"]

_PARAGRAPH_BREAK = re.compile(r"(\n(?:[ \t]*\n)+)")

# Indentation, then blockquote markers, then at most one block prefix.
# Checkboxes come before bullets so ``- [ ] `` is kept whole.
_LINE_PREFIX = re.compile(
    r"(?P<indent>[ \t]*)"
    r"(?P<prefix>(?:>[ \t]?)*"
    r"(?:[-*+][ \t]+\[[ xX]\][ \t]+|#{1,6}[ \t]+|[-*+][ \t]+|\d+[.)][ \t]+)?)"
)

_HIGHLIGHT_MARKERS = re.compile(r"==|<mark\b[^>]*>|</mark>", re.IGNORECASE)

_FOOTNOTE_ID = re.compile(r"\[\^([^\]\s]+)\]")


@dataclass(frozen=True, slots=True)
class EditRequest:
    """What to do with a located span.

    Attributes:
        mode: One of ``EDIT_MODES``.
        tags: Tag names written before the content (``tag`` mode; other
            highlighting modes accept them too).
        color: CSS colour for ``color`` mode.
        comment: Footnote text for ``annotate`` mode.
    """

    mode: EditMode
    tags: tuple[str, ...] = ()
    color: str | None = None
    comment: str | None = None

    def __post_init__(self) -> None:
        if self.mode not in EDIT_MODES:
            msg = f"unknown edit mode {self.mode!r}; expected one of {EDIT_MODES}"
            raise ValueError(msg)
        if self.mode == "color" and not self.color:
            msg = "color mode requires a colour"
            raise ValueError(msg)
        if self.mode == "annotate" and not (self.comment and self.comment.strip()):
            msg = "annotate mode requires a non-empty comment"
            raise ValueError(msg)


def strip_highlight_markers(text: str) -> str:
    """Remove ``==`` and ``<mark>`` tags, keeping everything else."""
    return _HIGHLIGHT_MARKERS.sub("", text)


def strip_emphasis_markers(text: str) -> str:
    """Remove the delimiters of bold/italic pairs, keeping their content.

    Only paired delimiters go; a literal ``*``, snake_case and delimiters
    inside code or maths are kept.
    """
    cuts: list[tuple[int, int]] = []
    for construct in find_constructs(text):
        if construct.name in EMPHASIS_CONSTRUCTS and construct.content is not None:
            cuts.append((construct.start, construct.content[0]))
            cuts.append((construct.content[1], construct.end))
    if not cuts:
        return text

    pieces: list[str] = []
    pos = 0
    for cut_start, cut_end in sorted(cuts):
        pieces.append(text[pos:cut_start])
        pos = cut_end
    pieces.append(text[pos:])
    return "".join(pieces)


def _wrappers(request: EditRequest, config: HighlightConfig) -> tuple[str, str]:
    if request.mode == "color":
        return f'<mark style="background: {request.color};">', "</mark>"
    if config.style == "html":
        return "<mark>", "</mark>"
    return "==", "=="


def rewrite_line(line: str, request: EditRequest, config: HighlightConfig) -> str:
    """Rewrite one source line according to *request*.

    Blank lines and lines with nothing after their structural prefix come
    back with existing highlight markers removed but otherwise unchanged.
    """
    if not line.strip():
        return line
    if request.mode == "remove":
        return strip_highlight_markers(line)

    prefix_match = _LINE_PREFIX.match(line)
    assert prefix_match is not None  # every group is optional
    indent = prefix_match.group("indent")
    prefix = prefix_match.group("prefix")

    content = strip_emphasis_markers(
        strip_highlight_markers(line[prefix_match.end() :])
    )
    body = content.rstrip()
    trailing = content[len(body) :]
    if not body:
        return f"{indent}{prefix}{content}"

    tag_tokens = format_tags(request.tags, config.tag_prefix)
    tag_str = f"{tag_tokens} " if tag_tokens else ""
    opener, closer = _wrappers(request, config)
    return f"{indent}{prefix}{tag_str}{opener}{body}{closer}{trailing}"


def rewrite_block(text: str, request: EditRequest, config: HighlightConfig) -> str:
    """Rewrite every line of *text*, preserving paragraph separators."""
    pieces = _PARAGRAPH_BREAK.split(text)
    # Odd indices are the captured blank-line separators
    for i in range(0, len(pieces), 2):
        pieces[i] = "\n".join(
            rewrite_line(line, request, config) for line in pieces[i].split("\n")
        )
    return "".join(pieces)


def next_footnote_id(raw: str, prefix: str = "") -> str:
    """Return the smallest unused numeric footnote id (with *prefix*)."""
    used = {match.group(1) for match in _FOOTNOTE_ID.finditer(raw)}
    number = 1
    while f"{prefix}{number}" in used:
        number += 1
    return f"{prefix}{number}"


def _append_footnote(doc: str, footnote_id: str, comment: str) -> str:
    """Append a footnote definition, separated by a blank line, to *doc*."""
    comment = " ".join(comment.split())
    body = doc.rstrip("\n")
    return f"{body}\n\n[^{footnote_id}]: {comment}\n"


def apply_modification(
    raw: str,
    start: int,
    end: int,
    request: EditRequest,
    config: HighlightConfig,
) -> str:
    """Apply *request* to ``raw[start:end]`` and return the new document.

    Args:
        raw: Full document source the span was located in.
        start: Span start (raw offset).
        end: Span end (raw offset, exclusive).
        request: The edit to perform.
        config: Highlight markup settings.

    Returns:
        The full replacement document.
    """
    start, end = expand_span(raw, start, end)
    if request.mode == "remove":
        start, end = widen_to_highlights(raw, start, end)

    block = rewrite_block(raw[start:end], request, config)
    footnote_id = None
    if request.mode == "annotate":
        footnote_id = next_footnote_id(raw, config.footnote_prefix)
        body = block.rstrip()
        block = f"{body}[^{footnote_id}]{block[len(body) :]}"

    logger.debug(
        "Applied %s to [%d, %d): %d -> %d chars",
        request.mode,
        start,
        end,
        end - start,
        len(block),
    )
    doc = f"{raw[:start]}{block}{raw[end:]}"
    if footnote_id is not None:
        doc = _append_footnote(doc, footnote_id, request.comment or "")
    return doc
