"""Derive a selection context from the rendered HTML a reader selected in.

The host view knows which element the selection sits in; a caller that only
has the rendered HTML and a character offset can reconstruct the same
information here.  Rendered text follows the browser's visible text closely
enough for anchoring: block elements and ``<br>`` start new lines, whitespace
runs collapse to one space (except inside ``<pre>``), and indentation between
block tags is dropped.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Any

from selectolax.lexbor import LexborHTMLParser

from readmark.anchoring import SelectionContext

logger = logging.getLogger(__name__)

# Elements whose whitespace-only text children are formatting indentation
_BLOCK_TAGS = frozenset(
    (
        "table",
        "tbody",
        "thead",
        "tfoot",
        "tr",
        "ul",
        "ol",
        "li",
        "dl",
        "div",
        "section",
        "article",
        "blockquote",
    )
)

# Elements that can serve as the context block of a selection
CONTEXT_TAGS = frozenset(
    ("p", "li", "h1", "h2", "h3", "h4", "h5", "h6", "div", "blockquote", "pre")
)

_STRIP_TAGS = frozenset(("script", "style", "noscript", "template"))

# Elements rendered on their own lines; a line break separates them from
# the text before and after
_LINE_BREAK_TAGS = (
    _BLOCK_TAGS
    | CONTEXT_TAGS
    | frozenset(
        ("hr", "dt", "dd", "figure", "figcaption", "header", "footer", "main")
    )
)

_WHITESPACE_RUN = re.compile(r"[\s\u00a0]+")


@dataclass(slots=True)
class _Block:
    """A context element and the rendered range it covers."""

    tag: str
    start: int
    depth: int
    end: int = -1
    text: str = ""


def _render(html: str) -> tuple[str, list[_Block]]:
    """Walk the DOM once, returning rendered text and context blocks.

    Blocks are listed in document (opening tag) order.
    """
    if not html:
        return "", []

    tree = LexborHTMLParser(html)
    body = tree.body
    root = body if body else tree.root
    if root is None:
        return "", []

    chars: list[str] = []
    blocks: list[_Block] = []
    # Set when a line-break element closes; the break is written only once
    # more text follows, so the result never ends in one
    pending_break = False

    def _line_break() -> None:
        nonlocal pending_break
        pending_break = False
        if chars and chars[-1] != "\n":
            chars.append("\n")

    def _walk(node: Any, depth: int, in_pre: bool) -> None:
        nonlocal pending_break
        tag = node.tag

        # Text node: selectolax uses "-text" as the tag
        if tag == "-text":
            text = node.text_content
            if not text:
                return
            if not in_pre:
                parent = node.parent
                if (
                    parent is not None
                    and parent.tag in _BLOCK_TAGS
                    and _WHITESPACE_RUN.fullmatch(text)
                ):
                    return
                text = _WHITESPACE_RUN.sub(" ", text)
                if pending_break or not chars or chars[-1] == "\n":
                    text = text.lstrip(" ")
                    if not text:
                        return
            if pending_break:
                _line_break()
            chars.extend(text)
            return

        if tag in _STRIP_TAGS:
            return

        if tag == "br":
            if pending_break:
                _line_break()
            chars.append("\n")
            return

        breaks_line = tag in _LINE_BREAK_TAGS
        if breaks_line:
            _line_break()

        block = None
        if tag in CONTEXT_TAGS:
            block = _Block(tag=tag, start=len(chars), depth=depth)
            blocks.append(block)

        child = node.child
        while child is not None:
            _walk(child, depth + 1, in_pre or tag == "pre")
            child = child.next

        if block is not None:
            block.end = len(chars)
            block.text = "".join(chars[block.start : block.end]).strip()
        if breaks_line:
            pending_break = True

    child = root.child
    while child is not None:
        _walk(child, 0, False)
        child = child.next

    return "".join(chars), blocks


def extract_rendered_text(html: str) -> str:
    """Return the visible text of *html* as a reader would select it."""
    text, _blocks = _render(html)
    return text


def describe_selection(html: str, snippet: str, start: int) -> SelectionContext:
    """Build the selection context for *snippet* selected at rendered *start*.

    The context block is the innermost context element covering the whole
    selected range ``[start, start + len(snippet))``.  Its occurrence index
    counts earlier elements with the same tag and identical trimmed text.

    Args:
        html: The rendered document.
        snippet: The selected text.
        start: Offset of the selection in ``extract_rendered_text(html)``.

    Returns:
        The context, with ``context_text=None`` and index 0 when the
        selection is not inside any context element.
    """
    _text, blocks = _render(html)
    end = start + len(snippet)

    enclosing = None
    for block in blocks:
        if block.start <= start and end <= block.end and block.end > block.start:
            if enclosing is None or block.depth > enclosing.depth:
                enclosing = block

    if enclosing is None:
        logger.debug("Selection at %d is outside any context block", start)
        return SelectionContext(snippet=snippet)

    occurrence = 0
    for block in blocks:
        if block is enclosing:
            break
        if block.tag == enclosing.tag and block.text == enclosing.text:
            occurrence += 1

    logger.debug(
        "Selection at %d sits in <%s> occurrence %d",
        start,
        enclosing.tag,
        occurrence,
    )
    return SelectionContext(
        snippet=snippet,
        context_text=enclosing.text,
        occurrence_index=occurrence,
    )
