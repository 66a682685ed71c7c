"""Source rewriting: span expansion, highlight discovery and line rewrites."""

from readmark.markup.expansion import (
    Construct,
    expand_span,
    find_constructs,
    widen_to_highlights,
)
from readmark.markup.highlights import (
    HTML_HIGHLIGHT,
    MARKDOWN_HIGHLIGHT,
    HighlightEntry,
    HighlightKind,
    extract_highlights,
)
from readmark.markup.rewriter import (
    EDIT_MODES,
    EditMode,
    EditRequest,
    apply_modification,
    next_footnote_id,
    rewrite_block,
    rewrite_line,
    strip_emphasis_markers,
    strip_highlight_markers,
)

__all__ = [
    "EDIT_MODES",
    "Construct",
    "HTML_HIGHLIGHT",
    "MARKDOWN_HIGHLIGHT",
    "EditMode",
    "EditRequest",
    "HighlightEntry",
    "HighlightKind",
    "apply_modification",
    "expand_span",
    "extract_highlights",
    "find_constructs",
    "next_footnote_id",
    "rewrite_block",
    "rewrite_line",
    "strip_emphasis_markers",
    "strip_highlight_markers",
    "widen_to_highlights",
]
