"""Selection-to-source anchoring: stripped projection and candidate ranking."""

from readmark.anchoring.locator import (
    EXACT_LINE_SCORE,
    VALIDITY_RATIO,
    build_search_pattern,
    collapse_whitespace,
    filter_valid_candidates,
    find_candidates,
    find_candidates_stripped,
    locate,
    score_candidates,
    similarity,
)
from readmark.anchoring.models import Candidate, SelectionContext, Span, StrippedText
from readmark.anchoring.stripper import RULES, MarkupRule, strip_markup

__all__ = [
    "EXACT_LINE_SCORE",
    "RULES",
    "VALIDITY_RATIO",
    "Candidate",
    "MarkupRule",
    "SelectionContext",
    "Span",
    "StrippedText",
    "build_search_pattern",
    "collapse_whitespace",
    "filter_valid_candidates",
    "find_candidates",
    "find_candidates_stripped",
    "locate",
    "score_candidates",
    "similarity",
    "strip_markup",
]
