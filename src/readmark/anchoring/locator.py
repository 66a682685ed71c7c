"""Locate a rendered-text selection in raw markdown source.

"Block anchoring" with ordinal ranking:

1. Find every occurrence of the snippet in the source: verbatim first, then
   in the stripped projection when the selection crosses inline markup.
2. Score each occurrence's enclosing source line against the rendered text of
   the block the reader selected in.
3. Keep the candidates scoring within ``VALIDITY_RATIO`` of the best one.
4. Pick the ``occurrence_index``-th of those, falling back to the first.

The host counts occurrences over rendered blocks with identical text; the
locator counts over source lines that score alike.  The two orders agree for
the common case of repeated, structurally identical rows, which is what the
relative threshold is tuned for.
"""

# Pattern: Functional Core (pure functions of document, snippet, context, index)

from __future__ import annotations

import logging
import re

from readmark.anchoring.models import Candidate, Span
from readmark.anchoring.stripper import strip_markup

logger = logging.getLogger(__name__)

# Candidates scoring below best * VALIDITY_RATIO are not counted as
# occurrences of the selected block.
VALIDITY_RATIO = 0.85

# Score of a source line identical to the context; dominates any
# Jaccard/length score so the threshold keeps only exact lines.
EXACT_LINE_SCORE = 1000.0

_JACCARD_WEIGHT = 0.7
_LENGTH_WEIGHT = 0.3
_LENGTH_PENALTY = 0.1

_WHITESPACE_RUN = re.compile(r"\s+")

# Gap between two selected words.  Rendered blocks sit on separate lines, so a
# gap holding a line break may also skip the next line's blockquote markers
# and list, checkbox or heading prefix.
_WORD_GAP = (
    r"(?:\s*\n[ \t]*(?:>[ \t]*)*"
    r"(?:[-*+][ \t]+\[[ xX]\][ \t]+|#{1,6}[ \t]+|[-*+][ \t]+|\d+[.)][ \t]+)?"
    r"|\s+)"
)


def collapse_whitespace(text: str) -> str:
    """Collapse whitespace runs to single spaces and trim."""
    return _WHITESPACE_RUN.sub(" ", text).strip()


def build_search_pattern(snippet: str) -> re.Pattern[str] | None:
    """Compile a whitespace-tolerant literal pattern for *snippet*.

    Each whitespace run in the selection matches one or more whitespace
    characters of any kind in the source, so a rendered space matches a
    newline, several spaces or a markdown hard break.  A gap crossing a
    line break also skips the structural prefix of the next line, so a
    selection spanning two list items matches the source rows.

    Returns:
        The pattern, or ``None`` for a snippet that is empty after trimming.
    """
    words = snippet.split()
    if not words:
        return None
    return re.compile(_WORD_GAP.join(re.escape(word) for word in words))


def find_candidates(text: str, snippet: str) -> list[Candidate]:
    """Find every verbatim (modulo whitespace) occurrence of *snippet*."""
    pattern = build_search_pattern(snippet)
    if pattern is None:
        return []
    return [
        Candidate(start=m.start(), end=m.end(), text=m.group())
        for m in pattern.finditer(text)
    ]


def find_candidates_stripped(raw: str, snippet: str) -> list[Candidate]:
    """Find *snippet* in the visible-text projection of *raw*.

    Matches are translated back to raw offsets, so ``candidate.text`` is the
    raw source slice, markup included.
    """
    pattern = build_search_pattern(snippet)
    if pattern is None:
        return []

    stripped = strip_markup(raw)
    candidates: list[Candidate] = []
    for match in pattern.finditer(stripped.text):
        span = stripped.raw_span(match.start(), match.end())
        candidates.append(
            Candidate(start=span.start, end=span.end, text=span.slice(raw))
        )
    return candidates


def similarity(source: str, target: str) -> float:
    """Score how alike a source line and the rendered context are.

    Identical strings score ``EXACT_LINE_SCORE``.  Otherwise the score is a
    weighted sum of the Jaccard index of the whitespace-separated token sets
    and a term that decays with the length difference.
    """
    if source == target:
        return EXACT_LINE_SCORE

    source_tokens = set(source.split())
    target_tokens = set(target.split())
    union = len(source_tokens | target_tokens)
    jaccard = len(source_tokens & target_tokens) / union if union else 0.0

    length_term = 1 / (1 + _LENGTH_PENALTY * abs(len(source) - len(target)))

    return _JACCARD_WEIGHT * jaccard + _LENGTH_WEIGHT * length_term


def enclosing_lines(raw: str, start: int, end: int) -> str:
    """Return the source line(s) touched by ``[start, end)``, newlines excluded."""
    line_start = raw.rfind("\n", 0, start) + 1
    line_end = raw.find("\n", end)
    if line_end == -1:
        line_end = len(raw)
    return raw[line_start:line_end]


def score_candidates(
    raw: str, candidates: list[Candidate], context_text: str
) -> list[Candidate]:
    """Attach a context-similarity score to each candidate."""
    clean_context = collapse_whitespace(context_text)
    scored: list[Candidate] = []
    for cand in candidates:
        source_block = collapse_whitespace(enclosing_lines(raw, cand.start, cand.end))
        scored.append(
            Candidate(
                start=cand.start,
                end=cand.end,
                text=cand.text,
                score=similarity(source_block, clean_context),
            )
        )
    return scored


def filter_valid_candidates(scored: list[Candidate]) -> list[Candidate]:
    """Keep candidates scoring at least ``VALIDITY_RATIO`` of the best score.

    Source order is preserved so the result can be indexed by occurrence.
    """
    if not scored:
        return []
    best = max(cand.score or 0.0 for cand in scored)
    threshold = best * VALIDITY_RATIO
    return [cand for cand in scored if (cand.score or 0.0) >= threshold]


def locate(
    raw: str,
    snippet: str,
    context_text: str | None = None,
    occurrence_index: int = 0,
) -> Span | None:
    """Find the raw-source span of a rendered selection.

    Args:
        raw: Full markdown source, freshly read.
        snippet: The selected rendered text.
        context_text: Rendered text of the smallest block enclosing the
            selection, used to tell duplicate snippets apart.
        occurrence_index: Rank of that block among rendered blocks with the
            same tag and identical text.

    Returns:
        The span of the chosen occurrence, or ``None`` if the snippet occurs
        neither verbatim nor in the stripped projection.  An out-of-range
        ``occurrence_index`` falls back to the best-ranked occurrence.
    """
    candidates = find_candidates(raw, snippet)
    if not candidates:
        candidates = find_candidates_stripped(raw, snippet)
        if candidates:
            logger.debug(
                "Located %d candidate(s) via stripped projection", len(candidates)
            )

    if not candidates:
        logger.debug("Snippet not found: %.40r", snippet)
        return None

    if context_text:
        valid = filter_valid_candidates(score_candidates(raw, candidates, context_text))
        logger.debug(
            "%d of %d candidate(s) match the context; occurrence %d requested",
            len(valid),
            len(candidates),
            occurrence_index,
        )
        if 0 <= occurrence_index < len(valid):
            return valid[occurrence_index].span
        if valid:
            return valid[0].span

    return candidates[0].span
