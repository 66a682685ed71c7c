"""Visible-text projection of markdown source with a map back to raw offsets.

A reader selecting text in the rendered view never sees ``**``, link URLs,
comments or escape backslashes.  ``strip_markup`` removes (or reduces to their
label) those constructs and records, for every character it keeps, the raw
offset it came from.  The locator searches this projection when the snippet
cannot be found verbatim in the source.

Rules are an explicit ordered table rather than one regex alternation, so the
precedence between overlapping constructs (an image is also a ``!`` followed by
a link; a wiki link also starts with ``[``) reads top to bottom.
"""

# Pattern: Functional Core (pure function of the raw text)

from __future__ import annotations

import re
from collections.abc import Callable
from dataclasses import dataclass

from readmark.anchoring.models import StrippedText

# Formatting delimiters that render as nothing.  Longest first so that
# ``***`` is consumed as one token rather than ``**`` + ``*``.  A single
# ``_`` is dropped except between two letters or digits: intraword
# underscores (snake_case) render as text, so they stay in the projection.
_EMPHASIS = re.compile(r"\*\*\*|\*\*|~~|==|\*|(?<![^\W_])_+|_+(?![^\W_])")

# Link targets: ``(url)``, ``(url "title")`` and urls with one level of
# balanced parentheses such as wikipedia links.
_LINK_TARGET = r"\((?:[^()\"]*(?:\([^)]*\))?[^()\"]*(?:\"[^\"]*\")?)\)"


class _Projection:
    """Accumulates stripped characters and their raw offsets."""

    __slots__ = ("parts", "positions", "raw")

    def __init__(self, raw: str) -> None:
        self.raw = raw
        self.parts: list[str] = []
        self.positions: list[int] = []

    def copy(self, start: int, end: int) -> None:
        """Keep ``raw[start:end]`` verbatim."""
        if start >= end:
            return
        self.parts.append(self.raw[start:end])
        self.positions.extend(range(start, end))

    def copy_visible(self, start: int, end: int) -> None:
        """Keep ``raw[start:end]`` minus emphasis delimiters (link labels)."""
        i = start
        while i < end:
            marker = _EMPHASIS.match(self.raw, i, end)
            if marker:
                i = marker.end()
                continue
            self.parts.append(self.raw[i])
            self.positions.append(i)
            i += 1

    def result(self) -> StrippedText:
        return StrippedText(text="".join(self.parts), positions=tuple(self.positions))


_Emit = Callable[[re.Match[str], _Projection], None]


@dataclass(frozen=True, slots=True)
class MarkupRule:
    """One inline construct: how to recognise it and what of it stays visible.

    Attributes:
        name: Human-readable construct name (used in tests and debugging).
        starts: Characters a match can begin with; the scanner only tries the
            rule at positions holding one of them.
        pattern: Anchored pattern, applied with ``pattern.match(raw, pos)``.
        emit: Writes the visible part of a match into the projection.
    """

    name: str
    starts: str
    pattern: re.Pattern[str]
    emit: _Emit


# ---------------------------------------------------------------------------
# Emitters
# ---------------------------------------------------------------------------


def _drop(match: re.Match[str], out: _Projection) -> None:
    """Contribute nothing (comments, HTML tags, emphasis delimiters)."""


def _label(match: re.Match[str], out: _Projection) -> None:
    """Keep group 1 as a visible label, minus emphasis delimiters."""
    out.copy_visible(match.start(1), match.end(1))


def _alias_or_name(match: re.Match[str], out: _Projection) -> None:
    """Keep the alias of ``name|alias`` in group 1, or the name if no alias."""
    start, end = match.start(1), match.end(1)
    pipe = match.group(1).find("|")
    if pipe != -1:
        start += pipe + 1
    out.copy_visible(start, end)


def _verbatim(match: re.Match[str], out: _Projection) -> None:
    """Keep group 1 exactly as written (math, code, footnote ids, escapes)."""
    out.copy(match.start(1), match.end(1))


# ---------------------------------------------------------------------------
# Rule table (priority order: most specific first)
# ---------------------------------------------------------------------------

RULES: tuple[MarkupRule, ...] = (
    MarkupRule("embed", "!", re.compile(r"!\[\[([^\]]+)\]\]"), _alias_or_name),
    MarkupRule(
        "reference_image", "!", re.compile(r"!\[([^\]]*)\]\[[^\]]*\]"), _label
    ),
    MarkupRule(
        "inline_image", "!", re.compile(r"!\[([^\]]*)\]" + _LINK_TARGET), _label
    ),
    MarkupRule("reference_link", "[", re.compile(r"\[([^\]]+)\]\[[^\]]*\]"), _label),
    MarkupRule("inline_link", "[", re.compile(r"\[([^\]]+)\]" + _LINK_TARGET), _label),
    MarkupRule("wiki_link", "[", re.compile(r"\[\[([^\]]+)\]\]"), _alias_or_name),
    MarkupRule("footnote", "[", re.compile(r"\[\^([^\]]+)\]"), _verbatim),
    MarkupRule("block_math", "$", re.compile(r"\$\$([^$]+)\$\$"), _verbatim),
    MarkupRule(
        "inline_math",
        "$",
        re.compile(r"\$((?:[^$\s]|[^$\s][^$]*[^$\s]))\$"),
        _verbatim,
    ),
    MarkupRule("comment", "%", re.compile(r"%%[^%]*%%"), _drop),
    MarkupRule("code", "`", re.compile(r"`([^`]+)`"), _verbatim),
    MarkupRule(
        "autolink",
        "<",
        re.compile(
            r"<((?:[a-zA-Z][a-zA-Z0-9+.-]*://[^>\s]+"
            r"|[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}))>"
        ),
        _verbatim,
    ),
    MarkupRule("html_tag", "<", re.compile(r"</?[a-zA-Z][^>]*>"), _drop),
    MarkupRule("escape", "\\", re.compile(r"\\([*_\[\](){}#>+\-.!`~=|\\])"), _verbatim),
    MarkupRule("emphasis", "*~=_", _EMPHASIS, _drop),
)


def _index_rules(
    rules: tuple[MarkupRule, ...],
) -> dict[str, tuple[MarkupRule, ...]]:
    """Group rules by start character, keeping table order within a group."""
    by_start: dict[str, list[MarkupRule]] = {}
    for rule in rules:
        for ch in rule.starts:
            by_start.setdefault(ch, []).append(rule)
    return {ch: tuple(group) for ch, group in by_start.items()}


_RULES_BY_START = _index_rules(RULES)
_NEXT_TRIGGER = re.compile("[" + re.escape("".join(_RULES_BY_START)) + "]")


def strip_markup(raw: str) -> StrippedText:
    """Project *raw* markdown onto the text a renderer would show.

    Scans left to right once.  At every position that can start a construct
    the rules are tried in table order and the first match wins; everything
    else is copied through unchanged.

    Args:
        raw: Full markdown source.

    Returns:
        The stripped text and, per stripped character, its raw offset.
    """
    out = _Projection(raw)
    pos = 0
    length = len(raw)

    while pos < length:
        trigger = _NEXT_TRIGGER.search(raw, pos)
        if trigger is None:
            out.copy(pos, length)
            break
        out.copy(pos, trigger.start())
        pos = trigger.start()

        for rule in _RULES_BY_START[raw[pos]]:
            match = rule.pattern.match(raw, pos)
            if match:
                rule.emit(match, out)
                pos = match.end()
                break
        else:
            # A trigger character that starts no construct is plain text
            out.copy(pos, pos + 1)
            pos += 1

    return out.result()
