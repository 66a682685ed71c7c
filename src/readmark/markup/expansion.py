"""Grow a located span so it never splits an inline construct.

A selection that lands exactly on the content of ``**bold**`` or a link label
is widened to take the delimiters with it, so rewriting the span replaces the
existing markup instead of nesting new markup inside it.  A span crossing one
edge of a construct takes the whole construct; a span strictly inside a
construct's content stays where it is.  Atomic constructs (existing
highlights, wiki links, images, code, maths, autolinks, escapes) are taken
whole on any overlap: their inside is either not rendered markdown or must
not hold a second highlight.
"""

# Pattern: Functional Core (pure functions of the raw text)

from __future__ import annotations

import re
from dataclasses import dataclass

from readmark.markup.highlights import extract_highlights

# Names of the bold/italic constructs whose delimiters a rewrite drops
EMPHASIS_CONSTRUCTS = frozenset(
    ("strong_emphasis", "strong", "emphasis", "strong_underscore", "underscore")
)


@dataclass(frozen=True, slots=True)
class Construct:
    """One inline construct found in the source.

    Attributes:
        name: Rule name (``"strong"``, ``"inline_link"``, ...).
        start: Offset of the opening delimiter.
        end: Offset just past the closing delimiter.
        content: ``(start, end)`` of the rendered content between the
            delimiters, or ``None`` for atomic constructs.
    """

    name: str
    start: int
    end: int
    content: tuple[int, int] | None = None


@dataclass(frozen=True, slots=True)
class _ConstructRule:
    name: str
    starts: str
    pattern: re.Pattern[str]
    atomic: bool = False


# Single-line patterns, most specific first.  Group 1 of a non-atomic rule is
# its content.
_RULES: tuple[_ConstructRule, ...] = (
    _ConstructRule(
        "escape", "\\", re.compile(r"\\[*_\[\](){}#>+\-.!`~=|$<\\]"), atomic=True
    ),
    _ConstructRule("embed", "!", re.compile(r"!\[\[[^\]\n]+\]\]"), atomic=True),
    _ConstructRule(
        "image",
        "!",
        re.compile(r"!\[[^\]\n]*\](?:\((?:[^()\n]|\([^()\n]*\))*\)|\[[^\]\n]*\])"),
        atomic=True,
    ),
    _ConstructRule("wiki_link", "[", re.compile(r"\[\[[^\]\n]+\]\]"), atomic=True),
    _ConstructRule("footnote", "[", re.compile(r"\[\^[^\]\s]+\]"), atomic=True),
    _ConstructRule(
        "inline_link",
        "[",
        re.compile(r"\[([^\]\n]+)\]\((?:[^()\n]|\([^()\n]*\))*\)"),
    ),
    _ConstructRule("reference_link", "[", re.compile(r"\[([^\]\n]+)\]\[[^\]\n]*\]")),
    _ConstructRule("block_math", "$", re.compile(r"\$\$[^$]+\$\$"), atomic=True),
    _ConstructRule(
        "inline_math", "$", re.compile(r"\$[^$\s](?:[^$\n]*[^$\s])?\$"), atomic=True
    ),
    _ConstructRule("code", "`", re.compile(r"`[^`\n]+`"), atomic=True),
    _ConstructRule(
        "mark",
        "<",
        re.compile(r"<mark\b[^>\n]*>.*?</mark>", re.IGNORECASE),
        atomic=True,
    ),
    _ConstructRule(
        "autolink",
        "<",
        re.compile(
            r"<(?:[a-zA-Z][a-zA-Z0-9+.-]*://[^>\s]+"
            r"|[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,})>"
        ),
        atomic=True,
    ),
    _ConstructRule(
        "strong_emphasis", "*", re.compile(r"\*\*\*(?!\s)(.+?)(?<!\s)\*\*\*")
    ),
    _ConstructRule("strong", "*", re.compile(r"\*\*(?!\s)(.+?)(?<!\s)\*\*")),
    _ConstructRule("emphasis", "*", re.compile(r"\*(?!\s)(.+?)(?<!\s)\*")),
    _ConstructRule(
        "highlight", "=", re.compile(r"==(?!\s).+?(?<!\s)=="), atomic=True
    ),
    _ConstructRule("strikethrough", "~", re.compile(r"~~(?!\s)(.+?)(?<!\s)~~")),
    # Underscores only delimit at word boundaries; snake_case is text
    _ConstructRule(
        "strong_underscore",
        "_",
        re.compile(r"(?<![^\W_])__(?!\s)(.+?)(?<!\s)__(?![^\W_])"),
    ),
    _ConstructRule(
        "underscore",
        "_",
        re.compile(r"(?<![^\W_])_(?![\s_])(.+?)(?<![\s_])_(?![^\W_])"),
    ),
)

_RULES_BY_START: dict[str, tuple[_ConstructRule, ...]] = {
    ch: tuple(rule for rule in _RULES if ch in rule.starts)
    for ch in {ch for rule in _RULES for ch in rule.starts}
}
_NEXT_TRIGGER = re.compile("[" + re.escape("".join(_RULES_BY_START)) + "]")


def _scan(raw: str, pos: int, end: int, found: list[Construct]) -> None:
    """Collect the constructs of ``raw[pos:end]``, nested ones included.

    Non-atomic constructs are scanned again inside their content only, so a
    closing delimiter is never mistaken for the opening of another construct.
    """
    while pos < end:
        trigger = _NEXT_TRIGGER.search(raw, pos, end)
        if trigger is None:
            return
        pos = trigger.start()
        for rule in _RULES_BY_START[raw[pos]]:
            match = rule.pattern.match(raw, pos, end)
            if match is None:
                continue
            if rule.atomic:
                found.append(Construct(rule.name, match.start(), match.end()))
            else:
                content = match.span(1)
                found.append(Construct(rule.name, match.start(), match.end(), content))
                _scan(raw, content[0], content[1], found)
            pos = match.end()
            break
        else:
            pos += 1


def find_constructs(raw: str) -> list[Construct]:
    """Return every inline construct of *raw*, outer before inner."""
    found: list[Construct] = []
    _scan(raw, 0, len(raw), found)
    return found


def _must_take(construct: Construct, start: int, end: int) -> bool:
    """Whether ``[start, end)`` has to grow over the whole of *construct*."""
    if not (construct.start < end and start < construct.end):
        return False
    if start <= construct.start and construct.end <= end:
        return False
    if construct.content is None:
        return True
    content_start, content_end = construct.content
    if (start, end) == (content_start, content_end):
        return True
    return not (content_start <= start and end <= content_end)


def expand_span(raw: str, start: int, end: int) -> tuple[int, int]:
    """Widen ``[start, end)`` until it splits no construct.

    A construct the span only partly covers is taken whole, as is one whose
    content the span matches exactly.  Growing over one construct can make
    the span cross another, so passes repeat until nothing grows; each
    growing pass takes at least one more construct, which bounds the loop.
    """
    constructs = find_constructs(raw)
    growing = True
    while growing:
        growing = False
        for construct in constructs:
            if _must_take(construct, start, end):
                start = min(start, construct.start)
                end = max(end, construct.end)
                growing = True
    return start, end


def widen_to_highlights(raw: str, start: int, end: int) -> tuple[int, int]:
    """Extend ``[start, end)`` to cover every highlight it overlaps.

    Removing a highlight from part of its text removes the whole highlight.
    """
    for entry in extract_highlights(raw):
        if entry.start < end and start < entry.end:
            start = min(start, entry.start)
            end = max(end, entry.end)
    return start, end
