"""Value types shared by the stripper and the locator.

Everything here lives for a single locate call: nothing is cached or
persisted between calls.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Span:
    """A raw-source character range (end exclusive, slice convention)."""

    start: int
    end: int

    def slice(self, raw: str) -> str:
        return raw[self.start : self.end]


@dataclass(frozen=True, slots=True)
class Candidate:
    """One raw-source occurrence of the selected snippet."""

    start: int
    end: int
    text: str
    score: float | None = None

    @property
    def span(self) -> Span:
        return Span(self.start, self.end)


@dataclass(frozen=True, slots=True)
class SelectionContext:
    """What the host saw: the selected text and where it sat in the view.

    Attributes:
        snippet: The selected rendered text.
        context_text: Visible text of the smallest enclosing block, if known.
        occurrence_index: Zero-based rank of that block among rendered blocks
            of the same tag with identical visible text.
    """

    snippet: str
    context_text: str | None = None
    occurrence_index: int = 0


@dataclass(frozen=True, slots=True)
class StrippedText:
    """Visible-text projection of a raw source with a map back to it.

    ``positions[i]`` is the raw offset of ``text[i]``; the two always have the
    same length and ``raw[positions[i]] == text[i]``.
    """

    text: str
    positions: tuple[int, ...]

    def raw_span(self, start: int, end: int) -> Span:
        """Translate a stripped ``[start, end)`` range to raw offsets.

        The end maps to the raw offset of the first visible character after
        the match, so markup that closes right after the match (``bold**``)
        falls inside the span. At the end of the projection there is no
        such character and the offset just past the last matched character
        is used instead.
        """
        if not 0 <= start < end <= len(self.positions):
            length = len(self.positions)
            msg = f"invalid stripped range [{start}, {end}) for length {length}"
            raise ValueError(msg)
        raw_start = self.positions[start]
        if end < len(self.positions):
            raw_end = self.positions[end]
        else:
            raw_end = self.positions[end - 1] + 1
        return Span(raw_start, raw_end)
