"""Tests for rewriting located spans with highlight, tag and footnote markup."""

from __future__ import annotations

import pytest

from readmark.anchoring import locate
from readmark.config import HighlightConfig
from readmark.markup import (
    EditRequest,
    apply_modification,
    extract_highlights,
    next_footnote_id,
    rewrite_block,
    rewrite_line,
)

HIGHLIGHT = EditRequest(mode="highlight")
REMOVE = EditRequest(mode="remove")


def _apply(
    raw: str, snippet: str, request: EditRequest, config: HighlightConfig
) -> str:
    start = raw.index(snippet)
    return apply_modification(raw, start, start + len(snippet), request, config)


class TestEditRequest:
    def test_unknown_mode(self) -> None:
        """Modes outside EDIT_MODES are rejected."""
        with pytest.raises(ValueError, match="unknown edit mode"):
            EditRequest(mode="underline")  # type: ignore[arg-type]

    def test_color_needs_colour(self) -> None:
        """Color mode without a colour is rejected."""
        with pytest.raises(ValueError, match="requires a colour"):
            EditRequest(mode="color")

    def test_annotate_needs_comment(self) -> None:
        """Annotate mode without comment text is rejected."""
        with pytest.raises(ValueError, match="non-empty comment"):
            EditRequest(mode="annotate", comment="   ")


class TestRewriteLine:
    """Structural prefixes stay outside the wrap."""

    @pytest.mark.parametrize(
        ("line", "expected"),
        [
            ("plain words", "==plain words=="),
            ("## Title", "## ==Title=="),
            ("- bullet", "- ==bullet=="),
            ("* star bullet", "* ==star bullet=="),
            ("1. first", "1. ==first=="),
            ("2) second", "2) ==second=="),
            ("> quoted", "> ==quoted=="),
            ("> > nested quote", "> > ==nested quote=="),
            ("- [ ] task", "- [ ] ==task=="),
            ("- [x] done", "- [x] ==done=="),
            ("  - indented", "  - ==indented=="),
            ("word  ", "==word==  "),
            ("a **bold** word", "==a bold word=="),
            ("==already== here", "==already here=="),
            ("keep snake_case", "==keep snake_case=="),
            ("use `a*b` and **c**", "==use `a*b` and c=="),
            ("5 * 3 = 15", "==5 * 3 = 15=="),
        ],
    )
    def test_highlight(
        self, line: str, expected: str, highlight_config: HighlightConfig
    ) -> None:
        """Highlight wraps the content after the prefix."""
        assert rewrite_line(line, HIGHLIGHT, highlight_config) == expected

    @pytest.mark.parametrize("line", ["", "   ", "\t"])
    def test_blank_line_untouched(
        self, line: str, highlight_config: HighlightConfig
    ) -> None:
        """Blank lines come back unchanged."""
        assert rewrite_line(line, HIGHLIGHT, highlight_config) == line

    def test_prefix_only_line_not_wrapped(
        self, highlight_config: HighlightConfig
    ) -> None:
        """A bare bullet has nothing to wrap."""
        assert rewrite_line("- ", HIGHLIGHT, highlight_config) == "- "

    def test_tags_go_between_prefix_and_content(
        self, highlight_config: HighlightConfig
    ) -> None:
        """Tag tokens follow the structural prefix."""
        request = EditRequest(mode="tag", tags=("idea", "#later", "idea"))
        assert (
            rewrite_line("- point", request, highlight_config)
            == "- #idea #later ==point=="
        )

    def test_custom_tag_prefix(self) -> None:
        """The configured tag prefix is used."""
        config = HighlightConfig(tag_prefix="@")
        request = EditRequest(mode="tag", tags=("idea",))
        assert rewrite_line("x", request, config) == "@idea ==x=="

    def test_color_uses_mark_tag(self, highlight_config: HighlightConfig) -> None:
        """Color mode writes an inline-styled mark element."""
        request = EditRequest(mode="color", color="#abd7ff")
        assert (
            rewrite_line("text", request, highlight_config)
            == '<mark style="background: #abd7ff;">text</mark>'
        )

    def test_html_style(self) -> None:
        """HTML style highlights with a bare mark element."""
        config = HighlightConfig(style="html")
        assert rewrite_line("text", HIGHLIGHT, config) == "<mark>text</mark>"

    def test_recolour_replaces_old_mark(
        self, highlight_config: HighlightConfig
    ) -> None:
        """Existing mark tags are replaced, not nested."""
        request = EditRequest(mode="color", color="pink")
        line = '<mark style="background: #fff;">text</mark>'
        assert (
            rewrite_line(line, request, highlight_config)
            == '<mark style="background: pink;">text</mark>'
        )

    def test_remove_strips_only_highlights(
        self, highlight_config: HighlightConfig
    ) -> None:
        """Remove keeps emphasis and structure."""
        line = "- ==a **b**== and <mark>c</mark>"
        assert rewrite_line(line, REMOVE, highlight_config) == "- a **b** and c"


class TestRewriteBlock:
    def test_each_line_wrapped_separately(
        self, highlight_config: HighlightConfig
    ) -> None:
        """Markup never spans a line break."""
        assert (
            rewrite_block("a\n- b", HIGHLIGHT, highlight_config) == "==a==\n- ==b=="
        )

    def test_paragraph_separators_preserved(
        self, highlight_config: HighlightConfig
    ) -> None:
        """Blank lines between paragraphs survive, indentation included."""
        text = "one\n\n  two\n \nthree"
        assert (
            rewrite_block(text, HIGHLIGHT, highlight_config)
            == "==one==\n\n  ==two==\n \n==three=="
        )


class TestApplyModification:
    """Full-document rewrites."""

    def test_highlight_list_row(self, highlight_config: HighlightConfig) -> None:
        """Only the located row is highlighted."""
        raw = "- item one\n- item one\n- item one"
        result = apply_modification(raw, 13, 21, HIGHLIGHT, highlight_config)
        assert result == "- item one\n- ==item one==\n- item one"

    def test_bold_is_absorbed(self, highlight_config: HighlightConfig) -> None:
        """Selecting inside bold replaces the bold markup."""
        result = _apply("a **bold** b", "bold", HIGHLIGHT, highlight_config)
        assert result == "a ==bold== b"

    def test_rehighlight_is_stable(self, highlight_config: HighlightConfig) -> None:
        """Highlighting highlighted text leaves it as it was."""
        raw = "a ==text== b"
        assert _apply(raw, "text", HIGHLIGHT, highlight_config) == raw

    def test_link_kept_intact(self, highlight_config: HighlightConfig) -> None:
        """The span grows over the whole link before wrapping."""
        raw = "see [label](http://x.y) now"
        result = _apply(raw, "label", HIGHLIGHT, highlight_config)
        assert result == "see ==[label](http://x.y)== now"

    @pytest.mark.parametrize(
        ("raw", "snippet", "expected"),
        [
            ("Some **bold text** here", "text", "Some **bold ==text==** here"),
            (
                "read [the guide](https://x.y) first",
                "guide",
                "read [the ==guide==](https://x.y) first",
            ),
            ("see [[Page|label]] now", "label", "see ==[[Page|label]]== now"),
            ("Some **bold text** here", "text here", "Some ==bold text here=="),
            ("a ==one two== b", "two", "a ==one two== b"),
        ],
    )
    def test_located_selection_keeps_markup_balanced(
        self,
        raw: str,
        snippet: str,
        expected: str,
        highlight_config: HighlightConfig,
    ) -> None:
        """Partial selections of bold text, links and wiki links never split them."""
        span = locate(raw, snippet)
        assert span is not None
        result = apply_modification(
            raw, span.start, span.end, HIGHLIGHT, highlight_config
        )
        assert result == expected

    def test_tag(self, highlight_config: HighlightConfig) -> None:
        """Tag mode writes the tag before the highlight."""
        request = EditRequest(mode="tag", tags=("idea",))
        assert _apply("a text b", "text", request, highlight_config) == (
            "a #idea ==text== b"
        )

    def test_annotate_appends_footnote(
        self, highlight_config: HighlightConfig
    ) -> None:
        """Annotate adds a reference and a definition at the end."""
        request = EditRequest(mode="annotate", comment="check\nthis")
        result = _apply("A sentence here.\n", "sentence", request, highlight_config)
        assert result == "A ==sentence==[^1] here.\n\n[^1]: check this\n"

    def test_annotate_picks_unused_id(
        self, highlight_config: HighlightConfig
    ) -> None:
        """Footnote ids already used anywhere in the document are skipped."""
        raw = "First[^1] and second.\n\n[^1]: old\n"
        request = EditRequest(mode="annotate", comment="new")
        result = _apply(raw, "second", request, highlight_config)
        assert "==second==[^2]" in result
        assert result.endswith("[^1]: old\n\n[^2]: new\n")

    def test_remove_whole_highlight_from_part(
        self, highlight_config: HighlightConfig
    ) -> None:
        """Removing part of a highlight removes all of it."""
        raw = "a ==one two== b"
        assert _apply(raw, "two", REMOVE, highlight_config) == "a one two b"

    def test_remove_then_relocate(self, highlight_config: HighlightConfig) -> None:
        """After removal the plain snippet is found with no markers on its line."""
        raw = "intro\n- ==item one==\n- item two"
        span = locate(raw, "item one")
        assert span is not None
        result = apply_modification(
            raw, span.start, span.end, REMOVE, highlight_config
        )
        again = locate(result, "item one")
        assert again is not None
        line_start = result.rfind("\n", 0, again.start) + 1
        line_end = result.find("\n", again.end)
        line = result[line_start:line_end]
        assert "==" not in line
        assert "<mark" not in line
        assert extract_highlights(result) == []

    def test_remove_is_idempotent(self, highlight_config: HighlightConfig) -> None:
        """Removing from unhighlighted text changes nothing."""
        raw = "a one two b\n- **kept** bold"
        once = _apply(raw, "one two", REMOVE, highlight_config)
        assert once == raw
        assert _apply(once, "one two", REMOVE, highlight_config) == raw

    def test_remove_colour_highlight(
        self, highlight_config: HighlightConfig
    ) -> None:
        """Mark elements are removed with their attributes."""
        raw = 'x <mark style="background: pink;">hl</mark> y'
        assert _apply(raw, "hl", REMOVE, highlight_config) == "x hl y"


class TestNextFootnoteId:
    def test_first(self) -> None:
        """A document without footnotes starts at 1."""
        assert next_footnote_id("no notes") == "1"

    def test_fills_gap(self) -> None:
        """The smallest unused number is chosen."""
        assert next_footnote_id("a[^1] b[^3]") == "2"

    def test_prefix(self) -> None:
        """The configured prefix is part of the id."""
        assert next_footnote_id("a[^n1] b[^1]", "n") == "n2"
