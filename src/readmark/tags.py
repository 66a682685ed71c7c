"""Tag tokens: normalisation, discovery in documents, and suggestions.

Tags are written into the source as ``#name`` tokens (prefix configurable)
immediately before highlighted content.  Suggestions combine recently used
tags, a tag derived from the document's folder, and the document's
frontmatter tags, in that order.
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import PurePosixPath

_WHITESPACE_RUN = re.compile(r"\s+")

FRONTMATTER_RE = re.compile(r"\A---[ \t]*\n(.*?)\n---[ \t]*(?:\n|\Z)", re.DOTALL)
_FM_TAGS_INLINE = re.compile(r"^tags:[ \t]*(\S.*)$", re.MULTILINE)
_FM_TAGS_BLOCK = re.compile(
    r"^tags:[ \t]*\n((?:[ \t]*-[ \t]*.*(?:\n|\Z))+)", re.MULTILINE
)

# Obsidian-style inline tags: at least one non-digit, not part of a word,
# URL fragment or HTML entity.
_INLINE_TAG = re.compile(r"(?<![\w#&/])#([\w/-]*[^\W\d][\w/-]*)")


def clean_tag(tag: str) -> str:
    """Normalise user input to a bare tag name (no ``#``, no whitespace)."""
    return _WHITESPACE_RUN.sub("_", tag.strip().removeprefix("#"))


def format_tags(tags: Iterable[str], prefix: str = "#") -> str:
    """Render tags as space-separated tokens, dropping blanks and duplicates."""
    seen: dict[str, None] = {}
    for tag in tags:
        cleaned = clean_tag(tag)
        if cleaned:
            seen.setdefault(cleaned, None)
    return " ".join(f"{prefix}{tag}" for tag in seen)


def frontmatter_tags(raw: str) -> list[str]:
    """Return the ``tags`` listed in a document's frontmatter, if any.

    Accepts ``tags: [a, b]``, ``tags: a, b``, ``tags: a b`` and the block
    list form with one ``- a`` item per line.
    """
    fm_match = FRONTMATTER_RE.match(raw)
    if not fm_match:
        return []
    frontmatter = fm_match.group(1)

    values: list[str] = []
    block = _FM_TAGS_BLOCK.search(frontmatter)
    if block:
        for item in block.group(1).splitlines():
            values.append(item.strip().removeprefix("-"))
    else:
        inline = _FM_TAGS_INLINE.search(frontmatter)
        if inline:
            body = inline.group(1).strip().removeprefix("[").removesuffix("]")
            values.extend(re.split(r"[,\s]+", body))

    tags: list[str] = []
    for value in values:
        cleaned = clean_tag(value.strip().strip("'\""))
        if cleaned and cleaned not in tags:
            tags.append(cleaned)
    return tags


def collect_document_tags(raw: str) -> list[str]:
    """Return every tag used in a document: frontmatter first, then inline."""
    tags = frontmatter_tags(raw)
    body = raw
    fm_match = FRONTMATTER_RE.match(raw)
    if fm_match:
        body = raw[fm_match.end() :]
    for match in _INLINE_TAG.finditer(body):
        if match.group(1) not in tags:
            tags.append(match.group(1))
    return tags


def folder_tag(path: str) -> str | None:
    """Derive a tag from the name of the folder holding *path*."""
    parent = PurePosixPath(path).parent.name
    if not parent:
        return None
    tag = _WHITESPACE_RUN.sub("-", parent.lower())
    tag = re.sub(r"[^a-z0-9_-]", "", tag)
    return tag or None


def suggest_tags(
    recent: Iterable[str],
    folder: str | None,
    frontmatter: Iterable[str],
    limit: int = 8,
) -> list[str]:
    """Combine recent, folder and frontmatter tags into a deduplicated list."""
    suggestions: list[str] = []
    for tag in list(recent)[:5]:
        if tag not in suggestions:
            suggestions.append(tag)
    if folder and folder not in suggestions:
        suggestions.append(folder)
    for tag in frontmatter:
        cleaned = clean_tag(tag)
        if cleaned and cleaned not in suggestions:
            suggestions.append(cleaned)
    return suggestions[:limit]


@dataclass(frozen=True, slots=True)
class TagMatches:
    """Result of filtering known tags by a typed query."""

    matches: list[str]
    create: str | None  # cleaned query offered as a new tag


def match_tags(all_tags: Iterable[str], query: str, limit: int = 50) -> TagMatches:
    """Filter *all_tags* by case-insensitive substring of *query*.

    When the cleaned query is not already an exact (case-insensitive) tag it
    is offered as a new tag to create.
    """
    clean_query = _WHITESPACE_RUN.sub("_", query.strip().lower())
    matches = [tag for tag in all_tags if clean_query in tag.lower()]
    exact = any(tag.lower() == clean_query for tag in matches)
    create = clean_query if clean_query and not exact else None
    return TagMatches(matches=matches[:limit], create=create)
