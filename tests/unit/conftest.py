"""Shared fixtures for unit tests."""

from __future__ import annotations

import pytest

from readmark.storage import MemoryDocumentStore

# Three structurally identical list rows; the second "item one" is at 13-21
REPEATED_ROWS = "- item one\n- item one\n- item one"

READING_NOTE = """\
---
tags: [reading, draft]
---
# Chapter one

The **quick** brown fox jumps over the [lazy dog](https://example.com).

- item one
- item one
- item one

A line with ==an old highlight== in it.
"""


@pytest.fixture
def memory_store() -> MemoryDocumentStore:
    """A store holding the reading note and the repeated rows."""
    return MemoryDocumentStore(
        {
            "notes/reading.md": READING_NOTE,
            "notes/rows.md": REPEATED_ROWS,
        }
    )
