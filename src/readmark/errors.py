"""Exception hierarchy for readmark.

Failing to locate a selection is an expected outcome and is reported as a
return value, not through these exceptions.
"""


class ReadmarkError(Exception):
    """Base exception for all readmark errors."""


class EmptySelectionError(ReadmarkError):
    """Raised when an edit is requested for a whitespace-only selection."""


class DocumentNotFoundError(ReadmarkError):
    """Raised when the document store has no document at the given path."""


class PaletteIndexError(ReadmarkError):
    """Raised when a colour index is outside the configured palette."""


class NoHighlightsError(ReadmarkError):
    """Raised when exporting highlights from a document that has none."""
