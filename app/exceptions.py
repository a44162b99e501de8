"""
Exception hierarchy for the quotation engine.

Input defects never raise: they are normalised by the schema layer.
Only conditions the caller must act on live here.
"""

from __future__ import annotations


class QuoteForgeError(Exception):
    """Base class for all engine errors."""


class DocumentGenerationError(QuoteForgeError):
    """The artifact could not be produced; no partial output exists."""

    def __init__(self, message: str = "document generation failed"):
        super().__init__(message)


class PageClosedError(QuoteForgeError):
    """A placement command was added to a page after its page break."""


class CounterStoreError(QuoteForgeError):
    """The quote-number counter store is unreadable."""
