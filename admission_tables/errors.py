"""Exceptions raised by the extractors."""

from __future__ import annotations


class ExtractionError(Exception):
    """Base class for extraction failures that are reported, not propagated."""


class StructuralError(ExtractionError):
    """A block lacks the structure needed to read it (e.g. no category header)."""


class FatalDecodeError(ExtractionError):
    """The document decoder produced nothing usable for a whole document."""

    def __init__(self, source: str, reason: str):
        super().__init__(f"Could not decode {source}: {reason}")
        self.source = source
        self.reason = reason
