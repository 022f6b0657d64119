"""
Exception hierarchy for Daily Git Brief.
"""

from typing import Optional


class DailyGitBriefError(Exception):
    """Base class for all errors raised by this package."""


class CollectorError(DailyGitBriefError):
    """An external source could not be fetched or returned an unusable payload.

    Wraps the underlying transport/decoding error so that callers never have to
    know about aiohttp exception types.
    """

    def __init__(self, source: str, message: str, original_error: Optional[Exception] = None):
        super().__init__(f"{source}: {message}")
        self.source = source
        self.original_error = original_error


class CollectionError(DailyGitBriefError):
    """A collection run could not proceed (no candidate set)."""


class StoreError(DailyGitBriefError):
    """The persistent store is not available."""


class RunAlreadyActive(DailyGitBriefError):
    """Another collection run currently holds the run guard."""
