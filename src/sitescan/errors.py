"""
Exception types raised across the crawler.
"""
from __future__ import annotations


class SitescanError(Exception):
    """Base class for all crawler errors."""


class ClientInputError(SitescanError):
    """The caller supplied a missing or malformed job option. Nothing was crawled."""


class FetchError(SitescanError):
    """A network-level failure while fetching one page."""

    def __init__(self, url: str, message: str) -> None:
        super().__init__(message)
        self.url = url
        self.message = message


class UnexpectedServerError(SitescanError):
    """Any other failure that escaped a running job."""
