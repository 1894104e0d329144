"""Typed exception hierarchy for content source errors.

This module defines the base exception for the whole tool together with the
errors raised while fetching object snapshots. Every exception carries enough
context in its message to tell which source or endpoint failed.
"""

from typing import Optional


class ContentFilesError(Exception):
    """Base exception for all content-files errors.

    Use this to catch any application-level error from the tool.
    """
    pass


class SourceError(ContentFilesError):
    """Base exception for all content source errors."""
    pass


class InvalidCredentialsError(SourceError):
    """Raised when the source token is missing or rejected."""

    def __init__(self, endpoint: str, reason: Optional[str] = None):
        message = f"Content source rejected credentials (endpoint: {endpoint})"
        if reason:
            message += f": {reason}"
        super().__init__(message)
        self.endpoint = endpoint
        self.reason = reason


class SourceUnreachableError(SourceError):
    """Raised when the content source cannot be reached."""

    def __init__(self, endpoint: str):
        super().__init__(f"Content source is not available at {endpoint}")
        self.endpoint = endpoint


class SourceAccessError(SourceError):
    """Raised when fetching fails after retries or with an unexpected status."""

    def __init__(self, message: str = "Content source failure (after 3 retries)"):
        super().__init__(message)


class SnapshotFormatError(SourceError):
    """Raised when an object snapshot cannot be parsed."""

    def __init__(self, location: str, message: str):
        super().__init__(f"Invalid object snapshot {location}: {message}")
        self.location = location
        self.message = message
