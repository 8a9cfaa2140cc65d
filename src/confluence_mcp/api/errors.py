"""Typed exception hierarchy for Confluence REST errors.

Every failure raised while talking to Confluence derives from ConfluenceError,
so the tool dispatcher can turn it into an error result with a single except.
"""

from typing import Optional


class ConfluenceError(Exception):
    """Base exception for all Confluence-related errors."""
    pass


class ConfluenceAPIError(ConfluenceError):
    """Raised when Confluence answers with a non-2xx status.

    ``message`` is the ``message`` field of the JSON error body when the
    server supplied one.
    """

    def __init__(self, status_code: int, message: str, endpoint: Optional[str] = None):
        super().__init__(message)
        self.status_code = status_code
        self.message = message
        self.endpoint = endpoint


class APIUnreachableError(ConfluenceError):
    """Raised when the request never produced an HTTP response."""

    def __init__(self, endpoint: str, reason: str):
        super().__init__(f"Confluence API is not reachable at {endpoint}: {reason}")
        self.endpoint = endpoint
        self.reason = reason


class PageNotFoundError(ConfluenceError):
    """Raised when a title lookup matches no page."""

    def __init__(self, title: str, space_key: Optional[str] = None):
        super().__init__(f"Page not found with title: {title}")
        self.title = title
        self.space_key = space_key
