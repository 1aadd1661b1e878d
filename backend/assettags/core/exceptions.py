"""Exceptions raised by the tagging services."""

from __future__ import annotations


class TaggingError(Exception):
    """Base exception for asset tagging errors."""

    def __init__(self, message: str, code: str = "TAGGING_ERROR"):
        self.message = message
        self.code = code
        super().__init__(message)


class NotFoundError(TaggingError):
    """Raised when a requested framework or template does not exist."""

    def __init__(self, resource: str, identifier: str):
        self.resource = resource
        self.identifier = identifier
        super().__init__(f"{resource} not found: {identifier}", "NOT_FOUND")


class RemoteError(TaggingError):
    """Raised when the backing store fails.

    The underlying exception is chained as ``__cause__`` so callers can
    inspect it without it being obscured.
    """

    def __init__(self, message: str = "Tag storage is unavailable"):
        super().__init__(message, "REMOTE_ERROR")


class ValidationError(TaggingError):
    """Raised when a tag set cannot be committed.

    ``key`` is the resolved key of the offending tag, when there is one.
    """

    def __init__(self, message: str, key: str | None = None):
        self.key = key
        super().__init__(message, "VALIDATION_ERROR")
