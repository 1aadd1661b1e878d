"""Mapping of service errors to HTTP responses."""

from fastapi import HTTPException

from assettags.core.exceptions import (
    NotFoundError,
    RemoteError,
    TaggingError,
    ValidationError,
)


def http_error(exc: TaggingError) -> HTTPException:
    """Build the HTTPException a route raises for a service error."""
    if isinstance(exc, NotFoundError):
        return HTTPException(status_code=404, detail=exc.message)
    if isinstance(exc, ValidationError):
        return HTTPException(status_code=422, detail=exc.message)
    if isinstance(exc, RemoteError):
        return HTTPException(status_code=502, detail=exc.message)
    return HTTPException(status_code=400, detail=exc.message)
