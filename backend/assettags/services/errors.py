"""Translation of storage failures into service errors."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager

from sqlalchemy.exc import SQLAlchemyError

from assettags.core.exceptions import RemoteError
from assettags.core.logging import get_logger

logger = get_logger(__name__)


@contextmanager
def storage_errors(action: str) -> Iterator[None]:
    """Re-raise database failures inside the block as RemoteError.

    The original exception is chained, never retried.

    Args:
        action: Short name of the operation, used in logs and the message.
    """
    try:
        yield
    except SQLAlchemyError as exc:
        logger.error("tag_storage_failed", action=action, error=str(exc))
        raise RemoteError(f"Tag storage failed while trying to {action}: {exc}") from exc
