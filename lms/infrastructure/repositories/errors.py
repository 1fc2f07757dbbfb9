from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager

import structlog
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from lms.core.errors import ConflictError, StorageError

logger = structlog.get_logger()


@contextmanager
def storage_errors(operation: str) -> Iterator[None]:
    """Translate SQLAlchemy failures raised inside the block into domain errors."""
    try:
        yield
    except IntegrityError as exc:
        logger.info("storage_conflict", operation=operation)
        raise ConflictError(f"Duplicate value during {operation}") from exc
    except SQLAlchemyError as exc:
        logger.error("storage_failure", operation=operation, error=exc.__class__.__name__)
        raise StorageError(f"Storage failure during {operation}") from exc
