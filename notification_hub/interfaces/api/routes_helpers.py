"""Helper utilities shared across API route handlers."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager

from fastapi import HTTPException, status
from sqlalchemy.exc import SQLAlchemyError

from notification_hub.domain.errors import (
    NotificationNotFoundError,
    NotificationPersistenceError,
)

logger = logging.getLogger(__name__)


@contextmanager
def translate_domain_errors() -> Iterator[None]:
    """Map domain exceptions raised inside the block onto HTTP errors."""

    try:
        yield
    except NotificationNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc)
        ) from exc
    except NotificationPersistenceError as exc:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc)
        ) from exc
    except SQLAlchemyError as exc:
        logger.exception("Database error while handling request")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Notification store unavailable",
        ) from exc
