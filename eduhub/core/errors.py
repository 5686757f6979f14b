"""HTTP error taxonomy shared by services and routes."""

import logging
from contextlib import contextmanager

from fastapi import HTTPException, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

logger = logging.getLogger(__name__)

GENERIC_SERVER_ERROR = 'An error occurred. Please try again later.'


class BadRequest(HTTPException):
    def __init__(self, detail: str = 'Bad request.') -> None:
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


class Unauthorized(HTTPException):
    def __init__(self, detail: str = 'Not authenticated.') -> None:
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail,
            headers={'WWW-Authenticate': 'Bearer'},
        )


class Forbidden(HTTPException):
    def __init__(self, detail: str = 'Forbidden.') -> None:
        super().__init__(status_code=status.HTTP_403_FORBIDDEN, detail=detail)


class NotFound(HTTPException):
    def __init__(self, detail: str = 'Not found.') -> None:
        super().__init__(status_code=status.HTTP_404_NOT_FOUND, detail=detail)


class Conflict(HTTPException):
    def __init__(self, detail: str = 'Conflict.') -> None:
        super().__init__(status_code=status.HTTP_409_CONFLICT, detail=detail)


class Internal(HTTPException):
    """Storage or database failure; the caller only ever sees a generic message."""

    def __init__(self, detail: str = GENERIC_SERVER_ERROR) -> None:
        super().__init__(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=detail)


@contextmanager
def database_errors(db: Session, message: str):
    """Roll back and convert any SQLAlchemy failure inside the block into ``Internal``."""
    try:
        yield
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception(message)
        raise Internal(f'{message}.') from exc
