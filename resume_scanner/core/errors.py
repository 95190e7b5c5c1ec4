"""
Shared error translation for route handlers and the app-level exception handlers.
"""
import logging

from fastapi import HTTPException, status
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session

logger = logging.getLogger(__name__)

DATABASE_UNAVAILABLE = "Database not connected. Please check DATABASE_URL."
SERVER_ERROR = "Server Error"


def server_error(db: Session, message: str, exc: Exception) -> Exception:
    """
    Roll back and turn an unexpected exception into the error to raise.

    Connection failures are returned unchanged so the app-level handler can
    report the database as unavailable.
    """
    try:
        db.rollback()
    except Exception as rollback_error:
        logger.warning(f"Rollback failed: {rollback_error}")

    if isinstance(exc, OperationalError):
        return exc

    logger.error(f"{message}: {exc}", exc_info=exc)
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail=SERVER_ERROR
    )
