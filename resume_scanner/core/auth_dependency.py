import logging
from typing import Optional

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import APIKeyHeader
from sqlalchemy.orm import Session

from resume_scanner.core.security import decode_access_token, JWTError
from resume_scanner.db.session import SessionLocal
from resume_scanner.db.models.user import User

logger = logging.getLogger(__name__)

TOKEN_HEADER = "x-auth-token"

token_header = APIKeyHeader(name=TOKEN_HEADER, auto_error=False)


def get_db():
    """Database session dependency."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_token(request: Request, token: Optional[str] = Depends(token_header)) -> str:
    """Read the token from ``x-auth-token``, falling back to ``Authorization: Bearer``."""
    if token:
        return token

    authorization = request.headers.get("Authorization")
    if authorization and authorization.lower().startswith("bearer "):
        return authorization.split(" ", 1)[1].strip()

    raise HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="No token, authorization denied"
    )


def get_current_user(
    token: str = Depends(get_token),
    db: Session = Depends(get_db)
) -> User:
    """Resolve the authenticated User from the request token."""
    invalid = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Token is not valid"
    )
    try:
        payload = decode_access_token(token)
        user_id = int(payload.get("sub"))
    except (JWTError, TypeError, ValueError):
        raise invalid

    user = db.get(User, user_id)
    if user is None:
        logger.warning(f"Token for unknown user: user_id={user_id}")
        raise invalid
    return user
