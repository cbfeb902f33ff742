"""FastAPI dependencies for service authentication and database access."""

import hmac
from typing import Generator

from fastapi import Header, HTTPException
from sqlalchemy.orm import Session

from helpdesk.core.config import settings
from helpdesk.db.session import SessionLocal


INTERNAL_SECRET_HEADER = "X-Internal-Secret"


def get_db() -> Generator[Session, None, None]:
    """
    Database session dependency.

    Yields a database session and ensures it's closed after the request.
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def require_internal_secret(
    x_internal_secret: str | None = Header(default=None),
) -> None:
    """
    Verify the shared secret sent by the web app.

    Raises:
        HTTPException 501: INTERNAL_SECRET not configured
        HTTPException 403: Missing or invalid secret
    """
    expected = settings.INTERNAL_SECRET
    if not expected:
        raise HTTPException(status_code=501, detail="INTERNAL_SECRET not configured")
    if not x_internal_secret or not hmac.compare_digest(x_internal_secret, expected):
        raise HTTPException(status_code=403, detail="Invalid internal secret")
