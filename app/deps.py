# app/deps.py
# Role: Shared application-level dependencies and helpers.
#       Provides the standard SQLAlchemy database session dependency, the
#       response envelope helpers, and the userId guard used by every route.

"""
Shared dependencies for the AutoExpense API.
"""

from typing import Any, Dict, Generator, Optional

from sqlalchemy.orm import Session

from db import SessionLocal
from app.errors import BadRequestError

# -------------------------------------------------------------------
# Database dependency
# -------------------------------------------------------------------

def get_db() -> Generator[Session, None, None]:
    """
    FastAPI dependency that yields a database session and ensures it is closed.

    Typical usage in routes:
        db: Session = Depends(get_db)
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()

# -------------------------------------------------------------------
# Response envelope
# -------------------------------------------------------------------

def ok(data: Any = None, message: Optional[str] = None) -> Dict[str, Any]:
    """
    Build a success envelope: {"success": true, "data": ..., "message"?: ...}.
    """
    body: Dict[str, Any] = {"success": True}
    if data is not None:
        body["data"] = data
    if message is not None:
        body["message"] = message
    return body


def require_user_id(user_id: Optional[str]) -> str:
    """
    Every resource is scoped by user; reject requests that don't say whose.
    """
    if not user_id or not user_id.strip():
        raise BadRequestError("userId is required")
    return user_id
