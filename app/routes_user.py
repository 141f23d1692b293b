# routes_user.py
"""
Resolve the signed-in user's profile and mirror it in the users table.
"""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.deps import get_db, ok
from app.errors import ApiError, BadRequestError
from app.schemas import ProfileRequest
from app.services import gmail_client
from app.services.users import get_or_create_user

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/user/profile")
def user_profile(
    payload: ProfileRequest,
    db: Session = Depends(get_db),
):
    if not payload.access_token:
        raise BadRequestError("Access token is required")

    try:
        profile = gmail_client.fetch_user_profile(payload.access_token)
        user_id = get_or_create_user(db, profile)
    except Exception as e:
        logger.exception("[user] failed to fetch user profile")
        raise ApiError(500, "Failed to fetch user profile", details=str(e)) from e

    return ok({**profile, "userId": user_id})
