# routes_settings.py
"""
Email filter settings used to build the inbox search query.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.deps import get_db, ok, require_user_id
from app.schemas import (
    EMPTY_FILTER_SETTINGS,
    EmailFilterPayload,
    filter_settings_to_dict,
)
from app.services.filter_settings import get_filter_settings, save_filter_settings

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/settings/email-filters")
def read_email_filters(
    user_id: Optional[str] = Query(None, alias="userId"),
    db: Session = Depends(get_db),
):
    user_id = require_user_id(user_id)

    row = get_filter_settings(db, user_id)
    if row is None:
        return ok(dict(EMPTY_FILTER_SETTINGS))
    return ok(filter_settings_to_dict(row))


@router.put("/settings/email-filters")
def write_email_filters(
    payload: EmailFilterPayload,
    db: Session = Depends(get_db),
):
    user_id = require_user_id(payload.user_id)

    row = save_filter_settings(db, user_id, payload.model_dump(exclude={"user_id"}))
    logger.info("[settings] saved email filters for user %s", user_id)

    return ok(filter_settings_to_dict(row), message="Email filter settings saved")
