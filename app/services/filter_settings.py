# app/services/filter_settings.py
#
# Email filter settings store: one row per user, upserted on save.

import logging
from typing import Any, Dict, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from models import EmailFilterSettings

logger = logging.getLogger(__name__)


def get_filter_settings(db: Session, user_id: str) -> Optional[EmailFilterSettings]:
    return (
        db.query(EmailFilterSettings)
        .filter(EmailFilterSettings.user_id == user_id)
        .one_or_none()
    )


def as_query_filters(row: Optional[EmailFilterSettings]) -> Optional[Dict[str, Any]]:
    """
    Settings row -> filter dict understood by gmail_client.build_search_query.
    """
    if row is None:
        return None
    return {
        "from_email": row.from_email,
        "subject_keywords": row.subject_keywords,
        "has_attachment": bool(row.has_attachment),
        "label": row.label,
        "custom_query": row.custom_query,
    }


def _apply(row: EmailFilterSettings, values: Dict[str, Any]) -> None:
    # Empty strings are stored as NULL
    row.from_email = values.get("from_email") or None
    row.subject_keywords = values.get("subject_keywords") or None
    row.has_attachment = bool(values.get("has_attachment"))
    row.label = values.get("label") or None
    row.custom_query = values.get("custom_query") or None


def save_filter_settings(db: Session, user_id: str, values: Dict[str, Any]) -> EmailFilterSettings:
    """
    Insert the user's settings row, or overwrite it if one exists.
    A concurrent insert losing the unique(user_id) race falls back to update.
    """
    row = get_filter_settings(db, user_id)
    if row is None:
        row = EmailFilterSettings(user_id=user_id)
        _apply(row, values)
        db.add(row)
        try:
            db.commit()
        except IntegrityError:
            db.rollback()
            logger.info("[settings] concurrent insert for user %s, updating instead", user_id)
            row = get_filter_settings(db, user_id)
            _apply(row, values)
            db.commit()
    else:
        _apply(row, values)
        db.commit()

    db.refresh(row)
    return row
