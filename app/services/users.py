# app/services/users.py
#
# Users come from the identity provider's profile; we only mirror them locally.

import logging

from sqlalchemy.orm import Session

from models import User, new_id

logger = logging.getLogger(__name__)


def get_or_create_user(db: Session, profile: dict) -> str:
    """
    Find the user by email and refresh name/picture, or create it.
    Returns the local user id (provider id when available).
    """
    email = profile.get("email")
    if not email:
        raise ValueError("Profile has no email")

    user = db.query(User).filter(User.email == email).one_or_none()

    if user is not None:
        user.name = profile.get("name") or ""
        user.picture = profile.get("picture") or None
        db.commit()
        return user.id

    user = User(
        id=profile.get("id") or new_id(),
        email=email,
        name=profile.get("name") or "",
        picture=profile.get("picture") or None,
    )
    db.add(user)
    db.commit()
    logger.info("[user] created user %s", user.id)
    return user.id
