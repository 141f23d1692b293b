# models.py
# Role: SQLAlchemy ORM models for the AutoExpense domain.
#       Users (from the identity provider), transactions (manual or scanned from
#       email), and the per-user email filter settings used by inbox scans.

import uuid
from datetime import datetime, timezone

from sqlalchemy import Boolean, Column, DateTime, Float, Index, String, Text

from db import Base


def new_id() -> str:
    return str(uuid.uuid4())


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class User(Base):
    """
    A person signed in through the external identity provider.
    The id is the provider's id when it sends one, otherwise a generated uuid.
    """

    __tablename__ = "users"

    id = Column(String, primary_key=True, default=new_id)
    email = Column(String, nullable=False, unique=True, index=True)
    name = Column(String, nullable=False, default="")
    picture = Column(String, nullable=True)

    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)


class Transaction(Base):
    """
    ORM model representing a single financial transaction.

    Rows are created by an explicit edit (PUT upsert) or by the inbox scan.
    The date is kept exactly as it was supplied (usually YYYY-MM-DD), so
    ordering and range filters work on its ISO string form.
    """

    __tablename__ = "transactions"

    # Opaque id, generated on creation and never reused
    id = Column(String, primary_key=True, default=new_id)

    merchant = Column(String, nullable=False)

    # Currency-agnostic magnitude
    amount = Column(Float, nullable=False)

    # Currency code, e.g. "USD", "EUR"
    currency = Column(String, nullable=False)

    date = Column(String, nullable=False)

    # Open-ended category name (not a closed enum)
    category = Column(String, nullable=False)

    summary = Column(Text, nullable=False, default="")

    is_pending = Column(Boolean, nullable=False, default=False)

    # "expense" or "income"
    type = Column(String, nullable=False, default="expense")

    # Owning user; plain column so unknown users simply own nothing
    user_id = Column(String, nullable=False, index=True)

    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    __table_args__ = (
        Index("ix_transactions_user_date", "user_id", "date"),
    )


class EmailFilterSettings(Base):
    """
    Saved inbox search configuration. Exactly one row per user.
    """

    __tablename__ = "email_filter_settings"

    id = Column(String, primary_key=True, default=new_id)
    user_id = Column(String, nullable=False, unique=True, index=True)

    from_email = Column(String, nullable=True)

    # Comma-separated keyword list, e.g. "receipt, invoice"
    subject_keywords = Column(String, nullable=True)

    has_attachment = Column(Boolean, nullable=False, default=False)
    label = Column(String, nullable=True)

    # Raw provider query; when set it replaces all other filter fields
    custom_query = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)
