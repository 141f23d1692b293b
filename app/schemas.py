# app/schemas.py
# Role: Request bodies accepted by the API and the JSON shapes returned by it.
#       Field names follow the JSON API (camelCase); ORM rows stay snake_case.

from typing import Any, Dict, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from models import EmailFilterSettings, Transaction


class TransactionPayload(BaseModel):
    """Body of PUT /expenses/{id}."""

    model_config = ConfigDict(populate_by_name=True)

    merchant: str
    amount: float = Field(allow_inf_nan=False)
    currency: str
    date: str
    category: str
    summary: str
    is_pending: Optional[bool] = Field(default=None, alias="isPending")
    type: Optional[Literal["expense", "income"]] = None


class ScanRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    access_token: Optional[str] = Field(default=None, alias="accessToken")
    is_demo_mode: bool = Field(default=False, alias="isDemoMode")
    start_date: Optional[str] = Field(default=None, alias="startDate")
    end_date: Optional[str] = Field(default=None, alias="endDate")
    # Relative shorthand, used when no explicit range is sent
    period: Optional[Literal["today", "7days", "14days", "30days", "lastweek", "all"]] = None
    user_id: Optional[str] = Field(default=None, alias="userId")


class EmailFilterPayload(BaseModel):
    """Body of PUT /settings/email-filters."""

    model_config = ConfigDict(populate_by_name=True)

    from_email: Optional[str] = Field(default=None, alias="fromEmail")
    subject_keywords: Optional[str] = Field(default=None, alias="subjectKeywords")
    has_attachment: Optional[bool] = Field(default=None, alias="hasAttachment")
    label: Optional[str] = None
    custom_query: Optional[str] = Field(default=None, alias="customQuery")
    user_id: Optional[str] = Field(default=None, alias="userId")


class ProfileRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    access_token: Optional[str] = Field(default=None, alias="accessToken")


# -------------------------------------------------------------------
# ORM -> JSON
# -------------------------------------------------------------------

def transaction_to_dict(t: Transaction) -> Dict[str, Any]:
    return {
        "id": t.id,
        "merchant": t.merchant,
        "amount": t.amount,
        "currency": t.currency,
        "date": t.date,
        "category": t.category,
        "summary": t.summary,
        "isPending": bool(t.is_pending),
        "type": t.type or "expense",
        "userId": t.user_id,
    }


EMPTY_FILTER_SETTINGS: Dict[str, Any] = {
    "fromEmail": "",
    "subjectKeywords": "",
    "hasAttachment": False,
    "label": "",
    "customQuery": "",
}


def filter_settings_to_dict(s: EmailFilterSettings) -> Dict[str, Any]:
    return {
        "id": s.id,
        "fromEmail": s.from_email or "",
        "subjectKeywords": s.subject_keywords or "",
        "hasAttachment": bool(s.has_attachment),
        "label": s.label or "",
        "customQuery": s.custom_query or "",
        "createdAt": s.created_at.isoformat() if s.created_at else None,
        "updatedAt": s.updated_at.isoformat() if s.updated_at else None,
    }
