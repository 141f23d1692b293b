# app/services/import_helpers.py
#
# Import Helper Functions
# Copies incoming field values (manual edits or scanned candidates) onto
# Transaction ORM objects and resolves the dashboard date filters into ranges.

from datetime import date, timedelta
from typing import Optional, Tuple

from models import Transaction


# ---- Transaction Conversion ----

def apply_transaction_fields(t: Transaction, fields: dict) -> Transaction:
    """
    Overwrite every editable field of `t` from a dict with the API's field names.
    Missing type falls back to "expense", missing isPending to False.
    """
    t.merchant = fields["merchant"]
    t.amount = float(fields["amount"])
    t.currency = fields["currency"]
    t.date = fields["date"]
    t.category = fields["category"]
    t.summary = fields.get("summary") or ""
    t.is_pending = bool(fields.get("isPending") or False)
    t.type = fields.get("type") or "expense"
    return t


def build_transaction_from_dict(tx: dict, user_id: str, tx_id: Optional[str] = None) -> Transaction:
    """
    Convert one transaction dict into a new Transaction ORM object owned by `user_id`.
    """
    t = Transaction(user_id=user_id)
    if tx_id:
        t.id = tx_id
    return apply_transaction_fields(t, tx)


# ---- Date Range Utilities ----

DATE_FILTERS = (
    "all",
    "today",
    "thisweek",
    "thismonth",
    "last7days",
    "last30days",
    "last90days",
)


def get_filter_range(
    date_filter: Optional[str],
    today: Optional[date] = None,
) -> Optional[Tuple[date, date]]:
    """
    date_filter: one of DATE_FILTERS, or None (same as "all").
    Returns (start_date, end_date_exclusive), or None when there is no bound.
    The range always ends with today (inclusive). Weeks start on Sunday.

    Raises ValueError for an unknown filter name.
    """
    if not date_filter or date_filter == "all":
        return None
    if date_filter not in DATE_FILTERS:
        raise ValueError(f"Unknown date filter: {date_filter!r}")

    today = today or date.today()
    end_exclusive = today + timedelta(days=1)

    if date_filter == "today":
        start = today
    elif date_filter == "thisweek":
        # weekday(): Monday=0 ... Sunday=6
        start = today - timedelta(days=(today.weekday() + 1) % 7)
    elif date_filter == "thismonth":
        start = today.replace(day=1)
    elif date_filter == "last7days":
        start = today - timedelta(days=7)
    elif date_filter == "last30days":
        start = today - timedelta(days=30)
    else:
        start = today - timedelta(days=90)

    return start, end_exclusive
