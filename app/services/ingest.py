# filename: app/services/ingest.py
"""
Inbox scan pipeline: emails -> extracted candidates -> dedup gate -> new rows.

Public API:
    load_scan_emails(db, request) -> list[str]
    admit_transaction(db, user_id, candidate) -> Transaction | None
    ingest_emails(db, user_id, emails, extract=...) -> list[Transaction]

Every step is sequential. A failure to extract one email is logged and that
email is skipped; anything else propagates and aborts the scan. Rows inserted
before the failure stay committed.
"""

from __future__ import annotations

import logging
import threading
from datetime import date
from typing import Callable, List, Optional

from sqlalchemy.orm import Session

import config
from app.errors import BadRequestError, ExtractionError
from app.schemas import ScanRequest
from app.services.extractor import ExtractedTransaction, extract_transaction, generate_demo_emails
from app.services.filter_settings import as_query_filters, get_filter_settings
from app.services.gmail_client import fetch_recent_emails
from app.services.import_helpers import build_transaction_from_dict
from models import Transaction

logger = logging.getLogger(__name__)

# Serializes check-then-insert across request threads in this process
_GATE_LOCK = threading.Lock()


# -------------------------------------------------------------------
# Email source
# -------------------------------------------------------------------

def _parse_iso_date(value: str, field: str) -> date:
    try:
        return date.fromisoformat(value.strip()[:10])
    except ValueError:
        raise BadRequestError(f"{field} must be an ISO date (YYYY-MM-DD)") from None


def load_scan_emails(db: Session, request: ScanRequest) -> List[str]:
    """
    Demo mode asks the LLM for fake emails. Real mode searches the user's inbox
    with their saved filter settings and the requested date range or period.
    """
    if request.is_demo_mode:
        return generate_demo_emails(config.DEMO_EMAIL_COUNT)

    if not request.access_token:
        raise BadRequestError("Access token is required for real mode")

    has_range = bool(request.start_date and request.end_date)
    if not has_range and not request.period:
        raise BadRequestError("startDate and endDate are required for real mode")

    start = end = None
    if has_range:
        start = _parse_iso_date(request.start_date, "startDate")
        end = _parse_iso_date(request.end_date, "endDate")
        if end < start:
            raise BadRequestError("endDate must not be before startDate")

    filters = as_query_filters(get_filter_settings(db, request.user_id))

    return fetch_recent_emails(
        request.access_token,
        config.SCAN_MAX_RESULTS,
        start_date=start,
        end_date=end,
        period=None if has_range else request.period,
        filters=filters,
    )


# -------------------------------------------------------------------
# Dedup gate
# -------------------------------------------------------------------

def find_duplicate(db: Session, user_id: str, candidate: ExtractedTransaction) -> Optional[Transaction]:
    """
    Same user, same amount, same date (and same merchant if configured).
    Exact equality only.
    """
    query = db.query(Transaction).filter(
        Transaction.user_id == user_id,
        Transaction.amount == candidate.amount,
        Transaction.date == candidate.date,
    )
    if config.DEDUP_MATCH_MERCHANT:
        query = query.filter(Transaction.merchant == candidate.merchant)
    return query.first()


def admit_transaction(db: Session, user_id: str, candidate: ExtractedTransaction) -> Optional[Transaction]:
    """
    Insert `candidate` for `user_id` unless it duplicates an existing row.
    Check and insert share one DB transaction and the process-wide gate lock.
    """
    with _GATE_LOCK:
        try:
            if find_duplicate(db, user_id, candidate) is not None:
                db.rollback()
                return None

            t = build_transaction_from_dict(candidate.as_fields(), user_id)
            db.add(t)
            db.commit()
        except Exception:
            db.rollback()
            raise

    db.refresh(t)
    return t


# -------------------------------------------------------------------
# Pipeline
# -------------------------------------------------------------------

def ingest_emails(
    db: Session,
    user_id: str,
    emails: List[str],
    extract: Optional[Callable[[str], Optional[ExtractedTransaction]]] = None,
) -> List[Transaction]:
    """
    Extract and gate each email in order. Returns only newly inserted rows.
    """
    extract = extract or extract_transaction
    inserted: List[Transaction] = []
    skipped = duplicates = 0

    for i, body in enumerate(emails, start=1):
        try:
            candidate = extract(body)
        except ExtractionError as e:
            skipped += 1
            logger.warning("[scan] email #%d skipped: %s", i, e)
            continue

        if candidate is None:
            skipped += 1
            logger.debug("[scan] email #%d is not a transaction", i)
            continue

        t = admit_transaction(db, user_id, candidate)
        if t is None:
            duplicates += 1
            logger.info("[scan] email #%d duplicate: %s | %s | %s", i, candidate.date, candidate.merchant, candidate.amount)
            continue

        inserted.append(t)
        logger.info("[scan] email #%d inserted: %s | %s | %s %s", i, t.date, t.merchant, t.amount, t.currency)

    logger.info(
        "[scan] user=%s emails=%d inserted=%d duplicates=%d skipped=%d",
        user_id, len(emails), len(inserted), duplicates, skipped,
    )
    return inserted
